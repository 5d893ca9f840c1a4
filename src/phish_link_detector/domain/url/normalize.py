"""Domain/phone canonicalization and registrable-domain resolution."""

from __future__ import annotations

from collections.abc import Collection
import re

from phish_link_detector.domain.url.models import RegistrableDomain

DEFAULT_MULTI_LEVEL_TLDS = frozenset(
    {
        "co.uk",
        "org.uk",
        "ac.uk",
        "gov.uk",
        "me.uk",
        "com.au",
        "net.au",
        "org.au",
        "edu.au",
        "co.nz",
        "co.jp",
        "ne.jp",
        "or.jp",
        "co.in",
        "co.kr",
        "co.za",
        "com.br",
        "com.mx",
        "com.ar",
        "com.cn",
        "com.hk",
        "com.sg",
        "com.tr",
        "com.tw",
    }
)

_SCHEME_PREFIX = re.compile(r"^[a-z][a-z0-9+.\-]*://")
_LOCATION_SPLIT = re.compile(r"[/?#]")
_PORT_SUFFIX = re.compile(r"(?::\d*)+$")


def normalize_domain(domain: str | None) -> str:
    """Lowercase host form used for every domain comparison.

    Drops the scheme, path, query, fragment, port and the root dot of a
    fully-qualified host, then any leading ``www.`` label. Applying it twice
    gives the same result as applying it once.
    """

    if not domain:
        return ""
    value = domain.strip().lower()
    value = _SCHEME_PREFIX.sub("", value, count=1)
    value = _LOCATION_SPLIT.split(value, maxsplit=1)[0]
    while True:
        stripped = _PORT_SUFFIX.sub("", value.strip())
        if stripped.endswith("."):
            stripped = stripped[:-1]
        if stripped.startswith("www."):
            stripped = stripped[4:]
        if stripped == value:
            return value
        value = stripped


def normalize_phone(phone: str | None) -> str:
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


def registrable_domain(
    domain: str | None,
    multi_level_tlds: Collection[str] = DEFAULT_MULTI_LEVEL_TLDS,
) -> RegistrableDomain | None:
    """Split ``domain`` into its brand-carrying label and public suffix.

    Suffixes are tried longest first so ``mail.google.co.uk`` resolves to
    ``google`` + ``co.uk`` rather than ``co`` + ``uk``. Without a multi-level
    match the last label is taken as the suffix. Returns ``None`` for single
    labels and for bare public suffixes.
    """

    labels = [part for part in normalize_domain(domain).split(".") if part]
    if len(labels) < 2:
        return None
    for start in range(len(labels) - 1):
        suffix = ".".join(labels[start:])
        if suffix not in multi_level_tlds:
            continue
        if start == 0:
            return None
        return RegistrableDomain(label=labels[start - 1], suffix=suffix)
    return RegistrableDomain(label=labels[-2], suffix=labels[-1])


def registrable_label(
    domain: str | None,
    multi_level_tlds: Collection[str] = DEFAULT_MULTI_LEVEL_TLDS,
) -> str:
    resolved = registrable_domain(domain, multi_level_tlds)
    return resolved.label if resolved else ""
