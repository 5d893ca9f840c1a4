"""Identifier extraction from link text and href values."""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from phish_link_detector.domain.url.models import Identifier, IdentifierKind, Scheme
from phish_link_detector.errors import MalformedDestinationError

_SCHEME_PATTERN = re.compile(r"^([a-z][a-z0-9+.\-]*):", re.IGNORECASE)
_URL_PREFIX = re.compile(r"^(?:https?|ftp)://", re.IGNORECASE)
_HOST_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?$", re.IGNORECASE)
_DOMAIN_PATTERN = re.compile(
    r"(?<![\w@.%+\-])(?:[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?\.)+[a-z]{2,}(?![\w@%+\-])",
    re.IGNORECASE,
)
_PHONE_PATTERN = re.compile(
    r"(?<![\w+])(?:\+?1[\s.\-]?)?(?:\(\d{3}\)|\d{3})[\s.\-]?\d{3}[\s.\-]?\d{4}(?!\d)"
)
_EMAIL_PATTERN = re.compile(
    r"(?<![\w.%+\-])[a-z0-9._%+\-]+@[a-z0-9.\-]+\.[a-z]{2,}",
    re.IGNORECASE,
)


def parse_scheme(url: str | None) -> Scheme:
    match = _SCHEME_PATTERN.match((url or "").strip())
    if not match:
        return Scheme.INVALID
    try:
        return Scheme(match.group(1).lower())
    except ValueError:
        return Scheme.OTHER


def strip_scheme(url: str | None) -> str:
    """Identifier part of an opaque href such as ``tel:`` or ``mailto:``."""

    raw = _SCHEME_PATTERN.sub("", (url or "").strip(), count=1)
    raw = raw.lstrip("/").split("?", 1)[0]
    return unquote(raw).strip()


def _host_from_url(url: str) -> str:
    try:
        host = urlsplit(url).hostname or ""
    except ValueError as exc:
        raise MalformedDestinationError(url, str(exc)) from exc
    if "." not in host:
        raise MalformedDestinationError(url, "host_without_dot" if host else "missing_host")
    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise MalformedDestinationError(url, "invalid_idna_host") from exc
    if not all(_HOST_LABEL.match(label) for label in ascii_host.rstrip(".").split(".")):
        raise MalformedDestinationError(url, "invalid_host_label")
    return ascii_host.lower()


def extract_domain(text: str | None) -> str | None:
    """Host of a URL, or the first domain-shaped token of freeform text."""

    raw = (text or "").strip()
    if not raw:
        return None
    if _URL_PREFIX.match(raw):
        try:
            return _host_from_url(raw)
        except MalformedDestinationError:
            return None
    match = _DOMAIN_PATTERN.search(raw)
    return match.group(0) if match else None


def extract_phone(text: str | None) -> str | None:
    match = _PHONE_PATTERN.search(text or "")
    return match.group(0).strip() if match else None


def extract_email(text: str | None) -> str | None:
    match = _EMAIL_PATTERN.search(text or "")
    return match.group(0).lower() if match else None


def extract_identifier(text: str | None) -> Identifier | None:
    """Pick the identifier a piece of link text or href refers to.

    Strings starting with an http/https/ftp scheme are parsed as URLs and
    raise ``MalformedDestinationError`` when the host is missing or has no
    dot. Freeform text is scanned for a domain, then a phone number, then an
    email address; the first kind found wins. ``None`` means nothing was found.
    """

    raw = (text or "").strip()
    if not raw:
        return None
    if _URL_PREFIX.match(raw):
        return Identifier(kind=IdentifierKind.DOMAIN, value=_host_from_url(raw))

    domain = _DOMAIN_PATTERN.search(raw)
    if domain:
        return Identifier(kind=IdentifierKind.DOMAIN, value=domain.group(0))
    phone = extract_phone(raw)
    if phone:
        return Identifier(kind=IdentifierKind.PHONE, value=phone)
    email = extract_email(raw)
    if email:
        return Identifier(kind=IdentifierKind.EMAIL, value=email)
    return None
