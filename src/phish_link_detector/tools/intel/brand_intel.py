"""Brand impersonation and typosquatting heuristics."""

from __future__ import annotations

from collections.abc import Collection, Iterator, Mapping, Sequence
from dataclasses import dataclass

from phish_link_detector.domain.url.extract import extract_domain, parse_scheme
from phish_link_detector.domain.url.normalize import (
    DEFAULT_MULTI_LEVEL_TLDS,
    normalize_domain,
    registrable_label,
)
from phish_link_detector.domain.verdict import (
    BrandNotCanonical,
    CanonicalDomain,
    DetectionResult,
    NoTyposquatting,
    NotHttp,
    NoUrlProvided,
    Typosquatting,
)

DEFAULT_TYPOSQUAT_THRESHOLD = 2


@dataclass(frozen=True)
class BrandEntry:
    name: str
    canonical_domains: tuple[str, ...]
    canonical_labels: tuple[str, ...] = ()

    @property
    def match_candidates(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys((self.name, *self.canonical_labels)))


@dataclass(frozen=True)
class BrandDictionary:
    """Ordered, read-only brand -> canonical domains mapping."""

    entries: tuple[BrandEntry, ...] = ()

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Sequence[str]],
        multi_level_tlds: Collection[str] = DEFAULT_MULTI_LEVEL_TLDS,
    ) -> BrandDictionary:
        entries: list[BrandEntry] = []
        for raw_name, raw_domains in mapping.items():
            name = str(raw_name or "").strip().lower()
            if not name:
                continue
            domains = tuple(
                dict.fromkeys(normalize_domain(str(item)) for item in raw_domains if str(item).strip())
            )
            labels = tuple(
                dict.fromkeys(
                    label for label in (registrable_label(item, multi_level_tlds) for item in domains) if label
                )
            )
            entries.append(BrandEntry(name=name, canonical_domains=domains, canonical_labels=labels))
        return cls(entries=tuple(entries))

    def __iter__(self) -> Iterator[BrandEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, brand: str | None) -> BrandEntry | None:
        key = (brand or "").strip().lower()
        for entry in self.entries:
            if entry.name == key:
                return entry
        return None


def levenshtein_distance(a: str | None, b: str | None) -> int:
    left = (a or "").lower()
    right = (b or "").lower()
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)
    prev = list(range(len(right) + 1))
    for i, ca in enumerate(left, start=1):
        curr = [i]
        for j, cb in enumerate(right, start=1):
            cost = 0 if ca == cb else 1
            curr.append(min(curr[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost))
        prev = curr
    return prev[-1]


def extract_brand_from_domain(domain: str | None, brands: BrandDictionary) -> str | None:
    """First brand named by any label of ``domain``, subdomains included.

    A label names a brand when it equals or contains the brand name, or equals
    the registrable label of one of the brand's canonical domains. Labels are
    scanned left to right and brands in dictionary order.
    """

    labels = [label for label in normalize_domain(domain).split(".") if label]
    for label in labels:
        for entry in brands:
            if entry.name in label or label in entry.canonical_labels:
                return entry.name
    return None


def is_canonical_domain(domain: str | None, brand: str | None, brands: BrandDictionary) -> bool:
    normalized = normalize_domain(domain)
    entry = brands.get(brand)
    if not normalized or entry is None:
        return False
    return any(
        normalized == canonical or normalized.endswith("." + canonical)
        for canonical in entry.canonical_domains
    )


def detect_brand_typosquatting(
    url: str | None,
    brands: BrandDictionary,
    *,
    multi_level_tlds: Collection[str] = DEFAULT_MULTI_LEVEL_TLDS,
    threshold: int = DEFAULT_TYPOSQUAT_THRESHOLD,
) -> DetectionResult:
    raw = (url or "").strip()
    if not raw:
        return NoUrlProvided()
    scheme = parse_scheme(raw)
    if not scheme.is_web:
        return NotHttp(original_url=raw, scheme=scheme)

    domain = normalize_domain(extract_domain(raw))
    brand = extract_brand_from_domain(domain, brands)
    if brand:
        if is_canonical_domain(domain, brand, brands):
            return CanonicalDomain(brand=brand, domain=domain)
        entry = brands.get(brand)
        return BrandNotCanonical(
            brand=brand,
            suspicious_domain=domain,
            canonical_domains=entry.canonical_domains if entry else (),
        )

    label = registrable_label(domain, multi_level_tlds)
    if not label:
        return NoTyposquatting(domain=domain)

    best: tuple[int, BrandEntry, str] | None = None
    for entry in brands:
        nearest = min(entry.match_candidates, key=lambda item: levenshtein_distance(label, item))
        distance = levenshtein_distance(label, nearest)
        if not 0 < distance <= threshold:
            continue
        if is_canonical_domain(domain, entry.name, brands):
            continue
        if best is None or distance < best[0]:
            best = (distance, entry, nearest)

    if best is None:
        return NoTyposquatting(domain=domain)
    distance, entry, nearest = best
    return Typosquatting(
        brand=entry.name,
        suspicious_domain=domain,
        nearest_match=nearest,
        levenshtein_distance=distance,
        canonical_domains=entry.canonical_domains,
    )
