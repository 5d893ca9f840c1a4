"""Deterministic link intelligence checks."""

from phish_link_detector.tools.intel.brand_intel import (
    BrandDictionary,
    BrandEntry,
    detect_brand_typosquatting,
    extract_brand_from_domain,
    is_canonical_domain,
    levenshtein_distance,
)
from phish_link_detector.tools.intel.transport_intel import detect_insecure_http, detect_punycode

__all__ = [
    "BrandDictionary",
    "BrandEntry",
    "detect_brand_typosquatting",
    "detect_insecure_http",
    "detect_punycode",
    "extract_brand_from_domain",
    "is_canonical_domain",
    "levenshtein_distance",
]
