"""Detect hyperlinks whose visible text misrepresents their destination."""

from phish_link_detector.config.settings import DetectorConfig, load_config
from phish_link_detector.domain.url import (
    Identifier,
    IdentifierKind,
    LinkContext,
    Scheme,
    extract_domain,
    extract_identifier,
    normalize_domain,
    registrable_domain,
)
from phish_link_detector.domain.verdict import DetectionResult, ReasonCode, ScanReport
from phish_link_detector.errors import ConfigError, LinkDetectorError, MalformedDestinationError, NetworkError
from phish_link_detector.orchestrator.detector import LinkDetector
from phish_link_detector.tools.intel import (
    BrandDictionary,
    detect_brand_typosquatting,
    detect_insecure_http,
    detect_punycode,
    extract_brand_from_domain,
    is_canonical_domain,
    levenshtein_distance,
)
from phish_link_detector.tools.url_fetch import (
    HttpRedirectResolver,
    NullRedirectResolver,
    RedirectResolver,
    is_file_download,
)

__all__ = [
    "BrandDictionary",
    "ConfigError",
    "DetectionResult",
    "DetectorConfig",
    "HttpRedirectResolver",
    "Identifier",
    "IdentifierKind",
    "LinkContext",
    "LinkDetector",
    "LinkDetectorError",
    "MalformedDestinationError",
    "NetworkError",
    "NullRedirectResolver",
    "ReasonCode",
    "RedirectResolver",
    "ScanReport",
    "Scheme",
    "detect_brand_typosquatting",
    "detect_insecure_http",
    "detect_punycode",
    "extract_brand_from_domain",
    "extract_domain",
    "extract_identifier",
    "is_canonical_domain",
    "is_file_download",
    "levenshtein_distance",
    "load_config",
    "normalize_domain",
    "registrable_domain",
]
