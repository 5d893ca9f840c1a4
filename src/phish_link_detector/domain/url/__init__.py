"""URL domain extraction, normalization and models."""

from phish_link_detector.domain.url.extract import (
    extract_domain,
    extract_email,
    extract_identifier,
    extract_phone,
    parse_scheme,
    strip_scheme,
)
from phish_link_detector.domain.url.models import (
    Identifier,
    IdentifierKind,
    LinkContext,
    RegistrableDomain,
    Scheme,
)
from phish_link_detector.domain.url.normalize import (
    DEFAULT_MULTI_LEVEL_TLDS,
    normalize_domain,
    normalize_phone,
    registrable_domain,
    registrable_label,
)

__all__ = [
    "DEFAULT_MULTI_LEVEL_TLDS",
    "Identifier",
    "IdentifierKind",
    "LinkContext",
    "RegistrableDomain",
    "Scheme",
    "extract_domain",
    "extract_email",
    "extract_identifier",
    "extract_phone",
    "normalize_domain",
    "normalize_phone",
    "parse_scheme",
    "registrable_domain",
    "registrable_label",
    "strip_scheme",
]
