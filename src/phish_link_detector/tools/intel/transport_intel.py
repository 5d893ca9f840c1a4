"""Transport and encoding checks on raw href values."""

from __future__ import annotations

from phish_link_detector.domain.url.extract import parse_scheme
from phish_link_detector.domain.url.models import Scheme
from phish_link_detector.domain.verdict import (
    AsciiOnly,
    DetectionResult,
    InsecureHttp,
    NotInsecureHttp,
    NoUrlProvided,
    PunycodeDetected,
)


def detect_punycode(url: str | None) -> DetectionResult:
    """Flag any non-ASCII character anywhere in the URL, whatever its scheme."""

    if not url:
        return NoUrlProvided()
    offending = [char for char in url if ord(char) > 127]
    if offending:
        return PunycodeDetected(
            original_url=url,
            non_ascii_characters=tuple(dict.fromkeys(offending)),
        )
    return AsciiOnly(original_url=url)


def detect_insecure_http(url: str | None) -> DetectionResult:
    if not url or not url.strip():
        return NoUrlProvided()
    if parse_scheme(url) is Scheme.HTTP:
        return InsecureHttp(original_url=url)
    return NotInsecureHttp(original_url=url)
