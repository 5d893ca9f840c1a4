"""Exception types raised inside the detection engine."""

from __future__ import annotations


class LinkDetectorError(Exception):
    """Base class for engine errors."""


class MalformedDestinationError(LinkDetectorError):
    """A scheme-prefixed destination whose host is missing or not DNS-shaped."""

    def __init__(self, url: str, reason: str = "invalid_host") -> None:
        super().__init__(f"Malformed destination {url!r}: {reason}")
        self.url = url
        self.reason = reason


class NetworkError(LinkDetectorError):
    """Redirect resolution failed or timed out."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not resolve {url!r}: {reason}")
        self.url = url
        self.reason = reason


class ConfigError(LinkDetectorError):
    """Configuration file exists but cannot be used."""
