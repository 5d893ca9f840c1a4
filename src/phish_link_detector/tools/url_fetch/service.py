"""Redirect resolution capability and destination checks."""

from __future__ import annotations

import asyncio
from collections.abc import Collection
from dataclasses import dataclass
from http.client import HTTPException
import ipaddress
import logging
import socket
from typing import Protocol
from urllib.parse import urljoin, urlsplit
from urllib.request import HTTPErrorProcessor, Request, build_opener

from phish_link_detector.domain.url.extract import extract_domain, parse_scheme
from phish_link_detector.domain.url.normalize import (
    DEFAULT_MULTI_LEVEL_TLDS,
    normalize_domain,
    registrable_domain,
)
from phish_link_detector.domain.verdict import (
    DetectionResult,
    FileDownload,
    NotHttp,
    NoUrlProvided,
    RedirectCrossDomain,
    RedirectOk,
    RedirectUnverified,
)
from phish_link_detector.errors import NetworkError

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_TIMEOUT_S = 5.0
REDIRECT_STATUSES = {301, 302, 303, 307, 308}

_EXECUTABLE_EXTENSIONS = (".exe", ".msi", ".bat", ".cmd", ".scr", ".ps1", ".vbs", ".jar", ".apk", ".deb", ".rpm")
_ARCHIVE_EXTENSIONS = (".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz")
_DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".rtf", ".odt")
_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp")
_MEDIA_EXTENSIONS = (".mp3", ".wav", ".mp4", ".avi", ".mov", ".mkv")
_DISK_IMAGE_EXTENSIONS = (".iso", ".img", ".dmg")
_BUNDLE_EXTENSIONS = (".pkg", ".app", ".ipa")

DEFAULT_FILE_EXTENSIONS = (
    _EXECUTABLE_EXTENSIONS
    + _ARCHIVE_EXTENSIONS
    + _DOCUMENT_EXTENSIONS
    + _IMAGE_EXTENSIONS
    + _MEDIA_EXTENSIONS
    + _DISK_IMAGE_EXTENSIONS
    + _BUNDLE_EXTENSIONS
)


class RedirectResolver(Protocol):
    """Resolves where a URL leads. Raises ``NetworkError`` when it cannot tell."""

    async def resolve(self, url: str) -> str: ...


class NullRedirectResolver:
    """Offline resolver: every URL is its own destination."""

    async def resolve(self, url: str) -> str:
        return url


@dataclass(frozen=True)
class RedirectFetchPolicy:
    timeout_s: float = DEFAULT_REDIRECT_TIMEOUT_S
    allow_private_network: bool = False
    user_agent: str = "PhishLinkDetector/1.0"


class _NoRedirect(HTTPErrorProcessor):
    def http_response(self, request, response):  # type: ignore[no-untyped-def]
        return response

    https_response = http_response


def _is_private_ip(addr: str) -> bool:
    try:
        ip = ipaddress.ip_address(addr)
    except ValueError:
        return False
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_link_local
        or ip.is_unspecified
    )


def _check_network_target(url: str, allow_private: bool) -> tuple[bool, str | None]:
    parsed = urlsplit(url.strip())
    if parsed.scheme.lower() not in {"http", "https"}:
        return False, "unsupported_scheme"
    host = parsed.hostname or ""
    if not host:
        return False, "missing_host"

    try:
        infos = socket.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError):
        return False, "dns_resolution_failed"

    for entry in infos:
        addr = entry[4][0]
        if not allow_private and _is_private_ip(addr):
            return False, "private_network_blocked"
    return True, None


class HttpRedirectResolver:
    """Follows a single hop by reading the ``Location`` of a ``HEAD`` response."""

    def __init__(self, policy: RedirectFetchPolicy | None = None) -> None:
        self.policy = policy or RedirectFetchPolicy()

    def resolve_blocking(self, url: str) -> str:
        try:
            ok, reason = _check_network_target(url, self.policy.allow_private_network)
        except ValueError as exc:
            raise NetworkError(url, "invalid_url") from exc
        if not ok:
            raise NetworkError(url, reason or "blocked")

        opener = build_opener(_NoRedirect())
        req = Request(url, method="HEAD", headers={"User-Agent": self.policy.user_agent})
        try:
            with opener.open(req, timeout=self.policy.timeout_s) as response:
                status = int(getattr(response, "status", 200))
                location = response.headers.get("Location")
        except (OSError, HTTPException, ValueError) as exc:
            raise NetworkError(url, f"{type(exc).__name__}: {exc}") from exc

        if location and status in REDIRECT_STATUSES:
            return urljoin(url, location)
        return url

    async def resolve(self, url: str) -> str:
        return await asyncio.to_thread(self.resolve_blocking, url)


def file_download_extension(url: str | None, file_extensions: Collection[str] = DEFAULT_FILE_EXTENSIONS) -> str | None:
    try:
        path = urlsplit((url or "").strip()).path.lower()
    except ValueError:
        return None
    for extension in file_extensions:
        if path.endswith(extension):
            return extension
    return None


def is_file_download(url: str | None, file_extensions: Collection[str] = DEFAULT_FILE_EXTENSIONS) -> bool:
    return file_download_extension(url, file_extensions) is not None


def _site(url: str, multi_level_tlds: Collection[str]) -> str:
    host = normalize_domain(extract_domain(url))
    resolved = registrable_domain(host, multi_level_tlds)
    return resolved.domain if resolved else host


async def check_redirect(
    url: str | None,
    resolver: RedirectResolver,
    *,
    multi_level_tlds: Collection[str] = DEFAULT_MULTI_LEVEL_TLDS,
    file_extensions: Collection[str] = DEFAULT_FILE_EXTENSIONS,
    timeout_s: float = DEFAULT_REDIRECT_TIMEOUT_S,
) -> DetectionResult:
    """Resolve ``url`` once and flag cross-site redirects and file downloads.

    A failed or timed-out resolution is reported as unverified and is never
    itself treated as suspicious.
    """

    raw = (url or "").strip()
    if not raw:
        return NoUrlProvided()
    scheme = parse_scheme(raw)
    if not scheme.is_web:
        return NotHttp(original_url=raw, scheme=scheme)

    try:
        final_url = await asyncio.wait_for(resolver.resolve(raw), timeout=timeout_s)
    except NetworkError as exc:
        logger.warning("redirect resolution failed for %s: %s", raw, exc.reason)
        return RedirectUnverified(original_url=raw, error=exc.reason)
    except asyncio.TimeoutError:
        logger.warning("redirect resolution timed out for %s after %.1fs", raw, timeout_s)
        return RedirectUnverified(original_url=raw, error=f"timed out after {timeout_s:g}s")
    except Exception as exc:
        logger.exception("redirect resolver failed for %s", raw)
        return RedirectUnverified(original_url=raw, error=f"{type(exc).__name__}: {exc}")

    final_url = (final_url or "").strip() or raw
    original_site = _site(raw, multi_level_tlds)
    final_site = _site(final_url, multi_level_tlds)
    if final_site != original_site:
        return RedirectCrossDomain(
            original_url=raw,
            final_url=final_url,
            original_domain=original_site,
            final_domain=final_site,
        )

    extension = file_download_extension(final_url, file_extensions)
    if extension:
        return FileDownload(original_url=raw, final_url=final_url, extension=extension)
    return RedirectOk(original_url=raw, final_url=final_url)
