import asyncio
from urllib.error import URLError

import pytest

import phish_link_detector.tools.url_fetch.service as url_fetch
from phish_link_detector.domain.verdict import ReasonCode
from phish_link_detector.errors import NetworkError
from phish_link_detector.tools.url_fetch.service import (
    HttpRedirectResolver,
    RedirectFetchPolicy,
    check_redirect,
    file_download_extension,
    is_file_download,
)


class _FakeResponse:
    def __init__(self, status: int, headers: dict[str, str]) -> None:
        self.status = status
        self.headers = headers

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class _FakeOpener:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.requests = []

    def open(self, request, timeout=None):
        self.requests.append((request, timeout))
        if self.error:
            raise self.error
        return self.response


def test_file_download_detection():
    assert is_file_download("https://example.com/file.pdf") is True
    assert is_file_download("https://example.com/document.docx") is True
    assert is_file_download("https://example.com/archive.zip") is True
    assert is_file_download("https://example.com/installer.exe") is True
    assert is_file_download("https://example.com/image.jpg") is True
    assert is_file_download("https://example.com/FILE.PDF") is True
    assert file_download_extension("https://example.com/Document.DOCX?x=1") == ".docx"


def test_pages_are_not_file_downloads():
    assert is_file_download("https://example.com/page") is False
    assert is_file_download("https://example.com/") is False
    assert is_file_download("https://example.com/path/to/page") is False
    assert is_file_download("https://example.com") is False
    assert is_file_download(None) is False


def test_cross_site_redirect_is_suspicious(fake_resolver):
    resolver = fake_resolver("https://evil.com/login")
    result = asyncio.run(check_redirect("https://bit.ly/abc", resolver))
    assert result.is_suspicious is True
    assert result.reason is ReasonCode.REDIRECT_CROSS_DOMAIN
    assert result.original_url == "https://bit.ly/abc"
    assert result.final_url == "https://evil.com/login"
    assert result.original_domain == "bit.ly"
    assert result.final_domain == "evil.com"
    assert resolver.calls == ["https://bit.ly/abc"]


def test_same_site_redirects_are_allowed(fake_resolver):
    www = asyncio.run(check_redirect("https://example.com/a", fake_resolver("https://www.example.com/b")))
    assert www.reason is ReasonCode.REDIRECT_OK
    sub = asyncio.run(check_redirect("https://example.co.uk", fake_resolver("https://login.example.co.uk/")))
    assert sub.reason is ReasonCode.REDIRECT_OK
    assert sub.is_suspicious is False


def test_redirect_to_file_download(fake_resolver):
    resolver = fake_resolver("https://cdn.example.com/setup.EXE")
    result = asyncio.run(check_redirect("https://example.com/dl", resolver))
    assert result.is_suspicious is True
    assert result.reason is ReasonCode.FILE_DOWNLOAD
    assert result.extension == ".exe"


def test_network_error_is_never_suspicious(fake_resolver):
    result = asyncio.run(check_redirect("https://example.com", fake_resolver(error="connection refused")))
    assert result.is_suspicious is False
    assert result.reason is ReasonCode.REDIRECT_UNVERIFIED
    assert result.error == "connection refused"


def test_timeout_is_never_suspicious(fake_resolver):
    resolver = fake_resolver("https://evil.com", delay_s=1.0)
    result = asyncio.run(check_redirect("https://example.com", resolver, timeout_s=0.01))
    assert result.is_suspicious is False
    assert result.reason is ReasonCode.REDIRECT_UNVERIFIED
    assert result.error.startswith("timed out")


def test_only_web_urls_are_resolved(fake_resolver):
    resolver = fake_resolver()
    assert asyncio.run(check_redirect("mailto:x@y.com", resolver)).reason is ReasonCode.NOT_HTTP
    assert asyncio.run(check_redirect("", resolver)).reason is ReasonCode.NO_URL
    assert resolver.calls == []


def test_http_resolver_reads_location_header(monkeypatch):
    opener = _FakeOpener(response=_FakeResponse(301, {"Location": "/next"}))
    monkeypatch.setattr(url_fetch, "_check_network_target", lambda _url, _allow: (True, None))
    monkeypatch.setattr(url_fetch, "build_opener", lambda *_handlers: opener)

    resolver = HttpRedirectResolver(RedirectFetchPolicy(timeout_s=2.0))
    assert asyncio.run(resolver.resolve("https://short.example/x")) == "https://short.example/next"
    request, timeout = opener.requests[0]
    assert request.get_method() == "HEAD"
    assert timeout == 2.0


def test_http_resolver_returns_url_without_redirect(monkeypatch):
    opener = _FakeOpener(response=_FakeResponse(200, {}))
    monkeypatch.setattr(url_fetch, "_check_network_target", lambda _url, _allow: (True, None))
    monkeypatch.setattr(url_fetch, "build_opener", lambda *_handlers: opener)

    assert HttpRedirectResolver().resolve_blocking("https://example.com/") == "https://example.com/"


def test_http_resolver_wraps_transport_errors(monkeypatch):
    opener = _FakeOpener(error=URLError("connection refused"))
    monkeypatch.setattr(url_fetch, "_check_network_target", lambda _url, _allow: (True, None))
    monkeypatch.setattr(url_fetch, "build_opener", lambda *_handlers: opener)

    with pytest.raises(NetworkError) as excinfo:
        HttpRedirectResolver().resolve_blocking("https://example.com/")
    assert "connection refused" in excinfo.value.reason


def test_http_resolver_blocks_private_network():
    with pytest.raises(NetworkError) as excinfo:
        HttpRedirectResolver().resolve_blocking("http://127.0.0.1/login")
    assert excinfo.value.reason == "private_network_blocked"


def test_http_resolver_reports_unparseable_urls_as_network_errors():
    with pytest.raises(NetworkError) as excinfo:
        HttpRedirectResolver().resolve_blocking("https://[abc/login")
    assert excinfo.value.reason == "invalid_url"


class _BrokenResolver:
    async def resolve(self, url: str) -> str:
        raise RuntimeError("resolver bug")


def test_unexpected_resolver_errors_are_never_suspicious():
    result = asyncio.run(check_redirect("https://example.com", _BrokenResolver()))
    assert result.is_suspicious is False
    assert result.reason is ReasonCode.REDIRECT_UNVERIFIED
    assert result.error == "RuntimeError: resolver bug"
