"""Redirect resolution tools."""

from phish_link_detector.tools.url_fetch.service import (
    DEFAULT_FILE_EXTENSIONS,
    HttpRedirectResolver,
    NullRedirectResolver,
    RedirectFetchPolicy,
    RedirectResolver,
    check_redirect,
    file_download_extension,
    is_file_download,
)

__all__ = [
    "DEFAULT_FILE_EXTENSIONS",
    "HttpRedirectResolver",
    "NullRedirectResolver",
    "RedirectFetchPolicy",
    "RedirectResolver",
    "check_redirect",
    "file_download_extension",
    "is_file_download",
]
