"""Link mismatch orchestrator.

Runs the checks for one link in a fixed order and returns the first
suspicious verdict, or the final scheme-specific comparison when nothing
earlier fires. Cheap, certain checks run first:

1. non-ASCII characters in the href
2. plain ``http`` transport
3. redirect resolution (http/https only)
4. brand impersonation and typosquatting (http/https only)
5. identifier comparison for the href's scheme
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import logging
from typing import Any

from phish_link_detector.config.settings import DetectorConfig, load_config
from phish_link_detector.domain.url.extract import (
    extract_domain,
    extract_email,
    extract_identifier,
    extract_phone,
    parse_scheme,
    strip_scheme,
)
from phish_link_detector.domain.url.models import IdentifierKind, LinkContext, RegistrableDomain, Scheme
from phish_link_detector.domain.url.normalize import normalize_domain, normalize_phone, registrable_domain
from phish_link_detector.domain.verdict import (
    AnalysisError,
    DetectionResult,
    DomainMismatch,
    EmailMatch,
    EmailMismatch,
    InvalidUrl,
    LinkFinding,
    MissingInput,
    NoDomainInText,
    NoEmailToCompare,
    NoMismatch,
    NoPhoneInText,
    PhoneMatch,
    PhoneMismatch,
    ScanReport,
)
from phish_link_detector.errors import MalformedDestinationError
from phish_link_detector.tools.intel.brand_intel import (
    detect_brand_typosquatting,
    extract_brand_from_domain,
    is_canonical_domain,
    levenshtein_distance,
)
from phish_link_detector.tools.intel.transport_intel import detect_insecure_http, detect_punycode
from phish_link_detector.tools.url_fetch.service import (
    HttpRedirectResolver,
    RedirectResolver,
    check_redirect,
    is_file_download,
)

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class LinkDetector:
    """Decides whether a link's visible text misrepresents its destination.

    Configuration and the brand dictionary are fixed at construction, so one
    detector can serve concurrent calls without locking.
    """

    def __init__(
        self,
        config: DetectorConfig | None = None,
        resolver: RedirectResolver | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()[0]
        self.brands = self.config.brand_dictionary()
        self.multi_level_tlds = self.config.multi_level_tlds
        if resolver is None and self.config.enable_redirect_check:
            resolver = HttpRedirectResolver(self.config.fetch_policy())
        self.resolver = resolver if self.config.enable_redirect_check else None

    # Pure sub-checks bound to this detector's configuration.

    detect_punycode = staticmethod(detect_punycode)
    detect_insecure_http = staticmethod(detect_insecure_http)
    extract_domain = staticmethod(extract_domain)
    normalize_domain = staticmethod(normalize_domain)
    levenshtein_distance = staticmethod(levenshtein_distance)

    def registrable_domain(self, domain: str | None) -> RegistrableDomain | None:
        return registrable_domain(domain, self.multi_level_tlds)

    def extract_brand_from_domain(self, domain: str | None) -> str | None:
        return extract_brand_from_domain(domain, self.brands)

    def is_canonical_domain(self, domain: str | None, brand: str | None) -> bool:
        return is_canonical_domain(domain, brand, self.brands)

    def detect_brand_typosquatting(self, url: str | None) -> DetectionResult:
        return detect_brand_typosquatting(
            url,
            self.brands,
            multi_level_tlds=self.multi_level_tlds,
            threshold=self.config.typosquat_threshold,
        )

    def is_file_download(self, url: str | None) -> bool:
        return is_file_download(url, self.config.file_extensions)

    async def check_redirect(self, url: str | None) -> DetectionResult | None:
        if self.resolver is None:
            return None
        return await check_redirect(
            url,
            self.resolver,
            multi_level_tlds=self.multi_level_tlds,
            file_extensions=self.config.file_extensions,
            timeout_s=self.config.redirect_timeout_s,
        )

    async def analyze_link(self, visible_text: Any, href_url: Any) -> DetectionResult:
        text = _as_text(visible_text)
        href = _as_text(href_url).strip()
        if not text.strip() or not href:
            return MissingInput()

        for check in (self.detect_punycode, self.detect_insecure_http):
            result = check(href)
            if result.is_suspicious:
                logger.debug("%s: %s", href, result.reason.value)
                return result

        scheme = parse_scheme(href)
        # A web href without a usable host is settled by the domain comparison.
        if scheme.is_web and self.extract_domain(href) is not None:
            redirect = await self.check_redirect(href)
            if redirect is not None and redirect.is_suspicious:
                logger.debug("%s: %s", href, redirect.reason.value)
                return redirect
            brand = self.detect_brand_typosquatting(href)
            if brand.is_suspicious:
                logger.debug("%s: %s", href, brand.reason.value)
                return brand

        if scheme in (Scheme.TEL, Scheme.SMS):
            return self._compare_phone(text, href)
        if scheme is Scheme.MAILTO:
            return self._compare_email(text, href)
        return self._compare_domain(text, href)

    def analyze_link_sync(self, visible_text: Any, href_url: Any) -> DetectionResult:
        return asyncio.run(self.analyze_link(visible_text, href_url))

    async def scan_links(self, links: Iterable[LinkContext | tuple[str, str]]) -> ScanReport:
        """Analyse many links concurrently; one link's outcome never affects another."""

        contexts = [
            item if isinstance(item, LinkContext) else LinkContext(visible_text=item[0], href_url=item[1])
            for item in links
        ]
        results = await asyncio.gather(*(self._analyze_isolated(item) for item in contexts))
        findings = [
            LinkFinding(visible_text=item.visible_text, href_url=item.href_url, result=result)
            for item, result in zip(contexts, results)
        ]
        suspicious = sum(1 for item in findings if item.result.is_suspicious)
        if suspicious:
            logger.info("scan found %d suspicious link(s) out of %d", suspicious, len(findings))
        return ScanReport(total=len(findings), suspicious=suspicious, findings=findings)

    async def _analyze_isolated(self, item: LinkContext) -> DetectionResult:
        try:
            return await self.analyze_link(item.visible_text, item.href_url)
        except Exception as exc:
            logger.exception("error analyzing link %r", item.href_url)
            return AnalysisError(original_url=item.href_url, error=f"{type(exc).__name__}: {exc}")

    def _compare_phone(self, text: str, href: str) -> DetectionResult:
        actual = strip_scheme(href)
        visible = extract_phone(text)
        if not visible:
            return NoPhoneInText(actual_identifier=actual)
        visible_digits = normalize_phone(visible)
        actual_digits = normalize_phone(actual)
        if visible_digits != actual_digits:
            return PhoneMismatch(
                visible_identifier=visible,
                actual_identifier=actual,
                visible_digits=visible_digits,
                actual_digits=actual_digits,
            )
        return PhoneMatch(visible_identifier=visible, actual_identifier=actual)

    def _compare_email(self, text: str, href: str) -> DetectionResult:
        visible = extract_email(text)
        actual = extract_email(strip_scheme(href))
        if not visible or not actual:
            return NoEmailToCompare(visible_identifier=visible, actual_identifier=actual)
        if visible != actual:
            return EmailMismatch(visible_identifier=visible, actual_identifier=actual)
        return EmailMatch(visible_identifier=visible, actual_identifier=actual)

    def _compare_domain(self, text: str, href: str) -> DetectionResult:
        try:
            identifier = extract_identifier(href)
        except MalformedDestinationError as exc:
            logger.debug("malformed destination %s: %s", href, exc.reason)
            return InvalidUrl(original_url=href)
        if identifier is None or identifier.kind is not IdentifierKind.DOMAIN:
            return InvalidUrl(original_url=href)

        actual_domain = normalize_domain(identifier.value)
        text_domain = extract_domain(text)
        if not text_domain:
            return NoDomainInText(actual_domain=actual_domain)

        visible_domain = normalize_domain(text_domain)
        if visible_domain != actual_domain:
            return DomainMismatch(
                visible_domain=visible_domain,
                actual_domain=actual_domain,
                original_text=text.strip(),
                original_url=href,
            )
        return NoMismatch(visible_domain=visible_domain, actual_domain=actual_domain)
