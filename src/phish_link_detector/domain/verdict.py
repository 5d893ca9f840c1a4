"""Detection verdict structures.

Every verdict is one variant of a closed union keyed by ``reason``. A variant
fixes ``is_suspicious`` and carries only the detail fields its reason needs.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from phish_link_detector.domain.url.models import Scheme


class ReasonCode(str, Enum):
    MISSING_INPUT = "Missing text or URL"
    NO_URL = "No URL provided"
    PUNYCODE = "Punycode detected (non-ASCII characters)"
    ASCII_ONLY = "No non-ASCII characters detected"
    INSECURE_HTTP = "Insecure HTTP connection detected"
    NOT_INSECURE_HTTP = "Connection does not use plain HTTP"
    NOT_HTTP = "Not an HTTP/HTTPS URL"
    REDIRECT_CROSS_DOMAIN = "Redirects to a different site"
    FILE_DOWNLOAD = "Link leads to a file download"
    REDIRECT_UNVERIFIED = "Could not verify destination (network error)"
    REDIRECT_OK = "No suspicious redirect detected"
    BRAND_NOT_CANONICAL = "Brand name found but domain is not canonical"
    CANONICAL_DOMAIN = "Valid canonical domain for brand"
    TYPOSQUATTING = "Potential typosquatting detected"
    NO_TYPOSQUATTING = "No brand typosquatting detected"
    PHONE_MISMATCH = "Phone number mismatch"
    PHONE_MATCH = "No phone number mismatch detected."
    NO_PHONE_IN_TEXT = "No phone number found in visible text to compare."
    EMAIL_MISMATCH = "Email address mismatch"
    EMAIL_MATCH = "No email mismatch detected."
    NO_EMAIL_TO_COMPARE = "No email address found to compare."
    INVALID_URL = "Link destination is not a valid URL."
    NO_DOMAIN_IN_TEXT = "No domain found in visible text to compare."
    DOMAIN_MISMATCH = "Domain mismatch"
    NO_MISMATCH = "No mismatch detected"
    ANALYSIS_ERROR = "Error analyzing link"


class DetectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_suspicious: bool
    reason: ReasonCode

    @property
    def details(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"is_suspicious", "reason"})

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_suspicious": self.is_suspicious,
            "reason": self.reason.value,
            "reason_code": self.reason.name,
            "details": self.details,
        }


class _Suspicious(DetectionResult):
    is_suspicious: Literal[True] = True


class _Clear(DetectionResult):
    is_suspicious: Literal[False] = False


class MissingInput(_Clear):
    reason: Literal[ReasonCode.MISSING_INPUT] = ReasonCode.MISSING_INPUT


class NoUrlProvided(_Clear):
    reason: Literal[ReasonCode.NO_URL] = ReasonCode.NO_URL


class PunycodeDetected(_Suspicious):
    reason: Literal[ReasonCode.PUNYCODE] = ReasonCode.PUNYCODE
    original_url: str
    non_ascii_characters: tuple[str, ...] = ()
    explanation: str = (
        "The URL contains non-ASCII characters that can imitate the letters of a trusted domain."
    )


class AsciiOnly(_Clear):
    reason: Literal[ReasonCode.ASCII_ONLY] = ReasonCode.ASCII_ONLY
    original_url: str


class InsecureHttp(_Suspicious):
    reason: Literal[ReasonCode.INSECURE_HTTP] = ReasonCode.INSECURE_HTTP
    original_url: str
    explanation: str = "Traffic to this link is not encrypted and can be read or altered in transit."


class NotInsecureHttp(_Clear):
    reason: Literal[ReasonCode.NOT_INSECURE_HTTP] = ReasonCode.NOT_INSECURE_HTTP
    original_url: str


class NotHttp(_Clear):
    reason: Literal[ReasonCode.NOT_HTTP] = ReasonCode.NOT_HTTP
    original_url: str
    scheme: Scheme


class RedirectCrossDomain(_Suspicious):
    reason: Literal[ReasonCode.REDIRECT_CROSS_DOMAIN] = ReasonCode.REDIRECT_CROSS_DOMAIN
    original_url: str
    final_url: str
    original_domain: str
    final_domain: str


class FileDownload(_Suspicious):
    reason: Literal[ReasonCode.FILE_DOWNLOAD] = ReasonCode.FILE_DOWNLOAD
    original_url: str
    final_url: str
    extension: str


class RedirectUnverified(_Clear):
    reason: Literal[ReasonCode.REDIRECT_UNVERIFIED] = ReasonCode.REDIRECT_UNVERIFIED
    original_url: str
    error: str


class RedirectOk(_Clear):
    reason: Literal[ReasonCode.REDIRECT_OK] = ReasonCode.REDIRECT_OK
    original_url: str
    final_url: str


class BrandNotCanonical(_Suspicious):
    reason: Literal[ReasonCode.BRAND_NOT_CANONICAL] = ReasonCode.BRAND_NOT_CANONICAL
    brand: str
    suspicious_domain: str
    canonical_domains: tuple[str, ...]


class CanonicalDomain(_Clear):
    reason: Literal[ReasonCode.CANONICAL_DOMAIN] = ReasonCode.CANONICAL_DOMAIN
    brand: str
    domain: str


class Typosquatting(_Suspicious):
    reason: Literal[ReasonCode.TYPOSQUATTING] = ReasonCode.TYPOSQUATTING
    brand: str
    suspicious_domain: str
    nearest_match: str
    levenshtein_distance: int = Field(gt=0)
    canonical_domains: tuple[str, ...]


class NoTyposquatting(_Clear):
    reason: Literal[ReasonCode.NO_TYPOSQUATTING] = ReasonCode.NO_TYPOSQUATTING
    domain: str


class PhoneMismatch(_Suspicious):
    reason: Literal[ReasonCode.PHONE_MISMATCH] = ReasonCode.PHONE_MISMATCH
    visible_identifier: str
    actual_identifier: str
    visible_digits: str
    actual_digits: str


class PhoneMatch(_Clear):
    reason: Literal[ReasonCode.PHONE_MATCH] = ReasonCode.PHONE_MATCH
    visible_identifier: str
    actual_identifier: str


class NoPhoneInText(_Clear):
    reason: Literal[ReasonCode.NO_PHONE_IN_TEXT] = ReasonCode.NO_PHONE_IN_TEXT
    actual_identifier: str


class EmailMismatch(_Suspicious):
    reason: Literal[ReasonCode.EMAIL_MISMATCH] = ReasonCode.EMAIL_MISMATCH
    visible_identifier: str
    actual_identifier: str


class EmailMatch(_Clear):
    reason: Literal[ReasonCode.EMAIL_MATCH] = ReasonCode.EMAIL_MATCH
    visible_identifier: str
    actual_identifier: str


class NoEmailToCompare(_Clear):
    reason: Literal[ReasonCode.NO_EMAIL_TO_COMPARE] = ReasonCode.NO_EMAIL_TO_COMPARE
    visible_identifier: str | None = None
    actual_identifier: str | None = None


class InvalidUrl(_Suspicious):
    reason: Literal[ReasonCode.INVALID_URL] = ReasonCode.INVALID_URL
    original_url: str


class NoDomainInText(_Clear):
    reason: Literal[ReasonCode.NO_DOMAIN_IN_TEXT] = ReasonCode.NO_DOMAIN_IN_TEXT
    actual_domain: str


class DomainMismatch(_Suspicious):
    reason: Literal[ReasonCode.DOMAIN_MISMATCH] = ReasonCode.DOMAIN_MISMATCH
    visible_domain: str
    actual_domain: str
    original_text: str
    original_url: str


class NoMismatch(_Clear):
    reason: Literal[ReasonCode.NO_MISMATCH] = ReasonCode.NO_MISMATCH
    visible_domain: str
    actual_domain: str


class AnalysisError(_Clear):
    reason: Literal[ReasonCode.ANALYSIS_ERROR] = ReasonCode.ANALYSIS_ERROR
    original_url: str | None = None
    error: str


AnyDetectionResult = Annotated[
    Union[
        MissingInput,
        NoUrlProvided,
        PunycodeDetected,
        AsciiOnly,
        InsecureHttp,
        NotInsecureHttp,
        NotHttp,
        RedirectCrossDomain,
        FileDownload,
        RedirectUnverified,
        RedirectOk,
        BrandNotCanonical,
        CanonicalDomain,
        Typosquatting,
        NoTyposquatting,
        PhoneMismatch,
        PhoneMatch,
        NoPhoneInText,
        EmailMismatch,
        EmailMatch,
        NoEmailToCompare,
        InvalidUrl,
        NoDomainInText,
        DomainMismatch,
        NoMismatch,
        AnalysisError,
    ],
    Field(discriminator="reason"),
]

DETECTION_RESULT_ADAPTER: TypeAdapter[AnyDetectionResult] = TypeAdapter(AnyDetectionResult)


def parse_detection_result(payload: dict[str, Any]) -> DetectionResult:
    """Rebuild a verdict from a flat ``model_dump`` payload."""

    return DETECTION_RESULT_ADAPTER.validate_python(payload)


class LinkFinding(BaseModel):
    visible_text: str | None = None
    href_url: str | None = None
    result: AnyDetectionResult


class ScanReport(BaseModel):
    total: int = Field(default=0, ge=0)
    suspicious: int = Field(default=0, ge=0)
    findings: list[LinkFinding] = Field(default_factory=list)

    @property
    def suspicious_findings(self) -> list[LinkFinding]:
        return [item for item in self.findings if item.result.is_suspicious]
