import json

import pytest
from pydantic import ValidationError

from phish_link_detector.domain.url.models import Scheme
from phish_link_detector.domain.verdict import (
    DomainMismatch,
    LinkFinding,
    NotHttp,
    ReasonCode,
    ScanReport,
    Typosquatting,
    parse_detection_result,
)


def test_variants_fix_suspicion_per_reason():
    result = DomainMismatch(
        visible_domain="google.com",
        actual_domain="evil-site.com",
        original_text="Go to google.com",
        original_url="https://evil-site.com",
    )
    assert result.is_suspicious is True
    assert result.reason is ReasonCode.DOMAIN_MISMATCH
    assert NotHttp(original_url="tel:1", scheme=Scheme.TEL).is_suspicious is False


def test_parse_detection_result_restores_the_variant():
    original = Typosquatting(
        brand="npm",
        suspicious_domain="nompjs.com",
        nearest_match="npmjs",
        levenshtein_distance=2,
        canonical_domains=("npmjs.com",),
    )
    restored = parse_detection_result(original.model_dump())
    assert isinstance(restored, Typosquatting)
    assert restored == original


def test_union_rejects_inconsistent_payloads():
    payload = DomainMismatch(
        visible_domain="a.com",
        actual_domain="b.com",
        original_text="a.com",
        original_url="https://b.com",
    ).model_dump()
    payload["is_suspicious"] = False
    with pytest.raises(ValidationError):
        parse_detection_result(payload)


def test_to_dict_for_rendering():
    result = NotHttp(original_url="tel:+15551234567", scheme=Scheme.TEL)
    assert result.to_dict() == {
        "is_suspicious": False,
        "reason": "Not an HTTP/HTTPS URL",
        "reason_code": "NOT_HTTP",
        "details": {"original_url": "tel:+15551234567", "scheme": "tel"},
    }


def test_scan_report_serializes_findings():
    finding = LinkFinding(
        visible_text="Go to google.com",
        href_url="https://evil-site.com",
        result=DomainMismatch(
            visible_domain="google.com",
            actual_domain="evil-site.com",
            original_text="Go to google.com",
            original_url="https://evil-site.com",
        ),
    )
    report = ScanReport(total=1, suspicious=1, findings=[finding])
    payload = json.loads(report.model_dump_json())
    assert payload["findings"][0]["result"]["reason"] == "Domain mismatch"
    assert payload["findings"][0]["result"]["visible_domain"] == "google.com"


def test_analysis_error_round_trips_and_fails_open():
    payload = {"reason": ReasonCode.ANALYSIS_ERROR, "original_url": "https://x.com", "error": "RuntimeError: boom"}
    restored = parse_detection_result(payload)
    assert restored.is_suspicious is False
    assert restored.to_dict()["reason"] == "Error analyzing link"
    assert restored.details == {"original_url": "https://x.com", "error": "RuntimeError: boom"}
