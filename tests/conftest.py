from __future__ import annotations

import asyncio

import pytest

from phish_link_detector.config.settings import DetectorConfig, load_config
from phish_link_detector.errors import NetworkError
from phish_link_detector.orchestrator.detector import LinkDetector
from phish_link_detector.tools.url_fetch.service import NullRedirectResolver

_ENV_NAMES = (
    "CONFIG_PATH",
    "TYPOSQUAT_THRESHOLD",
    "REDIRECT_TIMEOUT_S",
    "ENABLE_REDIRECT_CHECK",
    "ALLOW_PRIVATE_NETWORK",
    "USER_AGENT",
)


class FakeResolver:
    def __init__(self, final_url: str | None = None, *, error: str | None = None, delay_s: float = 0.0) -> None:
        self.final_url = final_url
        self.error = error
        self.delay_s = delay_s
        self.calls: list[str] = []

    async def resolve(self, url: str) -> str:
        self.calls.append(url)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error:
            raise NetworkError(url, self.error)
        return self.final_url or url


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(f"PHISH_LINK_DETECTOR_{name}", raising=False)


@pytest.fixture
def fake_resolver():
    return FakeResolver


@pytest.fixture
def default_config() -> DetectorConfig:
    config, _raw = load_config()
    return config


@pytest.fixture
def brands(default_config):
    return default_config.brand_dictionary()


@pytest.fixture
def make_detector(default_config):
    def _make(resolver=None, **overrides) -> LinkDetector:
        config = default_config.model_copy(update=overrides) if overrides else default_config
        return LinkDetector(config=config, resolver=resolver or NullRedirectResolver())

    return _make


@pytest.fixture
def analyze(make_detector):
    detector = make_detector()

    def _run(text, url):
        return asyncio.run(detector.analyze_link(text, url))

    return _run
