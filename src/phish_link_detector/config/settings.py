"""Config loader from yaml + env."""

from __future__ import annotations

from pathlib import Path
import logging
import os
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from phish_link_detector.domain.url.normalize import DEFAULT_MULTI_LEVEL_TLDS, normalize_domain
from phish_link_detector.errors import ConfigError
from phish_link_detector.tools.intel.brand_intel import DEFAULT_TYPOSQUAT_THRESHOLD, BrandDictionary
from phish_link_detector.tools.url_fetch.service import (
    DEFAULT_FILE_EXTENSIONS,
    DEFAULT_REDIRECT_TIMEOUT_S,
    RedirectFetchPolicy,
)

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PACKAGE_ROOT / "config" / "defaults.yaml"
ENV_PREFIX = "PHISH_LINK_DETECTOR_"


class DetectorConfig(BaseModel):
    """Immutable settings handed to a detector at construction."""

    model_config = ConfigDict(frozen=True)

    brands: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    multi_level_tlds: frozenset[str] = Field(default=DEFAULT_MULTI_LEVEL_TLDS)
    typosquat_threshold: int = Field(default=DEFAULT_TYPOSQUAT_THRESHOLD, ge=0)
    redirect_timeout_s: float = Field(default=DEFAULT_REDIRECT_TIMEOUT_S, gt=0)
    file_extensions: tuple[str, ...] = Field(default=DEFAULT_FILE_EXTENSIONS)
    enable_redirect_check: bool = Field(default=True)
    allow_private_network: bool = Field(default=False)
    user_agent: str = Field(default="PhishLinkDetector/1.0")

    @field_validator("brands", mode="before")
    @classmethod
    def _clean_brands(cls, value: Any) -> dict[str, tuple[str, ...]]:
        if not isinstance(value, dict):
            raise ValueError("brands must map brand names to lists of domains")
        cleaned: dict[str, tuple[str, ...]] = {}
        for name, domains in value.items():
            key = str(name or "").strip().lower()
            if not key:
                continue
            items = [domains] if isinstance(domains, str) else list(domains or [])
            cleaned[key] = tuple(
                dict.fromkeys(normalize_domain(str(item)) for item in items if str(item).strip())
            )
        return cleaned

    @field_validator("multi_level_tlds", mode="before")
    @classmethod
    def _clean_tlds(cls, value: Any) -> frozenset[str]:
        return frozenset(str(item).strip().strip(".").lower() for item in value if str(item).strip())

    @field_validator("file_extensions", mode="before")
    @classmethod
    def _clean_extensions(cls, value: Any) -> tuple[str, ...]:
        cleaned = []
        for item in value:
            ext = str(item).strip().lower()
            if not ext:
                continue
            cleaned.append(ext if ext.startswith(".") else f".{ext}")
        return tuple(dict.fromkeys(cleaned))

    def brand_dictionary(self) -> BrandDictionary:
        return BrandDictionary.from_mapping(self.brands, self.multi_level_tlds)

    def fetch_policy(self) -> RedirectFetchPolicy:
        return RedirectFetchPolicy(
            timeout_s=self.redirect_timeout_s,
            allow_private_network=self.allow_private_network,
            user_agent=self.user_agent,
        )


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}
    try:
        payload = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse config file {p}: {exc}") from exc
    return payload if isinstance(payload, dict) else {}


def _pick_env(name: str, fallback: Any) -> Any:
    value = os.getenv(ENV_PREFIX + name)
    return value if value not in (None, "") else fallback


def _parse_int(raw: Any, fallback: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value >= 0 else fallback


def _parse_float(raw: Any, fallback: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def _parse_bool(raw: Any, fallback: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return fallback
    value = str(raw).strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return fallback


def _parse_str(raw: Any, fallback: str) -> str:
    value = str(raw if raw is not None else "").strip()
    return value or fallback


def _resolve_config_path(path: str | Path | None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.getenv(ENV_PREFIX + "CONFIG_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(path: str | Path | None = None) -> tuple[DetectorConfig, dict[str, Any]]:
    """Build a fresh ``DetectorConfig`` from yaml, with env overrides on top.

    Returns the config and the merged raw payload. Nothing is cached, so every
    call reflects the current file and environment.
    """

    config_path = _resolve_config_path(path)
    merged = load_yaml(config_path)
    defaults = DetectorConfig()

    payload: dict[str, Any] = {
        "brands": merged.get("brands") or {},
        "multi_level_tlds": merged.get("multi_level_tlds") or sorted(defaults.multi_level_tlds),
        "file_extensions": merged.get("file_extensions") or list(defaults.file_extensions),
        "typosquat_threshold": _parse_int(
            _pick_env("TYPOSQUAT_THRESHOLD", merged.get("typosquat_threshold", DEFAULT_TYPOSQUAT_THRESHOLD)),
            DEFAULT_TYPOSQUAT_THRESHOLD,
        ),
        "redirect_timeout_s": _parse_float(
            _pick_env("REDIRECT_TIMEOUT_S", merged.get("redirect_timeout_s", DEFAULT_REDIRECT_TIMEOUT_S)),
            DEFAULT_REDIRECT_TIMEOUT_S,
        ),
        "enable_redirect_check": _parse_bool(
            _pick_env("ENABLE_REDIRECT_CHECK", merged.get("enable_redirect_check", True)),
            True,
        ),
        "allow_private_network": _parse_bool(
            _pick_env("ALLOW_PRIVATE_NETWORK", merged.get("allow_private_network", False)),
            False,
        ),
        "user_agent": _parse_str(
            _pick_env("USER_AGENT", merged.get("user_agent")),
            defaults.user_agent,
        ),
    }
    try:
        config = DetectorConfig(**payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid detector config in {config_path}: {exc}") from exc
    logger.info(
        "loaded detector config from %s (%d brands, %d multi-level TLDs)",
        config_path,
        len(config.brands),
        len(config.multi_level_tlds),
    )
    return config, merged
