import pytest
from pydantic import ValidationError

from phish_link_detector.config.settings import DetectorConfig, load_config
from phish_link_detector.errors import ConfigError
from phish_link_detector.orchestrator.detector import LinkDetector
from phish_link_detector.tools.url_fetch.service import NullRedirectResolver


def test_load_config_defaults():
    config, raw = load_config()
    assert "google.co.uk" in config.brands["google"]
    assert config.brands["npm"] == ("npmjs.com",)
    assert config.typosquat_threshold == 2
    assert config.redirect_timeout_s == 5.0
    assert ".exe" in config.file_extensions
    assert "co.uk" in config.multi_level_tlds
    assert config.enable_redirect_check is True
    assert isinstance(raw, dict)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PHISH_LINK_DETECTOR_TYPOSQUAT_THRESHOLD", "1")
    monkeypatch.setenv("PHISH_LINK_DETECTOR_REDIRECT_TIMEOUT_S", "2.5")
    monkeypatch.setenv("PHISH_LINK_DETECTOR_ENABLE_REDIRECT_CHECK", "off")
    config, _raw = load_config()
    assert config.typosquat_threshold == 1
    assert config.redirect_timeout_s == 2.5
    assert config.enable_redirect_check is False


def test_invalid_env_values_fall_back(monkeypatch):
    monkeypatch.setenv("PHISH_LINK_DETECTOR_TYPOSQUAT_THRESHOLD", "abc")
    monkeypatch.setenv("PHISH_LINK_DETECTOR_REDIRECT_TIMEOUT_S", "-3")
    config, _raw = load_config()
    assert config.typosquat_threshold == 2
    assert config.redirect_timeout_s == 5.0


def test_custom_yaml_is_normalized(tmp_path):
    path = tmp_path / "detector.yaml"
    path.write_text(
        "brands:\n"
        "  Acme:\n"
        "    - WWW.Acme.com\n"
        "    - acme.co.uk\n"
        "file_extensions: [EXE, .zip]\n"
        "typosquat_threshold: 1\n",
        encoding="utf-8",
    )
    config, _raw = load_config(path)
    assert config.brands == {"acme": ("acme.com", "acme.co.uk")}
    assert config.file_extensions == (".exe", ".zip")
    assert config.typosquat_threshold == 1


def test_config_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "other.yaml"
    path.write_text("brands:\n  acme: [acme.com]\n", encoding="utf-8")
    monkeypatch.setenv("PHISH_LINK_DETECTOR_CONFIG_PATH", str(path))
    config, _raw = load_config()
    assert list(config.brands) == ["acme"]


def test_missing_file_gives_empty_brand_dictionary(tmp_path):
    config, raw = load_config(tmp_path / "missing.yaml")
    assert raw == {}
    assert config.brands == {}
    assert "co.uk" in config.multi_level_tlds


def test_unusable_files_raise_config_error(tmp_path):
    broken = tmp_path / "broken.yaml"
    broken.write_text("brands: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken)

    wrong_type = tmp_path / "wrong.yaml"
    wrong_type.write_text("brands: 5\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(wrong_type)


def test_config_is_frozen():
    config = DetectorConfig()
    with pytest.raises(ValidationError):
        config.typosquat_threshold = 5


def test_detectors_do_not_share_configuration(default_config):
    acme = LinkDetector(DetectorConfig(brands={"acme": ["acme.com"]}), resolver=NullRedirectResolver())
    default = LinkDetector(default_config, resolver=NullRedirectResolver())
    assert acme.extract_brand_from_domain("acme-login.com") == "acme"
    assert default.extract_brand_from_domain("acme-login.com") is None
    assert acme.extract_brand_from_domain("google.com") is None
