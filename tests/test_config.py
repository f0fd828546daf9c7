import json

import pytest

from a11ysuite.config import DEFAULT_NAV_TIMEOUT_MS, ConfigError, load_site_config, nav_timeout_ms


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def files(tmp_path):
    sites = _write(tmp_path / "sites.json", {
        "wcagTags": ["wcag2a"],
        "excludeRules": ["region"],
        "urls": ["https://example.com/", "https://example.org/about"],
    })
    rules = _write(tmp_path / "rules.json", ["image-alt", "region"])
    return sites, rules


def test_shipped_config_loads():
    config = load_site_config()
    assert config.urls
    assert config.wcag_tags
    assert "region" in config.exclude_rules


def test_explicit_files(files):
    sites, rules = files
    config = load_site_config(sites, rules)
    assert config.urls == ("https://example.com/", "https://example.org/about")
    assert config.baseline_rules == ("image-alt", "region")
    assert config.exclude_rules == frozenset({"region"})


def test_env_overrides(files, monkeypatch):
    sites, rules = files
    monkeypatch.setenv("A11Y_SITES_FILE", str(sites))
    monkeypatch.setenv("A11Y_RULES_FILE", str(rules))
    assert load_site_config().wcag_tags == ("wcag2a",)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_site_config(tmp_path / "nope.json", tmp_path / "nope.json")


def test_missing_key(tmp_path, files):
    _, rules = files
    sites = _write(tmp_path / "partial.json", {"urls": ["https://example.com/"], "excludeRules": []})
    with pytest.raises(ConfigError, match="wcagTags"):
        load_site_config(sites, rules)


def test_relative_url_rejected(tmp_path, files):
    _, rules = files
    sites = _write(tmp_path / "relative.json", {"wcagTags": [], "excludeRules": [], "urls": ["/about"]})
    with pytest.raises(ConfigError, match="absolute"):
        load_site_config(sites, rules)


def test_rules_must_be_flat(tmp_path, files):
    sites, _ = files
    rules = _write(tmp_path / "nested.json", {"rules": ["image-alt"]})
    with pytest.raises(ConfigError, match="flat array"):
        load_site_config(sites, rules)


def test_nav_timeout_defaults_and_overrides(monkeypatch):
    monkeypatch.delenv("A11Y_NAV_TIMEOUT_MS", raising=False)
    assert nav_timeout_ms() == DEFAULT_NAV_TIMEOUT_MS

    monkeypatch.setenv("A11Y_NAV_TIMEOUT_MS", "45000")
    assert nav_timeout_ms() == 45000


@pytest.mark.parametrize("value", ["abc", "3.5", "0", "-100"])
def test_bad_nav_timeout_is_a_config_error(monkeypatch, value):
    monkeypatch.setenv("A11Y_NAV_TIMEOUT_MS", value)
    with pytest.raises(ConfigError, match="A11Y_NAV_TIMEOUT_MS"):
        nav_timeout_ms()
