import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
SITES_FILE = DATA_DIR / "sites.json"
RULES_FILE = DATA_DIR / "axe.lighthouse.rules.json"

DEFAULT_NAV_TIMEOUT_MS = 30000


class ConfigError(ValueError):
    pass


def nav_timeout_ms() -> int:
    """Navigation timeout from A11Y_NAV_TIMEOUT_MS, in milliseconds."""
    raw = os.environ.get("A11Y_NAV_TIMEOUT_MS")
    if raw is None or not raw.strip():
        return DEFAULT_NAV_TIMEOUT_MS
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"A11Y_NAV_TIMEOUT_MS must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"A11Y_NAV_TIMEOUT_MS must be positive, got {value}")
    return value


@dataclass(frozen=True)
class SiteConfig:
    wcag_tags: tuple
    exclude_rules: frozenset
    urls: tuple
    baseline_rules: tuple


def _read_json(path: Path):
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def _string_list(data, key, path):
    if key not in data:
        raise ConfigError(f"Missing key '{key}' in {path}")
    values = data[key]
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ConfigError(f"'{key}' in {path} must be a list of strings")
    return values


def load_site_config(sites_file=None, rules_file=None) -> SiteConfig:
    """
    Load the site list and the baseline axe rule ids.

    Explicit arguments win, then A11Y_SITES_FILE / A11Y_RULES_FILE,
    then the files shipped under data/.
    """
    sites_path = Path(sites_file or os.environ.get("A11Y_SITES_FILE") or SITES_FILE)
    rules_path = Path(rules_file or os.environ.get("A11Y_RULES_FILE") or RULES_FILE)

    sites = _read_json(sites_path)
    if not isinstance(sites, dict):
        raise ConfigError(f"{sites_path} must contain a JSON object")

    urls = _string_list(sites, "urls", sites_path)
    for url in urls:
        if not url.startswith(("http://", "https://")):
            raise ConfigError(f"URL must be absolute: {url!r} ({sites_path})")

    rules = _read_json(rules_path)
    if not isinstance(rules, list) or not all(isinstance(r, str) for r in rules):
        raise ConfigError(f"{rules_path} must contain a flat array of rule ids")

    config = SiteConfig(
        wcag_tags=tuple(_string_list(sites, "wcagTags", sites_path)),
        exclude_rules=frozenset(_string_list(sites, "excludeRules", sites_path)),
        urls=tuple(urls),
        baseline_rules=tuple(rules),
    )
    logger.debug("Loaded %d site(s) from %s", len(config.urls), sites_path)
    return config
