"""Configuration management for the YAML config file."""

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .paths import get_data_dir, get_system_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = get_data_dir() / "config"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
_TEMPLATE_CONFIG = get_system_path("config", "config.yaml")

_DEFAULT_CONFIG_TEMPLATE = """# Auto-generated default configuration for blogsmith
site:
  posts_dir: "_posts"
  site_root: "."
  post_patterns: ["*.md", "*.markdown"]

front_matter:
  required: ["layout", "title"]
  allowed_layouts: ["post"]
  allow_unknown_keys: false
  extra_keys: ["date", "categories", "permalink", "published", "excerpt"]

code:
  allowed_languages: []

links:
  cache_path: "link_cache.db"
  rps: 2.0
  max_retries: 3
  timeout: 10
  ttl_days: 7

duplicates:
  threshold: 0.9

html:
  output: "html/index.html"
  group_by: "date"
  title: "Posts"
"""

_DEFAULTS: Dict[str, Any] = yaml.safe_load(_DEFAULT_CONFIG_TEMPLATE)

_GROUP_BY_CHOICES = ("date", "tag")


def _write_template(path: Path, content: str) -> None:
    """Write templated YAML content to disk with a trailing newline."""
    path.write_text(content.strip() + "\n", encoding="utf-8")


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(x, str) for x in value)


class ConfigManager:
    """Manages loading and validation of the YAML configuration file."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the manager and ensure a baseline config file exists."""
        path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        if not path.is_absolute():
            path = path.resolve()
        self.config_path = str(path)
        self.base_dir = str(path.parent)
        self._config = None
        self._ensure_default_config()

    def load_config(self) -> Dict[str, Any]:
        """Load the main configuration file."""
        if self._config is None:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
                logger.info(f"Loaded configuration from {self.config_path}")
            except Exception as e:
                logger.error(f"Failed to load config from {self.config_path}: {e}")
                raise

        return self._config

    def _ensure_default_config(self) -> None:
        """Create the default configuration file if it is missing."""
        config_file = Path(self.config_path)
        if config_file.exists():
            return

        config_file.parent.mkdir(parents=True, exist_ok=True)
        if _TEMPLATE_CONFIG.exists():
            try:
                shutil.copyfile(_TEMPLATE_CONFIG, config_file)
                logger.info("Created default config.yaml at %s", config_file)
                return
            except OSError as exc:
                logger.warning("Failed to copy template config: %s", exc)
        _write_template(config_file, _DEFAULT_CONFIG_TEMPLATE)
        logger.info("Created fallback default config.yaml at %s", config_file)

    def get_section(self, name: str) -> Dict[str, Any]:
        """Return a config section with built-in defaults filled in."""
        config = self.load_config()
        section = dict(_DEFAULTS.get(name) or {})
        user_section = config.get(name) or {}
        if isinstance(user_section, dict):
            section.update(user_section)
        return section

    def get_posts_dir(self) -> Path:
        """Directory holding the Markdown posts."""
        return Path(self.get_section('site')['posts_dir']).expanduser().resolve()

    def get_site_root(self) -> Path:
        """Directory that site-absolute asset paths (``/assets/...``) resolve against."""
        return Path(self.get_section('site')['site_root']).expanduser().resolve()

    def get_post_patterns(self) -> List[str]:
        return list(self.get_section('site')['post_patterns'])

    def validate_config(self) -> bool:
        """Validate the configuration file."""
        try:
            config = self.load_config()
            if not isinstance(config, dict):
                logger.error("Config root must be a mapping")
                return False

            for name, value in config.items():
                if name in _DEFAULTS and value is not None and not isinstance(value, dict):
                    logger.error(f"Config section '{name}' must be a mapping")
                    return False

            site = self.get_section('site')
            for key in ('posts_dir', 'site_root'):
                if not isinstance(site.get(key), str) or not site[key].strip():
                    logger.error(f"site.{key} must be a non-empty string")
                    return False
            if not _is_str_list(site.get('post_patterns')) or not site['post_patterns']:
                logger.error("site.post_patterns must be a non-empty list of glob strings")
                return False

            fm = self.get_section('front_matter')
            for key in ('required', 'allowed_layouts', 'extra_keys'):
                if not _is_str_list(fm.get(key)):
                    logger.error(f"front_matter.{key} must be a list of strings")
                    return False
            if not isinstance(fm.get('allow_unknown_keys'), bool):
                logger.error("front_matter.allow_unknown_keys must be a boolean")
                return False

            if not _is_str_list(self.get_section('code').get('allowed_languages')):
                logger.error("code.allowed_languages must be a list of strings")
                return False

            links = self.get_section('links')
            for key in ('rps', 'timeout', 'ttl_days'):
                value = links.get(key)
                if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                    logger.error(f"links.{key} must be a positive number")
                    return False
            retries = links.get('max_retries')
            if not isinstance(retries, int) or isinstance(retries, bool) or retries < 1:
                logger.error("links.max_retries must be an integer >= 1")
                return False

            threshold = self.get_section('duplicates').get('threshold')
            if not isinstance(threshold, (int, float)) or isinstance(threshold, bool) or not 0.0 < threshold <= 1.0:
                logger.error("duplicates.threshold must be a number in (0, 1]")
                return False

            html_cfg = self.get_section('html')
            if html_cfg.get('group_by') not in _GROUP_BY_CHOICES:
                logger.error(f"html.group_by must be one of {', '.join(_GROUP_BY_CHOICES)}")
                return False

            logger.info("Configuration validation passed")
            return True

        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            return False


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_DIR",
]
