"""Tests for configuration management defaults."""

from __future__ import annotations

from pathlib import Path
import sys

import yaml

# Ensure the repository's src/ directory is importable without installation.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from blogsmith.core.config import ConfigManager  # noqa: E402


def _write_config(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_config_manager_creates_defaults(tmp_path):
    """When pointed at an empty directory, a default config file is created."""

    config_path = tmp_path / "config.yaml"
    assert not config_path.exists()

    cfg = ConfigManager(str(config_path))

    assert config_path.exists(), "config.yaml should be created on first run"
    data = cfg.load_config()
    assert isinstance(data, dict)
    assert data["site"]["posts_dir"] == "_posts"
    assert cfg.validate_config()


def test_existing_config_is_not_overwritten(tmp_path):
    config_path = _write_config(tmp_path / "config.yaml", {"duplicates": {"threshold": 0.5}})
    ConfigManager(str(config_path))
    assert yaml.safe_load(config_path.read_text(encoding="utf-8")) == {"duplicates": {"threshold": 0.5}}


def test_sections_fall_back_to_defaults(tmp_path):
    config_path = _write_config(tmp_path / "config.yaml", {"links": {"rps": 0.5}})
    cfg = ConfigManager(str(config_path))

    links = cfg.get_section("links")
    assert links["rps"] == 0.5
    assert links["max_retries"] == 3
    assert cfg.get_section("front_matter")["required"] == ["layout", "title"]
    assert cfg.get_post_patterns() == ["*.md", "*.markdown"]
    assert cfg.validate_config()


def test_empty_config_file_is_valid(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("", encoding="utf-8")
    cfg = ConfigManager(str(config_path))
    assert cfg.load_config() == {}
    assert cfg.validate_config()


def test_site_paths_resolve_to_absolute(tmp_path):
    posts = tmp_path / "blog" / "_posts"
    config_path = _write_config(
        tmp_path / "config.yaml",
        {"site": {"posts_dir": str(posts), "site_root": str(tmp_path / "blog")}},
    )
    cfg = ConfigManager(str(config_path))
    assert cfg.get_posts_dir() == posts.resolve()
    assert cfg.get_site_root() == (tmp_path / "blog").resolve()


def test_validate_rejects_bad_values(tmp_path):
    bad_configs = [
        {"duplicates": {"threshold": 1.5}},
        {"duplicates": {"threshold": "high"}},
        {"links": {"max_retries": 0}},
        {"links": {"rps": -1}},
        {"html": {"group_by": "author"}},
        {"front_matter": {"required": "title"}},
        {"front_matter": {"allow_unknown_keys": "no"}},
        {"site": {"post_patterns": []}},
        {"code": {"allowed_languages": [1, 2]}},
        {"site": "not a mapping"},
    ]
    for index, data in enumerate(bad_configs):
        config_path = _write_config(tmp_path / f"config{index}.yaml", data)
        assert not ConfigManager(str(config_path)).validate_config(), data


def test_validate_reports_yaml_errors(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("site: [unclosed\n", encoding="utf-8")
    assert not ConfigManager(str(config_path)).validate_config()
