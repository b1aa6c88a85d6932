"""Tests for runtime data directory resolution helpers."""

from __future__ import annotations

import os
import sys
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

# Ensure the repository's src/ directory is importable without installation.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from blogsmith.core.paths import (  # noqa: E402
    ensure_data_dir,
    get_data_dir,
    resolve_data_file,
    resolve_data_path,
)


class DataDirEnvironmentOverrideTests(unittest.TestCase):
    """Verify that BLOGSMITH_DATA_DIR overrides the runtime data dir."""

    def test_get_data_dir_honors_environment_override(self) -> None:
        """get_data_dir should return the directory specified by the env var."""
        with TemporaryDirectory() as tmp:
            override = Path(tmp) / "custom-location"
            with mock.patch.dict(os.environ, {"BLOGSMITH_DATA_DIR": str(override)}, clear=False):
                data_dir = get_data_dir()
        self.assertEqual(data_dir, override.resolve())

    def test_blank_override_falls_back_to_home(self) -> None:
        with mock.patch.dict(os.environ, {"BLOGSMITH_DATA_DIR": "  "}, clear=False):
            data_dir = get_data_dir()
        self.assertEqual(data_dir, (Path.home() / ".blogsmith").resolve())

    def test_ensure_data_dir_creates_directory_and_seeds_templates(self) -> None:
        """ensure_data_dir should create the directory and copy bundled templates."""
        with TemporaryDirectory() as tmp:
            override = Path(tmp) / "nested" / "override"
            with mock.patch.dict(os.environ, {"BLOGSMITH_DATA_DIR": str(override)}, clear=False):
                data_dir = ensure_data_dir()
                self.assertTrue(override.exists(), "override directory was not created")
                self.assertTrue((override / "templates" / "index_template.html").exists())
        self.assertEqual(data_dir, override.resolve())

    def test_resolve_helpers(self) -> None:
        with TemporaryDirectory() as tmp:
            root = Path(tmp) / "data"
            with mock.patch.dict(os.environ, {"BLOGSMITH_DATA_DIR": str(root)}, clear=False):
                cache = resolve_data_file("link_cache.db")
                html = resolve_data_path("html", "index.html", ensure_parent=True)
                absolute = resolve_data_file(str(Path(tmp) / "elsewhere" / "x.db"), ensure_parent=True)
                self.assertEqual(cache, root.resolve() / "link_cache.db")
                self.assertTrue(html.parent.is_dir())
                self.assertTrue(absolute.parent.is_dir())
                self.assertEqual(absolute, Path(tmp) / "elsewhere" / "x.db")


if __name__ == "__main__":
    unittest.main()
