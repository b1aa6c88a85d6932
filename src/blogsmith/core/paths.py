"""Utilities for locating runtime data and built-in system assets."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterable

_ENV_VAR = "BLOGSMITH_DATA_DIR"
_DEFAULT_DIRNAME = ".blogsmith"
_PACKAGE_ROOT = Path(__file__).resolve().parents[1]
_SYSTEM_DIR = _PACKAGE_ROOT / "system"


def _normalize_relative(parts: Iterable[str]) -> Path:
    """Normalize relative path components, stripping a leading data dir name."""
    path = Path(*parts)
    if not path.parts:
        return Path()
    first = path.parts[0]
    if first in {_DEFAULT_DIRNAME, "system"}:
        path = Path(*path.parts[1:]) if len(path.parts) > 1 else Path()
    return path


def get_data_dir() -> Path:
    """Return the configured runtime data directory.

    Honors the BLOGSMITH_DATA_DIR environment variable; otherwise defaults
    to ~/.blogsmith on the current platform. A relative override is taken
    relative to the current working directory.
    """
    override = os.getenv(_ENV_VAR)
    if override is not None and override.strip():
        return Path(override.strip()).expanduser().resolve()
    return (Path.home() / _DEFAULT_DIRNAME).resolve()


def ensure_data_dir() -> Path:
    """Ensure the data directory exists on disk and return it."""
    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    _seed_from_system(data_dir)
    return data_dir


def resolve_data_path(*relative: str, ensure_parent: bool = False) -> Path:
    """Resolve a path underneath the runtime data directory."""
    data_dir = ensure_data_dir()
    full_path = data_dir / _normalize_relative(relative)
    if ensure_parent:
        full_path.parent.mkdir(parents=True, exist_ok=True)
    return full_path


def resolve_data_file(path: str, ensure_parent: bool = False) -> Path:
    """Resolve a configured file path against the data directory.

    Absolute paths are used as-is. Relative paths are interpreted relative
    to the runtime data dir.
    """
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        if ensure_parent:
            candidate.parent.mkdir(parents=True, exist_ok=True)
        return candidate
    return resolve_data_path(*candidate.parts, ensure_parent=ensure_parent)


def get_system_path(*relative: str) -> Path:
    """Return a path inside the package's bundled system directory."""
    return _SYSTEM_DIR.joinpath(*relative)


def _seed_from_system(target: Path) -> None:
    """Copy bundled templates into *target* when missing."""
    if target.resolve() == _SYSTEM_DIR.resolve():
        return

    src = _SYSTEM_DIR / "templates"
    dest = target / "templates"
    if not src.exists() or dest.exists():
        return
    try:
        shutil.copytree(src, dest)
    except FileExistsError:
        pass


__all__ = [
    "get_data_dir",
    "ensure_data_dir",
    "resolve_data_path",
    "resolve_data_file",
    "get_system_path",
]
