"""
Command context for shared initialization across CLI commands.

Loads and validates the configuration once and resolves which post files a
command should work on.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..processors.post_loader import load_posts
from .config import ConfigManager
from .models import Post

logger = logging.getLogger(__name__)


class CommandContext:
    """Encapsulates shared initialization logic for CLI commands.

    Example:
        ```python
        ctx = CommandContext(config_path)
        for post in ctx.load_posts(paths):
            ...
        ```
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initialize command context with a validated config.

        Raises:
            ValueError: If configuration is invalid
        """
        self.config_manager = ConfigManager(config_path)

        if not self.config_manager.validate_config():
            raise ValueError("Invalid configuration. Run 'blogsmith status' for details.")

        self.config = self.config_manager.load_config()
        logger.debug(f"CommandContext initialized with config from {self.config_manager.config_path}")

    def section(self, name: str) -> Dict[str, Any]:
        return self.config_manager.get_section(name)

    def resolve_paths(self, paths: Optional[Sequence[str]] = None) -> List[Path]:
        """Explicit paths win; otherwise the configured posts directory."""
        if paths:
            return [Path(p) for p in paths]
        return [self.config_manager.get_posts_dir()]

    def load_posts(self, paths: Optional[Sequence[str]] = None) -> List[Post]:
        return load_posts(self.resolve_paths(paths), self.config_manager.get_post_patterns())

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit; nothing is held open between calls."""
        pass
