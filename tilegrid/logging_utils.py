"""Logging utilities for TileGrid.

Provides color-coded console output for storage operations.
"""

import os
from enum import Enum

from .config import Config, LOG_LEVELS


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Debug detail
    RED = "\033[91m"       # Errors
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if TILEGRID_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("TILEGRID_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def _enabled(level: str) -> bool:
    """Compare ``level`` against Config.LOG_LEVEL.

    File-backed stores reject an unknown LOG_LEVEL via ``Config.validate()``;
    direct calls here treat an unknown level as INFO.
    """
    threshold = Config.LOG_LEVEL if Config.LOG_LEVEL in LOG_LEVELS else "INFO"
    return LOG_LEVELS.index(level) >= LOG_LEVELS.index(threshold)


def log_debug(message: str) -> None:
    """Log low-level detail (blue)."""
    if _enabled("DEBUG"):
        print(colored(message, Color.BLUE))


def log_error(message: str) -> None:
    """Log an error (red)."""
    if _enabled("ERROR"):
        print(colored(message, Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    if _enabled("INFO"):
        print(colored(message, Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    if _enabled("INFO"):
        print(colored(message, Color.CYAN))


# Markers for message types (color-blind accessible)
EMOJI_DEBUG = "[•]"
EMOJI_ERROR = "[!]"
EMOJI_SUCCESS = "[✓]"
