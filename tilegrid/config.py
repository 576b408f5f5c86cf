"""
TileGrid Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "ERROR")


class Config:
    """Library configuration loaded from environment variables."""

    # Storage
    MAPS_DIR: Path = Path(os.getenv("TILEGRID_MAPS_DIR", "maps"))
    MAP_SUFFIX: str = os.getenv("TILEGRID_MAP_SUFFIX", ".tmap")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are unusable."""
        if not cls.MAP_SUFFIX.startswith(".") or len(cls.MAP_SUFFIX) < 2:
            raise ValueError(
                f"TILEGRID_MAP_SUFFIX must look like a file extension (e.g. '.tmap'), "
                f"got {cls.MAP_SUFFIX!r}"
            )
        if cls.MAP_SUFFIX == ".json":
            raise ValueError("TILEGRID_MAP_SUFFIX cannot be '.json' (reserved for JSON snapshots)")

        if cls.LOG_LEVEL not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {cls.LOG_LEVEL!r}"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "TileGrid Configuration:",
            f"  Maps Directory: {cls.MAPS_DIR}",
            f"  Map Suffix: {cls.MAP_SUFFIX}",
            f"  Log Level: {cls.LOG_LEVEL}",
        ]
        return "\n".join(lines)
