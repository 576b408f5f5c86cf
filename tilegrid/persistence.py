"""
PersistenceStrategy interface for pluggable tile grid storage.

Grids are stored by name. Three implementations are included:
1. InMemoryPersistence - Dict of encoded payloads, lost on exit (testing, tools)
2. BinaryPersistence - One binary file per grid using the tilegrid codec
3. JsonPersistence - One human-readable JSON snapshot per grid

All backends are synchronous; the underlying operations are small CPU-bound
encodes plus a single file read or write.

Usage pattern:
    store = BinaryPersistence("maps")
    store.save_grid("overworld", grid)
    grid = store.get_grid("overworld")
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from .config import Config
from .errors import ReadError, WriteError
from .grid import TileGrid
from .logging_utils import (
    EMOJI_DEBUG,
    EMOJI_ERROR,
    EMOJI_SUCCESS,
    log_debug,
    log_error,
    log_success,
)
from .schemas import TileGridState


def validate_grid_name(name: str) -> str:
    """Reject names that can't be used as a single file stem."""
    if not name or not name.strip():
        raise ValueError("Grid name must be a non-empty string")
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"Grid name {name!r} must not contain path separators")
    return name


class PersistenceStrategy(ABC):
    """Abstract base class for tile grid storage.

    Method categories:
    1. Save: save_grid()
    2. Load: get_grid(), list_grids()
    3. Remove: delete_grid()

    Failures surface as the tilegrid error types: WriteError when a grid
    cannot be stored, ReadError when a stored grid cannot be loaded.
    """

    @abstractmethod
    def save_grid(self, name: str, grid: TileGrid) -> None:
        """
        Store a grid under ``name``, replacing any previous grid of that name.

        Args:
            name: Grid name (no path separators)
            grid: Grid to store

        Raises:
            WriteError: If the grid cannot be encoded or stored
        """
        pass

    @abstractmethod
    def get_grid(self, name: str) -> Optional[TileGrid]:
        """
        Load the grid stored under ``name``.

        Returns:
            A fresh TileGrid if found, None otherwise

        Raises:
            ReadError: If the stored data cannot be decoded
        """
        pass

    @abstractmethod
    def delete_grid(self, name: str) -> None:
        """Remove the grid stored under ``name``. Safe to call if absent."""
        pass

    @abstractmethod
    def list_grids(self) -> List[str]:
        """Return the names of all stored grids, sorted."""
        pass


class InMemoryPersistence(PersistenceStrategy):
    """In-memory persistence using a dict of encoded payloads.

    Grids are stored encoded, so later changes to a live grid never leak into
    the stored copy and every load returns an independent grid.
    """

    def __init__(self):
        self.grids: Dict[str, bytes] = {}

    def save_grid(self, name: str, grid: TileGrid) -> None:
        self.grids[validate_grid_name(name)] = grid.to_bytes()

    def get_grid(self, name: str) -> Optional[TileGrid]:
        payload = self.grids.get(validate_grid_name(name))
        if payload is None:
            return None
        return TileGrid.from_bytes(payload)

    def delete_grid(self, name: str) -> None:
        self.grids.pop(validate_grid_name(name), None)

    def list_grids(self) -> List[str]:
        return sorted(self.grids)


class BinaryPersistence(PersistenceStrategy):
    """File-based persistence using the binary tile grid format.

    Directory structure:
    ```
    {base_path}/
      overworld.tmap
      dungeon_01.tmap
    ```

    The suffix comes from ``Config.MAP_SUFFIX``. Each file is exactly what
    ``TileGrid.write`` produces, so files can also be opened directly with
    ``TileGrid.from_file``.
    """

    def __init__(self, base_path: Path | str | None = None, suffix: str | None = None):
        Config.validate()
        self.base_path = Path(base_path) if base_path is not None else Config.MAPS_DIR
        self.suffix = suffix or Config.MAP_SUFFIX

    def save_grid(self, name: str, grid: TileGrid) -> None:
        path = self._path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            log_error(f"{EMOJI_ERROR} Cannot create {path.parent}: {exc}")
            raise WriteError(f"Cannot create map directory {path.parent}: {exc}") from exc
        grid.save(path)
        log_success(f"{EMOJI_SUCCESS} Saved {name} {grid.size} x{grid.layer_count} → {path}")

    def get_grid(self, name: str) -> Optional[TileGrid]:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            grid = TileGrid.from_file(path)
        except ReadError as exc:
            log_error(f"{EMOJI_ERROR} Failed to load {path}: {exc}")
            raise
        log_debug(f"{EMOJI_DEBUG} Loaded {name} from {path}")
        return grid

    def delete_grid(self, name: str) -> None:
        path = self._path(name)
        if path.exists():
            path.unlink()

    def list_grids(self) -> List[str]:
        if not self.base_path.exists():
            return []
        size = len(self.suffix)
        return sorted(
            path.name[:-size] for path in self.base_path.glob(f"*{self.suffix}") if path.is_file()
        )

    def _path(self, name: str) -> Path:
        return self.base_path / f"{validate_grid_name(name)}{self.suffix}"


class JsonPersistence(PersistenceStrategy):
    """File-based persistence using JSON snapshots for human-readable storage.

    Each grid is stored as ``{base_path}/{name}.json`` holding a
    ``TileGridState`` dump (indent=2). Handy for debugging and diffing small
    maps; binary storage is far more compact for large ones.
    """

    def __init__(self, base_path: Path | str | None = None):
        Config.validate()
        self.base_path = Path(base_path) if base_path is not None else Config.MAPS_DIR

    def save_grid(self, name: str, grid: TileGrid) -> None:
        path = self._path(name)
        try:
            payload = grid.to_state().model_dump(mode="json")
        except ValidationError as exc:
            raise WriteError(f"Tile grid {name!r} cannot be snapshotted: {exc}") from exc
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2), "utf-8")
        except OSError as exc:
            log_error(f"{EMOJI_ERROR} Failed to save {path}: {exc}")
            raise WriteError(f"Cannot write tile grid snapshot {path}: {exc}") from exc
        log_success(f"{EMOJI_SUCCESS} Saved {name} {grid.size} x{grid.layer_count} → {path}")

    def get_grid(self, name: str) -> Optional[TileGrid]:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            state = TileGridState.model_validate_json(path.read_text("utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            log_error(f"{EMOJI_ERROR} Failed to load {path}: {exc}")
            raise ReadError(f"Invalid tile grid snapshot {path}: {exc}") from exc
        log_debug(f"{EMOJI_DEBUG} Loaded {name} from {path}")
        return TileGrid.from_state(state)

    def delete_grid(self, name: str) -> None:
        path = self._path(name)
        if path.exists():
            path.unlink()

    def list_grids(self) -> List[str]:
        if not self.base_path.exists():
            return []
        return sorted(path.stem for path in self.base_path.glob("*.json"))

    def _path(self, name: str) -> Path:
        return self.base_path / f"{validate_grid_name(name)}.json"
