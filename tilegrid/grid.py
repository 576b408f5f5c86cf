"""Fixed-size, multi-layer tile grid.

A ``TileGrid`` owns ``layer_count`` planes of ``width * height`` tile ids.
Each plane is a flat list in row-major order (``index = x + y * width``).
Layer 0 starts filled with the default tile, the remaining layers start empty
(tile id ``0``). Size and layer count are fixed at construction; only
individual tiles change afterwards.

Usage:
    grid = TileGrid((20, 10), layer_count=2, default_tile=2)
    grid.set_tile((5, 5), 1, 7)
    grid.get_tile((5, 5), 1)      # -> 7
    grid.get_tile((20, 5), 0)     # -> None (x out of bounds)

    with open("world.tmap", "wb") as handle:
        grid.write(handle)
    restored = TileGrid.from_file("world.tmap")
"""

from __future__ import annotations

import operator
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, List, Optional, Tuple

from .codec import decode_state, encode_state
from .errors import InvalidLayer, InvalidPosition, ReadError, WriteError
from .schemas import TileGridState


def _write_all(stream: BinaryIO, payload: bytes) -> None:
    """Write every byte of ``payload``, looping over short writes from raw streams."""
    view = memoryview(payload)
    while view:
        written = stream.write(view)
        if not written:
            raise WriteError(
                f"Stream accepted no bytes with {len(view)} of {len(payload)} still pending"
            )
        view = view[written:]


@dataclass(frozen=True)
class TilePosition:
    """An (x, y) tile coordinate."""

    x: int
    y: int

    @classmethod
    def coerce(cls, value: Any) -> "TilePosition":
        """Convert a caller-supplied coordinate into a ``TilePosition``.

        Accepts a ``TilePosition``, a two-item sequence ``(x, y)``, or any
        object exposing ``x`` and ``y`` attributes (graphics library vectors).
        Components must be integers; floats and strings raise ``TypeError``.
        """
        if isinstance(value, cls):
            return value
        if hasattr(value, "x") and hasattr(value, "y"):
            x, y = value.x, value.y
        else:
            try:
                x, y = value
            except (TypeError, ValueError) as exc:
                raise TypeError(
                    f"Expected an (x, y) pair or an object with x/y, got {value!r}"
                ) from exc
        return cls(operator.index(x), operator.index(y))

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


class TileGrid:
    """Layered 2D grid of unsigned tile ids with bounds-checked access."""

    def __init__(self, size: Any, layer_count: int, default_tile: int = 0):
        """Allocate every layer up front.

        Args:
            size: (width, height) in any form ``TilePosition.coerce`` accepts
            layer_count: Number of layers; 0 gives a legal, empty grid
            default_tile: Fill value for layer 0; other layers are filled with 0

        Raises:
            ValueError: If width, height or layer_count is negative
        """
        dims = TilePosition.coerce(size)
        layer_count = operator.index(layer_count)
        if dims.x < 0 or dims.y < 0 or layer_count < 0:
            raise ValueError(
                f"Grid size and layer count must be unsigned: {dims.x}x{dims.y}, {layer_count} layers"
            )

        self._width = dims.x
        self._height = dims.y
        self._layer_count = layer_count

        area = self._width * self._height
        self._tiles: List[List[int]] = [
            [default_tile if layer == 0 else 0] * area for layer in range(layer_count)
        ]

    # -- Accessors -----------------------------------------------------------
    @property
    def size(self) -> Tuple[int, int]:
        """Grid size as (width, height)."""
        return (self._width, self._height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def layer_count(self) -> int:
        return self._layer_count

    def get_tile(self, position: Any, layer: int) -> Optional[int]:
        """Return the tile at ``position`` on ``layer``, or None if either doesn't exist."""
        index = self._compute_index(position)
        if index is None or not 0 <= layer < self._layer_count:
            return None
        return self._tiles[layer][index]

    def set_tile(self, position: Any, layer: int, tile: int) -> None:
        """Overwrite the tile at ``position`` on ``layer``.

        Raises:
            InvalidPosition: If the position is outside the grid (checked first)
            InvalidLayer: If the layer does not exist
        """
        index = self._compute_index(position)
        if index is None:
            raise InvalidPosition(
                f"Position {TilePosition.coerce(position).as_tuple()} is outside "
                f"the {self._width}x{self._height} grid"
            )
        if not 0 <= layer < self._layer_count:
            raise InvalidLayer(f"Layer {layer} does not exist (grid has {self._layer_count})")
        self._tiles[layer][index] = tile

    def _compute_index(self, position: Any) -> Optional[int]:
        pos = TilePosition.coerce(position)
        if not (0 <= pos.x < self._width and 0 <= pos.y < self._height):
            return None
        return pos.x + pos.y * self._width

    # -- Serialization -------------------------------------------------------
    def to_bytes(self) -> bytes:
        """Encode the whole grid (see ``tilegrid.codec`` for the layout).

        Raises:
            WriteError: If a tile id does not fit in an unsigned 32-bit field
        """
        return encode_state(self._width, self._height, self._layer_count, self._tiles)

    @classmethod
    def from_bytes(cls, data: bytes) -> "TileGrid":
        """Decode a grid from bytes produced by :meth:`to_bytes`.

        Raises:
            ReadError: If the bytes are malformed, truncated or inconsistent
        """
        return cls.from_state(decode_state(data))

    def write(self, stream: BinaryIO) -> None:
        """Write the encoded grid to a binary stream.

        The payload is fully encoded before the first byte is written, so an
        encoding failure leaves the stream untouched.

        Raises:
            WriteError: If encoding or the underlying write fails
        """
        payload = self.to_bytes()
        try:
            _write_all(stream, payload)
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            raise WriteError(f"Failed to write tile grid: {exc}") from exc

    @classmethod
    def read(cls, source: BinaryIO) -> "TileGrid":
        """Read the full contents of a binary stream and decode a grid.

        Raises:
            ReadError: If reading fails or the bytes are not a valid grid
        """
        try:
            data = source.read()
        except (OSError, ValueError, AttributeError) as exc:
            raise ReadError(f"Failed to read tile grid: {exc}") from exc
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ReadError(f"Expected a binary stream, got {type(data).__name__} data")
        return cls.from_bytes(data)

    @classmethod
    def from_file(cls, path: Path | str) -> "TileGrid":
        """Open ``path`` and decode the grid it holds.

        Raises:
            ReadError: On any I/O or decode failure
        """
        try:
            with open(path, "rb") as handle:
                return cls.read(handle)
        except OSError as exc:
            raise ReadError(f"Cannot open tile grid file {path}: {exc}") from exc

    def save(self, path: Path | str) -> None:
        """Encode the grid and write it to ``path``, replacing any existing file.

        The payload goes to a temporary file in the same directory first and is
        then moved over ``path``, so a failed save leaves the old file intact.

        Raises:
            WriteError: On any encode or I/O failure
        """
        payload = self.to_bytes()
        target = Path(path)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as handle:
                _write_all(handle, payload)
            os.replace(tmp_name, target)
        except (OSError, WriteError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteError(f"Cannot write tile grid file {path}: {exc}") from exc

    def to_state(self) -> TileGridState:
        return TileGridState(
            width=self._width,
            height=self._height,
            layer_count=self._layer_count,
            tiles=[list(layer) for layer in self._tiles],
        )

    @classmethod
    def from_state(cls, state: TileGridState) -> "TileGrid":
        """Build a grid from a validated snapshot (tiles are copied)."""
        grid = cls((state.width, state.height), 0)
        grid._layer_count = state.layer_count
        grid._tiles = [list(layer) for layer in state.tiles]
        return grid

    # -- Dunder helpers ------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return (
            self.size == other.size
            and self._layer_count == other._layer_count
            and self._tiles == other._tiles
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"TileGrid(size={self.size}, layer_count={self._layer_count})"
