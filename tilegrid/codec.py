"""Binary encoding for tile grids.

Layout (all integers little-endian, fixed width):

```
u64               number of layers
  u64             tile count of layer 0
  u32 * count     tile ids of layer 0, row-major (x varies fastest)
  ...             repeated for each remaining layer
u32               width
u32               height
u32               layer_count
```

This is the layout bincode's default configuration produces for a struct of
``tiles: Vec<Vec<u32>>``, ``size: (u32, u32)`` and ``layer_count: u32``, so
files written by earlier map tooling load unchanged.

Decoding is strict. The payload must be consumed exactly, length prefixes are
checked against the remaining bytes before anything is allocated, and the
result is validated through :class:`TileGridState` so the grid invariants
hold for everything that comes out of :func:`decode_state`.
"""

from __future__ import annotations

import struct
from typing import Sequence

from pydantic import ValidationError

from .errors import ReadError, WriteError
from .schemas import TileGridState

_U64 = struct.Struct("<Q")
_U32 = struct.Struct("<I")
_FOOTER = struct.Struct("<III")  # width, height, layer_count
_TILE_SIZE = 4


def encode_state(
    width: int, height: int, layer_count: int, tiles: Sequence[Sequence[int]]
) -> bytes:
    """Encode grid parts into a single payload.

    Raises:
        WriteError: If any size, count or tile id does not fit its field.
    """
    try:
        chunks = [_U64.pack(len(tiles))]
        for layer in tiles:
            chunks.append(_U64.pack(len(layer)))
            chunks.append(struct.pack(f"<{len(layer)}I", *layer))
        chunks.append(_FOOTER.pack(width, height, layer_count))
    except struct.error as exc:
        raise WriteError(f"Tile grid cannot be encoded: {exc}") from exc
    return b"".join(chunks)


class _Reader:
    """Cursor over a payload that raises ReadError instead of overrunning it."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def take(self, fmt: struct.Struct) -> tuple:
        if self.remaining < fmt.size:
            raise ReadError(
                f"Truncated tile grid: needed {fmt.size} bytes at offset {self.offset}, "
                f"{self.remaining} left"
            )
        values = fmt.unpack_from(self.data, self.offset)
        self.offset += fmt.size
        return values

    def take_tiles(self, count: int) -> list[int]:
        if count * _TILE_SIZE > self.remaining:
            raise ReadError(
                f"Truncated tile grid: layer claims {count} tiles but only "
                f"{self.remaining} bytes remain"
            )
        values = list(struct.unpack_from(f"<{count}I", self.data, self.offset))
        self.offset += count * _TILE_SIZE
        return values


def decode_state(data: bytes) -> TileGridState:
    """Decode a payload produced by :func:`encode_state`.

    Raises:
        ReadError: If the payload is truncated, has trailing bytes, or
            describes a grid that violates its own size or layer count.
    """
    reader = _Reader(bytes(data))
    (layer_total,) = reader.take(_U64)
    # every layer needs at least its own length prefix
    if layer_total * _U64.size > reader.remaining:
        raise ReadError(
            f"Truncated tile grid: {layer_total} layers declared but only "
            f"{reader.remaining} bytes remain"
        )
    tiles = []
    for _ in range(layer_total):
        (count,) = reader.take(_U64)
        tiles.append(reader.take_tiles(count))
    width, height, layer_count = reader.take(_FOOTER)
    if reader.remaining:
        raise ReadError(f"Tile grid payload has {reader.remaining} trailing bytes")

    try:
        return TileGridState(width=width, height=height, layer_count=layer_count, tiles=tiles)
    except ValidationError as exc:
        raise ReadError(f"Decoded tile grid is inconsistent: {exc}") from exc
