"""
TileGrid - fixed-size, multi-layer 2D tile map container.

Stores unsigned tile ids per (layer, x, y) with bounds-checked access and a
compact binary persistence format. No rendering, no asset loading, no global
state: the container is the whole library, storage backends are optional.
"""

__version__ = "0.1.0"

from .errors import (
    TileGridError,
    InvalidPosition,
    InvalidLayer,
    WriteError,
    ReadError,
)
from .grid import TileGrid, TilePosition
from .schemas import TileGridState
from .codec import encode_state, decode_state
from .persistence import (
    PersistenceStrategy,
    InMemoryPersistence,
    BinaryPersistence,
    JsonPersistence,
)

__all__ = [
    # Core container
    "TileGrid",
    "TilePosition",
    "TileGridState",
    # Errors
    "TileGridError",
    "InvalidPosition",
    "InvalidLayer",
    "WriteError",
    "ReadError",
    # Binary format
    "encode_state",
    "decode_state",
    # Storage backends
    "PersistenceStrategy",
    "InMemoryPersistence",
    "BinaryPersistence",
    "JsonPersistence",
]
