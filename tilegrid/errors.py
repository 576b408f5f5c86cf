"""Exception taxonomy for tile grid operations.

Every failure raised by ``tilegrid`` derives from :class:`TileGridError`, so
callers that only care about "did it work" can catch a single type:

- InvalidPosition - a coordinate falls outside ``[0, width) x [0, height)``
- InvalidLayer    - a layer index falls outside ``[0, layer_count)``
- WriteError      - encoding the grid or writing the bytes failed
- ReadError       - reading the bytes or decoding them failed

Position and layer errors never leave the grid modified. Read and write errors
never produce partial results (no half-built grid, no half-encoded payload).
"""


class TileGridError(Exception):
    """Base class for all tile grid errors."""


class InvalidPosition(TileGridError):
    """Raised when a coordinate lies outside the grid."""


class InvalidLayer(TileGridError):
    """Raised when a layer index does not name a stored layer."""


class WriteError(TileGridError):
    """Raised when a grid cannot be serialized or written out."""


class ReadError(TileGridError):
    """Raised when a grid cannot be read back or its bytes are malformed."""
