"""Tests for TileGrid construction, access and stream serialization."""

import io
from dataclasses import dataclass

import pytest

from tilegrid import (
    InvalidLayer,
    InvalidPosition,
    ReadError,
    TileGrid,
    TilePosition,
    WriteError,
)


@dataclass
class Vector2u:
    """Stand-in for a graphics library vector type."""

    x: int
    y: int


def test_new_grid_fills_layers():
    grid = TileGrid((20, 10), 2, 2)

    assert grid.size == (20, 10)
    assert grid.width == 20 and grid.height == 10
    assert grid.layer_count == 2

    state = grid.to_state()
    assert len(state.tiles) == 2
    assert all(len(layer) == 200 for layer in state.tiles)
    assert set(state.tiles[0]) == {2}
    assert set(state.tiles[1]) == {0}


def test_get_and_set_example():
    grid = TileGrid((20, 10), 2, 2)

    assert grid.get_tile((5, 5), 0) == 2
    assert grid.get_tile((20, 5), 0) is None  # x out of bounds

    grid.set_tile((5, 5), 1, 7)
    assert grid.get_tile((5, 5), 1) == 7


def test_get_tile_out_of_bounds_returns_none():
    grid = TileGrid((3, 4), 2, 9)

    assert grid.get_tile((3, 0), 0) is None
    assert grid.get_tile((0, 4), 0) is None
    assert grid.get_tile((-1, 0), 0) is None
    assert grid.get_tile((0, 0), 2) is None
    # negative layers never wrap around like list indexing
    assert grid.get_tile((0, 0), -1) is None


def test_get_tile_initial_values_everywhere():
    grid = TileGrid((4, 3), 3, 5)
    for layer in range(3):
        expected = 5 if layer == 0 else 0
        for y in range(3):
            for x in range(4):
                assert grid.get_tile((x, y), layer) == expected


def test_set_tile_only_touches_one_cell():
    grid = TileGrid((4, 3), 2, 1)
    grid.set_tile((2, 1), 0, 42)

    state = grid.to_state()
    # row-major: index = x + y * width
    assert state.tiles[0][2 + 1 * 4] == 42
    assert state.tiles[0].count(42) == 1
    assert state.tiles[0].count(1) == 11
    assert set(state.tiles[1]) == {0}


def test_set_tile_invalid_position_leaves_grid_unchanged():
    grid = TileGrid((4, 3), 2, 1)
    before = grid.to_state()

    with pytest.raises(InvalidPosition):
        grid.set_tile((4, 0), 0, 9)
    with pytest.raises(InvalidPosition):
        grid.set_tile((0, -1), 0, 9)
    # position is validated before the layer
    with pytest.raises(InvalidPosition):
        grid.set_tile((10, 10), 99, 9)

    assert grid.to_state() == before


def test_set_tile_invalid_layer_leaves_grid_unchanged():
    grid = TileGrid((4, 3), 2, 1)
    before = grid.to_state()

    with pytest.raises(InvalidLayer):
        grid.set_tile((0, 0), 2, 9)
    with pytest.raises(InvalidLayer):
        grid.set_tile((0, 0), -1, 9)

    assert grid.to_state() == before


def test_zero_layer_grid_is_legal():
    grid = TileGrid((5, 5), 0, 3)

    assert grid.layer_count == 0
    assert grid.to_state().tiles == []
    assert grid.get_tile((0, 0), 0) is None
    with pytest.raises(InvalidLayer):
        grid.set_tile((0, 0), 0, 1)


def test_zero_width_grid_has_no_valid_positions():
    grid = TileGrid((0, 5), 2, 3)

    assert grid.to_state().tiles == [[], []]
    assert grid.get_tile((0, 0), 0) is None
    with pytest.raises(InvalidPosition):
        grid.set_tile((0, 0), 0, 1)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        TileGrid((-1, 4), 1, 0)
    with pytest.raises(ValueError):
        TileGrid((1, 4), -1, 0)


def test_position_coercion():
    assert TilePosition.coerce((3, 4)) == TilePosition(3, 4)
    assert TilePosition.coerce([3, 4]) == TilePosition(3, 4)
    assert TilePosition.coerce(Vector2u(3, 4)) == TilePosition(3, 4)
    pos = TilePosition(1, 2)
    assert TilePosition.coerce(pos) is pos
    assert pos.as_tuple() == (1, 2)

    with pytest.raises(TypeError):
        TilePosition.coerce((1.5, 2))
    with pytest.raises(TypeError):
        TilePosition.coerce((1, 2, 3))
    with pytest.raises(TypeError):
        TilePosition.coerce(5)


def test_accessors_accept_vector_like_positions():
    grid = TileGrid(Vector2u(6, 6), 1, 0)
    grid.set_tile(Vector2u(1, 2), 0, 11)

    assert grid.get_tile(TilePosition(1, 2), 0) == 11
    assert grid.get_tile((1, 2), 0) == 11


@pytest.mark.parametrize(
    "size,layers,default",
    [((20, 10), 2, 2), ((1, 1), 1, 0), ((5, 5), 0, 3), ((0, 4), 2, 1), ((4, 0), 3, 1), ((3, 7), 4, 2**32 - 1)],
)
def test_write_read_round_trip(size, layers, default):
    grid = TileGrid(size, layers, default)
    if layers > 1 and size[0] and size[1]:
        grid.set_tile((size[0] - 1, size[1] - 1), layers - 1, 77)

    buffer = io.BytesIO()
    grid.write(buffer)
    buffer.seek(0)
    restored = TileGrid.read(buffer)

    assert restored == grid
    assert restored.size == grid.size
    assert restored.layer_count == grid.layer_count


def test_restored_grid_is_independent():
    grid = TileGrid((3, 3), 2, 1)
    restored = TileGrid.from_bytes(grid.to_bytes())

    restored.set_tile((0, 0), 0, 5)
    assert grid.get_tile((0, 0), 0) == 1
    assert grid != restored


def test_write_rejects_unencodable_tile_without_output():
    grid = TileGrid((2, 2), 1, 0)
    grid.set_tile((1, 1), 0, 2**32)  # accepted here, fails at encode time

    buffer = io.BytesIO()
    with pytest.raises(WriteError):
        grid.write(buffer)
    assert buffer.getvalue() == b""


def test_write_failure_on_stream():
    class BrokenStream:
        def write(self, data):
            raise OSError("disk full")

    with pytest.raises(WriteError):
        TileGrid((2, 2), 1, 0).write(BrokenStream())

    closed = io.BytesIO()
    closed.close()
    with pytest.raises(WriteError):
        TileGrid((2, 2), 1, 0).write(closed)


def test_read_rejects_truncated_and_corrupted_bytes():
    payload = TileGrid((4, 4), 2, 3).to_bytes()

    for cut in (0, 1, 8, 20, len(payload) - 1):
        with pytest.raises(ReadError):
            TileGrid.read(io.BytesIO(payload[:cut]))

    with pytest.raises(ReadError):
        TileGrid.read(io.BytesIO(payload + b"\x00"))


def test_read_rejects_text_streams():
    with pytest.raises(ReadError):
        TileGrid.read(io.StringIO("not binary"))


def test_file_round_trip(tmp_path):
    grid = TileGrid((8, 6), 3, 4)
    grid.set_tile((7, 5), 2, 12)
    path = tmp_path / "world.tmap"

    grid.save(path)
    assert TileGrid.from_file(path) == grid
    assert TileGrid.from_file(str(path)) == grid


def test_from_file_errors(tmp_path):
    with pytest.raises(ReadError):
        TileGrid.from_file(tmp_path / "missing.tmap")

    with pytest.raises(ReadError):
        TileGrid.from_file(tmp_path)  # a directory

    garbage = tmp_path / "garbage.tmap"
    garbage.write_bytes(b"\x01\x02\x03")
    with pytest.raises(ReadError):
        TileGrid.from_file(garbage)


def test_save_into_missing_directory_fails(tmp_path):
    with pytest.raises(WriteError):
        TileGrid((2, 2), 1, 0).save(tmp_path / "nope" / "world.tmap")


def test_equality_and_repr():
    a = TileGrid((3, 2), 2, 1)
    b = TileGrid((3, 2), 2, 1)
    assert a == b
    assert a != TileGrid((2, 3), 2, 1)
    assert a != TileGrid((3, 2), 1, 1)
    assert a != "grid"
    assert repr(a) == "TileGrid(size=(3, 2), layer_count=2)"


class TrickleSink(io.RawIOBase):
    """Raw stream that accepts at most a few bytes per write call."""

    def __init__(self, chunk: int):
        self.chunk = chunk
        self.data = bytearray()

    def writable(self):
        return True

    def write(self, b):
        part = bytes(b[: self.chunk])
        self.data.extend(part)
        return len(part)


def test_write_completes_on_short_writes():
    grid = TileGrid((4, 4), 2, 3)
    sink = TrickleSink(5)

    grid.write(sink)

    assert bytes(sink.data) == grid.to_bytes()
    assert TileGrid.from_bytes(bytes(sink.data)) == grid


def test_write_fails_when_stream_accepts_nothing():
    class StalledSink(io.RawIOBase):
        def writable(self):
            return True

        def write(self, b):
            return None  # non-blocking raw stream with no room

    with pytest.raises(WriteError):
        TileGrid((2, 2), 1, 0).write(StalledSink())


def test_failed_save_keeps_previous_file(tmp_path, monkeypatch):
    path = tmp_path / "world.tmap"
    original = TileGrid((3, 3), 1, 4)
    original.save(path)

    def broken_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr("tilegrid.grid.os.replace", broken_replace)
    with pytest.raises(WriteError):
        TileGrid((5, 5), 2, 9).save(path)

    assert TileGrid.from_file(path) == original
    assert sorted(p.name for p in tmp_path.iterdir()) == ["world.tmap"]


def test_save_replaces_existing_file(tmp_path):
    path = tmp_path / "world.tmap"
    TileGrid((3, 3), 1, 4).save(path)
    replacement = TileGrid((2, 1), 2, 6)

    replacement.save(path)

    assert TileGrid.from_file(path) == replacement
    assert sorted(p.name for p in tmp_path.iterdir()) == ["world.tmap"]
