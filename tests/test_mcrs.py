import struct
import sys

from circuit.block_state import (
    BlockEntity,
    Comparator,
    NonBlock,
    Opaque,
    PistonBase,
    PistonHead,
    Redstone,
    Repeater,
    Torch,
    Transparent,
)
from circuit.direction import Direction, DirectionSet
from circuit.grid import Grid
from circuit.power import PowerState
from common.errors import (
    InvalidBooleanError,
    InvalidMagicError,
    InvalidVariantTagError,
    UnexpectedEndOfDataError,
)
from persistence.mcrs import (
    HEADER_SIZE,
    MAGIC,
    decode_grid,
    encode_grid,
    load_grid,
    read_grid,
    read_header,
    write_grid,
)

import pytest


def _dims(x, y, z):
    return b"".join(n.to_bytes(4, sys.byteorder) for n in (x, y, z))


def _mixed_grid():
    grid = Grid((4, 4, 6))
    directions = list(Direction)
    states = []
    for bits in range(64):
        states.append(Redstone(power=bits * 4, dirs=DirectionSet.from_byte(bits)))
    states.extend([
        Redstone(power=255, dirs=DirectionSet.all()),
        Torch(activated=True, direction=Direction.UP),
        Repeater(delay=255, activated=True, locked=True, direction=Direction.BACKWARD),
        Comparator(power=0, subtract_mode=True, direction=Direction.LEFT),
        PistonBase(activated=True, direction=Direction.DOWN),
        PistonHead(sticky=False, direction=Direction.RIGHT),
        BlockEntity(power=128),
        Transparent(),
        NonBlock(),
    ])
    for power_state in PowerState:
        states.append(Opaque(power_state=power_state, color=int(power_state) * 100))
    for direction in directions:
        states.append(Torch(activated=False, direction=direction))
    assert len(states) <= grid.volume
    for (_x, _y, _z, block), state in zip(grid.iter_cells(), states):
        block.set_state(state)
    return grid


def test_single_transparent_block_file_layout(tmp_path):
    grid = Grid((1, 1, 1))
    grid.set(0, 0, 0, Transparent())
    path = tmp_path / "one.mcrs"
    write_grid(grid, path)

    data = path.read_bytes()
    assert len(data) == 17
    assert data == b"mcrs" + _dims(1, 1, 1) + bytes([Transparent.TAG])

    loaded = Grid()
    read_grid(loaded, path)
    assert loaded.dimensions == (1, 1, 1)
    assert loaded.get(0, 0, 0).state == Transparent()


def test_mixed_grid_round_trip(tmp_path):
    grid = _mixed_grid()
    path = tmp_path / "mixed.mcrs"
    grid.write(path)

    loaded = Grid((9, 9, 9))
    loaded.read(path)
    assert loaded == grid
    assert [s for s in loaded.states()] == [s for s in grid.states()]


def test_records_follow_traversal_order():
    grid = Grid((2, 1, 2))
    grid.set(1, 0, 0, Transparent())
    grid.set(0, 0, 1, BlockEntity(power=7))
    data = encode_grid(grid)
    assert data[HEADER_SIZE:] == bytes([
        NonBlock.TAG,
        Transparent.TAG,
        BlockEntity.TAG, 7,
        NonBlock.TAG,
    ])


def test_header_dimensions_are_native_u32():
    grid = Grid((3, 70000, 0))
    data = encode_grid(grid)
    assert data[:4] == MAGIC
    assert struct.unpack("=3I", data[4:16]) == (3, 70000, 0)
    assert read_header(data) == (3, 70000, 0)


def test_empty_grid_round_trip():
    loaded = Grid((2, 2, 2))
    decode_grid(encode_grid(Grid()), loaded)
    assert loaded.dimensions == (0, 0, 0)


def test_bad_magic_leaves_grid_untouched(tmp_path):
    path = tmp_path / "bad.mcrs"
    path.write_bytes(b"mcrx" + _dims(1, 1, 1) + bytes([Transparent.TAG]))
    grid = Grid((2, 3, 4))
    grid.set(1, 1, 1, Transparent())
    with pytest.raises(InvalidMagicError):
        read_grid(grid, path)
    assert grid.dimensions == (2, 3, 4)
    assert grid.get(1, 1, 1).state == Transparent()


def test_empty_file_is_not_mcrs():
    with pytest.raises(InvalidMagicError):
        decode_grid(b"", Grid())


def test_truncated_header():
    with pytest.raises(UnexpectedEndOfDataError):
        decode_grid(MAGIC + b"\x01\x00", Grid())


def test_record_cut_short():
    # Repeater needs four payload bytes; only two follow.
    data = MAGIC + _dims(1, 1, 1) + bytes([Repeater.TAG, 1, 0])
    grid = Grid()
    with pytest.raises(UnexpectedEndOfDataError):
        decode_grid(data, grid)
    assert grid.dimensions == (0, 0, 0)


def test_too_few_records():
    data = MAGIC + _dims(2, 1, 1) + bytes([Transparent.TAG])
    with pytest.raises(UnexpectedEndOfDataError):
        decode_grid(data, Grid())


def test_cursor_runs_out_after_long_records():
    data = MAGIC + _dims(3, 1, 1) + bytes([BlockEntity.TAG, 1, BlockEntity.TAG, 2])
    with pytest.raises(UnexpectedEndOfDataError) as excinfo:
        decode_grid(data, Grid())
    assert excinfo.value.offset == len(data)


def test_huge_dimensions_rejected_without_allocating():
    data = MAGIC + _dims(0xFFFFFFFF, 0xFFFFFFFF, 2) + bytes([NonBlock.TAG])
    with pytest.raises(UnexpectedEndOfDataError):
        decode_grid(data, Grid())


def test_bad_record_propagates_and_keeps_grid():
    data = MAGIC + _dims(2, 1, 1) + bytes([Transparent.TAG, 42])
    grid = Grid((1, 1, 1))
    with pytest.raises(InvalidVariantTagError) as excinfo:
        decode_grid(data, grid)
    assert excinfo.value.offset == HEADER_SIZE + 1
    assert grid.dimensions == (1, 1, 1)

    data = MAGIC + _dims(1, 1, 1) + bytes([Torch.TAG, 7, Direction.UP.value])
    with pytest.raises(InvalidBooleanError):
        decode_grid(data, grid)


def test_trailing_bytes_ignored():
    data = MAGIC + _dims(1, 1, 1) + bytes([BlockEntity.TAG, 9, 0xFF, 0xFF])
    grid = Grid()
    decode_grid(data, grid)
    assert grid.get(0, 0, 0).state == BlockEntity(power=9)


def test_missing_file_raises_os_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_grid(tmp_path / "missing.mcrs")


def test_write_into_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        write_grid(Grid((1, 1, 1)), tmp_path / "nope" / "out.mcrs")


def test_load_grid_returns_new_grid(tmp_path):
    grid = _mixed_grid()
    path = tmp_path / "load.mcrs"
    write_grid(grid, str(path))
    assert load_grid(str(path)) == grid


def test_zero_width_grid_with_huge_other_axes(tmp_path):
    data = MAGIC + _dims(0, 0xFFFFFFFF, 0xFFFFFFFF)
    grid = Grid((1, 1, 1))
    decode_grid(data, grid)
    assert grid.dimensions == (0, 0xFFFFFFFF, 0xFFFFFFFF)
    assert grid.volume == 0
    assert encode_grid(grid) == data

    path = tmp_path / "flat.mcrs"
    write_grid(grid, path)
    assert path.read_bytes() == data
    assert load_grid(path).dimensions == (0, 0xFFFFFFFF, 0xFFFFFFFF)
