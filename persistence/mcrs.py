"""Reading and writing grids in the ``.mcrs`` file format.

Layout::

    bytes 0..4    b"mcrs"
    bytes 4..16   x_len, y_len, z_len as unsigned 32-bit ints (native byte order)
    bytes 16..    one block record per cell, z outermost, then y, then x

Records are concatenated with no delimiters; see :mod:`persistence.codec`.
Bytes after the last record are ignored.
"""
from __future__ import annotations

import logging
import os
import struct
from typing import Iterator, List, Tuple, Union

from circuit.block_state import BlockState
from circuit.grid import Grid
from common.errors import InvalidMagicError, UnexpectedEndOfDataError
from engine.config import get as engine_config_get
from persistence.codec import decode_block_state, encode_block_state

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

MAGIC = b"mcrs"
HEADER_SIZE = len(MAGIC) + 12

_BYTE_ORDERS = {
    "native": "=",
    "little": "<",
    "big": ">",
}


def _dimension_struct() -> struct.Struct:
    order = engine_config_get("mcrs.byte_order", "native")
    prefix = _BYTE_ORDERS.get(order)
    if prefix is None:
        raise ValueError(f"mcrs.byte_order must be one of {sorted(_BYTE_ORDERS)}, got {order!r}")
    return struct.Struct(prefix + "3I")


def _buffer_size() -> int:
    size = int(engine_config_get("mcrs.write_buffer_size", 65536))
    return size if size > 0 else -1


# Writing -----------------------------------------------------------------
def encode_header(grid: Grid) -> bytes:
    return MAGIC + _dimension_struct().pack(grid.x_len, grid.y_len, grid.z_len)


def iter_records(grid: Grid) -> Iterator[bytes]:
    for _x, _y, _z, block in grid.iter_cells():
        yield encode_block_state(block.state)


def encode_grid(grid: Grid) -> bytes:
    return encode_header(grid) + b"".join(iter_records(grid))


def write_grid(grid: Grid, path: PathLike) -> None:
    """Write ``grid`` to ``path``. I/O errors propagate unchanged."""
    with open(path, "wb", buffering=_buffer_size()) as handle:
        handle.write(encode_header(grid))
        for record in iter_records(grid):
            handle.write(record)
    logger.debug("wrote %s grid (%d cells) to %s", grid, grid.volume, path)


# Reading -----------------------------------------------------------------
def read_header(buffer: bytes) -> Tuple[int, int, int]:
    """Validate the magic and return ``(x_len, y_len, z_len)``."""
    if buffer[: len(MAGIC)] != MAGIC:
        raise InvalidMagicError(f"expected {MAGIC!r}, found {bytes(buffer[: len(MAGIC)])!r}", 0)
    if len(buffer) < HEADER_SIZE:
        raise UnexpectedEndOfDataError(
            f"header needs {HEADER_SIZE} bytes, file has {len(buffer)}", len(buffer)
        )
    x_len, y_len, z_len = _dimension_struct().unpack_from(buffer, len(MAGIC))
    return x_len, y_len, z_len


def _decode_records(buffer: bytes, count: int) -> Tuple[List[BlockState], int]:
    states: List[BlockState] = []
    cursor = HEADER_SIZE
    for cell in range(count):
        if cursor >= len(buffer):
            raise UnexpectedEndOfDataError(
                f"data ended after {cell} of {count} cells", cursor
            )
        state, consumed = decode_block_state(buffer, cursor)
        states.append(state)
        cursor += consumed
    return states, cursor


def decode_grid(buffer: bytes, grid: Grid) -> None:
    """Load ``buffer`` into ``grid``.

    The grid is resized and filled only after every record has decoded, so
    on failure it keeps its previous dimensions and contents.
    """
    x_len, y_len, z_len = read_header(buffer)
    count = x_len * y_len * z_len
    logger.debug("mcrs header: %dx%dx%d (%d cells)", x_len, y_len, z_len, count)

    # Each record is at least one byte; reject before allocating anything.
    available = len(buffer) - HEADER_SIZE
    if available < count:
        raise UnexpectedEndOfDataError(
            f"{count} cells need at least {count} bytes, only {available} present",
            len(buffer),
        )

    states, cursor = _decode_records(buffer, count)
    trailing = len(buffer) - cursor
    if trailing:
        logger.debug("ignoring %d trailing bytes after last record", trailing)

    grid.resize(x_len, y_len, z_len)
    for state, (_x, _y, _z, block) in zip(states, grid.iter_cells()):
        block.set_state(state)


def read_grid(grid: Grid, path: PathLike) -> None:
    """Replace ``grid`` with the contents of the file at ``path``."""
    with open(path, "rb") as handle:
        buffer = handle.read()
    decode_grid(buffer, grid)
    logger.debug("read %s grid from %s", grid, path)


def load_grid(path: PathLike) -> Grid:
    grid = Grid()
    read_grid(grid, path)
    return grid
