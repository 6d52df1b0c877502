"""Dense block grid with bounds-checked access."""
from __future__ import annotations

import os
from typing import Iterator, Sequence, Tuple, Union

from circuit.block import Block
from circuit.block_state import BlockState

Coord = Tuple[int, int, int]
PathLike = Union[str, "os.PathLike[str]"]

MAX_DIMENSION = 0xFFFFFFFF


def _check_dimensions(size_xyz: Sequence[int]) -> Coord:
    if len(size_xyz) != 3:
        raise ValueError("size_xyz must contain three integers")
    sx, sy, sz = (int(axis) for axis in size_xyz)
    for axis in (sx, sy, sz):
        if not 0 <= axis <= MAX_DIMENSION:
            raise ValueError("grid dimensions must be unsigned 32-bit integers")
    return sx, sy, sz


class Grid:
    """Dense storage of :class:`Block` cells.

    Cells are stored flat in traversal order: z outermost, then y, then x.
    The same order is used when the grid is written to or read from a file.
    """

    __slots__ = ("x_len", "y_len", "z_len", "_data")

    def __init__(self, size_xyz: Sequence[int] = (0, 0, 0)) -> None:
        self.x_len = 0
        self.y_len = 0
        self.z_len = 0
        self._data: list = []
        self.resize(*_check_dimensions(size_xyz))

    # Internal utilities -------------------------------------------------
    def _index(self, x: int, y: int, z: int) -> int:
        for axis in (x, y, z):
            if not isinstance(axis, int):
                raise TypeError(f"block coordinates must be integers, got {axis!r}")
        if not (0 <= x < self.x_len and 0 <= y < self.y_len and 0 <= z < self.z_len):
            raise IndexError(
                f"block coordinates ({x}, {y}, {z}) out of range for grid "
                f"{self.x_len}x{self.y_len}x{self.z_len}"
            )
        return (z * self.y_len + y) * self.x_len + x

    # API ----------------------------------------------------------------
    def resize(self, x_len: int, y_len: int, z_len: int) -> None:
        """Replace every cell with a fresh ``NonBlock`` grid of the new size."""
        sx, sy, sz = _check_dimensions((x_len, y_len, z_len))
        data = [Block() for _ in range(sx * sy * sz)]
        self._data = data
        self.x_len, self.y_len, self.z_len = sx, sy, sz

    def get(self, x: int, y: int, z: int) -> Block:
        """Return the block at ``(x, y, z)``; it may be mutated in place."""
        return self._data[self._index(x, y, z)]

    def set(self, x: int, y: int, z: int, state: BlockState) -> None:
        self._data[self._index(x, y, z)].set_state(state)

    def iter_cells(self) -> Iterator[Tuple[int, int, int, Block]]:
        """Yield ``(x, y, z, block)`` in traversal order."""
        sx, sy = self.x_len, self.y_len
        for index, block in enumerate(self._data):
            rest, x = divmod(index, sx)
            z, y = divmod(rest, sy)
            yield x, y, z, block

    def states(self) -> Iterator[BlockState]:
        for block in self._data:
            yield block.state

    @property
    def dimensions(self) -> Coord:
        return self.x_len, self.y_len, self.z_len

    @property
    def volume(self) -> int:
        return len(self._data)

    def bounds(self) -> Tuple[Coord, Coord]:
        return (0, 0, 0), (self.x_len - 1, self.y_len - 1, self.z_len - 1)

    # Persistence --------------------------------------------------------
    def write(self, path: PathLike) -> None:
        from persistence.mcrs import write_grid

        write_grid(self, path)

    def read(self, path: PathLike) -> None:
        from persistence.mcrs import read_grid

        read_grid(self, path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.dimensions == other.dimensions and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Grid({self.x_len}x{self.y_len}x{self.z_len})"
