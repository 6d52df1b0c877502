"""Orientation flags and combinable direction sets."""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator

from common.errors import InvalidDirectionError, InvalidDirectionSetError


class Direction(Enum):
    UP = 0x01
    DOWN = 0x02
    LEFT = 0x04
    RIGHT = 0x08
    FORWARD = 0x10
    BACKWARD = 0x20

    @classmethod
    def from_byte(cls, value: int) -> "Direction":
        """Return the direction whose bit is exactly ``value``."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidDirectionError(
                f"{value:#04x} is not a single direction bit"
            ) from None

    def to_byte(self) -> int:
        return self.value


ALL_DIRECTION_BITS = sum(d.value for d in Direction)


class DirectionSet:
    """Immutable set of :class:`Direction` flags, stored as a bitmask."""

    __slots__ = ("_bits",)

    def __init__(self, directions: Iterable[Direction] = ()) -> None:
        bits = 0
        for direction in directions:
            if not isinstance(direction, Direction):
                raise TypeError(f"expected Direction, got {direction!r}")
            bits |= direction.value
        self._bits = bits

    @classmethod
    def from_byte(cls, value: int) -> "DirectionSet":
        if not 0 <= value <= 0xFF or value & ~ALL_DIRECTION_BITS:
            raise InvalidDirectionSetError(
                f"{value:#04x} has bits outside the six direction flags"
            )
        return cls(d for d in Direction if value & d.value)

    @classmethod
    def all(cls) -> "DirectionSet":
        return cls(Direction)

    def to_byte(self) -> int:
        return self._bits

    # Set protocol -------------------------------------------------------
    def __contains__(self, direction: object) -> bool:
        return isinstance(direction, Direction) and bool(self._bits & direction.value)

    def __iter__(self) -> Iterator[Direction]:
        for direction in Direction:
            if self._bits & direction.value:
                yield direction

    def __len__(self) -> int:
        return bin(self._bits).count("1")

    def __bool__(self) -> bool:
        return self._bits != 0

    def __or__(self, other: "DirectionSet") -> "DirectionSet":
        if not isinstance(other, DirectionSet):
            return NotImplemented
        return DirectionSet.from_byte(self._bits | other._bits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectionSet):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self) -> int:
        return hash((DirectionSet, self._bits))

    def __repr__(self) -> str:
        names = ", ".join(d.name for d in self)
        return f"DirectionSet({{{names}}})"
