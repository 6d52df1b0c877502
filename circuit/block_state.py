"""The closed set of block states a grid cell can hold.

Every variant declares its tag byte and the ordered layout of its fields.
The codec in :mod:`persistence.codec` interprets that layout for both
encoding and decoding, so the on-disk shape of a variant is defined here
and nowhere else.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar, Dict, Tuple, Type, Union

from circuit.direction import Direction, DirectionSet
from circuit.power import PowerState
from common.errors import InvalidVariantTagError


class FieldKind(Enum):
    """Wire shape of a single payload field. Every kind occupies one byte."""

    U8 = "u8"
    BOOL = "bool"
    DIRECTION = "direction"
    DIRECTION_SET = "direction_set"
    POWER_STATE = "power_state"


Layout = Tuple[Tuple[str, FieldKind], ...]

_FIELD_TYPES: Dict[FieldKind, type] = {
    FieldKind.U8: int,
    FieldKind.BOOL: bool,
    FieldKind.DIRECTION: Direction,
    FieldKind.DIRECTION_SET: DirectionSet,
    FieldKind.POWER_STATE: PowerState,
}


class _Variant:
    TAG: ClassVar[int]
    LAYOUT: ClassVar[Layout] = ()

    def __post_init__(self) -> None:
        for name, kind in self.LAYOUT:
            value = getattr(self, name)
            expected = _FIELD_TYPES[kind]
            # bool is an int subclass; keep the two kinds apart.
            if kind is FieldKind.U8 and isinstance(value, bool):
                raise TypeError(f"{type(self).__name__}.{name} must be an int, got bool")
            if not isinstance(value, expected):
                raise TypeError(
                    f"{type(self).__name__}.{name} must be {expected.__name__}, got {value!r}"
                )
            if kind is FieldKind.U8 and not 0 <= value <= 0xFF:
                raise ValueError(f"{type(self).__name__}.{name} must fit in a byte, got {value}")


@dataclass(frozen=True)
class Redstone(_Variant):
    """Redstone wire with a power level and the directions it connects to."""

    TAG: ClassVar[int] = 0
    LAYOUT: ClassVar[Layout] = (
        ("power", FieldKind.U8),
        ("dirs", FieldKind.DIRECTION_SET),
    )

    power: int = 0
    dirs: DirectionSet = field(default_factory=DirectionSet)


@dataclass(frozen=True)
class Torch(_Variant):
    TAG: ClassVar[int] = 1
    LAYOUT: ClassVar[Layout] = (
        ("activated", FieldKind.BOOL),
        ("direction", FieldKind.DIRECTION),
    )

    activated: bool = False
    direction: Direction = Direction.UP


@dataclass(frozen=True)
class Repeater(_Variant):
    TAG: ClassVar[int] = 2
    LAYOUT: ClassVar[Layout] = (
        ("delay", FieldKind.U8),
        ("activated", FieldKind.BOOL),
        ("locked", FieldKind.BOOL),
        ("direction", FieldKind.DIRECTION),
    )

    delay: int = 1
    activated: bool = False
    locked: bool = False
    direction: Direction = Direction.FORWARD


@dataclass(frozen=True)
class Comparator(_Variant):
    """Comparator; ``subtract_mode`` selects subtraction over comparison."""

    TAG: ClassVar[int] = 3
    LAYOUT: ClassVar[Layout] = (
        ("power", FieldKind.U8),
        ("subtract_mode", FieldKind.BOOL),
        ("direction", FieldKind.DIRECTION),
    )

    power: int = 0
    subtract_mode: bool = False
    direction: Direction = Direction.FORWARD


@dataclass(frozen=True)
class PistonBase(_Variant):
    TAG: ClassVar[int] = 4
    LAYOUT: ClassVar[Layout] = (
        ("activated", FieldKind.BOOL),
        ("direction", FieldKind.DIRECTION),
    )

    activated: bool = False
    direction: Direction = Direction.UP


@dataclass(frozen=True)
class PistonHead(_Variant):
    TAG: ClassVar[int] = 5
    LAYOUT: ClassVar[Layout] = (
        ("sticky", FieldKind.BOOL),
        ("direction", FieldKind.DIRECTION),
    )

    sticky: bool = False
    direction: Direction = Direction.UP


@dataclass(frozen=True)
class Opaque(_Variant):
    """Solid block with a redstone power state and a color index."""

    TAG: ClassVar[int] = 6
    LAYOUT: ClassVar[Layout] = (
        ("power_state", FieldKind.POWER_STATE),
        ("color", FieldKind.U8),
    )

    power_state: PowerState = PowerState.OFF
    color: int = 0


@dataclass(frozen=True)
class BlockEntity(_Variant):
    TAG: ClassVar[int] = 7
    LAYOUT: ClassVar[Layout] = (("power", FieldKind.U8),)

    power: int = 0


@dataclass(frozen=True)
class Transparent(_Variant):
    TAG: ClassVar[int] = 8


@dataclass(frozen=True)
class NonBlock(_Variant):
    """Empty cell."""

    TAG: ClassVar[int] = 9


BlockState = Union[
    Redstone,
    Torch,
    Repeater,
    Comparator,
    PistonBase,
    PistonHead,
    Opaque,
    BlockEntity,
    Transparent,
    NonBlock,
]

VARIANTS: Tuple[Type[_Variant], ...] = (
    Redstone,
    Torch,
    Repeater,
    Comparator,
    PistonBase,
    PistonHead,
    Opaque,
    BlockEntity,
    Transparent,
    NonBlock,
)


def _check_registry() -> None:
    for index, variant in enumerate(VARIANTS):
        if variant.TAG != index:
            raise AssertionError(f"{variant.__name__} has tag {variant.TAG}, expected {index}")
        declared = {f.name for f in fields(variant)}
        laid_out = [name for name, _ in variant.LAYOUT]
        if sorted(laid_out) != sorted(declared):
            raise AssertionError(f"{variant.__name__} layout does not cover its fields")


_check_registry()


def variant_for_tag(tag: int) -> Type[_Variant]:
    if not 0 <= tag < len(VARIANTS):
        raise InvalidVariantTagError(f"unknown block variant tag {tag}")
    return VARIANTS[tag]


def record_size(variant: Type[_Variant]) -> int:
    """Encoded length of ``variant``: one tag byte plus one byte per field."""
    return 1 + len(variant.LAYOUT)


def is_block_state(value: object) -> bool:
    return isinstance(value, VARIANTS)
