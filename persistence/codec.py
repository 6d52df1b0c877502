"""Byte encoding of individual block states.

A record is the variant's tag byte followed by one byte per field, in the
order given by the variant's ``LAYOUT``. Records are not self-delimiting:
the decoder relies on the tag to know how many bytes follow.
"""
from __future__ import annotations

from typing import Callable, Dict, Tuple

from circuit.block_state import (
    BlockState,
    FieldKind,
    is_block_state,
    record_size,
    variant_for_tag,
)
from circuit.direction import Direction, DirectionSet
from circuit.power import PowerState
from common.errors import (
    InvalidBooleanError,
    McrsFormatError,
    UnexpectedEndOfDataError,
)


def _decode_bool(value: int) -> bool:
    if value == 0:
        return False
    if value == 1:
        return True
    raise InvalidBooleanError(f"{value} is not a boolean byte")


_ENCODERS: Dict[FieldKind, Callable[[object], int]] = {
    FieldKind.U8: lambda value: value,
    FieldKind.BOOL: lambda value: 1 if value else 0,
    FieldKind.DIRECTION: lambda value: value.to_byte(),
    FieldKind.DIRECTION_SET: lambda value: value.to_byte(),
    FieldKind.POWER_STATE: lambda value: value.to_byte(),
}

_DECODERS: Dict[FieldKind, Callable[[int], object]] = {
    FieldKind.U8: lambda value: value,
    FieldKind.BOOL: _decode_bool,
    FieldKind.DIRECTION: Direction.from_byte,
    FieldKind.DIRECTION_SET: DirectionSet.from_byte,
    FieldKind.POWER_STATE: PowerState.from_byte,
}

_missing = set(FieldKind) - set(_ENCODERS) | set(FieldKind) - set(_DECODERS)
if _missing:
    raise AssertionError(f"codec has no handler for field kinds: {sorted(k.name for k in _missing)}")
del _missing


def encode_block_state(state: BlockState) -> bytes:
    """Return the record bytes for ``state``."""
    if not is_block_state(state):
        raise TypeError(f"not a block state: {state!r}")
    out = bytearray((state.TAG,))
    for name, kind in state.LAYOUT:
        out.append(_ENCODERS[kind](getattr(state, name)))
    return bytes(out)


def decode_block_state(buffer: bytes, offset: int = 0) -> Tuple[BlockState, int]:
    """Decode the record starting at ``buffer[offset]``.

    Returns the state and the number of bytes the record occupies, tag
    included. Nothing past the end of the record is read, and a record that
    does not fit in what is left of ``buffer`` raises
    :class:`UnexpectedEndOfDataError`.
    """
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")
    remaining = len(buffer) - offset
    if remaining <= 0:
        raise UnexpectedEndOfDataError("no bytes left for a block record", offset)

    try:
        variant = variant_for_tag(buffer[offset])
    except McrsFormatError as exc:
        exc.offset = offset
        raise

    size = record_size(variant)
    if remaining < size:
        raise UnexpectedEndOfDataError(
            f"{variant.__name__} record needs {size} bytes, only {remaining} left",
            offset,
        )

    values = {}
    for index, (name, kind) in enumerate(variant.LAYOUT, start=1):
        position = offset + index
        try:
            values[name] = _DECODERS[kind](buffer[position])
        except McrsFormatError as exc:
            exc.offset = position
            raise
    return variant(**values), size
