"""Redstone power level carried by opaque blocks."""
from __future__ import annotations

from enum import IntEnum

from common.errors import InvalidPowerStateError


class PowerState(IntEnum):
    OFF = 0
    WEAK = 1
    STRONG = 2

    @classmethod
    def from_byte(cls, value: int) -> "PowerState":
        try:
            return cls(value)
        except ValueError:
            raise InvalidPowerStateError(f"{value} is not a power state ordinal") from None

    def to_byte(self) -> int:
        return int(self)
