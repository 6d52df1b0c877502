"""Error taxonomy for malformed block and grid data."""
from __future__ import annotations

from typing import Optional


class McrsFormatError(ValueError):
    """Raised when bytes do not describe a valid block record or grid file."""

    def __init__(self, reason: str, offset: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.offset = offset

    def __str__(self) -> str:
        text = f"error parsing values: {self.reason}"
        if self.offset is not None:
            text += f" (at byte {self.offset})"
        return text


class InvalidMagicError(McrsFormatError):
    pass


class InvalidVariantTagError(McrsFormatError):
    pass


class InvalidDirectionError(McrsFormatError):
    pass


class InvalidDirectionSetError(McrsFormatError):
    pass


class InvalidBooleanError(McrsFormatError):
    pass


class InvalidPowerStateError(McrsFormatError):
    pass


class UnexpectedEndOfDataError(McrsFormatError):
    pass
