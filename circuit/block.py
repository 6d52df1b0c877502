"""A single grid cell."""
from __future__ import annotations

from dataclasses import dataclass, field

from circuit.block_state import BlockState, NonBlock, is_block_state
from persistence.codec import decode_block_state, encode_block_state


@dataclass
class Block:
    state: BlockState = field(default_factory=NonBlock)

    def __post_init__(self) -> None:
        if not is_block_state(self.state):
            raise TypeError(f"not a block state: {self.state!r}")

    def set_state(self, state: BlockState) -> None:
        if not is_block_state(state):
            raise TypeError(f"not a block state: {state!r}")
        self.state = state

    def encode(self) -> bytes:
        return encode_block_state(self.state)

    def decode_from(self, buffer: bytes, offset: int = 0) -> int:
        """Replace this block's state with the record at ``offset``.

        Returns the number of bytes consumed. The current state is left
        untouched if the record is malformed.
        """
        state, consumed = decode_block_state(buffer, offset)
        self.state = state
        return consumed
