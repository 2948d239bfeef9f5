"""MIDI variable-length quantities.

Each byte carries 7 value bits, most-significant group first.  Every byte
but the last has the high bit set.  SMF caps a quantity at 4 bytes, so
the largest representable value is 0x0FFFFFFF.

Decoded quantities keep their original bytes in ``data`` so that padded
(non-minimal) encodings found in the wild are re-emitted verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_VLQ_BYTES = 4
MAX_VLQ_QUANTITY = 0x0FFFFFFF


@dataclass(frozen=True)
class VariableLengthQuantity:
    quantity: int
    length: int
    data: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "VariableLengthQuantity | None":
        return decode(data)

    def to_bytes(self) -> bytes:
        return self.data


def decode(data: bytes) -> VariableLengthQuantity | None:
    """Decode the quantity at the start of ``data``.

    Returns None for an empty buffer, or when no terminating byte (high
    bit clear) appears within the first ``MAX_VLQ_BYTES`` bytes.
    """
    quantity = 0
    for idx, byte in enumerate(data[:MAX_VLQ_BYTES]):
        quantity = (quantity << 7) | (byte & 0x7F)
        if not byte & 0x80:
            length = idx + 1
            return VariableLengthQuantity(
                quantity=quantity, length=length, data=bytes(data[:length])
            )
    return None


def encode(quantity: int) -> bytes:
    """Return the minimal-length encoding of ``quantity``."""

    if quantity < 0 or quantity > MAX_VLQ_QUANTITY:
        raise ValueError(
            f"quantity {quantity} outside 0..0x{MAX_VLQ_QUANTITY:07X}"
        )
    groups = [quantity & 0x7F]
    quantity >>= 7
    while quantity:
        groups.append((quantity & 0x7F) | 0x80)
        quantity >>= 7
    return bytes(reversed(groups))
