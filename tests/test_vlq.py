from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from midichunk.vlq import (  # noqa: E402
    MAX_VLQ_QUANTITY,
    VariableLengthQuantity,
    decode,
    encode,
)


# Reference encodings from the SMF 1.0 document.
KNOWN_ENCODINGS = [
    (0x00000000, b"\x00"),
    (0x00000040, b"\x40"),
    (0x0000007F, b"\x7F"),
    (0x00000080, b"\x81\x00"),
    (0x00002000, b"\xC0\x00"),
    (0x00003FFF, b"\xFF\x7F"),
    (0x00004000, b"\x81\x80\x00"),
    (0x00100000, b"\xC0\x80\x00"),
    (0x001FFFFF, b"\xFF\xFF\x7F"),
    (0x00200000, b"\x81\x80\x80\x00"),
    (0x08000000, b"\xC0\x80\x80\x00"),
    (0x0FFFFFFF, b"\xFF\xFF\xFF\x7F"),
]


@pytest.mark.parametrize("quantity,encoded", KNOWN_ENCODINGS, ids=lambda v: f"{v!r}")
def test_encode_matches_reference(quantity: int, encoded: bytes) -> None:
    assert encode(quantity) == encoded


@pytest.mark.parametrize("quantity,encoded", KNOWN_ENCODINGS, ids=lambda v: f"{v!r}")
def test_decode_matches_reference(quantity: int, encoded: bytes) -> None:
    vlq = decode(encoded + b"\x90\x3C")
    assert vlq == VariableLengthQuantity(
        quantity=quantity, length=len(encoded), data=encoded
    )


def test_decode_keeps_padded_encoding() -> None:
    vlq = decode(b"\x80\x80\x05\xFF")
    assert vlq is not None
    assert vlq.quantity == 5
    assert vlq.length == 3
    assert vlq.to_bytes() == b"\x80\x80\x05"


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"\x81",
        b"\x81\x80\x80",
        b"\xFF\xFF\xFF\xFF\x7F",
    ],
)
def test_decode_rejects_unterminated(data: bytes) -> None:
    assert decode(data) is None
    assert VariableLengthQuantity.from_bytes(data) is None


@pytest.mark.parametrize("quantity", [-1, MAX_VLQ_QUANTITY + 1])
def test_encode_rejects_out_of_range(quantity: int) -> None:
    with pytest.raises(ValueError, match="outside"):
        encode(quantity)


def test_decode_inverts_encode_across_group_boundaries() -> None:
    for shift in range(28):
        for quantity in {(1 << shift) - 1, 1 << shift, (1 << shift) + 1}:
            if quantity > MAX_VLQ_QUANTITY:
                continue
            encoded = encode(quantity)
            vlq = decode(encoded)
            assert vlq is not None
            assert vlq.quantity == quantity
            assert vlq.length == len(encoded)
