"""
Fixed-width signature encoding.

Wire format: ``"0x" + hex(e, 32 bytes) + hex(s, 32 bytes)``, always 130
characters. Anything else is rejected on decode.
"""

import re
from dataclasses import dataclass

from ..config import SCALAR_SIZE_BYTES, SIGNATURE_HEX_LENGTH
from ..exceptions import MalformedSignature
from ..security import strip_hex_prefix

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
_SCALAR_HEX_LENGTH = 2 * SCALAR_SIZE_BYTES


@dataclass(frozen=True)
class Signature:
    """
    Schnorr signature (challenge ``e``, response ``s``).

    Attributes:
        e: Challenge scalar
        s: Response scalar
    """

    e: int
    s: int

    def __post_init__(self):
        for name in ("e", "s"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be int, got {type(value)}")
            if not 0 <= value < 2 ** (8 * SCALAR_SIZE_BYTES):
                raise ValueError(f"{name} does not fit in {SCALAR_SIZE_BYTES} bytes")

    def to_hex(self) -> str:
        return encode_signature(self)

    @classmethod
    def from_hex(cls, value: str) -> "Signature":
        return decode_signature(value)


def scalar_to_hex(k: int) -> str:
    """``0x`` + 64 zero-padded hex characters of ``k``."""
    return "0x" + format(k, f"0{_SCALAR_HEX_LENGTH}x")


def encode_signature(sig: Signature) -> str:
    """Encode ``sig`` in the 130 character wire format."""
    return scalar_to_hex(sig.e) + format(sig.s, f"0{_SCALAR_HEX_LENGTH}x")


def decode_signature(value: str) -> Signature:
    """
    Decode the 130 character wire format.

    Raises:
        MalformedSignature: If the hex body is not exactly 128 hex characters
    """
    if not isinstance(value, str):
        raise MalformedSignature(f"signature must be str, got {type(value)}")

    body = strip_hex_prefix(value)
    if len(body) != SIGNATURE_HEX_LENGTH:
        raise MalformedSignature(
            f"invalid schnorr signature string: expected {SIGNATURE_HEX_LENGTH} "
            f"hex characters, got {len(body)}"
        )
    if not _HEX_RE.match(body):
        raise MalformedSignature("invalid schnorr signature string: not hex")

    return Signature(
        e=int(body[:_SCALAR_HEX_LENGTH], 16),
        s=int(body[_SCALAR_HEX_LENGTH:], 16),
    )
