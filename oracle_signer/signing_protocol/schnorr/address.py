"""
Address derivation and public key views.

An address is the last 20 bytes of keccak256(x || y) of the public point,
rendered with the EIP-55 mixed-case checksum: hex letter i is upper case
iff nibble i of keccak256(lowercase address) is >= 8.
"""

import re
from typing import Any, Dict, Optional, Union

from ..config import ADDRESS_SIZE_BYTES
from ..security import keccak256, strip_hex_prefix
from .curve import (
    CurveParameters,
    encode_compressed,
    encode_uncompressed,
    point_coordinates,
    to_point,
    y_parity,
)

_ADDRESS_RE = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")


def to_checksum_address(address: Union[str, bytes]) -> str:
    """
    Apply the EIP-55 checksum casing to an address.

    Args:
        address: 20 raw bytes, or 40 hex characters with optional ``0x``

    Returns:
        ``0x`` followed by 40 checksummed hex characters

    Raises:
        ValueError: If the input is not a 20-byte address
    """
    if isinstance(address, (bytes, bytearray)):
        if len(address) != ADDRESS_SIZE_BYTES:
            raise ValueError(f"address must be 20 bytes, got {len(address)}")
        lowered = bytes(address).hex()
    else:
        if not _ADDRESS_RE.match(address):
            raise ValueError(f"Invalid address: {address!r}")
        lowered = strip_hex_prefix(address).lower()

    digest = keccak256(lowered.encode("ascii")).hex()
    checksummed = "".join(
        ch.upper() if int(digest[i], 16) >= 8 else ch
        for i, ch in enumerate(lowered)
    )
    return "0x" + checksummed


def is_checksum_address(address: str) -> bool:
    """True iff ``address`` is a well-formed address with correct checksum casing."""
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        return False
    return address.startswith("0x") and to_checksum_address(address) == address


def address_to_bytes(address: Union[str, bytes]) -> bytes:
    """Raw 20 bytes of an address given as hex string or bytes."""
    if isinstance(address, (bytes, bytearray)):
        if len(address) != ADDRESS_SIZE_BYTES:
            raise ValueError(f"address must be 20 bytes, got {len(address)}")
        return bytes(address)
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        raise ValueError(f"Invalid address: {address!r}")
    return bytes.fromhex(strip_hex_prefix(address))


def derive_address(public_point: Any, params: Optional[CurveParameters] = None) -> str:
    """
    Derive the checksummed address of a public point.

    Raises:
        InvalidPointError: If the point is invalid
    """
    digest = keccak256(encode_uncompressed(public_point, params))
    return to_checksum_address(digest[-ADDRESS_SIZE_BYTES:])


def public_key_view(
    public_point: Any,
    minimal: bool = True,
    params: Optional[CurveParameters] = None,
) -> Dict[str, str]:
    """
    JSON-friendly description of a public key.

    Minimal view: ``{"x": "0x" + 64 hex, "yParity": "0" | "1"}``. The full
    view also carries ``address`` and ``encoded`` (compressed point hex).
    """
    point = to_point(public_point, params)
    x, _ = point_coordinates(point, params)

    view: Dict[str, str] = {}
    if not minimal:
        view["address"] = derive_address(point, params)
        view["encoded"] = encode_compressed(point, params).hex()
    view["x"] = "0x" + x.to_bytes(32, "big").hex()
    view["yParity"] = str(y_parity(point, params))
    return view


def public_key_from_view(view: Dict[str, str], params: Optional[CurveParameters] = None):
    """
    Rebuild a public point from a (minimal or full) public key view.

    Raises:
        InvalidPointError: If the view does not describe a valid point
        KeyError: If required keys are missing
    """
    parity = str(view["yParity"])
    if parity not in ("0", "1"):
        raise ValueError(f"yParity must be '0' or '1', got {parity!r}")
    prefix = "03" if parity == "1" else "02"
    if not isinstance(view["x"], str):
        raise ValueError(f"x must be a hex string, got {type(view['x']).__name__}")
    x_hex = strip_hex_prefix(view["x"]).rjust(64, "0")
    return to_point(prefix + x_hex, params)
