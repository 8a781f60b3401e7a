"""
Typed, order-sensitive field hashing (Solidity ``abi.encodePacked`` + Keccak-256).

Every signed response commits to an ordered list of ``(name, type, value)``
fields. Only ``type`` and ``value`` enter the hash; ``name`` is a label for
humans and for the verifier to rebuild the list.

Type vocabulary:
    uint<N>, uint   N/8 bytes big-endian (uint == uint256), N in 8..256 step 8
    int<N>, int     N/8 bytes two's complement
    address         20 bytes
    bool            1 byte
    bytes           raw bytes (hex string or bytes value)
    bytes<N>        N bytes, right-padded with zeros, N in 1..32
    string          UTF-8 bytes

Integer values may be ints, decimal strings, or ``0x`` hex strings.
"""

import re
from typing import Any, Iterable, List, Mapping, Tuple, Union

from .exceptions import UnsupportedFieldType
from .schnorr.address import address_to_bytes, is_checksum_address
from .security import hex_to_bytes, keccak256

_INT_RE = re.compile(r"^(u?int)(\d*)$")
_BYTES_RE = re.compile(r"^bytes(\d+)$")
_HEX_STRING_RE = re.compile(r"^0[xX][0-9a-fA-F]*$")


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _HEX_STRING_RE.match(text):
            return int(text[2:] or "0", 16)
        if text.startswith("-") and _HEX_STRING_RE.match(text[1:]):
            return -int(text[3:] or "0", 16)
        try:
            return int(text, 10)
        except ValueError:
            pass
    raise ValueError(f"Cannot interpret {value!r} as an integer")


def _encode_int(type_tag: str, value: Any) -> bytes:
    kind, bits_text = _INT_RE.match(type_tag).groups()
    bits = int(bits_text) if bits_text else 256
    if bits % 8 or not 8 <= bits <= 256:
        raise UnsupportedFieldType(f"Invalid integer width in type {type_tag!r}")

    number = _parse_int(value)
    if kind == "uint":
        if not 0 <= number < 2**bits:
            raise ValueError(f"{number} out of range for {type_tag}")
        return number.to_bytes(bits // 8, "big")

    if not -(2 ** (bits - 1)) <= number < 2 ** (bits - 1):
        raise ValueError(f"{number} out of range for {type_tag}")
    return (number % 2**bits).to_bytes(bits // 8, "big")


def _encode_address(value: Any) -> bytes:
    if isinstance(value, str):
        body = value[2:] if value[:2] in ("0x", "0X") else value
        mixed_case = body != body.lower() and body != body.upper()
        if mixed_case and not is_checksum_address("0x" + body):
            raise ValueError(f"Address checksum mismatch: {value!r}")
    return address_to_bytes(value)


def _encode_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str) and _HEX_STRING_RE.match(value):
        return hex_to_bytes(value)
    raise ValueError(f"bytes value must be bytes or 0x hex, got {value!r}")


def _encode_fixed_bytes(type_tag: str, value: Any) -> bytes:
    size = int(_BYTES_RE.match(type_tag).group(1))
    if not 1 <= size <= 32:
        raise UnsupportedFieldType(f"Invalid fixed bytes size in type {type_tag!r}")
    data = _encode_bytes(value)
    if len(data) > size:
        raise ValueError(f"{len(data)} bytes do not fit in {type_tag}")
    return data.ljust(size, b"\x00")


def encode_value(type_tag: str, value: Any) -> bytes:
    """
    Packed encoding of a single typed value.

    Raises:
        UnsupportedFieldType: If the type tag is not in the vocabulary
        ValueError: If the value does not fit the type
    """
    if not isinstance(type_tag, str):
        raise UnsupportedFieldType(f"type tag must be str, got {type(type_tag)}")

    if _INT_RE.match(type_tag):
        return _encode_int(type_tag, value)
    if type_tag == "address":
        return _encode_address(value)
    if type_tag == "bool":
        if isinstance(value, str):
            value = value.lower() not in ("", "0", "false")
        return b"\x01" if value else b"\x00"
    if type_tag == "string":
        if not isinstance(value, str):
            raise ValueError(f"string value must be str, got {type(value)}")
        return value.encode("utf-8")
    if type_tag == "bytes":
        return _encode_bytes(value)
    if _BYTES_RE.match(type_tag):
        return _encode_fixed_bytes(type_tag, value)

    raise UnsupportedFieldType(f"Unsupported field type: {type_tag!r}")


FieldLike = Union[Mapping[str, Any], Tuple[str, Any], Any]


def _type_and_value(field: FieldLike) -> Tuple[str, Any]:
    if isinstance(field, Mapping):
        type_tag = field.get("type", field.get("t"))
        if "value" in field:
            value = field["value"]
        elif "v" in field:
            value = field["v"]
        else:
            raise ValueError(f"Field has no value: {field!r}")
        return type_tag, value
    if isinstance(field, tuple) and len(field) == 2:
        return field
    if hasattr(field, "type") and hasattr(field, "value"):
        return field.type, field.value
    raise ValueError(f"Cannot interpret {field!r} as a typed field")


def encode_packed(fields: Iterable[FieldLike]) -> bytes:
    """
    Concatenate the packed encodings of ``fields`` in order.

    Fields may be ``SignedField`` objects, mappings with ``type``/``value``
    (or ``t``/``v``), or ``(type, value)`` tuples.
    """
    parts: List[bytes] = []
    for field in fields:
        type_tag, value = _type_and_value(field)
        parts.append(encode_value(type_tag, value))
    return b"".join(parts)


def solidity_sha3(fields: Iterable[FieldLike]) -> str:
    """
    keccak256 of the packed encoding, as ``0x`` + 64 hex characters.

    Example:
        >>> solidity_sha3([("uint256", 1)])[:10]
        '0xb10e2d52'
    """
    return "0x" + keccak256(encode_packed(fields)).hex()
