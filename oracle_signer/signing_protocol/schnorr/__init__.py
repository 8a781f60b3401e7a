"""
Address-bound Schnorr signatures over secp256k1 (petlib backend).

⚠️ DRAFT — requires crypto review before production use
"""

from .curve import (
    CurveParameters,
    add_points,
    encode_compressed,
    encode_uncompressed,
    get_cached_curve_params,
    is_valid_point,
    point_coordinates,
    safe_add,
    scalar_mult,
    setup_curve,
    to_point,
)
from .address import (
    derive_address,
    is_checksum_address,
    public_key_from_view,
    public_key_view,
    to_checksum_address,
)
from .signature import Signature, decode_signature, encode_signature, scalar_to_hex
from .engine import (
    KeyPair,
    challenge_hash,
    generate_keypair,
    generate_nonce,
    schnorr_sign,
    schnorr_verify,
)

__all__ = [
    "CurveParameters",
    "setup_curve",
    "get_cached_curve_params",
    "to_point",
    "is_valid_point",
    "add_points",
    "safe_add",
    "scalar_mult",
    "point_coordinates",
    "encode_compressed",
    "encode_uncompressed",
    "derive_address",
    "to_checksum_address",
    "is_checksum_address",
    "public_key_view",
    "public_key_from_view",
    "Signature",
    "encode_signature",
    "decode_signature",
    "scalar_to_hex",
    "KeyPair",
    "generate_keypair",
    "generate_nonce",
    "challenge_hash",
    "schnorr_sign",
    "schnorr_verify",
]
