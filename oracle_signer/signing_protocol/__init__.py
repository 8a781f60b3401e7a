"""Public API for the oracle signing protocol."""

from .exceptions import (
    ConfigurationError,
    CryptographicError,
    InvalidPointError,
    MalformedSignature,
    MethodNotSupported,
    ModuleNotFound,
    SigningError,
    SigningProtocolError,
    UnsupportedFieldType,
)
from .abi import encode_packed, solidity_sha3
from .identity import SigningIdentity
from .interfaces import ComputationApp
from .pipeline import SigningPipeline, verify_response
from .registry import AppRegistry, app_id_for, default_registry
from .schnorr import (
    KeyPair,
    Signature,
    challenge_hash,
    decode_signature,
    derive_address,
    encode_signature,
    generate_nonce,
    is_valid_point,
    public_key_view,
    schnorr_sign,
    schnorr_verify,
)
from .types import SignatureEntry, SignedField, SignedResponse, SigningContext

__all__ = [
    "SigningProtocolError",
    "ModuleNotFound",
    "MalformedSignature",
    "InvalidPointError",
    "UnsupportedFieldType",
    "MethodNotSupported",
    "ConfigurationError",
    "CryptographicError",
    "SigningError",
    "encode_packed",
    "solidity_sha3",
    "SigningIdentity",
    "ComputationApp",
    "SigningPipeline",
    "verify_response",
    "AppRegistry",
    "app_id_for",
    "default_registry",
    "KeyPair",
    "Signature",
    "challenge_hash",
    "decode_signature",
    "derive_address",
    "encode_signature",
    "generate_nonce",
    "is_valid_point",
    "public_key_view",
    "schnorr_sign",
    "schnorr_verify",
    "SignatureEntry",
    "SignedField",
    "SignedResponse",
    "SigningContext",
]
