"""
⚠️ DRAFT — requires crypto review before production use

Address-bound Schnorr signatures over secp256k1.

Scheme:
    Signer holds (d, P = d*G).

    Sign(msg):
        1. Take a fresh nonce (k, R = k*G)  -- supplied by the caller
        2. addr_R = address(R)
        3. e = keccak256(P.x || parity(P.y) || msg || addr_R) mod n
        4. s = (k - d*e) mod n
        5. Signature = (e, s)

    Verify(P, msg, (e, s)):
        1. R_v = s*G + e*P              (= k*G when the signature is honest)
        2. e_v = keccak256(P.x || parity(P.y) || msg || address(R_v))
        3. accept iff e_v == e (mod n)

The response is subtractive (s = k - d*e), which is why verification adds
e*P back. Binding the challenge to the nonce point's address rather than the
point itself lets an on-chain verifier check the signature with a single
ecrecover call.

Security Requirements:
    1. Nonces MUST be fresh and independent per signature (reuse leaks d)
    2. All scalar operations are modulo GROUP_ORDER
    3. Challenge comparison is constant-time
    4. Verification never raises for bad input, it returns False
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..config import GROUP_ORDER, SCALAR_SIZE_BYTES
from ..exceptions import (
    InvalidPointError,
    MalformedSignature,
    SigningError,
)
from ..security import (
    RandomnessSource,
    constant_time_compare,
    hex_to_bytes,
    keccak256,
)
from .address import address_to_bytes, derive_address
from .curve import (
    CurveParameters,
    add_points,
    get_cached_curve_params,
    point_coordinates,
    scalar_mult,
    scalar_to_bytes,
    to_point,
    y_parity,
)
from .signature import Signature, decode_signature

logger = logging.getLogger(__name__)


# ============================================================================
# KEY PAIRS AND NONCES
# ============================================================================


@dataclass(frozen=True)
class KeyPair:
    """
    A private scalar and its public point.

    Used both for the long-lived signing key and for per-signature nonces.
    """

    private: int = field(repr=False)
    public: Any  # EcPt

    @classmethod
    def from_private(
        cls, private: int, params: Optional[CurveParameters] = None
    ) -> "KeyPair":
        if not isinstance(private, int) or isinstance(private, bool):
            raise TypeError(f"private key must be int, got {type(private)}")
        if not 1 <= private < GROUP_ORDER:
            raise ValueError("private key must be in [1, GROUP_ORDER)")
        return cls(private=private, public=scalar_mult(private, params=params))


def generate_keypair(
    randomness_source: Optional[RandomnessSource] = None,
    params: Optional[CurveParameters] = None,
) -> KeyPair:
    """Generate a key pair with a private scalar drawn uniformly from [1, n)."""
    if randomness_source is None:
        randomness_source = RandomnessSource()
    return KeyPair.from_private(
        randomness_source.get_random_private_scalar(), params
    )


def generate_nonce(
    randomness_source: Optional[RandomnessSource] = None,
    params: Optional[CurveParameters] = None,
) -> KeyPair:
    """
    Generate a fresh signing nonce.

    ⚠️ Call once per signature. Two signatures over different messages with
    the same nonce reveal the private key: d = (s1 - s2) / (e2 - e1).
    """
    return generate_keypair(randomness_source, params)


# ============================================================================
# CHALLENGE
# ============================================================================


def _digest_bytes(message_digest: Union[bytes, str]) -> bytes:
    try:
        return hex_to_bytes(message_digest)
    except (TypeError, ValueError) as e:
        raise ValueError(f"message digest must be bytes or hex: {e}") from e


def challenge_hash(
    signer_public_key: Any,
    nonce_address: Union[str, bytes],
    message_digest: Union[bytes, str],
    params: Optional[CurveParameters] = None,
) -> int:
    """
    Compute the challenge scalar (not reduced).

    keccak256(
        P.x (32 bytes, big-endian) ||
        0x00 if P.y is even else 0x01 ||
        message digest bytes ||
        nonce address (20 bytes)
    )

    Args:
        signer_public_key: Signer's public point
        nonce_address: Address of the nonce point R
        message_digest: Raw bytes or hex string of the message hash
        params: Curve parameters (cached if None)

    Returns:
        The digest as a big-endian integer
    """
    x, _ = point_coordinates(signer_public_key, params)
    data = b"".join(
        [
            x.to_bytes(SCALAR_SIZE_BYTES, "big"),
            bytes([y_parity(signer_public_key, params)]),
            _digest_bytes(message_digest),
            address_to_bytes(nonce_address),
        ]
    )
    return int.from_bytes(keccak256(data), "big")


# ============================================================================
# SIGN
# ============================================================================


def schnorr_sign(
    private_key: int,
    public_key: Any,
    nonce: int,
    nonce_public: Any,
    message_digest: Union[bytes, str],
    params: Optional[CurveParameters] = None,
) -> Signature:
    """
    Sign a message digest.

    ⚠️ SECURITY CRITICAL

    The engine performs no randomness and no reuse detection: ``nonce``
    must come from ``generate_nonce`` (or equivalent) and must never be
    used for another message.

    Args:
        private_key: Signer's private scalar d in [1, n)
        public_key: Signer's public point P = d*G
        nonce: Nonce scalar k in [1, n)
        nonce_public: Nonce point R = k*G
        message_digest: Raw bytes or hex string of the message hash
        params: Curve parameters (cached if None)

    Returns:
        Signature(e, s) with e = H(P, addr(R), msg) mod n and s = (k - d*e) mod n

    Raises:
        ValueError: If scalars are out of range or the digest is not hex
        InvalidPointError: If a point is invalid
        SigningError: If signing fails for another reason
    """
    for name, value in (("private_key", private_key), ("nonce", nonce)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{name} must be int, got {type(value)}")
        if not 1 <= value < GROUP_ORDER:
            raise ValueError(f"{name} must be in [1, GROUP_ORDER)")

    if params is None:
        params = get_cached_curve_params()

    public_key = to_point(public_key, params)
    nonce_public = to_point(nonce_public, params)
    digest = _digest_bytes(message_digest)

    try:
        nonce_address = derive_address(nonce_public, params)
        e = challenge_hash(public_key, nonce_address, digest, params) % GROUP_ORDER
        s = (nonce - private_key * e) % GROUP_ORDER
    except Exception as e:
        raise SigningError(f"Schnorr signing failed: {type(e).__name__}") from e

    return Signature(e=e, s=s)


# ============================================================================
# VERIFY
# ============================================================================


def schnorr_verify(
    signer_public_key: Any,
    message_digest: Union[bytes, str],
    signature: Union[Signature, str],
    params: Optional[CurveParameters] = None,
) -> bool:
    """
    Verify a signature. Fails closed: any anomaly yields False.

    Args:
        signer_public_key: Claimed signer's public point (untrusted)
        message_digest: Raw bytes or hex string of the message hash
        signature: Signature object or its 130 character wire form
        params: Curve parameters (cached if None)

    Returns:
        True iff the signature is valid for this key and digest
    """
    if isinstance(signature, str):
        try:
            signature = decode_signature(signature)
        except MalformedSignature:
            logger.debug("Rejecting malformed signature string")
            return False

    if not isinstance(signature, Signature):
        return False

    if params is None:
        params = get_cached_curve_params()

    try:
        public_key = to_point(signer_public_key, params)
    except InvalidPointError:
        logger.debug("Rejecting signature for invalid public key")
        return False

    try:
        digest = _digest_bytes(message_digest)
    except (TypeError, ValueError):
        return False

    s = signature.s % GROUP_ORDER
    e = signature.e % GROUP_ORDER

    try:
        r_v = add_points(
            scalar_mult(s, params=params),
            scalar_mult(e, public_key, params=params),
            params,
        )
    except InvalidPointError:
        # s*G + e*P collapsed to infinity (or s = 0 / e = 0 edge cases)
        return False

    nonce_address = derive_address(r_v, params)
    e_v = challenge_hash(public_key, nonce_address, digest, params) % GROUP_ORDER

    return constant_time_compare(scalar_to_bytes(e_v), scalar_to_bytes(e))
