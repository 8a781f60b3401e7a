"""
⚠️ DRAFT — requires crypto review before production use

Security utilities for cryptographic operations.

Provides the fork-safe randomness source used for nonces, request ids and
key generation, the Keccak-256 primitive, and constant-time comparison.
"""

import os
import secrets
import hmac
from typing import Union

try:
    from Crypto.Hash import keccak as _keccak
except ImportError:
    raise ImportError(
        "pycryptodome is required for Keccak-256. "
        "Install with: pip install pycryptodome"
    )

from .config import CURVE_NAME, GROUP_ORDER


# ============================================================================
# GROUP ORDER VALIDATION (Run at module import)
# ============================================================================


def _validate_group_order():
    """
    Validate GROUP_ORDER is reasonable.

    Raises:
        ValueError: If GROUP_ORDER is invalid
    """
    if GROUP_ORDER <= 0:
        raise ValueError(f"Invalid GROUP_ORDER: {GROUP_ORDER}")

    if GROUP_ORDER < 2**128:
        raise ValueError(f"GROUP_ORDER too small (< 2^128): {GROUP_ORDER}")

    secp256k1_order = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
    if CURVE_NAME == "secp256k1" and GROUP_ORDER != secp256k1_order:
        raise ValueError(
            f"GROUP_ORDER mismatch for secp256k1: "
            f"expected {hex(secp256k1_order)}, got {hex(GROUP_ORDER)}"
        )


# Validate GROUP_ORDER on module import (fail fast)
_validate_group_order()


# ============================================================================
# RANDOMNESS SOURCE (Fork-Safe)
# ============================================================================


class RandomnessSource:
    """
    Cryptographically secure randomness with fork detection.

    Prevents catastrophic nonce reuse if the process forks: a child
    re-creates its generator instead of sharing the parent's state.

    Example:
        >>> rng = RandomnessSource()
        >>> k = rng.get_random_private_scalar()
        >>> assert 1 <= k < GROUP_ORDER
    """

    def __init__(self):
        """Initialize randomness source with fork detection."""
        self._pid = os.getpid()
        self._rng = secrets.SystemRandom()

    def _check_fork(self) -> None:
        if os.getpid() != self._pid:
            self.__init__()

    def get_random_scalar(self, max_value: int) -> int:
        """
        Get random scalar in [0, max_value).

        Args:
            max_value: Upper bound (exclusive)

        Returns:
            Random scalar in [0, max_value)
        """
        self._check_fork()
        return self._rng.randrange(0, max_value)

    def get_random_bytes(self, n: int) -> bytes:
        """
        Get n cryptographically secure random bytes.

        Args:
            n: Number of bytes to generate

        Returns:
            n random bytes
        """
        self._check_fork()
        return secrets.token_bytes(n)

    def get_random_scalar_mod_order(self) -> int:
        """
        Get random scalar modulo group order.

        Returns:
            Random scalar in [0, GROUP_ORDER)
        """
        return self.get_random_scalar(GROUP_ORDER)

    def get_random_private_scalar(self) -> int:
        """
        Get a random scalar usable as a private key or nonce.

        Returns:
            Random scalar in [1, GROUP_ORDER)
        """
        self._check_fork()
        return self._rng.randrange(1, GROUP_ORDER)


# ============================================================================
# HASH FUNCTIONS
# ============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Keccak-256 digest (Ethereum variant, not NIST SHA3-256).

    Args:
        data: Bytes to hash

    Returns:
        32-byte digest

    Example:
        >>> keccak256(b"").hex()[:16]
        'c5d2460186f7233c'
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f"data must be bytes, got {type(data)}")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


# ============================================================================
# HEX HELPERS
# ============================================================================


def strip_hex_prefix(value: str) -> str:
    """Remove a leading ``0x``/``0X`` if present."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def hex_to_bytes(value: Union[str, bytes]) -> bytes:
    """
    Decode a hex string (with or without ``0x``) to bytes.

    Bytes input is returned unchanged.

    Raises:
        ValueError: If the string is not valid hex
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise TypeError(f"expected hex string or bytes, got {type(value)}")
    body = strip_hex_prefix(value)
    if len(body) % 2:
        body = "0" + body
    return bytes.fromhex(body)


# ============================================================================
# CONSTANT-TIME OPERATIONS
# ============================================================================


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison to prevent timing attacks.

    Args:
        a: First byte string
        b: Second byte string

    Returns:
        True if a == b, False otherwise
    """
    return hmac.compare_digest(a, b)
