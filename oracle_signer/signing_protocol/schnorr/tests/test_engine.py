"""
Tests for the address-bound Schnorr engine.

Test Coverage:
- Sign/verify round trips
- Reference vector (d=1, k=2, zero digest) recomputed independently
- Tampering: message bits, wrong key, wrong signature components
- Fail-closed verification on malformed input
- Nonce freshness and the nonce reuse key-recovery hazard
"""

import pytest

from Crypto.Hash import keccak

from ..address import derive_address
from ..curve import get_cached_curve_params, scalar_mult
from ..engine import (
    KeyPair,
    challenge_hash,
    generate_keypair,
    generate_nonce,
    schnorr_sign,
    schnorr_verify,
)
from ..signature import Signature, encode_signature
from ...config import GENERATOR_X, GROUP_ORDER
from ...exceptions import InvalidPointError
from ...security import RandomnessSource

ZERO_DIGEST = b"\x00" * 32


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def params():
    return get_cached_curve_params()


@pytest.fixture
def rng():
    return RandomnessSource()


@pytest.fixture
def signer(params, rng):
    return generate_keypair(rng, params)


@pytest.fixture
def digest(rng):
    return rng.get_random_bytes(32)


def _sign(signer, digest, params, rng=None):
    nonce = generate_nonce(rng, params)
    return schnorr_sign(
        signer.private, signer.public, nonce.private, nonce.public, digest, params
    )


# ============================================================================
# REFERENCE VECTOR
# ============================================================================


def test_reference_vector_d1_k2_zero_digest(params):
    """Recompute (e, s) for d=1, k=2 with a standalone Keccak implementation."""
    two_g_address = "2B5AD5c4795c026514f8317c7a215E218DcCD6cF"
    h = keccak.new(digest_bits=256)
    h.update(
        GENERATOR_X.to_bytes(32, "big")
        + b"\x00"  # G.y is even
        + ZERO_DIGEST
        + bytes.fromhex(two_g_address)
    )
    expected_e = int.from_bytes(h.digest(), "big") % GROUP_ORDER
    expected_s = (2 - expected_e) % GROUP_ORDER

    sig = schnorr_sign(1, params.G, 2, scalar_mult(2, params=params), ZERO_DIGEST, params)

    assert sig == Signature(e=expected_e, s=expected_s)
    assert schnorr_verify(params.G, ZERO_DIGEST, sig, params) is True
    assert schnorr_verify(params.G, "0x" + "00" * 32, encode_signature(sig), params)


def test_reference_vector_is_deterministic(params):
    two_g = scalar_mult(2, params=params)
    first = schnorr_sign(1, params.G, 2, two_g, ZERO_DIGEST, params)
    second = schnorr_sign(1, params.G, 2, two_g, ZERO_DIGEST, params)
    assert first == second


# ============================================================================
# CHALLENGE
# ============================================================================


def test_challenge_accepts_hex_and_bytes(params):
    address = derive_address(scalar_mult(2, params=params), params)
    from_bytes = challenge_hash(params.G, address, ZERO_DIGEST, params)
    from_hex = challenge_hash(params.G, address, "0x" + "00" * 32, params)
    assert from_bytes == from_hex
    assert 0 <= from_bytes < 2**256


def test_challenge_binds_public_key_parity(params):
    # G and -G share x and differ only in y parity
    minus_g = scalar_mult(GROUP_ORDER - 1, params=params)
    address = derive_address(params.G, params)
    assert challenge_hash(params.G, address, ZERO_DIGEST, params) != challenge_hash(
        minus_g, address, ZERO_DIGEST, params
    )


def test_challenge_binds_nonce_address(params):
    a1 = derive_address(scalar_mult(2, params=params), params)
    a2 = derive_address(scalar_mult(3, params=params), params)
    assert challenge_hash(params.G, a1, ZERO_DIGEST, params) != challenge_hash(
        params.G, a2, ZERO_DIGEST, params
    )


# ============================================================================
# SIGN / VERIFY
# ============================================================================


def test_round_trip(signer, digest, params, rng):
    sig = _sign(signer, digest, params, rng)
    assert 0 <= sig.e < GROUP_ORDER
    assert 0 <= sig.s < GROUP_ORDER
    assert schnorr_verify(signer.public, digest, sig, params) is True


def test_round_trip_many_keys(params, rng):
    for _ in range(10):
        signer = generate_keypair(rng, params)
        digest = rng.get_random_bytes(32)
        sig = _sign(signer, digest, params, rng)
        assert schnorr_verify(signer.public, digest, encode_signature(sig), params)


def test_round_trip_arbitrary_length_digest(signer, params, rng):
    for digest in (b"", b"\x01", rng.get_random_bytes(77)):
        sig = _sign(signer, digest, params, rng)
        assert schnorr_verify(signer.public, digest, sig, params)


def test_subtractive_response(signer, digest, params):
    nonce = generate_nonce(params=params)
    sig = schnorr_sign(
        signer.private, signer.public, nonce.private, nonce.public, digest, params
    )
    assert sig.s == (nonce.private - signer.private * sig.e) % GROUP_ORDER


def test_verify_accepts_public_key_encodings(signer, digest, params):
    sig = _sign(signer, digest, params)
    assert schnorr_verify(signer.public.export(), digest, sig, params)
    assert schnorr_verify(signer.public.export().hex(), digest, sig, params)


def test_single_bit_flip_in_digest_fails(signer, digest, params):
    sig = _sign(signer, digest, params)
    for bit in range(0, 256, 17):
        tampered = bytearray(digest)
        tampered[bit // 8] ^= 1 << (bit % 8)
        assert schnorr_verify(signer.public, bytes(tampered), sig, params) is False


def test_wrong_public_key_fails(signer, digest, params, rng):
    sig = _sign(signer, digest, params)
    other = generate_keypair(rng, params)
    assert schnorr_verify(other.public, digest, sig, params) is False


def test_tampered_components_fail(signer, digest, params):
    sig = _sign(signer, digest, params)
    assert not schnorr_verify(signer.public, digest, Signature(sig.e, (sig.s + 1) % GROUP_ORDER), params)
    assert not schnorr_verify(signer.public, digest, Signature((sig.e + 1) % GROUP_ORDER, sig.s), params)


def test_unreduced_s_is_reduced(signer, digest, params):
    sig = _sign(signer, digest, params)
    if sig.s + GROUP_ORDER < 2**256:
        assert schnorr_verify(signer.public, digest, Signature(sig.e, sig.s + GROUP_ORDER), params)


# ============================================================================
# FAIL-CLOSED VERIFICATION
# ============================================================================


def test_verify_malformed_string_returns_false(signer, digest, params):
    assert schnorr_verify(signer.public, digest, "0x1234", params) is False
    assert schnorr_verify(signer.public, digest, "0x" + "zz" * 64, params) is False


def test_verify_invalid_public_key_returns_false(signer, digest, params):
    sig = _sign(signer, digest, params)
    assert schnorr_verify((1, 1), digest, sig, params) is False
    assert schnorr_verify(b"garbage", digest, sig, params) is False
    assert schnorr_verify(params.group.infinite(), digest, sig, params) is False


def test_verify_zero_signature_returns_false(signer, digest, params):
    assert schnorr_verify(signer.public, digest, Signature(0, 0), params) is False


def test_verify_non_signature_returns_false(signer, digest, params):
    assert schnorr_verify(signer.public, digest, None, params) is False
    assert schnorr_verify(signer.public, digest, (1, 2), params) is False


def test_verify_bad_digest_returns_false(signer, digest, params):
    sig = _sign(signer, digest, params)
    assert schnorr_verify(signer.public, "not-hex", sig, params) is False


# ============================================================================
# SIGNING INPUT VALIDATION
# ============================================================================


@pytest.mark.parametrize("bad", [0, GROUP_ORDER, -1])
def test_sign_rejects_out_of_range_scalars(bad, params, digest):
    with pytest.raises(ValueError):
        schnorr_sign(bad, params.G, 2, scalar_mult(2, params=params), digest, params)
    with pytest.raises(ValueError):
        schnorr_sign(1, params.G, bad, params.G, digest, params)


def test_sign_rejects_invalid_points(params, digest):
    with pytest.raises(InvalidPointError):
        schnorr_sign(1, (1, 1), 2, scalar_mult(2, params=params), digest, params)
    with pytest.raises(InvalidPointError):
        schnorr_sign(1, params.G, 2, (1, 1), digest, params)


def test_keypair_from_private(params):
    kp = KeyPair.from_private(1, params)
    assert kp.public == params.G
    assert "private=" not in repr(kp)
    with pytest.raises(ValueError):
        KeyPair.from_private(0, params)


# ============================================================================
# NONCE SAFETY
# ============================================================================


def test_nonces_are_fresh(params):
    """Every nonce generation yields an independent scalar."""
    rng = RandomnessSource()
    nonces = [generate_nonce(rng, params).private for _ in range(200)]

    assert len(set(nonces)) == len(nonces)
    assert all(1 <= k < GROUP_ORDER for k in nonces)

    # Each bit position should be set roughly half of the time
    for bit in (0, 63, 128, 200, 254):
        ones = sum((k >> bit) & 1 for k in nonces)
        assert 50 < ones < 150

    # Consecutive nonces should not share a fixed difference
    deltas = {(b - a) % GROUP_ORDER for a, b in zip(nonces, nonces[1:])}
    assert len(deltas) == len(nonces) - 1


def test_signatures_use_distinct_nonces(signer, params):
    """Signing the same digest twice never repeats the nonce-bound challenge."""
    challenges = {_sign(signer, ZERO_DIGEST, params).e for _ in range(20)}
    assert len(challenges) == 20


def test_nonce_reuse_reveals_private_key(signer, params):
    """Regression guard documenting why nonces must never repeat."""
    nonce = generate_nonce(params=params)
    sig1 = schnorr_sign(signer.private, signer.public, nonce.private, nonce.public, b"\x01" * 32, params)
    sig2 = schnorr_sign(signer.private, signer.public, nonce.private, nonce.public, b"\x02" * 32, params)

    # s1 - s2 = d * (e2 - e1)
    recovered = (sig1.s - sig2.s) * pow(sig2.e - sig1.e, -1, GROUP_ORDER) % GROUP_ORDER
    assert recovered == signer.private
