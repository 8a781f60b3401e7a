"""Tests for secp256k1 point validation, arithmetic and encoding."""

import pytest

from petlib.ec import EcPt

from ..curve import (
    add_points,
    encode_compressed,
    encode_uncompressed,
    get_cached_curve_params,
    is_valid_point,
    point_coordinates,
    safe_add,
    scalar_mult,
    scalar_to_bytes,
    setup_curve,
    to_point,
    y_parity,
)
from ...config import FIELD_PRIME, GENERATOR_X, GENERATOR_Y, GROUP_ORDER
from ...exceptions import InvalidPointError

G_COMPRESSED = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
TWO_G_COMPRESSED = "02c6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5"


@pytest.fixture
def params():
    return get_cached_curve_params()


# ============================================================================
# SETUP
# ============================================================================


def test_setup_curve_matches_constants():
    params = setup_curve()
    assert params.curve == "secp256k1"
    assert params.order == GROUP_ORDER
    assert point_coordinates(params.G, params) == (GENERATOR_X, GENERATOR_Y)


def test_cached_params_are_shared():
    assert get_cached_curve_params() is get_cached_curve_params()


# ============================================================================
# VALIDATION
# ============================================================================


def test_generator_is_valid(params):
    assert is_valid_point(params.G, params)


@pytest.mark.parametrize(
    "value",
    [
        G_COMPRESSED,
        "0x" + G_COMPRESSED,
        bytes.fromhex(G_COMPRESSED),
        (GENERATOR_X, GENERATOR_Y),
        GENERATOR_X.to_bytes(32, "big") + GENERATOR_Y.to_bytes(32, "big"),
        b"\x04" + GENERATOR_X.to_bytes(32, "big") + GENERATOR_Y.to_bytes(32, "big"),
    ],
)
def test_accepted_representations_of_g(params, value):
    assert to_point(value, params) == params.G


@pytest.mark.parametrize(
    "value",
    [
        (1, 1),
        (GENERATOR_X, GENERATOR_Y + 1),
        (0, 0),
        (2**256, 1),
        b"\x02" + b"\x00" * 31,
        b"\x05" + b"\x11" * 32,
        b"\x04" + b"\x01" * 64,
        "not hex",
        12345,
        None,
    ],
)
def test_invalid_points_rejected(params, value):
    assert is_valid_point(value, params) is False
    with pytest.raises(InvalidPointError):
        to_point(value, params)


def test_point_at_infinity_rejected(params):
    infinity = params.group.infinite()
    assert isinstance(infinity, EcPt)
    assert not is_valid_point(infinity, params)


def test_x_not_on_curve_compressed_rejected(params):
    # Smallest x for which x^3 + 7 is a quadratic non-residue (Euler's criterion)
    x = next(
        x for x in range(1, 100)
        if pow(x ** 3 + 7, (FIELD_PRIME - 1) // 2, FIELD_PRIME) != 1
    )
    assert not is_valid_point(b"\x02" + x.to_bytes(32, "big"), params)
    assert not is_valid_point(b"\x03" + x.to_bytes(32, "big"), params)


# ============================================================================
# ARITHMETIC
# ============================================================================


def test_scalar_mult_two(params):
    assert encode_compressed(scalar_mult(2, params=params), params).hex() == TWO_G_COMPRESSED


def test_scalar_mult_reduces_mod_order(params):
    assert scalar_mult(GROUP_ORDER + 3, params=params) == scalar_mult(3, params=params)


def test_add_points(params):
    g = params.G
    assert add_points(g, g, params) == scalar_mult(2, params=params)
    assert add_points(scalar_mult(2, params=params), g, params) == scalar_mult(3, params=params)


def test_add_points_rejects_invalid_operand(params):
    with pytest.raises(InvalidPointError):
        add_points(params.G, (1, 1), params)
    with pytest.raises(InvalidPointError):
        add_points((1, 1), params.G, params)


def test_add_points_rejects_infinity_sum(params):
    minus_g = scalar_mult(GROUP_ORDER - 1, params=params)
    with pytest.raises(InvalidPointError):
        add_points(params.G, minus_g, params)


def test_safe_add_valid_operands(params):
    assert safe_add(params.G, params.G, params) == scalar_mult(2, params=params)


def test_safe_add_falls_back_to_generator(params):
    two_g = scalar_mult(2, params=params)
    assert safe_add(two_g, (1, 1), params) == params.G
    assert safe_add((1, 1), two_g, params) == params.G


# ============================================================================
# ENCODING
# ============================================================================


def test_encode_uncompressed_strips_prefix(params):
    raw = encode_uncompressed(params.G, params)
    assert len(raw) == 64
    assert raw == GENERATOR_X.to_bytes(32, "big") + GENERATOR_Y.to_bytes(32, "big")


def test_encode_compressed_matches_petlib_export(params):
    for k in (1, 2, 3, 7, 2**200 + 1):
        point = scalar_mult(k, params=params)
        assert encode_compressed(point, params) == point.export()


def test_y_parity(params):
    assert y_parity(params.G, params) == GENERATOR_Y & 1 == 0


def test_scalar_to_bytes():
    assert scalar_to_bytes(1) == b"\x00" * 31 + b"\x01"
    assert scalar_to_bytes(GROUP_ORDER) == b"\x00" * 32
    with pytest.raises(TypeError):
        scalar_to_bytes("1")
