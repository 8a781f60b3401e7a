"""
⚠️ DRAFT — requires crypto review before production use

secp256k1 point operations using petlib.

Point inputs arriving from outside (public keys in requests, stored
responses) are untrusted. ``to_point`` is the single gate that turns them
into petlib ``EcPt`` values; everything downstream assumes a valid point.

Accepted point representations:
    - petlib ``EcPt`` on the secp256k1 group
    - SEC1 bytes: 33 (compressed) or 65 (uncompressed) bytes
    - raw ``x || y`` coordinates: 64 bytes
    - hex string of any of the above (``0x`` optional)
    - ``(x, y)`` tuple of ints

secp256k1 has cofactor 1, so a point that satisfies the curve equation and
is not the point at infinity lies in the prime-order subgroup.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, Tuple

try:
    from petlib.ec import EcGroup, EcPt
    from petlib.bn import Bn
except ImportError:
    raise ImportError(
        "petlib is required for secp256k1 arithmetic. "
        "Install with: pip install petlib"
    )

from ..config import (
    CURVE_NAME,
    CURVE_NID,
    FIELD_PRIME,
    GENERATOR_X,
    GENERATOR_Y,
    GROUP_ORDER,
    COMPRESSED_POINT_SIZE_BYTES,
    UNCOMPRESSED_POINT_SIZE_BYTES,
    RAW_POINT_SIZE_BYTES,
    SCALAR_SIZE_BYTES,
)
from ..exceptions import CryptographicError, InvalidPointError, SecurityError
from ..security import hex_to_bytes

logger = logging.getLogger(__name__)


# ============================================================================
# CURVE SETUP
# ============================================================================


@dataclass
class CurveParameters:
    """
    secp256k1 group handle and constants.

    Attributes:
        curve: Curve name ("secp256k1")
        group: petlib EcGroup
        G: Standard generator (EcPt)
        order: Group order n
    """

    curve: str
    group: Any  # EcGroup
    G: Any  # EcPt
    order: int

    def __post_init__(self):
        if not isinstance(self.order, int):
            self.order = int(self.order)

        if self.order != GROUP_ORDER:
            raise SecurityError(
                f"Group order mismatch: expected {GROUP_ORDER}, got {self.order}"
            )


def setup_curve() -> CurveParameters:
    """
    Initialise the secp256k1 group and check it against the configured constants.

    Returns:
        CurveParameters with the petlib group and generator G

    Raises:
        SecurityError: If petlib's curve does not match configuration
        CryptographicError: If curve initialization fails
    """
    try:
        group = EcGroup(CURVE_NID)
        G = group.generator()

        gx, gy = G.get_affine()
        if int(gx) != GENERATOR_X or int(gy) != GENERATOR_Y:
            raise SecurityError("petlib generator does not match secp256k1 G")

        return CurveParameters(
            curve=CURVE_NAME,
            group=group,
            G=G,
            order=int(group.order()),
        )
    except SecurityError:
        raise
    except Exception as e:
        raise CryptographicError(
            f"Failed to initialize curve {CURVE_NAME}: {e}"
        ) from e


_CURVE_PARAMS_CACHE: Optional[CurveParameters] = None
_CACHE_LOCK = threading.Lock()


def get_cached_curve_params() -> CurveParameters:
    """
    Get cached curve parameters (initialize if needed).

    Thread-safe using double-checked locking.
    """
    global _CURVE_PARAMS_CACHE

    if _CURVE_PARAMS_CACHE is not None:
        return _CURVE_PARAMS_CACHE

    with _CACHE_LOCK:
        if _CURVE_PARAMS_CACHE is None:
            _CURVE_PARAMS_CACHE = setup_curve()
        return _CURVE_PARAMS_CACHE


def _params(params: Optional[CurveParameters]) -> CurveParameters:
    return params if params is not None else get_cached_curve_params()


# ============================================================================
# SCALAR ENCODING
# ============================================================================


def scalar_to_bytes(k: int) -> bytes:
    """Encode a scalar as 32 big-endian bytes (reduced mod n)."""
    if not isinstance(k, int):
        raise TypeError(f"scalar must be int, got {type(k)}")
    return (k % GROUP_ORDER).to_bytes(SCALAR_SIZE_BYTES, "big")


def _to_bn(k: int) -> Bn:
    return Bn.from_binary(scalar_to_bytes(k))


# ============================================================================
# POINT VALIDATION
# ============================================================================


def _from_coordinates(x: int, y: int, params: CurveParameters) -> EcPt:
    if not (0 <= x < FIELD_PRIME and 0 <= y < FIELD_PRIME):
        raise InvalidPointError("Point coordinates out of field range")

    # Curve equation first: petlib refuses to build off-curve points anyway
    if (y * y - x * x * x - 7) % FIELD_PRIME != 0:
        raise InvalidPointError("Point does not satisfy the secp256k1 equation")

    encoded = (
        b"\x04"
        + x.to_bytes(SCALAR_SIZE_BYTES, "big")
        + y.to_bytes(SCALAR_SIZE_BYTES, "big")
    )
    return EcPt.from_binary(encoded, params.group)


def to_point(value: Any, params: Optional[CurveParameters] = None) -> EcPt:
    """
    Coerce an untrusted point representation into a validated EcPt.

    Args:
        value: Point in any accepted representation (see module docstring)
        params: Curve parameters (cached if None)

    Returns:
        EcPt on secp256k1, never the point at infinity

    Raises:
        InvalidPointError: If the value is malformed or not a curve point
    """
    params = _params(params)

    try:
        if isinstance(value, EcPt):
            point = value
        elif isinstance(value, tuple) and len(value) == 2:
            x, y = value
            if not isinstance(x, int) or not isinstance(y, int):
                raise InvalidPointError("Point coordinates must be ints")
            point = _from_coordinates(x, y, params)
        elif isinstance(value, (bytes, bytearray, str)):
            data = hex_to_bytes(value)
            if len(data) == RAW_POINT_SIZE_BYTES:
                data = b"\x04" + data
            if len(data) == UNCOMPRESSED_POINT_SIZE_BYTES and data[0] == 4:
                point = _from_coordinates(
                    int.from_bytes(data[1:33], "big"),
                    int.from_bytes(data[33:], "big"),
                    params,
                )
            elif len(data) == COMPRESSED_POINT_SIZE_BYTES and data[0] in (2, 3):
                point = EcPt.from_binary(data, params.group)
            else:
                raise InvalidPointError(
                    f"Unsupported point encoding of {len(data)} bytes"
                )
        else:
            raise InvalidPointError(
                f"Unsupported point type: {type(value).__name__}"
            )

        if point.is_infinite():
            raise InvalidPointError("Point at infinity is not a valid point")

        if not params.group.check_point(point):
            raise InvalidPointError("Point is not on secp256k1")

        return point

    except InvalidPointError:
        raise
    except Exception as e:
        raise InvalidPointError(f"Invalid point: {type(e).__name__}") from e


def is_valid_point(value: Any, params: Optional[CurveParameters] = None) -> bool:
    """
    True iff ``value`` is a secp256k1 point in the prime-order subgroup.

    Never raises.
    """
    try:
        to_point(value, params)
    except InvalidPointError:
        return False
    return True


# ============================================================================
# POINT ARITHMETIC
# ============================================================================


def scalar_mult(
    k: int, point: Any = None, params: Optional[CurveParameters] = None
) -> EcPt:
    """
    Compute k*P (or k*G when no point is given).

    The result may be the point at infinity when k = 0 mod n; callers that
    need a valid point pass the result through ``to_point``.
    """
    params = _params(params)
    base = params.G if point is None else to_point(point, params)
    return base.pt_mul(_to_bn(k))


def add_points(p1: Any, p2: Any, params: Optional[CurveParameters] = None) -> EcPt:
    """
    Add two points, requiring both operands and the sum to be valid.

    Raises:
        InvalidPointError: If either operand is invalid or the sum is the
            point at infinity
    """
    params = _params(params)
    a = to_point(p1, params)
    b = to_point(p2, params)
    return to_point(a + b, params)


def safe_add(p1: Any, p2: Any, params: Optional[CurveParameters] = None) -> EcPt:
    """
    Legacy point addition that substitutes G for invalid input.

    ⚠️ The result says nothing about validity of the operands. Kept for
    callers that depend on the historical behaviour; signature verification
    uses ``add_points``.
    """
    params = _params(params)
    try:
        return add_points(p1, p2, params)
    except InvalidPointError:
        logger.warning("safe_add received an invalid point, returning generator")
        return params.G


# ============================================================================
# POINT ENCODING
# ============================================================================


def point_coordinates(
    point: Any, params: Optional[CurveParameters] = None
) -> Tuple[int, int]:
    """Affine ``(x, y)`` of a valid point."""
    x, y = to_point(point, params).get_affine()
    return int(x), int(y)


def encode_uncompressed(point: Any, params: Optional[CurveParameters] = None) -> bytes:
    """64-byte ``x || y`` encoding (SEC1 uncompressed with the 0x04 prefix stripped)."""
    x, y = point_coordinates(point, params)
    return x.to_bytes(SCALAR_SIZE_BYTES, "big") + y.to_bytes(SCALAR_SIZE_BYTES, "big")


def encode_compressed(point: Any, params: Optional[CurveParameters] = None) -> bytes:
    """33-byte SEC1 compressed encoding."""
    x, y = point_coordinates(point, params)
    prefix = b"\x03" if y & 1 else b"\x02"
    return prefix + x.to_bytes(SCALAR_SIZE_BYTES, "big")


def y_parity(point: Any, params: Optional[CurveParameters] = None) -> int:
    """0 if the y coordinate is even, 1 if odd."""
    return point_coordinates(point, params)[1] & 1
