"""
⚠️ DRAFT — requires crypto review before production use

Cryptographic configuration for the oracle signing protocol.

Curve arithmetic runs on secp256k1 via petlib. Hashing uses Keccak-256
(the pre-standard SHA-3 variant), which is what address derivation and the
typed field hash are defined over.
"""

# ============================================================================
# CURVE SELECTION
# ============================================================================

CURVE_NAME = "secp256k1"
CURVE_LIBRARY = "petlib"
CURVE_NID = 714  # OpenSSL NID for secp256k1

# ============================================================================
# GROUP PARAMETERS
# ============================================================================

GROUP_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
FIELD_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
GROUP_ORDER_BITS = 256
COFACTOR = 1  # Prime order group: on-curve implies in-subgroup

# Standard generator G
GENERATOR_X = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GENERATOR_Y = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

# ============================================================================
# ENCODING SIZES
# ============================================================================

SCALAR_SIZE_BYTES = 32
COMPRESSED_POINT_SIZE_BYTES = 33
UNCOMPRESSED_POINT_SIZE_BYTES = 65
RAW_POINT_SIZE_BYTES = 64  # x || y without SEC1 prefix
ADDRESS_SIZE_BYTES = 20

# "0x" + hex(e, 32 bytes) + hex(s, 32 bytes)
SIGNATURE_HEX_LENGTH = 2 * 2 * SCALAR_SIZE_BYTES
SIGNATURE_STRING_LENGTH = 2 + SIGNATURE_HEX_LENGTH

# ============================================================================
# HASH FUNCTIONS
# ============================================================================

HASH_FUNCTION = "KECCAK-256"
HASH_OUTPUT_BITS = 256

# ============================================================================
# ENVIRONMENT
# ============================================================================

PRIVATE_KEY_ENV_VAR = "PRIVATE_KEY"
APPS_MANIFEST_ENV_VAR = "ORACLE_SIGNER_APPS_MANIFEST"

# ============================================================================
# RESPONSE SERIALIZATION
# ============================================================================

RESPONSE_VERSION = 1
SERIALIZATION_FORMAT = "CBOR"

# Fields prepended to every app's signed field list
RESERVED_SIGN_FIELDS = ("appId", "reqId")

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate configuration parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert CURVE_NAME == "secp256k1", "Only secp256k1 is supported"
    assert CURVE_LIBRARY == "petlib", "secp256k1 requires petlib library"
    assert CURVE_NID == 714, "secp256k1 NID must be 714"
    assert COFACTOR == 1, "secp256k1 must have cofactor 1"
    assert GROUP_ORDER.bit_length() == GROUP_ORDER_BITS, "Invalid group order"
    assert HASH_FUNCTION == "KECCAK-256", "Invalid hash function"
    assert SIGNATURE_HEX_LENGTH == 128, "Signature must be 64 bytes"

    # Generator must satisfy y^2 = x^3 + 7 over the field
    assert (
        GENERATOR_Y * GENERATOR_Y - GENERATOR_X ** 3 - 7
    ) % FIELD_PRIME == 0, "Generator is not on secp256k1"

    return True


# Auto-validate on import
validate_config()
