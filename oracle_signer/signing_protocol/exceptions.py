"""
⚠️ DRAFT — requires crypto review before production use

Custom exceptions for the oracle signing protocol.

Verification is fail-closed: these are raised by decoding, signing and
request handling, while verify paths turn them into a plain ``False``.
"""


class SigningProtocolError(Exception):
    """Base exception for signing protocol errors."""

    pass


class ModuleNotFound(SigningProtocolError, LookupError):
    """Requested computation app is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"App not found on oracle node: {name!r}")


class MalformedSignature(SigningProtocolError, ValueError):
    """Signature string does not have the fixed 128 hex character body."""

    pass


class InvalidPointError(SigningProtocolError, ValueError):
    """A supplied point is not a valid secp256k1 point."""

    pass


class UnsupportedFieldType(SigningProtocolError, ValueError):
    """A signed field uses a type tag outside the typed hash vocabulary."""

    pass


class MethodNotSupported(SigningProtocolError, ValueError):
    """Requested method is not offered by the app."""

    pass


class ConfigurationError(SigningProtocolError):
    """Configuration error (missing or malformed signing key, bad manifest)."""

    pass


class CryptographicError(SigningProtocolError):
    """Cryptographic operation error."""

    pass


class SecurityError(SigningProtocolError):
    """Curve parameters or randomness failed a safety check."""

    pass


class SigningError(SigningProtocolError):
    """Error while producing a signature or a signed response."""

    pass
