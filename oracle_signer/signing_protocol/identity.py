"""
⚠️ DRAFT — requires crypto review before production use

The node's signing identity.

Constructed once at startup (usually from ``$PRIVATE_KEY``) and passed
explicitly to the pipeline. Read-only after construction.
"""

import logging
import os
import re
from typing import Any, Dict, Optional

from .config import GROUP_ORDER, PRIVATE_KEY_ENV_VAR
from .exceptions import ConfigurationError
from .schnorr.address import derive_address, public_key_view
from .schnorr.curve import CurveParameters, get_cached_curve_params
from .schnorr.engine import KeyPair, generate_keypair
from .security import RandomnessSource

logger = logging.getLogger(__name__)

_PRIVATE_KEY_RE = re.compile(r"^(0x)?[0-9a-fA-F]{1,64}$")


def parse_private_key(value: str) -> int:
    """
    Parse a hex private key (``0x`` optional, up to 64 hex characters).

    Raises:
        ConfigurationError: If the key is malformed or out of [1, n)
    """
    if not isinstance(value, str) or not _PRIVATE_KEY_RE.match(value.strip()):
        raise ConfigurationError("Private key must be up to 64 hex characters")

    text = value.strip()
    key = int(text[2:] if text[:2] == "0x" else text, 16)
    if not 1 <= key < GROUP_ORDER:
        raise ConfigurationError("Private key must be in [1, GROUP_ORDER)")
    return key


class SigningIdentity:
    """
    A long-lived key pair with its derived address.

    Example:
        >>> identity = SigningIdentity(1)
        >>> identity.address
        '0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf'
    """

    def __init__(self, private_key: int, params: Optional[CurveParameters] = None):
        self._params = params if params is not None else get_cached_curve_params()
        try:
            self._keypair = KeyPair.from_private(private_key, self._params)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid signing key: {e}") from e
        self._address = derive_address(self._keypair.public, self._params)

    @classmethod
    def from_env(
        cls, var: str = PRIVATE_KEY_ENV_VAR, params: Optional[CurveParameters] = None
    ) -> "SigningIdentity":
        """
        Load the identity from an environment variable.

        Raises:
            ConfigurationError: If the variable is unset or malformed
        """
        value = os.getenv(var)
        if not value:
            raise ConfigurationError(f"Environment variable {var} is not set")
        identity = cls(parse_private_key(value), params)
        logger.info("Loaded signing identity %s from $%s", identity.address, var)
        return identity

    @classmethod
    def generate(
        cls,
        randomness_source: Optional[RandomnessSource] = None,
        params: Optional[CurveParameters] = None,
    ) -> "SigningIdentity":
        """Fresh random identity (tests, key generation)."""
        return cls(generate_keypair(randomness_source, params).private, params)

    @property
    def keypair(self) -> KeyPair:
        return self._keypair

    @property
    def private_key(self) -> int:
        return self._keypair.private

    @property
    def public_key(self) -> Any:
        return self._keypair.public

    @property
    def address(self) -> str:
        return self._address

    @property
    def params(self) -> CurveParameters:
        return self._params

    def public_key_view(self, minimal: bool = True) -> Dict[str, str]:
        return public_key_view(self.public_key, minimal, self._params)

    def private_key_hex(self) -> str:
        return "0x" + format(self.private_key, "064x")

    def __repr__(self) -> str:
        return f"SigningIdentity(address={self._address!r})"
