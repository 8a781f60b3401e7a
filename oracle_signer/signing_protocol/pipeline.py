"""
⚠️ DRAFT — requires crypto review before production use

Signing pipeline: runs a computation app and signs its result.

Flow for one request:
    1. Resolve the app (ModuleNotFound if absent)
    2. app_id = keccak256(app name)
    3. Build a SigningContext (params, timestamp)
    4. await app.compute(context)
    5. app.describe_signed_fields(context, result)
    6. commitment = typed hash of the app's fields
    7. req_id = fresh random scalar, hex
    8. sign_params = [appId, reqId] + app fields; hash = typed hash of those
    9. Sign hash with the identity key and a fresh nonce
    10. Assemble the SignedResponse

Each request is independent. The identity is shared read-only; every request
draws its own request id and nonce.
"""

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union

from .abi import solidity_sha3
from .config import RESERVED_SIGN_FIELDS
from .exceptions import (
    InvalidPointError,
    MalformedSignature,
    MethodNotSupported,
    SigningError,
    SigningProtocolError,
)
from .identity import SigningIdentity
from .registry import AppRegistry, app_id_for, default_registry
from .schnorr.address import derive_address, public_key_from_view
from .schnorr.engine import generate_nonce, schnorr_sign, schnorr_verify
from .schnorr.signature import encode_signature, scalar_to_hex
from .security import RandomnessSource
from .types import SignatureEntry, SignedField, SignedResponse, SigningContext

logger = logging.getLogger(__name__)


def build_sign_params(
    app_id: str, req_id: str, app_fields: List[SignedField]
) -> List[SignedField]:
    """Prepend the reserved ``appId``/``reqId`` fields to an app's fields."""
    app_id_name, req_id_name = RESERVED_SIGN_FIELDS
    return [
        SignedField(name=app_id_name, type="uint256", value=app_id),
        SignedField(name=req_id_name, type="uint256", value=req_id),
        *app_fields,
    ]


def hash_to_be_signed(sign_params: List[SignedField]) -> str:
    """Typed hash over the full ordered field list."""
    return solidity_sha3(sign_params)


class SigningPipeline:
    """
    Binds app results to Schnorr signatures from one signing identity.

    Args:
        identity: The node's signing identity
        registry: App registry (built-in apps if None)
        randomness_source: Source for request ids and nonces (created if None)
    """

    def __init__(
        self,
        identity: SigningIdentity,
        registry: Optional[AppRegistry] = None,
        randomness_source: Optional[RandomnessSource] = None,
    ):
        self.identity = identity
        self.registry = registry if registry is not None else default_registry()
        self._rng = randomness_source or RandomnessSource()

    def _new_request_id(self) -> str:
        return scalar_to_hex(self._rng.get_random_private_scalar())

    async def run(
        self,
        app: str,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        timestamp: Optional[int] = None,
    ) -> SignedResponse:
        """
        Run ``app.method`` and return the signed response.

        Raises:
            ModuleNotFound: If ``app`` is not registered
            MethodNotSupported: If the app does not offer ``method``
            SigningError: If the app's fields cannot be hashed or signing fails
            Exception: Whatever the app's ``compute`` raises
        """
        computation = self.registry.resolve(app)
        if not computation.supports(method):
            raise MethodNotSupported(f"App {app!r} does not support method {method!r}")

        context = SigningContext(
            app=app,
            app_id=app_id_for(app),
            method=method,
            params=dict(params or {}),
            timestamp=int(time.time()) if timestamp is None else int(timestamp),
        )
        logger.debug("Running app %s.%s", app, method)

        result = await computation.compute(context)

        try:
            app_fields = [
                SignedField.from_obj(f)
                for f in computation.describe_signed_fields(context, result)
            ]
            commitment = solidity_sha3(app_fields)

            context.req_id = self._new_request_id()
            context.sign_params = build_sign_params(
                context.app_id, context.req_id, app_fields
            )
            digest = hash_to_be_signed(context.sign_params)
        except (TypeError, ValueError) as e:
            raise SigningError(f"App {app!r} produced unsignable fields: {e}") from e

        nonce = generate_nonce(self._rng, self.identity.params)
        signature = schnorr_sign(
            self.identity.private_key,
            self.identity.public_key,
            nonce.private,
            nonce.public,
            digest,
            self.identity.params,
        )
        logger.debug(
            "Signed %s.%s req=%s commitment=%s", app, method, context.req_id, commitment
        )

        return SignedResponse(
            req_id=context.req_id,
            app=app,
            app_id=context.app_id,
            method=method,
            params=context.params,
            timestamp=context.timestamp,
            sign_params=context.sign_params,
            signatures=[
                SignatureEntry(
                    owner=self.identity.address,
                    owner_pub_key=self.identity.public_key_view(minimal=True),
                    signature=encode_signature(signature),
                )
            ],
            result=result,
            commitment=commitment,
        )


def verify_response(
    response: Union[SignedResponse, Mapping[str, Any]],
    expected_owner: Optional[str] = None,
) -> bool:
    """
    Check every signature on a response against its signed fields.

    Recomputes the hash from ``signParams``, checks that the reserved fields
    match ``appId``/``reqId`` and that each signature's ``owner`` is the
    address of its ``ownerPubKey``. Fails closed.

    Args:
        response: SignedResponse or its wire dict
        expected_owner: If given, at least one signature must be from it
    """
    try:
        if not isinstance(response, SignedResponse):
            response = SignedResponse.from_dict(response)

        if len(response.sign_params) < 2 or not response.signatures:
            return False
        app_id_field, req_id_field = response.sign_params[:2]
        app_id_name, req_id_name = RESERVED_SIGN_FIELDS
        if (app_id_field.name, app_id_field.type) != (app_id_name, "uint256"):
            return False
        if (req_id_field.name, req_id_field.type) != (req_id_name, "uint256"):
            return False
        if str(app_id_field.value) != response.app_id:
            return False
        if str(req_id_field.value) != response.req_id:
            return False
        if response.app_id != app_id_for(response.app):
            return False

        digest = hash_to_be_signed(response.sign_params)
    except (SigningProtocolError, TypeError, ValueError):
        return False

    owners = set()
    for entry in response.signatures:
        try:
            public_key = public_key_from_view(entry.owner_pub_key)
            if derive_address(public_key) != entry.owner:
                return False
        except (InvalidPointError, MalformedSignature, KeyError, TypeError, ValueError):
            return False
        if not schnorr_verify(public_key, digest, entry.signature):
            return False
        owners.add(entry.owner)

    if expected_owner is not None and expected_owner not in owners:
        return False
    return True
