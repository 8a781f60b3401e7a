"""
⚠️ DRAFT — requires crypto review before production use

Common types for signed oracle responses.

This module provides:
1. SignedField - one typed entry of the signed commitment
2. SigningContext - per-request context handed to computation apps
3. SignatureEntry - one signer's contribution to a response
4. SignedResponse - the full response with JSON and CBOR serialization

Wire shape of a response (``SignedResponse.to_dict``):

    {
        "reqId": "0x...",
        "app": "price",
        "appId": "<decimal>",
        "method": "get",
        "data": {
            "params": {...},
            "timestamp": 1700000000,
            "result": ...,
            "signParams": [{"name": ..., "type": ..., "value": ...}, ...],
        },
        "signatures": [
            {"owner": "0x...", "ownerPubKey": {"x": ..., "yParity": ...},
             "signature": "0x<e><s>"},
        ],
    }
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

try:
    import cbor2
except ImportError:
    raise ImportError(
        "cbor2 is required for response serialization. "
        "Install with: pip install cbor2"
    )

from .config import RESPONSE_VERSION
from .exceptions import SigningProtocolError

# ============================================================================
# SIGNED FIELD
# ============================================================================


@dataclass(frozen=True)
class SignedField:
    """
    A typed value included in the signed commitment.

    Attributes:
        name: Human-readable label (not hashed)
        type: Type tag from the typed hash vocabulary (e.g. "uint256")
        value: Value, interpreted according to ``type``
    """

    name: str
    type: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible form; bytes values become ``0x`` hex."""
        value = self.value
        if isinstance(value, (bytes, bytearray)):
            value = "0x" + bytes(value).hex()
        return {"name": self.name, "type": self.type, "value": value}

    @classmethod
    def from_obj(cls, obj: Any) -> "SignedField":
        """Accept a SignedField or a mapping with name/type/value keys."""
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, Mapping):
            try:
                return cls(name=obj.get("name", ""), type=obj["type"], value=obj["value"])
            except KeyError as e:
                raise ValueError(f"Signed field missing key {e.args[0]!r}: {obj!r}") from e
        raise TypeError(f"Cannot convert {type(obj).__name__} to SignedField")


# ============================================================================
# SIGNING CONTEXT
# ============================================================================


@dataclass
class SigningContext:
    """
    Per-request context handed to a computation app.

    Created at request start and discarded once the response is built.
    ``req_id`` is only assigned after the app has computed its result.

    Attributes:
        app: Registered app name
        app_id: Decimal string of keccak256(app name)
        method: App method requested by the caller
        params: Caller-supplied parameters
        timestamp: Request time in epoch seconds
        req_id: Request identifier, set by the pipeline
        sign_params: Ordered typed fields to be hashed, set by the pipeline
    """

    app: str
    app_id: str
    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    timestamp: int = field(default_factory=lambda: int(time.time()))
    req_id: Optional[str] = None
    sign_params: List[SignedField] = field(default_factory=list)


# ============================================================================
# SIGNATURES
# ============================================================================


@dataclass(frozen=True)
class SignatureEntry:
    """
    One signer's signature over a response.

    Attributes:
        owner: Signer's checksummed address
        owner_pub_key: Minimal public key view {"x", "yParity"}
        signature: 130 character ``(e, s)`` wire form
    """

    owner: str
    owner_pub_key: Dict[str, str]
    signature: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "ownerPubKey": dict(self.owner_pub_key),
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SignatureEntry":
        return cls(
            owner=data["owner"],
            owner_pub_key=dict(data["ownerPubKey"]),
            signature=data["signature"],
        )


# ============================================================================
# SIGNED RESPONSE
# ============================================================================


@dataclass
class SignedResponse:
    """
    A computation result bound to a Schnorr signature.

    ``commitment`` is the typed hash over the app's own fields. It is kept
    for logging and callers but is not part of the wire shape, since it is
    recomputable from ``sign_params``.
    """

    req_id: str
    app: str
    app_id: str
    method: str
    params: Dict[str, Any]
    timestamp: int
    sign_params: List[SignedField]
    signatures: List[SignatureEntry]
    result: Any = None
    commitment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape of the response (JSON compatible)."""
        return {
            "reqId": self.req_id,
            "app": self.app,
            "appId": self.app_id,
            "method": self.method,
            "data": {
                "params": self.params,
                "timestamp": self.timestamp,
                "result": self.result,
                "signParams": [f.to_dict() for f in self.sign_params],
            },
            "signatures": [s.to_dict() for s in self.signatures],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SignedResponse":
        """
        Rebuild a response from its wire shape.

        Raises:
            SigningProtocolError: If required keys are missing or the
                structure is not the wire shape
        """
        if not isinstance(data, Mapping):
            raise SigningProtocolError(
                f"Malformed signed response: expected a mapping, got {type(data).__name__}"
            )
        body = data.get("data")
        if not isinstance(body, Mapping):
            raise SigningProtocolError("Malformed signed response: 'data' must be a mapping")
        for key in ("reqId", "app", "method"):
            if not isinstance(data.get(key), str):
                raise SigningProtocolError(
                    f"Malformed signed response: {key!r} must be a string"
                )
        if not isinstance(body.get("params") or {}, Mapping):
            raise SigningProtocolError(
                "Malformed signed response: 'data.params' must be a mapping"
            )

        try:
            return cls(
                req_id=data["reqId"],
                app=data["app"],
                app_id=str(data["appId"]),
                method=data["method"],
                params=dict(body.get("params") or {}),
                timestamp=int(body["timestamp"]),
                sign_params=[SignedField.from_obj(f) for f in body["signParams"]],
                signatures=[SignatureEntry.from_dict(s) for s in data["signatures"]],
                result=body.get("result"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SigningProtocolError(f"Malformed signed response: {e}") from e

    def to_bytes(self) -> bytes:
        """CBOR encoding with a version field."""
        return cbor2.dumps({"version": RESPONSE_VERSION, "response": self.to_dict()})

    @classmethod
    def from_bytes(cls, data: bytes) -> "SignedResponse":
        """
        Decode the CBOR form produced by ``to_bytes``.

        Raises:
            SigningProtocolError: On undecodable data or version mismatch
        """
        try:
            obj = cbor2.loads(data)
        except Exception as e:
            raise SigningProtocolError(f"Failed to decode response: {e}") from e

        if not isinstance(obj, dict) or obj.get("version") != RESPONSE_VERSION:
            raise SigningProtocolError(
                f"Unsupported response version: "
                f"{obj.get('version') if isinstance(obj, dict) else None!r}"
            )
        return cls.from_dict(obj["response"])
