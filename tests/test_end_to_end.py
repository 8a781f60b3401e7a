"""
End-to-end signing flow: identity from the environment, a manifest-registered
app, CBOR transport of the response, and independent verification.
"""

import pytest
import trio

from oracle_signer.signing_protocol import (
    ComputationApp,
    SignedField,
    SignedResponse,
    SigningIdentity,
    SigningPipeline,
    default_registry,
    verify_response,
)
from oracle_signer.signing_protocol.config import APPS_MANIFEST_ENV_VAR, PRIVATE_KEY_ENV_VAR


class BalanceApp(ComputationApp):
    """Pretends to look up a balance over the network."""

    methods = ("balance",)

    async def compute(self, context):
        await trio.sleep(0)
        return {"owner": context.params["owner"], "balance": 10**18}

    def describe_signed_fields(self, context, result):
        return [
            SignedField("owner", "address", result["owner"]),
            SignedField("balance", "uint256", result["balance"]),
        ]


@pytest.fixture
def node(tmp_path, monkeypatch):
    manifest = tmp_path / "apps.yaml"
    manifest.write_text(f"apps:\n  balance: {__name__}:BalanceApp\n")
    monkeypatch.setenv(APPS_MANIFEST_ENV_VAR, str(manifest))
    monkeypatch.setenv(PRIVATE_KEY_ENV_VAR, "0x" + "42" * 32)

    identity = SigningIdentity.from_env()
    return SigningPipeline(identity, default_registry())


@pytest.mark.trio
async def test_sign_transport_verify(node):
    owner = "0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF"
    response = await node.run("balance", "balance", {"owner": owner})

    blob = response.to_bytes()
    received = SignedResponse.from_bytes(blob)

    assert received.result == {"owner": owner, "balance": 10**18}
    assert verify_response(received, expected_owner=node.identity.address)
    assert verify_response(received.to_dict())


@pytest.mark.trio
async def test_builtin_apps_still_available(node):
    response = await node.run("echo", "echo", {"message": "still here"})
    assert verify_response(response)
