"""
Signs a token price quote.

The price is supplied by the caller here; a deployment would replace
``fetch_price`` with a lookup against its price sources.
"""

from typing import Any, Dict, List

import trio

from ..abi import encode_value
from ..interfaces import ComputationApp
from ..types import SignedField, SigningContext


class PriceApp(ComputationApp):
    """Quote ``params["price"]`` (uint256, scaled by 1e18) for ``params["token"]``."""

    methods = ("get",)

    async def fetch_price(self, token: str, params: Dict[str, Any]) -> int:
        await trio.sleep(0)
        if "price" not in params:
            raise ValueError("price requires a 'price' parameter")
        # Validates range and accepts decimal or 0x hex strings
        return int.from_bytes(encode_value("uint256", params["price"]), "big")

    async def compute(self, context: SigningContext) -> Any:
        token = context.params.get("token")
        if not isinstance(token, str):
            raise ValueError("price requires a 'token' address parameter")
        encode_value("address", token)
        price = await self.fetch_price(token, context.params)
        return {"token": token, "price": str(price)}

    def describe_signed_fields(
        self, context: SigningContext, result: Any
    ) -> List[SignedField]:
        return [
            SignedField(name="token", type="address", value=result["token"]),
            SignedField(name="price", type="uint256", value=result["price"]),
            SignedField(name="timestamp", type="uint256", value=context.timestamp),
        ]
