"""Signs a caller-supplied message."""

from typing import Any, List

from ..interfaces import ComputationApp
from ..types import SignedField, SigningContext


class EchoApp(ComputationApp):
    """Returns ``params["message"]`` unchanged and signs it as a string."""

    methods = ("echo",)

    async def compute(self, context: SigningContext) -> Any:
        message = context.params.get("message")
        if not isinstance(message, str):
            raise ValueError("echo requires a string 'message' parameter")
        return {"message": message}

    def describe_signed_fields(
        self, context: SigningContext, result: Any
    ) -> List[SignedField]:
        return [SignedField(name="message", type="string", value=result["message"])]
