"""
Capability contract for computation apps.

An app computes a result for a request and names the typed fields of that
result that must be covered by the signature.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence, Union

from .types import SignedField, SigningContext


class ComputationApp(ABC):
    """
    Base class for apps served by the signing pipeline.

    ``compute`` may suspend (I/O); ``describe_signed_fields`` must not.
    """

    #: Methods the app accepts; empty means any method.
    methods: Sequence[str] = ()

    @abstractmethod
    async def compute(self, context: SigningContext) -> Any:
        """Produce the result for ``context``."""

    @abstractmethod
    def describe_signed_fields(
        self, context: SigningContext, result: Any
    ) -> Sequence[Union[SignedField, Mapping[str, Any]]]:
        """Ordered typed fields of ``result`` to include in the signature."""

    def supports(self, method: str) -> bool:
        return not self.methods or method in self.methods
