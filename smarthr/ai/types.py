from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class GenerationService(Protocol):
    async def invoke(self, model_id: str, request_body: dict[str, Any]) -> str:
        """Send one request body and return the raw response body text."""
        ...


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    output: str | None = None
    shape: str | None = None

    @classmethod
    def failed(cls) -> "GenerationResult":
        return cls(success=False)
