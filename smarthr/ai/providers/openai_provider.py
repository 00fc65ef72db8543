from __future__ import annotations

import json
from typing import Any, Optional

from openai import AsyncOpenAI


class UnsupportedRequestShape(ValueError):
    pass


class OpenAIProvider:
    """Chat-completions backend; only the ``messages`` request shape maps onto it."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 2,
        client: Any | None = None,
    ):
        self._model = model
        if client is not None:
            self._client = client
            return
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")
        self._client = AsyncOpenAI(
            api_key=key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    async def invoke(self, model_id: str, request_body: dict[str, Any]) -> str:
        messages = request_body.get("messages")
        if not isinstance(messages, list):
            raise UnsupportedRequestShape("openai provider accepts only chat messages")

        create_kwargs: dict[str, Any] = {
            "model": model_id or self._model,
            "messages": messages,
        }
        if "max_tokens" in request_body:
            create_kwargs["max_tokens"] = request_body["max_tokens"]
        if "temperature" in request_body:
            create_kwargs["temperature"] = request_body["temperature"]

        response = await self._client.chat.completions.create(**create_kwargs)
        return json.dumps(response.model_dump())
