from __future__ import annotations

import asyncio
import json
from typing import Any

import boto3
from botocore.config import Config


class BedrockProvider:
    def __init__(self, region: str, client: Any | None = None, timeout_s: float = 60.0):
        self._client = client or boto3.client(
            "bedrock-runtime",
            region_name=region,
            config=Config(read_timeout=timeout_s, retries={"max_attempts": 2, "mode": "standard"}),
        )

    def _invoke_sync(self, model_id: str, request_body: dict[str, Any]) -> str:
        response = self._client.invoke_model(
            modelId=model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(request_body),
        )
        body = response["body"]
        raw = body.read() if hasattr(body, "read") else body
        return raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else str(raw)

    async def invoke(self, model_id: str, request_body: dict[str, Any]) -> str:
        return await asyncio.to_thread(self._invoke_sync, model_id, request_body)
