from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from smarthr.integrations.errors import UpstreamServiceError
from smarthr.schemas.documents import BlobLocation

logger = logging.getLogger(__name__)

JobStatus = Literal["IN_PROGRESS", "SUCCEEDED", "FAILED"]


@dataclass(frozen=True)
class OcrJobState:
    status: JobStatus
    lines: list[str] = field(default_factory=list)
    message: str | None = None


class OcrService(Protocol):
    async def detect_text(self, content: bytes) -> list[str]: ...

    async def start_job(self, location: BlobLocation) -> str: ...

    async def poll_job(self, job_id: str) -> OcrJobState: ...


def _line_texts(blocks: list[dict[str, Any]]) -> list[str]:
    return [block["Text"] for block in blocks if block.get("BlockType") == "LINE" and block.get("Text")]


class TextractOcr:
    def __init__(self, region: str, client: Any | None = None):
        if client is None:
            import boto3

            client = boto3.client("textract", region_name=region)
        self._client = client

    async def detect_text(self, content: bytes) -> list[str]:
        try:
            response = await asyncio.to_thread(
                self._client.detect_document_text, Document={"Bytes": content}
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamServiceError("textract", str(exc)) from exc
        return _line_texts(response.get("Blocks", []))

    async def start_job(self, location: BlobLocation) -> str:
        if not location.bucket:
            raise UpstreamServiceError("textract", "async OCR requires an object-storage location")
        try:
            response = await asyncio.to_thread(
                self._client.start_document_text_detection,
                DocumentLocation={"S3Object": {"Bucket": location.bucket, "Name": location.key}},
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamServiceError("textract", str(exc)) from exc
        job_id = response["JobId"]
        logger.info("ocr_job_started job_id=%s key=%s", job_id, location.key)
        return job_id

    async def poll_job(self, job_id: str) -> OcrJobState:
        lines: list[str] = []
        next_token: str | None = None
        while True:
            kwargs: dict[str, Any] = {"JobId": job_id}
            if next_token:
                kwargs["NextToken"] = next_token
            try:
                response = await asyncio.to_thread(self._client.get_document_text_detection, **kwargs)
            except (BotoCoreError, ClientError) as exc:
                raise UpstreamServiceError("textract", str(exc)) from exc

            status = response.get("JobStatus", "IN_PROGRESS")
            if status == "IN_PROGRESS":
                return OcrJobState(status="IN_PROGRESS")
            if status == "FAILED":
                return OcrJobState(status="FAILED", message=response.get("StatusMessage"))

            # PARTIAL_SUCCESS still carries usable pages.
            lines.extend(_line_texts(response.get("Blocks", [])))
            next_token = response.get("NextToken")
            if not next_token:
                return OcrJobState(status="SUCCEEDED", lines=lines)
