from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from smarthr.core.config import Settings
from smarthr.integrations.textract_ocr import OcrService
from smarthr.parsing.media import detect_document_kind
from smarthr.parsing.parse import decode_text_bytes, parse_docx_bytes, parse_pdf_bytes
from smarthr.schemas.documents import BlobLocation, DocumentKind, ExtractedText, ExtractionMethod, RawDocument

logger = logging.getLogger(__name__)

_OCR_KINDS: frozenset[DocumentKind] = frozenset({"pdf", "image", "unknown"})

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class OcrJobFailedError(RuntimeError):
    def __init__(self, job_id: str, message: str | None = None):
        super().__init__(f"OCR job {job_id} failed: {message or 'no status message'}")
        self.job_id = job_id


class OcrJobTimeoutError(RuntimeError):
    def __init__(self, job_id: str, attempts: int, elapsed_s: float):
        super().__init__(f"OCR job {job_id} did not finish after {attempts} polls ({elapsed_s:.1f}s)")
        self.job_id = job_id
        self.attempts = attempts
        self.elapsed_s = elapsed_s


@dataclass(frozen=True)
class PollPolicy:
    interval_s: float = 2.0
    backoff: float = 1.5
    max_interval_s: float = 10.0
    max_attempts: int = 30
    timeout_s: float = 120.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "PollPolicy":
        return cls(
            interval_s=settings.ocr_poll_interval_s,
            backoff=settings.ocr_poll_backoff,
            max_interval_s=settings.ocr_poll_max_interval_s,
            max_attempts=settings.ocr_poll_max_attempts,
            timeout_s=settings.ocr_job_timeout_s,
        )


async def wait_for_ocr_job(
    ocr: OcrService,
    job_id: str,
    policy: PollPolicy,
    *,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = time.monotonic,
) -> list[str]:
    """Poll an async OCR job until it is terminal, bounded by attempts and a deadline."""
    started = clock()
    deadline = started + policy.timeout_s
    interval = policy.interval_s
    for attempt in range(1, policy.max_attempts + 1):
        remaining = deadline - clock()
        if remaining <= 0:
            raise OcrJobTimeoutError(job_id, attempt - 1, clock() - started)
        await sleep(min(interval, remaining))

        state = await ocr.poll_job(job_id)
        if state.status == "SUCCEEDED":
            logger.info("ocr_job_succeeded job_id=%s attempts=%s lines=%s", job_id, attempt, len(state.lines))
            return state.lines
        if state.status == "FAILED":
            raise OcrJobFailedError(job_id, state.message)
        interval = min(interval * policy.backoff, policy.max_interval_s)

    raise OcrJobTimeoutError(job_id, policy.max_attempts, clock() - started)


@dataclass(frozen=True)
class _Attempt:
    document: RawDocument
    kind: DocumentKind
    location: BlobLocation | None


@dataclass(frozen=True)
class ExtractionStrategy:
    method: ExtractionMethod
    applies: Callable[[_Attempt], bool]
    run: Callable[[_Attempt], Awaitable[str]]
    uses_min_chars: bool = False


class TextNormalizer:
    """Best-effort plain text from an uploaded document.

    Strategies run in order and the first acceptable result wins. OCR results
    must exceed ``min_chars``; parser results only need to be non-empty.
    """

    def __init__(
        self,
        ocr: OcrService | None,
        poll_policy: PollPolicy | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ):
        self._ocr = ocr
        self._poll_policy = poll_policy or PollPolicy()
        self._sleep = sleep
        self._clock = clock
        self.strategies: tuple[ExtractionStrategy, ...] = (
            ExtractionStrategy("ocr_sync", self._ocr_applies, self._ocr_sync, uses_min_chars=True),
            ExtractionStrategy("ocr_async", self._ocr_async_applies, self._ocr_async, uses_min_chars=True),
            ExtractionStrategy("pdf_text", lambda attempt: attempt.kind == "pdf", self._pdf_text),
            ExtractionStrategy("docx_text", lambda attempt: attempt.kind in ("docx", "doc"), self._docx_text),
            ExtractionStrategy("ocr_retry", self._ocr_retry_applies, self._ocr_sync),
            ExtractionStrategy("plain_text", lambda attempt: attempt.kind == "text", self._plain_text),
        )

    def _ocr_applies(self, attempt: _Attempt) -> bool:
        return self._ocr is not None and attempt.kind in _OCR_KINDS

    def _ocr_async_applies(self, attempt: _Attempt) -> bool:
        return (
            self._ocr is not None
            and attempt.kind == "pdf"
            and attempt.location is not None
            and attempt.location.supports_async_ocr
        )

    def _ocr_retry_applies(self, attempt: _Attempt) -> bool:
        return self._ocr is not None and attempt.kind == "image"

    async def _ocr_sync(self, attempt: _Attempt) -> str:
        if self._ocr is None:
            return ""
        return "\n".join(await self._ocr.detect_text(attempt.document.content))

    async def _ocr_async(self, attempt: _Attempt) -> str:
        if self._ocr is None or attempt.location is None:
            return ""
        job_id = await self._ocr.start_job(attempt.location)
        lines = await wait_for_ocr_job(
            self._ocr, job_id, self._poll_policy, sleep=self._sleep, clock=self._clock
        )
        return "\n".join(lines)

    async def _pdf_text(self, attempt: _Attempt) -> str:
        return await asyncio.to_thread(parse_pdf_bytes, attempt.document.content)

    async def _docx_text(self, attempt: _Attempt) -> str:
        return await asyncio.to_thread(parse_docx_bytes, attempt.document.content)

    async def _plain_text(self, attempt: _Attempt) -> str:
        return decode_text_bytes(attempt.document.content)

    async def normalize(
        self,
        document: RawDocument,
        *,
        location: BlobLocation | None = None,
        min_chars: int = 0,
    ) -> ExtractedText | None:
        kind = detect_document_kind(document.media_type, document.filename, document.content)
        attempt = _Attempt(document=document, kind=kind, location=location)

        for strategy in self.strategies:
            if not strategy.applies(attempt):
                continue
            try:
                text = (await strategy.run(attempt)).strip()
            except Exception as exc:  # noqa: BLE001 - a failed strategy falls through to the next one
                logger.warning(
                    "text_extraction_strategy_failed method=%s kind=%s file=%s: %s",
                    strategy.method,
                    kind,
                    document.filename,
                    exc,
                )
                continue

            threshold = min_chars if strategy.uses_min_chars else 0
            if len(text) > threshold:
                logger.info(
                    "text_extraction_succeeded method=%s kind=%s chars=%s", strategy.method, kind, len(text)
                )
                return ExtractedText(text=text, method=strategy.method)
            logger.info(
                "text_extraction_below_threshold method=%s kind=%s chars=%s min_chars=%s",
                strategy.method,
                kind,
                len(text),
                threshold,
            )

        logger.warning("text_extraction_failed kind=%s file=%s", kind, document.filename)
        return None
