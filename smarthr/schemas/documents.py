from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DocumentKind = Literal["pdf", "docx", "doc", "image", "text", "unknown"]
ExtractionMethod = Literal["ocr_sync", "ocr_async", "pdf_text", "docx_text", "ocr_retry", "plain_text"]


@dataclass(frozen=True)
class RawDocument:
    content: bytes
    media_type: str
    filename: str
    declared_size: int | None = None

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.content)


@dataclass(frozen=True)
class BlobLocation:
    key: str
    url: str
    bucket: str | None = None

    @property
    def supports_async_ocr(self) -> bool:
        return bool(self.bucket)


@dataclass(frozen=True)
class ExtractedText:
    text: str
    method: ExtractionMethod

    @property
    def char_count(self) -> int:
        return len(self.text)
