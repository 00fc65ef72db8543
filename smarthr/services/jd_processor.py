from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from smarthr.integrations.blob_store import BlobStore, build_blob_key
from smarthr.normalize.jd_fields import (
    extract_company,
    extract_experience_requirement,
    extract_job_title,
    extract_required_skills,
)
from smarthr.schemas.documents import RawDocument
from smarthr.schemas.profile import JobDescriptionRecord
from smarthr.services.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)

JD_BLOB_CATEGORY = "job-descriptions"


class JobDescriptionProcessor:
    def __init__(
        self,
        blob_store: BlobStore,
        normalizer: TextNormalizer,
        *,
        min_text_chars: int = 80,
        now: Callable[[], datetime] | None = None,
    ):
        self._blob_store = blob_store
        self._normalizer = normalizer
        self._min_text_chars = min_text_chars
        self._now = now

    async def process(self, document: RawDocument) -> JobDescriptionRecord | None:
        """Store the JD, extract its text and fields; ``None`` when no text is obtainable."""
        key = build_blob_key(JD_BLOB_CATEGORY, document.filename, self._now() if self._now else None)
        location = await self._blob_store.put(key, document.content, document.media_type)

        extracted = await self._normalizer.normalize(
            document, location=location, min_chars=self._min_text_chars
        )
        if extracted is None or not extracted.text.strip():
            logger.warning("jd_processing_no_text key=%s", key)
            return None

        text = extracted.text
        record = JobDescriptionRecord(
            jd_text=text,
            job_title=extract_job_title(text),
            required_skills=extract_required_skills(text),
            experience_required=extract_experience_requirement(text),
            company=extract_company(text),
            jd_url=location.url,
            jd_key=location.key,
            extraction_method=extracted.method,
        )
        logger.info(
            "jd_processed key=%s method=%s title=%s chars=%s",
            key,
            extracted.method,
            record.job_title,
            extracted.char_count,
        )
        return record
