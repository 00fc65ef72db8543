from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from smarthr.integrations.candidate_store import CandidateNotFoundError, CandidateStore
from smarthr.schemas.candidates import CandidateRecord, CandidateUpdate

logger = logging.getLogger(__name__)


class CandidateReviewService:
    """HR-facing reads and workflow-field edits of stored candidates."""

    def __init__(self, store: CandidateStore, now: Callable[[], datetime] | None = None):
        self._store = store
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def list_candidates(self) -> list[CandidateRecord]:
        return [CandidateRecord.model_validate(item) for item in await self._store.scan_all()]

    async def get_candidate(self, email: str) -> CandidateRecord:
        stored = await self._store.get(email)
        if stored is None:
            raise CandidateNotFoundError(email)
        return CandidateRecord.model_validate(stored)

    async def update_candidate(self, email: str, update: CandidateUpdate) -> CandidateRecord:
        fields = update.changed_fields()
        if not fields:
            return await self.get_candidate(email)
        fields["updated_at"] = self._now().isoformat()
        stored = await self._store.update(email, fields, expected_version=update.version)
        logger.info(
            "candidate_updated email=%s fields=%s version=%s",
            email,
            ",".join(sorted(key for key in fields if key != "updated_at")),
            stored.get("version"),
        )
        return CandidateRecord.model_validate(stored)
