from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from smarthr.ai.invoker import GenerationInvoker
from smarthr.core.config import Settings
from smarthr.integrations.blob_store import BlobStore, build_blob_key
from smarthr.integrations.candidate_store import CandidateNotFoundError, CandidateStore
from smarthr.normalize.candidate_fields import extract_candidate_fields
from smarthr.normalize.profile_analyzer import analyze_profile
from smarthr.schemas.candidates import SHORTLISTED_STATUS, CandidateRecord, TaskQuestionsResponse
from smarthr.schemas.documents import BlobLocation, RawDocument
from smarthr.schemas.profile import (
    QUESTIONS_PER_CATEGORY,
    AnalyzedProfile,
    CandidateProfile,
    JobDescriptionRecord,
    QuestionSet,
    TaskSet,
)
from smarthr.services.fallback_questions import (
    DEFAULT_BEHAVIORAL_QUESTION,
    DEFAULT_TECHNICAL_QUESTION,
    fallback_questions,
    fallback_questions_for_jd,
    fallback_tasks,
)
from smarthr.services.jd_processor import JobDescriptionProcessor
from smarthr.services.prompt_builder import (
    BEHAVIORAL_RANGE,
    SCENARIO_TASK_RANGE,
    TECHNICAL_RANGE,
    TECHNICAL_TASK_RANGE,
    PromptTask,
    build_prompt,
)
from smarthr.services.question_parser import pad_to, parse_pair
from smarthr.services.question_renderer import render_questions, render_tasks
from smarthr.services.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)

RESUME_BLOB_CATEGORY = "resumes"
TASK_MIN_ITEMS = 2
TECHNICAL_TASK_COUNT = TECHNICAL_TASK_RANGE[1] - TECHNICAL_TASK_RANGE[0] + 1
SCENARIO_TASK_COUNT = SCENARIO_TASK_RANGE[1] - SCENARIO_TASK_RANGE[0] + 1


class NotShortlistedError(RuntimeError):
    status_code = 400

    def __init__(self, email: str, current_status: str):
        super().__init__(f"Candidate {email} is not shortlisted (status: {current_status})")
        self.email = email
        self.current_status = current_status


class UploadRejectedError(RuntimeError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class GeneratedQuestions:
    questions: QuestionSet
    ai_used: bool
    personalized: bool


class IntakePipeline:
    def __init__(
        self,
        *,
        settings: Settings,
        blob_store: BlobStore,
        normalizer: TextNormalizer,
        jd_processor: JobDescriptionProcessor,
        invoker: GenerationInvoker,
        store: CandidateStore,
        clock: Callable[[], float] = time.time,
        now: Callable[[], datetime] | None = None,
    ):
        self._settings = settings
        self._blob_store = blob_store
        self._normalizer = normalizer
        self._jd_processor = jd_processor
        self._invoker = invoker
        self._store = store
        self._clock = clock
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def _generate(self, prompt: str) -> str | None:
        result = await self._invoker.invoke(
            prompt,
            max_tokens=self._settings.generation_max_tokens,
            temperature=self._settings.generation_temperature,
        )
        return result.output if result.success else None

    async def _generate_questions(
        self,
        text: str,
        candidate: CandidateProfile,
        profile: AnalyzedProfile,
        jd: JobDescriptionRecord | None,
    ) -> GeneratedQuestions:
        task: PromptTask = (
            "personalized_questions"
            if text.strip() and self._settings.personalized_questions
            else "initial_questions"
        )
        output = await self._generate(build_prompt(task, text, profile, jd, candidate))

        if output is not None:
            parsed = parse_pair(output, TECHNICAL_RANGE, BEHAVIORAL_RANGE)
            if parsed.accepted(self._settings.question_min_items):
                questions = QuestionSet(
                    technical=pad_to(parsed.first, QUESTIONS_PER_CATEGORY, DEFAULT_TECHNICAL_QUESTION),
                    behavioral=pad_to(parsed.second, QUESTIONS_PER_CATEGORY, DEFAULT_BEHAVIORAL_QUESTION),
                )
                logger.info(
                    "questions_from_ai task=%s technical=%s behavioral=%s",
                    task,
                    len(parsed.first),
                    len(parsed.second),
                )
                return GeneratedQuestions(questions, ai_used=True, personalized=task == "personalized_questions")
            logger.info(
                "questions_ai_output_rejected technical=%s behavioral=%s min_items=%s",
                len(parsed.first),
                len(parsed.second),
                self._settings.question_min_items,
            )

        if jd is not None:
            questions = fallback_questions_for_jd(text, candidate.name, jd, profile)
        else:
            questions = fallback_questions(text, candidate.name)
        logger.info("questions_from_fallback jd_aware=%s", jd is not None)
        return GeneratedQuestions(questions, ai_used=False, personalized=False)

    async def _process_jd(self, jd: RawDocument | None) -> JobDescriptionRecord | None:
        if jd is None or not jd.content:
            return None
        try:
            return await self._jd_processor.process(jd)
        except Exception as exc:  # noqa: BLE001 - JD enrichment is optional for an upload
            logger.warning("jd_processing_failed file=%s: %s", jd.filename, exc)
            return None

    async def process_upload(self, resume: RawDocument, jd: RawDocument | None = None) -> CandidateRecord:
        if not resume.content:
            raise UploadRejectedError("Resume file is empty")
        logger.info("resume_received file=%s media_type=%s bytes=%s", resume.filename, resume.media_type, resume.size)

        now = self._now()
        key = build_blob_key(RESUME_BLOB_CATEGORY, resume.filename, now)
        location = await self._blob_store.put(key, resume.content, resume.media_type)

        extracted = await self._normalizer.normalize(resume, location=location, min_chars=0)
        text = extracted.text if extracted is not None else ""
        if not text:
            logger.warning("resume_text_unavailable key=%s", key)

        candidate = extract_candidate_fields(text, clock=self._clock)
        profile = analyze_profile(text)
        jd_record = await self._process_jd(jd)

        generated = await self._generate_questions(text, candidate, profile, jd_record)
        html = render_questions(generated.questions, self._settings.display_timezone, now)

        timestamp = now.isoformat()
        record = CandidateRecord(
            email=candidate.email,
            name=candidate.name,
            phone=candidate.phone,
            questions=html,
            ai_used=generated.ai_used,
            personalized=generated.personalized,
            enhanced_matching=jd_record is not None,
            resume_url=location.url,
            resume_key=location.key,
            resume_bucket=location.bucket or "",
            resume_content_type=resume.media_type,
            resume_filename=resume.filename,
            jd_url=jd_record.jd_url if jd_record else "",
            job_title=jd_record.job_title if jd_record else "",
            uploaded_at=timestamp,
            updated_at=timestamp,
        )
        stored = await self._store.put(record.email, record.model_dump(exclude={"version"}))
        logger.info(
            "candidate_stored email=%s ai_used=%s personalized=%s enhanced_matching=%s extraction=%s",
            record.email,
            record.ai_used,
            record.personalized,
            record.enhanced_matching,
            extracted.method if extracted is not None else "none",
        )
        return CandidateRecord.model_validate(stored)

    async def _resume_text(self, record: CandidateRecord) -> str:
        if not record.resume_key:
            return ""
        location = BlobLocation(key=record.resume_key, url=record.resume_url, bucket=record.resume_bucket or None)
        content = await self._blob_store.get(location)
        document = RawDocument(
            content=content,
            media_type=record.resume_content_type,
            filename=record.resume_filename or record.resume_key,
        )
        extracted = await self._normalizer.normalize(document, location=location, min_chars=0)
        return extracted.text if extracted is not None else ""

    async def _generate_tasks(self, record: CandidateRecord, text: str) -> TaskSet:
        candidate = CandidateProfile(name=record.name, email=record.email, phone=record.phone)
        profile = analyze_profile(text)
        fallback = fallback_tasks(profile, record.job_title or None)

        prompt = build_prompt("task_questions", text, profile, None, candidate, job_title=record.job_title or None)
        output = await self._generate(prompt)
        if output is not None:
            parsed = parse_pair(output, TECHNICAL_TASK_RANGE, SCENARIO_TASK_RANGE)
            if parsed.accepted(TASK_MIN_ITEMS):
                logger.info(
                    "tasks_from_ai email=%s technical=%s scenario=%s",
                    record.email,
                    len(parsed.first),
                    len(parsed.second),
                )
                return TaskSet(
                    technical_tasks=(parsed.first or fallback.technical_tasks)[:TECHNICAL_TASK_COUNT],
                    scenario_tasks=(parsed.second or fallback.scenario_tasks)[:SCENARIO_TASK_COUNT],
                )
            logger.info("tasks_ai_output_rejected email=%s", record.email)

        logger.info("tasks_from_fallback email=%s", record.email)
        return fallback

    async def generate_task_questions(self, email: str) -> TaskQuestionsResponse:
        stored = await self._store.get(email)
        if stored is None:
            raise CandidateNotFoundError(email)
        record = CandidateRecord.model_validate(stored)

        if record.status != SHORTLISTED_STATUS:
            raise NotShortlistedError(email, record.status)
        if record.task_questions_generated and record.task_questions:
            logger.info("tasks_already_generated email=%s", email)
            return TaskQuestionsResponse(task_questions=record.task_questions, generated=True, already_generated=True)

        text = await self._resume_text(record)
        tasks = await self._generate_tasks(record, text)
        now = self._now()
        html = render_tasks(tasks, self._settings.display_timezone, now)
        await self._store.update(
            email,
            {
                "task_questions": html,
                "task_questions_generated": True,
                "task_generated_at": now.isoformat(),
                "updated_at": now.isoformat(),
            },
            expected_version=record.version,
        )
        return TaskQuestionsResponse(task_questions=html, generated=True, already_generated=False)
