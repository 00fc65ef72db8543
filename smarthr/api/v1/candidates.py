from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse

from smarthr.core.lifespan import Services
from smarthr.core.security import require_api_key
from smarthr.integrations.candidate_store import CandidateNotFoundError, StaleCandidateError
from smarthr.integrations.errors import UpstreamServiceError
from smarthr.parsing.media import detect_document_kind, media_type_for
from smarthr.schemas.candidates import (
    CandidateRecord,
    CandidateUpdate,
    ErrorResponse,
    NotShortlistedResponse,
    TaskQuestionsResponse,
    UploadResponse,
)
from smarthr.schemas.documents import RawDocument
from smarthr.services.pipeline import NotShortlistedError, UploadRejectedError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_api_key)])

UPLOAD_CHUNK_BYTES = 1024 * 64
UPLOAD_FAILED_DETAILS = "Resume upload and processing failed"
TASK_FAILED_DETAILS = "Task question generation failed"


def _services(request: Request) -> Services:
    return request.app.state.services


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(by_alias=True),
    )


def _format_limit(max_bytes: int) -> str:
    if max_bytes >= 1024 * 1024:
        return f"{max_bytes // (1024 * 1024)} MB"
    return f"{max_bytes} bytes"


async def _read_upload(file: UploadFile, max_bytes: int) -> RawDocument:
    filename = file.filename or "uploaded-file"
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise UploadRejectedError(
                f"File too large. Maximum allowed size is {_format_limit(max_bytes)}.",
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            )
        chunks.append(chunk)
    content = b"".join(chunks)
    declared = (file.content_type or "").split(";")[0].strip().lower()
    kind = detect_document_kind(declared, filename, content)
    return RawDocument(
        content=content,
        media_type=media_type_for(kind, declared),
        filename=filename,
        declared_size=file.size,
    )


@router.post("/upload", response_model=UploadResponse, response_model_by_alias=True)
async def upload_resume(
    request: Request,
    resume: UploadFile | None = File(default=None),
    job_description: UploadFile | None = File(default=None, alias="jobDescription"),
):
    settings = request.app.state.settings
    if resume is None:
        return _error(status.HTTP_400_BAD_REQUEST, "No file uploaded", "A 'resume' file is required")

    try:
        resume_doc = await _read_upload(resume, settings.max_upload_bytes)
        jd_doc = await _read_upload(job_description, settings.max_upload_bytes) if job_description else None
        record = await asyncio.wait_for(
            _services(request).pipeline.process_upload(resume_doc, jd_doc),
            timeout=settings.pipeline_timeout_s,
        )
    except UploadRejectedError as exc:
        return _error(exc.status_code, exc.message, UPLOAD_FAILED_DETAILS)
    except asyncio.TimeoutError:
        logger.warning("upload_timed_out timeout_s=%s", settings.pipeline_timeout_s)
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "Resume processing timed out", UPLOAD_FAILED_DETAILS)
    except UpstreamServiceError as exc:
        logger.warning("upload_upstream_failed service=%s: %s", exc.service, exc.message)
        return _error(exc.status_code, str(exc), UPLOAD_FAILED_DETAILS)
    except Exception as exc:
        logger.exception("upload_failed: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or exc.__class__.__name__, UPLOAD_FAILED_DETAILS)

    return UploadResponse(**record.model_dump())


@router.get("/candidates", response_model=list[CandidateRecord], response_model_by_alias=True)
async def list_candidates(request: Request):
    try:
        return await _services(request).review.list_candidates()
    except UpstreamServiceError as exc:
        return _error(exc.status_code, "Failed to fetch candidates", str(exc))


@router.get("/candidates/{email}", response_model=CandidateRecord, response_model_by_alias=True)
async def get_candidate(request: Request, email: str):
    try:
        return await _services(request).review.get_candidate(email)
    except CandidateNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except UpstreamServiceError as exc:
        return _error(exc.status_code, "Failed to fetch candidate", str(exc))


@router.put("/candidates/{email}", response_model=CandidateRecord, response_model_by_alias=True)
async def update_candidate(request: Request, email: str, payload: CandidateUpdate):
    try:
        return await _services(request).review.update_candidate(email, payload)
    except (CandidateNotFoundError, StaleCandidateError) as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except UpstreamServiceError as exc:
        return _error(exc.status_code, "Failed to update candidate", str(exc))


@router.post(
    "/generate-tasks/{email}",
    response_model=TaskQuestionsResponse,
    response_model_by_alias=True,
    responses={400: {"model": NotShortlistedResponse}},
)
async def generate_tasks(request: Request, email: str):
    settings = request.app.state.settings
    try:
        return await asyncio.wait_for(
            _services(request).pipeline.generate_task_questions(email),
            timeout=settings.pipeline_timeout_s,
        )
    except NotShortlistedError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content=NotShortlistedResponse(current_status=exc.current_status).model_dump(by_alias=True),
        )
    except (CandidateNotFoundError, StaleCandidateError) as exc:
        return _error(exc.status_code, str(exc), TASK_FAILED_DETAILS)
    except asyncio.TimeoutError:
        logger.warning("task_generation_timed_out email=%s", email)
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "Task generation timed out", TASK_FAILED_DETAILS)
    except UpstreamServiceError as exc:
        return _error(exc.status_code, str(exc), TASK_FAILED_DETAILS)
    except Exception as exc:
        logger.exception("task_generation_failed email=%s: %s", email, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or exc.__class__.__name__, TASK_FAILED_DETAILS)
