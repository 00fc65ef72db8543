from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI

from smarthr.ai.factory import build_invoker
from smarthr.core.config import Settings
from smarthr.integrations.blob_store import BlobStore, LocalBlobStore, S3BlobStore
from smarthr.integrations.candidate_store import CandidateStore, DynamoCandidateStore, SqliteCandidateStore
from smarthr.integrations.textract_ocr import OcrService, TextractOcr
from smarthr.services.candidate_review import CandidateReviewService
from smarthr.services.jd_processor import JobDescriptionProcessor
from smarthr.services.pipeline import IntakePipeline
from smarthr.services.text_normalizer import PollPolicy, TextNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    pipeline: IntakePipeline
    review: CandidateReviewService
    store: CandidateStore


def build_blob_store(settings: Settings) -> BlobStore:
    if settings.blob_backend == "s3":
        if not settings.s3_bucket:
            raise RuntimeError("BLOB_BACKEND=s3 requires S3_BUCKET to be set.")
        return S3BlobStore(bucket=settings.s3_bucket, region=settings.aws_region)
    return LocalBlobStore(settings.local_blob_dir)


def build_ocr(settings: Settings) -> OcrService | None:
    if settings.ocr_provider == "textract":
        return TextractOcr(region=settings.aws_region)
    return None


def build_candidate_store(settings: Settings) -> CandidateStore:
    if settings.datastore_backend == "dynamodb":
        if not settings.dynamodb_table_name:
            raise RuntimeError("DATASTORE_BACKEND=dynamodb requires DYNAMODB_TABLE_NAME to be set.")
        return DynamoCandidateStore(table_name=settings.dynamodb_table_name, region=settings.aws_region)
    return SqliteCandidateStore(settings.candidates_db_path)


def build_services(settings: Settings) -> Services:
    blob_store = build_blob_store(settings)
    normalizer = TextNormalizer(build_ocr(settings), PollPolicy.from_settings(settings))
    store = build_candidate_store(settings)
    pipeline = IntakePipeline(
        settings=settings,
        blob_store=blob_store,
        normalizer=normalizer,
        jd_processor=JobDescriptionProcessor(
            blob_store, normalizer, min_text_chars=settings.jd_min_text_chars
        ),
        invoker=build_invoker(settings),
        store=store,
    )
    logger.info(
        "services_built blob=%s ocr=%s generation=%s datastore=%s",
        settings.blob_backend,
        settings.ocr_provider,
        settings.generation_provider,
        settings.datastore_backend,
    )
    return Services(pipeline=pipeline, review=CandidateReviewService(store), store=store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(app.state.settings)
    yield
    close = getattr(app.state.services.store, "close", None)
    if callable(close):
        close()
