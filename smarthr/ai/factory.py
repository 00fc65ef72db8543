from __future__ import annotations

import logging

from smarthr.ai.invoker import GenerationInvoker
from smarthr.ai.types import GenerationService
from smarthr.core.config import Settings

logger = logging.getLogger(__name__)


def get_generation_service(settings: Settings) -> GenerationService | None:
    if settings.generation_provider == "disabled":
        return None

    if settings.generation_provider == "bedrock":
        from smarthr.ai.providers.bedrock_provider import BedrockProvider

        return BedrockProvider(region=settings.aws_region)

    if settings.generation_provider == "openai":
        from smarthr.ai.providers.openai_provider import OpenAIProvider

        return OpenAIProvider(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )

    raise ValueError(f"Unsupported GENERATION_PROVIDER='{settings.generation_provider}'")


def build_invoker(settings: Settings, service: GenerationService | None = None) -> GenerationInvoker:
    if service is None:
        service = get_generation_service(settings)
    model_id = settings.bedrock_model_id if settings.generation_provider == "bedrock" else settings.openai_model
    logger.info(
        "generation_configured provider=%s model=%s shapes=%s",
        settings.generation_provider,
        model_id,
        ",".join(settings.generation_request_shapes),
    )
    return GenerationInvoker(service, model_id=model_id or "", shape_names=settings.generation_request_shapes)
