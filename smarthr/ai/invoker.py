from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from smarthr.ai.types import GenerationResult, GenerationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestShape:
    """One way of placing a prompt into a model request body."""

    name: str
    build: Callable[[str, int, float], dict[str, Any]]


REQUEST_SHAPES: dict[str, RequestShape] = {
    shape.name: shape
    for shape in (
        RequestShape("input", lambda prompt, max_tokens, temperature: {
            "input": prompt, "max_tokens": max_tokens, "temperature": temperature,
        }),
        RequestShape("prompt", lambda prompt, max_tokens, temperature: {
            "prompt": prompt, "max_tokens": max_tokens, "temperature": temperature,
        }),
        RequestShape("messages", lambda prompt, max_tokens, temperature: {
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }),
        RequestShape("text", lambda prompt, max_tokens, temperature: {
            "text": prompt, "max_tokens": max_tokens, "temperature": temperature,
        }),
        RequestShape("input_only", lambda prompt, max_tokens, temperature: {"input": prompt}),
    )
}


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _probe_choices(parsed: dict[str, Any]) -> str | None:
    choices = parsed.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    first = choices[0]
    message = first.get("message")
    if isinstance(message, dict) and _text(message.get("content")):
        return message["content"]
    return _text(first.get("text"))


def _probe_content_blocks(parsed: dict[str, Any]) -> str | None:
    content = parsed.get("content")
    if not isinstance(content, list):
        return None
    parts = [block.get("text") for block in content if isinstance(block, dict) and _text(block.get("text"))]
    return "\n".join(parts) if parts else None


def _probe_generations(parsed: dict[str, Any]) -> str | None:
    for key in ("generation", "generated_text"):
        if _text(parsed.get(key)):
            return parsed[key]
    results = parsed.get("results")
    if isinstance(results, list) and results and isinstance(results[0], dict):
        return _text(results[0].get("outputText"))
    return None


OUTPUT_PROBES: tuple[tuple[str, Callable[[dict[str, Any]], str | None]], ...] = (
    ("output", lambda parsed: _text(parsed.get("output"))),
    ("completion", lambda parsed: _text(parsed.get("completion"))),
    ("choices", _probe_choices),
    ("response", lambda parsed: _text(parsed.get("response"))),
    ("content", _probe_content_blocks),
    ("generation", _probe_generations),
)


def extract_output_text(raw_body: str) -> str | None:
    """Find the generated text in a response body of unknown shape.

    Bodies that are not JSON objects are treated as the output itself.
    """
    try:
        parsed = json.loads(raw_body)
    except (TypeError, ValueError):
        return _text(raw_body)
    if not isinstance(parsed, dict):
        return _text(parsed) if isinstance(parsed, str) else None
    for _name, probe in OUTPUT_PROBES:
        value = probe(parsed)
        if value:
            return value
    return None


class GenerationInvoker:
    def __init__(
        self,
        service: GenerationService | None,
        *,
        model_id: str,
        shape_names: Sequence[str] = tuple(REQUEST_SHAPES),
    ):
        self._service = service
        self._model_id = model_id
        self._shapes = [REQUEST_SHAPES[name] for name in shape_names]

    async def invoke(self, prompt: str, *, max_tokens: int = 1000, temperature: float = 0.7) -> GenerationResult:
        if self._service is None:
            logger.info("generation_skipped reason=no_service")
            return GenerationResult.failed()

        for index, shape in enumerate(self._shapes, start=1):
            body = shape.build(prompt, max_tokens, temperature)
            try:
                raw = await self._service.invoke(self._model_id, body)
            except Exception as exc:  # noqa: BLE001 - every shape failing falls back to templates
                logger.warning("generation_shape_failed shape=%s attempt=%s: %s", shape.name, index, exc)
                continue
            output = extract_output_text(raw)
            if output and output.strip():
                logger.info(
                    "generation_succeeded shape=%s attempt=%s chars=%s", shape.name, index, len(output)
                )
                return GenerationResult(success=True, output=output.strip(), shape=shape.name)
            logger.info("generation_shape_empty shape=%s attempt=%s", shape.name, index)

        logger.warning("generation_failed model=%s shapes=%s", self._model_id, len(self._shapes))
        return GenerationResult.failed()
