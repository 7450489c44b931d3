"""AI generation service.

Builds prompts, calls the completion provider in JSON mode and parses the
result. Every failure (provider error, unparsable or wrongly shaped output)
surfaces as GenerationError with the cause chained. No retries, no quota
accounting: callers own both.
"""

import json
import time
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from sitewright.core.errors import GenerationError, ValidationError
from sitewright.core.logging import latency_bucket_ms, log_event
from sitewright.features.generation.prompts import (
    build_content_messages,
    build_generate_messages,
    build_modify_messages,
)
from sitewright.features.generation.provider import (
    CompletionProvider,
    Message,
    ProviderError,
    get_completion_provider,
)
from sitewright.models.content import GeneratedWebsite, validate_site_content


async def _complete(
    operation: str,
    messages: List[Message],
    failure_message: str,
    provider: Optional[CompletionProvider] = None,
) -> Dict[str, Any]:
    start = time.perf_counter()
    try:
        active = provider or get_completion_provider()
        raw = await active.complete_json(messages)
    except ProviderError as exc:
        log_event("warning", "ai.provider_failed", event_type=operation, error_code="provider_error",
                  extra={"cause": exc})
        raise GenerationError(failure_message, cause=exc) from exc

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        log_event("warning", "ai.unparsable_output", event_type=operation, error_code="invalid_json",
                  extra={"output": raw})
        raise GenerationError(failure_message, cause=exc) from exc

    if not isinstance(document, dict):
        cause = TypeError(f"expected a JSON object, got {type(document).__name__}")
        raise GenerationError(failure_message, cause=cause) from cause

    log_event(
        "info",
        "ai.completed",
        event_type=operation,
        extra={"latency_bucket": latency_bucket_ms((time.perf_counter() - start) * 1000)},
    )
    return document


async def generate_website(
    prompt: str,
    business_type: str,
    style: str,
    *,
    provider: Optional[CompletionProvider] = None,
) -> Dict[str, Any]:
    """Generate a full website document (title, pages, styling).

    Raises:
        GenerationError: provider failure or output without title/pages/styling
    """
    failure = "Failed to generate website"
    document = await _complete(
        "ai.generate_website",
        build_generate_messages(prompt, business_type, style),
        failure,
        provider,
    )
    try:
        GeneratedWebsite.model_validate(document)
    except PydanticValidationError as exc:
        log_event("warning", "ai.malformed_website", event_type="ai.generate_website", error_code="invalid_shape",
                  extra={"errors": exc.errors(include_url=False)})
        raise GenerationError(failure, cause=exc) from exc
    return document


async def modify_website(
    current_content: Dict[str, Any],
    instruction: str,
    *,
    provider: Optional[CompletionProvider] = None,
) -> Dict[str, Any]:
    """Apply a natural-language instruction to an existing content document.

    Raises:
        GenerationError: provider failure, output that is not a valid content
            document, or output that dropped the page list
    """
    failure = "Failed to modify website"
    document = await _complete(
        "ai.modify_website",
        build_modify_messages(current_content, instruction),
        failure,
        provider,
    )
    try:
        validate_site_content(document, unique_slugs=False)
    except ValidationError as exc:
        raise GenerationError(failure, cause=exc) from exc
    if "pages" in current_content and "pages" not in document:
        cause = KeyError("pages")
        raise GenerationError(failure, cause=cause) from cause
    return document


async def generate_content(
    business_type: str,
    prompt: Optional[str] = None,
    *,
    provider: Optional[CompletionProvider] = None,
) -> Dict[str, Any]:
    """Generate free-form section content (hero, about, services, ...) for a business type."""
    return await _complete(
        "ai.generate_content",
        build_content_messages(business_type, prompt),
        "Failed to generate content",
        provider,
    )
