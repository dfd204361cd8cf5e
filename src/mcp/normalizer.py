"""Shape handler results into MCP response envelopes.

Tools and resources produce a ``ResponseEnvelope`` of content blocks;
prompts produce a ``PromptEnvelope`` of messages. Normalization only
changes the container a result travels in, never the result itself.
"""

import base64
import json
from typing import Any

from pydantic import BaseModel, ValidationError

from src.mcp.failures import NormalizationFailure
from src.mcp.models import (
    ImageContent,
    ImagePayload,
    PromptEnvelope,
    PromptMessage,
    ResponseEnvelope,
    TextContent,
)
from src.mcp.registry import CapabilityKind

Envelope = ResponseEnvelope | PromptEnvelope


def to_canonical_json(data: Any) -> str:
    """Serialize structured data with sorted keys and two-space indentation."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False)


def image_block(payload: ImagePayload) -> ImageContent:
    """Base64-encode an image payload into an image content block."""
    return ImageContent(
        data=base64.b64encode(payload.data).decode("ascii"),
        mimeType=payload.mime_type,
        annotations=payload.annotations,
    )


def _is_block(item: Any) -> bool:
    return isinstance(item, (TextContent, ImageContent))


def _unsupported(result: Any) -> NormalizationFailure:
    return NormalizationFailure(
        reason=f"handler returned an unsupported result ({type(result).__name__})"
    )


def normalize_content(result: Any) -> tuple[ResponseEnvelope | None, NormalizationFailure | None]:
    """Wrap a tool or resource result in a content-block envelope."""
    if isinstance(result, ResponseEnvelope):
        return result, None

    if isinstance(result, str):
        return ResponseEnvelope(content=[TextContent(text=result)]), None

    if _is_block(result):
        return ResponseEnvelope(content=[result]), None

    if isinstance(result, ImagePayload):
        return (
            ResponseEnvelope(
                content=[image_block(result)],
                annotations=result.annotations,
            ),
            None,
        )

    if isinstance(result, (list, tuple)) and result and all(_is_block(i) for i in result):
        return ResponseEnvelope(content=list(result)), None

    if isinstance(result, (list, tuple)) and any(_is_block(i) for i in result):
        return None, NormalizationFailure(
            reason="handler mixed content blocks with other values"
        )

    if isinstance(result, (dict, list, tuple, BaseModel, bool, int, float)):
        try:
            text = to_canonical_json(result)
        except (TypeError, ValueError) as e:
            return None, NormalizationFailure(
                reason=f"handler result is not JSON serializable: {e}"
            )
        return ResponseEnvelope(content=[TextContent(text=text)]), None

    return None, _unsupported(result)


def normalize_prompt(result: Any) -> tuple[PromptEnvelope | None, NormalizationFailure | None]:
    """Wrap a prompt result in a message-sequence envelope."""
    if isinstance(result, PromptEnvelope):
        return result, None

    if isinstance(result, str):
        message = PromptMessage(role="user", content=TextContent(text=result))
        return PromptEnvelope(messages=[message]), None

    if isinstance(result, PromptMessage):
        return PromptEnvelope(messages=[result]), None

    if isinstance(result, (list, tuple)):
        if not result:
            return None, NormalizationFailure(reason="prompt produced no messages")
        try:
            messages = [PromptMessage.model_validate(m) for m in result]
        except ValidationError as e:
            return None, NormalizationFailure(
                reason=f"prompt produced an invalid message: {e.errors()[0]['msg']}"
            )
        return PromptEnvelope(messages=messages), None

    return None, _unsupported(result)


def normalize(
    kind: CapabilityKind, result: Any
) -> tuple[Envelope | None, NormalizationFailure | None]:
    """Select the envelope shape by capability kind and wrap the result."""
    if kind is CapabilityKind.PROMPT:
        return normalize_prompt(result)
    return normalize_content(result)
