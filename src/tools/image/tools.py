"""Image generation provider tools."""

import logging
from typing import Any

import httpx

from src.mcp.errors import HandlerError
from src.mcp.models import Annotations, ImagePayload
from src.mcp.registry import CapabilityKind, CapabilityRegistry
from src.mcp.schema import Schema, StringField
from src.tools.image.client import get_client

logger = logging.getLogger(__name__)

# Generated images are meant for the person, not the model
IMAGE_ANNOTATIONS = Annotations(audience=["user"], priority=0.9)


async def generate_image_handler(arguments: dict[str, Any]) -> ImagePayload:
    """Handle the generate_image tool call."""
    client = get_client()
    try:
        data, mime_type = await client.text_to_image(arguments["prompt"])
    except httpx.HTTPError as e:
        logger.warning(f"Image generation request failed: {e}")
        raise HandlerError(f"image generation request failed: {e}")

    return ImagePayload(data=data, mime_type=mime_type, annotations=IMAGE_ANNOTATIONS)


def register_tools(registry: CapabilityRegistry) -> None:
    """Register image generation tools with the registry."""

    registry.register(
        CapabilityKind.TOOL,
        "generate_image",
        Schema({
            "prompt": StringField(description="Text prompt describing the image to generate"),
        }),
        generate_image_handler,
        description="Generates an image from a text prompt with FLUX.1-schnell on the Hugging Face Inference API (requires HF_TOKEN).",
    )
