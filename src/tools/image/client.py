"""Hugging Face Inference API client for text-to-image generation."""

import logging

from src.config.loader import get_settings
from src.mcp.errors import HandlerError
from src.utils.http import create_http_client, raise_for_upstream, send_with_retry

logger = logging.getLogger(__name__)


class HuggingFaceImageClient:
    """Text-to-image client bound to one API token."""

    def __init__(
        self,
        token: str,
        model: str | None = None,
        base_url: str | None = None,
        inference_steps: int | None = None,
    ):
        settings = get_settings()
        self.token = token
        self.model = model or settings.image_model
        self.base_url = (base_url or settings.hf_inference_url).rstrip("/")
        self.inference_steps = inference_steps or settings.image_inference_steps

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.model}"

    async def text_to_image(self, prompt: str) -> tuple[bytes, str]:
        """
        Generate an image from a prompt.

        Args:
            prompt: Text description of the image

        Returns:
            (image bytes, mime type)
        """
        payload = {
            "inputs": prompt,
            "parameters": {"num_inference_steps": self.inference_steps},
        }
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "image/png",
        }

        async with create_http_client(
            timeout=float(get_settings().image_timeout), headers=headers
        ) as client:
            response = await send_with_retry(client, "POST", self.url, json=payload)
            raise_for_upstream(response, "Hugging Face")
            mime_type = response.headers.get("content-type", "image/png").split(";")[0]
            data = response.content

        if not mime_type.startswith("image/"):
            raise HandlerError(f"Hugging Face returned {mime_type} instead of an image")
        if not data:
            raise HandlerError("Hugging Face returned an empty image")
        return data, mime_type


def get_client() -> HuggingFaceImageClient:
    """
    Get an image client for the configured token.

    Raises:
        HandlerError: If no token is configured.
    """
    settings = get_settings()
    if not settings.image_generation_enabled:
        raise HandlerError(
            "HF_TOKEN is not configured. Set a Hugging Face API token to use image generation."
        )
    return HuggingFaceImageClient(settings.hf_token)
