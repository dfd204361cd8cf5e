"""Tests for the image generation provider."""

import base64
import json

import httpx
import pytest

from src.mcp.errors import HandlerError
from src.mcp.models import ErrorResult, ImageContent, ImagePayload
from src.mcp.registry import CapabilityKind
from src.tools.image.client import HuggingFaceImageClient, get_client
from src.tools.image.tools import generate_image_handler

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


@pytest.fixture
def hf_token(monkeypatch, clear_settings_cache):
    monkeypatch.setenv("HF_TOKEN", "hf_test_token")
    return "hf_test_token"


@pytest.fixture
def no_hf_token(monkeypatch, clear_settings_cache):
    monkeypatch.setenv("HF_TOKEN", "")


def png_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=PNG_BYTES, headers={"Content-Type": "image/png"})


class TestHuggingFaceImageClient:
    """Tests for the inference client."""

    @pytest.mark.asyncio
    async def test_request_shape(self, mock_upstream):
        """Test the endpoint, credential and payload sent upstream."""
        sent = mock_upstream("src.tools.image.client", png_response)
        client = HuggingFaceImageClient(
            "secret", base_url="https://hf.test/models/", inference_steps=5
        )
        data, mime_type = await client.text_to_image("a red fox")

        assert (data, mime_type) == (PNG_BYTES, "image/png")
        request = sent[0]
        assert request.method == "POST"
        assert str(request.url) == "https://hf.test/models/black-forest-labs/FLUX.1-schnell"
        assert request.headers["Authorization"] == "Bearer secret"
        assert json.loads(request.content) == {
            "inputs": "a red fox",
            "parameters": {"num_inference_steps": 5},
        }

    @pytest.mark.asyncio
    async def test_upstream_error(self, mock_upstream):
        mock_upstream("src.tools.image.client", lambda request: httpx.Response(401))
        with pytest.raises(HandlerError, match="Hugging Face API error: 401"):
            await HuggingFaceImageClient("bad").text_to_image("fox")

    @pytest.mark.asyncio
    async def test_non_image_response(self, mock_upstream):
        """Test that a JSON body with a success status is rejected."""
        mock_upstream(
            "src.tools.image.client",
            lambda request: httpx.Response(200, json={"estimated_time": 20}),
        )
        with pytest.raises(HandlerError, match="instead of an image"):
            await HuggingFaceImageClient("t").text_to_image("fox")

    @pytest.mark.asyncio
    async def test_empty_image(self, mock_upstream):
        mock_upstream(
            "src.tools.image.client",
            lambda request: httpx.Response(200, content=b"", headers={"Content-Type": "image/png"}),
        )
        with pytest.raises(HandlerError, match="empty image"):
            await HuggingFaceImageClient("t").text_to_image("fox")


class TestCredential:
    """Tests for the HF_TOKEN precondition."""

    def test_missing_token(self, no_hf_token):
        """Test that no client is built without a token."""
        with pytest.raises(HandlerError, match="HF_TOKEN is not configured"):
            get_client()

    def test_token_bound_to_client(self, hf_token):
        assert get_client().token == hf_token


class TestGenerateImageTool:
    """Tests for the generate_image tool."""

    @pytest.mark.asyncio
    async def test_handler_returns_annotated_payload(self, hf_token, mock_upstream):
        mock_upstream("src.tools.image.client", png_response)
        result = await generate_image_handler({"prompt": "a red fox"})

        assert isinstance(result, ImagePayload)
        assert result.data == PNG_BYTES
        assert result.annotations.audience == ["user"]
        assert result.annotations.priority == 0.9

    @pytest.mark.asyncio
    async def test_dispatch_yields_image_block(self, dispatcher, hf_token, mock_upstream):
        """Test that the envelope carries one base64 image block."""
        mock_upstream("src.tools.image.client", png_response)
        result = await dispatcher.dispatch(
            CapabilityKind.TOOL, "generate_image", {"prompt": "a red fox"}
        )

        assert len(result.content) == 1
        block = result.content[0]
        assert isinstance(block, ImageContent)
        assert block.mimeType == "image/png"
        assert base64.b64decode(block.data) == PNG_BYTES
        assert result.annotations.priority == 0.9

    @pytest.mark.asyncio
    async def test_dispatch_without_token(self, dispatcher, no_hf_token):
        """Test that a missing credential is a handler failure, not a crash."""
        result = await dispatcher.dispatch(
            CapabilityKind.TOOL, "generate_image", {"prompt": "a red fox"}
        )
        assert isinstance(result, ErrorResult)
        assert result.stage == "invoke"
        assert "HF_TOKEN" in result.message

    @pytest.mark.asyncio
    async def test_transport_error(self, hf_token, mock_upstream):
        def fail(request):
            raise httpx.RemoteProtocolError("peer closed connection", request=request)

        mock_upstream("src.tools.image.client", fail)
        with pytest.raises(HandlerError, match="image generation request failed"):
            await generate_image_handler({"prompt": "fox"})
