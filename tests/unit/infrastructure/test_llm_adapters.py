"""Tests for the Ollama LLM adapter."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.domain.errors import UpstreamTransportError
from src.domain.ports.config import OllamaConfig
from src.infrastructure.llm.ollama import OllamaAdapter


def mock_transport_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://localhost:11434", transport=httpx.MockTransport(handler))


async def collect(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


class TestOllamaAdapter:
    """Tests for OllamaAdapter."""

    @pytest.fixture
    def config(self):
        return OllamaConfig(host="http://localhost:11434", model="llama2", timeout=30)

    @pytest.fixture
    def adapter(self, config):
        return OllamaAdapter(config)

    @pytest.mark.asyncio
    async def test_stream_chat_yields_raw_bytes(self, adapter):
        """Streaming chat posts with stream=True and passes bytes through."""
        body = b'{"message":{"content":"Hi"},"done":false}\n{"done":true}\n'
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["json"] = json.loads(request.content)
            return httpx.Response(200, content=body)

        adapter._http = mock_transport_client(handler)

        result = await collect(adapter.stream_chat({"model": "llama2", "messages": []}))

        assert result == body
        assert seen["path"] == "/api/chat"
        assert seen["json"]["stream"] is True

    @pytest.mark.asyncio
    async def test_stream_generate_path(self, adapter):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            return httpx.Response(200, content=b'{"response":"x","done":true}\n')

        adapter._http = mock_transport_client(handler)
        await collect(adapter.stream_generate({"model": "llama2", "prompt": "p"}))

        assert seen["path"] == "/api/generate"

    @pytest.mark.asyncio
    async def test_stream_error_status(self, adapter):
        """An error status from Ollama becomes UpstreamTransportError."""
        adapter._http = mock_transport_client(lambda request: httpx.Response(404, text='{"error":"model not found"}'))

        with pytest.raises(UpstreamTransportError, match="404"):
            await collect(adapter.stream_chat({"model": "missing", "messages": []}))

    @pytest.mark.asyncio
    async def test_stream_connection_error(self, adapter):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        adapter._http = mock_transport_client(handler)

        with pytest.raises(UpstreamTransportError, match="connection refused"):
            await collect(adapter.stream_generate({"model": "llama2", "prompt": "p"}))

    @pytest.mark.asyncio
    async def test_chat_calls_client(self, adapter):
        """Non-streaming chat calls the ollama client with stream=False."""
        mock_response = MagicMock()
        mock_response.model_dump.return_value = {"model": "llama2", "message": {"role": "assistant", "content": "Hi"}}
        adapter._client.chat = AsyncMock(return_value=mock_response)

        result = await adapter.chat({"model": "llama2", "messages": [{"role": "user", "content": "Hi"}]})

        assert result["message"]["content"] == "Hi"
        call_kwargs = adapter._client.chat.call_args.kwargs
        assert call_kwargs["stream"] is False
        assert call_kwargs["model"] == "llama2"

    @pytest.mark.asyncio
    async def test_generate_calls_client(self, adapter):
        mock_response = MagicMock()
        mock_response.model_dump.return_value = {"model": "llama2", "response": "ok", "done": True}
        adapter._client.generate = AsyncMock(return_value=mock_response)

        result = await adapter.generate({"model": "llama2", "prompt": "p", "system": "s"})

        assert result["response"] == "ok"
        assert adapter._client.generate.call_args.kwargs["system"] == "s"

    @pytest.mark.asyncio
    async def test_embeddings(self, adapter):
        mock_response = MagicMock()
        mock_response.model_dump.return_value = {"embedding": [0.5]}
        adapter._client.embeddings = AsyncMock(return_value=mock_response)

        result = await adapter.embeddings("embed-model", "text")

        assert result == {"embedding": [0.5]}
        adapter._client.embeddings.assert_awaited_once_with(model="embed-model", prompt="text")

    @pytest.mark.asyncio
    async def test_is_available_true(self, adapter):
        """is_available returns True when server responds."""
        mock_response = MagicMock()
        mock_response.status_code = 200

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=mock_response)
            result = await adapter.is_available()

        assert result is True

    @pytest.mark.asyncio
    async def test_is_available_false_on_error_status(self, adapter):
        """Each check reflects the current response status."""
        ok = MagicMock(status_code=200)
        failing = MagicMock(status_code=500)

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(side_effect=[ok, failing])
            assert await adapter.is_available() is True
            assert await adapter.is_available() is False

    @pytest.mark.asyncio
    async def test_is_available_false_on_error(self, adapter):
        """is_available returns False when connection fails."""
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            result = await adapter.is_available()

        assert result is False
