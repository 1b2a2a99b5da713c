"""
Tests para el adaptador de Ollama.
"""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.core.exceptions import (
    ModelConnectionError,
    ModelGenerationError,
    ModelNotFoundError,
    ModelTimeoutError,
)
from src.models.ollama_adapter import OllamaAdapter


def make_response(status_code: int = 200, data: dict[str, Any] | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data or {}
    response.raise_for_status = MagicMock()
    return response


class TestOllamaAdapter:
    """Tests para OllamaAdapter."""

    @pytest.fixture
    def adapter(self) -> OllamaAdapter:
        """Crea un adaptador de prueba."""
        return OllamaAdapter(
            model_name="llama3.1:8b",
            base_url="http://localhost:11434/",
            timeout=60,
        )

    def test_init(self, adapter: OllamaAdapter) -> None:
        """Test de inicialización."""
        assert adapter.model_name == "llama3.1:8b"
        assert adapter.backend_name == "ollama"
        assert adapter.base_url == "http://localhost:11434"
        assert adapter.timeout == 60
        assert adapter.model_id == "ollama/llama3.1:8b"

    @pytest.mark.asyncio
    async def test_generate_success(
        self,
        adapter: OllamaAdapter,
        mock_ollama_response: dict[str, Any],
    ) -> None:
        """Test de generación exitosa."""
        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.post.return_value = make_response(data=mock_ollama_response)
            mock_get_client.return_value = mock_client

            response = await adapter.generate([{"role": "user", "content": "Hola"}])

        assert response.content == "Esta es una respuesta de prueba del modelo."
        assert response.function_call is None
        assert response.model == "ollama/llama3.1:8b"
        assert response.prompt_tokens == 50
        assert response.completion_tokens == 25
        assert response.total_tokens == 75
        assert response.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_generate_payload(
        self,
        adapter: OllamaAdapter,
        mock_ollama_response: dict[str, Any],
    ) -> None:
        """El payload lleva opciones, stop y tools."""
        tools = [{"type": "function", "function": {"name": "answer_question"}}]

        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.post.return_value = make_response(data=mock_ollama_response)
            mock_get_client.return_value = mock_client

            await adapter.generate(
                [{"role": "user", "content": "Hola"}],
                temperature=0.1,
                max_tokens=32,
                tools=tools,
                stop=["\n"],
                top_p=0.9,
            )

        url = mock_client.post.call_args.args[0]
        payload = mock_client.post.call_args.kwargs["json"]
        assert url == "/api/chat"
        assert payload["stream"] is False
        assert payload["tools"] == tools
        assert payload["options"] == {
            "temperature": 0.1,
            "num_predict": 32,
            "stop": ["\n"],
            "top_p": 0.9,
        }

    @pytest.mark.asyncio
    async def test_generate_tool_call(
        self,
        adapter: OllamaAdapter,
        mock_ollama_tool_response: dict[str, Any],
    ) -> None:
        """Una tool call se convierte en FunctionCall con argumentos JSON."""
        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.post.return_value = make_response(data=mock_ollama_tool_response)
            mock_get_client.return_value = mock_client

            response = await adapter.generate([{"role": "user", "content": "2 + 2?"}])

        assert response.content == ""
        assert response.function_call.name == "answer_question"
        assert json.loads(response.function_call.arguments) == {"answer": "4"}

    @pytest.mark.asyncio
    async def test_generate_model_not_found(self, adapter: OllamaAdapter) -> None:
        """Test de error cuando el modelo no existe."""
        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.post.return_value = make_response(status_code=404)
            mock_get_client.return_value = mock_client

            with pytest.raises(ModelNotFoundError) as exc_info:
                await adapter.generate([{"role": "user", "content": "Hola"}])

        assert "llama3.1:8b" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_generate_connection_error(self, adapter: OllamaAdapter) -> None:
        """Test de error de conexión."""
        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.post.side_effect = httpx.ConnectError("Connection refused")
            mock_get_client.return_value = mock_client

            with pytest.raises(ModelConnectionError) as exc_info:
                await adapter.generate([{"role": "user", "content": "Hola"}])

        assert "ollama" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_generate_timeout_error(self, adapter: OllamaAdapter) -> None:
        """Test de error de timeout."""
        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.post.side_effect = httpx.TimeoutException("Timeout")
            mock_get_client.return_value = mock_client

            with pytest.raises(ModelTimeoutError):
                await adapter.generate([{"role": "user", "content": "Hola"}])

    @pytest.mark.asyncio
    async def test_generate_http_error(self, adapter: OllamaAdapter) -> None:
        """Un 500 se reporta como ModelGenerationError."""
        error_response = MagicMock()
        error_response.status_code = 500
        error_response.text = "internal error"
        response = make_response(status_code=500)
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "500",
            request=MagicMock(),
            response=error_response,
        )

        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.post.return_value = response
            mock_get_client.return_value = mock_client

            with pytest.raises(ModelGenerationError) as exc_info:
                await adapter.generate([{"role": "user", "content": "Hola"}])

        assert "HTTP 500" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_health_check(self, adapter: OllamaAdapter) -> None:
        """Test de health check exitoso y fallido."""
        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.get.return_value = make_response(status_code=200)
            mock_get_client.return_value = mock_client

            assert await adapter.health_check() is True

            mock_client.get.side_effect = httpx.ConnectError("down")
            assert await adapter.health_check() is False

    @pytest.mark.asyncio
    async def test_list_models(self, adapter: OllamaAdapter) -> None:
        data = {"models": [{"name": "llama3.1:8b"}, {"name": "qwen2.5:14b"}]}

        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = AsyncMock()
            mock_client.get.return_value = make_response(data=data)
            mock_get_client.return_value = mock_client

            assert await adapter.list_models() == ["llama3.1:8b", "qwen2.5:14b"]

    @pytest.mark.asyncio
    async def test_unload_closes_client(self, adapter: OllamaAdapter) -> None:
        client = await adapter._get_client()
        adapter.is_loaded = True

        await adapter.unload()

        assert client.is_closed
        assert adapter._client is None
        assert adapter.is_loaded is False
