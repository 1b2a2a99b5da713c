"""
Tests para ModelFactory y ModelManager.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.core.exceptions import (
    BackendNotSupportedError,
    InvalidModelIdError,
    ModelConnectionError,
)
from src.models.factory import ModelFactory, ModelManager
from src.models.ollama_adapter import OllamaAdapter
from src.models.openai_local import OpenAILocalAdapter


class TestModelFactory:
    """Tests para ModelFactory."""

    def test_create_ollama_adapter(self, mock_settings: MagicMock) -> None:
        adapter = ModelFactory.create("ollama/llama3.1:8b")

        assert isinstance(adapter, OllamaAdapter)
        assert adapter.model_name == "llama3.1:8b"
        assert adapter.timeout == 60

    def test_create_openai_local_adapter(self, mock_settings: MagicMock) -> None:
        adapter = ModelFactory.create("openai_local/meta-llama/Llama-3.1-8B")

        assert isinstance(adapter, OpenAILocalAdapter)
        assert adapter.model_name == "meta-llama/Llama-3.1-8B"
        assert adapter.base_url == "http://localhost:8000/v1"

    def test_create_with_custom_config(self, mock_settings: MagicMock) -> None:
        adapter = ModelFactory.create(
            "ollama/qwen2.5:14b",
            base_url="http://192.168.1.100:11434",
            timeout=120,
        )

        assert adapter.base_url == "http://192.168.1.100:11434"
        assert adapter.timeout == 120

    def test_cache(self, mock_settings: MagicMock) -> None:
        first = ModelFactory.create("ollama/llama3.1:8b")
        second = ModelFactory.create("ollama/llama3.1:8b")
        uncached = ModelFactory.create("ollama/llama3.1:8b", use_cache=False)

        assert first is second
        assert uncached is not first
        assert len(ModelFactory.list_cached()) == 1

        ModelFactory.clear_cache()
        assert ModelFactory.list_cached() == []

    def test_invalid_model_id(self, mock_settings: MagicMock) -> None:
        with pytest.raises(InvalidModelIdError):
            ModelFactory.create("llama3.1")

        with pytest.raises(InvalidModelIdError):
            ModelFactory.create("ollama/")

    def test_unsupported_backend(self, mock_settings: MagicMock) -> None:
        with pytest.raises(BackendNotSupportedError) as exc_info:
            ModelFactory.create("huggingface/Qwen/Qwen2.5-14B-Instruct")

        assert "ollama" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_create_and_verify(self, mock_settings: MagicMock) -> None:
        with patch.object(OllamaAdapter, "health_check", new=AsyncMock(return_value=True)):
            adapter = await ModelFactory.create_and_verify("ollama/llama3.1:8b")

        assert adapter.is_loaded is True

    @pytest.mark.asyncio
    async def test_create_and_verify_unhealthy(self, mock_settings: MagicMock) -> None:
        with patch.object(OllamaAdapter, "health_check", new=AsyncMock(return_value=False)):
            with pytest.raises(ModelConnectionError) as exc_info:
                await ModelFactory.create_and_verify("ollama/llama3.1:8b")

        assert exc_info.value.details["base_url"] == "http://localhost:11434"


class TestModelManager:
    """Tests para ModelManager."""

    @pytest.mark.asyncio
    async def test_get_caches_verified_adapter(self, mock_settings: MagicMock) -> None:
        manager = ModelManager()
        health = AsyncMock(return_value=True)

        with patch.object(OllamaAdapter, "health_check", new=health):
            first = await manager.get("ollama/llama3.1:8b")
            second = await manager.get("ollama/llama3.1:8b")

        assert first is second
        assert health.await_count == 1
        assert "ollama/llama3.1:8b" in manager
        assert manager.list_loaded() == ["ollama/llama3.1:8b"]

    @pytest.mark.asyncio
    async def test_cleanup(self, mock_settings: MagicMock) -> None:
        manager = ModelManager()

        with patch.object(OllamaAdapter, "health_check", new=AsyncMock(return_value=True)):
            adapter = await manager.get("ollama/llama3.1:8b")

        await manager.cleanup()

        assert manager.list_loaded() == []
        assert adapter.is_loaded is False
