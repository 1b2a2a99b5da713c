"""
Factory para crear adaptadores de modelos.

Este módulo proporciona el patrón Factory para instanciar adaptadores
de forma transparente, permitiendo cambiar de backend con solo
modificar el identificador del modelo.
"""

from __future__ import annotations

import asyncio
from typing import Any

from config.settings import get_settings, parse_model_id
from src.core.exceptions import (
    BackendNotSupportedError,
    InvalidModelIdError,
    ModelConnectionError,
)
from src.models.base import BaseModelAdapter
from src.models.ollama_adapter import OllamaAdapter
from src.models.openai_local import OpenAILocalAdapter


# Registro de backends soportados
SUPPORTED_BACKENDS = ["ollama", "openai_local"]


class ModelFactory:
    """
    Factory para crear adaptadores de modelos de lenguaje.

    El formato del identificador es: "backend/model_name"
    Ejemplos:
    - "ollama/llama3.1:8b"
    - "openai_local/meta-llama/Llama-3.1-8B-Instruct"

    Example:
        ```python
        adapter = ModelFactory.create("ollama/llama3.1:8b")

        adapter = ModelFactory.create(
            "openai_local/meta-llama/Llama-3.1-8B-Instruct",
            base_url="http://localhost:8000/v1",
        )
        ```
    """

    # Cache de adaptadores (singleton por model_id)
    _cache: dict[str, BaseModelAdapter] = {}

    @staticmethod
    def create(
        model_id: str,
        *,
        use_cache: bool = True,
        **kwargs: Any,
    ) -> BaseModelAdapter:
        """
        Crea un adaptador de modelo basado en el identificador.

        Args:
            model_id: Identificador del modelo ("backend/model_name").
            use_cache: Si usar caché de adaptadores (singleton).
            **kwargs: Argumentos adicionales para el adaptador.

        Returns:
            Instancia del adaptador configurado.

        Raises:
            InvalidModelIdError: Si el formato del model_id es inválido.
            BackendNotSupportedError: Si el backend no está soportado.
        """
        cache_key = f"{model_id}:{hash(frozenset(kwargs.items()))}"
        if use_cache and cache_key in ModelFactory._cache:
            return ModelFactory._cache[cache_key]

        try:
            backend, model_name = parse_model_id(model_id)
        except ValueError as e:
            raise InvalidModelIdError(model_id) from e

        if not model_name:
            raise InvalidModelIdError(model_id)

        settings = get_settings()

        adapter: BaseModelAdapter
        if backend == "ollama":
            adapter = OllamaAdapter(
                model_name=model_name,
                base_url=kwargs.pop("base_url", settings.ollama.base_url),
                timeout=kwargs.pop("timeout", settings.ollama.timeout),
                **kwargs,
            )
        elif backend == "openai_local":
            adapter = OpenAILocalAdapter(
                model_name=model_name,
                base_url=kwargs.pop("base_url", settings.openai_local.base_url),
                api_key=kwargs.pop("api_key", settings.openai_local.api_key),
                timeout=kwargs.pop("timeout", settings.openai_local.timeout),
                **kwargs,
            )
        else:
            raise BackendNotSupportedError(backend, SUPPORTED_BACKENDS)

        if use_cache:
            ModelFactory._cache[cache_key] = adapter

        return adapter

    @staticmethod
    async def create_and_verify(
        model_id: str,
        **kwargs: Any,
    ) -> BaseModelAdapter:
        """
        Crea un adaptador y verifica que el backend esté disponible.

        Raises:
            ModelConnectionError: Si el backend no está disponible.
        """
        adapter = ModelFactory.create(model_id, **kwargs)

        is_healthy = await adapter.health_check()
        if not is_healthy:
            raise ModelConnectionError(
                adapter.backend_name,
                getattr(adapter, "base_url", "desconocida"),
                f"Health check falló para {model_id}",
            )

        await adapter.load()
        return adapter

    @staticmethod
    def clear_cache() -> None:
        """Limpia la caché de adaptadores."""
        ModelFactory._cache.clear()

    @staticmethod
    async def cleanup_all() -> None:
        """Cierra todos los adaptadores en caché."""
        for adapter in ModelFactory._cache.values():
            await adapter.unload()
        ModelFactory._cache.clear()

    @staticmethod
    def list_cached() -> list[str]:
        """Lista los adaptadores en caché."""
        return list(ModelFactory._cache.keys())


class ModelManager:
    """
    Gestor de alto nivel para los modelos usados por una conversación.

    Los agentes de un mismo group chat suelen compartir modelo; el
    gestor verifica cada backend una sola vez.
    """

    def __init__(self) -> None:
        self._models: dict[str, BaseModelAdapter] = {}
        self._lock = asyncio.Lock()

    async def get(
        self,
        model_id: str,
        **kwargs: Any,
    ) -> BaseModelAdapter:
        """Obtiene un adaptador verificado (desde caché si existe)."""
        async with self._lock:
            if model_id not in self._models:
                adapter = await ModelFactory.create_and_verify(model_id, **kwargs)
                self._models[model_id] = adapter
            return self._models[model_id]

    async def cleanup(self) -> None:
        """Cierra todos los modelos cargados."""
        async with self._lock:
            for adapter in self._models.values():
                await adapter.unload()
            self._models.clear()

    def list_loaded(self) -> list[str]:
        """Lista los modelos actualmente cargados."""
        return list(self._models.keys())

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._models


# Singleton del gestor de modelos
_model_manager: ModelManager | None = None


def get_model_manager() -> ModelManager:
    """Obtiene el singleton del gestor de modelos."""
    global _model_manager
    if _model_manager is None:
        _model_manager = ModelManager()
    return _model_manager


async def get_model(model_id: str, **kwargs: Any) -> BaseModelAdapter:
    """Shortcut para get_model_manager().get(model_id)."""
    return await get_model_manager().get(model_id, **kwargs)


__all__ = [
    "ModelFactory",
    "ModelManager",
    "get_model_manager",
    "get_model",
    "SUPPORTED_BACKENDS",
]
