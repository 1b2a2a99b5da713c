"""
Adaptador para modelos de Ollama.

Este módulo implementa la interfaz BaseModelAdapter para el backend Ollama,
incluyendo el soporte de "tools" de la API de chat para que un agente
pueda pedir la ejecución de una función registrada.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.exceptions import (
    ModelConnectionError,
    ModelGenerationError,
    ModelNotFoundError,
    ModelTimeoutError,
)
from src.core.types import ModelResponse
from src.models.base import BaseModelAdapter


class OllamaAdapter(BaseModelAdapter):
    """
    Adaptador para modelos de Ollama.

    Attributes:
        base_url: URL base del servidor Ollama.
        timeout: Timeout para las peticiones HTTP.

    Example:
        ```python
        adapter = OllamaAdapter(model_name="llama3.1:8b")

        response = await adapter.generate(
            [{"role": "user", "content": "Crea una pregunta de sumas"}],
            tools=agent.functions.tool_schemas(),
        )
        if response.function_call:
            print(response.function_call.name)
        ```
    """

    def __init__(
        self,
        model_name: str,
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
        **kwargs: Any,
    ) -> None:
        """
        Inicializa el adaptador de Ollama.

        Args:
            model_name: Nombre del modelo en Ollama (ej: "llama3.1:8b").
            base_url: URL base del servidor Ollama.
            timeout: Timeout para peticiones en segundos.
            **kwargs: Argumentos adicionales.
        """
        super().__init__(
            model_name=model_name,
            backend_name="ollama",
            **kwargs,
        )
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Obtiene o crea el cliente HTTP."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=10.0),
            )
        return self._client

    async def _close_client(self) -> None:
        """Cierra el cliente HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.ConnectTimeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
    )
    async def generate(
        self,
        messages: list[dict[str, Any]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        tools: list[dict[str, Any]] | None = None,
        stop: list[str] | None = None,
        **kwargs: Any,
    ) -> ModelResponse:
        """
        Genera una respuesta usando la API de chat de Ollama.

        Args:
            messages: Lista de mensajes de la conversación.
            temperature: Temperatura de sampling.
            max_tokens: Máximo de tokens a generar.
            tools: Definiciones de funciones (formato OpenAI, Ollama lo acepta tal cual).
            stop: Secuencias de parada opcionales.
            **kwargs: Opciones adicionales para Ollama.

        Returns:
            ModelResponse con el texto o la primera tool call.

        Raises:
            ModelConnectionError: Si no se puede conectar a Ollama.
            ModelNotFoundError: Si el modelo no existe.
            ModelGenerationError: Si hay un error durante la generación.
            ModelTimeoutError: Si se excede el timeout.
        """
        client = await self._get_client()

        payload: dict[str, Any] = {
            "model": self.model_name,
            "messages": self._normalize_messages(messages),
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        if tools:
            payload["tools"] = tools

        if stop:
            payload["options"]["stop"] = stop

        for key, value in kwargs.items():
            if key not in payload:
                payload["options"][key] = value

        start_time = time.perf_counter()

        try:
            response = await client.post("/api/chat", json=payload)

            if response.status_code == 404:
                raise ModelNotFoundError(self.model_name, "ollama")

            response.raise_for_status()
            data = response.json()

        except httpx.ConnectError as e:
            raise ModelConnectionError("ollama", self.base_url, str(e)) from e
        except httpx.TimeoutException as e:
            raise ModelTimeoutError(self.model_name, self.timeout) from e
        except httpx.HTTPStatusError as e:
            raise ModelGenerationError(
                self.model_name,
                f"HTTP {e.response.status_code}: {e.response.text}",
            ) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        message = data.get("message", {})
        function_call = None
        tool_calls = message.get("tool_calls") or []
        if tool_calls:
            # El bucle ejecuta una función por turno; se toma la primera
            function = tool_calls[0].get("function", {})
            function_call = self._parse_function_call(
                function.get("name", ""),
                function.get("arguments"),
            )

        return self._create_response(
            content=message.get("content", "") or "",
            function_call=function_call,
            prompt_tokens=data.get("prompt_eval_count"),
            completion_tokens=data.get("eval_count"),
            generation_time_ms=elapsed_ms,
            finish_reason=data.get("done_reason", "stop"),
            raw_response=data,
        )

    async def health_check(self) -> bool:
        """
        Verifica si Ollama está disponible.

        Returns:
            True si Ollama está funcionando.
        """
        try:
            client = await self._get_client()
            response = await client.get("/api/tags")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def list_models(self) -> list[str]:
        """
        Lista los nombres de los modelos disponibles en Ollama.

        Raises:
            ModelConnectionError: Si no se puede conectar a Ollama.
        """
        client = await self._get_client()

        try:
            response = await client.get("/api/tags")
            response.raise_for_status()
            data = response.json()
        except httpx.ConnectError as e:
            raise ModelConnectionError("ollama", self.base_url, str(e)) from e

        return [model.get("name") for model in data.get("models", [])]

    async def unload(self) -> None:
        """Cierra la conexión con Ollama."""
        await self._close_client()
        self.is_loaded = False


__all__ = [
    "OllamaAdapter",
]
