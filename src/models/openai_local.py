"""
Adaptador para servidores compatibles con la API de OpenAI.

Este módulo permite usar servidores locales que implementan la API de OpenAI
(vLLM, llama.cpp server, LM Studio, LocalAI...), incluyendo "function calling"
mediante el campo `tools` de chat completions.
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


class OpenAILocalAdapter(BaseModelAdapter):
    """
    Adaptador para servidores que implementan la API de OpenAI.

    Attributes:
        base_url: URL base del servidor (ej: "http://localhost:8000/v1").
        api_key: API key (generalmente no requerida para servidores locales).
        timeout: Timeout para las peticiones HTTP.
    """

    def __init__(
        self,
        model_name: str,
        base_url: str = "http://localhost:8000/v1",
        api_key: str = "not-needed",
        timeout: float = 120.0,
        **kwargs: Any,
    ) -> None:
        """
        Inicializa el adaptador OpenAI Local.

        Args:
            model_name: Nombre del modelo (varía según el servidor).
            base_url: URL base del servidor con /v1.
            api_key: API key (usar "not-needed" si no se requiere).
            timeout: Timeout en segundos.
            **kwargs: Argumentos adicionales.
        """
        super().__init__(
            model_name=model_name,
            backend_name="openai_local",
            **kwargs,
        )
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Obtiene o crea el cliente HTTP con headers de autenticación."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.api_key and self.api_key != "not-needed":
                headers["Authorization"] = f"Bearer {self.api_key}"

            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
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
        Genera una respuesta usando la API de chat completions.

        Args:
            messages: Lista de mensajes de la conversación.
            temperature: Temperatura de sampling.
            max_tokens: Máximo de tokens a generar.
            tools: Definiciones de funciones en formato OpenAI.
            stop: Secuencias de parada opcionales.
            **kwargs: Parámetros adicionales del servidor.

        Returns:
            ModelResponse con el texto o la primera tool call.
        """
        client = await self._get_client()

        payload: dict[str, Any] = {
            "model": self.model_name,
            "messages": self._normalize_messages(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
        }

        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        if stop:
            payload["stop"] = stop

        for key, value in kwargs.items():
            if key not in payload:
                payload[key] = value

        start_time = time.perf_counter()

        try:
            response = await client.post("/chat/completions", json=payload)

            if response.status_code == 404:
                raise ModelNotFoundError(self.model_name, "openai_local")

            if response.status_code == 400:
                error_data = response.json()
                error_msg = error_data.get("error", {}).get("message", response.text)
                raise ModelGenerationError(self.model_name, error_msg)

            response.raise_for_status()
            data = response.json()

        except httpx.ConnectError as e:
            raise ModelConnectionError("openai_local", self.base_url, str(e)) from e
        except httpx.TimeoutException as e:
            raise ModelTimeoutError(self.model_name, self.timeout) from e
        except httpx.HTTPStatusError as e:
            raise ModelGenerationError(
                self.model_name,
                f"HTTP {e.response.status_code}: {e.response.text}",
            ) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        choices = data.get("choices", [])
        if not choices:
            raise ModelGenerationError(
                self.model_name,
                "No se recibieron choices en la respuesta",
            )

        message = choices[0].get("message", {})
        function_call = None
        tool_calls = message.get("tool_calls") or []
        if tool_calls:
            function = tool_calls[0].get("function", {})
            function_call = self._parse_function_call(
                function.get("name", ""),
                function.get("arguments"),
            )

        usage = data.get("usage", {})

        return self._create_response(
            content=message.get("content") or "",
            function_call=function_call,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            generation_time_ms=elapsed_ms,
            finish_reason=choices[0].get("finish_reason"),
            raw_response=data,
        )

    async def health_check(self) -> bool:
        """
        Verifica si el servidor está disponible consultando /models.

        Returns:
            True si el servidor responde.
        """
        try:
            client = await self._get_client()
            response = await client.get("/models")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def unload(self) -> None:
        """Cierra la conexión con el servidor."""
        await self._close_client()
        self.is_loaded = False


__all__ = [
    "OpenAILocalAdapter",
]
