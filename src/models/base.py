"""
Interfaz abstracta para modelos de lenguaje.

Este módulo define el contrato que todos los adaptadores de modelos
deben implementar. Para el bucle de conversación un modelo es una
capacidad opaca: recibe mensajes (y opcionalmente definiciones de
funciones) y devuelve texto o una llamada a función.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from src.core.types import FunctionCall, MessageRole, ModelResponse


class BaseModelAdapter(ABC):
    """
    Clase base abstracta para adaptadores de modelos de lenguaje.

    Todos los backends (Ollama, OpenAI local) deben heredar de esta
    clase e implementar sus métodos abstractos.

    Attributes:
        model_name: Nombre del modelo específico.
        backend_name: Nombre del backend (ollama, openai_local).
        is_loaded: Indica si el modelo está cargado y listo.
        supports_tools: Indica si el backend acepta definiciones de funciones.
    """

    def __init__(
        self,
        model_name: str,
        backend_name: str,
        **kwargs: Any,
    ) -> None:
        """
        Inicializa el adaptador base.

        Args:
            model_name: Nombre del modelo a usar.
            backend_name: Identificador del backend.
            **kwargs: Argumentos adicionales específicos del backend.
        """
        self.model_name = model_name
        self.backend_name = backend_name
        self.is_loaded = False
        self.supports_tools = True
        self._config = kwargs

    @property
    def model_id(self) -> str:
        """Identificador completo del modelo (backend/model_name)."""
        return f"{self.backend_name}/{self.model_name}"

    # =========================================================================
    # Métodos abstractos que deben implementar los adaptadores
    # =========================================================================

    @abstractmethod
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
        Genera una respuesta completa.

        Args:
            messages: Lista de mensajes ({"role", "content"}).
            temperature: Temperatura de sampling (0.0 - 2.0).
            max_tokens: Máximo de tokens a generar.
            tools: Definiciones de funciones en formato OpenAI (opcional).
            stop: Secuencias de parada opcionales.
            **kwargs: Argumentos adicionales del backend.

        Returns:
            ModelResponse con el texto generado o la llamada a función.

        Raises:
            ModelGenerationError: Si hay un error durante la generación.
            ModelTimeoutError: Si se excede el timeout.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verifica si el backend está disponible y funcionando.

        Returns:
            True si el backend está operativo, False en caso contrario.
        """
        pass

    # =========================================================================
    # Métodos opcionales (con implementación por defecto)
    # =========================================================================

    async def load(self) -> None:
        """Marca el modelo como listo. Los backends remotos no cargan nada."""
        self.is_loaded = True

    async def unload(self) -> None:
        """Libera recursos del adaptador."""
        self.is_loaded = False

    # =========================================================================
    # Métodos de utilidad
    # =========================================================================

    def _normalize_messages(
        self,
        messages: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """
        Normaliza mensajes al formato de diccionario estándar.

        Acepta roles como MessageRole o str y conserva campos extra
        como "name".

        Raises:
            ValueError: Si un mensaje no es un diccionario.
        """
        normalized = []
        for msg in messages:
            if not isinstance(msg, dict):
                raise ValueError(f"Formato de mensaje no soportado: {type(msg)}")
            role = msg.get("role", MessageRole.USER.value)
            if isinstance(role, MessageRole):
                role = role.value
            normalized.append({**msg, "role": role, "content": msg.get("content") or ""})
        return normalized

    @staticmethod
    def _parse_function_call(name: str, arguments: Any) -> FunctionCall:
        """
        Construye un FunctionCall a partir de una tool call del backend.

        Algunos backends envían los argumentos como dict y otros como
        texto JSON; el FunctionCall siempre guarda texto.
        """
        if isinstance(arguments, str):
            text = arguments
        else:
            text = json.dumps(arguments or {}, ensure_ascii=False)
        return FunctionCall(name=name, arguments=text)

    def _create_response(
        self,
        content: str,
        *,
        function_call: FunctionCall | None = None,
        prompt_tokens: int | None = None,
        completion_tokens: int | None = None,
        generation_time_ms: float | None = None,
        finish_reason: str | None = None,
        raw_response: dict[str, Any] | None = None,
    ) -> ModelResponse:
        """Crea un objeto ModelResponse estandarizado."""
        total_tokens = None
        if prompt_tokens is not None and completion_tokens is not None:
            total_tokens = prompt_tokens + completion_tokens

        return ModelResponse(
            content=content,
            model=self.model_id,
            function_call=function_call,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
            generation_time_ms=generation_time_ms,
            finish_reason=finish_reason,
            raw_response=raw_response,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model_id}, loaded={self.is_loaded})"


__all__ = [
    "BaseModelAdapter",
]
