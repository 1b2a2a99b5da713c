"""
Tipos y estructuras de datos del sistema Aula GroupChat.

Este módulo define los tipos centrales usados en todo el sistema:
mensajes de la conversación, llamadas a funciones, estados del bucle
y respuestas de los modelos.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


# Palabra clave del protocolo: un agente que responde exactamente esto
# termina la conversación.
TERMINATE = "[GROUPCHAT_TERMINATE]"

# Flag de metadata equivalente al centinela
TERMINATE_FLAG = "is_terminate"


# =============================================================================
# Enumeraciones
# =============================================================================

class MessageRole(str, Enum):
    """Roles en una conversación con un modelo."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ChatState(str, Enum):
    """Estados del bucle de conversación."""
    RUNNING = "running"
    TERMINATED = "terminated"


class TerminationReason(str, Enum):
    """Razón por la que terminó una conversación."""
    ROUND_LIMIT_REACHED = "round_limit_reached"
    EXPLICIT_TERMINATE = "explicit_terminate"


# =============================================================================
# Mensajes
# =============================================================================

class FunctionCall(BaseModel):
    """Petición de un agente para ejecutar una función registrada."""
    name: str = Field(min_length=1)
    arguments: str = "{}"

    model_config = ConfigDict(frozen=True)


class Message(BaseModel):
    """
    Un turno de la conversación.

    Inmutable una vez creado. Debe tener `content`, `function_call` o ambos.
    El remitente se serializa como "from".
    """
    sender: str = Field(alias="from", min_length=1)
    content: str | None = None
    function_call: FunctionCall | None = None
    metadata: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("metadata", mode="after")
    @classmethod
    def freeze_metadata(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        """La metadata se guarda como copia de solo lectura."""
        return MappingProxyType(dict(v))

    @field_serializer("metadata")
    def serialize_metadata(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return dict(v)

    @model_validator(mode="after")
    def check_payload(self) -> "Message":
        """Un mensaje sin contenido ni llamada a función no es válido."""
        if self.content is None and self.function_call is None:
            raise ValueError("Un Message necesita content o function_call")
        return self

    def is_terminate(self) -> bool:
        """Indica si el mensaje es la señal de fin de conversación."""
        if self.metadata.get(TERMINATE_FLAG) is True:
            return True
        return self.content is not None and self.content.strip() == TERMINATE

    def format(self) -> str:
        """Formatea el mensaje para imprimir un transcript."""
        lines = [f"Message from {self.sender}", "-" * 40]
        if self.content is not None:
            lines.append(f"content: {self.content}")
        if self.function_call is not None:
            lines.append(f"function name: {self.function_call.name}")
            lines.append(f"function arguments: {self.function_call.arguments}")
        lines.append("-" * 40)
        return "\n".join(lines)


# =============================================================================
# Resultado de una conversación
# =============================================================================

class ChatResult(BaseModel):
    """Resultado de una ejecución completa del GroupChatManager."""
    history: tuple[Message, ...]
    reason: TerminationReason
    round_count: int
    seed_count: int

    model_config = ConfigDict(frozen=True)

    @property
    def turns(self) -> tuple[Message, ...]:
        """Mensajes producidos por el bucle (sin los mensajes semilla)."""
        return self.history[self.seed_count:]


# =============================================================================
# Respuesta del Modelo (genérica)
# =============================================================================

class ModelResponse(BaseModel):
    """Respuesta genérica de un modelo de lenguaje."""
    content: str
    model: str

    # Llamada a función pedida por el modelo (tool call)
    function_call: FunctionCall | None = None

    # Métricas de generación
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None

    # Timing
    generation_time_ms: float | None = None

    # Información adicional del backend
    finish_reason: str | None = None
    raw_response: dict[str, Any] | None = None


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "TERMINATE",
    "TERMINATE_FLAG",
    # Enums
    "MessageRole",
    "ChatState",
    "TerminationReason",
    # Messages
    "FunctionCall",
    "Message",
    "ChatResult",
    # Model
    "ModelResponse",
]
