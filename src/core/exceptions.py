"""
Excepciones personalizadas del sistema Aula GroupChat.

Este módulo define una jerarquía de excepciones que permite
un manejo de errores preciso y consistente en todo el sistema.

Política de propagación del bucle de conversación:
- DuplicateParticipantError: fatal, se lanza al construir el GroupChat.
- InvocationError: se recupera dentro del bucle y se convierte en Message.
- AgentReplyError: NO se recupera, aborta la conversación.
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Excepción Base
# =============================================================================

class AulaError(Exception):
    """
    Excepción base para todos los errores del sistema Aula GroupChat.

    Attributes:
        message: Mensaje descriptivo del error.
        details: Información adicional sobre el error.
        recoverable: Indica si el error es recuperable.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convierte la excepción a un diccionario serializable."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Errores de Configuración
# =============================================================================

class ConfigurationError(AulaError):
    """Error de configuración del sistema."""

    def __init__(self, message: str, config_key: str | None = None) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details=details, recoverable=False)


class InvalidModelIdError(ConfigurationError):
    """Formato de model_id inválido."""

    def __init__(self, model_id: str) -> None:
        super().__init__(
            f"Formato de model_id inválido: '{model_id}'. "
            f"Use el formato 'backend/model_name' (ej: 'ollama/llama3.1:8b')",
            config_key="model_id",
        )


class BackendNotSupportedError(ConfigurationError):
    """Backend no soportado."""

    def __init__(self, backend: str, supported_backends: list[str]) -> None:
        super().__init__(
            f"Backend '{backend}' no soportado. "
            f"Backends disponibles: {', '.join(supported_backends)}",
            config_key="backend",
        )


# =============================================================================
# Errores de Modelo
# =============================================================================

class ModelError(AulaError):
    """Error relacionado con modelos de lenguaje."""
    pass


class ModelNotFoundError(ModelError):
    """El modelo solicitado no fue encontrado."""

    def __init__(self, model_id: str, backend: str | None = None) -> None:
        details = {"model_id": model_id}
        if backend:
            details["backend"] = backend
        super().__init__(
            f"Modelo no encontrado: {model_id}",
            details=details,
            recoverable=False,
        )


class ModelConnectionError(ModelError):
    """Error de conexión con el backend del modelo."""

    def __init__(self, backend: str, base_url: str, cause: str | None = None) -> None:
        details = {"backend": backend, "base_url": base_url}
        if cause:
            details["cause"] = cause
        super().__init__(
            f"No se pudo conectar al backend {backend} en {base_url}",
            details=details,
            recoverable=True,
        )


class ModelGenerationError(ModelError):
    """Error durante la generación de texto."""

    def __init__(self, model: str, cause: str) -> None:
        super().__init__(
            f"Error generando respuesta con {model}: {cause}",
            details={"model": model, "cause": cause},
            recoverable=True,
        )


class ModelTimeoutError(ModelError):
    """Timeout durante la generación."""

    def __init__(self, model: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Timeout de {timeout_seconds}s excedido para modelo {model}",
            details={"model": model, "timeout_seconds": timeout_seconds},
            recoverable=True,
        )


# =============================================================================
# Errores del GroupChat
# =============================================================================

class GroupChatError(AulaError):
    """Error en la configuración o el ciclo de vida de un GroupChat."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details=details, recoverable=False)


class DuplicateParticipantError(GroupChatError):
    """Dos participantes comparten el mismo nombre."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Participante duplicado en el group chat: '{name}'",
            details={"name": name},
        )
        self.name = name


class SpeakerSelectionError(GroupChatError):
    """El selector de turno devolvió un participante desconocido."""

    def __init__(self, selected: str, participants: list[str]) -> None:
        super().__init__(
            f"El selector devolvió un participante desconocido: '{selected}'",
            details={"selected": selected, "participants": participants},
        )


# =============================================================================
# Errores de Agentes
# =============================================================================

class AgentError(AulaError):
    """Error relacionado con agentes."""
    pass


class AgentReplyError(AgentError):
    """
    El cálculo de la respuesta de un agente lanzó una excepción.

    Es el único error que cruza la frontera del bucle de conversación.
    El historial parcial sigue disponible en el GroupChat.
    """

    def __init__(self, agent_name: str, round_index: int, cause: BaseException) -> None:
        super().__init__(
            f"El agente '{agent_name}' falló al responder en el turno {round_index}: {cause}",
            details={
                "agent": agent_name,
                "round": round_index,
                "cause": f"{type(cause).__name__}: {cause}",
            },
            recoverable=False,
        )
        self.agent_name = agent_name
        self.round_index = round_index
        self.cause = cause


class ScriptExhaustedError(AgentError):
    """Un agente con guion no tiene más respuestas."""

    def __init__(self, agent_name: str, replies_used: int) -> None:
        super().__init__(
            f"El guion del agente '{agent_name}' se agotó tras {replies_used} respuestas",
            details={"agent": agent_name, "replies_used": replies_used},
            recoverable=False,
        )


# =============================================================================
# Errores de Invocación de Funciones
# =============================================================================

class InvocationError(AulaError):
    """
    Una función registrada falló o recibió argumentos mal formados.

    Se recupera dentro del bucle: el manager la convierte en un Message.
    """

    def __init__(self, function_name: str, reason: str, arguments: str | None = None) -> None:
        details = {"function": function_name, "reason": reason}
        if arguments is not None:
            details["arguments"] = arguments[:200]
        super().__init__(
            f"Error invoking function '{function_name}': {reason}",
            details=details,
            recoverable=True,
        )
        self.function_name = function_name
        self.reason = reason


class FunctionNotFoundError(InvocationError):
    """La función solicitada no está registrada en el agente."""

    def __init__(self, function_name: str, available: list[str]) -> None:
        super().__init__(
            function_name,
            f"function is not registered (available: {', '.join(available) or 'none'})",
        )


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Base
    "AulaError",
    # Configuration errors
    "ConfigurationError",
    "InvalidModelIdError",
    "BackendNotSupportedError",
    # Model errors
    "ModelError",
    "ModelNotFoundError",
    "ModelConnectionError",
    "ModelGenerationError",
    "ModelTimeoutError",
    # GroupChat errors
    "GroupChatError",
    "DuplicateParticipantError",
    "SpeakerSelectionError",
    # Agent errors
    "AgentError",
    "AgentReplyError",
    "ScriptExhaustedError",
    # Invocation errors
    "InvocationError",
    "FunctionNotFoundError",
]
