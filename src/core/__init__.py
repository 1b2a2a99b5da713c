"""
Módulo core del sistema Aula GroupChat.

Contiene tipos, estructuras de datos y excepciones fundamentales.
"""

from src.core.exceptions import (
    AgentError,
    AgentReplyError,
    AulaError,
    BackendNotSupportedError,
    ConfigurationError,
    DuplicateParticipantError,
    FunctionNotFoundError,
    GroupChatError,
    InvalidModelIdError,
    InvocationError,
    ModelConnectionError,
    ModelError,
    ModelGenerationError,
    ModelNotFoundError,
    ModelTimeoutError,
    ScriptExhaustedError,
    SpeakerSelectionError,
)
from src.core.types import (
    TERMINATE,
    TERMINATE_FLAG,
    ChatResult,
    ChatState,
    FunctionCall,
    Message,
    MessageRole,
    ModelResponse,
    TerminationReason,
)

__all__ = [
    # Types - Protocol
    "TERMINATE",
    "TERMINATE_FLAG",
    # Types - Enums
    "MessageRole",
    "ChatState",
    "TerminationReason",
    # Types - Messages
    "FunctionCall",
    "Message",
    "ChatResult",
    # Types - Model
    "ModelResponse",
    # Exceptions - Base
    "AulaError",
    # Exceptions - Configuration
    "ConfigurationError",
    "InvalidModelIdError",
    "BackendNotSupportedError",
    # Exceptions - Model
    "ModelError",
    "ModelNotFoundError",
    "ModelConnectionError",
    "ModelGenerationError",
    "ModelTimeoutError",
    # Exceptions - GroupChat
    "GroupChatError",
    "DuplicateParticipantError",
    "SpeakerSelectionError",
    # Exceptions - Agents
    "AgentError",
    "AgentReplyError",
    "ScriptExhaustedError",
    # Exceptions - Invocation
    "InvocationError",
    "FunctionNotFoundError",
]
