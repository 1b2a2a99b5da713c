"""
Módulo de configuración del sistema Aula GroupChat.
"""

from config.settings import (
    AgentProfile,
    GroupChatConfig,
    LoggingConfig,
    LogLevel,
    ModelBackend,
    ModelDefaults,
    OllamaConfig,
    OpenAILocalConfig,
    Settings,
    get_settings,
    parse_model_id,
)

__all__ = [
    "Settings",
    "get_settings",
    "ModelBackend",
    "LogLevel",
    "OllamaConfig",
    "OpenAILocalConfig",
    "ModelDefaults",
    "GroupChatConfig",
    "LoggingConfig",
    "AgentProfile",
    "parse_model_id",
]
