"""
Configuración centralizada del sistema Aula GroupChat.

Este módulo proporciona una configuración tipada y validada usando Pydantic Settings.
Soporta carga desde variables de entorno y archivos .env, y los perfiles de
agentes (personas) desde un archivo YAML.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Enumeraciones
# =============================================================================

class ModelBackend(str, Enum):
    """Backends de modelos soportados."""
    OLLAMA = "ollama"
    OPENAI_LOCAL = "openai_local"


class LogLevel(str, Enum):
    """Niveles de logging."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# Modelos de Configuración
# =============================================================================

class OllamaConfig(BaseModel):
    """Configuración para backend Ollama."""
    base_url: str = "http://localhost:11434"
    timeout: int = 120

    model_config = {"extra": "allow"}


class OpenAILocalConfig(BaseModel):
    """Configuración para backends compatibles con OpenAI API."""
    base_url: str = "http://localhost:8000/v1"
    api_key: str = "not-needed"
    timeout: int = 120

    model_config = {"extra": "allow"}


class ModelDefaults(BaseModel):
    """Valores por defecto para los modelos de los agentes."""
    agent_model: str = "ollama/llama3.1:8b"
    selector_model: str = "ollama/llama3.1:8b"
    agent_temperature: float = 0.0
    selector_temperature: float = 0.0
    agent_max_tokens: int = 1024
    selector_max_tokens: int = 32


class GroupChatConfig(BaseModel):
    """Configuración del bucle de conversación en grupo."""
    # Límite de turnos por conversación
    max_round: int = 50

    # Reintentos del agente cuando falla una función (0 = el fallo es el turno)
    function_retry_limit: int = 0

    # Caracteres de contenido incluidos en los logs de cada turno
    log_message_preview: int = 120

    @field_validator("max_round")
    @classmethod
    def check_max_round(cls, v: int) -> int:
        """max_round debe ser un entero positivo."""
        if v < 1:
            raise ValueError("max_round debe ser un entero positivo")
        return v

    @field_validator("function_retry_limit")
    @classmethod
    def check_retry_limit(cls, v: int) -> int:
        """El límite de reintentos no puede ser negativo."""
        if v < 0:
            raise ValueError("function_retry_limit no puede ser negativo")
        return v


class LoggingConfig(BaseModel):
    """Configuración de logging."""
    level: LogLevel = LogLevel.INFO
    format: str = "json"
    include_timestamps: bool = True
    log_model_inputs: bool = False
    log_model_outputs: bool = False
    log_file: str | None = None


class AgentProfile(BaseModel):
    """Perfil de un agente cargado desde YAML."""
    name: str
    system_context: str = ""
    description: str = ""
    model: str | None = None
    temperature: float | None = None


# =============================================================================
# Settings Principal
# =============================================================================

class Settings(BaseSettings):
    """
    Configuración principal del sistema Aula GroupChat.

    Los valores pueden ser sobrescritos mediante variables de entorno
    con el prefijo AULA_, por ejemplo:
    - AULA_DEBUG=true
    - AULA_GROUPCHAT__MAX_ROUND=20
    - AULA_OLLAMA__BASE_URL=http://192.168.1.100:11434
    """

    model_config = SettingsConfigDict(
        env_prefix="AULA_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Modo debug
    debug: bool = False

    # Rutas del proyecto
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent)
    config_dir: Path = Field(default_factory=lambda: Path(__file__).parent)

    # Archivo de perfiles de agentes
    agents_config_file: str = "agents.yaml"

    # Configuraciones de subsistemas
    groupchat: GroupChatConfig = Field(default_factory=GroupChatConfig)
    model_defaults: ModelDefaults = Field(default_factory=ModelDefaults)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    openai_local: OpenAILocalConfig = Field(default_factory=OpenAILocalConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Cache de perfiles YAML
    _profiles_cache: dict[str, AgentProfile] | None = PrivateAttr(default=None)

    def get_agent_profiles(self) -> dict[str, AgentProfile]:
        """
        Carga y cachea los perfiles de agentes desde YAML.

        El archivo tiene la forma:

            agents:
              Teacher:
                system_context: "..."
                model: ollama/llama3.1:8b

        Returns:
            Diccionario nombre -> AgentProfile (vacío si no hay archivo).
        """
        if self._profiles_cache is None:
            config_path = self.config_dir / self.agents_config_file
            raw: dict[str, Any] = {}
            if config_path.exists():
                with open(config_path, encoding="utf-8") as f:
                    raw = yaml.safe_load(f) or {}

            self._profiles_cache = {
                name: AgentProfile(name=name, **(info or {}))
                for name, info in raw.get("agents", {}).items()
            }
        return self._profiles_cache

    def get_agent_profile(self, name: str) -> AgentProfile | None:
        """
        Obtiene el perfil de un agente.

        Args:
            name: Nombre del agente (ej: "Teacher").

        Returns:
            AgentProfile o None si no existe.
        """
        return self.get_agent_profiles().get(name)

    def get_backend_config(self, backend: ModelBackend | str) -> dict[str, Any]:
        """
        Obtiene la configuración de un backend específico.

        Args:
            backend: Tipo de backend (ollama, openai_local)

        Returns:
            Diccionario con la configuración del backend.
        """
        if isinstance(backend, ModelBackend):
            backend = backend.value

        if backend == "ollama":
            return self.ollama.model_dump()
        elif backend == "openai_local":
            return self.openai_local.model_dump()
        else:
            raise ValueError(f"Backend desconocido: {backend}")


@lru_cache
def get_settings() -> Settings:
    """
    Obtiene la instancia singleton de Settings.

    Returns:
        Instancia de Settings configurada.
    """
    return Settings()


# =============================================================================
# Funciones de utilidad
# =============================================================================

def parse_model_id(model_id: str) -> tuple[str, str]:
    """
    Parsea un identificador de modelo en backend y nombre.

    Args:
        model_id: Identificador del modelo (ej: "ollama/llama3.1:8b")

    Returns:
        Tupla (backend, model_name)

    Raises:
        ValueError: Si el formato es inválido.
    """
    if "/" not in model_id:
        raise ValueError(
            f"Formato de model_id inválido: {model_id}. "
            f"Usa el formato 'backend/model_name' (ej: 'ollama/llama3.1:8b')"
        )

    parts = model_id.split("/", 1)
    return parts[0], parts[1]


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
