"""
Configuración y fixtures compartidos para tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Generator, Sequence
from unittest.mock import MagicMock, patch

import pytest

# Añadir el directorio raíz al path para imports
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from config.settings import get_settings  # noqa: E402
from src.agents.agent import Agent  # noqa: E402
from src.agents.strategies import ScriptedReply  # noqa: E402
from src.models.factory import ModelFactory  # noqa: E402
from src.utils.metrics import get_metrics  # noqa: E402


# =============================================================================
# Estado global entre tests
# =============================================================================

@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Limpia settings cacheados, caché de adaptadores y métricas."""
    get_settings.cache_clear()
    ModelFactory.clear_cache()
    get_metrics().reset()
    yield
    get_settings.cache_clear()
    ModelFactory.clear_cache()


# =============================================================================
# Fixtures para mocking de respuestas de modelos
# =============================================================================

@pytest.fixture
def mock_ollama_response() -> dict[str, Any]:
    """Respuesta típica de Ollama."""
    return {
        "model": "llama3.1:8b",
        "message": {
            "role": "assistant",
            "content": "Esta es una respuesta de prueba del modelo."
        },
        "done": True,
        "done_reason": "stop",
        "prompt_eval_count": 50,
        "eval_count": 25,
    }


@pytest.fixture
def mock_ollama_tool_response() -> dict[str, Any]:
    """Respuesta de Ollama con una tool call (argumentos como dict)."""
    return {
        "model": "llama3.1:8b",
        "message": {
            "role": "assistant",
            "content": "",
            "tool_calls": [
                {
                    "function": {
                        "name": "answer_question",
                        "arguments": {"answer": "4"},
                    }
                }
            ],
        },
        "done": True,
        "done_reason": "stop",
        "prompt_eval_count": 80,
        "eval_count": 12,
    }


@pytest.fixture
def mock_openai_response() -> dict[str, Any]:
    """Respuesta típica de OpenAI API compatible."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1677652288,
        "model": "meta-llama/Llama-3.1-8B-Instruct",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": "Esta es una respuesta de prueba."
                },
                "finish_reason": "stop"
            }
        ],
        "usage": {
            "prompt_tokens": 50,
            "completion_tokens": 25,
            "total_tokens": 75
        }
    }


@pytest.fixture
def mock_openai_tool_response() -> dict[str, Any]:
    """Respuesta OpenAI con una tool call (argumentos como texto JSON)."""
    return {
        "id": "chatcmpl-456",
        "object": "chat.completion",
        "model": "meta-llama/Llama-3.1-8B-Instruct",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {
                                "name": "update_progress",
                                "arguments": "{\"correct_answer_count\": 3}",
                            },
                        }
                    ],
                },
                "finish_reason": "tool_calls"
            }
        ],
        "usage": {
            "prompt_tokens": 90,
            "completion_tokens": 10,
            "total_tokens": 100
        }
    }


# =============================================================================
# Fixtures de agentes
# =============================================================================

@pytest.fixture
def make_agent() -> Callable[..., Agent]:
    """Crea agentes con guion; sin guion repiten "ok <nombre>" indefinidamente."""

    def _make(
        name: str,
        replies: Sequence[Any] = (),
        fallback: Any | None = None,
        **kwargs: Any,
    ) -> Agent:
        if fallback is None and not replies:
            fallback = f"ok {name}"
        return Agent(name, ScriptedReply(replies, fallback=fallback), **kwargs)

    return _make


# =============================================================================
# Fixtures para configuración
# =============================================================================

@pytest.fixture
def mock_settings() -> Generator[MagicMock, None, None]:
    """Mock de settings para tests de la factory."""
    with patch("src.models.factory.get_settings") as mock:
        settings = MagicMock()
        settings.ollama.base_url = "http://localhost:11434"
        settings.ollama.timeout = 60
        settings.openai_local.base_url = "http://localhost:8000/v1"
        settings.openai_local.api_key = "not-needed"
        settings.openai_local.timeout = 60
        mock.return_value = settings
        yield settings

