"""
Módulo de abstracción de modelos del sistema Aula GroupChat.

Capa unificada para los backends de modelos de lenguaje que pueden
respaldar a un agente o al selector de turno:

- **Ollama**: Modelos locales via servidor Ollama
- **OpenAI Local**: Servidores compatibles con API OpenAI (vLLM, llama.cpp, LM Studio)

Ejemplo de uso básico:
    ```python
    from src.models import get_model

    model = await get_model("ollama/llama3.1:8b")
    response = await model.generate([
        {"role": "user", "content": "Hola, ¿cómo estás?"}
    ])
    print(response.content)
    ```

El formato de identificador de modelo es: "backend/model_name"
"""

from src.models.base import BaseModelAdapter
from src.models.factory import (
    SUPPORTED_BACKENDS,
    ModelFactory,
    ModelManager,
    get_model,
    get_model_manager,
)
from src.models.ollama_adapter import OllamaAdapter
from src.models.openai_local import OpenAILocalAdapter

__all__ = [
    # Base classes
    "BaseModelAdapter",
    # Adaptadores
    "OllamaAdapter",
    "OpenAILocalAdapter",
    # Factory
    "ModelFactory",
    "ModelManager",
    "get_model_manager",
    "get_model",
    "SUPPORTED_BACKENDS",
]
