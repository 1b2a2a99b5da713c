"""
Registro de funciones invocables por los agentes.

Cada agente posee un FunctionRegistry: un mapeo nombre -> FunctionDefinition.
Cuando un agente responde con un FunctionCall, el manager (no el agente)
resuelve la llamada contra el registro del propio agente y el texto
resultante pasa a ser la respuesta del turno.

Las definiciones se registran explícitamente; el "shape" de los argumentos
es un modelo pydantic que se valida antes de ejecutar el handler.
"""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union, get_type_hints

from pydantic import BaseModel, ValidationError, create_model

from src.core.exceptions import FunctionNotFoundError, InvocationError


# Un handler recibe el texto crudo de los argumentos y devuelve el resultado
Handler = Callable[[str], Union[Any, Awaitable[Any]]]


def _build_input_model(func: Callable[..., Any], name: str) -> type[BaseModel]:
    """Construye un modelo pydantic a partir de la firma de `func`."""
    # Con `from __future__ import annotations` la firma trae strings
    try:
        hints = get_type_hints(func)
    except (NameError, TypeError):
        hints = {}

    fields: dict[str, Any] = {}
    for param in inspect.signature(func).parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, Any)
        default = param.default if param.default is not param.empty else ...
        fields[param.name] = (annotation, default)

    model_name = "".join(part.capitalize() for part in name.split("_")) + "Input"
    return create_model(model_name, **fields)


def _decode_arguments(name: str, arguments: str) -> dict[str, Any]:
    """
    Decodifica el texto JSON de los argumentos.

    Raises:
        InvocationError: Si el texto no es un objeto JSON.
    """
    text = arguments.strip() if arguments else ""
    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvocationError(name, f"malformed arguments: {e.msg}", arguments) from e
    if not isinstance(data, dict):
        raise InvocationError(name, "arguments must be a JSON object", arguments)
    return data


@dataclass
class FunctionDefinition:
    """
    Una función registrada en un agente.

    Attributes:
        name: Nombre con el que el modelo (o el guion) la invoca.
        handler: `(arguments_text) -> result`, síncrono o asíncrono.
        description: Descripción usada en el esquema de tools.
        input_model: Modelo pydantic de los argumentos (opcional).
    """
    name: str
    handler: Handler
    description: str = ""
    input_model: type[BaseModel] | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Una función registrada necesita nombre")

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
    ) -> "FunctionDefinition":
        """
        Crea una definición a partir de una función Python normal.

        Los parámetros de la firma se convierten en el modelo de entrada;
        el handler generado decodifica el JSON y llama a `func` con
        argumentos por nombre.

        Example:
            ```python
            def answer_question(answer: str) -> str:
                return f"The answer is {answer}"

            definition = FunctionDefinition.from_callable(answer_question)
            ```
        """
        func_name = name or func.__name__
        doc = inspect.getdoc(func) or ""
        input_model = _build_input_model(func, func_name)

        async def handler(arguments: str) -> Any:
            data = _decode_arguments(func_name, arguments)
            try:
                parsed = input_model.model_validate(data)
            except ValidationError as e:
                raise InvocationError(func_name, f"invalid arguments: {e}", arguments) from e
            result = func(**parsed.model_dump())
            if inspect.isawaitable(result):
                result = await result
            return result

        return cls(
            name=func_name,
            handler=handler,
            description=description if description is not None else doc.split("\n\n")[0],
            input_model=input_model,
        )

    def tool_schema(self) -> dict[str, Any]:
        """Esquema de la función en formato "tools" de OpenAI / Ollama."""
        if self.input_model is not None:
            parameters = self.input_model.model_json_schema()
            parameters.pop("title", None)
        else:
            parameters = {"type": "object", "properties": {}}

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


class FunctionRegistry:
    """
    Mapeo nombre -> función de un agente.

    Example:
        ```python
        registry = FunctionRegistry()
        registry.register(answer_question)
        result = await registry.invoke("answer_question", '{"answer": "4"}')
        ```
    """

    def __init__(self, functions: list[FunctionDefinition | Callable[..., Any]] | None = None) -> None:
        self._functions: dict[str, FunctionDefinition] = {}
        for function in functions or []:
            self.register(function)

    def register(
        self,
        function: FunctionDefinition | Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
    ) -> FunctionDefinition:
        """
        Registra una función.

        Acepta una FunctionDefinition ya construida o cualquier callable
        (se envuelve con `FunctionDefinition.from_callable`). Registrar un
        nombre existente reemplaza la definición anterior.

        Returns:
            La definición registrada.
        """
        if isinstance(function, FunctionDefinition):
            definition = function
        else:
            definition = FunctionDefinition.from_callable(function, name=name, description=description)

        self._functions[definition.name] = definition
        return definition

    def get(self, name: str) -> FunctionDefinition | None:
        return self._functions.get(name)

    def names(self) -> list[str]:
        """Nombres registrados, en orden de registro."""
        return list(self._functions)

    def tool_schemas(self) -> list[dict[str, Any]]:
        """Esquemas de todas las funciones para pasarlos a un modelo."""
        return [definition.tool_schema() for definition in self._functions.values()]

    async def invoke(self, name: str, arguments: str) -> str:
        """
        Ejecuta una función registrada.

        Args:
            name: Nombre de la función.
            arguments: Texto crudo de los argumentos (normalmente JSON).

        Returns:
            Resultado del handler convertido a texto.

        Raises:
            InvocationError: Si la función no existe, los argumentos son
                inválidos o el handler lanza una excepción.
        """
        definition = self._functions.get(name)
        if definition is None:
            raise FunctionNotFoundError(name, self.names())

        try:
            result = definition.handler(arguments)
            if inspect.isawaitable(result):
                result = await result
        except InvocationError:
            raise
        except Exception as e:
            raise InvocationError(name, f"{type(e).__name__}: {e}", arguments) from e

        if result is None:
            return ""
        return result if isinstance(result, str) else str(result)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)


__all__ = [
    "Handler",
    "FunctionDefinition",
    "FunctionRegistry",
]
