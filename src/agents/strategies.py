"""
Estrategias de respuesta de los agentes.

Un agente no sabe cómo se calcula su respuesta: delega en una estrategia
inyectada. Todas cumplen el mismo contrato, `(agent, history) -> reply`,
donde la respuesta puede ser un Message, un texto o un FunctionCall.

- ScriptedReply: respuestas predefinidas (tests y demos deterministas).
- CallableReply: envuelve cualquier función (síncrona o asíncrona).
- ModelReply: respuesta calculada por un modelo de lenguaje.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence, Union

from src.core.exceptions import ScriptExhaustedError
from src.core.types import FunctionCall, Message, MessageRole
from src.models.base import BaseModelAdapter
from src.models.factory import get_model
from src.utils.logging import get_logger, log_model_call

if TYPE_CHECKING:
    from src.agents.agent import Agent


logger = get_logger(__name__)


# Lo que puede devolver una estrategia antes de normalizarse a Message
Reply = Union[Message, str, FunctionCall]
ReplyFunc = Callable[["Agent", Sequence[Message]], Union[Reply, Awaitable[Reply]]]


async def _resolve(value: Any) -> Any:
    """Espera el valor si es awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


class ScriptedReply:
    """
    Estrategia que devuelve respuestas predefinidas en orden.

    Cada elemento del guion puede ser un texto, un FunctionCall, un
    Message o un callable `(history) -> reply` para respuestas que
    dependen de la conversación.

    Example:
        ```python
        student = Agent(
            "Student",
            ScriptedReply([FunctionCall(name="answer_question", arguments='{"answer": "4"}')]),
        )
        ```
    """

    def __init__(
        self,
        replies: Sequence[Any],
        fallback: Any | None = None,
    ) -> None:
        """
        Args:
            replies: Respuestas en el orden en que se usarán.
            fallback: Respuesta usada cuando el guion se agota. Sin fallback,
                agotar el guion lanza ScriptExhaustedError.
        """
        self.replies = list(replies)
        self.fallback = fallback
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.replies) - self.position

    async def __call__(self, agent: "Agent", history: Sequence[Message]) -> Reply:
        if self.position < len(self.replies):
            item = self.replies[self.position]
            self.position += 1
        elif self.fallback is not None:
            item = self.fallback
        else:
            raise ScriptExhaustedError(agent.name, self.position)

        if callable(item) and not isinstance(item, (Message, FunctionCall)):
            item = await _resolve(item(history))
        return item


class CallableReply:
    """Envuelve una función `(agent, history) -> reply` síncrona o asíncrona."""

    def __init__(self, func: ReplyFunc) -> None:
        self.func = func

    async def __call__(self, agent: "Agent", history: Sequence[Message]) -> Reply:
        return await _resolve(self.func(agent, history))


class ModelReply:
    """
    Estrategia respaldada por un modelo de lenguaje.

    Convierte el historial en mensajes de chat desde el punto de vista del
    agente: sus propios mensajes son `assistant` y los del resto `user`
    (con el remitente como prefijo). Las funciones registradas del agente
    se envían como tools; una tool call del modelo se devuelve como
    FunctionCall para que el manager la resuelva.

    Attributes:
        model: Adaptador del modelo o identificador "backend/model_name".
        temperature: Temperatura de sampling.
        max_tokens: Máximo de tokens por respuesta.
    """

    def __init__(
        self,
        model: BaseModelAdapter | str,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> None:
        self._model = model if isinstance(model, BaseModelAdapter) else None
        self._model_id = model if isinstance(model, str) else model.model_id
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def model_id(self) -> str:
        return self._model_id

    async def _get_model(self) -> BaseModelAdapter:
        """Resuelve el adaptador la primera vez que se necesita."""
        if self._model is None:
            self._model = await get_model(self._model_id)
        return self._model

    @staticmethod
    def render_history(agent: "Agent", history: Sequence[Message]) -> list[dict[str, Any]]:
        """
        Convierte el historial a mensajes de chat para el modelo.

        Args:
            agent: Agente que va a hablar.
            history: Historial completo de la conversación.

        Returns:
            Lista de mensajes {"role", "content"}.
        """
        messages: list[dict[str, Any]] = []
        if agent.system_context:
            messages.append({"role": MessageRole.SYSTEM.value, "content": agent.system_context})

        for message in history:
            text = message.content or ""
            if message.function_call is not None:
                call = f"[function call] {message.function_call.name}({message.function_call.arguments})"
                text = f"{text}\n{call}" if text else call

            if message.sender == agent.name:
                messages.append({"role": MessageRole.ASSISTANT.value, "content": text})
            else:
                messages.append({
                    "role": MessageRole.USER.value,
                    "content": f"From {message.sender}:\n{text}",
                })
        return messages

    async def __call__(self, agent: "Agent", history: Sequence[Message]) -> Reply:
        model = await self._get_model()
        tools = agent.functions.tool_schemas() or None

        log_model_call(
            logger,
            model.model_id,
            "agent_reply",
            agent=agent.name,
            history_length=len(history),
            tools=len(tools or []),
        )

        response = await model.generate(
            self.render_history(agent, history),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            tools=tools,
        )

        return Message(
            sender=agent.name,
            content=response.content if response.content or response.function_call is None else None,
            function_call=response.function_call,
            metadata={"model": response.model},
        )


__all__ = [
    "Reply",
    "ReplyFunc",
    "ScriptedReply",
    "CallableReply",
    "ModelReply",
]
