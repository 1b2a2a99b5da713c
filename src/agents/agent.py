"""
Agente conversacional configurable.

Hay una sola clase Agent: los agentes se diferencian por configuración
(contexto de sistema, funciones registradas y estrategia de respuesta),
no por herencia.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Callable, Sequence

from src.agents.functions import FunctionDefinition, FunctionRegistry
from src.agents.strategies import ReplyFunc
from src.core.types import FunctionCall, Message
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.groupchat.chat import GroupChat
    from src.groupchat.manager import GroupChatManager


logger = get_logger(__name__)


class Agent:
    """
    Participante de un group chat.

    Dado el historial, produce exactamente un Message. Puede responder
    con un FunctionCall en lugar de texto; el manager resuelve la llamada
    contra el registro de funciones del propio agente.

    Attributes:
        name: Nombre único dentro de un GroupChat.
        reply_strategy: Capacidad que calcula la respuesta.
        system_context: Instrucciones propias del agente (persona).
        functions: Registro de funciones invocables.
        description: Descripción breve, usada por el selector de turno.

    Example:
        ```python
        student = Agent(
            name="Student",
            reply_strategy=ModelReply("ollama/llama3.1:8b"),
            system_context="You are a student...",
        )
        student.register_function(answer_question)
        ```
    """

    def __init__(
        self,
        name: str,
        reply_strategy: ReplyFunc,
        system_context: str = "",
        functions: FunctionRegistry | Sequence[FunctionDefinition | Callable[..., Any]] | None = None,
        description: str = "",
    ) -> None:
        if not name:
            raise ValueError("Un agente necesita un nombre no vacío")

        self.name = name
        self.reply_strategy = reply_strategy
        self.system_context = system_context
        self.description = description

        if isinstance(functions, FunctionRegistry):
            self.functions = functions
        else:
            self.functions = FunctionRegistry(list(functions or []))

    def register_function(
        self,
        function: FunctionDefinition | Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
    ) -> FunctionDefinition:
        """Registra una función en el registro del agente."""
        definition = self.functions.register(function, name=name, description=description)
        logger.debug("function_registered", agent=self.name, function=definition.name)
        return definition

    async def produce_reply(self, history: Sequence[Message]) -> Message:
        """
        Calcula la respuesta del agente para el historial dado.

        Args:
            history: Historial de la conversación (solo lectura).

        Returns:
            Message con `sender` igual al nombre del agente.

        Raises:
            TypeError: Si la estrategia devuelve un tipo no soportado.
            Exception: Cualquier error de la estrategia se propaga; el
                manager lo envuelve en AgentReplyError.
        """
        reply = self.reply_strategy(self, tuple(history))
        if inspect.isawaitable(reply):
            reply = await reply

        if isinstance(reply, Message):
            if reply.sender != self.name:
                reply = reply.model_copy(update={"sender": self.name})
            return reply
        if isinstance(reply, str):
            return Message(sender=self.name, content=reply)
        if isinstance(reply, FunctionCall):
            return Message(sender=self.name, function_call=reply)

        raise TypeError(
            f"La estrategia del agente '{self.name}' devolvió un tipo no soportado: "
            f"{type(reply).__name__}"
        )

    def add_initialize_message(self, content: str, chat: "GroupChat") -> Message:
        """
        Añade un mensaje de presentación del agente al historial.

        Solo es válido antes de que empiece la conversación.
        """
        message = Message(sender=self.name, content=content)
        chat.add_initialize_message(message)
        return message

    async def initiate_chat(
        self,
        manager: "GroupChatManager",
        message: str | None = None,
        max_round: int | None = None,
    ) -> list[Message]:
        """
        Inicia la conversación desde este agente.

        Args:
            manager: Manager que conducirá la conversación.
            message: Instrucción inicial del agente (opcional).
            max_round: Límite de turnos (por defecto el de configuración).

        Returns:
            Historial completo de la conversación.
        """
        from src.groupchat.driver import initiate_chat

        seeds = [Message(sender=self.name, content=message)] if message else []
        return await initiate_chat(manager, seeds, max_round=max_round)

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, functions={self.functions.names()})"


__all__ = [
    "Agent",
]
