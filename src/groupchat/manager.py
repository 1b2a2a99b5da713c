"""
Bucle de conversación en grupo.

El GroupChatManager es el único que modifica el historial de su GroupChat.
Cada iteración es un turno:

1. Selecciona el siguiente hablante.
2. Pide su respuesta con un snapshot del historial.
3. Si la respuesta es un FunctionCall, lo resuelve contra el registro
   del propio agente; el resultado (o el error) es la respuesta del turno.
4. Añade el mensaje y cuenta el turno.
5. Comprueba si la conversación terminó.

Los turnos son estrictamente secuenciales: se espera cada respuesta antes
de empezar el siguiente turno.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING
from uuid import uuid4

from config.settings import get_settings
from src.core.exceptions import (
    AgentReplyError,
    GroupChatError,
    InvocationError,
    SpeakerSelectionError,
)
from src.core.types import ChatResult, ChatState, Message, TerminationReason
from src.groupchat.chat import GroupChat
from src.groupchat.selection import GroupChatState, SpeakerSelector, round_robin
from src.groupchat.termination import check_termination
from src.utils.logging import LogContext, get_logger, log_function_call, log_turn
from src.utils.metrics import get_metrics

if TYPE_CHECKING:
    from src.agents.agent import Agent


logger = get_logger(__name__)
metrics = get_metrics()


# Flag de metadata de los mensajes que reportan un fallo de función
INVOCATION_ERROR_FLAG = "invocation_error"


def _check_max_round(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"max_round debe ser un entero positivo, recibido: {value!r}")
    return value


def _selector_name(selector: SpeakerSelector) -> str:
    """Nombre del selector para los errores (función o clase)."""
    return getattr(selector, "__name__", type(selector).__name__)


class GroupChatManager:
    """
    Conduce una conversación de principio a fin.

    Un manager sirve para una sola ejecución; no guarda estado más allá
    de ella.

    Attributes:
        chat: GroupChat cuyo historial gestiona.
        max_round: Límite de turnos.
        round_count: Turnos completados.
        state: RUNNING o TERMINATED.
        termination_reason: Razón de fin (None si terminó por error).
        error: AgentReplyError (u otro fallo) que abortó la conversación.

    Example:
        ```python
        chat = GroupChat([admin, teacher, student])
        manager = GroupChatManager(chat, max_round=50)
        result = await manager.run()
        print(result.reason, result.round_count)
        ```
    """

    def __init__(
        self,
        chat: GroupChat,
        max_round: int | None = None,
        speaker_selector: SpeakerSelector | None = None,
        function_retry_limit: int | None = None,
        conversation_id: str | None = None,
    ) -> None:
        """
        Inicializa el manager.

        Args:
            chat: Conversación a conducir.
            max_round: Límite de turnos (por defecto el de configuración).
            speaker_selector: Política de turno (por defecto round_robin).
            function_retry_limit: Veces que se vuelve a preguntar al agente
                tras un fallo de función (por defecto el de configuración).
            conversation_id: Identificador para los logs.

        Raises:
            ValueError: Si max_round no es un entero positivo o el límite
                de reintentos es negativo.
        """
        settings = get_settings()

        self.chat = chat
        self.max_round = _check_max_round(
            max_round if max_round is not None else settings.groupchat.max_round
        )
        self.speaker_selector: SpeakerSelector = speaker_selector or round_robin

        retry_limit = (
            function_retry_limit
            if function_retry_limit is not None
            else settings.groupchat.function_retry_limit
        )
        if retry_limit < 0:
            raise ValueError("function_retry_limit no puede ser negativo")
        self.function_retry_limit = retry_limit

        self.conversation_id = conversation_id or uuid4().hex[:12]
        self.log_preview_chars = settings.groupchat.log_message_preview

        self.round_count = 0
        self.state = ChatState.RUNNING
        self.termination_reason: TerminationReason | None = None
        self.error: BaseException | None = None
        self._has_run = False

    @property
    def history(self) -> tuple[Message, ...]:
        return self.chat.history

    @property
    def is_terminated(self) -> bool:
        return self.state == ChatState.TERMINATED

    async def run(self, max_round: int | None = None) -> ChatResult:
        """
        Ejecuta la conversación hasta un estado terminal.

        Args:
            max_round: Sobrescribe el límite de turnos para esta ejecución.

        Returns:
            ChatResult con el historial completo y la razón de fin.

        Raises:
            GroupChatError: Si el manager ya se ejecutó.
            AgentReplyError: Si un agente o el selector de turno falla. El
                historial parcial queda disponible en `chat.history`.
        """
        if self._has_run:
            raise GroupChatError(
                "Un GroupChatManager solo puede ejecutarse una vez",
                details={"conversation_id": self.conversation_id},
            )
        if max_round is not None:
            self.max_round = _check_max_round(max_round)

        self._has_run = True
        self.chat.start()

        with LogContext(conversation_id=self.conversation_id):
            logger.info(
                "conversation_started",
                participants=self.chat.participant_names,
                max_round=self.max_round,
                seed_messages=self.chat.seed_count,
            )

            try:
                while self.state == ChatState.RUNNING:
                    await self._step()
            except Exception as e:
                self.state = ChatState.TERMINATED
                self.error = e
                logger.error(
                    "conversation_aborted",
                    round=self.round_count,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                metrics.increment("groupchat_aborted")
                raise

            logger.info(
                "conversation_finished",
                reason=self.termination_reason.value,
                rounds=self.round_count,
                history_length=len(self.chat),
            )
            metrics.increment(
                "groupchat_terminations",
                labels={"reason": self.termination_reason.value},
            )

        return self.result()

    def result(self) -> ChatResult:
        """
        Resultado de una ejecución terminada normalmente.

        Raises:
            GroupChatError: Si la conversación no terminó o terminó por error.
        """
        if self.termination_reason is None:
            raise GroupChatError(
                "La conversación no tiene resultado",
                details={"state": self.state.value, "has_error": self.error is not None},
            )
        return ChatResult(
            history=self.chat.history,
            reason=self.termination_reason,
            round_count=self.round_count,
            seed_count=self.chat.seed_count,
        )

    # =========================================================================
    # Turno
    # =========================================================================

    async def _step(self) -> None:
        """Ejecuta un turno completo."""
        speaker = await self._select_speaker()
        message = await self._take_turn(speaker)

        self.chat.append(message)
        self.round_count += 1

        log_turn(
            logger,
            self.round_count,
            speaker.name,
            message.content,
            preview_chars=self.log_preview_chars,
            function=message.function_call.name if message.function_call else None,
        )
        metrics.increment("groupchat_turns", labels={"agent": speaker.name})

        reason = check_termination(message, self.round_count, self.max_round)
        if reason is not None:
            self.state = ChatState.TERMINATED
            self.termination_reason = reason

    async def _select_speaker(self) -> "Agent":
        """
        Pregunta al selector quién habla.

        Raises:
            SpeakerSelectionError: Si el selector devuelve un desconocido.
            AgentReplyError: Si el selector lanza una excepción.
        """
        state = GroupChatState(
            current_round=self.round_count,
            participants=self.chat.participants,
            history=self.chat.history,
        )
        try:
            selected = self.speaker_selector(state)
            if inspect.isawaitable(selected):
                selected = await selected
        except Exception as e:
            selector = _selector_name(self.speaker_selector)
            raise AgentReplyError(selector, self.round_count + 1, e) from e

        name = selected if isinstance(selected, str) else getattr(selected, "name", repr(selected))
        agent = self.chat.get_agent(name)
        if agent is None or (not isinstance(selected, str) and agent is not selected):
            raise SpeakerSelectionError(name, self.chat.participant_names)
        return agent

    async def _take_turn(self, speaker: "Agent") -> Message:
        """
        Obtiene la respuesta del agente y resuelve su llamada a función.

        Con `function_retry_limit > 0`, tras un fallo de función se vuelve a
        preguntar al mismo agente con el error a la vista; esos intentos
        intermedios no entran en el historial.

        Raises:
            AgentReplyError: Si el agente lanza una excepción.
        """
        transient: list[Message] = []
        retries = 0

        while True:
            history = self.chat.history + tuple(transient)
            try:
                with metrics.timer("agent_reply_ms", labels={"agent": speaker.name}):
                    reply = await speaker.produce_reply(history)
            except Exception as e:
                raise AgentReplyError(speaker.name, self.round_count + 1, e) from e

            call = reply.function_call
            if call is None:
                return reply

            try:
                result = await speaker.functions.invoke(call.name, call.arguments)
            except InvocationError as e:
                log_function_call(
                    logger,
                    speaker.name,
                    call.name,
                    success=False,
                    reason=e.reason,
                    retry=retries,
                )
                metrics.increment(
                    "function_calls",
                    labels={"function": call.name, "status": "error"},
                )
                failure = Message(
                    sender=speaker.name,
                    content=e.message,
                    function_call=call,
                    metadata={**reply.metadata, INVOCATION_ERROR_FLAG: True},
                )
                if retries < self.function_retry_limit:
                    retries += 1
                    transient.append(failure)
                    continue
                return failure

            log_function_call(logger, speaker.name, call.name, success=True)
            metrics.increment(
                "function_calls",
                labels={"function": call.name, "status": "ok"},
            )
            return Message(
                sender=speaker.name,
                content=result,
                function_call=call,
                metadata=reply.metadata,
            )

    def __repr__(self) -> str:
        return (
            f"GroupChatManager(conversation_id={self.conversation_id!r}, "
            f"state={self.state.value}, round={self.round_count}/{self.max_round})"
        )


__all__ = [
    "GroupChatManager",
    "INVOCATION_ERROR_FLAG",
]
