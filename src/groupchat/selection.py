"""
Selección del siguiente hablante.

Un selector recibe un GroupChatState inmutable y devuelve el agente (o su
nombre) que debe hablar. Puede ser síncrono o asíncrono.

- round_robin: política por defecto, participantes en orden de registro.
- ModelSpeakerSelector: un modelo de lenguaje elige el siguiente rol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Union

from src.core.types import Message, MessageRole
from src.models.base import BaseModelAdapter
from src.models.factory import get_model
from src.utils.logging import get_logger, log_model_call

if TYPE_CHECKING:
    from src.agents.agent import Agent


logger = get_logger(__name__)


@dataclass(frozen=True)
class GroupChatState:
    """
    Estado visible para el selector de turno.

    Attributes:
        current_round: Turnos completados (empieza en 0).
        participants: Agentes en orden de registro.
        history: Historial completo hasta este punto.
    """
    current_round: int
    participants: tuple["Agent", ...]
    history: tuple[Message, ...]

    @property
    def last_message(self) -> Message | None:
        return self.history[-1] if self.history else None

    @property
    def participant_names(self) -> list[str]:
        return [agent.name for agent in self.participants]


SpeakerSelector = Callable[
    [GroupChatState],
    Union["Agent", str, Awaitable[Union["Agent", str]]],
]


def round_robin(state: GroupChatState) -> "Agent":
    """Turno rotatorio: participants[current_round % len(participants)]."""
    return state.participants[state.current_round % len(state.participants)]


SELECTOR_SYSTEM_PROMPT = """You are in a role play game. Carefully read the conversation history and carry on the conversation.
The available roles are:
{roles}

Each message will start with 'From name:', e.g:
From {example}:
//your message//."""

SELECTOR_INSTRUCTION = (
    "Based on the conversation, select the next role from [{names}] to play. "
    "Only return the role."
)


class ModelSpeakerSelector:
    """
    Selector que pregunta a un modelo de lenguaje quién habla a continuación.

    Si la respuesta no nombra a ningún participante se usa round_robin.

    Example:
        ```python
        manager = GroupChatManager(
            chat,
            speaker_selector=ModelSpeakerSelector("ollama/llama3.1:8b"),
        )
        ```
    """

    def __init__(
        self,
        model: BaseModelAdapter | str,
        temperature: float = 0.0,
        max_tokens: int = 32,
    ) -> None:
        self._model = model if isinstance(model, BaseModelAdapter) else None
        self._model_id = model if isinstance(model, str) else model.model_id
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def _get_model(self) -> BaseModelAdapter:
        if self._model is None:
            self._model = await get_model(self._model_id)
        return self._model

    def build_messages(self, state: GroupChatState) -> list[dict[str, str]]:
        """Construye el prompt de selección a partir del estado."""
        roles = "\n".join(
            f"{agent.name}: {agent.description}" if agent.description else agent.name
            for agent in state.participants
        )
        messages = [{
            "role": MessageRole.SYSTEM.value,
            "content": SELECTOR_SYSTEM_PROMPT.format(
                roles=roles,
                example=state.participants[0].name,
            ),
        }]
        for message in state.history:
            text = message.content or ""
            if message.function_call is not None:
                text = f"{text}\n[function call] {message.function_call.name}".strip()
            messages.append({
                "role": MessageRole.USER.value,
                "content": f"From {message.sender}:\n{text}",
            })
        messages.append({
            "role": MessageRole.USER.value,
            "content": SELECTOR_INSTRUCTION.format(names=", ".join(state.participant_names)),
        })
        return messages

    @staticmethod
    def parse_selection(text: str, state: GroupChatState) -> "Agent | None":
        """
        Extrae el participante nombrado en la respuesta del modelo.

        Primero busca coincidencia exacta; si no, el nombre que aparece
        antes en el texto (sin distinguir mayúsculas).
        """
        cleaned = text.strip().strip(".:'\"").strip()
        for agent in state.participants:
            if cleaned == agent.name:
                return agent

        lowered = text.lower()
        best: tuple[int, "Agent"] | None = None
        for agent in state.participants:
            index = lowered.find(agent.name.lower())
            if index >= 0 and (best is None or index < best[0]):
                best = (index, agent)
        return best[1] if best else None

    async def __call__(self, state: GroupChatState) -> "Agent":
        model = await self._get_model()
        log_model_call(logger, model.model_id, "select_speaker", round=state.current_round)

        response = await model.generate(
            self.build_messages(state),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        selected = self.parse_selection(response.content, state)
        if selected is None:
            fallback = round_robin(state)
            logger.warning(
                "speaker_selection_fallback",
                answer=response.content[:80],
                fallback=fallback.name,
            )
            return fallback
        return selected


__all__ = [
    "GroupChatState",
    "SpeakerSelector",
    "round_robin",
    "ModelSpeakerSelector",
]
