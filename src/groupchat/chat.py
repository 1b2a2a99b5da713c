"""
Estado compartido de una conversación en grupo.

Un GroupChat contiene los participantes (en orden de registro) y el
historial de mensajes. El historial solo crece: no se reordena ni se
borra. Los participantes quedan fijos cuando la conversación empieza.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from src.core.exceptions import DuplicateParticipantError, GroupChatError
from src.core.types import Message

if TYPE_CHECKING:
    from src.agents.agent import Agent


class GroupChat:
    """
    Participantes y historial de una conversación.

    Attributes:
        participants: Agentes en orden de registro.
        history: Snapshot inmutable del historial.
        seed_count: Mensajes semilla añadidos antes de empezar.

    Raises:
        DuplicateParticipantError: Si dos participantes comparten nombre.
    """

    def __init__(
        self,
        participants: Sequence["Agent"],
        messages: Sequence[Message] = (),
    ) -> None:
        self._participants: list["Agent"] = []
        self._history: list[Message] = list(messages)
        self._started = False
        self._seed_count = 0

        for agent in participants:
            self._add(agent)

        if not self._participants:
            raise GroupChatError("Un GroupChat necesita al menos un participante")

    def _add(self, agent: "Agent") -> None:
        if any(existing.name == agent.name for existing in self._participants):
            raise DuplicateParticipantError(agent.name)
        self._participants.append(agent)

    @property
    def participants(self) -> tuple["Agent", ...]:
        return tuple(self._participants)

    @property
    def participant_names(self) -> list[str]:
        return [agent.name for agent in self._participants]

    @property
    def history(self) -> tuple[Message, ...]:
        return tuple(self._history)

    @property
    def started(self) -> bool:
        return self._started

    @property
    def seed_count(self) -> int:
        """Mensajes presentes al empezar (antes del primer turno)."""
        return self._seed_count if self._started else len(self._history)

    def get_agent(self, name: str) -> "Agent | None":
        """Busca un participante por nombre."""
        for agent in self._participants:
            if agent.name == name:
                return agent
        return None

    def add_participant(self, agent: "Agent") -> None:
        """
        Añade un participante antes de empezar.

        Raises:
            GroupChatError: Si la conversación ya empezó.
            DuplicateParticipantError: Si el nombre ya existe.
        """
        if self._started:
            raise GroupChatError(
                "No se pueden añadir participantes a una conversación en curso",
                details={"agent": agent.name},
            )
        self._add(agent)

    def add_initialize_message(self, message: Message) -> None:
        """
        Añade un mensaje semilla antes de empezar.

        Raises:
            GroupChatError: Si la conversación ya empezó.
        """
        if self._started:
            raise GroupChatError(
                "Los mensajes semilla deben añadirse antes de empezar",
                details={"sender": message.sender},
            )
        self._history.append(message)

    def start(self) -> None:
        """Fija los participantes y marca el inicio de la conversación."""
        if not self._started:
            self._started = True
            self._seed_count = len(self._history)

    def append(self, message: Message) -> None:
        """Añade un mensaje al final del historial."""
        self._history.append(message)

    def __len__(self) -> int:
        return len(self._history)

    def __repr__(self) -> str:
        return (
            f"GroupChat(participants={self.participant_names}, "
            f"messages={len(self._history)}, started={self._started})"
        )


__all__ = [
    "GroupChat",
]
