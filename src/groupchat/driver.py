"""
Punto de entrada de una conversación.

`initiate_chat` añade los mensajes semilla en el orden dado, ejecuta el
manager hasta un estado terminal y devuelve el historial completo
(semillas incluidas).
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from src.core.types import Message
from src.groupchat.chat import GroupChat
from src.groupchat.manager import GroupChatManager
from src.utils.logging import get_logger


logger = get_logger(__name__)


async def initiate_chat(
    initializer: GroupChatManager | GroupChat,
    seed_messages: Sequence[Message] = (),
    max_round: int | None = None,
) -> list[Message]:
    """
    Siembra y ejecuta una conversación.

    Args:
        initializer: Manager a ejecutar, o un GroupChat (se crea un manager
            con la configuración por defecto).
        seed_messages: Mensajes iniciales, en orden.
        max_round: Límite de turnos (por defecto el del manager).

    Returns:
        Historial completo de la conversación.

    Raises:
        AgentReplyError: Si un agente falla; el historial parcial sigue
            en el GroupChat.
    """
    if isinstance(initializer, GroupChatManager):
        manager = initializer
    else:
        manager = GroupChatManager(initializer, max_round=max_round)

    for message in seed_messages:
        manager.chat.add_initialize_message(message)

    logger.debug("chat_seeded", seed_messages=len(seed_messages))
    result = await manager.run(max_round=max_round)
    return list(result.history)


def initiate_chat_sync(
    initializer: GroupChatManager | GroupChat,
    seed_messages: Sequence[Message] = (),
    max_round: int | None = None,
) -> list[Message]:
    """Versión bloqueante de `initiate_chat`."""
    return asyncio.run(initiate_chat(initializer, seed_messages, max_round=max_round))


__all__ = [
    "initiate_chat",
    "initiate_chat_sync",
]
