"""
Orquestación de conversaciones en grupo.

Ejemplo de uso básico:
    ```python
    from src.groupchat import GroupChat, GroupChatManager, initiate_chat

    chat = GroupChat([admin, teacher, student])
    manager = GroupChatManager(chat, max_round=50)
    history = await initiate_chat(manager, seed_messages)
    print(manager.termination_reason)
    ```
"""

from src.groupchat.chat import GroupChat
from src.groupchat.driver import initiate_chat, initiate_chat_sync
from src.groupchat.manager import INVOCATION_ERROR_FLAG, GroupChatManager
from src.groupchat.selection import (
    GroupChatState,
    ModelSpeakerSelector,
    SpeakerSelector,
    round_robin,
)
from src.groupchat.termination import check_termination, terminate_message

__all__ = [
    "GroupChat",
    "GroupChatManager",
    "GroupChatState",
    "SpeakerSelector",
    "round_robin",
    "ModelSpeakerSelector",
    "check_termination",
    "terminate_message",
    "initiate_chat",
    "initiate_chat_sync",
    "INVOCATION_ERROR_FLAG",
]
