"""
Tests para GroupChat.
"""

from __future__ import annotations

from typing import Callable

import pytest

from src.agents.agent import Agent
from src.core.exceptions import DuplicateParticipantError, GroupChatError
from src.core.types import Message
from src.groupchat.chat import GroupChat


class TestGroupChat:
    """Tests para GroupChat."""

    def test_participants_in_order(self, make_agent: Callable[..., Agent]) -> None:
        chat = GroupChat([make_agent("Admin"), make_agent("Teacher"), make_agent("Student")])

        assert chat.participant_names == ["Admin", "Teacher", "Student"]
        assert isinstance(chat.participants, tuple)

    def test_duplicate_names_fail_fast(self, make_agent: Callable[..., Agent]) -> None:
        with pytest.raises(DuplicateParticipantError) as exc_info:
            GroupChat([make_agent("Teacher"), make_agent("Student"), make_agent("Teacher")])

        assert exc_info.value.name == "Teacher"

    def test_requires_participants(self) -> None:
        with pytest.raises(GroupChatError):
            GroupChat([])

    def test_get_agent(self, make_agent: Callable[..., Agent]) -> None:
        teacher = make_agent("Teacher")
        chat = GroupChat([teacher])

        assert chat.get_agent("Teacher") is teacher
        assert chat.get_agent("Ghost") is None

    def test_add_participant_before_start(self, make_agent: Callable[..., Agent]) -> None:
        chat = GroupChat([make_agent("Admin")])
        chat.add_participant(make_agent("Teacher"))

        assert chat.participant_names == ["Admin", "Teacher"]

        with pytest.raises(DuplicateParticipantError):
            chat.add_participant(make_agent("Admin"))

    def test_participants_frozen_after_start(self, make_agent: Callable[..., Agent]) -> None:
        chat = GroupChat([make_agent("Admin")])
        chat.start()

        with pytest.raises(GroupChatError):
            chat.add_participant(make_agent("Teacher"))

    def test_seed_messages(self, make_agent: Callable[..., Agent]) -> None:
        chat = GroupChat([make_agent("Admin")])
        chat.add_initialize_message(Message(sender="Admin", content="uno"))
        chat.add_initialize_message(Message(sender="Admin", content="dos"))

        assert chat.seed_count == 2
        chat.start()
        chat.append(Message(sender="Admin", content="tres"))

        assert chat.seed_count == 2
        assert [m.content for m in chat.history] == ["uno", "dos", "tres"]

    def test_no_seed_after_start(self, make_agent: Callable[..., Agent]) -> None:
        chat = GroupChat([make_agent("Admin")])
        chat.start()

        with pytest.raises(GroupChatError):
            chat.add_initialize_message(Message(sender="Admin", content="tarde"))

    def test_history_is_snapshot(self, make_agent: Callable[..., Agent]) -> None:
        chat = GroupChat([make_agent("Admin")], messages=[Message(sender="Admin", content="a")])
        snapshot = chat.history

        chat.append(Message(sender="Admin", content="b"))

        assert len(snapshot) == 1
        assert len(chat) == 2
        assert chat.history == chat.history
