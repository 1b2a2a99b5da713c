"""
Tests para los tipos centrales.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.core.types import (
    TERMINATE,
    TERMINATE_FLAG,
    ChatResult,
    FunctionCall,
    Message,
    TerminationReason,
)


class TestMessage:
    """Tests para Message."""

    def test_content_message(self) -> None:
        message = Message(sender="Teacher", content="Hola")

        assert message.sender == "Teacher"
        assert message.content == "Hola"
        assert message.function_call is None
        assert message.metadata == {}

    def test_function_call_only(self) -> None:
        call = FunctionCall(name="answer_question", arguments='{"answer": "2"}')
        message = Message(sender="Student", function_call=call)

        assert message.content is None
        assert message.function_call.name == "answer_question"

    def test_requires_content_or_function_call(self) -> None:
        with pytest.raises(ValidationError):
            Message(sender="Teacher")

    def test_empty_content_is_valid(self) -> None:
        """Texto vacío cuenta como contenido."""
        assert Message(sender="Teacher", content="").content == ""

    def test_sender_cannot_be_empty(self) -> None:
        with pytest.raises(ValidationError):
            Message(sender="", content="Hola")

    def test_from_alias(self) -> None:
        message = Message.model_validate({"from": "Admin", "content": "Hola"})

        assert message.sender == "Admin"
        assert message.model_dump(by_alias=True)["from"] == "Admin"

    def test_is_frozen(self) -> None:
        message = Message(sender="Teacher", content="Hola")

        with pytest.raises(ValidationError):
            message.content = "Adiós"

    def test_metadata_is_read_only(self) -> None:
        source = {"model": "ollama/llama3.1:8b"}
        message = Message(sender="Teacher", content="Hola", metadata=source)

        with pytest.raises(TypeError):
            message.metadata[TERMINATE_FLAG] = True

        source[TERMINATE_FLAG] = True
        assert message.metadata == {"model": "ollama/llama3.1:8b"}
        assert not message.is_terminate()

    def test_metadata_is_serialized_as_dict(self) -> None:
        message = Message(sender="Admin", content="Hola", metadata={TERMINATE_FLAG: True})

        assert message.model_dump()["metadata"] == {TERMINATE_FLAG: True}
        assert Message(sender="Admin", content="Hola").model_dump()["metadata"] == {}

    @pytest.mark.parametrize(
        "content,metadata,expected",
        [
            (TERMINATE, {}, True),
            (f"  {TERMINATE}\n", {}, True),
            ("Hola", {TERMINATE_FLAG: True}, True),
            (f"ok {TERMINATE}", {}, False),
            ("Hola", {TERMINATE_FLAG: "yes"}, False),
            ("Hola", {}, False),
        ],
    )
    def test_is_terminate(self, content: str, metadata: dict, expected: bool) -> None:
        message = Message(sender="Admin", content=content, metadata=metadata)

        assert message.is_terminate() is expected

    def test_function_call_message_is_not_terminate(self) -> None:
        message = Message(sender="Admin", function_call=FunctionCall(name="update_progress"))

        assert message.is_terminate() is False

    def test_format(self) -> None:
        message = Message(
            sender="Student",
            content="La respuesta es 4",
            function_call=FunctionCall(name="answer_question", arguments='{"answer": "4"}'),
        )

        text = message.format()

        assert text.startswith("Message from Student")
        assert "content: La respuesta es 4" in text
        assert "function name: answer_question" in text
        assert 'function arguments: {"answer": "4"}' in text


class TestFunctionCall:
    """Tests para FunctionCall."""

    def test_default_arguments(self) -> None:
        assert FunctionCall(name="update_progress").arguments == "{}"

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            FunctionCall(name="")


class TestChatResult:
    """Tests para ChatResult."""

    def test_turns_excludes_seeds(self) -> None:
        history = (
            Message(sender="Admin", content="seed"),
            Message(sender="Teacher", content="turno 1"),
            Message(sender="Student", content="turno 2"),
        )
        result = ChatResult(
            history=history,
            reason=TerminationReason.ROUND_LIMIT_REACHED,
            round_count=2,
            seed_count=1,
        )

        assert [m.content for m in result.turns] == ["turno 1", "turno 2"]
        assert len(result.history) == result.seed_count + result.round_count
