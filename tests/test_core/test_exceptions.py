"""
Tests para la jerarquía de excepciones.
"""

from __future__ import annotations

from src.core.exceptions import (
    AgentError,
    AgentReplyError,
    AulaError,
    DuplicateParticipantError,
    FunctionNotFoundError,
    GroupChatError,
    InvocationError,
    ModelGenerationError,
    SpeakerSelectionError,
)


class TestAulaError:
    """Tests para AulaError."""

    def test_str_without_details(self) -> None:
        assert str(AulaError("fallo")) == "fallo"

    def test_str_with_details(self) -> None:
        error = AulaError("fallo", details={"x": 1})

        assert "fallo" in str(error)
        assert "'x': 1" in str(error)

    def test_to_dict(self) -> None:
        data = ModelGenerationError("ollama/llama3.1:8b", "boom").to_dict()

        assert data["error_type"] == "ModelGenerationError"
        assert data["recoverable"] is True
        assert data["details"]["cause"] == "boom"


class TestGroupChatErrors:
    """Tests para errores del group chat."""

    def test_duplicate_participant(self) -> None:
        error = DuplicateParticipantError("Teacher")

        assert isinstance(error, GroupChatError)
        assert error.name == "Teacher"
        assert error.recoverable is False
        assert "Teacher" in error.message

    def test_speaker_selection(self) -> None:
        error = SpeakerSelectionError("Ghost", ["Admin", "Teacher"])

        assert error.details["participants"] == ["Admin", "Teacher"]


class TestAgentReplyError:
    """Tests para AgentReplyError."""

    def test_keeps_cause(self) -> None:
        cause = RuntimeError("modelo caído")
        error = AgentReplyError("Student", 3, cause)

        assert isinstance(error, AgentError)
        assert error.agent_name == "Student"
        assert error.round_index == 3
        assert error.cause is cause
        assert error.recoverable is False
        assert "RuntimeError" in error.details["cause"]


class TestInvocationError:
    """Tests para InvocationError."""

    def test_message_pattern(self) -> None:
        error = InvocationError("answer", "ValueError: empty answer")

        assert error.message == "Error invoking function 'answer': ValueError: empty answer"
        assert error.function_name == "answer"
        assert error.recoverable is True

    def test_arguments_truncated(self) -> None:
        error = InvocationError("answer", "bad", arguments="x" * 500)

        assert len(error.details["arguments"]) == 200

    def test_function_not_found(self) -> None:
        error = FunctionNotFoundError("missing", ["a", "b"])

        assert isinstance(error, InvocationError)
        assert "not registered" in error.reason
        assert "a, b" in error.reason
