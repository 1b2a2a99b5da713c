"""
Tests para las estrategias de respuesta.
"""

from __future__ import annotations

from typing import Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.agents.agent import Agent
from src.agents.strategies import CallableReply, ModelReply, ScriptedReply
from src.core.exceptions import ScriptExhaustedError
from src.core.types import FunctionCall, Message, ModelResponse
from src.models.base import BaseModelAdapter


def make_model(response: ModelResponse) -> MagicMock:
    model = MagicMock(spec=BaseModelAdapter)
    model.model_id = "ollama/llama3.1:8b"
    model.generate = AsyncMock(return_value=response)
    return model


class TestScriptedReply:
    """Tests para ScriptedReply."""

    @pytest.mark.asyncio
    async def test_replies_in_order(self) -> None:
        agent = Agent("Teacher", ScriptedReply(["uno", "dos"]))

        first = await agent.produce_reply([])
        second = await agent.produce_reply([])

        assert [first.content, second.content] == ["uno", "dos"]

    @pytest.mark.asyncio
    async def test_exhausted_without_fallback(self) -> None:
        agent = Agent("Teacher", ScriptedReply(["uno"]))
        await agent.produce_reply([])

        with pytest.raises(ScriptExhaustedError) as exc_info:
            await agent.produce_reply([])

        assert exc_info.value.details["agent"] == "Teacher"
        assert exc_info.value.details["replies_used"] == 1

    @pytest.mark.asyncio
    async def test_fallback(self) -> None:
        strategy = ScriptedReply([], fallback="sin novedad")
        agent = Agent("Teacher", strategy)

        reply = await agent.produce_reply([])

        assert reply.content == "sin novedad"
        assert strategy.remaining == 0

    @pytest.mark.asyncio
    async def test_callable_items_receive_history(self) -> None:
        agent = Agent("Teacher", ScriptedReply([lambda history: f"{len(history)} mensajes"]))

        reply = await agent.produce_reply([Message(sender="Admin", content="a")])

        assert reply.content == "1 mensajes"

    @pytest.mark.asyncio
    async def test_function_call_item(self) -> None:
        call = FunctionCall(name="answer_question", arguments='{"answer": "2"}')
        agent = Agent("Student", ScriptedReply([call]))

        reply = await agent.produce_reply([])

        assert reply.function_call == call


class TestCallableReply:
    """Tests para CallableReply."""

    @pytest.mark.asyncio
    async def test_async_function(self) -> None:
        async def reply(agent: Agent, history: Sequence[Message]) -> str:
            return agent.name.lower()

        result = await Agent("Teacher", CallableReply(reply)).produce_reply([])

        assert result.content == "teacher"


class TestModelReply:
    """Tests para ModelReply."""

    def test_model_id_from_string(self) -> None:
        assert ModelReply("ollama/llama3.1:8b").model_id == "ollama/llama3.1:8b"

    def test_render_history(self) -> None:
        agent = Agent("Teacher", ModelReply("ollama/llama3.1:8b"), system_context="Eres profesor")
        history = [
            Message(sender="Admin", content="Hola"),
            Message(sender="Teacher", content="Pregunta"),
            Message(
                sender="Student",
                content="La respuesta es 4",
                function_call=FunctionCall(name="answer_question", arguments='{"answer": "4"}'),
            ),
        ]

        messages = ModelReply.render_history(agent, history)

        assert messages[0] == {"role": "system", "content": "Eres profesor"}
        assert messages[1] == {"role": "user", "content": "From Admin:\nHola"}
        assert messages[2] == {"role": "assistant", "content": "Pregunta"}
        assert messages[3]["role"] == "user"
        assert "[function call] answer_question" in messages[3]["content"]

    def test_render_without_system_context(self) -> None:
        agent = Agent("Teacher", ModelReply("ollama/llama3.1:8b"))

        assert ModelReply.render_history(agent, []) == []

    @pytest.mark.asyncio
    async def test_text_reply(self) -> None:
        model = make_model(ModelResponse(content="Question #1: 2 + 2?", model="ollama/llama3.1:8b"))
        agent = Agent("Teacher", ModelReply(model, temperature=0.2, max_tokens=64))

        reply = await agent.produce_reply([Message(sender="Admin", content="Empieza")])

        assert reply.content == "Question #1: 2 + 2?"
        assert reply.function_call is None
        kwargs = model.generate.call_args.kwargs
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 64
        assert kwargs["tools"] is None

    @pytest.mark.asyncio
    async def test_tool_call_becomes_function_call(self) -> None:
        call = FunctionCall(name="answer_question", arguments='{"answer": "4"}')
        model = make_model(ModelResponse(content="", model="ollama/llama3.1:8b", function_call=call))

        def answer_question(answer: str) -> str:
            """Answer the question."""
            return answer

        agent = Agent("Student", ModelReply(model), functions=[answer_question])

        reply = await agent.produce_reply([])

        assert reply.function_call == call
        assert reply.content is None
        tools = model.generate.call_args.kwargs["tools"]
        assert tools[0]["function"]["name"] == "answer_question"
