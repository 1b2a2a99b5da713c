"""
Clase de matemáticas: admin, profesor y alumno en un group chat.

El profesor crea preguntas y corrige, el alumno responde y el admin lleva
la cuenta de respuestas correctas. Tras 5 respuestas correctas el admin
emite la señal de fin.

Cada función devuelve un texto con un marcador ([MATH_QUESTION],
[MATH_ANSWER], ...) que permite seguir el progreso en el transcript.
Los marcadores solo sirven para elegir turno y para inspeccionar el
resultado; la conversación termina únicamente por la señal de fin.

Hay dos formas de construir los agentes:
- build_scripted_math_class: agentes deterministas (sin modelo).
- build_model_math_class: agentes respaldados por un modelo de lenguaje
  con las personas de config/agents.yaml.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Sequence

from config.settings import get_settings
from src.agents.agent import Agent
from src.agents.strategies import CallableReply, ModelReply
from src.core.types import TERMINATE, ChatResult, FunctionCall, Message
from src.groupchat.chat import GroupChat
from src.groupchat.driver import initiate_chat
from src.groupchat.manager import GroupChatManager
from src.groupchat.selection import GroupChatState, ModelSpeakerSelector, SpeakerSelector
from src.utils.logging import get_logger
from src.workloads.calculator import SafeCalculator


logger = get_logger(__name__)


# =============================================================================
# Marcadores y funciones
# =============================================================================

MATH_QUESTION = "[MATH_QUESTION]"
MATH_ANSWER = "[MATH_ANSWER]"
ANSWER_IS_CORRECT = "[ANSWER_IS_CORRECT]"
UPDATE_PROGRESS = "[UPDATE_PROGRESS]"

# Respuestas correctas necesarias para terminar la clase
REQUIRED_CORRECT_ANSWERS = 5

DEFAULT_QUESTIONS = (
    "2 + 3",
    "7 * 6",
    "15 - 9",
    "81 / 9",
    "(4 + 5) * 2",
)


def create_math_question(question: str, question_index: int) -> str:
    """Create a math question for the student."""
    return f"// ignore this line {MATH_QUESTION}\nQuestion #{question_index}:\n{question}"


def answer_question(answer: str) -> str:
    """Answer the teacher's math question."""
    return f"// ignore this line {MATH_ANSWER}\nThe answer is {answer}, teacher please check answer"


def answer_is_correct(message: str) -> str:
    """Tell the student that the answer is correct."""
    return f"// ignore this line {ANSWER_IS_CORRECT}\n{message}"


def update_progress(correct_answer_count: int) -> str:
    """Update the number of correctly answered questions; ends the class at 5."""
    if correct_answer_count >= REQUIRED_CORRECT_ANSWERS:
        return TERMINATE
    return (
        f"// ignore this line {UPDATE_PROGRESS}\n"
        f"the number of resolved question is {correct_answer_count}\n"
        f"teacher, please create the next math question"
    )


# =============================================================================
# Roles
# =============================================================================

@dataclass
class MathClass:
    """Los tres agentes de la clase, en el orden en que participan."""
    admin: Agent
    teacher: Agent
    student: Agent
    speaker_selector: SpeakerSelector | None = None

    @property
    def participants(self) -> list[Agent]:
        return [self.admin, self.teacher, self.student]

    def create_chat(self) -> GroupChat:
        return GroupChat(self.participants)


def count_marker(history: Sequence[Message], marker: str, sender: str | None = None) -> int:
    """Cuenta los mensajes que contienen `marker` (opcionalmente de un remitente)."""
    return sum(
        1
        for message in history
        if message.content
        and marker in message.content
        and (sender is None or message.sender == sender)
    )


def _last_with_marker(history: Sequence[Message], marker: str) -> Message | None:
    for message in reversed(history):
        if message.content and marker in message.content:
            return message
    return None


def _question_text(message: Message) -> str:
    """Texto de la pregunta (última línea del mensaje [MATH_QUESTION])."""
    return (message.content or "").strip().splitlines()[-1]


def make_math_class_selector(
    admin: str = "Admin",
    teacher: str = "Teacher",
    student: str = "Student",
) -> SpeakerSelector:
    """
    Crea un selector de turno que sigue los marcadores de la clase.

    - Primer turno: admin (informa el progreso inicial).
    - [MATH_QUESTION] -> alumno; [MATH_ANSWER] -> profesor.
    - [ANSWER_IS_CORRECT] -> admin; [UPDATE_PROGRESS] -> profesor.
    - Sin marcador: el profesor pide corrección al alumno y viceversa.
    """

    def select(state: GroupChatState) -> str:
        if state.current_round == 0:
            return admin

        last = state.last_message
        content = (last.content or "") if last else ""
        if MATH_QUESTION in content:
            return student
        if MATH_ANSWER in content:
            return teacher
        if ANSWER_IS_CORRECT in content:
            return admin
        if UPDATE_PROGRESS in content:
            return teacher
        if last is not None and last.sender == teacher:
            return student
        return teacher

    return select


math_class_selector = make_math_class_selector()


# =============================================================================
# Agentes con guion
# =============================================================================

def build_scripted_math_class(
    questions: Sequence[str] = DEFAULT_QUESTIONS,
    wrong_first: bool = False,
    calculator: SafeCalculator | None = None,
) -> MathClass:
    """
    Construye agentes deterministas que juegan la clase completa.

    Args:
        questions: Expresiones que el profesor pregunta (se repiten si se agotan).
        wrong_first: Si el alumno falla la primera vez cada pregunta.
        calculator: Calculadora usada para responder y corregir.

    Returns:
        MathClass con admin, profesor y alumno y el selector por marcadores.
    """
    if not questions:
        raise ValueError("Se necesita al menos una pregunta")

    calc = calculator or SafeCalculator()
    attempts: dict[int, int] = {}

    def teacher_reply(agent: Agent, history: Sequence[Message]) -> FunctionCall | str:
        last = history[-1] if history else None
        if last is not None and last.content and MATH_ANSWER in last.content:
            question = _last_with_marker(history, MATH_QUESTION)
            expression = calc.extract_expression(_question_text(question)) if question else None
            answer = last.content.split("The answer is", 1)[-1]
            if expression and calc.check_answer(expression, answer):
                result = calc.format_number(calc.evaluate(expression))
                return FunctionCall(
                    name="answer_is_correct",
                    arguments=json.dumps({"message": f"Correct! {expression} = {result}"}),
                )
            return "Your answer is wrong, please fix it."

        index = count_marker(history, MATH_QUESTION, sender=agent.name) + 1
        expression = questions[(index - 1) % len(questions)]
        return FunctionCall(
            name="create_math_question",
            arguments=json.dumps({"question": f"What is {expression}?", "question_index": index}),
        )

    def student_reply(agent: Agent, history: Sequence[Message]) -> FunctionCall | str:
        question = _last_with_marker(history, MATH_QUESTION)
        if question is None:
            return "I'm waiting for a question."

        expression = calc.extract_expression(_question_text(question))
        if expression is None:
            return "I don't understand the question."

        try:
            result = calc.evaluate(expression)
        except ValueError:
            return "I don't understand the question."
        key = count_marker(history, MATH_QUESTION)
        attempts[key] = attempts.get(key, 0) + 1
        if wrong_first and attempts[key] == 1:
            result = result + 1

        return FunctionCall(
            name="answer_question",
            arguments=json.dumps({"answer": calc.format_number(result)}),
        )

    def admin_reply(agent: Agent, history: Sequence[Message]) -> FunctionCall:
        correct = count_marker(history, ANSWER_IS_CORRECT)
        return FunctionCall(
            name="update_progress",
            arguments=json.dumps({"correct_answer_count": correct}),
        )

    admin = Agent("Admin", CallableReply(admin_reply), functions=[update_progress])
    teacher = Agent(
        "Teacher",
        CallableReply(teacher_reply),
        functions=[create_math_question, answer_is_correct],
    )
    student = Agent("Student", CallableReply(student_reply), functions=[answer_question])

    return MathClass(
        admin=admin,
        teacher=teacher,
        student=student,
        speaker_selector=math_class_selector,
    )


# =============================================================================
# Agentes con modelo
# =============================================================================

def build_model_math_class(
    model_id: str | None = None,
    selector_model_id: str | None = None,
    use_model_selector: bool = False,
) -> MathClass:
    """
    Construye agentes respaldados por modelos, con las personas del YAML.

    Args:
        model_id: Modelo para los tres agentes (por defecto el del perfil
            o `model_defaults.agent_model`).
        selector_model_id: Modelo del selector de turno.
        use_model_selector: Si el turno lo elige un modelo (como el admin
            original) en lugar de los marcadores.
    """
    settings = get_settings()
    defaults = settings.model_defaults

    def build(name: str, functions: list) -> Agent:
        profile = settings.get_agent_profile(name)
        agent_model = model_id or (profile.model if profile and profile.model else defaults.agent_model)
        temperature = (
            profile.temperature
            if profile and profile.temperature is not None
            else defaults.agent_temperature
        )
        return Agent(
            name,
            ModelReply(agent_model, temperature=temperature, max_tokens=defaults.agent_max_tokens),
            system_context=profile.system_context if profile else "",
            functions=functions,
            description=profile.description if profile else "",
        )

    selector: SpeakerSelector = math_class_selector
    if use_model_selector:
        selector = ModelSpeakerSelector(
            selector_model_id or defaults.selector_model,
            temperature=defaults.selector_temperature,
            max_tokens=defaults.selector_max_tokens,
        )

    return MathClass(
        admin=build("Admin", [update_progress]),
        teacher=build("Teacher", [create_math_question, answer_is_correct]),
        student=build("Student", [answer_question]),
        speaker_selector=selector,
    )


# =============================================================================
# Ejecución
# =============================================================================

def seed_math_class(chat: GroupChat, math_class: MathClass) -> None:
    """Añade las presentaciones y la instrucción inicial del admin."""
    math_class.admin.add_initialize_message("Welcome to the group chat! I'm admin", chat)
    math_class.teacher.add_initialize_message("Hey I'm Teacher", chat)
    math_class.student.add_initialize_message("Hey I'm Student", chat)
    math_class.admin.add_initialize_message(
        "Teacher, please create pre-school math question for student and check answer.\n"
        "Student, for each question, please answer it and ask teacher to check if the answer is correct.\n"
        "I'll update the progress after each question is answered.\n"
        f"The conversation will end after {REQUIRED_CORRECT_ANSWERS} correct answers.\n",
        chat,
    )


async def run_math_class(
    math_class: MathClass,
    max_round: int | None = None,
) -> ChatResult:
    """
    Ejecuta la clase completa y devuelve el resultado.

    Args:
        math_class: Agentes (scripted o con modelo).
        max_round: Límite de turnos (por defecto el de configuración).
    """
    chat = math_class.create_chat()
    seed_math_class(chat, math_class)

    manager = GroupChatManager(
        chat,
        max_round=max_round,
        speaker_selector=math_class.speaker_selector,
    )
    await initiate_chat(manager)

    result = manager.result()
    logger.info(
        "math_class_finished",
        reason=result.reason.value,
        rounds=result.round_count,
        questions=count_marker(result.history, MATH_QUESTION),
        correct=count_marker(result.history, ANSWER_IS_CORRECT),
    )
    return result


__all__ = [
    "MATH_QUESTION",
    "MATH_ANSWER",
    "ANSWER_IS_CORRECT",
    "UPDATE_PROGRESS",
    "REQUIRED_CORRECT_ANSWERS",
    "DEFAULT_QUESTIONS",
    "create_math_question",
    "answer_question",
    "answer_is_correct",
    "update_progress",
    "MathClass",
    "count_marker",
    "make_math_class_selector",
    "math_class_selector",
    "build_scripted_math_class",
    "build_model_math_class",
    "seed_math_class",
    "run_math_class",
]
