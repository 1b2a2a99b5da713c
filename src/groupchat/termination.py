"""
Detección de fin de conversación.

Una conversación termina por una de dos razones, nunca por ambas:
- EXPLICIT_TERMINATE: el último mensaje es la señal de fin.
- ROUND_LIMIT_REACHED: se alcanzó max_round.

Si las dos se cumplen en el mismo turno gana la señal explícita.
"""

from __future__ import annotations

from src.core.types import TERMINATE, TERMINATE_FLAG, Message, TerminationReason


def check_termination(
    last_message: Message | None,
    round_count: int,
    max_round: int,
) -> TerminationReason | None:
    """
    Decide si la conversación debe terminar tras un turno.

    Args:
        last_message: Último mensaje añadido al historial.
        round_count: Turnos completados.
        max_round: Límite de turnos.

    Returns:
        La razón de terminación o None si la conversación sigue.
    """
    if last_message is not None and last_message.is_terminate():
        return TerminationReason.EXPLICIT_TERMINATE
    if round_count >= max_round:
        return TerminationReason.ROUND_LIMIT_REACHED
    return None


def terminate_message(sender: str, content: str = TERMINATE) -> Message:
    """Crea un mensaje que termina la conversación."""
    return Message(sender=sender, content=content, metadata={TERMINATE_FLAG: True})


__all__ = [
    "check_termination",
    "terminate_message",
]
