"""
Cargas de trabajo de ejemplo sobre el group chat.

- math_class: admin, profesor y alumno resolviendo 5 preguntas
- calculator: calculadora aritmética segura usada por los agentes con guion
"""

from src.workloads.calculator import SafeCalculator
from src.workloads.math_class import (
    ANSWER_IS_CORRECT,
    MATH_ANSWER,
    MATH_QUESTION,
    UPDATE_PROGRESS,
    MathClass,
    build_model_math_class,
    build_scripted_math_class,
    count_marker,
    math_class_selector,
    run_math_class,
    seed_math_class,
)

__all__ = [
    "SafeCalculator",
    "MATH_QUESTION",
    "MATH_ANSWER",
    "ANSWER_IS_CORRECT",
    "UPDATE_PROGRESS",
    "MathClass",
    "build_scripted_math_class",
    "build_model_math_class",
    "count_marker",
    "math_class_selector",
    "run_math_class",
    "seed_math_class",
]
