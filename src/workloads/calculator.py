"""
Calculadora aritmética segura para la clase de matemáticas.

Evalúa expresiones sin exec/eval recorriendo el AST. La usa el profesor
con guion para generar preguntas y comprobar las respuestas del alumno.
"""

from __future__ import annotations

import ast
import math
import operator
import re
from typing import Any


# Fragmento aritmético dentro de un texto ("What is 12 * (3 + 4)?")
_EXPRESSION_RE = re.compile(r"[\d.\s()+\-*/%^×÷]*\d[\d.\s()+\-*/%^×÷]*")


class SafeCalculator:
    """
    Calculadora que solo admite aritmética y unas pocas funciones.

    Example:
        ```python
        calc = SafeCalculator()
        calc.evaluate("2 * (3 + 4)")          # 14
        calc.extract_expression("What is 7 × 6?")  # "7 * 6"
        calc.check_answer("7 * 6", "42")      # True
        ```
    """

    OPERATORS = {
        ast.Add: operator.add,
        ast.Sub: operator.sub,
        ast.Mult: operator.mul,
        ast.Div: operator.truediv,
        ast.FloorDiv: operator.floordiv,
        ast.Mod: operator.mod,
        ast.Pow: operator.pow,
        ast.USub: operator.neg,
        ast.UAdd: operator.pos,
    }

    FUNCTIONS = {
        "abs": abs,
        "round": round,
        "min": min,
        "max": max,
        "sqrt": math.sqrt,
    }

    # Exponentes mayores se rechazan para no colgar el proceso
    MAX_EXPONENT = 100

    def evaluate(self, expression: str) -> float | int:
        """
        Evalúa una expresión aritmética.

        Raises:
            ValueError: Si la expresión es inválida o usa algo no permitido.
        """
        normalized = self.normalize(expression)
        if not normalized:
            raise ValueError("Expresión vacía")

        try:
            tree = ast.parse(normalized, mode="eval")
            return self._eval_node(tree.body)
        except (SyntaxError, TypeError) as e:
            raise ValueError(f"Expresión inválida: {expression}") from e
        except ZeroDivisionError as e:
            raise ValueError(f"División por cero en: {expression}") from e

    @staticmethod
    def normalize(expression: str) -> str:
        """Unifica símbolos (×, ÷, ^) y elimina espacios sobrantes."""
        text = expression.strip().rstrip("=?").strip()
        text = text.replace("×", "*").replace("÷", "/").replace("^", "**")
        return re.sub(r"\s+", " ", text)

    def _eval_node(self, node: ast.AST) -> float | int:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
                return node.value
            raise ValueError(f"Constante no soportada: {node.value!r}")

        if isinstance(node, ast.BinOp):
            left = self._eval_node(node.left)
            right = self._eval_node(node.right)
            op_func = self.OPERATORS.get(type(node.op))
            if op_func is None:
                raise ValueError(f"Operador no soportado: {type(node.op).__name__}")
            if isinstance(node.op, ast.Pow) and abs(right) > self.MAX_EXPONENT:
                raise ValueError(f"Exponente demasiado grande: {right}")
            return op_func(left, right)

        if isinstance(node, ast.UnaryOp):
            op_func = self.OPERATORS.get(type(node.op))
            if op_func is None:
                raise ValueError(f"Operador unario no soportado: {type(node.op).__name__}")
            return op_func(self._eval_node(node.operand))

        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in self.FUNCTIONS:
                raise ValueError("Función no permitida")
            args = [self._eval_node(arg) for arg in node.args]
            return self.FUNCTIONS[node.func.id](*args)

        raise ValueError(f"Tipo de nodo no soportado: {type(node).__name__}")

    def extract_expression(self, text: str) -> str | None:
        """
        Extrae la expresión aritmética más larga de un texto libre.

        Returns:
            La expresión normalizada o None si no hay ninguna.
        """
        candidates = [match.group(0).strip() for match in _EXPRESSION_RE.finditer(text)]
        candidates = [c for c in candidates if any(op in c for op in "+-*/%^×÷")]
        if not candidates:
            return None
        return self.normalize(max(candidates, key=len))

    @staticmethod
    def format_number(value: Any) -> str:
        """Formatea un resultado: los enteros sin decimales."""
        if isinstance(value, float):
            if value.is_integer():
                return str(int(value))
            return f"{value:.6g}"
        return str(value)

    def check_answer(
        self,
        expression: str,
        answer: str,
        tolerance: float = 1e-6,
    ) -> bool:
        """
        Comprueba si `answer` es el resultado de `expression`.

        Las respuestas no numéricas se consideran incorrectas.
        """
        try:
            expected = self.evaluate(expression)
        except ValueError:
            return False

        match = re.search(r"-?\d+(?:\.\d+)?", answer.replace(",", ""))
        if match is None:
            return False
        return math.isclose(float(match.group(0)), float(expected), abs_tol=tolerance)


__all__ = [
    "SafeCalculator",
]
