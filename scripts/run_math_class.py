"""
Script para ejecutar la clase de matemáticas.

Uso:
    python scripts/run_math_class.py                          # Agentes con guion (sin modelo)
    python scripts/run_math_class.py --wrong-first            # El alumno falla cada primera respuesta
    python scripts/run_math_class.py --real                   # Agentes con el modelo por defecto
    python scripts/run_math_class.py --real --model ollama/qwen2.5:14b --model-selector
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Permitir ejecutar el script sin instalar el paquete
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.exceptions import AulaError  # noqa: E402
from src.models.factory import get_model_manager  # noqa: E402
from src.workloads.math_class import (  # noqa: E402
    ANSWER_IS_CORRECT,
    MATH_QUESTION,
    build_model_math_class,
    build_scripted_math_class,
    count_marker,
    run_math_class,
)


async def run(args: argparse.Namespace) -> int:
    if args.real:
        print("🚀 MODO REAL: agentes respaldados por modelos LLM...")
        math_class = build_model_math_class(
            model_id=args.model,
            use_model_selector=args.model_selector,
        )
    else:
        print("⚡ MODO GUION: agentes deterministas...")
        math_class = build_scripted_math_class(wrong_first=args.wrong_first)

    try:
        result = await run_math_class(math_class, max_round=args.max_round)
    except AulaError as e:
        print(f"❌ La conversación falló: {e}")
        return 1
    finally:
        await get_model_manager().cleanup()

    for message in result.history:
        print(message.format())

    print(f"\nRazón de fin: {result.reason.value}")
    print(f"Turnos: {result.round_count}")
    print(f"Preguntas: {count_marker(result.history, MATH_QUESTION)}")
    print(f"Respuestas correctas: {count_marker(result.history, ANSWER_IS_CORRECT)}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Ejecutar la clase de matemáticas en group chat")
    parser.add_argument("--real", action="store_true", help="Usar modelos reales en lugar de guion")
    parser.add_argument("--model", help="Modelo de los agentes (ej: ollama/llama3.1:8b)")
    parser.add_argument("--model-selector", action="store_true", help="Elegir turno con un modelo")
    parser.add_argument("--wrong-first", action="store_true", help="El alumno con guion falla la primera vez")
    parser.add_argument("--max-round", type=int, default=None, help="Límite de turnos")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
