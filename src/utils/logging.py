"""
Sistema de logging estructurado para Aula GroupChat.

Este módulo configura logging usando structlog para proporcionar
logs estructurados en formato JSON o consola legible.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from config.settings import LogLevel, get_settings


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    format: str = "json",
    include_timestamps: bool = True,
    log_file: str | None = None,
) -> None:
    """
    Configura el sistema de logging.

    Args:
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format: Formato de salida ("json" o "console").
        include_timestamps: Si incluir timestamps en los logs.
        log_file: Ruta opcional a archivo de log.
    """
    if isinstance(level, str):
        level = LogLevel(level.upper())

    logging.basicConfig(
        level=getattr(logging, level.value),
        format="%(message)s",
        stream=sys.stdout,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamps:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.value)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, level.value))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Obtiene un logger configurado.

    Args:
        name: Nombre del logger (opcional).

    Returns:
        Logger estructurado listo para usar.
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager para añadir contexto temporal a los logs.

    Example:
        ```python
        with LogContext(conversation_id="abc123"):
            logger.info("turn_completed")
            # Todos los logs dentro llevan conversation_id
        ```
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def log_model_call(
    logger: structlog.BoundLogger,
    model_id: str,
    operation: str,
    **kwargs: Any,
) -> None:
    """
    Log estandarizado para llamadas a modelos.

    Args:
        logger: Logger a usar.
        model_id: Identificador del modelo.
        operation: Tipo de operación (generate, select_speaker, etc.).
        **kwargs: Datos adicionales.
    """
    logger.info(
        "model_call",
        model_id=model_id,
        operation=operation,
        **kwargs,
    )


def log_turn(
    logger: structlog.BoundLogger,
    round_index: int,
    speaker: str,
    content: str | None,
    preview_chars: int = 120,
    **kwargs: Any,
) -> None:
    """
    Log estandarizado para un turno completado.

    Args:
        logger: Logger a usar.
        round_index: Número de turno (1..max_round).
        speaker: Agente que habló.
        content: Contenido añadido al historial.
        preview_chars: Caracteres de contenido a incluir.
        **kwargs: Datos adicionales.
    """
    preview = None
    if content is not None:
        preview = content if len(content) <= preview_chars else content[:preview_chars] + "..."
    logger.info(
        "turn_completed",
        round=round_index,
        speaker=speaker,
        content_preview=preview,
        **kwargs,
    )


def log_function_call(
    logger: structlog.BoundLogger,
    agent: str,
    function_name: str,
    success: bool,
    **kwargs: Any,
) -> None:
    """
    Log estandarizado para invocaciones de funciones registradas.

    Args:
        logger: Logger a usar.
        agent: Agente propietario de la función.
        function_name: Nombre de la función.
        success: Si la invocación terminó sin error.
        **kwargs: Datos adicionales.
    """
    log_level = "info" if success else "warning"
    getattr(logger, log_level)(
        "function_call",
        agent=agent,
        function=function_name,
        success=success,
        **kwargs,
    )


def _init_logging() -> None:
    """Inicializa logging con configuración del sistema."""
    try:
        settings = get_settings()
        configure_logging(
            level=settings.logging.level,
            format=settings.logging.format,
            include_timestamps=settings.logging.include_timestamps,
            log_file=settings.logging.log_file,
        )
    except Exception:
        # Fallback a configuración básica si hay error
        configure_logging()


_init_logging()


__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
    "log_model_call",
    "log_turn",
    "log_function_call",
]
