"""
Módulo de utilidades para Aula GroupChat.

Incluye:
- Sistema de logging estructurado
- Recolección de métricas
"""

from src.utils.logging import (
    LogContext,
    configure_logging,
    get_logger,
    log_function_call,
    log_model_call,
    log_turn,
)
from src.utils.metrics import (
    MetricsCollector,
    MetricStats,
    get_metrics,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    "log_model_call",
    "log_turn",
    "log_function_call",
    # Metrics
    "MetricsCollector",
    "MetricStats",
    "get_metrics",
]
