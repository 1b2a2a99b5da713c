"""
Sistema de métricas para Aula GroupChat.

Recolección en memoria de contadores e histogramas para monitorear
las conversaciones:

- Turnos completados por agente
- Invocaciones de funciones (éxitos y fallos)
- Latencia de las respuestas de los agentes
- Razones de terminación
"""

from __future__ import annotations

import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from statistics import mean, median
from threading import Lock
from typing import Any, Generator


@dataclass
class MetricStats:
    """Estadísticas agregadas de una métrica."""
    count: int
    sum: float
    min: float
    max: float
    mean: float
    median: float
    p95: float


class MetricsCollector:
    """
    Recolector de métricas en memoria.

    Example:
        ```python
        metrics = MetricsCollector()
        metrics.increment("groupchat_turns", labels={"agent": "Teacher"})

        with metrics.timer("agent_reply_ms", labels={"agent": "Teacher"}):
            await agent.produce_reply(history)

        stats = metrics.get_stats("agent_reply_ms", labels={"agent": "Teacher"})
        ```
    """

    def __init__(self, max_samples: int = 10000) -> None:
        """
        Inicializa el recolector de métricas.

        Args:
            max_samples: Máximo de muestras a mantener por histograma.
        """
        self.max_samples = max_samples
        self._counters: dict[str, float] = defaultdict(float)
        self._histograms: dict[str, list[float]] = defaultdict(list)
        self._lock = Lock()

    def increment(
        self,
        name: str,
        value: float = 1.0,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Incrementa un contador."""
        key = self._make_key(name, labels)
        with self._lock:
            self._counters[key] += value

    def observe(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Registra una observación en un histograma."""
        key = self._make_key(name, labels)
        with self._lock:
            samples = self._histograms[key]
            samples.append(value)
            if len(samples) > self.max_samples:
                del samples[: len(samples) - self.max_samples]

    @contextmanager
    def timer(
        self,
        name: str,
        labels: dict[str, str] | None = None,
    ) -> Generator[None, None, None]:
        """
        Context manager para medir tiempo de ejecución en milisegundos.

        El tiempo se registra aunque el bloque lance una excepción.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(name, (time.perf_counter() - start) * 1000, labels)

    def get_counter(
        self,
        name: str,
        labels: dict[str, str] | None = None,
    ) -> float:
        """Obtiene el valor de un contador."""
        return self._counters.get(self._make_key(name, labels), 0.0)

    def get_stats(
        self,
        name: str,
        labels: dict[str, str] | None = None,
    ) -> MetricStats | None:
        """
        Obtiene estadísticas agregadas de un histograma.

        Returns:
            MetricStats o None si no hay datos.
        """
        key = self._make_key(name, labels)
        with self._lock:
            values = list(self._histograms.get(key, []))

        if not values:
            return None

        sorted_values = sorted(values)
        return MetricStats(
            count=len(values),
            sum=sum(values),
            min=sorted_values[0],
            max=sorted_values[-1],
            mean=mean(values),
            median=median(values),
            p95=self._percentile(sorted_values, 95),
        )

    def get_all_metrics(self) -> dict[str, Any]:
        """Obtiene contadores y resúmenes de histogramas como diccionario."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "histograms": {
                    key: {
                        "count": len(values),
                        "mean": mean(values),
                        "p95": self._percentile(sorted(values), 95),
                    }
                    for key, values in self._histograms.items()
                    if values
                },
            }

    def reset(self) -> None:
        """Reinicia todas las métricas."""
        with self._lock:
            self._counters.clear()
            self._histograms.clear()

    def _make_key(
        self,
        name: str,
        labels: dict[str, str] | None,
    ) -> str:
        """Genera una clave única para la métrica."""
        if not labels:
            return name

        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    @staticmethod
    def _percentile(sorted_values: list[float], p: float) -> float:
        """Calcula el percentil p de una lista ordenada (interpolación lineal)."""
        if not sorted_values:
            return 0.0

        n = len(sorted_values)
        k = (n - 1) * (p / 100)
        f = int(k)
        c = f + 1

        if c >= n:
            return sorted_values[-1]

        return sorted_values[f] + (k - f) * (sorted_values[c] - sorted_values[f])


# Singleton global de métricas
_metrics_collector: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Obtiene el recolector de métricas global."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


__all__ = [
    "MetricsCollector",
    "MetricStats",
    "get_metrics",
]
