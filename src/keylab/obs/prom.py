"""Prometheus instrumentation for keylab.

Labels stay bounded: ``algorithm`` is always a canonical AlgorithmId value
or ``unknown``, ``result`` is ``ok`` or an error kind.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

from ..crypto.alg_registry import AlgorithmId
from ..crypto.errors import KeylabError

REGISTRY = CollectorRegistry()

OPERATIONS = Counter(
    "keylab_operations_total",
    "Crypto operations by algorithm and outcome.",
    ["operation", "algorithm", "result"],
    registry=REGISTRY,
)
LATENCY_MS = Histogram(
    "keylab_operation_latency_ms",
    "Crypto operation latency (ms).",
    ["operation"],
    buckets=(0.5, 1, 2, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
    registry=REGISTRY,
)

_KNOWN = {a.value.lower(): a.value for a in AlgorithmId}


def algorithm_label(name: str | None) -> str:
    return _KNOWN.get(str(name or "").strip().lower(), "unknown")


@contextmanager
def observe_operation(operation: str, algorithm: str | None) -> Iterator[None]:
    start = time.perf_counter()
    result = "ok"
    try:
        yield
    except KeylabError as e:
        result = e.kind
        raise
    except Exception:
        result = "InternalError"
        raise
    finally:
        OPERATIONS.labels(operation=operation, algorithm=algorithm_label(algorithm), result=result).inc()
        LATENCY_MS.labels(operation=operation).observe((time.perf_counter() - start) * 1000.0)


def prometheus_latest() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
