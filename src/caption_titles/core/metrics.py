"""Conversion metrics: per-stage timings and one JSONL row per conversion."""

from __future__ import annotations

import json
import logging
import os
import socket
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from .config import settings

logger = logging.getLogger(__name__)

METRICS_FILENAME = "conversion_metrics.jsonl"


def metrics_enabled() -> bool:
    """``CT_METRICS`` decides when set; otherwise rows are written in dev, never under pytest."""
    if settings.metrics_enabled is not None:
        return settings.metrics_enabled
    if "PYTEST_CURRENT_TEST" in os.environ:
        return False
    return settings.is_dev


def metrics_path() -> Path:
    if settings.metrics_path is not None:
        return settings.metrics_path.expanduser().resolve()
    return (settings.project_root / "logs" / METRICS_FILENAME).resolve()


def log_pipeline_metrics(event: dict[str, Any]) -> None:
    """Append one conversion row. A failed write is logged and never fails the conversion."""
    if not metrics_enabled():
        return

    row = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "host": socket.gethostname(),
        "app_env": settings.app_env.value,
        **event,
    }

    path = metrics_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(row, ensure_ascii=False, default=str))
            fh.write("\n")
    except OSError as exc:
        logger.warning("Could not write conversion metrics to %s: %s", path, exc)


@contextmanager
def measure_time(timings: dict[str, float], key: str) -> Iterator[None]:
    """Store the wall time of the block under ``timings[key]``, even when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        timings[key] = time.perf_counter() - start
