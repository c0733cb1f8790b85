"""CloudWatch custom metrics emitter with background batching.

Publishes per-call metrics (count, latency, errors) for every model call the
orchestration core makes and every tool the property chatbot executes.

Design
------
* Metrics are collected in a thread-safe in-memory buffer.
* A daemon thread flushes the buffer to CloudWatch every
  ``FLUSH_INTERVAL_SECONDS`` (default 60 s).
* When running locally (``METRICS_ENABLED != "true"``), metrics are
  logged at DEBUG level but **not** pushed to CloudWatch.

Usage
-----
>>> from src.services.metrics import metrics
>>> with metrics.timed("anthropic", "design_invoke"):
...     adapter_call()
>>> metrics.record_failure("tools", "schedule_viewing", error_type="StorageError")
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "RealtyAI"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch API limit per PutMetricData call


class MetricsClient:
    """Batched CloudWatch metrics publisher."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None  # lazy-init

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Public API ────────────────────────────────────────────────────

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        """Record a successful call."""
        now = datetime.now(UTC)
        self._count(now, service, "Status", "success")
        self._latency(now, service, operation, latency_ms)
        logger.debug("Metric: %s %s success latency=%.1fms", service, operation, latency_ms)

    def record_failure(
        self,
        service: str,
        operation: str,
        error_type: str,
        latency_ms: float = 0,
    ) -> None:
        """Record a failed call.  Latency is only emitted when known."""
        now = datetime.now(UTC)
        self._count(now, service, "Status", "failure")
        self._append(
            {
                "MetricName": "Orchestrator/ErrorCount",
                "Dimensions": [
                    {"Name": "Service", "Value": service},
                    {"Name": "ErrorType", "Value": error_type},
                ],
                "Timestamp": now,
                "Value": 1,
                "Unit": "Count",
            }
        )
        if latency_ms > 0:
            self._latency(now, service, operation, latency_ms)
        logger.debug(
            "Metric: %s %s failure error=%s latency=%.1fms",
            service, operation, error_type, latency_ms,
        )

    @contextmanager
    def timed(self, service: str, operation: str) -> Iterator[None]:
        """Time the enclosed block and record success or failure.

        Exceptions are recorded and re-raised unchanged.
        """
        t0 = time.perf_counter()
        try:
            yield
        except Exception as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            self.record_failure(service, operation, type(exc).__name__, latency_ms=elapsed)
            raise
        elapsed = (time.perf_counter() - t0) * 1000
        self.record_success(service, operation, latency_ms=elapsed)

    def flush(self) -> int:
        """Send buffered metrics to CloudWatch.  Returns count sent."""
        with self._lock:
            if not self._buffer:
                return 0
            batch = self._buffer[:]
            self._buffer.clear()

        if not self._enabled:
            logger.debug("Metrics flush skipped (not enabled): %d items", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    # ── Internal ──────────────────────────────────────────────────────

    def _count(self, now: datetime, service: str, dim_name: str, dim_value: str) -> None:
        self._append(
            {
                "MetricName": "Orchestrator/RequestCount",
                "Dimensions": [
                    {"Name": "Service", "Value": service},
                    {"Name": dim_name, "Value": dim_value},
                ],
                "Timestamp": now,
                "Value": 1,
                "Unit": "Count",
            }
        )

    def _latency(self, now: datetime, service: str, operation: str, latency_ms: float) -> None:
        self._append(
            {
                "MetricName": "Orchestrator/Latency",
                "Dimensions": [
                    {"Name": "Service", "Value": service},
                    {"Name": "Operation", "Value": operation},
                ],
                "Timestamp": now,
                "Value": latency_ms,
                "Unit": "Milliseconds",
            }
        )

    def _append(self, metric_data: dict[str, Any]) -> None:
        with self._lock:
            self._buffer.append(metric_data)

    def _start_flush_thread(self) -> None:
        """Start a daemon thread that flushes metrics periodically."""

        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        t = threading.Thread(target=_loop, daemon=True, name="metrics-flush")
        t.start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)


# ── Module-level singleton ──────────────────────────────────────────
metrics = MetricsClient()
