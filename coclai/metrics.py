"""Runtime counters and latency histogram with immutable snapshots."""

from __future__ import annotations

import threading
from bisect import bisect_left
from dataclasses import dataclass

U64_MAX = 2**64 - 1
SINK_LATENCY_BUCKET_UPPER_US: tuple[int, ...] = (
    100,
    250,
    500,
    1_000,
    2_500,
    5_000,
    10_000,
    U64_MAX,
)


@dataclass(frozen=True)
class RuntimeMetricsSnapshot:
    """Point-in-time view of runtime counters."""

    uptime_millis: int
    ingress_total: int
    ingress_rate_per_sec: float
    pending_rpc_count: int
    pending_server_request_count: int
    event_sink_queue_depth: int
    event_sink_queue_dropped: int
    broadcast_send_failed: int
    sink_write_count: int
    sink_write_error_count: int
    sink_latency_avg_micros: float
    sink_latency_p95_micros: int
    sink_latency_max_micros: int


def _bucket_index(latency_micros: int) -> int:
    index = bisect_left(SINK_LATENCY_BUCKET_UPPER_US, latency_micros)
    return min(index, len(SINK_LATENCY_BUCKET_UPPER_US) - 1)


class RuntimeMetrics:
    """Thread-safe runtime counters; every update is O(1)."""

    def __init__(self, start_unix_millis: int) -> None:
        self._start_unix_millis = start_unix_millis
        self._lock = threading.Lock()
        self._ingress_total = 0
        self._pending_rpc_count = 0
        self._pending_server_request_count = 0
        self._event_sink_queue_depth = 0
        self._event_sink_queue_dropped = 0
        self._broadcast_send_failed = 0
        self._sink_write_count = 0
        self._sink_write_error_count = 0
        self._sink_latency_total_micros = 0
        self._sink_latency_max_micros = 0
        self._sink_latency_buckets = [0] * len(SINK_LATENCY_BUCKET_UPPER_US)

    def record_ingress(self) -> None:
        with self._lock:
            self._ingress_total += 1

    def inc_pending_rpc(self) -> None:
        with self._lock:
            self._pending_rpc_count += 1

    def dec_pending_rpc(self) -> None:
        with self._lock:
            self._pending_rpc_count = max(0, self._pending_rpc_count - 1)

    def set_pending_rpc_count(self, count: int) -> None:
        with self._lock:
            self._pending_rpc_count = count

    def inc_pending_server_request(self) -> None:
        with self._lock:
            self._pending_server_request_count += 1

    def dec_pending_server_request(self) -> None:
        with self._lock:
            self._pending_server_request_count = max(0, self._pending_server_request_count - 1)

    def set_pending_server_request_count(self, count: int) -> None:
        with self._lock:
            self._pending_server_request_count = count

    def inc_event_sink_queue_depth(self) -> None:
        with self._lock:
            self._event_sink_queue_depth += 1

    def dec_event_sink_queue_depth(self) -> None:
        with self._lock:
            self._event_sink_queue_depth = max(0, self._event_sink_queue_depth - 1)

    def record_event_sink_drop(self) -> None:
        with self._lock:
            self._event_sink_queue_dropped += 1

    def record_broadcast_send_failed(self) -> None:
        with self._lock:
            self._broadcast_send_failed += 1

    def record_sink_write(self, latency_micros: int, is_error: bool) -> None:
        """Record one sink write attempt and its latency."""
        with self._lock:
            self._sink_write_count += 1
            if is_error:
                self._sink_write_error_count += 1
            self._sink_latency_total_micros += latency_micros
            self._sink_latency_max_micros = max(self._sink_latency_max_micros, latency_micros)
            self._sink_latency_buckets[_bucket_index(latency_micros)] += 1

    def snapshot(self, now_unix_millis: int) -> RuntimeMetricsSnapshot:
        """Build an immutable snapshot as of the given wall-clock time."""
        with self._lock:
            uptime = max(0, now_unix_millis - self._start_unix_millis)
            rate = 0.0 if uptime == 0 else self._ingress_total / (uptime / 1_000.0)
            count = self._sink_write_count
            avg = 0.0 if count == 0 else self._sink_latency_total_micros / count
            return RuntimeMetricsSnapshot(
                uptime_millis=uptime,
                ingress_total=self._ingress_total,
                ingress_rate_per_sec=rate,
                pending_rpc_count=self._pending_rpc_count,
                pending_server_request_count=self._pending_server_request_count,
                event_sink_queue_depth=self._event_sink_queue_depth,
                event_sink_queue_dropped=self._event_sink_queue_dropped,
                broadcast_send_failed=self._broadcast_send_failed,
                sink_write_count=count,
                sink_write_error_count=self._sink_write_error_count,
                sink_latency_avg_micros=avg,
                sink_latency_p95_micros=self._p95(),
                sink_latency_max_micros=self._sink_latency_max_micros,
            )

    def _p95(self) -> int:
        total = self._sink_write_count
        if total == 0:
            return 0
        threshold = -(-total * 95 // 100)
        cumulative = 0
        for upper, bucket in zip(SINK_LATENCY_BUCKET_UPPER_US, self._sink_latency_buckets):
            cumulative += bucket
            if cumulative >= threshold:
                return upper
        return U64_MAX