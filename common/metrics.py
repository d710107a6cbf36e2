#!/usr/bin/env python3
"""
Metrics collection for gateway operations
"""

import threading
import time
from collections import defaultdict, deque
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from gateway.events import (
    GatewayDeposit, GatewayRedeem, OwnershipTransferred, VaultAdded, VaultRemoved,
)


@dataclass
class PerformanceStats:
    """Performance statistics for operations"""
    count: int
    total_time: float
    min_time: float
    max_time: float
    avg_time: float
    success_rate: float

    @classmethod
    def from_measurements(cls, times: List[float], successes: List[bool]) -> 'PerformanceStats':
        """Create stats from raw measurements"""
        if not times:
            return cls(0, 0.0, 0.0, 0.0, 0.0, 0.0)

        count = len(times)
        total_time = sum(times)
        success_rate = sum(successes) / len(successes) if successes else 0.0
        return cls(count, total_time, min(times), max(times), total_time / count, success_rate)


class MetricsCollector:
    """
    Thread-safe metrics collection
    Counters, gauges, histograms and operation timings keyed by name and tags
    """

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()

        self.counters: Dict[str, int] = defaultdict(int)
        self.gauges: Dict[str, float] = {}
        self.histograms: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_history))

        self.operation_times: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_history))
        self.operation_successes: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_history))

        self.last_activity = time.time()

    def increment_counter(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None):
        """Increment a counter metric"""
        with self._lock:
            self.counters[self._build_metric_name(name, tags)] += value
            self.last_activity = time.time()

    def set_gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None):
        """Set a gauge metric"""
        with self._lock:
            self.gauges[self._build_metric_name(name, tags)] = value
            self.last_activity = time.time()

    def record_histogram(self, name: str, value: float, tags: Optional[Dict[str, str]] = None):
        """Record a histogram value"""
        with self._lock:
            self.histograms[self._build_metric_name(name, tags)].append(value)
            self.last_activity = time.time()

    def record_operation(self, name: str, duration: float, success: bool, tags: Optional[Dict[str, str]] = None):
        """Record operation performance"""
        with self._lock:
            full_name = self._build_metric_name(name, tags)
            self.operation_times[full_name].append(duration)
            self.operation_successes[full_name].append(success)
            self.last_activity = time.time()

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> int:
        with self._lock:
            return self.counters.get(self._build_metric_name(name, tags), 0)

    def get_gauge(self, name: str, tags: Optional[Dict[str, str]] = None) -> Optional[float]:
        with self._lock:
            return self.gauges.get(self._build_metric_name(name, tags))

    def get_histogram_stats(self, name: str, tags: Optional[Dict[str, str]] = None) -> Optional[Dict]:
        """Get histogram statistics"""
        with self._lock:
            values = list(self.histograms.get(self._build_metric_name(name, tags), []))

        if not values:
            return None

        return {
            'count': len(values),
            'min': min(values),
            'max': max(values),
            'sum': sum(values),
            'avg': sum(values) / len(values),
            'p50': self._percentile(values, 0.5),
            'p95': self._percentile(values, 0.95),
        }

    def get_operation_stats(self, name: str, tags: Optional[Dict[str, str]] = None) -> Optional[PerformanceStats]:
        with self._lock:
            full_name = self._build_metric_name(name, tags)
            times = list(self.operation_times.get(full_name, []))
            successes = list(self.operation_successes.get(full_name, []))

        if not times:
            return None
        return PerformanceStats.from_measurements(times, successes)

    def get_summary(self) -> Dict[str, Any]:
        """Get metrics summary"""
        with self._lock:
            summary = {
                'timestamp': time.time(),
                'last_activity': self.last_activity,
                'counters': dict(self.counters),
                'gauges': dict(self.gauges),
            }
            histogram_names = list(self.histograms)
            operation_names = list(self.operation_times)

        histograms = {}
        for full_name in histogram_names:
            name, tags = self._split_metric_name(full_name)
            stats = self.get_histogram_stats(name, tags)
            if stats:
                histograms[full_name] = stats
        summary['histograms'] = histograms

        operations = {}
        for full_name in operation_names:
            name, tags = self._split_metric_name(full_name)
            stats = self.get_operation_stats(name, tags)
            if stats:
                operations[full_name] = asdict(stats)
        summary['operations'] = operations

        return summary

    def _build_metric_name(self, name: str, tags: Optional[Dict[str, str]]) -> str:
        if not tags:
            return name
        tag_string = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}|{tag_string}"

    def _split_metric_name(self, full_name: str):
        if '|' not in full_name:
            return full_name, None
        name, tag_string = full_name.split('|', 1)
        tags = {}
        for tag_pair in tag_string.split(','):
            if '=' in tag_pair:
                key, value = tag_pair.split('=', 1)
                tags[key] = value
        return name, tags

    def _percentile(self, values: List[float], percentile: float) -> float:
        if not values:
            return 0.0
        sorted_values = sorted(values)
        return sorted_values[int(percentile * (len(sorted_values) - 1))]


class TimerContext:
    """Context manager for timing operations"""

    def __init__(self, metrics: MetricsCollector, name: str, tags: Optional[Dict[str, str]] = None):
        self.metrics = metrics
        self.name = name
        self.tags = tags
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        self.metrics.record_operation(self.name, duration, exc_type is None, self.tags)


class GatewayMetrics:
    """
    Chain subscriber turning committed gateway events into metrics

    Only events from ``gateway_address`` are counted; rolled-back calls
    never reach subscribers.
    """

    def __init__(self, gateway_address: str, collector: Optional[MetricsCollector] = None):
        self.gateway_address = gateway_address
        self.collector = collector or MetricsCollector()

    def attach(self, chain) -> 'GatewayMetrics':
        chain.subscribe(self)
        return self

    def __call__(self, entry) -> None:
        if entry.address != self.gateway_address:
            return
        event = entry.event
        self.collector.increment_counter("gateway.events", tags={"event": entry.name})

        if isinstance(event, GatewayDeposit):
            partner = str(event.partner_id)
            self.collector.increment_counter("gateway.deposits", tags={"partner": partner})
            self.collector.record_histogram("gateway.deposit_assets", event.assets, tags={"vault": event.vault})
            self.collector.increment_counter("gateway.deposit_volume", event.assets, tags={"vault": event.vault})
        elif isinstance(event, GatewayRedeem):
            partner = str(event.partner_id)
            mode = "instant" if event.instant else "queued"
            self.collector.increment_counter("gateway.redeems", tags={"partner": partner})
            self.collector.increment_counter("gateway.redeems_by_mode", tags={"mode": mode})
            self.collector.record_histogram("gateway.redeem_shares", event.shares, tags={"vault": event.vault})
            self.collector.increment_counter("gateway.redeem_volume", event.shares, tags={"vault": event.vault})
        elif isinstance(event, (VaultAdded, VaultRemoved)):
            delta = 1 if isinstance(event, VaultAdded) else -1
            current = self.collector.get_gauge("gateway.allowed_vaults") or 0
            self.collector.set_gauge("gateway.allowed_vaults", current + delta)
        elif isinstance(event, OwnershipTransferred):
            self.collector.increment_counter("gateway.ownership_transfers")

    def deposits(self, partner_id: Optional[int] = None) -> int:
        if partner_id is None:
            return self.collector.get_counter("gateway.events", tags={"event": "GatewayDeposit"})
        return self.collector.get_counter("gateway.deposits", tags={"partner": str(partner_id)})

    def redeems(self, mode: str) -> int:
        return self.collector.get_counter("gateway.redeems_by_mode", tags={"mode": mode})

    def volume(self, vault: str, kind: str = "deposit") -> int:
        name = "gateway.deposit_volume" if kind == "deposit" else "gateway.redeem_volume"
        return self.collector.get_counter(name, tags={"vault": vault})
