"""
Metrics collection and monitoring for ArchCanvas.
"""

import time
import threading
from typing import Dict, Any, List, Optional, Union
from collections import defaultdict, deque
from dataclasses import dataclass, field
from functools import wraps

from ...config.settings import get_settings


@dataclass
class Metric:
    """Represents a single metric measurement."""

    name: str
    value: Union[int, float]
    timestamp: float
    tags: Dict[str, str] = field(default_factory=dict)


class MetricsCollector:
    """
    Collects editor and persistence metrics.

    Counters track gestures (accepted, rejected, ignored), timers track
    calls into the architecture store.
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "MetricsCollector":
        """Singleton pattern."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.settings = get_settings()
        self.enabled = self.settings.monitoring_config.get('enabled', True)
        self.max_history = self.settings.monitoring_config.get('max_history', 1000)

        self._metrics: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self.max_history))
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = defaultdict(float)
        self._timers: Dict[str, List[float]] = defaultdict(list)

        self._initialized = True

    def counter(self, name: str, value: int = 1, tags: Dict[str, str] = None) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name
            value: Increment value
            tags: Optional tags
        """
        if not self.enabled:
            return
        with self._lock:
            self._counters[name] += value
            self._metrics[name].append(
                Metric(name=name, value=self._counters[name], timestamp=time.time(), tags=tags or {})
            )

    def gauge(self, name: str, value: float, tags: Dict[str, str] = None) -> None:
        """Set a gauge metric value."""
        if not self.enabled:
            return
        with self._lock:
            self._gauges[name] = value
            self._metrics[name].append(
                Metric(name=name, value=value, timestamp=time.time(), tags=tags or {})
            )

    def timer(self, name: str, duration_seconds: float, tags: Dict[str, str] = None) -> None:
        """
        Record a timing metric.

        Args:
            name: Timer name
            duration_seconds: Duration in seconds
            tags: Optional tags
        """
        if not self.enabled:
            return
        with self._lock:
            self._timers[name].append(duration_seconds)

            # Keep only recent timings
            if len(self._timers[name]) > self.max_history:
                self._timers[name] = self._timers[name][-self.max_history:]

            self._metrics[name].append(
                Metric(name=name, value=duration_seconds, timestamp=time.time(), tags=tags or {})
            )

    def get_counter(self, name: str) -> int:
        """Get current counter value."""
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        """Get current gauge value."""
        return self._gauges.get(name, 0.0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Get timer statistics."""
        timings = self._timers.get(name, [])

        if not timings:
            return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0, 'p95': 0.0}

        sorted_timings = sorted(timings)
        count = len(sorted_timings)

        return {
            'count': count,
            'mean': sum(sorted_timings) / count,
            'min': sorted_timings[0],
            'max': sorted_timings[-1],
            'p95': sorted_timings[int(0.95 * (count - 1))],
        }

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all current metric values."""
        with self._lock:
            return {
                'counters': dict(self._counters),
                'gauges': dict(self._gauges),
                'timers': {name: self.get_timer_stats(name) for name in self._timers},
            }

    def reset(self) -> None:
        """Drop every recorded value."""
        with self._lock:
            self._metrics.clear()
            self._counters.clear()
            self._gauges.clear()
            self._timers.clear()

    def record_gesture(self, gesture: str, outcome: str) -> None:
        """Record an interaction controller gesture and how it ended."""
        self.counter('editor_gestures_total', tags={'gesture': gesture, 'outcome': outcome})
        self.counter(f'editor_gesture_{outcome}')

    def record_store_call(self, operation: str, duration_seconds: float, success: bool = True) -> None:
        """Record architecture store call metrics."""
        tags = {'operation': operation, 'success': str(success)}

        self.counter('store_calls_total', tags=tags)
        self.timer('store_call_duration', duration_seconds, tags=tags)


def timed_operation(metric_name: str, tags: Dict[str, str] = None):
    """
    Decorator for timing operations.

    Args:
        metric_name: Name of the timing metric
        tags: Optional tags for the metric
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            metrics = get_metrics()
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                error_tags = (tags or {}).copy()
                error_tags['error'] = type(e).__name__
                metrics.timer(f"{metric_name}_error", time.time() - start_time, error_tags)
                raise
            metrics.timer(metric_name, time.time() - start_time, tags)
            return result

        return wrapper
    return decorator


# Global instance
_metrics_collector = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector instance.

    Returns:
        MetricsCollector singleton instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()

    return _metrics_collector
