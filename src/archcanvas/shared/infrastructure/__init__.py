"""
Shared infrastructure components for ArchCanvas.

Provides centralized infrastructure services:
- Logging configuration
- Metrics collection for gestures and store calls
"""

from .monitoring.logger import get_logger, setup_logging
from .monitoring.metrics import MetricsCollector, get_metrics, timed_operation

__all__ = [
    # Monitoring
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
    "timed_operation",
]
