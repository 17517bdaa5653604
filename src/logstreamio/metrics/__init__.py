from .metrics import MetricsCollector, StreamMetrics

__all__ = ["MetricsCollector", "StreamMetrics"]
