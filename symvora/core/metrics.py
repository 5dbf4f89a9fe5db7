from prometheus_client import Counter, Histogram, Gauge
from functools import wraps
import time

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['endpoint', 'method', 'status']
)

REQUEST_LATENCY = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['endpoint', 'method'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
)

# Analyzer metrics
ANALYZER_REQUESTS = Counter(
    'analyzer_requests_total',
    'Total number of symptom analyses',
    ['analyzer', 'outcome']
)

ANALYZER_LATENCY = Histogram(
    'analyzer_duration_seconds',
    'Time spent producing an advisory',
    ['analyzer'],
    buckets=[0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0]
)

# System metrics
SYSTEM_CPU = Gauge('system_cpu_usage', 'Current CPU usage percentage')
SYSTEM_MEMORY = Gauge('system_memory_usage_bytes', 'Current memory usage in bytes')

def track_latency(histogram: Histogram, labels: dict):
    """Decorator observing the duration of an async call on a labelled histogram"""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                histogram.labels(**labels).observe(time.perf_counter() - start_time)
        return wrapper
    return decorator

class MetricsTracker:
    @staticmethod
    def track_request(endpoint: str, method: str, status: int, start_time: float) -> None:
        duration = time.perf_counter() - start_time
        REQUEST_COUNT.labels(endpoint=endpoint, method=method, status=status).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint, method=method).observe(duration)

    @staticmethod
    def track_analysis(analyzer: str, outcome: str) -> None:
        ANALYZER_REQUESTS.labels(analyzer=analyzer, outcome=outcome).inc()

    @staticmethod
    def update_system_metrics(cpu_percent: float, memory_used_bytes: float) -> None:
        SYSTEM_CPU.set(cpu_percent)
        SYSTEM_MEMORY.set(memory_used_bytes)
