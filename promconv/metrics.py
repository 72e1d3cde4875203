"""Self-monitoring metrics using prometheus_client."""
from prometheus_client import CollectorRegistry, Counter, Histogram


class SelfMetrics:
    """Counters and timings recorded around each conversion."""

    def __init__(self, registry=None, prefix=""):
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.conversions_total = Counter(
            f"{prefix}conversions_total",
            "Total number of query results converted",
            ["result_type"],
            registry=registry
        )

        self.observations_total = Counter(
            f"{prefix}observations_total",
            "Total number of observations emitted",
            ["result_type"],
            registry=registry
        )

        self.malformed_payloads_total = Counter(
            f"{prefix}malformed_payloads_total",
            "Total number of payloads that did not match their result type",
            registry=registry
        )

        self.convert_duration_seconds = Histogram(
            f"{prefix}convert_duration_seconds",
            "Duration of decode and conversion in seconds",
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
            registry=registry
        )

    def record_conversion(self, result_type: str, count: int, duration: float):
        """Record one conversion and the observations it produced."""
        self.conversions_total.labels(result_type=result_type).inc()
        self.observations_total.labels(result_type=result_type).inc(count)
        self.convert_duration_seconds.observe(duration)

    def record_malformed(self):
        self.malformed_payloads_total.inc()
