"""Prometheus metrics for document generation."""

from prometheus_client import Counter, Histogram

document_generations_total = Counter(
    "document_generations_total",
    "Total document generation requests by outcome",
    ["outcome"],
)

document_generation_latency_ms = Histogram(
    "document_generation_latency_ms",
    "Document generation latency in milliseconds",
    ["outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

logo_decode_failures_total = Counter(
    "logo_decode_failures_total",
    "Logos skipped because they could not be decoded",
    ["reason"],
)


class PrometheusGenerationMetrics:
    """Prometheus-based generation metrics implementation."""

    def record_outcome(self, outcome: str, latency_ms: float) -> None:
        """Record one finished generation request."""
        document_generations_total.labels(outcome=outcome).inc()
        document_generation_latency_ms.labels(outcome=outcome).observe(latency_ms)
