"""Prometheus metrics for distribution volume, redistributions and rejected saves"""

from prometheus_client import Counter, Histogram

# Distribution metrics
distribution_counter = Counter(
    "billboard_distribution_total",
    "Installment distributions computed",
    ["mode"],  # even | single | interval | manual
)

installment_count_histogram = Histogram(
    "billboard_installments_per_distribution",
    "Installments produced per distribution",
    buckets=[1, 2, 3, 4, 6, 12, 24],
)

redistribution_counter = Counter(
    "billboard_redistribution_total",
    "Installment sets recomputed after a mutation",
    ["trigger"],  # removal | total_changed
)

# Persistence gate
unbalanced_save_counter = Counter(
    "billboard_unbalanced_save_total",
    "Plan saves rejected because installments did not match the contract total",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_distribution(mode: str, installment_count: int) -> None:
    """Record distribution metrics by mode and schedule length"""
    distribution_counter.labels(mode=mode).inc()
    installment_count_histogram.observe(installment_count)
