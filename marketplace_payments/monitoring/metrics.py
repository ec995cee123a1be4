"""
Prometheus metrics for marketplace monitoring.

Tracks:
- Settlement attempts by outcome
- Settled amounts and settlement duration
- Deposit attempts by outcome
- Admin report query duration
"""
from decimal import Decimal

from prometheus_client import Counter, Histogram

# Settlement metrics
settlements_total = Counter(
    "settlements_total",
    "Total job settlement attempts",
    ["outcome"],  # paid, forbidden, not_found, insufficient_funds, ...
)

settlement_amount = Histogram(
    "settlement_amount",
    "Amounts moved by successful settlements",
    buckets=(10, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
)

settlement_duration_seconds = Histogram(
    "settlement_duration_seconds",
    "Settlement transaction duration in seconds",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# Deposit metrics
deposits_total = Counter(
    "deposits_total",
    "Total deposit attempts",
    ["outcome"],  # accepted, limit_exceeded, invalid_argument, forbidden
)

deposit_amount = Histogram(
    "deposit_amount",
    "Amounts accepted by deposits",
    buckets=(1, 10, 50, 100, 250, 500, 1000, 5000),
)

# Report metrics
report_query_duration_seconds = Histogram(
    "report_query_duration_seconds",
    "Admin report query duration in seconds",
    ["report"],  # best_profession, best_clients
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)


class MetricsCollector:
    """Helper class for collecting metrics."""

    @staticmethod
    def record_settlement(outcome: str, duration_seconds: float, amount: Decimal | None = None) -> None:
        """Record a settlement attempt."""
        settlements_total.labels(outcome=outcome).inc()
        settlement_duration_seconds.observe(duration_seconds)
        if amount is not None:
            settlement_amount.observe(float(amount))

    @staticmethod
    def record_deposit(outcome: str, amount: Decimal | None = None) -> None:
        """Record a deposit attempt."""
        deposits_total.labels(outcome=outcome).inc()
        if amount is not None:
            deposit_amount.observe(float(amount))

    @staticmethod
    def record_report_query(report: str, duration_seconds: float) -> None:
        """Record an admin report query."""
        report_query_duration_seconds.labels(report=report).observe(duration_seconds)


# Export singleton instance
metrics = MetricsCollector()
