"""
Metric registry using prometheus_client.

Provides pre-defined metrics for the allocators and the reconciliation loop.
Exposes metrics in Prometheus text format.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a dedicated registry for netalloc metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Allocation
# -----------------------------------------------------------------------------

allocations_total = Counter(
    "netalloc_allocations_total",
    "Values handed out, by pool",
    ["pool"],
    registry=REGISTRY,
)

pool_exhausted_total = Counter(
    "netalloc_pool_exhausted_total",
    "Allocation attempts that found no free slot, by pool",
    ["pool"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Reconciliation
# -----------------------------------------------------------------------------

reclaimed_total = Counter(
    "netalloc_reclaimed_total",
    "Values returned to a bucket after reconciliation, by pool",
    ["pool"],
    registry=REGISTRY,
)

reconciliations_total = Counter(
    "netalloc_reconciliations_total",
    "Completed reconciliation passes",
    registry=REGISTRY,
)

reconciliation_time = Histogram(
    "netalloc_reconciliation_seconds",
    "Time spent in one reconciliation pass",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output.
    """
    return generate_latest(REGISTRY)
