"""
Metrics module for observability.

Provides counters and histograms for tracking allocation behavior.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    allocations_total,
    generate_metrics,
    pool_exhausted_total,
    reclaimed_total,
    reconciliation_time,
    reconciliations_total,
)

__all__ = [
    "REGISTRY",
    "allocations_total",
    "generate_metrics",
    "pool_exhausted_total",
    "reclaimed_total",
    "reconciliation_time",
    "reconciliations_total",
]
