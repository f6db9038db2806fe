"""
Aggregation Layer

In-memory merged views over the event stream. Nothing here locks,
blocks or performs I/O; every operation is synchronous and bounded by
the accumulated history size.
"""

from .signal_aggregator import SignalAggregator, materialize_batches, materialize_bucketed
from .organic_reducer import OrganicProgress, OrganicScanReducer
from .identifier_cache import IdentifierCache

__all__ = [
    'SignalAggregator',
    'materialize_batches',
    'materialize_bucketed',
    'OrganicProgress',
    'OrganicScanReducer',
    'IdentifierCache',
]
