"""
Observability & Audit Layer

RESPONSIBILITY: Audit trail and counters for the aggregation layers
ALLOWED INPUTS: Notifications from the router and accumulator
OUTPUTS: AuditLogEntry lists, MetricPoint series, audit report

WHAT THIS LAYER MUST NOT DO:
============================
- Modify system behavior
- Filter or interpret events (only record them)
- Take part in derived state (audit timestamps are wall-clock and
  never feed into snapshots or state hashes)
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple
from enum import Enum
import hashlib

from ..contracts.base import Timestamp


# =============================================================================
# AUDIT CONTRACTS
# =============================================================================

class AuditEventType(Enum):
    """Explicit audit event types."""
    ROUTED = "routed"
    STATE_CHANGE = "state_change"
    VALIDATION_FAILURE = "validation_failure"
    SYSTEM = "system"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: Timestamp
    layer: str  # Which layer generated this
    action: str
    entity_id: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: Timestamp
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


# =============================================================================
# LOG COLLECTORS (One per layer)
# =============================================================================

class LogCollector:
    """
    Append-only collector of audit entries for one layer.

    Unbounded by default, so a long session keeps growing. With
    max_entries set, the oldest entries are dropped first.
    """

    def __init__(self, layer_name: str, max_entries: Optional[int] = None):
        self._layer_name = layer_name
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)

    def collect(self, entry: AuditLogEntry):
        self._entries.append(entry)

    def get_entries(self, event_type: Optional[AuditEventType] = None) -> List[AuditLogEntry]:
        if event_type:
            return [e for e in self._entries if e.event_type == event_type]
        return list(self._entries)

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

DEFAULT_COUNTERS = (
    "events_routed_total",
    "validation_failures_total",
    "signal_batches_total",
    "organic_scans_total",
    "surface_reports_total",
    "identifier_writes_total",
)


class MetricsCollector:
    """
    Counter metrics. Each increment is kept as a point so the series
    can be inspected, and running totals are kept alongside.

    max_points caps each series (oldest dropped first); totals are
    never trimmed.
    """

    def __init__(self, max_points: Optional[int] = None):
        self._max_points = max_points
        self._points: Dict[str, Deque[MetricPoint]] = {
            name: deque(maxlen=max_points) for name in DEFAULT_COUNTERS
        }
        self._totals: Dict[str, float] = {name: 0.0 for name in DEFAULT_COUNTERS}

    def increment(self, metric_name: str, amount: float = 1.0, labels: Optional[Dict[str, str]] = None):
        total = self._totals.get(metric_name, 0.0) + amount
        self._totals[metric_name] = total
        self._points.setdefault(metric_name, deque(maxlen=self._max_points)).append(MetricPoint(
            metric_name=metric_name,
            value=total,
            timestamp=Timestamp.now(),
            labels=tuple(sorted((labels or {}).items()))
        ))

    def total(self, metric_name: str) -> float:
        return self._totals.get(metric_name, 0.0)

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        return list(self._points.get(metric_name, []))

    def totals(self) -> Dict[str, float]:
        return dict(self._totals)


# =============================================================================
# OBSERVABILITY ENGINE
# =============================================================================

LAYERS = ('router', 'signals', 'organics', 'surface', 'identifiers')


@dataclass
class ObservabilityConfig:
    """
    Configuration for observability engine.

    None caps mean unbounded retention for the life of the engine.
    """
    enable_audit: bool = True
    enable_metrics: bool = True
    max_entries_per_layer: Optional[int] = None
    max_points_per_metric: Optional[int] = None


class ObservabilityEngine:
    """
    Central Observability Engine.

    BOUNDARY ENFORCEMENT:
    - ONLY observes, never modifies
    - Provides read-only access to collected data
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._collectors: Dict[str, LogCollector] = {
            layer: LogCollector(layer, self._config.max_entries_per_layer) for layer in LAYERS
        }
        self._metrics = MetricsCollector(self._config.max_points_per_metric) if self._config.enable_metrics else None
        self._sequence = 0

    def log_audit(
        self,
        action: str,
        layer: str,
        event_type: AuditEventType = AuditEventType.STATE_CHANGE,
        entity_id: Optional[str] = None,
        **details: object
    ):
        """Record an audit entry for a layer."""
        if not self._config.enable_audit:
            return

        self._sequence += 1
        entry_id = hashlib.sha256(
            f"{layer}_{action}|{self._sequence}".encode()
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{entry_id}",
            event_type=event_type,
            timestamp=Timestamp.now(),
            layer=layer,
            action=action,
            entity_id=entity_id,
            metadata=tuple((key, str(value)) for key, value in sorted(details.items()))
        )
        collector = self._collectors.get(layer)
        if collector is None:
            collector = self._collectors[layer] = LogCollector(layer, self._config.max_entries_per_layer)
        collector.collect(entry)

    def count(self, metric_name: str, amount: float = 1.0, **labels: str):
        if self._metrics:
            self._metrics.increment(metric_name, amount, labels or None)

    def get_layer_log(self, layer_name: str) -> List[AuditLogEntry]:
        collector = self._collectors.get(layer_name)
        if not collector:
            return []
        return collector.get_entries()

    def get_unified_log(self) -> List[AuditLogEntry]:
        entries: List[AuditLogEntry] = []
        for collector in self._collectors.values():
            entries.extend(collector.get_entries())
        entries.sort(key=lambda e: e.timestamp.value)
        return entries

    def get_metrics(self) -> Optional[MetricsCollector]:
        return self._metrics

    def generate_audit_report(self) -> Dict:
        """Counts of audit entries by layer and type, plus counter totals."""
        entries = self.get_unified_log()

        by_layer: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        for entry in entries:
            by_layer[entry.layer] = by_layer.get(entry.layer, 0) + 1
            by_type[entry.event_type.value] = by_type.get(entry.event_type.value, 0) + 1

        return {
            'total_entries': len(entries),
            'by_layer': by_layer,
            'by_event_type': by_type,
            'counters': self._metrics.totals() if self._metrics else {},
            'generated_at': Timestamp.now().to_iso()
        }
