"""
Organic Scan Reducer
====================

Collapses interleaved scan actions into the current progress per organism.

RULES:
- Records are processed in timestamp order (stable for ties)
- Switching to a different organism abandons every unfinished sequence
- An Analyse-complete entry survives any later switch
- Two consecutive Samples of the same organism are labelled "2+"
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..contracts.organics import OrganicScanRecord, OrganismKey, ScanType


REPEATED_SAMPLE_LABEL = "2+"


@dataclass(frozen=True)
class OrganicProgress:
    """Latest progress for one organism: stage label plus the record that set it."""
    label: str
    record: OrganicScanRecord

    @property
    def key(self) -> OrganismKey:
        return self.record.key

    @property
    def is_complete(self) -> bool:
        return self.record.scan_type is ScanType.ANALYSE


def stage_label(previous: Optional[OrganicProgress], record: OrganicScanRecord) -> str:
    if (
        previous is not None
        and previous.record.scan_type is ScanType.SAMPLE
        and record.scan_type is ScanType.SAMPLE
    ):
        return REPEATED_SAMPLE_LABEL
    return str(record.scan_type.stage)


class OrganicScanReducer:
    """
    Reduces scan records to progress per organism key.

    reduce() is a pure function of its input. The instance also keeps an
    append-only record list for owners that accumulate scans over time;
    progress() re-runs the reduction on demand.
    """

    def __init__(self):
        self._records: List[OrganicScanRecord] = []

    @staticmethod
    def reduce(records: Iterable[OrganicScanRecord]) -> Tuple[OrganicProgress, ...]:
        ordered = sorted(records, key=lambda r: r.timestamp.value)

        working: Dict[OrganismKey, OrganicProgress] = {}
        current_key: Optional[OrganismKey] = None

        for record in ordered:
            key = record.key

            if current_key is not None and current_key != key:
                # switched target: unfinished sequences are abandoned
                working = {
                    k: progress for k, progress in working.items()
                    if progress.record.scan_type is ScanType.ANALYSE
                }

            current_key = key
            working[key] = OrganicProgress(
                label=stage_label(working.get(key), record),
                record=record
            )

        return tuple(working.values())

    def add(self, record: OrganicScanRecord) -> None:
        self._records.append(record)

    def progress(self) -> Tuple[OrganicProgress, ...]:
        return self.reduce(self._records)

    @property
    def records(self) -> Tuple[OrganicScanRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)
