"""
Analysis history held by the caller.

The latest result per category is kept in an immutable value: recording a
new analysis returns a new history instead of mutating shared state, so
concurrent requests never see each other's results.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from ai_analysis.models import AnalysisCategory, AnalysisRecord


@dataclass(frozen=True)
class HistoryEntry:
    """One displayed analysis."""
    record: AnalysisRecord
    stock_name: str = ''
    platform: str = ''
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class AnalysisHistory:
    entries: Mapping[AnalysisCategory, HistoryEntry] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def record(self, entry: HistoryEntry) -> 'AnalysisHistory':
        """New history with `entry` as the latest result for its category."""
        updated = dict(self.entries)
        updated[entry.record.category] = entry
        return replace(self, entries=MappingProxyType(updated))

    def latest(self, category) -> Optional[HistoryEntry]:
        return self.entries.get(AnalysisCategory.parse(category))

    def cleared(self) -> 'AnalysisHistory':
        return AnalysisHistory()

    def __len__(self) -> int:
        return len(self.entries)
