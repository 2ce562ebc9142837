# food_insights/data/repositories.py

"""
Repositories for admin-maintained data.

Channel cost structures and labor records are edited by people, not pulled
from the ERP. The orchestrator receives them through these interfaces so
that the analyses never touch storage directly.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from food_insights.data.records import ChannelCostSummary, LaborRecord

logger = logging.getLogger(__name__)


class ChannelCostRepository(ABC):
    """Source of per-channel cost structures."""

    @abstractmethod
    def list_channel_costs(self) -> List[ChannelCostSummary]:
        ...

    def get(self, channel_name: str) -> Optional[ChannelCostSummary]:
        for summary in self.list_channel_costs():
            if summary.channel_name == channel_name:
                return summary
        return None


class LaborRecordRepository(ABC):
    """Source of daily labor cost records."""

    @abstractmethod
    def list_labor_records(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None
    ) -> List[LaborRecord]:
        ...


class InMemoryChannelCostRepository(ChannelCostRepository):

    def __init__(self, summaries: Optional[Iterable[ChannelCostSummary]] = None):
        self._summaries = list(summaries or [])

    def list_channel_costs(self) -> List[ChannelCostSummary]:
        return list(self._summaries)


class InMemoryLaborRecordRepository(LaborRecordRepository):

    def __init__(self, records: Optional[Iterable[LaborRecord]] = None):
        self._records = list(records or [])

    def list_labor_records(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None
    ) -> List[LaborRecord]:
        records = self._records
        if start:
            records = [r for r in records if r.date[:10] >= start]
        if end:
            records = [r for r in records if r.date[:10] <= end]
        return list(records)
