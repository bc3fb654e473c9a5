"""In-memory dataset of canonical records shared by the dashboard."""

import threading
from collections.abc import Iterable

from loguru import logger

from ..models.campaign_record import CampaignRecord


class CampaignStore:
    """Process-lifetime record store.

    Writers are serialized through a lock. Readers get an immutable tuple, so
    a snapshot never changes underneath an aggregation in progress.
    """

    def __init__(self, records: Iterable[CampaignRecord] = ()):
        self._lock = threading.Lock()
        self._records: tuple[CampaignRecord, ...] = tuple(records)

    def append(self, records: Iterable[CampaignRecord], source: str = "") -> int:
        """Add records after the existing ones. Returns the new total."""
        new = tuple(records)
        with self._lock:
            self._records = self._records + new
            total = len(self._records)
        logger.info("[store] appended {} records from {} (total {})", len(new), source or "?", total)
        return total

    def replace(self, records: Iterable[CampaignRecord]) -> int:
        """Swap the whole dataset."""
        new = tuple(records)
        with self._lock:
            self._records = new
        logger.info("[store] replaced dataset with {} records", len(new))
        return len(new)

    def reset(self) -> None:
        with self._lock:
            dropped = len(self._records)
            self._records = ()
        logger.info("[store] reset, discarded {} records", dropped)

    def snapshot(self) -> tuple[CampaignRecord, ...]:
        with self._lock:
            return self._records

    def __len__(self) -> int:
        return len(self.snapshot())
