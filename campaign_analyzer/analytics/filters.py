"""Filter engine - select the working subset of the canonical dataset."""

from collections.abc import Callable, Iterable
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..models.campaign_record import (
    AudienceType,
    BusinessType,
    CampaignRecord,
    OptimizationType,
    Platform,
)

Predicate = Callable[[CampaignRecord], bool]

# Criteria compared by plain equality against the record field of the same name
EQUALITY_FIELDS = (
    "platform",
    "audience_type",
    "campaign_id",
    "audience_segment",
    "campaign_type",
    "optimized_targeting",
    "custom_bidding",
    "optimization_type",
    "business_type",
)

ALL_SENTINELS = {"", "all"}


class FilterCriteria(BaseModel):
    """Active dashboard filters. None (or "all" / "") disables a criterion."""

    model_config = ConfigDict(frozen=True)

    platform: Optional[Platform] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    audience_type: Optional[AudienceType] = None
    campaign_id: Optional[str] = None
    audience_segment: Optional[str] = None
    campaign_type: Optional[str] = None
    optimized_targeting: Optional[bool] = None
    custom_bidding: Optional[bool] = None
    optimization_type: Optional[OptimizationType] = None
    business_type: Optional[BusinessType] = None

    @field_validator("*", mode="before")
    @classmethod
    def _all_means_none(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in ALL_SENTINELS:
            return None
        return v

    def predicates(self) -> list[Predicate]:
        """One predicate per active criterion."""
        preds: list[Predicate] = []

        for name in EQUALITY_FIELDS:
            expected = getattr(self, name)
            if expected is not None:
                preds.append(
                    lambda r, name=name, expected=expected: getattr(r, name) == expected
                )

        if self.start_date is not None:
            start = self.start_date
            preds.append(lambda r: r.date >= start)
        if self.end_date is not None:
            end = self.end_date
            preds.append(lambda r: r.date <= end)

        return preds


def filter_records(
    records: Iterable[CampaignRecord],
    criteria: FilterCriteria | None = None,
) -> list[CampaignRecord]:
    """Records matching every active criterion.

    The input is not modified; with no active criteria the result holds the
    same records in the same order.
    """
    preds = criteria.predicates() if criteria else []
    return [r for r in records if all(p(r) for p in preds)]


def available_values(records: Iterable[CampaignRecord], field: str) -> list[Any]:
    """Distinct non-null values of a record field, for populating filter widgets."""
    values = {getattr(r, field) for r in records}
    values.discard(None)
    return sorted(values, key=lambda v: str(v.value if hasattr(v, "value") else v))
