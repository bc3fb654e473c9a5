"""Output models for aggregation and dashboard calculations."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Literal


class Dimension(str, Enum):
    """Grouping keys available for tables and charts."""

    DATE = "date"
    WEEK = "week"
    AUDIENCE_TYPE = "audience_type"
    AUDIENCE_SEGMENT = "audience_segment"
    CAMPAIGN_TYPE = "campaign_type"
    FLOODLIGHT_ACTIVITY = "floodlight_activity"
    PLATFORM = "platform"
    CAMPAIGN = "campaign"


TIME_DIMENSIONS = frozenset({Dimension.DATE, Dimension.WEEK})


@dataclass(frozen=True)
class AggregateBucket:
    """Summed metrics for one dimension value, with ratios derived from the sums.

    Ratios are percentages where named *_rate / ctr / viewability, currency
    otherwise. A zero denominator yields 0.
    """

    key: str

    # Sums
    impressions: int
    clicks: int
    revenue: float
    viewable_impressions: int
    post_click_conversions: float
    post_view_conversions: float
    total_conversions: float
    record_count: int

    # Derived
    ctr: float  # clicks / impressions * 100
    cpm: float  # revenue / impressions * 1000
    cpc: float  # revenue / clicks
    conversion_rate: float  # total_conversions / clicks * 100
    post_click_conversion_rate: float
    post_view_conversion_rate: float
    cpa: float  # revenue / total_conversions
    cpa_post_click: float
    cpa_post_view: float
    viewability: float  # viewable_impressions / impressions * 100

    def to_dict(self) -> dict[str, Any]:
        """Table row with the key exposed as dimension_value."""
        row = asdict(self)
        row["dimension_value"] = row.pop("key")
        return row


@dataclass(frozen=True)
class MetricSummary:
    """Headline totals for a set of records."""

    impressions: int
    clicks: int
    revenue: float
    conversions: float
    ctr: float
    cpm: float
    viewability: float
    conversion_rate: float  # click-based, like every conversion rate here


@dataclass(frozen=True)
class ChartSeries:
    """Parallel arrays for a chart, one entry per label."""

    labels: list[str]
    impressions: list[int]
    clicks: list[int]
    revenue: list[float]
    conversions: list[float]
    ctr: list[float]
    trend: Literal["increasing", "decreasing", "stable"] = "stable"


@dataclass(frozen=True)
class AudienceComparison:
    """1st Party vs Converged headline metrics."""

    first_party: MetricSummary
    converged: MetricSummary


@dataclass(frozen=True)
class FloodlightActivityStats:
    """Metrics for one Floodlight activity."""

    activity: str
    group: str | None
    tag: str | None
    is_order: bool
    is_lead: bool
    metrics: AggregateBucket


@dataclass(frozen=True)
class FloodlightSummary:
    """Floodlight activities plus order / lead cost rollups."""

    activities: list[FloodlightActivityStats]
    order_conversions: float
    order_revenue: float
    cost_per_order: float
    lead_conversions: float
    lead_revenue: float
    cost_per_lead: float
