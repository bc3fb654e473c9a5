from .aggregator import (
    aggregate,
    audience_comparison,
    calculate_metrics,
    chart_series,
    daily_series,
    dimension_table,
    merge_buckets,
    rank_buckets,
    totals,
    weekly_series,
)
from .filters import FilterCriteria, available_values, filter_records
from .floodlight import floodlight_summary
from .models import (
    AggregateBucket,
    AudienceComparison,
    ChartSeries,
    Dimension,
    FloodlightActivityStats,
    FloodlightSummary,
    MetricSummary,
)
from .stats import detect_trend

__all__ = [
    "AggregateBucket",
    "AudienceComparison",
    "ChartSeries",
    "Dimension",
    "FilterCriteria",
    "FloodlightActivityStats",
    "FloodlightSummary",
    "MetricSummary",
    "aggregate",
    "audience_comparison",
    "available_values",
    "calculate_metrics",
    "chart_series",
    "daily_series",
    "detect_trend",
    "dimension_table",
    "filter_records",
    "floodlight_summary",
    "merge_buckets",
    "rank_buckets",
    "totals",
    "weekly_series",
]
