"""Aggregator - group canonical records by a dimension and derive ratios.

Summation runs in a Polars group_by; ratios are added in a separate
with_columns pass over the finished sums, never interleaved with summation.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import fields
from datetime import date, timedelta

import polars as pl

from ..models.campaign_record import AudienceType, CampaignRecord
from .expressions import SUM_COLUMNS, bucket_sums_expr, derived_ratio_exprs, merge_sums_expr
from .models import (
    TIME_DIMENSIONS,
    AggregateBucket,
    AudienceComparison,
    ChartSeries,
    Dimension,
    MetricSummary,
)
from .stats import detect_trend

KeyFn = Callable[[CampaignRecord], str | None]

METRICS_SCHEMA: dict[str, pl.DataType] = {
    "key": pl.Utf8,
    "impressions": pl.Int64,
    "clicks": pl.Int64,
    "revenue": pl.Float64,
    "viewable_impressions": pl.Int64,
    "post_click_conversions": pl.Float64,
    "post_view_conversions": pl.Float64,
    "total_conversions": pl.Float64,
}


def week_start(day: date) -> date:
    """Monday of the week containing day. Sunday maps to the previous Monday."""
    return day - timedelta(days=day.weekday())


GROUP_KEYS: dict[Dimension, KeyFn] = {
    Dimension.DATE: lambda r: r.date.isoformat(),
    Dimension.WEEK: lambda r: week_start(r.date).isoformat(),
    Dimension.AUDIENCE_TYPE: lambda r: r.audience_type.value,
    Dimension.AUDIENCE_SEGMENT: lambda r: r.audience_segment,
    Dimension.CAMPAIGN_TYPE: lambda r: r.campaign_type,
    Dimension.FLOODLIGHT_ACTIVITY: lambda r: r.floodlight_activity,
    Dimension.PLATFORM: lambda r: r.platform.value,
    Dimension.CAMPAIGN: lambda r: r.campaign,
}


def resolve_key(key: Dimension | str | KeyFn) -> KeyFn:
    """Turn a Dimension (or its name) into a key function; callables pass through."""
    if callable(key):
        return key
    return GROUP_KEYS[Dimension(key)]


def records_to_frame(records: Iterable[CampaignRecord], key_fn: KeyFn) -> pl.DataFrame:
    """Metric columns plus the group key for every record the key function accepts.

    Records whose key is None (e.g. no Floodlight activity) are skipped.
    """
    columns: dict[str, list] = {name: [] for name in METRICS_SCHEMA}
    for record in records:
        key = key_fn(record)
        if key is None:
            continue
        columns["key"].append(key)
        for name in SUM_COLUMNS:
            columns[name].append(getattr(record, name))
    return pl.DataFrame(columns, schema=METRICS_SCHEMA)


def _finalize(summed: pl.DataFrame) -> dict[str, AggregateBucket]:
    """Add ratio columns to finished sums and build buckets."""
    with_ratios = summed.with_columns(derived_ratio_exprs())
    return {row["key"]: AggregateBucket(**row) for row in with_ratios.to_dicts()}


# =============================================================================
# AGGREGATION
# =============================================================================


def aggregate(
    records: Iterable[CampaignRecord],
    key: Dimension | str | KeyFn,
) -> dict[str, AggregateBucket]:
    """Group records by a dimension or key function.

    Args:
        records: Canonical records
        key: Dimension, dimension name, or callable returning the group key

    Returns:
        Buckets keyed by dimension value, in first-seen order.
    """
    frame = records_to_frame(records, resolve_key(key))
    if frame.is_empty():
        return {}
    summed = frame.group_by("key", maintain_order=True).agg(bucket_sums_expr())
    return _finalize(summed)


def merge_buckets(
    *aggregations: Mapping[str, AggregateBucket],
) -> dict[str, AggregateBucket]:
    """Merge separate aggregations by summing matching keys, then re-derive ratios."""
    rows = [
        {"key": bucket.key, **{c: getattr(bucket, c) for c in (*SUM_COLUMNS, "record_count")}}
        for aggregation in aggregations
        for bucket in aggregation.values()
    ]
    if not rows:
        return {}
    frame = pl.DataFrame(rows, schema={**METRICS_SCHEMA, "record_count": pl.Int64})
    summed = frame.group_by("key", maintain_order=True).agg(merge_sums_expr())
    return _finalize(summed)


def _zero_bucket(key: str) -> AggregateBucket:
    zeros = {f.name: f.type() for f in fields(AggregateBucket) if f.name != "key"}
    return AggregateBucket(key=key, **zeros)


def totals(records: Iterable[CampaignRecord]) -> AggregateBucket:
    """Single bucket over all records (zeros when empty)."""
    buckets = aggregate(records, lambda r: "total")
    return buckets.get("total") or _zero_bucket("total")


def calculate_metrics(records: Iterable[CampaignRecord]) -> MetricSummary:
    """Headline metrics: impression-based CTR/CPM/viewability, click-based conversion rate."""
    bucket = totals(records)
    return MetricSummary(
        impressions=bucket.impressions,
        clicks=bucket.clicks,
        revenue=bucket.revenue,
        conversions=bucket.total_conversions,
        ctr=bucket.ctr,
        cpm=bucket.cpm,
        viewability=bucket.viewability,
        conversion_rate=bucket.conversion_rate,
    )


# =============================================================================
# ORDERING
# =============================================================================


def sort_by_key(buckets: Iterable[AggregateBucket]) -> list[AggregateBucket]:
    """Ascending by key string (ISO dates sort chronologically)."""
    return sorted(buckets, key=lambda b: b.key)


def rank_buckets(
    buckets: Iterable[AggregateBucket], top_n: int | None = None
) -> list[AggregateBucket]:
    """Descending revenue, ties broken by key."""
    ranked = sorted(buckets, key=lambda b: (-b.revenue, b.key))
    return ranked[:top_n] if top_n is not None else ranked


def daily_series(records: Iterable[CampaignRecord]) -> list[AggregateBucket]:
    return sort_by_key(aggregate(records, Dimension.DATE).values())


def weekly_series(records: Iterable[CampaignRecord]) -> list[AggregateBucket]:
    return sort_by_key(aggregate(records, Dimension.WEEK).values())


def dimension_table(
    records: Iterable[CampaignRecord],
    dimension: Dimension | str,
    top_n: int | None = None,
) -> list[AggregateBucket]:
    """Table rows for a dimension.

    Time dimensions come back in chronological order, everything else ranked
    by revenue.
    """
    dimension = Dimension(dimension)
    buckets = aggregate(records, dimension).values()
    if dimension in TIME_DIMENSIONS:
        ordered = sort_by_key(buckets)
        return ordered[:top_n] if top_n is not None else ordered
    return rank_buckets(buckets, top_n)


# =============================================================================
# CHART SHAPES
# =============================================================================


def chart_series(buckets: list[AggregateBucket], with_trend: bool = False) -> ChartSeries:
    """Parallel arrays in bucket order, optionally with an impressions trend."""
    impressions = [b.impressions for b in buckets]
    return ChartSeries(
        labels=[b.key for b in buckets],
        impressions=impressions,
        clicks=[b.clicks for b in buckets],
        revenue=[b.revenue for b in buckets],
        conversions=[b.total_conversions for b in buckets],
        ctr=[b.ctr for b in buckets],
        trend=detect_trend(impressions) if with_trend else "stable",
    )


def audience_comparison(records: Iterable[CampaignRecord]) -> AudienceComparison:
    records = list(records)
    return AudienceComparison(
        first_party=calculate_metrics(
            r for r in records if r.audience_type == AudienceType.FIRST_PARTY
        ),
        converged=calculate_metrics(
            r for r in records if r.audience_type == AudienceType.CONVERGED
        ),
    )
