"""Reusable Polars expressions for bucket aggregation."""

import polars as pl

SUM_COLUMNS = (
    "impressions",
    "clicks",
    "revenue",
    "viewable_impressions",
    "post_click_conversions",
    "post_view_conversions",
    "total_conversions",
)


# =============================================================================
# SUMMATION
# =============================================================================


def bucket_sums_expr() -> list[pl.Expr]:
    """Running sums for every additive metric, plus the row count."""
    return [pl.col(c).sum().alias(c) for c in SUM_COLUMNS] + [
        pl.len().cast(pl.Int64).alias("record_count")
    ]


def merge_sums_expr() -> list[pl.Expr]:
    """Sum already-summed buckets, record counts included."""
    return [pl.col(c).sum().alias(c) for c in (*SUM_COLUMNS, "record_count")]


# =============================================================================
# DERIVED RATIOS
# =============================================================================


def safe_ratio_expr(numerator: str, denominator: str, scale: float = 1.0) -> pl.Expr:
    """numerator / denominator * scale, or 0 when the denominator is 0."""
    return (
        pl.when(pl.col(denominator) > 0)
        .then(pl.col(numerator) / pl.col(denominator) * scale)
        .otherwise(0.0)
        .cast(pl.Float64)
    )


def derived_ratio_exprs() -> list[pl.Expr]:
    """Ratios computed from bucket sums. Apply only after summation.

    Conversion rates are click-based throughout.
    """
    return [
        safe_ratio_expr("clicks", "impressions", 100).alias("ctr"),
        safe_ratio_expr("revenue", "impressions", 1000).alias("cpm"),
        safe_ratio_expr("revenue", "clicks").alias("cpc"),
        safe_ratio_expr("total_conversions", "clicks", 100).alias("conversion_rate"),
        safe_ratio_expr("post_click_conversions", "clicks", 100).alias(
            "post_click_conversion_rate"
        ),
        safe_ratio_expr("post_view_conversions", "clicks", 100).alias(
            "post_view_conversion_rate"
        ),
        safe_ratio_expr("revenue", "total_conversions").alias("cpa"),
        safe_ratio_expr("revenue", "post_click_conversions").alias("cpa_post_click"),
        safe_ratio_expr("revenue", "post_view_conversions").alias("cpa_post_view"),
        safe_ratio_expr("viewable_impressions", "impressions", 100).alias("viewability"),
    ]
