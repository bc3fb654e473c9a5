"""Data cleaning functions using Polars expressions.

Cells arrive as stripped strings. Empty cells clean to null so column
fallback chains can skip them; anything else that fails to parse cleans
to 0.
"""

from collections.abc import Iterable

import polars as pl

# Thousands separators, currency symbols and codes, percent and whitespace
NUMERIC_NOISE = r"(?i)[,\s$€£₹%]|PLN|USD|EUR|GBP"

# Largest count an Int64 column can hold
INT64_LIMIT = 2.0**63

# US formats precede %Y/%m/%d so "01/05/24" reads as January 5
DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%y",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%Y%m%d",
    "%b %d, %Y",
)

DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%y %H:%M",
)

BLANK_VALUES = ("", "null")


def _number(col_name: str) -> pl.Expr:
    return (
        pl.col(col_name)
        .cast(pl.Utf8)
        .str.replace_all(NUMERIC_NOISE, "")
        .cast(pl.Float64, strict=False)
    )


def _is_empty(col_name: str) -> pl.Expr:
    return pl.col(col_name).cast(pl.Utf8).str.strip_chars() == ""


def clean_float_column(col_name: str) -> pl.Expr:
    """Currency/decimal cell to Float64.

    Unparseable, negative and non-finite values become 0.0.
    """
    number = _number(col_name)
    return (
        pl.when(_is_empty(col_name))
        .then(None)
        .when(number.is_finite() & (number >= 0))
        .then(number)
        .otherwise(0.0)
        .alias(col_name)
    )


def clean_integer_column(col_name: str) -> pl.Expr:
    """Count cell to Int64, accepting "1,234" and "3.0" styles.

    Values outside the Int64 range become 0 like any other bad cell.
    """
    number = _number(col_name)
    return (
        pl.when(_is_empty(col_name))
        .then(None)
        .when(number.is_finite() & (number >= 0) & (number < INT64_LIMIT))
        .then(number.floor().cast(pl.Int64, strict=False))
        .otherwise(0)
        .cast(pl.Int64)
        .alias(col_name)
    )


def clean_date_column(col_name: str) -> pl.Expr:
    """Parse a report date in any accepted export format; null if none match."""
    text = pl.col(col_name).cast(pl.Utf8).str.strip_chars()
    return pl.coalesce(
        [text.str.to_date(fmt, strict=False) for fmt in DATE_FORMATS]
        + [text.str.to_datetime(fmt, strict=False).dt.date() for fmt in DATETIME_FORMATS]
    ).alias(col_name)


def is_blank_column(col_name: str) -> pl.Expr:
    """Empty, whitespace-only, or the literal "null" some exports emit."""
    return pl.col(col_name).cast(pl.Utf8).str.strip_chars().is_in(BLANK_VALUES)


def apply_cleaning(
    df: pl.DataFrame,
    integer_cols: Iterable[str],
    float_cols: Iterable[str],
) -> pl.DataFrame:
    """Clean numeric columns. Only cleans columns that exist in the DataFrame."""
    existing_cols = set(df.columns)
    integer_cols = [c for c in integer_cols if c in existing_cols]
    exprs = [clean_integer_column(c) for c in integer_cols]
    exprs += [
        clean_float_column(c)
        for c in float_cols
        if c in existing_cols and c not in integer_cols
    ]

    if exprs:
        return df.with_columns(exprs)
    return df


def drop_empty_cells(row: dict) -> dict:
    """Remove null and empty cells so column fallback chains skip them."""
    return {
        k: v
        for k, v in row.items()
        if v is not None and not (isinstance(v, str) and not v.strip())
    }
