"""Field normalization - platform rows into canonical CampaignRecords."""

import polars as pl
from loguru import logger
from pydantic import AliasChoices, ValidationError

from ..models.campaign_record import CampaignRecord, Platform
from .cleaner import apply_cleaning, clean_date_column, drop_empty_cells, is_blank_column
from .platform_rows import FLOAT_FIELDS, INTEGER_FIELDS, PLATFORM_ROWS, PlatformRow
from .registry import RuleRegistry, load_registry

# Columns every row must carry, per platform
REQUIRED_COLUMNS: dict[Platform, tuple[str, ...]] = {
    Platform.DV360: ("Date", "Campaign", "Line Item"),
    Platform.GOOGLE_ADS: ("Date", "Campaign"),
    Platform.SOCIAL: ("Date", "Campaign"),
}


def valid_row_expr(platform: Platform) -> pl.Expr:
    """Row carries every required column with a real value."""
    return pl.all_horizontal(
        [~is_blank_column(col) for col in REQUIRED_COLUMNS[platform]]
    )


def source_columns(row_model: type[PlatformRow], field_names: tuple[str, ...]) -> list[str]:
    """CSV column names a model reads the given fields from."""
    columns: list[str] = []
    for name in field_names:
        alias = row_model.model_fields[name].validation_alias
        if isinstance(alias, AliasChoices):
            columns.extend(c for c in alias.choices if isinstance(c, str))
        else:
            columns.append(alias or name)
    return columns


def _to_frame(rows: pl.DataFrame | list[dict[str, str]]) -> pl.DataFrame:
    if isinstance(rows, pl.DataFrame):
        return rows
    if not rows:
        return pl.DataFrame()
    return pl.DataFrame(rows, schema={k: pl.Utf8 for k in rows[0]})


def normalize_rows(
    rows: pl.DataFrame | list[dict[str, str]],
    platform: Platform | str,
    source_file: str = "",
    registry: RuleRegistry | None = None,
) -> list[CampaignRecord]:
    """Map raw CSV records into canonical records.

    Rows missing required fields or carrying an unparseable date are dropped;
    the drop counts are logged, not raised.

    Args:
        rows: All-string frame from read_frame, or parsed CSV records
        platform: Detected source platform
        source_file: Originating filename, stamped on every record
        registry: Rule registry (default: bundled registry)

    Returns:
        Records in source row order.
    """
    registry = registry or load_registry()
    platform = Platform(platform)
    row_model = PLATFORM_ROWS[platform]
    df = _to_frame(rows)

    missing = [c for c in REQUIRED_COLUMNS[platform] if c not in df.columns]
    if missing:
        logger.warning(
            "[normalize] {}: missing required columns {}, no records", source_file, missing
        )
        return []

    total = len(df)
    df = df.filter(valid_row_expr(platform))
    logger.info(
        "[normalize] {}: filtered {} rows to {} valid rows ({})",
        source_file,
        total,
        len(df),
        platform.value,
    )

    df = df.with_columns(clean_date_column("Date"))
    bad_dates = df["Date"].null_count()
    if bad_dates:
        logger.warning(
            "[normalize] {}: dropped {} rows with unparseable dates", source_file, bad_dates
        )
        df = df.filter(pl.col("Date").is_not_null())

    df = apply_cleaning(
        df,
        integer_cols=source_columns(row_model, INTEGER_FIELDS),
        float_cols=source_columns(row_model, FLOAT_FIELDS),
    )

    records: list[CampaignRecord] = []
    for row in df.to_dicts():
        try:
            parsed = row_model.model_validate(drop_empty_cells(row))
        except ValidationError as e:
            logger.debug("[normalize] {}: skipped row: {}", source_file, e.errors()[:1])
            continue
        records.append(parsed.to_record(source_file, registry))
    return records
