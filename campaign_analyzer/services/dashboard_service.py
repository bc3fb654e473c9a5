"""Dashboard service - orchestrates ingestion, the record store and analytics."""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from ..analytics import (
    AggregateBucket,
    AudienceComparison,
    ChartSeries,
    Dimension,
    FilterCriteria,
    FloodlightSummary,
    MetricSummary,
)
from ..analytics import aggregator, filters
from ..analytics.floodlight import floodlight_summary
from ..exceptions import IngestionError
from ..ingestion import DataIngestionPipeline, IngestResult
from ..ingestion.dimensions import truncate
from ..models.campaign_record import AudienceType, CampaignRecord
from .store import CampaignStore


@dataclass
class DashboardSettings:
    """Configurable display limits."""

    segment_top_n: int = 10
    table_label_chars: int = 25
    chart_label_chars: int = 15
    max_workers: int = 4


@dataclass(frozen=True)
class FileError:
    """A file that contributed no records."""

    filename: str
    message: str


@dataclass
class LoadReport:
    """Outcome of loading a batch of files."""

    results: list[IngestResult] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)

    @property
    def records_added(self) -> int:
        return sum(len(r.records) for r in self.results)

    @property
    def ok(self) -> bool:
        return not self.errors


class DashboardService:
    """Service behind the Streamlit dashboard.

    Orchestrates:
    1. Ingestion of one or more platform CSV exports into the store
    2. Filtering of the stored records
    3. Aggregation into tables, chart series and summaries

    Usage:
        service = DashboardService()
        report = service.load_files([Path("dv360.csv"), Path("social.csv")])
        records = service.get_filtered_data(FilterCriteria(platform="dv360"))
        metrics = service.calculate_metrics(records)
    """

    def __init__(
        self,
        registry_path: Path | None = None,
        settings: DashboardSettings | None = None,
        store: CampaignStore | None = None,
    ):
        self.pipeline = DataIngestionPipeline(registry_path)
        self.settings = settings or DashboardSettings()
        self.store = store if store is not None else CampaignStore()

    # =========================================================================
    # LOADING
    # =========================================================================

    def load_text(self, text: str, filename: str) -> IngestResult:
        """Ingest already-decoded CSV text and append its records."""
        result = self.pipeline.ingest_text(text, filename)
        self.store.append(result.records, filename)
        return result

    def load_files(self, paths: Iterable[Path]) -> LoadReport:
        """Ingest files from disk in a thread pool.

        A file that fails is reported and skipped; the others still load.
        """
        paths = [Path(p) for p in paths]
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            outcomes = list(pool.map(self._ingest_path, paths))
        return self._collect(outcomes)

    def load_uploads(self, uploads: Iterable[tuple[str, bytes]]) -> LoadReport:
        """Ingest (filename, content) pairs, e.g. from a browser upload widget."""
        return self._collect(
            [self._ingest_upload(name, data) for name, data in uploads]
        )

    def reset(self) -> None:
        self.store.reset()

    def _ingest_path(self, path: Path) -> IngestResult | FileError:
        try:
            return self.pipeline.ingest(path)
        except IngestionError as e:
            logger.error("[ingest] {} failed: {}", path.name, e)
            return FileError(path.name, str(e))

    def _ingest_upload(self, filename: str, data: bytes) -> IngestResult | FileError:
        try:
            return self.pipeline.ingest_bytes(data, filename)
        except IngestionError as e:
            logger.error("[ingest] {} failed: {}", filename, e)
            return FileError(filename, str(e))

    def _collect(self, outcomes: list[IngestResult | FileError]) -> LoadReport:
        report = LoadReport()
        for outcome in outcomes:
            if isinstance(outcome, FileError):
                report.errors.append(outcome)
                continue
            self.store.append(outcome.records, outcome.source_file)
            report.results.append(outcome)
        return report

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def records(self) -> tuple[CampaignRecord, ...]:
        return self.store.snapshot()

    def get_filtered_data(self, criteria: FilterCriteria | None = None) -> list[CampaignRecord]:
        return filters.filter_records(self.store.snapshot(), criteria)

    def available_values(self, field_name: str) -> list[Any]:
        return filters.available_values(self.store.snapshot(), field_name)

    def calculate_metrics(self, records: Iterable[CampaignRecord]) -> MetricSummary:
        return aggregator.calculate_metrics(records)

    def dimension_table(
        self,
        records: Iterable[CampaignRecord],
        dimension: Dimension | str,
        top_n: int | None = None,
    ) -> list[dict[str, Any]]:
        """Table rows for a dimension, with long labels truncated for display."""
        rows = []
        for bucket in aggregator.dimension_table(records, dimension, top_n):
            row = bucket.to_dict()
            row["dimension_value"] = truncate(
                row["dimension_value"], self.settings.table_label_chars
            )
            rows.append(row)
        return rows

    def daily_series(self, records: Iterable[CampaignRecord]) -> ChartSeries:
        return aggregator.chart_series(aggregator.daily_series(records), with_trend=True)

    def weekly_series(self, records: Iterable[CampaignRecord]) -> ChartSeries:
        return aggregator.chart_series(aggregator.weekly_series(records))

    def segment_table(
        self, records: Iterable[CampaignRecord], audience_type: AudienceType | str
    ) -> list[AggregateBucket]:
        """Top audience segments by revenue within one audience type."""
        audience_type = AudienceType(audience_type)
        subset = [r for r in records if r.audience_type == audience_type]
        buckets = aggregator.aggregate(subset, Dimension.AUDIENCE_SEGMENT).values()
        return aggregator.rank_buckets(buckets, self.settings.segment_top_n)

    def segment_chart(
        self, records: Iterable[CampaignRecord], audience_type: AudienceType | str
    ) -> ChartSeries:
        """Chart series of the top segments, labels shortened for axis display."""
        series = aggregator.chart_series(self.segment_table(records, audience_type))
        labels = [truncate(label, self.settings.chart_label_chars) for label in series.labels]
        return ChartSeries(
            labels=labels,
            impressions=series.impressions,
            clicks=series.clicks,
            revenue=series.revenue,
            conversions=series.conversions,
            ctr=series.ctr,
            trend=series.trend,
        )

    def floodlight_summary(self, records: Iterable[CampaignRecord]) -> FloodlightSummary:
        return floodlight_summary(records, self.pipeline.registry)

    def audience_comparison(self, records: Iterable[CampaignRecord]) -> AudienceComparison:
        return aggregator.audience_comparison(records)

    def generate_summary_dict(self, criteria: FilterCriteria | None = None) -> dict[str, Any]:
        """Filtered headline metrics and tables as plain dicts, for export or display."""
        records = self.get_filtered_data(criteria)
        metrics = self.calculate_metrics(records)
        return {
            "record_count": len(records),
            "metrics": asdict(metrics),
            "daily": [b.to_dict() for b in aggregator.daily_series(records)],
            "weekly": [b.to_dict() for b in aggregator.weekly_series(records)],
            "audience_types": self.dimension_table(records, Dimension.AUDIENCE_TYPE),
            "campaign_types": self.dimension_table(records, Dimension.CAMPAIGN_TYPE),
            "platforms": self.dimension_table(records, Dimension.PLATFORM),
        }
