"""Tests for the ingestion module."""

from datetime import date
from pathlib import Path

import polars as pl
import pytest

from campaign_analyzer.exceptions import (
    FileReadError,
    RegistryLoadError,
    UnsupportedFileError,
)
from campaign_analyzer.ingestion import (
    DataIngestionPipeline,
    detect_platform,
    load_registry,
    normalize_rows,
    parse_csv,
    parse_headers,
    read_frame,
)
from campaign_analyzer.ingestion.cleaner import (
    apply_cleaning,
    clean_date_column,
    clean_float_column,
    clean_integer_column,
    drop_empty_cells,
)
from campaign_analyzer.models import AudienceType, Platform


# =============================================================================
# FIXTURES
# =============================================================================


DV360_CSV = (
    "Date,Campaign,Line Item,Impressions,Clicks,Revenue (Adv Currency)\n"
    "2024-01-01,Camp_Search_A,1P_Segment_X,1000,50,25.00\n"
    "2024-01-02,Camp_Search_A,1P_Segment_X,2000,100,50.00"
)

GOOGLE_ADS_CSV = (
    "Date,Campaign,Campaign ID,Ad Group,Impressions,Clicks,Cost,Conversions,View-through Conversions\n"
    "2024-01-03,Brand_B2B_Search,98765,CRM_List,500,25,1250.00,3,2\n"
)

SOCIAL_CSV = (
    "Date,Campaign,Ad Set Name,Reach,Link Clicks,Amount Spent,Results\n"
    "01/05/2024,Spring_Sale,Lookalike_Buyers,4000,80,120.50,6\n"
    "Totals,,,4000,80,120.50,6\n"
)


@pytest.fixture
def pipeline() -> DataIngestionPipeline:
    return DataIngestionPipeline()


# =============================================================================
# CSV PARSER
# =============================================================================


class TestParseCsv:
    """Tests for parse_csv()."""

    def test_row_count_and_keys(self) -> None:
        """Should return one record per data line, each keyed by every header."""
        rows = parse_csv(DV360_CSV)
        assert len(rows) == 2
        assert all(len(r) == 6 for r in rows)
        assert rows[0]["Line Item"] == "1P_Segment_X"

    def test_missing_trailing_cells(self) -> None:
        """Missing trailing cells should map to empty strings."""
        rows = parse_csv("a,b,c\n1\n")
        assert rows == [{"a": "1", "b": "", "c": ""}]

    def test_extra_cells_ignored(self) -> None:
        """Cells beyond the header width should be dropped."""
        rows = parse_csv("a,b\n1,2,3,4")
        assert rows == [{"a": "1", "b": "2"}]

    def test_footer_and_blank_lines_dropped(self) -> None:
        """Totals and Report Description lines should not become records."""
        text = "a,b\n1,2\n\n   \nTotals,3\n  Report Description: weekly\n"
        assert parse_csv(text) == [{"a": "1", "b": "2"}]

    def test_empty_input(self) -> None:
        """Empty or footer-only input should yield no records."""
        assert parse_csv("") == []
        assert parse_csv("Totals,1,2\n") == []

    def test_header_only(self) -> None:
        assert parse_csv("a,b,c\n") == []

    def test_crlf_and_bom(self) -> None:
        """Should split on any line break and strip a leading BOM."""
        rows = parse_csv("\ufeffa,b\r\n1,2\r3,4")
        assert rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]

    def test_no_quote_handling(self) -> None:
        """Quoted commas are split like any other comma."""
        rows = parse_csv('a,b\n"x,y",z')
        assert rows == [{"a": '"x', "b": 'y"'}]

    def test_parse_headers(self) -> None:
        assert parse_headers(" Date , Campaign \n1,2") == ["Date", "Campaign"]
        assert parse_headers("") == []

    def test_duplicate_headers_suffixed(self) -> None:
        """Repeated header names should each keep their own column."""
        rows = parse_csv("Date,Campaign,Clicks,Clicks\n2024-01-01,C,1,2\n")
        assert rows == [{"Date": "2024-01-01", "Campaign": "C", "Clicks": "1", "Clicks_1": "2"}]
        assert parse_headers("a,a,a\n") == ["a", "a_1", "a_2"]

    def test_read_frame_all_strings(self) -> None:
        """Should read every column as Utf8 without type inference."""
        df = read_frame("Date,Impressions\n2024-01-01, 0012 \n")
        assert dict(df.schema) == {"Date": pl.Utf8, "Impressions": pl.Utf8}
        assert df.to_dicts() == [{"Date": "2024-01-01", "Impressions": "0012"}]


# =============================================================================
# PLATFORM DETECTOR
# =============================================================================


class TestDetectPlatform:
    """Tests for detect_platform()."""

    @pytest.mark.parametrize(
        "headers,expected",
        [
            (["Date", "Line Item", "Impressions"], Platform.DV360),
            (["Date", "Insertion Order"], Platform.DV360),
            (["Date", "Campaign ID", "Ad Group"], Platform.GOOGLE_ADS),
            (["Date", "Avg. CPC"], Platform.GOOGLE_ADS),
            (["Date", "Reach", "Amount Spent"], Platform.SOCIAL),
            (["Date", "Ad Set Name"], Platform.SOCIAL),
        ],
    )
    def test_header_rules(self, headers: list[str], expected: Platform) -> None:
        """Should classify by header keywords."""
        assert detect_platform(headers, "export.csv") == expected

    def test_filename_rules(self) -> None:
        """Filename keywords should classify when headers are neutral."""
        headers = ["Date", "Campaign", "Impressions"]
        assert detect_platform(headers, "Google_Ads_Jan.csv") == Platform.GOOGLE_ADS
        assert detect_platform(headers, "facebook_export.csv") == Platform.SOCIAL
        assert detect_platform(headers, "dv360.csv") == Platform.DV360

    def test_priority_order(self) -> None:
        """The first matching rule should win when several match."""
        headers = ["Line Item", "Ad Group", "Reach"]
        assert detect_platform(headers, "") == Platform.DV360
        assert detect_platform(["Ad Group", "Reach"], "") == Platform.GOOGLE_ADS

    def test_default(self) -> None:
        """Unrecognized input should fall back to dv360."""
        assert detect_platform(["Date", "Campaign"], "report.csv") == Platform.DV360
        assert detect_platform([], "") == Platform.DV360
        assert detect_platform(None, None) == Platform.DV360


# =============================================================================
# CLEANER
# =============================================================================


class TestCleaner:
    """Tests for the column cleaning expressions."""

    @staticmethod
    def _clean(expr_fn, values: list[str]) -> list:
        df = pl.DataFrame({"v": values}, schema={"v": pl.Utf8})
        return df.select(expr_fn("v"))["v"].to_list()

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("25.00", 25.0),
            ("1,234.5", 1234.5),
            ("$99", 99.0),
            ("12 PLN", 12.0),
            ("n/a", 0.0),
            ("-5", 0.0),
            ("nan", 0.0),
            ("inf", 0.0),
        ],
    )
    def test_clean_float_column(self, raw: str, expected: float) -> None:
        assert self._clean(clean_float_column, [raw]) == [pytest.approx(expected)]

    def test_empty_cells_stay_null(self) -> None:
        """Empty cells should stay null so fallback columns can be used."""
        assert self._clean(clean_float_column, ["", "  "]) == [None, None]
        assert self._clean(clean_integer_column, [""]) == [None]

    def test_clean_integer_column(self) -> None:
        """Should accept thousands separators and trailing .0."""
        assert self._clean(clean_integer_column, ["1,234", "12.0", "abc", "-3"]) == [
            1234,
            12,
            0,
            0,
        ]

    def test_integer_beyond_int64_is_zero(self) -> None:
        """Counts too large for Int64 should clean to 0 instead of failing later."""
        assert self._clean(clean_integer_column, ["10000000000000000000", "7"]) == [0, 7]

    @pytest.mark.parametrize(
        "raw",
        ["2024-01-05", "2024/01/05", "01/05/2024", "1/5/2024", "01/05/24", "05.01.2024",
         "20240105", "Jan 05, 2024", "2024-01-05 13:45:00", "2024-01-05T13:45:00",
         "2024-01-05 13:45", "01/05/2024 13:45"],
    )
    def test_clean_date_formats(self, raw: str) -> None:
        assert self._clean(clean_date_column, [raw]) == [date(2024, 1, 5)]

    def test_clean_date_invalid(self) -> None:
        assert self._clean(clean_date_column, ["yesterday", "null", ""]) == [None, None, None]

    def test_apply_cleaning_skips_missing_columns(self) -> None:
        """Should clean only the columns the frame has."""
        df = pl.DataFrame({"Clicks": ["1,000"], "Cost": ["$5"]})
        out = apply_cleaning(df, integer_cols=["Clicks", "Reach"], float_cols=["Cost", "Spend"])
        assert out.columns == ["Clicks", "Cost"]
        assert out.row(0) == (1000, 5.0)

    def test_drop_empty_cells(self) -> None:
        row = {"a": "x", "b": "", "c": None, "d": 0, "e": "  "}
        assert drop_empty_cells(row) == {"a": "x", "d": 0}


# =============================================================================
# FIELD NORMALIZER
# =============================================================================


class TestNormalizeRows:
    """Tests for normalize_rows()."""

    def test_dv360_scenario(self) -> None:
        """Should build two 1st Party dv360 records with derived dimensions."""
        records = normalize_rows(parse_csv(DV360_CSV), Platform.DV360, "dv360.csv")

        assert len(records) == 2
        first = records[0]
        assert first.platform == Platform.DV360
        assert first.source_file == "dv360.csv"
        assert first.date == date(2024, 1, 1)
        assert first.impressions == 1000
        assert first.clicks == 50
        assert first.revenue == pytest.approx(25.0)
        assert first.audience_type == AudienceType.FIRST_PARTY
        assert first.audience_segment == "1P_Segment"
        assert first.campaign_type == "Search"

    def test_dv360_fallbacks(self) -> None:
        """Viewable impressions default to impressions, conversions to 0."""
        record = normalize_rows(parse_csv(DV360_CSV), Platform.DV360)[0]
        assert record.viewable_impressions == 1000
        assert record.total_conversions == 0.0
        assert record.floodlight_activity is None

    def test_empty_impressions(self) -> None:
        """An empty numeric cell should normalize to 0 without raising."""
        text = (
            "Date,Campaign,Line Item,Impressions,Clicks\n"
            "2024-01-01,Camp,LI,,7\n"
        )
        records = normalize_rows(parse_csv(text), Platform.DV360)
        assert len(records) == 1
        assert records[0].impressions == 0
        assert records[0].clicks == 7

    def test_required_fields(self) -> None:
        """Rows missing date, campaign or dv360 line item should be dropped."""
        text = (
            "Date,Campaign,Line Item,Impressions\n"
            "2024-01-01,Camp,LI,10\n"
            ",Camp,LI,10\n"
            "2024-01-01,null,LI,10\n"
            "2024-01-01,Camp,,10\n"
        )
        records = normalize_rows(parse_csv(text), Platform.DV360)
        assert len(records) == 1

    def test_line_item_optional_outside_dv360(self) -> None:
        text = "Date,Campaign,Impressions\n2024-01-01,Camp,10\n"
        records = normalize_rows(parse_csv(text), Platform.GOOGLE_ADS)
        assert len(records) == 1
        assert records[0].audience_segment == "Camp"

    def test_bad_date_dropped(self) -> None:
        """Rows with an unparseable date should be dropped."""
        text = (
            "Date,Campaign,Line Item,Impressions\n"
            "2024-01-01,Camp,LI,10\n"
            "someday,Camp,LI,10\n"
        )
        records = normalize_rows(parse_csv(text), Platform.DV360)
        assert [r.date for r in records] == [date(2024, 1, 1)]

    def test_google_ads_mapping(self) -> None:
        """Should map cost, ad group and sum conversions when no total exists."""
        records = normalize_rows(parse_csv(GOOGLE_ADS_CSV), Platform.GOOGLE_ADS)
        record = records[0]
        assert record.revenue == pytest.approx(1250.0)
        assert record.line_item == "CRM_List"
        assert record.post_click_conversions == 3
        assert record.post_view_conversions == 2
        assert record.total_conversions == 5
        assert record.viewable_impressions == 500
        assert record.campaign_id == "98765"
        assert record.audience_type == AudienceType.FIRST_PARTY
        assert record.campaign_type == "Brand"
        assert record.business_type.value == "B2B"

    def test_google_ads_direct_total(self) -> None:
        text = (
            "Date,Campaign,Conversions,View-through Conversions,Total Conversions\n"
            "2024-01-03,Camp,3,2,9\n"
        )
        record = normalize_rows(parse_csv(text), Platform.GOOGLE_ADS)[0]
        assert record.total_conversions == 9

    def test_social_fallback_chains(self) -> None:
        """Reach and Link Clicks should stand in for missing columns."""
        records = normalize_rows(parse_csv(SOCIAL_CSV), Platform.SOCIAL, "social.csv")
        assert len(records) == 1
        record = records[0]
        assert record.date == date(2024, 1, 5)
        assert record.impressions == 4000
        assert record.clicks == 80
        assert record.revenue == pytest.approx(120.5)
        assert record.total_conversions == 6
        assert record.audience_type == AudienceType.CONVERGED

    def test_first_non_empty_column_wins(self) -> None:
        """An empty preferred column should fall through to the next alias."""
        text = (
            "Date,Campaign,Impressions,Reach\n"
            "2024-01-05,Camp,,300\n"
        )
        record = normalize_rows(parse_csv(text), Platform.SOCIAL)[0]
        assert record.impressions == 300

    def test_minute_precision_datetimes(self) -> None:
        """Datetimes without seconds should parse to their calendar date."""
        text = (
            "Date,Campaign,Line Item,Impressions\n"
            "2024-01-05 13:45,Camp,LI,10\n"
            "1/5/2024,Camp,LI,20\n"
            "01/06/2024 09:30,Camp,LI,30\n"
        )
        records = normalize_rows(parse_csv(text), Platform.DV360)
        assert [r.date for r in records] == [
            date(2024, 1, 5),
            date(2024, 1, 5),
            date(2024, 1, 6),
        ]

    def test_count_beyond_int64(self) -> None:
        """An out-of-range count should clean to 0 and keep the row."""
        text = (
            "Date,Campaign,Line Item,Impressions,Clicks\n"
            "2024-01-01,Camp,LI,10000000000000000000,4\n"
        )
        records = normalize_rows(parse_csv(text), Platform.DV360)
        assert len(records) == 1
        assert records[0].impressions == 0
        assert records[0].clicks == 4

    def test_accepts_frame(self) -> None:
        """Should normalize the frame read_frame returns."""
        records = normalize_rows(read_frame(DV360_CSV), Platform.DV360)
        assert [r.impressions for r in records] == [1000, 2000]

    def test_missing_required_column(self) -> None:
        """A dv360 export without a Line Item column yields no records."""
        text = "Date,Campaign,Impressions\n2024-01-01,Camp,10\n"
        assert normalize_rows(parse_csv(text), Platform.DV360) == []
        assert normalize_rows([], Platform.DV360) == []

    def test_floodlight_columns(self) -> None:
        text = (
            "Date,Campaign,Line Item,Floodlight Activity Name,Floodlight Activity Group,Total Conversions\n"
            "2024-01-01,Camp,LI,Online Purchase,Sales,4\n"
        )
        record = normalize_rows(parse_csv(text), Platform.DV360)[0]
        assert record.floodlight_activity == "Online Purchase"
        assert record.floodlight_group == "Sales"
        assert record.total_conversions == 4


# =============================================================================
# PIPELINE
# =============================================================================


class TestDataIngestionPipeline:
    """Tests for DataIngestionPipeline."""

    def test_ingest_text(self, pipeline: DataIngestionPipeline) -> None:
        result = pipeline.ingest_text(DV360_CSV, "january.csv")
        assert result.platform == Platform.DV360
        assert result.raw_rows == 2
        assert len(result.records) == 2
        assert result.dropped_rows == 0

    def test_ingest_detects_social(self, pipeline: DataIngestionPipeline) -> None:
        result = pipeline.ingest_text(SOCIAL_CSV, "export.csv")
        assert result.platform == Platform.SOCIAL

    def test_ingest_file(self, pipeline: DataIngestionPipeline, tmp_path: Path) -> None:
        """Should read a CSV from disk, BOM included."""
        path = tmp_path / "google_ads.csv"
        path.write_bytes(b"\xef\xbb\xbf" + GOOGLE_ADS_CSV.encode("utf-8"))
        result = pipeline.ingest(path)
        assert result.platform == Platform.GOOGLE_ADS
        assert result.source_file == "google_ads.csv"
        assert len(result.records) == 1

    def test_rejects_non_csv(self, pipeline: DataIngestionPipeline, tmp_path: Path) -> None:
        path = tmp_path / "report.xlsx"
        path.write_bytes(b"not a csv")
        with pytest.raises(UnsupportedFileError):
            pipeline.ingest(path)

    def test_missing_file(self, pipeline: DataIngestionPipeline, tmp_path: Path) -> None:
        with pytest.raises(FileReadError):
            pipeline.ingest(tmp_path / "missing.csv")

    def test_undecodable_bytes(self, pipeline: DataIngestionPipeline) -> None:
        with pytest.raises(FileReadError, match="not UTF-8"):
            pipeline.ingest_bytes(b"\xff\xfe\xfa", "broken.csv")

    def test_empty_file(self, pipeline: DataIngestionPipeline) -> None:
        result = pipeline.ingest_text("", "empty.csv")
        assert result.records == []
        assert result.raw_rows == 0


class TestRegistry:
    """Tests for load_registry()."""

    def test_default_registry_order(self) -> None:
        registry = load_registry()
        assert [r.platform for r in registry.detection] == [
            Platform.DV360,
            Platform.GOOGLE_ADS,
            Platform.SOCIAL,
        ]
        assert registry.footer_markers == ["Totals", "Report Description"]

    def test_missing_registry(self, tmp_path: Path) -> None:
        with pytest.raises(RegistryLoadError):
            load_registry(tmp_path / "nope.yaml")

    def test_invalid_registry(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("detection: 5\n")
        with pytest.raises(RegistryLoadError):
            load_registry(path)
