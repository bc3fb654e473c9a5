"""Main data ingestion pipeline."""

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from ..exceptions import FileReadError, UnsupportedFileError
from ..models.campaign_record import CampaignRecord, Platform
from .detector import detect_platform
from .normalizer import normalize_rows
from .parser import parse_headers, read_frame
from .registry import load_registry

SUPPORTED_SUFFIXES = (".csv",)


@dataclass(frozen=True)
class IngestResult:
    """Outcome of ingesting one export file."""

    source_file: str
    platform: Platform
    raw_rows: int
    records: list[CampaignRecord] = field(default_factory=list)

    @property
    def dropped_rows(self) -> int:
        return self.raw_rows - len(self.records)


class DataIngestionPipeline:
    """Pipeline for parsing, detecting, and normalizing platform exports.

    Usage:
        pipeline = DataIngestionPipeline()
        result = pipeline.ingest(Path("exports/dv360_january.csv"))
        result.records  # list[CampaignRecord]
    """

    def __init__(self, registry_path: Path | None = None):
        self.registry = load_registry(registry_path)

    def ingest(self, file_path: Path) -> IngestResult:
        """Full pipeline for a file on disk: Read -> Parse -> Detect -> Normalize.

        Raises:
            UnsupportedFileError: If the file is not a .csv
            FileReadError: If the file cannot be read or decoded
        """
        file_path = Path(file_path)
        self._check_suffix(file_path.name)
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise FileReadError(file_path.name, str(e)) from e
        return self.ingest_bytes(data, file_path.name)

    def ingest_bytes(self, data: bytes, filename: str) -> IngestResult:
        """Ingest uploaded file content.

        Raises:
            UnsupportedFileError: If filename is not a .csv
            FileReadError: If the content is not UTF-8 text
        """
        self._check_suffix(filename)
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FileReadError(filename, f"not UTF-8 text ({e.reason})") from e
        return self.ingest_text(text, filename)

    def ingest_text(self, text: str, filename: str) -> IngestResult:
        """Parse -> Detect -> Normalize already-decoded CSV text."""
        footer_markers = self.registry.footer_markers
        df = read_frame(text, footer_markers)
        headers = parse_headers(text, footer_markers)

        platform = detect_platform(headers, filename, self.registry)
        logger.info(
            "[ingest] {}: {} rows, detected platform {}", filename, len(df), platform.value
        )

        if df.is_empty():
            logger.warning("[ingest] {}: no data rows", filename)
            return IngestResult(source_file=filename, platform=platform, raw_rows=0)

        records = normalize_rows(df, platform, filename, self.registry)
        logger.info("[ingest] {}: added {} records", filename, len(records))
        return IngestResult(
            source_file=filename,
            platform=platform,
            raw_rows=len(df),
            records=records,
        )

    def _check_suffix(self, filename: str) -> None:
        if not filename.lower().endswith(SUPPORTED_SUFFIXES):
            raise UnsupportedFileError(filename)
