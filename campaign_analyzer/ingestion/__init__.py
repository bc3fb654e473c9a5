from .detector import detect_platform
from .loader import DataIngestionPipeline, IngestResult
from .normalizer import normalize_rows
from .parser import parse_csv, parse_headers, read_frame
from .registry import RuleRegistry, load_registry

__all__ = [
    "DataIngestionPipeline",
    "IngestResult",
    "RuleRegistry",
    "detect_platform",
    "load_registry",
    "normalize_rows",
    "parse_csv",
    "parse_headers",
    "read_frame",
]
