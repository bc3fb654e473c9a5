"""Platform detection from report headers and filename."""

from collections.abc import Iterable

from loguru import logger

from ..models.campaign_record import Platform
from .registry import RuleRegistry, load_registry


def detect_platform(
    headers: Iterable[str] | None,
    filename: str | None = "",
    registry: RuleRegistry | None = None,
) -> Platform:
    """Classify an export by case-insensitive keyword search.

    Rules are tried in registry order (dv360, google-ads, social); each
    matches on either the joined header string or the filename. The first
    match wins. Nothing matching falls back to the registry default (dv360).
    """
    registry = registry or load_registry()
    header_str = "|".join(h for h in (headers or []) if isinstance(h, str)).lower()
    filename_str = (filename or "").lower()

    for rule in registry.detection:
        if any(k in header_str for k in rule.header_keywords) or any(
            k in filename_str for k in rule.filename_keywords
        ):
            return rule.platform

    logger.warning(
        "[detect] Could not detect platform for {} (headers: {}), using {}",
        filename,
        header_str[:120],
        registry.default_platform.value,
    )
    return registry.default_platform
