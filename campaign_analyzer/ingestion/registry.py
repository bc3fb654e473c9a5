"""Rule registry - detection and classification vocabularies loaded from YAML."""

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import RegistryLoadError
from ..models.campaign_record import AudienceType, BusinessType, Platform

DEFAULT_REGISTRY_PATH = Path(__file__).parent.parent / "config" / "platform_registry.yaml"


class DetectionRule(BaseModel):
    """Keywords that identify one platform's export."""

    platform: Platform
    header_keywords: list[str] = Field(default_factory=list)
    filename_keywords: list[str] = Field(default_factory=list)


class AudienceRule(BaseModel):
    """Keywords that classify a line item into one audience type."""

    audience_type: AudienceType
    keywords: list[str]


class TokenRule(BaseModel):
    """Match by phrase substring or by whole token."""

    phrases: list[str] = Field(default_factory=list)
    tokens: list[str] = Field(default_factory=list)


class OptimizationRules(BaseModel):
    optimized_targeting: TokenRule = Field(default_factory=TokenRule)
    custom_bidding: TokenRule = Field(default_factory=TokenRule)
    ga: TokenRule = Field(default_factory=TokenRule)
    fl: TokenRule = Field(default_factory=TokenRule)


class FloodlightRules(BaseModel):
    order_keywords: list[str] = Field(default_factory=list)
    lead_keywords: list[str] = Field(default_factory=list)


class TruncationRules(BaseModel):
    segment_chars: int = 30
    campaign_type_chars: int = 20


class RuleRegistry(BaseModel):
    """Validated contents of platform_registry.yaml."""

    footer_markers: list[str] = Field(default_factory=list)
    detection: list[DetectionRule]
    default_platform: Platform = Platform.DV360
    audience_rules: dict[Platform, list[AudienceRule]] = Field(default_factory=dict)
    segment_keywords: list[str] = Field(default_factory=list)
    campaign_types: list[str] = Field(default_factory=list)
    optimization: OptimizationRules = Field(default_factory=OptimizationRules)
    business_types: dict[BusinessType, list[str]] = Field(default_factory=dict)
    floodlight: FloodlightRules = Field(default_factory=FloodlightRules)
    truncation: TruncationRules = Field(default_factory=TruncationRules)


def load_registry(path: Path | None = None) -> RuleRegistry:
    """Load and validate a rule registry.

    Args:
        path: YAML file to load. Defaults to the bundled registry, which is
            cached after the first load.

    Raises:
        RegistryLoadError: If the file is missing, not YAML, or invalid.
    """
    if path is None or Path(path) == DEFAULT_REGISTRY_PATH:
        return _load_default()
    return _load(Path(path))


@lru_cache(maxsize=1)
def _load_default() -> RuleRegistry:
    return _load(DEFAULT_REGISTRY_PATH)


def _load(path: Path) -> RuleRegistry:
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RegistryLoadError(f"Failed to load registry from {path}: {e}") from e

    try:
        return RuleRegistry.model_validate(raw or {})
    except ValidationError as e:
        raise RegistryLoadError(f"Invalid registry in {path}: {e}") from e
