"""Derived dimensions - classify free-text source fields.

Every function here is total: ``None`` or non-string input returns the
dimension's default instead of raising.
"""

import re
from typing import Any

from ..models.campaign_record import (
    AudienceType,
    BusinessType,
    OptimizationType,
    Platform,
)
from .registry import RuleRegistry, TokenRule, load_registry

TOKEN_SPLIT = re.compile(r"[_\-\s]+")


def tokenize(name: str) -> list[str]:
    """Split a name on underscores, dashes and whitespace."""
    return [t for t in TOKEN_SPLIT.split(name.strip()) if t]


def truncate(text: str, max_chars: int) -> str:
    """Cap text at max_chars, appending an ellipsis when cut."""
    return text[:max_chars] + "..." if len(text) > max_chars else text


def _contains_any(text: str, keywords: list[str]) -> bool:
    return any(k in text for k in keywords)


def _matches(name: Any, rule: TokenRule) -> bool:
    if not isinstance(name, str) or not name:
        return False
    lowered = name.lower()
    if _contains_any(lowered, rule.phrases):
        return True
    tokens = {t.lower() for t in tokenize(name)}
    return any(t in tokens for t in rule.tokens)


# =============================================================================
# AUDIENCE
# =============================================================================


def audience_type(
    name: Any,
    platform: Platform | str = Platform.DV360,
    registry: RuleRegistry | None = None,
) -> AudienceType:
    """Classify a line item / ad group / ad set name into an audience type.

    Keyword sets are per platform; the first matching rule wins.
    """
    if not isinstance(name, str) or not name:
        return AudienceType.OTHER

    registry = registry or load_registry()
    try:
        platform = Platform(platform)
    except ValueError:
        return AudienceType.OTHER

    lowered = name.lower()
    for rule in registry.audience_rules.get(platform, []):
        if _contains_any(lowered, rule.keywords):
            return rule.audience_type
    return AudienceType.OTHER


def audience_segment(line_item: Any, registry: RuleRegistry | None = None) -> str:
    """Pull a short segment label out of a line item name.

    Takes a window of up to three tokens around the first token holding an
    audience keyword. Falls back to the stripped name capped at 30 chars.
    """
    if not isinstance(line_item, str):
        return "Unknown"

    registry = registry or load_registry()
    segment = line_item.strip()
    if not segment:
        return "Unknown"

    lowered = segment.lower()
    tokens = tokenize(segment)
    for keyword in registry.segment_keywords:
        if keyword not in lowered:
            continue
        idx = next(
            (i for i, t in enumerate(tokens) if keyword in t.lower()), None
        )
        # A 1P token at the very end carries no segment name after it
        if idx is not None and (keyword != "1p" or idx < len(tokens) - 1):
            return "_".join(tokens[max(0, idx - 1) : idx + 2])
        break

    return truncate(segment, registry.truncation.segment_chars)


# =============================================================================
# CAMPAIGN
# =============================================================================


def campaign_type(campaign: Any, registry: RuleRegistry | None = None) -> str:
    """Pick the campaign type token out of a campaign name.

    Vocabulary words win. Otherwise the 4th token, then the 2nd, then the
    truncated name. The positional fallback assumes the
    ``Client_Market_Year_Type`` naming convention.
    """
    if not isinstance(campaign, str):
        return "Unknown"

    registry = registry or load_registry()
    name = campaign.strip()
    if not name:
        return "Unknown"

    parts = tokenize(name)
    vocabulary = set(registry.campaign_types)
    for part in parts:
        if part.lower() in vocabulary:
            return part

    if len(parts) >= 4:
        return parts[3]
    if len(parts) >= 2:
        return parts[1]
    return truncate(name, registry.truncation.campaign_type_chars)


def business_type(campaign: Any, registry: RuleRegistry | None = None) -> BusinessType:
    """B2B / B2C marker from campaign name tokens."""
    if not isinstance(campaign, str) or not campaign:
        return BusinessType.UNKNOWN

    registry = registry or load_registry()
    tokens = {t.lower() for t in tokenize(campaign)}
    for kind, markers in registry.business_types.items():
        if any(m in tokens for m in markers):
            return kind
    return BusinessType.UNKNOWN


# =============================================================================
# OPTIMIZATION FLAGS
# =============================================================================


def is_optimized_targeting(name: Any, registry: RuleRegistry | None = None) -> bool:
    registry = registry or load_registry()
    return _matches(name, registry.optimization.optimized_targeting)


def has_custom_bidding(name: Any, registry: RuleRegistry | None = None) -> bool:
    registry = registry or load_registry()
    return _matches(name, registry.optimization.custom_bidding)


def optimization_type(name: Any, registry: RuleRegistry | None = None) -> OptimizationType:
    """GA if the line item optimizes on Google Analytics goals, FL for Floodlight."""
    registry = registry or load_registry()
    if _matches(name, registry.optimization.ga):
        return OptimizationType.GA
    if _matches(name, registry.optimization.fl):
        return OptimizationType.FL
    return OptimizationType.UNKNOWN


# =============================================================================
# FLOODLIGHT
# =============================================================================


def is_order_activity(activity: Any, registry: RuleRegistry | None = None) -> bool:
    """Activity counts towards cost-per-order."""
    if not isinstance(activity, str):
        return False
    registry = registry or load_registry()
    return _contains_any(activity.lower(), registry.floodlight.order_keywords)


def is_lead_activity(activity: Any, registry: RuleRegistry | None = None) -> bool:
    """Activity counts towards cost-per-lead."""
    if not isinstance(activity, str):
        return False
    registry = registry or load_registry()
    return _contains_any(activity.lower(), registry.floodlight.lead_keywords)
