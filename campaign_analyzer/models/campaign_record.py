"""Canonical campaign record shared by every source platform."""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Source platform of an export file."""

    DV360 = "dv360"
    GOOGLE_ADS = "google-ads"
    SOCIAL = "social"


class AudienceType(str, Enum):
    """Advertiser classification of the targeting data source."""

    FIRST_PARTY = "1st Party"
    THIRD_PARTY = "3rd Party"
    CONVERGED = "Converged"
    OTHER = "Other"


class OptimizationType(str, Enum):
    GA = "GA"
    FL = "FL"
    UNKNOWN = "Unknown"


class BusinessType(str, Enum):
    B2B = "B2B"
    B2C = "B2C"
    UNKNOWN = "Unknown"


# Largest count an Int64 column holds
MAX_COUNT = 2**63 - 1


class CampaignRecord(BaseModel):
    """Single normalized row from any platform export.

    Counts are non-negative integers, money and conversions non-negative
    floats (fractional attribution is allowed). Records are immutable once
    built; derived dimensions are filled in by the normalizer.
    """

    model_config = ConfigDict(frozen=True)

    # Provenance
    date: datetime.date
    platform: Platform
    source_file: str

    # Source identifiers
    campaign: str
    line_item: str = ""
    creative: str = ""

    # Delivery metrics
    impressions: int = Field(default=0, ge=0, le=MAX_COUNT)
    clicks: int = Field(default=0, ge=0, le=MAX_COUNT)
    viewable_impressions: int = Field(default=0, ge=0, le=MAX_COUNT)
    revenue: float = Field(default=0.0, ge=0)

    # Conversions
    post_click_conversions: float = Field(default=0.0, ge=0)
    post_view_conversions: float = Field(default=0.0, ge=0)
    total_conversions: float = Field(default=0.0, ge=0)

    # Derived dimensions
    audience_type: AudienceType = AudienceType.OTHER
    audience_segment: str = "Unknown"
    campaign_type: str = "Unknown"
    optimized_targeting: bool = False
    custom_bidding: bool = False
    optimization_type: OptimizationType = OptimizationType.UNKNOWN
    business_type: BusinessType = BusinessType.UNKNOWN

    # Floodlight (DV360 only)
    floodlight_activity: Optional[str] = None
    floodlight_group: Optional[str] = None
    floodlight_tag: Optional[str] = None

    # Extracted identifiers
    campaign_id: Optional[str] = None
    amp_id: Optional[str] = None
    audience_name: Optional[str] = None
