"""Pydantic models for the per-platform export row shapes.

Each model declares its column fallback chains with ``AliasChoices``: the
first listed column present in the row wins. Rows have their empty cells
removed before validation, so "present" means "non-empty". Numeric cells
and the Date column arrive already cleaned by the normalizer.
"""

from datetime import date
from typing import ClassVar, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from . import dimensions, extractors
from .registry import RuleRegistry
from ..models.campaign_record import CampaignRecord, Platform

INTEGER_FIELDS = ("impressions", "clicks", "viewable_impressions")
FLOAT_FIELDS = (
    "revenue",
    "post_click_conversions",
    "post_view_conversions",
    "total_conversions",
)


class PlatformRow(BaseModel):
    """Columns shared by every platform export."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    platform: ClassVar[Platform]

    report_date: date = Field(validation_alias="Date")
    campaign: str = Field(validation_alias="Campaign")
    line_item: str = ""
    creative: str = ""
    campaign_id: Optional[str] = Field(default=None, validation_alias="Campaign ID")

    impressions: int = Field(default=0, validation_alias="Impressions")
    clicks: int = Field(default=0, validation_alias="Clicks")
    viewable_impressions: Optional[int] = None
    revenue: float = 0.0

    post_click_conversions: float = 0.0
    post_view_conversions: float = 0.0
    total_conversions: Optional[float] = None

    # -------------------------------------------------------------------------
    # Per-platform hooks
    # -------------------------------------------------------------------------

    def audience_source(self) -> str:
        """Name the audience classification reads from."""
        return self.line_item or self.campaign

    def segment(self, registry: RuleRegistry) -> str:
        return self.line_item or self.campaign or "Unknown"

    def resolved_viewable_impressions(self) -> int:
        return self.impressions

    def resolved_total_conversions(self) -> float:
        if self.total_conversions is not None:
            return self.total_conversions
        return self.post_click_conversions

    def floodlight(self) -> dict[str, Optional[str]]:
        return {}

    def to_record(self, source_file: str, registry: RuleRegistry) -> CampaignRecord:
        """Map into the canonical record, deriving all dimensions."""
        names = " ".join(n for n in (self.campaign, self.line_item) if n)
        return CampaignRecord(
            date=self.report_date,
            platform=self.platform,
            source_file=source_file,
            campaign=self.campaign,
            line_item=self.line_item,
            creative=self.creative,
            impressions=self.impressions,
            clicks=self.clicks,
            viewable_impressions=self.resolved_viewable_impressions(),
            revenue=self.revenue,
            post_click_conversions=self.post_click_conversions,
            post_view_conversions=self.post_view_conversions,
            total_conversions=self.resolved_total_conversions(),
            audience_type=dimensions.audience_type(
                self.audience_source(), self.platform, registry
            ),
            audience_segment=self.segment(registry),
            campaign_type=dimensions.campaign_type(self.campaign, registry),
            optimized_targeting=dimensions.is_optimized_targeting(self.line_item, registry),
            custom_bidding=dimensions.has_custom_bidding(self.line_item, registry),
            optimization_type=dimensions.optimization_type(self.line_item, registry),
            business_type=dimensions.business_type(self.campaign, registry),
            campaign_id=self.campaign_id or extractors.extract_campaign_id(self.campaign),
            amp_id=extractors.extract_amp_id(names),
            audience_name=extractors.extract_audience_name(self.line_item),
            **self.floodlight(),
        )


class DV360Row(PlatformRow):
    """Display & Video 360 export row."""

    platform: ClassVar[Platform] = Platform.DV360

    line_item: str = Field(validation_alias="Line Item")
    creative: str = Field(default="", validation_alias="Creative")

    viewable_impressions: Optional[int] = Field(
        default=None, validation_alias="Active View: Viewable Impressions"
    )
    revenue: float = Field(
        default=0.0,
        validation_alias=AliasChoices("Revenue (Adv Currency)", "Revenue"),
    )
    post_click_conversions: float = Field(
        default=0.0, validation_alias="Post-Click Conversions"
    )
    post_view_conversions: float = Field(
        default=0.0, validation_alias="Post-View Conversions"
    )
    total_conversions: Optional[float] = Field(
        default=None, validation_alias="Total Conversions"
    )

    floodlight_activity: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("Floodlight Activity Name", "Floodlight Activity"),
    )
    floodlight_group: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("Floodlight Activity Group", "Floodlight Group"),
    )
    floodlight_tag: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("Floodlight Activity ID", "Floodlight Tag"),
    )

    def audience_source(self) -> str:
        return self.line_item

    def segment(self, registry: RuleRegistry) -> str:
        return dimensions.audience_segment(self.line_item, registry)

    def resolved_viewable_impressions(self) -> int:
        if self.viewable_impressions is not None:
            return self.viewable_impressions
        return self.impressions

    def resolved_total_conversions(self) -> float:
        return self.total_conversions or 0.0

    def floodlight(self) -> dict[str, Optional[str]]:
        return {
            "floodlight_activity": self.floodlight_activity,
            "floodlight_group": self.floodlight_group,
            "floodlight_tag": self.floodlight_tag,
        }


class GoogleAdsRow(PlatformRow):
    """Google Ads export row."""

    platform: ClassVar[Platform] = Platform.GOOGLE_ADS

    line_item: str = Field(default="", validation_alias="Ad Group")
    creative: str = Field(default="", validation_alias=AliasChoices("Ad", "Ad Name"))

    revenue: float = Field(
        default=0.0,
        validation_alias=AliasChoices("Cost", "Cost (Local Currency)", "Amount Spent"),
    )
    post_click_conversions: float = Field(default=0.0, validation_alias="Conversions")
    post_view_conversions: float = Field(
        default=0.0, validation_alias="View-through Conversions"
    )
    total_conversions: Optional[float] = Field(
        default=None, validation_alias="Total Conversions"
    )

    def resolved_total_conversions(self) -> float:
        # No total column: post-click plus view-through
        if self.total_conversions is not None:
            return self.total_conversions
        return self.post_click_conversions + self.post_view_conversions


class SocialRow(PlatformRow):
    """Facebook / Instagram / LinkedIn / TikTok export row."""

    platform: ClassVar[Platform] = Platform.SOCIAL

    line_item: str = Field(default="", validation_alias="Ad Set Name")
    creative: str = Field(default="", validation_alias="Ad Name")

    impressions: int = Field(
        default=0, validation_alias=AliasChoices("Impressions", "Reach")
    )
    clicks: int = Field(
        default=0, validation_alias=AliasChoices("Clicks", "Link Clicks", "Post Clicks")
    )
    revenue: float = Field(
        default=0.0, validation_alias=AliasChoices("Amount Spent", "Spend", "Cost")
    )
    post_click_conversions: float = Field(
        default=0.0,
        validation_alias=AliasChoices("Conversions", "Results", "Purchases"),
    )
    post_view_conversions: float = Field(
        default=0.0,
        validation_alias=AliasChoices("View Conversions", "Video Views"),
    )
    total_conversions: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices(
            "Total Conversions", "Conversions", "Results", "Purchases"
        ),
    )


PLATFORM_ROWS: dict[Platform, type[PlatformRow]] = {
    Platform.DV360: DV360Row,
    Platform.GOOGLE_ADS: GoogleAdsRow,
    Platform.SOCIAL: SocialRow,
}
