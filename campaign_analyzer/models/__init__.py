from .campaign_record import (
    AudienceType,
    BusinessType,
    CampaignRecord,
    OptimizationType,
    Platform,
)

__all__ = [
    "AudienceType",
    "BusinessType",
    "CampaignRecord",
    "OptimizationType",
    "Platform",
]
