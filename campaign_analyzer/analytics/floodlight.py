"""Floodlight conversion rollups for DV360 data."""

from collections.abc import Iterable

from ..ingestion.dimensions import is_lead_activity, is_order_activity
from ..ingestion.registry import RuleRegistry, load_registry
from ..models.campaign_record import CampaignRecord, Platform
from .aggregator import aggregate, rank_buckets, totals
from .models import Dimension, FloodlightActivityStats, FloodlightSummary


def floodlight_records(records: Iterable[CampaignRecord]) -> list[CampaignRecord]:
    """DV360 records that carry a Floodlight activity name."""
    return [
        r for r in records if r.platform == Platform.DV360 and r.floodlight_activity
    ]


def floodlight_summary(
    records: Iterable[CampaignRecord],
    registry: RuleRegistry | None = None,
) -> FloodlightSummary:
    """Per-activity metrics ranked by revenue, plus cost per order and per lead.

    Group and tag metadata come from the first record seen for each activity.
    """
    registry = registry or load_registry()
    tagged = floodlight_records(records)

    first_seen: dict[str, CampaignRecord] = {}
    for record in tagged:
        first_seen.setdefault(record.floodlight_activity, record)

    activities = [
        FloodlightActivityStats(
            activity=bucket.key,
            group=first_seen[bucket.key].floodlight_group,
            tag=first_seen[bucket.key].floodlight_tag,
            is_order=is_order_activity(bucket.key, registry),
            is_lead=is_lead_activity(bucket.key, registry),
            metrics=bucket,
        )
        for bucket in rank_buckets(aggregate(tagged, Dimension.FLOODLIGHT_ACTIVITY).values())
    ]

    orders = totals(r for r in tagged if is_order_activity(r.floodlight_activity, registry))
    leads = totals(r for r in tagged if is_lead_activity(r.floodlight_activity, registry))

    return FloodlightSummary(
        activities=activities,
        order_conversions=orders.total_conversions,
        order_revenue=orders.revenue,
        cost_per_order=orders.cpa,
        lead_conversions=leads.total_conversions,
        lead_revenue=leads.revenue,
        cost_per_lead=leads.cpa,
    )
