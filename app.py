"""Streamlit UI for the Campaign Performance Dashboard."""

import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from campaign_analyzer.analytics import (
    AudienceComparison,
    ChartSeries,
    Dimension,
    FilterCriteria,
)
from campaign_analyzer.models import AudienceType, Platform
from campaign_analyzer.services import DashboardService

# Page config
st.set_page_config(
    page_title="Campaign Performance Dashboard",
    page_icon="📊",
    layout="wide",
)

ALL = "all"
TREND_ICONS = {"increasing": "📈", "decreasing": "📉", "stable": "➖"}


def format_number(n: int | float, decimals: int = 0) -> str:
    """Format number with commas."""
    if decimals == 0:
        return f"{int(n):,}"
    return f"{n:,.{decimals}f}"


def format_pct(n: float | None, decimals: int = 2) -> str:
    """Format percentage."""
    if n is None:
        return "N/A"
    return f"{n:.{decimals}f}%"


def get_service() -> DashboardService:
    """One service (and record store) per browser session."""
    if "service" not in st.session_state:
        st.session_state["service"] = DashboardService()
    return st.session_state["service"]


def create_time_series_chart(series: ChartSeries, title: str) -> go.Figure:
    """Impressions bars with CTR on a secondary axis."""
    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=series.labels,
        y=series.impressions,
        name="Impressions",
        marker_color="#667eea",
        yaxis="y",
    ))

    fig.add_trace(go.Scatter(
        x=series.labels,
        y=series.ctr,
        name="CTR (%)",
        yaxis="y2",
        mode="lines+markers",
        line=dict(color="#dc3545", width=3),
        marker=dict(size=8),
    ))

    fig.update_layout(
        title=title,
        yaxis=dict(title="Impressions", side="left", showgrid=True),
        yaxis2=dict(title="CTR (%)", side="right", overlaying="y", showgrid=False),
        legend=dict(x=0, y=1.15, orientation="h"),
        height=400,
        plot_bgcolor="white",
    )

    return fig


def create_segment_chart(series: ChartSeries, title: str) -> go.Figure:
    """Horizontal revenue bars for the top audience segments."""
    fig = go.Figure(data=[go.Bar(
        x=series.revenue,
        y=series.labels,
        orientation="h",
        marker_color="#764ba2",
    )])

    fig.update_layout(
        title=title,
        xaxis_title="Revenue",
        yaxis=dict(autorange="reversed"),
        height=350,
        plot_bgcolor="white",
    )

    return fig


def create_audience_radar(comparison: AudienceComparison) -> go.Figure:
    """1st Party vs Converged on normalized axes."""
    axes = ["ctr", "cpm", "viewability", "conversion_rate"]
    first = [getattr(comparison.first_party, a) for a in axes]
    converged = [getattr(comparison.converged, a) for a in axes]
    # Scale each axis to the larger of the two so metrics share one radius
    peaks = [max(a, b) or 1.0 for a, b in zip(first, converged)]

    fig = go.Figure()
    for name, values in (("1st Party", first), ("Converged", converged)):
        fig.add_trace(go.Scatterpolar(
            r=[v / p for v, p in zip(values, peaks)],
            theta=["CTR", "CPM", "Viewability", "Conv. Rate"],
            fill="toself",
            name=name,
        ))

    fig.update_layout(
        polar=dict(radialaxis=dict(visible=True, range=[0, 1])),
        title="1st Party vs Converged",
        height=400,
    )

    return fig


def sidebar_filters(service: DashboardService) -> FilterCriteria:
    """Render filter widgets and return the active criteria."""
    st.header("🔎 Filters")

    records = service.records
    dates = [r.date for r in records]

    platform = st.selectbox("Platform", [ALL] + [p.value for p in Platform])
    date_range = st.date_input(
        "Date range",
        value=(min(dates), max(dates)),
        min_value=min(dates),
        max_value=max(dates),
    )
    # A half-picked range comes back as a 1-tuple
    if isinstance(date_range, tuple) and len(date_range) == 2:
        start_date, end_date = date_range
    else:
        start_date, end_date = None, None

    audience_type = st.selectbox("Audience type", [ALL] + [a.value for a in AudienceType])
    campaign_type = st.selectbox("Campaign type", [ALL] + service.available_values("campaign_type"))
    segment = st.selectbox("Audience segment", [ALL] + service.available_values("audience_segment"))
    campaign_id = st.selectbox("Campaign ID", [ALL] + service.available_values("campaign_id"))

    with st.expander("Optimization"):
        optimized = st.selectbox("Optimized targeting", [ALL, "yes", "no"])
        bidding = st.selectbox("Custom bidding", [ALL, "yes", "no"])
        optimization_type = st.selectbox("Optimization type", [ALL, "GA", "FL", "Unknown"])
        business_type = st.selectbox("Business type", [ALL, "B2B", "B2C", "Unknown"])

    flags = {ALL: None, "yes": True, "no": False}
    return FilterCriteria(
        platform=platform,
        start_date=start_date,
        end_date=end_date,
        audience_type=audience_type,
        campaign_type=campaign_type,
        audience_segment=segment,
        campaign_id=campaign_id,
        optimized_targeting=flags[optimized],
        custom_bidding=flags[bidding],
        optimization_type=optimization_type,
        business_type=business_type,
    )


def main():
    st.title("📊 Campaign Performance Dashboard")
    service = get_service()

    # Sidebar - File Upload
    with st.sidebar:
        st.header("📁 Upload Exports")

        uploads = st.file_uploader(
            "Platform CSV exports",
            type=["csv"],
            accept_multiple_files=True,
            help="DV360, Google Ads or social platform CSV exports",
        )

        if st.button("➕ Add to dataset", type="primary", use_container_width=True, disabled=not uploads):
            with st.spinner("Processing files..."):
                report = service.load_uploads((f.name, f.getvalue()) for f in uploads)
            for result in report.results:
                st.success(
                    f"{result.source_file}: {len(result.records)} records ({result.platform.value})"
                )
            for error in report.errors:
                st.error(f"{error.filename}: {error.message}")

        if st.button("🗑️ Clear dataset", use_container_width=True):
            service.reset()

        st.caption(f"{format_number(len(service.store))} records loaded")
        st.divider()

    # Main area
    if not len(service.store):
        st.info("👈 Upload one or more CSV exports to get started")
        return

    with st.sidebar:
        criteria = sidebar_filters(service)

    records = service.get_filtered_data(criteria)
    if not records:
        st.warning("No records match the current filters")
        return

    tab1, tab2, tab3, tab4 = st.tabs([
        "📈 Performance",
        "👥 Audiences",
        "🎯 Floodlight",
        "📋 Tables",
    ])

    # =========================================================================
    # TAB 1: Performance
    # =========================================================================
    with tab1:
        metrics = service.calculate_metrics(records)

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Impressions", format_number(metrics.impressions))
        with col2:
            st.metric("Clicks", format_number(metrics.clicks))
        with col3:
            st.metric("Revenue", f"${format_number(metrics.revenue, 2)}")
        with col4:
            st.metric("Conversions", format_number(metrics.conversions, 1))

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("CTR", format_pct(metrics.ctr))
        with col2:
            st.metric("CPM", f"${format_number(metrics.cpm, 2)}")
        with col3:
            st.metric("Viewability", format_pct(metrics.viewability))
        with col4:
            st.metric("Conversion Rate", format_pct(metrics.conversion_rate))

        st.divider()

        granularity = st.radio("Granularity", ["Daily", "Weekly"], horizontal=True)
        if granularity == "Daily":
            series = service.daily_series(records)
            st.caption(f"{TREND_ICONS[series.trend]} Impressions trend: {series.trend}")
        else:
            series = service.weekly_series(records)
        st.plotly_chart(
            create_time_series_chart(series, f"{granularity} Performance"),
            use_container_width=True,
        )

        platform_rows = service.dimension_table(records, Dimension.PLATFORM)
        if len(platform_rows) > 1:
            fig = px.pie(
                values=[p["impressions"] for p in platform_rows],
                names=[p["dimension_value"] for p in platform_rows],
                title="Impression Share by Platform",
                hole=0.4,
            )
            st.plotly_chart(fig, use_container_width=True)

    # =========================================================================
    # TAB 2: Audiences
    # =========================================================================
    with tab2:
        col1, col2 = st.columns(2)
        with col1:
            series = service.segment_chart(records, AudienceType.FIRST_PARTY)
            if series.labels:
                st.plotly_chart(
                    create_segment_chart(series, "Top 1st Party Segments"),
                    use_container_width=True,
                )
        with col2:
            series = service.segment_chart(records, AudienceType.CONVERGED)
            if series.labels:
                st.plotly_chart(
                    create_segment_chart(series, "Top Converged Segments"),
                    use_container_width=True,
                )

        st.plotly_chart(
            create_audience_radar(service.audience_comparison(records)),
            use_container_width=True,
        )

        st.subheader("Audience Type Breakdown")
        st.dataframe(
            service.dimension_table(records, Dimension.AUDIENCE_TYPE),
            use_container_width=True,
            hide_index=True,
        )

    # =========================================================================
    # TAB 3: Floodlight
    # =========================================================================
    with tab3:
        summary = service.floodlight_summary(records)

        if not summary.activities:
            st.info("No Floodlight activity in the selected DV360 data")
        else:
            col1, col2, col3, col4 = st.columns(4)
            with col1:
                st.metric("Order Conversions", format_number(summary.order_conversions, 1))
            with col2:
                st.metric("Cost per Order", f"${format_number(summary.cost_per_order, 2)}")
            with col3:
                st.metric("Lead Conversions", format_number(summary.lead_conversions, 1))
            with col4:
                st.metric("Cost per Lead", f"${format_number(summary.cost_per_lead, 2)}")

            st.dataframe(
                [
                    {
                        "activity": a.activity,
                        "group": a.group,
                        "tag": a.tag,
                        "order": a.is_order,
                        "lead": a.is_lead,
                        "revenue": a.metrics.revenue,
                        "conversions": a.metrics.total_conversions,
                        "cpa": a.metrics.cpa,
                    }
                    for a in summary.activities
                ],
                use_container_width=True,
                hide_index=True,
                column_config={
                    "order": st.column_config.CheckboxColumn("Order"),
                    "lead": st.column_config.CheckboxColumn("Lead"),
                    "revenue": st.column_config.NumberColumn("Revenue", format="$%.2f"),
                    "cpa": st.column_config.NumberColumn("CPA", format="$%.2f"),
                },
            )

    # =========================================================================
    # TAB 4: Tables
    # =========================================================================
    with tab4:
        labels = {
            "Date": Dimension.DATE,
            "Week": Dimension.WEEK,
            "Audience Segment": Dimension.AUDIENCE_SEGMENT,
            "Campaign Type": Dimension.CAMPAIGN_TYPE,
            "Campaign": Dimension.CAMPAIGN,
        }
        choice = st.selectbox("Group by", list(labels))
        st.dataframe(
            service.dimension_table(records, labels[choice]),
            use_container_width=True,
            hide_index=True,
            column_config={
                "dimension_value": choice,
                "ctr": st.column_config.NumberColumn("CTR %", format="%.2f%%"),
                "viewability": st.column_config.NumberColumn("Viewability %", format="%.2f%%"),
                "revenue": st.column_config.NumberColumn("Revenue", format="$%.2f"),
            },
        )


if __name__ == "__main__":
    main()
