"""Plotly chart builders for the Archive Rack Assignment Planner."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, List

STATUS_COLORS = {
    "active": "#10b981",
    "needs_attention": "#f59e0b",
    "over_capacity": "#ef4444",
}

KIND_COLORS = {
    "dedicated": "#3b82f6",
    "shared": "#f59e0b",
    "overflow": "#8b5cf6",
}


def customer_utilization_bar(
    rollup_rows: List[dict],
    title: str = "Rack Utilization by Customer",
) -> go.Figure:
    """Bar chart of overall utilization per customer, colored by status."""
    df = pd.DataFrame(rollup_rows)
    fig = px.bar(
        df, x="customer_name", y="overall_utilization",
        color="status",
        color_discrete_map=STATUS_COLORS,
        labels={"overall_utilization": "Utilization %", "customer_name": "Customer", "status": "Status"},
        title=title,
        hover_data=["total_used", "total_capacity", "assignment_count"],
    )
    fig.update_layout(height=400, xaxis_tickangle=-45, yaxis_range=[0, max(100, df["overall_utilization"].max() + 5)])
    return fig


def status_donut(status_counts: Dict[str, int], title: str = "Customers by Status") -> go.Figure:
    """Donut chart of customer rollup statuses."""
    items = [(k, v) for k, v in status_counts.items() if v > 0]
    fig = go.Figure(data=[go.Pie(
        labels=[k.replace("_", " ").title() for k, _ in items],
        values=[v for _, v in items],
        hole=0.6,
        marker_colors=[STATUS_COLORS.get(k, "#9ca3af") for k, _ in items],
        textinfo="value+label",
    )])
    fig.update_layout(title=title, height=350, showlegend=True)
    return fig


def assignment_kind_pie(kind_counts: Dict[str, int], title: str = "Assignments by Type") -> go.Figure:
    items = [(k, v) for k, v in kind_counts.items() if v > 0]
    fig = go.Figure(data=[go.Pie(
        labels=[k.title() for k, _ in items],
        values=[v for _, v in items],
        marker_colors=[KIND_COLORS.get(k, "#9ca3af") for k, _ in items],
        textinfo="percent+label",
    )])
    fig.update_layout(title=title, height=350)
    return fig


def rack_utilization_bar(
    rack_rows: List[dict],
    warehouse_filter: str = None,
) -> go.Figure:
    """Horizontal bars of rack utilization, grouped by warehouse path."""
    df = pd.DataFrame(rack_rows)
    if warehouse_filter:
        df = df[df["warehouse_name"] == warehouse_filter]
    df = df.sort_values("rack_code", ascending=False)

    fig = px.bar(
        df, x="utilization_pct", y="rack_code",
        orientation="h",
        title=f"Rack Utilization{' — ' + warehouse_filter if warehouse_filter else ''}",
        labels={"utilization_pct": "Utilization %", "rack_code": "Rack"},
        color="utilization_pct",
        color_continuous_scale=["#10b981", "#f5c542", "#ef4444"],
        range_color=[0, 100],
        hover_data=["path", "current_count", "capacity"],
    )
    fig.update_layout(height=max(300, len(df) * 28), yaxis_type="category")
    fig.update_traces(texttemplate="%{x:.0f}%", textposition="auto")
    return fig


def utilization_before_after_bar(projected: List[dict]) -> go.Figure:
    """Grouped bars comparing utilization before and after recommended racks."""
    df = pd.DataFrame(projected)
    fig = go.Figure()
    fig.add_trace(go.Bar(name="Before", x=df["Customer"], y=df["Utilization Before"], marker_color="#ef4444"))
    fig.add_trace(go.Bar(name="After", x=df["Customer"], y=df["Utilization After"], marker_color="#10b981"))
    fig.update_layout(
        barmode="group",
        title="Projected Utilization",
        xaxis_title="Customer",
        yaxis_title="Utilization %",
        height=400,
    )
    return fig
