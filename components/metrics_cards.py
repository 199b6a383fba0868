"""KPI metric cards and capacity indicators."""

import streamlit as st

ALERT_ICONS = {"error": "🔴", "warning": "🟡", "info": "🔵"}


def render_metric_row(metrics: list[dict]):
    """Render a row of metric cards.

    Each metric dict should have: label, value, and optionally delta, delta_color.
    """
    for col, m in zip(st.columns(len(metrics)), metrics):
        col.metric(
            label=m["label"],
            value=m["value"],
            delta=m.get("delta"),
            delta_color=m.get("delta_color", "normal"),
        )


def render_alert_card(alert: dict):
    """Render one entry from ``compute_utilization_alerts``."""
    text = f"**{alert['customer_name']}**: {alert['message']}"
    icon = ALERT_ICONS.get(alert["level"], ALERT_ICONS["info"])
    if alert["level"] == "error":
        st.error(text, icon=icon)
    elif alert["level"] == "warning":
        st.warning(text, icon=icon)
    else:
        st.info(text, icon=icon)


def render_capacity_indicator(current: int, capacity: int, band: str):
    """Progress bar with a used/capacity caption."""
    pct = current / capacity if capacity > 0 else 0
    st.progress(min(pct, 1.0), text=f"{current} / {capacity} ({pct:.1%}), {band}")
