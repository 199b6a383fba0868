"""Tab 1: Utilization Dashboard — customer capacity health across the archive."""

import streamlit as st
import pandas as pd

from data.session_store import (
    get_customers, get_racks, get_rack_map, get_assignments, get_rule_config, is_data_loaded,
)
from components.metrics_cards import render_metric_row, render_alert_card
from components.charts import customer_utilization_bar, status_donut, assignment_kind_pie, rack_utilization_bar
from components.tables import render_status_table
from engine.rollup import (
    compute_all_rollups, summarize_portfolio, compute_utilization_alerts,
    get_rack_utilization, explain_customer_rollup,
)


def render(sidebar_state):
    """Render the Utilization Dashboard tab."""
    st.header("Utilization Dashboard")

    if not is_data_loaded():
        st.info("No data loaded. Please upload data in the Admin & Governance tab.")
        return

    config = get_rule_config()
    customers = get_customers()
    assignments = get_assignments()
    rack_map = get_rack_map()

    rollups = compute_all_rollups(customers, assignments, rack_map, config)
    summary = summarize_portfolio(rollups, assignments)

    # --- KPI Metrics ---
    flagged = summary["status_counts"]["needs_attention"] + summary["status_counts"]["over_capacity"]
    render_metric_row([
        {"label": "Total Capacity", "value": f"{summary['total_capacity']:,}"},
        {"label": "Documents Stored", "value": f"{summary['total_used']:,}"},
        {"label": "Overall Utilization", "value": f"{summary['overall_utilization']:.1f}%"},
        {"label": "Active Rack Links", "value": str(summary["active_assignments"])},
        {"label": "Customers Flagged", "value": str(flagged),
         "delta": f"{flagged} customers" if flagged else "None",
         "delta_color": "inverse" if flagged else "normal"},
    ])

    st.divider()

    rollup_rows = [{
        "customer_name": r.customer_name,
        "overall_utilization": r.overall_utilization,
        "status": r.status,
        "total_used": r.total_used,
        "total_capacity": r.total_capacity,
        "assignment_count": r.assignment_count,
    } for r in rollups]

    col1, col2 = st.columns([3, 2])
    with col1:
        if rollup_rows:
            st.plotly_chart(customer_utilization_bar(rollup_rows), use_container_width=True)
    with col2:
        st.plotly_chart(status_donut(summary["status_counts"]), use_container_width=True)

    col1, col2 = st.columns([2, 3])
    with col1:
        st.plotly_chart(assignment_kind_pie(summary["kind_counts"]), use_container_width=True)
    with col2:
        names = {c.customer_id: c.name for c in customers}
        rack_rows = get_rack_utilization(get_racks(), assignments, names)
        if rack_rows:
            st.plotly_chart(rack_utilization_bar(rack_rows, sidebar_state.warehouse), use_container_width=True)

    st.divider()

    # --- Customer Details ---
    st.subheader("Customer Details")
    detail = pd.DataFrame([{
        "Customer": r.customer_name,
        "Racks": r.assignment_count,
        "Used": r.total_used,
        "Capacity": r.total_capacity,
        "Utilization": f"{r.overall_utilization:.1f}%",
        "Status": r.status.replace("_", " "),
    } for r in rollups])
    if not detail.empty:
        render_status_table(detail)

    with st.expander("How is a customer's status derived?", expanded=False):
        selected = st.selectbox(
            "Customer", rollups, format_func=lambda r: r.customer_name, key="dash_explain_customer",
        )
        if selected:
            for step in explain_customer_rollup(selected, config):
                st.markdown(f"- {step}")

    st.divider()

    # --- Alerts ---
    st.subheader("Customers Requiring Attention")
    alerts = compute_utilization_alerts(rollups, config)
    if alerts:
        for a in alerts:
            render_alert_card(a)
    else:
        st.success("All customers are within their capacity thresholds.")
