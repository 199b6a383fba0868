"""Tab 5: Rack Planner — integer-program recommendations for saturated customers."""

import streamlit as st
import pandas as pd
from datetime import datetime

from data.session_store import (
    get_customers, get_racks, get_rack_map, get_assignments, get_rule_config,
    add_assignments, add_audit_entry, is_data_loaded,
)
from engine.rollup import compute_all_rollups
from engine.optimizer import recommend_additional_racks
from engine.catalog import build_rack_assignments, available_racks
from components.charts import utilization_before_after_bar
from config.defaults import TARGET_UTILIZATION_PCT, DEFAULT_CAPACITY_THRESHOLD_PCT


def render(sidebar_state):
    """Render the Rack Planner tab."""
    st.header("Rack Planner")

    with st.expander("How are racks recommended?", expanded=False):
        st.markdown("""
The planner looks at customers whose combined utilization is above the attention threshold
and picks **unassigned** racks for them with an integer program (PuLP / CBC):
- bring each customer's projected utilization to or below the target
- add as few racks as possible
- among equal plans, prefer racks with more free slots

Each rack goes to at most one customer. Applied racks become **overflow** links, tried after the customer's existing racks.
        """)

    if not is_data_loaded():
        st.info("No data loaded. Please upload data in the Admin & Governance tab.")
        return

    config = get_rule_config()
    customers = get_customers()
    assignments = get_assignments()
    racks = get_racks()
    if sidebar_state.warehouse:
        racks = [r for r in racks if r.warehouse_name == sidebar_state.warehouse]

    rollups = compute_all_rollups(customers, assignments, get_rack_map(), config)
    flagged = [r for r in rollups if r.status != "active"]
    free = available_racks(racks, assignments)

    c1, c2, c3 = st.columns(3)
    c1.metric("Customers Flagged", len(flagged))
    c2.metric("Unassigned Racks", len(free))
    c3.metric("Free Slots Available", f"{sum(r.free_slots for r in free):,}")

    # --- Parameters ---
    col1, col2 = st.columns(2)
    with col1:
        target = st.slider(
            "Target Utilization (%)", 50, 100,
            int(config.get("target_utilization_pct", TARGET_UTILIZATION_PCT)), key="plan_target",
        )
        selected = st.multiselect(
            "Customers to plan for (empty = every flagged customer)",
            options=[r.customer_id for r in rollups],
            format_func=lambda cid: next(r.customer_name for r in rollups if r.customer_id == cid),
            key="plan_customers",
        )
    with col2:
        budget_on = st.checkbox("Limit racks per customer", key="plan_budget_on")
        budget = None
        if budget_on:
            budget = st.slider("Max racks per customer", 1, 10, 2, key="plan_budget")

    if st.button("Recommend Racks", type="primary", key="btn_plan"):
        with st.spinner("Solving..."):
            result = recommend_additional_racks(
                rollups, assignments, racks,
                target_pct=float(target),
                customer_ids=selected or None,
                max_racks_per_customer=budget,
                rule_config=config,
            )
        st.session_state["plan_result"] = result
        st.session_state["plan_timestamp"] = datetime.now().strftime("%H:%M:%S")

    result = st.session_state.get("plan_result")
    if result is None:
        return

    st.divider()
    st.subheader(f"Result ({st.session_state.get('plan_timestamp', '')})")

    if result.status == "Optimal":
        st.success(result.message)
    elif result.status == "Not Needed":
        st.info(result.message)
    else:
        st.error(result.message)

    if result.unresolved_customers:
        names = {c.customer_id: c.name for c in customers}
        st.warning("Still above target: " + ", ".join(names.get(cid, cid) for cid in result.unresolved_customers))

    if result.projected:
        st.plotly_chart(utilization_before_after_bar(result.projected), use_container_width=True)
        st.dataframe(pd.DataFrame([{
            k: (f"{v:.1f}%" if k.startswith("Utilization") else v)
            for k, v in row.items() if k not in ("customer_id", "meets_target")
        } for row in result.projected]), use_container_width=True)

    if not result.recommendations:
        return

    st.dataframe(pd.DataFrame([{
        "Customer": rec.customer_name,
        "Rack": rec.rack_code,
        "Location": rec.path,
        "Capacity": rec.capacity,
        "Free Slots": rec.free_slots,
    } for rec in result.recommendations]), use_container_width=True)

    if st.button("Apply Recommendations", key="btn_apply_plan"):
        current = get_assignments()
        taken = {a.rack_id for a in current if a.is_active}
        by_customer = {}
        for rec in result.recommendations:
            if rec.rack_id not in taken:
                by_customer.setdefault(rec.customer_id, []).append(rec.rack_id)

        created = []
        for customer_id, rack_ids in by_customer.items():
            created.extend(build_rack_assignments(
                customer_id, rack_ids, "overflow",
                config.get("capacity_threshold_pct", DEFAULT_CAPACITY_THRESHOLD_PCT),
                [], current + created,
                notes="Added by rack planner",
            ))
        add_assignments(created)
        add_audit_entry(
            "apply_recommendations", "assignment", "rack_ids", "",
            ", ".join(a.rack_id for a in created),
            rationale=f"Target {target}%",
        )
        st.session_state.pop("plan_result", None)
        st.success(f"Linked {len(created)} rack(s).")
        st.rerun()
