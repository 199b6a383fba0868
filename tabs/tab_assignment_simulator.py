"""Tab 3: Assignment Simulator — where would the next document for a customer go?"""

import streamlit as st
import pandas as pd

from data.session_store import (
    get_customers, get_assignments, get_rack_map, get_rule_map, get_rules,
    get_rule_config, add_audit_entry, is_data_loaded,
)
from engine.assignment_engine import evaluate_assignment, candidate_rows
from engine.placement import place_document
from engine.rule_engine import matching_rules
from engine.errors import ArchiveError, RackSaturatedError, StaleAssignmentError
from components.tables import render_candidate_table
from config.defaults import COMMON_DOCUMENT_TYPES


def render(sidebar_state):
    """Render the Assignment Simulator tab."""
    st.header("Assignment Simulator")

    if not is_data_loaded():
        st.info("No data loaded. Please upload data in the Admin & Governance tab.")
        return

    customers = get_customers()
    if not customers:
        st.info("No customers registered yet.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        customer = st.selectbox(
            "Customer", customers, format_func=lambda c: f"{c.name} ({c.code})", key="sim_customer",
        )
    with col2:
        types = sorted(set(COMMON_DOCUMENT_TYPES) | set(customer.accepted_document_types))
        document_type = st.selectbox("Document Type", types, key="sim_doc_type")
    with col3:
        file_size = st.number_input("File Size (bytes)", min_value=0, value=1_048_576, step=1024, key="sim_file_size")

    if customer.accepted_document_types and not customer.accepts(document_type):
        st.caption(f"{customer.name} does not list '{document_type}' among its accepted document types.")

    config = get_rule_config()
    rule_map = get_rule_map()

    # --- Scan Order ---
    st.subheader("Candidate Racks (scan order)")
    try:
        rows = candidate_rows(
            customer.customer_id, document_type, get_assignments(), get_rack_map(),
            file_size=int(file_size), rule_map=rule_map, rule_config=config,
        )
    except ArchiveError as e:
        st.error(e.message)
        return

    if rows:
        render_candidate_table(pd.DataFrame([{
            "Order": r["priority_order"],
            "Rack": r["rack_code"],
            "Location": r["path"],
            "Type": r["kind"],
            "Used": f"{r['current_count']}/{r['capacity']}",
            "Utilization": f"{r['utilization_pct']:.1f}%",
            "Threshold": f"{r['threshold_pct']:.0f}%",
            "Available": "Yes" if r["available"] else "No",
        } for r in rows]))
    else:
        st.info("No active rack links accept this document.")

    hits = matching_rules(get_rules(), customer, document_type, int(file_size))
    if hits:
        st.caption("Matching rules: " + ", ".join(f"{r.rule_name} ({r.priority_level})" for r in hits))

    st.divider()

    # --- Decision ---
    decision = evaluate_assignment(
        customer.customer_id, document_type, int(file_size),
        get_assignments(), get_rack_map(), rule_map=rule_map, rule_config=config,
    )

    if decision.success:
        placement = decision.assigned_rack
        st.success(decision.message)
        c1, c2, c3 = st.columns(3)
        c1.metric("Location", placement.path)
        c2.metric("Utilization Now", f"{placement.utilization_pct:.1f}%")
        c3.metric("After Placement", f"{placement.utilization_after_pct:.1f}%",
                  delta=f"{placement.utilization_after_pct - placement.utilization_pct:+.2f}%",
                  delta_color="inverse")
    else:
        st.error(decision.message)
        if decision.suggested_action:
            st.info(f"Suggested action: {decision.suggested_action}")

    with st.expander("Decision trace", expanded=not decision.success):
        for step in decision.explanation_steps:
            st.markdown(f"- {step}")

    if decision.success and st.button("Place Document", type="primary"):
        try:
            rack = place_document(get_rack_map(), get_assignments(), decision, config)
        except (RackSaturatedError, StaleAssignmentError) as e:
            st.warning(f"{e.message}. Re-run the simulation to pick the next rack.")
        else:
            add_audit_entry(
                "place_document", "rack", "current_count",
                str(rack.current_count - 1), str(rack.current_count),
                entity_id=rack.rack_id,
                rationale=f"{document_type} for {customer.code}",
            )
            st.success(f"Placed in {rack.code} ({rack.current_count}/{rack.capacity}).")
            st.rerun()
