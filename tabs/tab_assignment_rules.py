"""Tab 4: Assignment Rules — rule templates that generate customer rack links."""

import streamlit as st
import pandas as pd

from data.session_store import (
    get_customers, get_racks, get_assignments, get_rules, get_rule_config,
    add_rule, add_assignments, add_audit_entry, is_data_loaded,
)
from engine.catalog import new_id
from engine.rule_engine import materialize_rule, rule_matches_customer
from models.rule import AssignmentRule
from config.defaults import PRIORITY_TIERS, ORDER_BY_POLICIES, COMMON_DOCUMENT_TYPES, DEFAULT_CAPACITY_THRESHOLD_PCT


def _split_patterns(text: str) -> list:
    return [p.strip() for p in text.replace(";", ",").split(",") if p.strip()]


def _render_create_rule():
    with st.expander("Create Rule", expanded=False):
        name = st.text_input("Rule Name", key="rule_name")
        col1, col2 = st.columns(2)
        with col1:
            customer_pattern = st.text_input(
                "Customer Pattern", key="rule_customer_pattern", placeholder="ACME-*",
                help="Glob on customer code; leave empty to cover every customer",
            )
            doc_types = st.multiselect("Document Types", COMMON_DOCUMENT_TYPES, key="rule_doc_types")
            size_min = st.number_input("File Size Min (bytes)", min_value=0, value=0, key="rule_size_min")
            size_max = st.number_input(
                "File Size Max (bytes, 0 = unbounded)", min_value=0, value=0, key="rule_size_max",
            )
        with col2:
            preferred = st.text_input("Preferred Racks", key="rule_preferred", placeholder="WH1-A*")
            fallback = st.text_input("Fallback Racks", key="rule_fallback", placeholder="WH2-*")
            priority = st.selectbox("Priority Level", PRIORITY_TIERS, index=1, key="rule_priority")
            order_by = st.selectbox("Order By", ORDER_BY_POLICIES, key="rule_order_by")
        threshold = st.slider(
            "Capacity Threshold (%)", 0, 100,
            int(get_rule_config().get("capacity_threshold_pct", DEFAULT_CAPACITY_THRESHOLD_PCT)),
            key="rule_threshold",
        )

        if st.button("Save Rule", type="primary"):
            if not name.strip():
                st.error("Rule name is required.")
            elif size_max and size_min > size_max:
                st.error("File size min cannot exceed file size max.")
            elif not _split_patterns(preferred) and not _split_patterns(fallback):
                st.error("Give at least one preferred or fallback rack pattern.")
            else:
                rule = AssignmentRule(
                    rule_id=new_id("rule"),
                    rule_name=name.strip(),
                    customer_pattern=customer_pattern.strip() or None,
                    document_type_conditions=list(doc_types),
                    file_size_min=int(size_min),
                    file_size_max=int(size_max) or None,
                    priority_level=priority,
                    preferred_rack_patterns=_split_patterns(preferred),
                    fallback_rack_patterns=_split_patterns(fallback),
                    capacity_threshold_pct=float(threshold),
                    order_by=order_by,
                )
                add_rule(rule)
                add_audit_entry("create_rule", "rule", "rule", "", rule.rule_name, entity_id=rule.rule_id)
                st.success(f"Rule '{rule.rule_name}' saved.")
                st.rerun()


def render(sidebar_state):
    """Render the Assignment Rules tab."""
    st.header("Assignment Rules")

    if not is_data_loaded():
        st.info("No data loaded. Please upload data in the Admin & Governance tab.")
        return

    _render_create_rule()

    rules = get_rules()
    if not rules:
        st.info("No assignment rules defined.")
        return

    st.dataframe(pd.DataFrame([{
        "Rule": r.rule_name,
        "Customers": r.customer_pattern or "all",
        "Document Types": ", ".join(r.document_type_conditions) or "all",
        "Size (bytes)": f"{r.file_size_min}–{r.file_size_max if r.file_size_max is not None else '∞'}",
        "Preferred": ", ".join(r.preferred_rack_patterns),
        "Fallback": ", ".join(r.fallback_rack_patterns),
        "Threshold": f"{r.capacity_threshold_pct:.0f}%",
        "Order By": r.order_by,
        "Priority": r.priority_level,
        "Active": r.is_active,
    } for r in rules]), use_container_width=True)

    st.divider()

    # --- Preview & Apply ---
    st.subheader("Preview & Apply")
    rule = st.selectbox("Rule", rules, format_func=lambda r: r.rule_name, key="apply_rule")

    customers = get_customers()
    racks = get_racks()
    rack_codes = {r.rack_id: r.code for r in racks}
    names = {c.customer_id: c.name for c in customers}
    covered = [c for c in customers if rule_matches_customer(rule, c)]
    st.caption(f"Covers {len(covered)} of {len(customers)} customer(s).")

    try:
        preview = materialize_rule(rule, customers, racks, get_assignments())
    except ValueError as e:
        st.error(str(e))
        return

    if not preview:
        st.info("Applying this rule would add no new rack links.")
        return

    st.dataframe(pd.DataFrame([{
        "Customer": names.get(a.customer_id, a.customer_id),
        "Order": a.priority_order,
        "Rack": rack_codes.get(a.rack_id, a.rack_id),
        "Type": a.kind,
        "Threshold": f"{a.capacity_threshold_pct:.0f}%",
    } for a in preview]), use_container_width=True)

    if st.button("Apply Rule", type="primary"):
        add_assignments(preview)
        add_audit_entry(
            "apply_rule", "rule", "assignments", "", str(len(preview)),
            entity_id=rule.rule_id, rationale=f"Applied '{rule.rule_name}'",
        )
        st.success(f"Added {len(preview)} rack link(s).")
        st.rerun()
