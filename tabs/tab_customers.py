"""Tab 2: Customers & Racks — registry, rack linking, and link retirement."""

import streamlit as st
import pandas as pd

from data.session_store import (
    get_customers, get_racks, get_rack_map, get_assignments, get_rule_config,
    add_customer, add_assignments, set_assignments, add_audit_entry, is_data_loaded,
)
from engine.catalog import create_customer, customer_assignments, available_racks, build_rack_assignments, retire_assignment
from engine.rollup import compute_customer_rollup, capacity_band
from engine.errors import DuplicateCustomerError
from components.metrics_cards import render_capacity_indicator
from config.defaults import (
    PRIORITY_TIERS, ASSIGNMENT_KINDS, DEFAULT_ASSIGNMENT_KIND, COMMON_DOCUMENT_TYPES, DEFAULT_CAPACITY_THRESHOLD_PCT,
)


def _render_create_customer():
    with st.expander("Create Customer", expanded=False):
        col1, col2 = st.columns(2)
        with col1:
            code = st.text_input("Customer Code", key="new_customer_code", placeholder="ACME-001")
            name = st.text_input("Customer Name", key="new_customer_name")
            tier = st.selectbox("Priority Level", PRIORITY_TIERS, index=1, key="new_customer_tier")
        with col2:
            doc_types = st.multiselect("Accepted Document Types", COMMON_DOCUMENT_TYPES, key="new_customer_types")
            email = st.text_input("Contact Email", key="new_customer_email")
            phone = st.text_input("Contact Phone", key="new_customer_phone")
        address = st.text_area("Address", key="new_customer_address")
        auto = st.checkbox("Auto-assignment enabled", value=True, key="new_customer_auto")

        if st.button("Create Customer", type="primary"):
            try:
                customer = create_customer(
                    get_customers(), code, name, tier, doc_types, auto,
                    contact_email=email, contact_phone=phone, address=address,
                )
            except (DuplicateCustomerError, ValueError) as e:
                st.error(str(e))
            else:
                add_customer(customer)
                add_audit_entry("create_customer", "customer", "customer", "", customer.code,
                                entity_id=customer.customer_id)
                st.success(f"Customer '{customer.name}' created.")
                st.rerun()


def _render_assign_racks(customer, sidebar_state):
    st.markdown("**Assign Racks**")
    free = available_racks(get_racks(), get_assignments())
    if sidebar_state.warehouse:
        free = [r for r in free if r.warehouse_name == sidebar_state.warehouse]

    zones = sorted({r.zone_name for r in free})
    zone = st.selectbox("Zone", ["All"] + zones, key=f"assign_zone_{customer.customer_id}")
    if zone != "All":
        free = [r for r in free if r.zone_name == zone]

    if not free:
        st.info("No unassigned racks in this scope.")
        return

    rack_ids = st.multiselect(
        "Racks (tried in the order selected)",
        options=[r.rack_id for r in free],
        format_func=lambda rid: next(f"{r.path} ({r.current_count}/{r.capacity})" for r in free if r.rack_id == rid),
        key=f"assign_racks_{customer.customer_id}",
    )
    col1, col2 = st.columns(2)
    with col1:
        kind = st.selectbox(
            "Assignment Type", ASSIGNMENT_KINDS, index=ASSIGNMENT_KINDS.index(DEFAULT_ASSIGNMENT_KIND),
            key=f"assign_kind_{customer.customer_id}",
        )
        threshold = st.number_input(
            "Capacity Threshold (%)", min_value=0, max_value=100,
            value=int(get_rule_config().get("capacity_threshold_pct", DEFAULT_CAPACITY_THRESHOLD_PCT)),
            key=f"assign_threshold_{customer.customer_id}",
            help="Switch to next rack when this threshold is reached",
        )
    with col2:
        doc_types = st.multiselect(
            "Document Types (empty = all)",
            sorted(set(COMMON_DOCUMENT_TYPES) | set(customer.accepted_document_types)),
            key=f"assign_types_{customer.customer_id}",
        )
        notes = st.text_input("Notes (optional)", key=f"assign_notes_{customer.customer_id}")

    if st.button("Assign Selected Racks", key=f"btn_assign_{customer.customer_id}") and rack_ids:
        try:
            created = build_rack_assignments(
                customer.customer_id, rack_ids, kind, float(threshold), doc_types,
                get_assignments(), notes=notes,
            )
        except ValueError as e:
            st.error(str(e))
        else:
            add_assignments(created)
            add_audit_entry("assign_racks", "assignment", "rack_ids", "", ", ".join(rack_ids),
                            entity_id=customer.customer_id)
            st.success(f"{len(created)} rack(s) assigned successfully.")
            st.rerun()


def render(sidebar_state):
    """Render the Customers & Racks tab."""
    st.header("Customers & Racks")

    if not is_data_loaded():
        st.info("No data loaded. Please upload data in the Admin & Governance tab.")
        return

    _render_create_customer()

    customers = get_customers()
    if not customers:
        st.info("No customers registered yet.")
        return

    search = st.text_input("Search customers", key="customer_search").strip().lower()
    if search:
        customers = [c for c in customers if search in c.name.lower() or search in c.code.lower()]

    rack_map = get_rack_map()
    config = get_rule_config()

    for customer in customers:
        rollup = compute_customer_rollup(customer, get_assignments(), rack_map, config)
        label = (
            f"{customer.name} ({customer.code}) — {rollup.assignment_count} rack(s), "
            f"{rollup.overall_utilization:.1f}% — {rollup.status.replace('_', ' ')}"
        )
        with st.expander(label, expanded=False):
            st.caption(
                f"Priority: {customer.priority_tier} | "
                f"Types: {', '.join(customer.accepted_document_types) or 'all'} | "
                f"Auto-assignment: {'on' if customer.auto_assign_enabled else 'off'}"
            )
            render_capacity_indicator(
                rollup.total_used, rollup.total_capacity,
                capacity_band(rollup.total_used, rollup.total_capacity),
            )

            links = customer_assignments(customer.customer_id, get_assignments())
            if links:
                st.dataframe(pd.DataFrame([{
                    "Order": a.priority_order,
                    "Rack": rack_map[a.rack_id].path if a.rack_id in rack_map else a.rack_id,
                    "Type": a.kind,
                    "Threshold": f"{a.capacity_threshold_pct:.0f}%",
                    "Used": f"{rack_map[a.rack_id].current_count}/{rack_map[a.rack_id].capacity}" if a.rack_id in rack_map else "—",
                    "Document Types": ", ".join(a.document_types) or "all",
                    "Rule": a.source_rule_id or "—",
                } for a in links]), use_container_width=True)

                retire_id = st.selectbox(
                    "Remove rack assignment",
                    [a.assignment_id for a in links],
                    format_func=lambda aid: next(
                        f"#{a.priority_order} {rack_map[a.rack_id].code if a.rack_id in rack_map else a.rack_id}"
                        for a in links if a.assignment_id == aid
                    ),
                    key=f"retire_{customer.customer_id}",
                )
                if st.button("Remove", key=f"btn_retire_{customer.customer_id}"):
                    set_assignments(retire_assignment(get_assignments(), retire_id))
                    add_audit_entry("retire", "assignment", "is_active", "True", "False", entity_id=retire_id)
                    st.rerun()
            else:
                st.info("No racks assigned to this customer.")

            st.divider()
            _render_assign_racks(customer, sidebar_state)
