"""Tab 6: Admin & Governance — data upload, rack editor, thresholds, audit trail."""

import logging

import streamlit as st
import pandas as pd

from data.loader import (
    load_file, load_multi_sheet_excel,
    parse_customers, parse_racks, parse_assignments, parse_rules,
)
from data.validator import (
    validate_customers, validate_racks, validate_assignments, validate_rules, validate_cross_file,
)
from data.sample_data import (
    generate_customers_df, generate_racks_df, generate_assignments_df, generate_rules_df,
)
from data.session_store import (
    set_customers, set_racks, set_assignments, set_rules, set_data_loaded,
    get_racks, get_audit_log, get_rule_config, set_rule_config, default_rule_config,
    add_audit_entry, is_data_loaded,
)

logger = logging.getLogger(__name__)


def _load_and_validate(customers_df, racks_df, assignments_df, rules_df=None):
    """Validate and store uploaded data."""
    result = validate_customers(customers_df)
    result.merge(validate_racks(racks_df))
    result.merge(validate_assignments(assignments_df))
    result.merge(validate_rules(rules_df))

    if not result.errors:
        result.merge(validate_cross_file(customers_df, racks_df, assignments_df))

    if result.errors:
        for e in result.errors:
            st.error(e)
        logger.warning("Upload rejected with %d error(s)", len(result.errors))
        return False

    for w in result.warnings:
        st.warning(w)

    customers = parse_customers(customers_df)
    racks = parse_racks(racks_df)
    assignments = parse_assignments(assignments_df)
    rules = parse_rules(rules_df) if rules_df is not None else []

    set_customers(customers)
    set_racks(racks)
    set_assignments(assignments)
    set_rules(rules)
    set_data_loaded(True)

    add_audit_entry("upload", "dataset", "all_data", "", "uploaded", rationale="Data upload")
    logger.info(
        "Loaded %d customers, %d racks, %d assignments, %d rules",
        len(customers), len(racks), len(assignments), len(rules),
    )

    st.success(
        f"Data loaded: {len(customers)} customers, {len(racks)} racks, "
        f"{len(assignments)} assignments, {len(rules)} rules"
    )

    # --- Immediate capacity health check ---
    total_capacity = sum(r.capacity for r in racks if r.is_active)
    total_used = sum(r.current_count for r in racks if r.is_active)
    linked = {a.rack_id for a in assignments if a.is_active}

    st.divider()
    st.subheader("Data Health Check")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Capacity", f"{total_capacity:,}")
    col2.metric("Documents Stored", f"{total_used:,}")
    col3.metric("Linked Racks", f"{len(linked)}")
    col4.metric("Unlinked Racks", f"{sum(1 for r in racks if r.is_active and r.rack_id not in linked)}")

    if total_capacity == 0:
        st.error("No active rack capacity. Every evaluation will report racks at capacity.")
    elif total_used / total_capacity > 0.85:
        st.warning(
            f"Archive is at {total_used / total_capacity:.0%} of capacity. "
            f"Use the Rack Planner to spread load onto unlinked racks."
        )
    else:
        st.success(f"Archive is at {total_used / total_capacity:.0%} of capacity.")

    return True


def _sample_frames():
    return generate_customers_df(), generate_racks_df(), generate_assignments_df(), generate_rules_df()


def render(sidebar_state):
    """Render the Admin & Governance tab."""
    st.header("Admin & Governance")

    # --- Data Upload Section ---
    st.subheader("Data Upload")

    upload_mode = st.radio(
        "Upload mode",
        ["Single Excel file", "Separate files"],
        horizontal=True,
        key="upload_mode",
    )

    if upload_mode == "Single Excel file":
        st.caption(
            "Upload one `.xlsx` file with sheets named **Customers**, **Racks**, **Assignments** "
            "and optionally **Rules** (aliases like 'Rack Catalog' or 'Assignment Rules' also work)."
        )
        single_file = st.file_uploader("Excel workbook", type=["xlsx"], key="upload_single")

        col_upload, col_sample = st.columns(2)
        with col_upload:
            if st.button("Upload & Validate", type="primary", key="btn_upload_single"):
                if single_file:
                    try:
                        _load_and_validate(*load_multi_sheet_excel(single_file))
                    except Exception as e:
                        logger.exception("Workbook upload failed")
                        st.error(f"Error loading file: {e}")
                else:
                    st.warning("Please upload an Excel file.")

        with col_sample:
            if st.button("Load Sample Data", key="btn_sample_single"):
                _load_and_validate(*_sample_frames())

    else:
        col1, col2 = st.columns(2)
        with col1:
            customers_file = st.file_uploader("Customer Registry", type=["csv", "xlsx"], key="upload_customers")
            assignments_file = st.file_uploader("Rack Assignments", type=["csv", "xlsx"], key="upload_assignments")
        with col2:
            racks_file = st.file_uploader("Rack Catalog", type=["csv", "xlsx"], key="upload_racks")
            rules_file = st.file_uploader("Assignment Rules (optional)", type=["csv", "xlsx"], key="upload_rules")

        col_upload, col_sample = st.columns(2)
        with col_upload:
            if st.button("Upload & Validate", type="primary", key="btn_upload_multi"):
                if customers_file and racks_file and assignments_file:
                    try:
                        _load_and_validate(
                            load_file(customers_file),
                            load_file(racks_file),
                            load_file(assignments_file),
                            load_file(rules_file) if rules_file else None,
                        )
                    except Exception as e:
                        logger.exception("File upload failed")
                        st.error(f"Error loading files: {e}")
                else:
                    st.warning("Please upload the customer, rack and assignment files.")

        with col_sample:
            if st.button("Load Sample Data", key="btn_sample_multi"):
                _load_and_validate(*_sample_frames())

    st.divider()

    # --- Rack Editor ---
    if is_data_loaded():
        st.subheader("Edit Rack Catalog")
        st.caption("Adjust rack capacities, counts or availability. Changes apply immediately.")

        current_racks = get_racks()
        if current_racks:
            rack_edit_df = pd.DataFrame([{
                "Rack ID": r.rack_id,
                "Location": r.path,
                "Capacity": r.capacity,
                "Current Count": r.current_count,
                "Active": r.is_active,
            } for r in current_racks])

            edited = st.data_editor(
                rack_edit_df,
                disabled=["Rack ID", "Location"],
                use_container_width=True,
                key="edit_racks",
                num_rows="fixed",
            )

            if st.button("Save Rack Changes", key="btn_save_racks"):
                changed = False
                for i, r in enumerate(current_racks):
                    row = edited.iloc[i]
                    new_capacity = int(row["Capacity"])
                    new_count = int(row["Current Count"])
                    new_active = bool(row["Active"])
                    if new_capacity < 0 or new_count < 0:
                        st.error(f"{r.code}: capacity and count cannot be negative.")
                        continue
                    if (new_capacity, new_count, new_active) != (r.capacity, r.current_count, r.is_active):
                        add_audit_entry(
                            "edit_rack", "rack", "capacity/count/active",
                            f"{r.capacity}/{r.current_count}/{r.is_active}",
                            f"{new_capacity}/{new_count}/{new_active}",
                            entity_id=r.rack_id,
                            rationale="Manual rack edit",
                        )
                        r.capacity = new_capacity
                        r.current_count = new_count
                        r.is_active = new_active
                        if new_capacity > 0 and new_count >= new_capacity:
                            r.status = "full"
                        elif r.status == "full":
                            r.status = "available"
                        changed = True
                if changed:
                    set_racks(current_racks)
                    st.success("Rack catalog updated.")
                    st.rerun()
                else:
                    st.info("No changes detected.")

        st.divider()

    # --- Threshold Configuration ---
    st.subheader("Threshold Configuration")

    config = get_rule_config()
    defaults = default_rule_config()

    col1, col2 = st.columns(2)
    with col1:
        capacity_threshold = st.slider(
            "Default Capacity Threshold (%)", 0, 100,
            int(config.get("capacity_threshold_pct", defaults["capacity_threshold_pct"])),
            key="cfg_capacity_threshold",
            help="Threshold offered when linking new racks to a customer.",
        )
        needs_attention = st.slider(
            "Needs Attention Above (%)", 0, 100,
            int(config.get("needs_attention_pct", defaults["needs_attention_pct"])),
            key="cfg_needs_attention",
        )
        over_capacity = st.slider(
            "Over Capacity Above (%)", 0, 100,
            int(config.get("over_capacity_pct", defaults["over_capacity_pct"])),
            key="cfg_over_capacity",
        )
    with col2:
        low_utilization = st.slider(
            "Low Utilization Below (%)", 0, 100,
            int(config.get("low_utilization_pct", defaults["low_utilization_pct"])),
            key="cfg_low_utilization",
        )
        target = st.slider(
            "Rack Planner Target (%)", 50, 100,
            int(config.get("target_utilization_pct", defaults["target_utilization_pct"])),
            key="cfg_target",
        )
        zero_capacity = st.slider(
            "Utilization Reported for Zero-Capacity Racks (%)", 0, 100,
            int(config.get("zero_capacity_utilization_pct", defaults["zero_capacity_utilization_pct"])),
            key="cfg_zero_capacity",
            help="100 treats racks without capacity as saturated.",
        )

    if st.button("Save Threshold Configuration"):
        if needs_attention >= over_capacity:
            st.error("'Needs attention' must be below 'over capacity'.")
        else:
            new_config = {
                "capacity_threshold_pct": float(capacity_threshold),
                "needs_attention_pct": float(needs_attention),
                "over_capacity_pct": float(over_capacity),
                "low_utilization_pct": float(low_utilization),
                "target_utilization_pct": float(target),
                "zero_capacity_utilization_pct": float(zero_capacity),
            }
            set_rule_config(new_config)
            add_audit_entry("config_change", "global", "rule_config", str(config), str(new_config))
            st.success("Threshold configuration saved.")

    st.divider()

    # --- Audit Trail ---
    st.subheader("Audit Trail")

    audit_log = get_audit_log()
    if audit_log:
        audit_df = pd.DataFrame([{
            "Timestamp": entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            "Action": entry.action,
            "Entity": entry.entity_type,
            "ID": entry.entity_id or "—",
            "Field": entry.field_changed,
            "Old Value": entry.old_value[:50],
            "New Value": entry.new_value[:50],
            "Rationale": entry.rationale,
        } for entry in reversed(audit_log)])
        st.dataframe(audit_df, use_container_width=True, height=300)

        csv = audit_df.to_csv(index=False)
        st.download_button("Export Audit Log (CSV)", csv, "audit_log.csv", "text/csv")
    else:
        st.info("No audit entries yet.")
