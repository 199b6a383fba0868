"""Typed wrapper around st.session_state for application data.

The session is the read-through owner of reference data. Engine functions
receive plain lists and maps from here and never touch session state.
"""

import streamlit as st
from typing import Dict, List, Optional
from datetime import datetime
from models.customer import Customer
from models.rack import Rack
from models.assignment import Assignment
from models.rule import AssignmentRule
from models.audit import AuditEntry
from config.defaults import (
    DEFAULT_CAPACITY_THRESHOLD_PCT, ZERO_CAPACITY_UTILIZATION_PCT,
    NEEDS_ATTENTION_PCT, OVER_CAPACITY_PCT, LOW_UTILIZATION_PCT, TARGET_UTILIZATION_PCT,
)


def default_rule_config() -> dict:
    return {
        "capacity_threshold_pct": DEFAULT_CAPACITY_THRESHOLD_PCT,
        "zero_capacity_utilization_pct": ZERO_CAPACITY_UTILIZATION_PCT,
        "needs_attention_pct": NEEDS_ATTENTION_PCT,
        "over_capacity_pct": OVER_CAPACITY_PCT,
        "low_utilization_pct": LOW_UTILIZATION_PCT,
        "target_utilization_pct": TARGET_UTILIZATION_PCT,
    }


def initialize_session_state():
    """Initialize all session state keys with defaults."""
    defaults = {
        "customers": [],
        "racks": [],
        "assignments": [],
        "rules": [],
        "audit_log": [],
        "data_loaded": False,
        "rule_config": default_rule_config(),
        "sidebar_state": {
            "warehouse": None,
        },
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


# --- Getters ---

def get_customers() -> List[Customer]:
    return st.session_state.get("customers", [])


def get_racks() -> List[Rack]:
    return st.session_state.get("racks", [])


def get_rack_map() -> Dict[str, Rack]:
    return {r.rack_id: r for r in get_racks()}


def get_assignments() -> List[Assignment]:
    return st.session_state.get("assignments", [])


def get_rules() -> List[AssignmentRule]:
    return st.session_state.get("rules", [])


def get_rule_map() -> Dict[str, AssignmentRule]:
    return {r.rule_id: r for r in get_rules()}


def get_audit_log() -> List[AuditEntry]:
    return st.session_state.get("audit_log", [])


def get_rule_config() -> dict:
    return st.session_state.get("rule_config", {})


def is_data_loaded() -> bool:
    return st.session_state.get("data_loaded", False)


# --- Setters ---

def set_customers(customers: List[Customer]):
    st.session_state["customers"] = customers


def set_racks(racks: List[Rack]):
    st.session_state["racks"] = racks


def set_assignments(assignments: List[Assignment]):
    st.session_state["assignments"] = assignments


def set_rules(rules: List[AssignmentRule]):
    st.session_state["rules"] = rules


def set_data_loaded(loaded: bool):
    st.session_state["data_loaded"] = loaded


def set_rule_config(config: dict):
    st.session_state["rule_config"] = config


def add_customer(customer: Customer):
    st.session_state["customers"].append(customer)


def add_assignments(assignments: List[Assignment]):
    st.session_state["assignments"].extend(assignments)


def add_rule(rule: AssignmentRule):
    st.session_state["rules"].append(rule)


# --- Audit ---

def add_audit_entry(
    action: str,
    entity_type: str,
    field_changed: str,
    old_value: str,
    new_value: str,
    entity_id: Optional[str] = None,
    rationale: str = "",
):
    entry = AuditEntry(
        timestamp=datetime.now(),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        field_changed=field_changed,
        old_value=old_value,
        new_value=new_value,
        rationale=rationale,
    )
    st.session_state["audit_log"].append(entry)
