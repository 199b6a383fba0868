"""Global sidebar controls for warehouse scope and data status."""

import streamlit as st
from dataclasses import dataclass
from typing import Optional
from data.session_store import get_racks, get_customers, get_assignments, is_data_loaded


@dataclass
class SidebarState:
    warehouse: Optional[str]


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    with st.sidebar:
        st.title("Rack Assignment Planner")
        st.divider()

        warehouses = sorted({r.warehouse_name for r in get_racks()})
        selected = st.selectbox(
            "Warehouse",
            options=["All"] + warehouses,
            key="sidebar_warehouse",
        )
        warehouse = selected if selected != "All" else None
        st.session_state["sidebar_state"]["warehouse"] = warehouse

        st.divider()

        if is_data_loaded():
            st.success("Data loaded")
            st.caption(f"Customers: {len(get_customers())}")
            st.caption(f"Racks: {len(get_racks())}")
            st.caption(f"Active links: {sum(1 for a in get_assignments() if a.is_active)}")
        else:
            st.warning("No data loaded — go to Admin tab")

    return SidebarState(warehouse=warehouse)
