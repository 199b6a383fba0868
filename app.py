"""Archive Rack Assignment Planner — Streamlit entry point."""

import streamlit as st
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.logging_config import setup_logging
from components.sidebar import render_sidebar
from data.session_store import initialize_session_state
from tabs import (
    tab_utilization_dashboard,
    tab_customers,
    tab_assignment_simulator,
    tab_assignment_rules,
    tab_rack_planner,
    tab_admin_governance,
)


def main():
    st.set_page_config(
        page_title="Rack Assignment Planner",
        page_icon="🗄️",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    setup_logging()
    initialize_session_state()
    sidebar_state = render_sidebar()

    tab1, tab2, tab3, tab4, tab5, tab6 = st.tabs([
        "📊 Utilization Dashboard",
        "👥 Customers & Racks",
        "🧪 Assignment Simulator",
        "📐 Assignment Rules",
        "⚡ Rack Planner",
        "⚙️ Admin & Governance",
    ])

    with tab1:
        tab_utilization_dashboard.render(sidebar_state)
    with tab2:
        tab_customers.render(sidebar_state)
    with tab3:
        tab_assignment_simulator.render(sidebar_state)
    with tab4:
        tab_assignment_rules.render(sidebar_state)
    with tab5:
        tab_rack_planner.render(sidebar_state)
    with tab6:
        tab_admin_governance.render(sidebar_state)


if __name__ == "__main__":
    main()
