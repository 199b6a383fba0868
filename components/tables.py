"""Styled dataframe display helpers."""

import streamlit as st
import pandas as pd


def render_status_table(df: pd.DataFrame, status_column: str = "Status"):
    """Render a table with color-coded customer statuses."""
    def color_status(val):
        if val == "over capacity":
            return "background-color: #ffcccc; color: #cc0000; font-weight: bold"
        elif val == "needs attention":
            return "background-color: #fff3cd; color: #856404; font-weight: bold"
        elif val == "active":
            return "background-color: #d4edda; color: #155724; font-weight: bold"
        return ""

    if status_column in df.columns:
        styled = df.style.map(color_status, subset=[status_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)


def render_candidate_table(df: pd.DataFrame, available_column: str = "Available"):
    """Render the evaluator's scan order, highlighting racks below threshold."""
    def color_available(val):
        if val is True or val == "Yes":
            return "color: #155724; font-weight: bold"
        if val is False or val == "No":
            return "color: #cc0000"
        return ""

    if available_column in df.columns:
        styled = df.style.map(color_available, subset=[available_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)
