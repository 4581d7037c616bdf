"""Streamlit dashboard for the mortgage-default workflow."""
