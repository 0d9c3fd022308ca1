"""Streamlit entrypoint for the Route widget page.

Run with ``streamlit run streamlit_route.py`` after exporting ``ZABBIX_URL``
and ``ZABBIX_API_TOKEN``.
"""
from __future__ import annotations

import streamlit as st

from dashboard.app import render_route_widget

st.set_page_config(page_title="Route", layout="wide")
render_route_widget()
