"""
ui/theme.py

Global UI theme for GeoAnalytics Pro.
Modes: Hell, Dunkel
"""

import streamlit as st


THEMES = {
    "Hell": {
        "--bg": "#f8fafc",
        "--panel": "#ffffff",
        "--text": "#0f172a",
        "--muted": "#64748b",
        "--accent": "#2563eb",
        "--border": "#e2e8f0",
    },
    "Dunkel": {
        "--bg": "#0b1220",
        "--panel": "#0f172a",
        "--text": "#e5e7eb",
        "--muted": "#94a3b8",
        "--accent": "#38bdf8",
        "--border": "#1e293b",
    },
}

# bar / pie colors shared by all pages
CHART_COLORS = ["#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#ec4899", "#14b8a6", "#f97316"]


def apply_theme(mode: str):
    colors = THEMES.get(mode, THEMES["Hell"])

    css = f"""
    <style>
    :root {{
        {chr(10).join([f"{k}: {v};" for k, v in colors.items()])}
    }}

    html, body, .stApp {{
        background-color: var(--bg);
        color: var(--text);
    }}

    section[data-testid="stSidebar"] {{
        background-color: var(--panel);
        border-right: 1px solid var(--border);
    }}

    div[data-testid="stMetric"] {{
        background-color: var(--panel);
        border: 1px solid var(--border);
        border-left: 4px solid var(--accent);
        border-radius: 8px;
        padding: 10px 14px;
    }}

    div[data-testid="stMetricLabel"] p {{
        color: var(--muted);
    }}

    h1, h2, h3 {{
        color: var(--text);
    }}
    </style>
    """

    st.markdown(css, unsafe_allow_html=True)
