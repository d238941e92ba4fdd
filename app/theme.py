import re

import streamlit as st

from db.models import AdminSettings


FONT_OPTIONS = [
    "Inter",
    "Roboto",
    "Open Sans",
    "Lato",
    "Montserrat",
    "Poppins",
    "Source Sans Pro",
    "Nunito",
]

PRESET_COLORS = [
    {"name": "Green", "primary": "#16a34a", "secondary": "#059669"},
    {"name": "Blue", "primary": "#2563eb", "secondary": "#1d4ed8"},
    {"name": "Purple", "primary": "#9333ea", "secondary": "#7c3aed"},
    {"name": "Red", "primary": "#dc2626", "secondary": "#b91c1c"},
    {"name": "Orange", "primary": "#ea580c", "secondary": "#c2410c"},
    {"name": "Teal", "primary": "#0d9488", "secondary": "#0f766e"},
]

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def safe_color(value: str, fallback: str) -> str:
    return value if value and _HEX_COLOR.match(value) else fallback


def safe_font(value: str) -> str:
    return value if value in FONT_OPTIONS else FONT_OPTIONS[0]


def build_css(settings: AdminSettings) -> str:
    # only hex colours and listed fonts reach the <style> block
    defaults = AdminSettings.defaults()
    primary = safe_color(settings.primary_color, defaults.primary_color)
    secondary = safe_color(settings.secondary_color, defaults.secondary_color)
    font = safe_font(settings.font_family)
    font_param = font.replace(" ", "+")

    return f"""
    <style>
        @import url('https://fonts.googleapis.com/css2?family={font_param}:wght@400;600;700&display=swap');

        html, body, [class*="css"], .stMarkdown, .stButton button {{
            font-family: '{font}', sans-serif;
        }}

        /* --- Primary buttons take the site colour --- */
        .stButton button[kind="primary"], .stFormSubmitButton button {{
            background-color: {primary};
            border-color: {primary};
            color: white;
        }}
        .stButton button[kind="primary"]:hover, .stFormSubmitButton button:hover {{
            background-color: {secondary};
            border-color: {secondary};
        }}

        h1, h2, h3 {{ color: {secondary}; }}

        .nt-price {{ color: {primary}; font-weight: 700; font-size: 1.25rem; }}
        .nt-badge {{ padding: 2px 10px; border-radius: 999px; font-size: 0.8rem; }}
        .nt-badge.pending {{ background: #fef9c3; color: #a16207; }}
        .nt-badge.confirmed {{ background: #dcfce7; color: #15803d; }}
        .nt-badge.cancelled {{ background: #fee2e2; color: #b91c1c; }}

        footer {{visibility: hidden;}}
    </style>
    """


def inject_custom_css(settings: AdminSettings) -> None:
    st.markdown(build_css(settings), unsafe_allow_html=True)
