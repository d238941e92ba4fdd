from __future__ import annotations

import sys
import os

# --- Add project root to sys.path ---
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

import streamlit as st

# IMPORTS
from app import tools
from app.config import ConfigError, load_config
from app.logger import setup_logger
from app.router import Navigator, match_route, render_guarded
from app.session import get_session_store
from app.context import PageContext
from app.components import render_flash, render_footer, render_header
from app.theme import inject_custom_css
from app import views, admin_dashboard, admin_catalog
from db.database import get_supabase_client


VIEWS = {
    "home": views.render_home,
    "auth": views.render_auth,
    "packages": views.render_packages,
    "package_details": views.render_package_details,
    "booking": views.render_booking,
    "profile": views.render_profile,
    "admin_login": admin_dashboard.render_admin_login,
    "admin_dashboard": admin_dashboard.render_admin_dashboard,
    "admin_packages": admin_catalog.render_admin_packages,
    "admin_users": admin_dashboard.render_admin_users,
    "admin_bookings": admin_dashboard.render_admin_bookings,
    "admin_settings": admin_catalog.render_admin_settings,
}


def main():
    st.set_page_config(
        page_title="NatureTrails",
        page_icon="🏔️",
        layout="wide",
        initial_sidebar_state="auto",
    )

    try:
        cfg = load_config()
    except ConfigError as e:
        st.error(f"Configuration error: {e}")
        st.stop()

    logger = setup_logger(level=cfg.log_level)

    supabase = get_supabase_client(cfg.supabase)
    store = get_session_store(supabase, cfg.admin_email)
    nav = Navigator()
    settings = tools.fetch_settings(supabase)
    inject_custom_css(settings)

    matched = match_route(nav.current)
    params = matched[1] if matched else {}
    ctx = PageContext(cfg=cfg, supabase=supabase, store=store, nav=nav, settings=settings, params=params)

    render_flash()

    if matched is None:
        logger.info("No route for %s", nav.current)
        render_header(ctx)
        views.render_not_found(ctx)
        render_footer(ctx)
        return

    route = matched[0]
    view = VIEWS[route.name]

    if route.public_chrome:
        render_header(ctx)
        render_guarded(lambda: view(ctx), route.guard, store, nav)
        render_footer(ctx)
    else:
        render_guarded(lambda: view(ctx), route.guard, store, nav)


if __name__ == "__main__":
    main()
