"""Admin pages that edit site content: packages and site settings."""
from __future__ import annotations

from typing import Dict, Any, Optional
import html

import streamlit as st

from app import tools
from app.booking_flow import format_price, parse_date_str
from app.components import flash, guarded_submit_button, render_admin_sidebar, show_alert, take_submit
from app.context import PageContext
from app.session import require_admin
from app.theme import FONT_OPTIONS, PRESET_COLORS, safe_color, safe_font
from db.exceptions import DataError
from db.models import AdminSettings, Package


EDITING_KEY = "admin-editing-package"
SHOW_FORM_KEY = "admin-show-package-form"
PACKAGE_SAVING_KEY = "admin-package-saving"
SETTINGS_SAVING_KEY = "admin-settings-saving"


def _lines(text: str):
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def package_payload_from_form(form: Dict[str, Any]) -> Dict[str, Any]:
    """Turn raw form strings into a packages row. Raises ValueError on bad input."""
    title = (form.get("title") or "").strip()
    destination = (form.get("destination") or "").strip()
    if not title or not destination:
        raise ValueError("Title and destination are required.")

    try:
        price = float(form.get("price"))
    except (TypeError, ValueError):
        raise ValueError("Price must be a number.")
    if price < 0:
        raise ValueError("Price cannot be negative.")

    dates = _lines(form.get("available_dates", ""))
    bad = [d for d in dates if parse_date_str(d) is None]
    if bad:
        raise ValueError(f"Invalid dates (use YYYY-MM-DD): {', '.join(bad)}")

    return {
        "title": title,
        "description": (form.get("description") or "").strip(),
        "destination": destination,
        "price": price,
        "itinerary": (form.get("itinerary") or "").strip(),
        "images": _lines(form.get("images", "")),
        "inclusions": (form.get("inclusions") or "").strip(),
        "exclusions": (form.get("exclusions") or "").strip(),
        "available_dates": dates,
    }


# ---------------------- PACKAGES ----------------------

def _reset_form() -> None:
    st.session_state.pop(EDITING_KEY, None)
    st.session_state[SHOW_FORM_KEY] = False


def _package_form(ctx: PageContext, editing: Optional[Package]) -> None:
    st.subheader("Edit Package" if editing else "Add New Package")
    pkg = editing or Package(id="", title="")
    saving = take_submit(PACKAGE_SAVING_KEY)

    with st.form("package-form"):
        c1, c2, c3 = st.columns(3)
        form = {
            "title": c1.text_input("Package Title", value=pkg.title),
            "destination": c2.text_input("Destination", value=pkg.destination),
            "price": c3.number_input("Price ($)", min_value=0.0, step=0.01, value=float(pkg.price)),
            "description": st.text_area("Description", value=pkg.description, height=120),
            "itinerary": st.text_area("Itinerary", value=pkg.itinerary, height=160,
                                      placeholder="Day 1: Arrival and check-in..."),
        }
        i1, i2 = st.columns(2)
        form["inclusions"] = i1.text_area("Inclusions", value=pkg.inclusions,
                                          placeholder="Accommodation\nMeals\nTransportation")
        form["exclusions"] = i2.text_area("Exclusions", value=pkg.exclusions,
                                          placeholder="Personal expenses\nTravel insurance\nTips")
        form["images"] = st.text_area("Image URLs (one per line)", value="\n".join(pkg.images))
        form["available_dates"] = st.text_area("Available Dates (YYYY-MM-DD, one per line)",
                                               value="\n".join(pkg.available_dates),
                                               placeholder="2024-06-15\n2024-07-20")
        save_col, cancel_col = st.columns(2)
        with save_col:
            guarded_submit_button("💾 Update Package" if editing else "💾 Create Package",
                                  "Saving...", key=PACKAGE_SAVING_KEY, busy=saving)
        cancelled = cancel_col.form_submit_button("Cancel", disabled=saving)

    if cancelled:
        _reset_form()
        st.rerun()
    if not saving:
        return

    try:
        payload = package_payload_from_form(form)
    except ValueError as e:
        st.error(str(e))
        return

    try:
        require_admin(ctx.store)
        with st.spinner("Saving..."):
            if editing:
                tools.update_package(ctx.supabase, editing.id, payload)
            else:
                tools.create_package(ctx.supabase, payload)
    except DataError as e:
        show_alert(f"Error saving package: {e.message}")
        return

    flash("Package updated successfully!" if editing else "Package created successfully!")
    _reset_form()
    st.rerun()


def _delete_package(ctx: PageContext, pkg: Package) -> None:
    try:
        require_admin(ctx.store)
        tools.delete_package(ctx.supabase, pkg.id)
    except DataError as e:
        show_alert(f"Error deleting package: {e.message}")
        return
    flash("Package deleted successfully!")
    st.rerun()


def render_admin_packages(ctx: PageContext) -> None:
    render_admin_sidebar(ctx)
    title_col, add_col = st.columns([4, 1])
    title_col.title("🏔️ Manage Packages")
    if add_col.button("➕ Add Package", type="primary", width="stretch"):
        st.session_state.pop(EDITING_KEY, None)
        st.session_state[SHOW_FORM_KEY] = True

    if st.session_state.get(SHOW_FORM_KEY):
        _package_form(ctx, st.session_state.get(EDITING_KEY))
        return

    with st.spinner("Loading packages..."):
        packages = tools.fetch_packages(ctx.supabase)

    if not packages:
        st.info("No packages yet.")
        if st.button("Add First Package"):
            st.session_state[SHOW_FORM_KEY] = True
            st.rerun()
        return

    for pkg in packages:
        with st.container(border=True):
            img_col, info_col, action_col = st.columns([1, 4, 1])
            img_col.image(pkg.primary_image, width="stretch")
            with info_col:
                st.markdown(f"**{pkg.title}** · 📍 {pkg.destination}")
                st.caption(pkg.description[:160])
                st.write(f"{format_price(pkg.price)} · {len(pkg.available_dates)} dates")
            with action_col:
                if st.button("View", key=f"pk-view-{pkg.id}", width="stretch"):
                    ctx.nav.navigate(f"/packages/{pkg.id}")
                if st.button("Edit", key=f"pk-edit-{pkg.id}", width="stretch"):
                    st.session_state[EDITING_KEY] = pkg
                    st.session_state[SHOW_FORM_KEY] = True
                    st.rerun()
                confirm_key = f"pk-confirm-{pkg.id}"
                if st.session_state.get(confirm_key):
                    st.warning("Delete this package?")
                    if st.button("Yes, delete", key=f"pk-yes-{pkg.id}", type="primary"):
                        st.session_state.pop(confirm_key, None)
                        _delete_package(ctx, pkg)
                    if st.button("Keep", key=f"pk-no-{pkg.id}"):
                        st.session_state.pop(confirm_key, None)
                        st.rerun()
                elif st.button("Delete", key=f"pk-del-{pkg.id}", width="stretch"):
                    st.session_state[confirm_key] = True
                    st.rerun()


# ---------------------- SITE SETTINGS ----------------------

def render_admin_settings(ctx: PageContext) -> None:
    render_admin_sidebar(ctx)
    st.title("⚙️ Site Settings")

    with st.spinner("Loading settings..."):
        current = tools.fetch_settings(ctx.supabase)

    saving = take_submit(SETTINGS_SAVING_KEY)
    defaults = AdminSettings.defaults()
    # stored colours are free text; the picker only accepts #rrggbb
    current_primary = safe_color(current.primary_color, defaults.primary_color)
    current_secondary = safe_color(current.secondary_color, defaults.secondary_color)

    preset_names = ["Custom"] + [p["name"] for p in PRESET_COLORS]
    preset = st.selectbox("Colour preset", preset_names)
    chosen = next((p for p in PRESET_COLORS if p["name"] == preset), None)

    with st.form("settings-form"):
        site_title = st.text_input("Site Title", value=current.site_title)
        logo_url = st.text_input("Logo URL", value=current.logo_url)
        c1, c2 = st.columns(2)
        primary = c1.color_picker("Primary Colour",
                                  value=chosen["primary"] if chosen else current_primary)
        secondary = c2.color_picker("Secondary Colour",
                                    value=chosen["secondary"] if chosen else current_secondary)
        font = st.selectbox("Font Family", FONT_OPTIONS,
                            index=FONT_OPTIONS.index(safe_font(current.font_family)))
        guarded_submit_button("💾 Save Settings", "Saving...", key=SETTINGS_SAVING_KEY, busy=saving)

    updated = AdminSettings(
        id=current.id,
        logo_url=logo_url.strip(),
        primary_color=primary,
        secondary_color=secondary,
        font_family=font,
        site_title=site_title.strip() or defaults.site_title,
    )

    st.subheader("Preview")
    with st.container(border=True):
        if updated.logo_url:
            st.image(updated.logo_url, width=64)
        st.markdown(
            f"<h3 style='color:{safe_color(primary, current_primary)}; "
            f"font-family:\"{safe_font(font)}\"'>{html.escape(updated.site_title)}</h3>"
            f"<p style='color:{safe_color(secondary, current_secondary)}'>Secondary colour sample</p>",
            unsafe_allow_html=True,
        )

    if not saving:
        return

    try:
        require_admin(ctx.store)
        with st.spinner("Saving..."):
            tools.save_settings(ctx.supabase, updated)
    except DataError as e:
        show_alert(f"Error saving settings: {e.message}")
        return

    flash("Settings saved successfully!")
    st.rerun()
