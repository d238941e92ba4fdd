from __future__ import annotations

from typing import Callable, List, Optional

import streamlit as st

from app.booking_flow import format_price
from app.context import PageContext
from db.exceptions import error_message
from db.models import DEFAULT_PACKAGE_IMAGE, Package


ADMIN_LINKS = [
    ("/admin", "📈 Dashboard"),
    ("/admin/packages", "🏔️ Manage Packages"),
    ("/admin/users", "👥 Manage Users"),
    ("/admin/bookings", "📅 Manage Bookings"),
    ("/admin/settings", "⚙️ Site Settings"),
]


# --- MESSAGES ---

@st.dialog("Notice")
def show_alert(message: str):
    """Blocking modal with the raw message; closing it reruns the page."""
    st.write(message)
    if st.button("OK", type="primary"):
        st.rerun()


def flash(message: str) -> None:
    """Queue a success message that survives the next rerun (e.g. after navigate)."""
    st.session_state["flash_message"] = message


def render_flash() -> None:
    message = st.session_state.pop("flash_message", None)
    if message:
        st.success(message)


def status_badge(status: str) -> str:
    icons = {"confirmed": "✅", "cancelled": "❌"}
    icon = icons.get(status, "🕒")
    return f'<span class="nt-badge {status}">{icon} {status.capitalize()}</span>'


# --- SUBMIT GUARD ---

def _mark_submitting(key: str) -> None:
    st.session_state[key] = True


def take_submit(key: str) -> bool:
    """Consume the flag set by a guarded submit button.

    The click callback runs before the script, so the run that performs the
    write is the run that draws the button disabled. Consumed on read: an
    interrupted run leaves the button enabled on the next one.
    """
    return bool(st.session_state.pop(key, False))


def guarded_submit_button(label: str, busy_label: str, key: str, busy: bool, **kwargs) -> None:
    st.form_submit_button(
        busy_label if busy else label,
        disabled=busy,
        on_click=_mark_submitting,
        args=(key,),
        **kwargs,
    )


def sign_out_and_leave(ctx: PageContext, target: str = "/") -> None:
    try:
        ctx.store.sign_out()
    except Exception as e:
        st.error(f"Sign out failed: {error_message(e)}")
        return
    ctx.nav.navigate(target)


# --- LAYOUT ---

def render_header(ctx: PageContext) -> None:
    store, nav = ctx.store, ctx.nav
    title_col, *link_cols, signout_col = st.columns([3, 1, 1, 1, 1, 1])

    with title_col:
        if ctx.settings.logo_url:
            st.image(ctx.settings.logo_url, width=48)
        st.markdown(f"### 🏔️ {ctx.settings.site_title}")

    links = [("Home", "/"), ("Packages", "/packages")]
    if store.user is not None:
        links.append(("My Profile", "/profile"))
    else:
        links.append(("Sign In", "/auth"))
    if store.is_admin:
        links.append(("Admin", "/admin"))

    for col, (label, path) in zip(link_cols, links):
        if col.button(label, key=f"hdr-{path}", width="stretch"):
            nav.navigate(path)

    if store.session is not None:
        with signout_col:
            if st.button("Sign Out", key="hdr-signout", width="stretch"):
                sign_out_and_leave(ctx)
    st.divider()


def render_footer(ctx: PageContext) -> None:
    st.divider()
    st.caption(
        f"© {ctx.settings.site_title}. Curated nature journeys, small groups, local guides."
    )


def render_admin_sidebar(ctx: PageContext) -> None:
    with st.sidebar:
        st.title("Admin Panel")
        for path, label in ADMIN_LINKS:
            is_active = ctx.nav.current == path
            if st.button(label, key=f"side-{path}", width="stretch",
                         type="primary" if is_active else "secondary"):
                ctx.nav.navigate(path)
        st.divider()
        if st.button("🌐 View Website", key="side-site", width="stretch"):
            ctx.nav.navigate("/")
        if st.button("🚪 Sign Out", key="side-signout", width="stretch"):
            sign_out_and_leave(ctx)


# --- PACKAGES ---

def package_card(pkg: Package, on_view: Callable[[str], None], on_book: Callable[[str], None],
                 key_prefix: str = "card") -> None:
    with st.container(border=True):
        st.image(pkg.primary_image, width="stretch")
        st.markdown(f"**{pkg.title}**")
        st.caption(f"📍 {pkg.destination}")
        description = pkg.description
        if len(description) > 140:
            description = description[:137] + "..."
        st.write(description)
        st.markdown(f'<span class="nt-price">{format_price(pkg.price)}</span> per person',
                    unsafe_allow_html=True)
        c1, c2 = st.columns(2)
        if c1.button("View Details", key=f"{key_prefix}-view-{pkg.id}", width="stretch"):
            on_view(pkg.id)
        if c2.button("Book Now", key=f"{key_prefix}-book-{pkg.id}", type="primary",
                     width="stretch"):
            on_book(pkg.id)


def image_gallery(images: List[str], title: str, key: str = "gallery") -> None:
    images = images or [DEFAULT_PACKAGE_IMAGE]
    index_key = f"{key}-index"
    index = st.session_state.get(index_key, 0) % len(images)

    st.image(images[index], caption=f"{title} ({index + 1}/{len(images)})", width="stretch")

    if len(images) > 1:
        prev_col, thumbs_col, next_col = st.columns([1, 6, 1])
        if prev_col.button("◀", key=f"{key}-prev"):
            st.session_state[index_key] = (index - 1) % len(images)
            st.rerun()
        if next_col.button("▶", key=f"{key}-next"):
            st.session_state[index_key] = (index + 1) % len(images)
            st.rerun()
        with thumbs_col:
            cols = st.columns(min(len(images), 6))
            for i, (col, url) in enumerate(zip(cols, images)):
                col.image(url, width="stretch")


def not_found(message: str, ctx: Optional[PageContext] = None, back_to: str = "/packages",
              back_label: str = "View All Packages") -> None:
    st.header(message)
    if ctx is not None and st.button(back_label, key="not-found-back"):
        ctx.nav.navigate(back_to)
