from __future__ import annotations

from dataclasses import dataclass
from typing import List

import streamlit as st
import pandas as pd
import plotly.express as px

from app import tools
from app.booking_flow import format_price
from app.components import flash, render_admin_sidebar, show_alert, status_badge
from app.context import PageContext
from app.filters import (
    booking_counts_by_user,
    confirmed_revenue,
    filter_bookings,
    filter_users,
    status_counts,
)
from app.logger import get_logger
from app.session import require_admin
from db.exceptions import DataError, error_message
from db.models import Booking, BOOKING_STATUSES


logger = get_logger("admin")

BOOKING_COLUMNS = [
    "booking_reference", "full_name", "email", "phone", "package", "destination",
    "travel_date", "persons", "total", "status", "created_at",
]

# status -> [(label, new status)]
BOOKING_ACTIONS = {
    "pending": [("Confirm", "confirmed"), ("Cancel", "cancelled")],
    "confirmed": [("Cancel", "cancelled")],
    "cancelled": [("Reactivate", "pending")],
}


@dataclass
class DashboardStats:
    total_users: int = 0
    total_packages: int = 0
    total_bookings: int = 0
    pending_bookings: int = 0
    confirmed_bookings: int = 0
    revenue: float = 0.0


def compute_dashboard_stats(total_users: int, total_packages: int, bookings: List[Booking]) -> DashboardStats:
    counts = status_counts(bookings)
    return DashboardStats(
        total_users=total_users,
        total_packages=total_packages,
        total_bookings=len(bookings),
        pending_bookings=counts["pending"],
        confirmed_bookings=counts["confirmed"],
        revenue=confirmed_revenue(bookings),
    )


def bookings_frame(bookings: List[Booking]) -> pd.DataFrame:
    rows = [
        {
            "booking_reference": b.booking_reference,
            "full_name": b.full_name,
            "email": b.email,
            "phone": b.phone,
            "package": b.package.title if b.package else "",
            "destination": b.package.destination if b.package else "",
            "travel_date": b.travel_date,
            "persons": b.persons,
            "total": b.total(),
            "status": b.status,
            "created_at": b.created_at,
        }
        for b in bookings
    ]
    return pd.DataFrame(rows, columns=BOOKING_COLUMNS)


# ---------------------- LOGIN ----------------------

def render_admin_login(ctx: PageContext) -> None:
    if ctx.store.is_admin:
        ctx.nav.navigate("/admin", replace=True)

    st.title("🔐 Admin Login")
    st.caption("Sign in with the administrator account to manage the site.")

    with st.form("admin-login"):
        email = st.text_input("Admin Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In")

    if st.button("← Back to Website"):
        ctx.nav.navigate("/")

    if not submitted:
        return

    try:
        with st.spinner("Signing in..."):
            ctx.store.sign_in(email, password)
    except Exception as e:
        st.error(error_message(e) or "Invalid credentials")
        return

    if not ctx.store.is_admin:
        try:
            ctx.store.sign_out()
        except Exception as e:
            logger.warning("Sign out after refused admin login failed: %s", error_message(e))
        st.error("Access denied. Admin credentials required.")
        return

    ctx.nav.navigate("/admin", replace=True)


# ---------------------- DASHBOARD ----------------------

def render_admin_dashboard(ctx: PageContext) -> None:
    render_admin_sidebar(ctx)
    st.title("📊 Dashboard Overview")

    with st.spinner("Loading statistics..."):
        bookings = tools.fetch_all_bookings(ctx.supabase)
        stats = compute_dashboard_stats(
            tools.count_rows(ctx.supabase, "users"),
            tools.count_rows(ctx.supabase, "packages"),
            bookings,
        )

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Users", stats.total_users)
    col2.metric("Total Packages", stats.total_packages)
    col3.metric("Total Bookings", stats.total_bookings)
    col4.metric("Revenue", format_price(stats.revenue))

    st.divider()
    status_col, actions_col = st.columns(2)
    with status_col:
        st.subheader("Booking Status")
        st.write(f"🕒 Pending: **{stats.pending_bookings}**")
        st.write(f"✅ Confirmed: **{stats.confirmed_bookings}**")
        if bookings:
            counts = status_counts(bookings)
            chart_df = pd.DataFrame({"status": list(counts), "bookings": list(counts.values())})
            fig = px.pie(chart_df, names="status", values="bookings", hole=0.5)
            st.plotly_chart(fig, width="stretch")
        else:
            st.info("No bookings yet.")

    with actions_col:
        st.subheader("Quick Actions")
        if st.button("📅 Manage Bookings", width="stretch"):
            ctx.nav.navigate("/admin/bookings")
        if st.button("🏔️ Add New Package", width="stretch"):
            ctx.nav.navigate("/admin/packages")
        if st.button("👥 View Users", width="stretch"):
            ctx.nav.navigate("/admin/users")
        if st.button("⚙️ Site Settings", width="stretch"):
            ctx.nav.navigate("/admin/settings")


# ---------------------- BOOKINGS ----------------------

def change_booking_status(ctx: PageContext, booking_id: str, new_status: str) -> bool:
    try:
        require_admin(ctx.store)
        tools.update_booking_status(ctx.supabase, booking_id, new_status)
    except DataError as e:
        show_alert(f"Error updating booking: {e.message}")
        return False
    flash(f"Booking {new_status} successfully!")
    return True


def render_admin_bookings(ctx: PageContext) -> None:
    render_admin_sidebar(ctx)
    st.title("📅 Manage Bookings")

    with st.spinner("Loading bookings..."):
        bookings = tools.fetch_all_bookings(ctx.supabase)

    search_col, status_col = st.columns([3, 1])
    search = search_col.text_input("🔍 Search", placeholder="Name, email, reference or package")
    status = status_col.selectbox("Status", [""] + list(BOOKING_STATUSES),
                                  format_func=lambda s: s.capitalize() if s else "All Status")

    counts = status_counts(bookings)
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Pending", counts["pending"])
    m2.metric("Confirmed", counts["confirmed"])
    m3.metric("Cancelled", counts["cancelled"])
    m4.metric("Revenue", format_price(confirmed_revenue(bookings)))

    filtered = filter_bookings(bookings, search, status)
    st.caption(f"Showing {len(filtered)} of {len(bookings)} bookings")

    if not filtered:
        st.info("No bookings found.")
        return

    for booking in filtered:
        with st.container(border=True):
            info_col, action_col = st.columns([4, 1])
            with info_col:
                title = booking.package.title if booking.package else "Package"
                st.markdown(f"**{booking.booking_reference}** · {title} {status_badge(booking.status)}",
                            unsafe_allow_html=True)
                st.caption(
                    f"{booking.full_name} · {booking.email} · {booking.phone} · "
                    f"{booking.persons} person(s) · {booking.travel_date} · "
                    f"{format_price(booking.total())}"
                )
                if booking.special_requests:
                    st.caption(f"Special requests: {booking.special_requests}")
            with action_col:
                for label, new_status in BOOKING_ACTIONS.get(booking.status, []):
                    if st.button(label, key=f"bk-{booking.id}-{new_status}", width="stretch"):
                        if change_booking_status(ctx, booking.id, new_status):
                            st.rerun()

    csv = bookings_frame(filtered).to_csv(index=False).encode("utf-8")
    st.download_button("📥 Download as CSV", csv, "bookings.csv", "text/csv", key="download-csv")


# ---------------------- USERS ----------------------

def render_admin_users(ctx: PageContext) -> None:
    render_admin_sidebar(ctx)
    st.title("👥 Manage Users")

    with st.spinner("Loading users..."):
        users = tools.fetch_users(ctx.supabase)
        per_user = booking_counts_by_user(tools.fetch_all_bookings(ctx.supabase))

    search = st.text_input("🔍 Search", placeholder="Name, email or phone")
    filtered = filter_users(users, search)
    st.caption(f"Showing {len(filtered)} of {len(users)} users")

    if not filtered:
        st.info("No users found.")
        return

    users_df = pd.DataFrame(
        [
            {"name": u.name, "email": u.email, "phone": u.phone,
             "bookings": per_user.get(u.id, 0), "joined": u.created_at}
            for u in filtered
        ]
    )
    st.dataframe(users_df, width="stretch", hide_index=True)

    st.write("### Actions")
    labels = {u.id: f"{u.name} <{u.email}>" for u in filtered}
    user_id = st.selectbox("Select user", list(labels), format_func=labels.get)
    confirm = st.checkbox("I understand this deletes the user's profile")
    if st.button("Delete User Profile", disabled=not confirm):
        try:
            require_admin(ctx.store)
            tools.delete_user(ctx.supabase, user_id)
        except DataError as e:
            logger.error("Error deleting user %s: %s", user_id, e.message)
            show_alert(f"Error deleting user: {e.message}")
            return
        flash("User deleted successfully!")
        st.rerun()
