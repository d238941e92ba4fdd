"""Public and signed-in traveller pages."""
from __future__ import annotations

from datetime import datetime

import streamlit as st

from app import tools
from app.booking_flow import (
    BookingState,
    MAX_PERSONS,
    MIN_PERSONS,
    booking_total,
    format_price,
    generate_booking_reference,
    generate_confirmation_text,
    validate_booking,
    validate_phone,
)
from app.components import (
    flash,
    guarded_submit_button,
    image_gallery,
    not_found,
    package_card,
    show_alert,
    status_badge,
    take_submit,
)
from app.context import PageContext
from app.filters import PRICE_BRACKETS, destinations, filter_packages, status_counts
from app.logger import get_logger
from db.exceptions import DataError, ProfileCreationError, error_message


logger = get_logger("views")

BANNER_IMAGE = "https://images.pexels.com/photos/1287460/pexels-photo-1287460.jpeg"


def _format_date(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%B %d, %Y")
    except (AttributeError, ValueError):
        return value or "—"


def _package_grid(ctx: PageContext, packages, key_prefix: str) -> None:
    cols = st.columns(3)
    for i, pkg in enumerate(packages):
        with cols[i % 3]:
            package_card(
                pkg,
                on_view=lambda pid: ctx.nav.navigate(f"/packages/{pid}"),
                on_book=lambda pid: ctx.nav.navigate(f"/booking/{pid}"),
                key_prefix=key_prefix,
            )


# ---------------------- HOME ----------------------

def render_home(ctx: PageContext) -> None:
    st.image(BANNER_IMAGE, width="stretch")
    st.title(f"Discover the wild with {ctx.settings.site_title}")
    if ctx.store.user is not None:
        st.caption(f"Welcome back, {ctx.store.user.name}!")
    else:
        st.caption("Handpicked nature escapes: mountains, forests and coastlines.")

    st.subheader("Featured Packages")
    with st.spinner("Loading packages..."):
        packages = tools.fetch_packages(ctx.supabase, limit=6)

    if not packages:
        st.info("No packages available yet. Check back soon!")
    else:
        _package_grid(ctx, packages, "home")

    if st.button("View All Packages", type="primary"):
        ctx.nav.navigate("/packages")


# ---------------------- AUTH ----------------------

def render_auth(ctx: PageContext) -> None:
    is_sign_up = st.toggle("I'm new here, create an account", key="auth-signup")
    st.header("Create Account" if is_sign_up else "Welcome Back")
    st.caption(
        "Join us for amazing travel adventures" if is_sign_up
        else "Sign in to your account to continue"
    )

    with st.form("auth-form"):
        name = phone = ""
        if is_sign_up:
            name = st.text_input("Full Name", placeholder="Enter your full name")
            phone = st.text_input("Phone Number", placeholder="Enter your phone number")
        email = st.text_input("Email Address", placeholder="Enter your email address")
        password = st.text_input("Password", type="password", placeholder="Enter your password")
        submitted = st.form_submit_button("Create Account" if is_sign_up else "Sign In")

    if not submitted:
        return

    if not email or not password or (is_sign_up and (not name or not phone)):
        st.error("Please fill in all fields.")
        return
    if is_sign_up and not validate_phone(phone):
        st.error("Invalid phone number. Use 10 to 15 digits.")
        return

    try:
        with st.spinner("Please wait..."):
            if is_sign_up:
                ctx.store.sign_up(email, password, name, phone)
            else:
                ctx.store.sign_in(email, password)
    except ProfileCreationError as e:
        st.error(f"Your account was created but your profile could not be saved: {e.message}")
        return
    except Exception as e:
        logger.info("Auth failed for %s: %s", email, error_message(e))
        st.error(error_message(e) or "An error occurred")
        return

    if is_sign_up:
        st.success("Account created successfully! Please check your email for verification.")
    else:
        ctx.nav.navigate("/")


# ---------------------- PACKAGES ----------------------

def render_packages(ctx: PageContext) -> None:
    st.title("All Packages")
    with st.spinner("Loading packages..."):
        packages = tools.fetch_packages(ctx.supabase)

    search_col, price_col, dest_col = st.columns([2, 1, 1])
    search = search_col.text_input("🔍 Search", placeholder="Search packages...")
    bracket_values = [value for value, _ in PRICE_BRACKETS]
    bracket_labels = dict(PRICE_BRACKETS)
    price_range = price_col.selectbox("Price", bracket_values, format_func=lambda v: bracket_labels[v])
    destination = dest_col.selectbox("Destination", [""] + destinations(packages),
                                     format_func=lambda v: v or "All Destinations")

    filtered = filter_packages(packages, search, price_range, destination)
    st.caption(f"Showing {len(filtered)} of {len(packages)} packages")

    if not filtered:
        st.info("No packages found. Try adjusting your search criteria.")
        return
    _package_grid(ctx, filtered, "list")


def render_package_details(ctx: PageContext) -> None:
    package_id = ctx.params.get("id", "")
    with st.spinner("Loading package..."):
        pkg = tools.fetch_package(ctx.supabase, package_id)

    if pkg is None:
        not_found("Package Not Found", ctx)
        return

    if st.button("← Back to Packages"):
        ctx.nav.navigate("/packages")

    image_gallery(pkg.images, pkg.title, key=f"gallery-{pkg.id}")

    main_col, side_col = st.columns([2, 1])
    with main_col:
        st.title(pkg.title)
        st.caption(f"📍 {pkg.destination}")
        st.write(pkg.description)

        st.subheader("Itinerary")
        st.write(pkg.itinerary or "Itinerary coming soon.")

        inc_col, exc_col = st.columns(2)
        with inc_col:
            st.subheader("Inclusions")
            for item in pkg.inclusion_list():
                st.markdown(f"- ✅ {item}")
        with exc_col:
            st.subheader("Exclusions")
            for item in pkg.exclusion_list():
                st.markdown(f"- ❌ {item}")

    with side_col:
        with st.container(border=True):
            st.markdown(f'<span class="nt-price">{format_price(pkg.price)}</span> per person',
                        unsafe_allow_html=True)
            st.markdown("**Available Dates**")
            if pkg.available_dates:
                for d in pkg.available_dates:
                    st.markdown(f"- 📅 {_format_date(d)}")
            else:
                st.caption("No dates announced yet.")
            if st.button("Book Now", type="primary", width="stretch"):
                ctx.nav.navigate(f"/booking/{pkg.id}")


# ---------------------- BOOKING ----------------------

def _booking_state(ctx: PageContext, package_id: str) -> BookingState:
    key = f"booking-state-{package_id}"
    if key not in st.session_state:
        st.session_state[key] = BookingState.for_user(ctx.store.user)
    return st.session_state[key]


def render_booking(ctx: PageContext) -> None:
    package_id = ctx.params.get("id", "")
    with st.spinner("Loading package..."):
        pkg = tools.fetch_package(ctx.supabase, package_id)

    if pkg is None:
        not_found("Package Not Found", ctx)
        return

    state = _booking_state(ctx, pkg.id)
    submitting_key = f"booking-submitting-{pkg.id}"
    submitting = take_submit(submitting_key)

    if st.button("← Back to Package"):
        ctx.nav.navigate(f"/packages/{pkg.id}")

    st.title(f"Book: {pkg.title}")
    form_col, summary_col = st.columns([2, 1])

    with form_col:
        # outside the form so the total follows the selection immediately
        state.persons = st.selectbox(
            "Number of persons",
            list(range(MIN_PERSONS, MAX_PERSONS + 1)),
            index=state.persons - MIN_PERSONS,
            format_func=lambda n: f"{n} {'Person' if n == 1 else 'People'}",
        )
        total = booking_total(pkg.price, state.persons)

        with st.form(f"booking-form-{pkg.id}"):
            state.full_name = st.text_input("Full Name", value=state.full_name)
            state.email = st.text_input("Email", value=state.email)
            state.phone = st.text_input("Phone", value=state.phone)
            date_options = [""] + pkg.available_dates
            current = state.travel_date if state.travel_date in date_options else ""
            state.travel_date = st.selectbox(
                "Travel Date",
                date_options,
                index=date_options.index(current),
                format_func=lambda d: _format_date(d) if d else "Select a date",
            ) or None
            state.special_requests = st.text_area("Special Requests", value=state.special_requests)

            guarded_submit_button(
                f"Confirm Booking - {format_price(total)}",
                "Processing Booking...",
                key=submitting_key,
                busy=submitting,
            )

        for message in state.errors.values():
            st.error(message)

    with summary_col:
        with st.container(border=True):
            st.subheader("Booking Summary")
            st.image(pkg.primary_image, width="stretch")
            st.markdown(f"**{pkg.title}**  \n📍 {pkg.destination}")
            st.write(f"Price per person: {format_price(pkg.price)}")
            st.write(f"Number of persons: {state.persons}")
            st.markdown(f'Total: <span class="nt-price">{format_price(total)}</span>',
                        unsafe_allow_html=True)

    if submitting:
        _submit_booking(ctx, pkg, state)


def _submit_booking(ctx: PageContext, pkg, state: BookingState) -> None:
    if validate_booking(state, pkg):
        st.rerun()

    reference = generate_booking_reference()
    try:
        with st.spinner("Processing Booking..."):
            tools.create_booking(ctx.supabase, ctx.store.user.id, pkg.id, state.to_payload(), reference)
    except DataError as e:
        logger.error("Error creating booking: %s", e.message)
        show_alert(f"Error creating booking: {e.message}")
        return

    tools.email_tool(
        ctx.cfg,
        to_email=state.email,
        subject=f"{ctx.settings.site_title} booking received",
        body=generate_confirmation_text(state, pkg, reference),
    )
    st.session_state.pop(f"booking-state-{pkg.id}", None)
    flash(f"Booking confirmed! Your booking reference is: {reference}")
    ctx.nav.navigate("/profile")


# ---------------------- PROFILE ----------------------

def render_profile(ctx: PageContext) -> None:
    user = ctx.store.user
    if user is None:
        return

    st.title(f"👤 {user.name}")
    with st.spinner("Loading bookings..."):
        bookings = tools.fetch_user_bookings(ctx.supabase, user.id)

    info_col, bookings_col = st.columns([1, 2])
    with info_col:
        st.subheader("Profile Information")
        st.write(f"✉️ {user.email}")
        st.write(f"📞 {user.phone or '—'}")
        st.write(f"📅 Member since {_format_date(user.created_at or '')}")

        counts = status_counts(bookings)
        st.subheader("Travel Stats")
        c1, c2 = st.columns(2)
        c1.metric("Confirmed", counts["confirmed"])
        c2.metric("Pending", counts["pending"])

    with bookings_col:
        st.subheader("My Bookings")
        if not bookings:
            st.info("No bookings yet. Start exploring our amazing travel packages!")
            if st.button("Explore Packages", type="primary"):
                ctx.nav.navigate("/packages")
            return

        for booking in bookings:
            pkg = booking.package
            with st.container(border=True):
                img_col, detail_col = st.columns([1, 3])
                img_col.image(pkg.primary_image if pkg else BANNER_IMAGE, width="stretch")
                with detail_col:
                    st.markdown(
                        f"**{pkg.title if pkg else 'Package'}** {status_badge(booking.status)}",
                        unsafe_allow_html=True,
                    )
                    st.caption(
                        f"📍 {pkg.destination if pkg else '—'} · "
                        f"📅 {_format_date(booking.travel_date)} · "
                        f"👥 {booking.persons} · Ref {booking.booking_reference}"
                    )
                    if booking.special_requests:
                        st.caption(f"Special requests: {booking.special_requests}")
                    st.write(
                        f"Booked on {_format_date(booking.created_at or '')} · "
                        f"**{format_price(booking.total())}**"
                    )


def render_not_found(ctx: PageContext) -> None:
    not_found("Page Not Found", ctx, back_to="/", back_label="Go Home")
