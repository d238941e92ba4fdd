"""Who is logged in, for one browser session.

A ``SessionStore`` is built once per visitor (see ``get_session_store``) and
handed to the router and views. It owns the auth-change subscription and is
the only writer of ``session``, ``user`` and ``loading``.

Updates come from two places: the one-shot session fetch in ``initialize``
and the auth-change listener. Each update draws a ticket before it starts
and commits only when no later ticket has been committed already, so a slow
initial fetch can never overwrite a newer sign-in or sign-out.
"""
from __future__ import annotations

import threading
from typing import Any, Optional

import streamlit as st

from app import tools
from app.logger import get_logger
from db.exceptions import AuthorizationError, DataError, ProfileCreationError, error_message
from db.models import User


logger = get_logger("session")


class SessionStore:
    def __init__(self, supabase, admin_email: str):
        self._supabase = supabase
        self._admin_email = admin_email
        self._lock = threading.Lock()
        self._next_ticket = 0
        self._committed_ticket = 0
        self._subscription = None

        self.session: Optional[Any] = None
        self.user: Optional[User] = None
        self.loading = True

    # ----------------- LIFECYCLE ------------------------

    def initialize(self) -> None:
        if self._subscription is None:
            self._subscription = self._supabase.auth.on_auth_state_change(self._on_auth_change)

        ticket = self._take_ticket()
        try:
            session = self._supabase.auth.get_session()
        except Exception as e:
            logger.error("Error fetching session: %s", error_message(e))
            session = None
        self._refresh(ticket, session)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_auth_change(self, event, session) -> None:
        logger.debug("Auth event %s", event)
        self._refresh(self._take_ticket(), session)

    # ----------------- STATE UPDATES ------------------------

    def _take_ticket(self) -> int:
        with self._lock:
            self._next_ticket += 1
            return self._next_ticket

    def _refresh(self, ticket: int, session) -> None:
        user = None
        identity = getattr(session, "user", None) if session else None
        if identity is not None:
            try:
                user = tools.fetch_user_profile(self._supabase, identity.id)
            except DataError as e:
                logger.error("Error fetching user profile: %s", e.message)

        with self._lock:
            if ticket < self._committed_ticket:
                logger.debug("Dropping stale session update %s", ticket)
                return
            self._committed_ticket = ticket
            self.session = session
            self.user = user
            self.loading = False

    # ----------------- AUTH OPERATIONS ------------------------

    def sign_in(self, email: str, password: str):
        return self._supabase.auth.sign_in_with_password({"email": email, "password": password})

    def sign_up(self, email: str, password: str, name: str, phone: str):
        response = self._supabase.auth.sign_up({"email": email, "password": password})

        identity = getattr(response, "user", None)
        if identity is not None:
            try:
                tools.insert_user_profile(self._supabase, identity.id, email, name, phone)
            except DataError as e:
                logger.error("Account %s created without profile: %s", identity.id, e.message)
                raise ProfileCreationError(e.message, user_id=identity.id) from e

        return response

    def sign_out(self):
        response = self._supabase.auth.sign_out()
        # the listener normally clears state; make sure it is clear either way
        self._refresh(self._take_ticket(), None)
        return response

    # ----------------- DERIVED ------------------------

    @property
    def email(self) -> Optional[str]:
        identity = getattr(self.session, "user", None) if self.session else None
        return getattr(identity, "email", None)

    @property
    def is_admin(self) -> bool:
        return self.email is not None and self.email == self._admin_email


def require_admin(store: SessionStore) -> None:
    """Client-side gate in front of admin writes. Row-level security is the real one."""
    if not store.is_admin:
        raise AuthorizationError("Admin access required", operation="admin_write")


def get_session_store(supabase, admin_email: str) -> SessionStore:
    if "session_store" not in st.session_state:
        store = SessionStore(supabase, admin_email)
        store.initialize()
        st.session_state.session_store = store
    return st.session_state.session_store
