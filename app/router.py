from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Tuple

import streamlit as st

from app.logger import get_logger


logger = get_logger("router")

USER = "user"
ADMIN = "admin"

AUTH_PATH = "/auth"
ADMIN_LOGIN_PATH = "/admin/login"


# ---------------------- ROUTE TABLE ----------------------

@dataclass(frozen=True)
class Route:
    pattern: str
    name: str
    guard: Optional[str] = None  # None | "user" | "admin"
    public_chrome: bool = True   # header + footer around the view


ROUTES: List[Route] = [
    Route("/", "home"),
    Route("/auth", "auth"),
    Route("/packages", "packages"),
    Route("/packages/:id", "package_details"),
    Route("/booking/:id", "booking", guard=USER),
    Route("/profile", "profile", guard=USER),
    Route("/admin/login", "admin_login", public_chrome=False),
    Route("/admin", "admin_dashboard", guard=ADMIN, public_chrome=False),
    Route("/admin/packages", "admin_packages", guard=ADMIN, public_chrome=False),
    Route("/admin/users", "admin_users", guard=ADMIN, public_chrome=False),
    Route("/admin/bookings", "admin_bookings", guard=ADMIN, public_chrome=False),
    Route("/admin/settings", "admin_settings", guard=ADMIN, public_chrome=False),
]


def _segments(path: str) -> List[str]:
    return [part for part in path.strip().split("/") if part]


def normalize_path(path: str) -> str:
    return "/" + "/".join(_segments(path or "/"))


def match_route(path: str) -> Optional[Tuple[Route, Dict[str, str]]]:
    parts = _segments(path)
    for route in ROUTES:
        pattern = _segments(route.pattern)
        if len(pattern) != len(parts):
            continue
        params: Dict[str, str] = {}
        for expected, actual in zip(pattern, parts):
            if expected.startswith(":"):
                params[expected[1:]] = actual
            elif expected != actual:
                break
        else:
            return route, params
    return None


# ---------------------- NAVIGATION ----------------------

class Navigator:
    """Current path plus a history stack, kept in session state.

    ``navigate(path)`` pushes, ``navigate(path, replace=True)`` overwrites the
    top entry so the page being left can't be returned to with ``back()``.
    """

    def __init__(self, state: Optional[MutableMapping[str, Any]] = None,
                 query_params: Optional[MutableMapping[str, Any]] = None,
                 rerun: Optional[Callable[[], None]] = None):
        self._state = st.session_state if state is None else state
        self._query_params = st.query_params if query_params is None else query_params
        self._rerun = st.rerun if rerun is None else rerun

        if "nav_history" not in self._state:
            start = normalize_path(self._query_params.get("path", "/"))
            self._state["nav_history"] = [start]

    @property
    def history(self) -> List[str]:
        return self._state["nav_history"]

    @property
    def current(self) -> str:
        return self.history[-1]

    def navigate(self, path: str, replace: bool = False) -> None:
        path = normalize_path(path)
        if replace:
            self.history[-1] = path
        else:
            self.history.append(path)
        self._query_params["path"] = path
        logger.debug("navigate %s (replace=%s)", path, replace)
        self._rerun()

    def back(self) -> None:
        if len(self.history) > 1:
            self.history.pop()
            self._query_params["path"] = self.current
            self._rerun()


# ---------------------- ROUTE GUARD ----------------------

LOADING = "loading"
REDIRECTING = "redirecting"
RENDERING = "rendering"


@dataclass(frozen=True)
class GuardOutcome:
    state: str
    target: Optional[str] = None


def evaluate(store, guard: Optional[str]) -> GuardOutcome:
    if guard is None:
        return GuardOutcome(RENDERING)
    if store.loading:
        return GuardOutcome(LOADING)
    if guard == ADMIN and not store.is_admin:
        return GuardOutcome(REDIRECTING, ADMIN_LOGIN_PATH)
    if guard == USER and store.user is None:
        return GuardOutcome(REDIRECTING, AUTH_PATH)
    return GuardOutcome(RENDERING)


def render_guarded(view: Callable[[], None], guard: Optional[str], store, nav: Navigator) -> GuardOutcome:
    outcome = evaluate(store, guard)
    if outcome.state == LOADING:
        with st.spinner("Loading..."):
            st.empty()
    elif outcome.state == REDIRECTING:
        nav.navigate(outcome.target, replace=True)
    else:
        view()
    return outcome
