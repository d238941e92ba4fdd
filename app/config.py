from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
import os

import streamlit as st


DEFAULT_ADMIN_EMAIL = "admin@123"


class ConfigError(Exception):
    """Raised when a required setting is missing. Fatal at startup."""


# ---------------------- DATA CLASSES ----------------------

@dataclass
class EmailConfig:
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    from_email: str
    from_name: str


@dataclass
class SupabaseConfig:
    url: str
    anon_key: str  # anon key only: row-level security enforces access server side


@dataclass
class AppConfig:
    supabase: SupabaseConfig
    admin_email: str = DEFAULT_ADMIN_EMAIL
    email: Optional[EmailConfig] = None
    log_level: str = "INFO"


# ---------------------- LOADING ----------------------

def _section(secrets: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    try:
        section = secrets[name] if name in secrets else {}
    except Exception:
        # st.secrets raises when no secrets.toml exists at all
        section = {}
    return section or {}


def _default_secrets() -> Mapping[str, Any]:
    try:
        return st.secrets.to_dict()
    except Exception:
        return {}


def load_config(secrets: Optional[Mapping[str, Any]] = None,
                environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    if secrets is None:
        secrets = _default_secrets()
    if environ is None:
        environ = os.environ

    # --- Supabase (required) ---
    supa = _section(secrets, "supabase")
    url = supa.get("url") or environ.get("SUPABASE_URL", "")
    anon_key = supa.get("anon_key") or environ.get("SUPABASE_ANON_KEY", "")
    if not url or not anon_key:
        raise ConfigError("Missing Supabase environment variables")

    # --- Admin ---
    admin = _section(secrets, "admin")
    admin_email = admin.get("email") or environ.get("ADMIN_EMAIL") or DEFAULT_ADMIN_EMAIL

    # --- Email (optional) ---
    # ports are often stored as strings, converting to int keeps smtplib happy
    email = _section(secrets, "email")
    email_cfg = None
    if email.get("smtp_host"):
        email_cfg = EmailConfig(
            smtp_host=email["smtp_host"],
            smtp_port=int(email.get("smtp_port", 587)),
            smtp_user=email.get("smtp_user", ""),
            smtp_password=email.get("smtp_password", ""),
            from_email=email.get("from_email", ""),
            from_name=email.get("from_name", "NatureTrails"),
        )

    # --- Logging ---
    logging_section = _section(secrets, "logging")
    log_level = logging_section.get("level") or environ.get("LOG_LEVEL") or "INFO"

    return AppConfig(
        supabase=SupabaseConfig(url=url, anon_key=anon_key),
        admin_email=admin_email,
        email=email_cfg,
        log_level=str(log_level).upper(),
    )
