from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from app.config import AppConfig
from app.router import Navigator
from app.session import SessionStore
from db.models import AdminSettings


@dataclass
class PageContext:
    """Everything a view needs, built once per script run in main()."""
    cfg: AppConfig
    supabase: Any
    store: SessionStore
    nav: Navigator
    settings: AdminSettings
    params: Dict[str, str]
