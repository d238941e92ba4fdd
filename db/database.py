# db/database.py

from supabase import create_client, Client
import streamlit as st

from app.config import SupabaseConfig


def create_supabase_client(cfg: SupabaseConfig) -> Client:
    return create_client(cfg.url, cfg.anon_key)


def get_supabase_client(cfg: SupabaseConfig) -> Client:
    """
    Returns the Supabase client for this browser session.

    Each visitor gets their own client because the auth session (and so
    every row-level-security decision) lives on the client object.
    """

    if "supabase_client" not in st.session_state:
        st.session_state.supabase_client = create_supabase_client(cfg)

    return st.session_state.supabase_client
