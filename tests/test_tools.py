"""
Unit tests for the Supabase data tools.

Reads must log and degrade (empty list / None / defaults); writes must raise
DataError carrying the provider's message verbatim.
"""

from unittest.mock import MagicMock, patch

import pytest

from app import tools
from app.config import AppConfig, EmailConfig, SupabaseConfig
from app.filters import confirmed_revenue
from db.exceptions import DataError, NotFoundError
from db.models import AdminSettings
from conftest import ProviderError, booking_row, package_row


class TestPackages:
    def test_fetch_packages_newest_first(self, supabase):
        supabase.respond("packages", data=[package_row(id="a"), package_row(id="b")])

        result = tools.fetch_packages(supabase)

        assert [p.id for p in result] == ["a", "b"]
        query = supabase.queries_for("packages")[0]
        assert ("order", ("created_at",), {"desc": True}) in query.calls
        assert query.called("limit") == []

    def test_fetch_packages_with_limit(self, supabase):
        tools.fetch_packages(supabase, limit=6)
        assert supabase.queries_for("packages")[0].called("limit") == [("limit", (6,), {})]

    def test_fetch_packages_error_gives_empty_list(self, supabase):
        supabase.respond("packages", error=ProviderError("boom"))
        assert tools.fetch_packages(supabase) == []

    def test_fetch_package_found(self, supabase):
        supabase.respond("packages", data=[package_row(id="pkg-9")])
        pkg = tools.fetch_package(supabase, "pkg-9")
        assert pkg.id == "pkg-9"
        assert ("eq", ("id", "pkg-9"), {}) in supabase.queries_for("packages")[0].calls

    def test_fetch_package_missing_or_failed(self, supabase):
        supabase.respond("packages", data=[])
        supabase.respond("packages", error=ProviderError("invalid input syntax for type uuid"))
        assert tools.fetch_package(supabase, "nope") is None
        assert tools.fetch_package(supabase, "nope") is None

    def test_create_package(self, supabase):
        supabase.respond("packages", data=[package_row(id="new")])
        pkg = tools.create_package(supabase, {"title": "x"})
        assert pkg.id == "new"

    def test_create_package_error_message_verbatim(self, supabase):
        supabase.respond("packages", error=ProviderError("new row violates row-level security policy"))
        with pytest.raises(DataError) as exc:
            tools.create_package(supabase, {"title": "x"})
        assert exc.value.message == "new row violates row-level security policy"

    def test_update_and_delete_by_id(self, supabase):
        tools.update_package(supabase, "pkg-1", {"price": 10})
        tools.delete_package(supabase, "pkg-1")
        update_q, delete_q = supabase.queries_for("packages")
        assert update_q.called("update") == [("update", ({"price": 10},), {})]
        assert ("eq", ("id", "pkg-1"), {}) in update_q.calls
        assert delete_q.called("delete")
        assert ("eq", ("id", "pkg-1"), {}) in delete_q.calls


class TestUsers:
    def test_fetch_user_profile_not_found(self, supabase):
        with pytest.raises(NotFoundError):
            tools.fetch_user_profile(supabase, "ghost")

    def test_fetch_users_error_gives_empty_list(self, supabase):
        supabase.respond("users", error=ProviderError("boom"))
        assert tools.fetch_users(supabase) == []

    def test_count_rows(self, supabase):
        supabase.respond("users", count=12)
        assert tools.count_rows(supabase, "users") == 12
        select = supabase.queries_for("users")[0].called("select")[0]
        assert select[2]["count"] == "exact"

    def test_count_rows_error_is_zero(self, supabase):
        supabase.respond("packages", error=ProviderError("boom"))
        assert tools.count_rows(supabase, "packages") == 0


class TestBookings:
    FORM = {
        "full_name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "5551234567",
        "persons": 3,
        "travel_date": "2030-05-01",
        "special_requests": "Window seat",
    }

    def test_create_booking_is_pending_with_reference(self, supabase):
        supabase.respond("bookings", data=[booking_row(booking_reference="NT-ABC-1234")])

        booking = tools.create_booking(supabase, "user-1", "pkg-1", self.FORM, "NT-ABC-1234")

        payload = supabase.queries_for("bookings")[0].called("insert")[0][1][0]
        assert payload["status"] == "pending"
        assert payload["booking_reference"] == "NT-ABC-1234"
        assert payload["user_id"] == "user-1"
        assert payload["package_id"] == "pkg-1"
        assert payload["persons"] == 3
        assert booking.booking_reference == "NT-ABC-1234"

    def test_create_booking_failure(self, supabase):
        supabase.respond("bookings", error=ProviderError("insert failed"))
        with pytest.raises(DataError, match="insert failed"):
            tools.create_booking(supabase, "user-1", "pkg-1", self.FORM, "NT-X-0000")

    def test_create_booking_without_returned_row(self, supabase):
        with pytest.raises(DataError):
            tools.create_booking(supabase, "user-1", "pkg-1", self.FORM, "NT-X-0000")

    def test_user_bookings_joined_and_filtered(self, supabase):
        supabase.respond("bookings", data=[booking_row()])
        bookings = tools.fetch_user_bookings(supabase, "user-1")
        query = supabase.queries_for("bookings")[0]
        assert query.called("select")[0][1][0] == tools.USER_BOOKINGS_SELECT
        assert ("eq", ("user_id", "user-1"), {}) in query.calls
        assert bookings[0].package.title == "Himalayan Trek"
        assert bookings[0].total() == 1500

    def test_update_status_validates(self, supabase):
        with pytest.raises(ValueError):
            tools.update_booking_status(supabase, "bk-1", "shipped")
        assert supabase.queries_for("bookings") == []

    def test_confirming_pending_booking_raises_revenue(self, supabase):
        supabase.respond("bookings", data=[booking_row(status="pending")])
        before = confirmed_revenue(tools.fetch_all_bookings(supabase))

        tools.update_booking_status(supabase, "bk-1", "confirmed")
        supabase.respond("bookings", data=[booking_row(status="confirmed")])
        after = confirmed_revenue(tools.fetch_all_bookings(supabase))

        update_q = supabase.queries_for("bookings")[1]
        assert update_q.called("update") == [("update", ({"status": "confirmed"},), {})]
        assert (before, after) == (0, 1500)


class TestSettings:
    def test_missing_row_gives_defaults(self, supabase):
        assert tools.fetch_settings(supabase) == AdminSettings.defaults()

    def test_error_gives_defaults(self, supabase):
        supabase.respond("admin_settings", error=ProviderError("boom"))
        assert tools.fetch_settings(supabase).site_title == "NatureTrails"

    def test_existing_row(self, supabase):
        supabase.respond("admin_settings", data=[{"id": "s1", "site_title": "WildWays", "primary_color": ""}])
        settings = tools.fetch_settings(supabase)
        assert settings.id == "s1"
        assert settings.site_title == "WildWays"
        assert settings.primary_color == "#16a34a"

    def test_save_inserts_without_id(self, supabase):
        tools.save_settings(supabase, AdminSettings(site_title="WildWays"))
        query = supabase.queries_for("admin_settings")[0]
        payload = query.called("insert")[0][1][0]
        assert payload["site_title"] == "WildWays"
        assert "updated_at" in payload

    def test_save_updates_existing(self, supabase):
        tools.save_settings(supabase, AdminSettings(id="s1"))
        query = supabase.queries_for("admin_settings")[0]
        assert query.called("update")
        assert ("eq", ("id", "s1"), {}) in query.calls


class TestEmailTool:
    def _cfg(self, email=None):
        return AppConfig(supabase=SupabaseConfig(url="https://x.supabase.co", anon_key="k"), email=email)

    def test_skipped_without_smtp(self):
        assert tools.email_tool(self._cfg(), "a@b.com", "s", "b") == {"success": True, "error": None}

    def test_sends_with_smtp(self):
        email = EmailConfig("smtp.test", 587, "user", "pw", "hello@naturetrails.com", "NatureTrails")
        server = MagicMock()
        with patch("app.tools.smtplib.SMTP") as smtp:
            smtp.return_value.__enter__.return_value = server
            result = tools.email_tool(self._cfg(email), "a@b.com", "Subject", "Body")

        assert result["success"] is True
        smtp.assert_called_once_with("smtp.test", 587)
        server.login.assert_called_once_with("user", "pw")
        sent = server.send_message.call_args[0][0]
        assert sent["To"] == "a@b.com"
        assert sent["From"] == "NatureTrails <hello@naturetrails.com>"

    def test_smtp_failure_reported(self):
        email = EmailConfig("smtp.test", 587, "user", "pw", "hello@naturetrails.com", "NatureTrails")
        with patch("app.tools.smtplib.SMTP", side_effect=OSError("connection refused")):
            result = tools.email_tool(self._cfg(email), "a@b.com", "Subject", "Body")
        assert result == {"success": False, "error": "connection refused"}
