from typing import Dict, Any, List, Optional
from email.mime.text import MIMEText
from datetime import datetime, timezone
import smtplib

from app.config import AppConfig
from app.logger import get_logger, mask_phone
from db.exceptions import DataError, NotFoundError, error_message
from db.models import AdminSettings, Booking, BOOKING_STATUSES, Package, User


logger = get_logger("tools")

USER_BOOKINGS_SELECT = "*, package:packages(title, destination, images, price)"
ADMIN_BOOKINGS_SELECT = (
    "*, package:packages(title, destination, price, images), user:users(name, email)"
)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _execute(query, operation: str):
    """Run a PostgREST query; any provider failure becomes a DataError."""
    try:
        return query.execute()
    except DataError:
        raise
    except Exception as e:
        raise DataError(error_message(e), operation=operation) from e


# --- PACKAGES -----------------------------------------------------------------

def fetch_packages(supabase, limit: Optional[int] = None) -> List[Package]:
    """Newest packages first. Errors are logged and give an empty list."""
    try:
        query = supabase.table("packages").select("*").order("created_at", desc=True)
        if limit:
            query = query.limit(limit)
        response = _execute(query, "fetch_packages")
        return [Package.from_row(row) for row in response.data or []]
    except DataError as e:
        logger.error("Error fetching packages: %s", e.message)
        return []


def fetch_package(supabase, package_id: str) -> Optional[Package]:
    try:
        response = _execute(
            supabase.table("packages").select("*").eq("id", package_id).limit(1),
            "fetch_package",
        )
    except DataError as e:
        logger.error("Error fetching package %s: %s", package_id, e.message)
        return None

    if not response.data:
        return None
    return Package.from_row(response.data[0])


def create_package(supabase, payload: Dict[str, Any]) -> Package:
    response = _execute(supabase.table("packages").insert(payload), "create_package")
    if not response.data:
        raise DataError("Failed to insert package. No data returned.", "create_package")
    logger.info("Package created: %s", response.data[0].get("id"))
    return Package.from_row(response.data[0])


def update_package(supabase, package_id: str, payload: Dict[str, Any]) -> None:
    _execute(supabase.table("packages").update(payload).eq("id", package_id), "update_package")
    logger.info("Package updated: %s", package_id)


def delete_package(supabase, package_id: str) -> None:
    _execute(supabase.table("packages").delete().eq("id", package_id), "delete_package")
    logger.info("Package deleted: %s", package_id)


# --- USERS --------------------------------------------------------------------

def fetch_user_profile(supabase, user_id: str) -> Optional[User]:
    """Profile row for an auth identity. Raises DataError on failure, NotFoundError on a miss."""
    response = _execute(
        supabase.table("users").select("*").eq("id", user_id).limit(1),
        "fetch_user_profile",
    )
    if not response.data:
        raise NotFoundError(f"No profile for user {user_id}", "fetch_user_profile")
    return User.from_row(response.data[0])


def insert_user_profile(supabase, user_id: str, email: str, name: str, phone: str) -> None:
    _execute(
        supabase.table("users").insert(
            {"id": user_id, "email": email, "name": name, "phone": phone}
        ),
        "insert_user_profile",
    )
    logger.info("Profile created for %s (phone %s)", user_id, mask_phone(phone))


def fetch_users(supabase) -> List[User]:
    try:
        response = _execute(
            supabase.table("users").select("*").order("created_at", desc=True),
            "fetch_users",
        )
        return [User.from_row(row) for row in response.data or []]
    except DataError as e:
        logger.error("Error fetching users: %s", e.message)
        return []


def delete_user(supabase, user_id: str) -> None:
    _execute(supabase.table("users").delete().eq("id", user_id), "delete_user")
    logger.info("User profile deleted: %s", user_id)


def count_rows(supabase, table: str) -> int:
    try:
        response = _execute(
            supabase.table(table).select("*", count="exact", head=True),
            f"count_{table}",
        )
        return response.count or 0
    except DataError as e:
        logger.error("Error counting %s: %s", table, e.message)
        return 0


# --- BOOKINGS -----------------------------------------------------------------

def create_booking(supabase, user_id: str, package_id: str, form: Dict[str, Any],
                   booking_reference: str) -> Booking:
    payload = {
        "user_id": user_id,
        "package_id": package_id,
        "full_name": form["full_name"],
        "email": form["email"],
        "phone": form.get("phone", ""),
        "persons": int(form["persons"]),
        "travel_date": str(form["travel_date"]),
        "special_requests": form.get("special_requests", ""),
        "booking_reference": booking_reference,
        "status": "pending",
    }
    response = _execute(supabase.table("bookings").insert(payload), "create_booking")
    if not response.data:
        raise DataError("Failed to insert booking. No data returned.", "create_booking")

    logger.info(
        "Booking %s created for package %s (phone %s)",
        booking_reference, package_id, mask_phone(payload["phone"]),
    )
    return Booking.from_row(response.data[0])


def fetch_user_bookings(supabase, user_id: str) -> List[Booking]:
    try:
        response = _execute(
            supabase.table("bookings")
            .select(USER_BOOKINGS_SELECT)
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "fetch_user_bookings",
        )
        return [Booking.from_row(row) for row in response.data or []]
    except DataError as e:
        logger.error("Error fetching bookings: %s", e.message)
        return []


def fetch_all_bookings(supabase) -> List[Booking]:
    try:
        response = _execute(
            supabase.table("bookings")
            .select(ADMIN_BOOKINGS_SELECT)
            .order("created_at", desc=True),
            "fetch_all_bookings",
        )
        return [Booking.from_row(row) for row in response.data or []]
    except DataError as e:
        logger.error("Error fetching bookings: %s", e.message)
        return []


def update_booking_status(supabase, booking_id: str, status: str) -> None:
    if status not in BOOKING_STATUSES:
        raise ValueError(f"Unknown booking status: {status}")
    _execute(
        supabase.table("bookings").update({"status": status}).eq("id", booking_id),
        "update_booking_status",
    )
    logger.info("Booking %s set to %s", booking_id, status)


# --- SITE SETTINGS ------------------------------------------------------------

def fetch_settings(supabase) -> AdminSettings:
    """The settings row, or the defaults when there is none (or it can't be read)."""
    try:
        response = _execute(
            supabase.table("admin_settings").select("*").limit(1),
            "fetch_settings",
        )
    except DataError as e:
        logger.error("Error fetching settings: %s", e.message)
        return AdminSettings.defaults()

    if not response.data:
        return AdminSettings.defaults()
    return AdminSettings.from_row(response.data[0])


def save_settings(supabase, settings: AdminSettings) -> None:
    payload = {**settings.to_payload(), "updated_at": _utcnow()}
    table = supabase.table("admin_settings")
    if settings.id:
        _execute(table.update(payload).eq("id", settings.id), "save_settings")
    else:
        _execute(table.insert(payload), "save_settings")
    logger.info("Site settings saved")


# --- EMAIL TOOL -------------------------------------------------------------

def email_tool(cfg: AppConfig, to_email: str, subject: str, body: str) -> Dict[str, Any]:
    if not cfg.email or not cfg.email.smtp_host:
        logger.info("Email skipped: no SMTP config provided.")
        return {"success": True, "error": None}

    msg = MIMEText(body, "plain")
    msg["Subject"] = subject
    msg["From"] = f"{cfg.email.from_name} <{cfg.email.from_email}>"
    msg["To"] = to_email

    try:
        with smtplib.SMTP(cfg.email.smtp_host, cfg.email.smtp_port) as server:
            server.starttls()
            server.login(cfg.email.smtp_user, cfg.email.smtp_password)
            server.send_message(msg)
        return {"success": True, "error": None}

    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Email to %s failed", to_email)
        return {"success": False, "error": str(e)}
