# db/models.py
"""
Supabase does not require ORM model classes; these dataclasses only give
the rows a shape. Tables created in the Supabase dashboard:

Table: users
- id (uuid, PK, = auth.users.id)
- email, name, phone (text)
- created_at (timestamp)

Table: packages
- id (uuid, PK)
- title, description, destination, itinerary (text)
- price (numeric)
- images (text[])
- inclusions, exclusions (text, one item per line)
- available_dates (text[], YYYY-MM-DD)
- created_at (timestamp)

Table: bookings
- id (uuid, PK)
- user_id (FK → users.id), package_id (FK → packages.id)
- full_name, email, phone (text)
- persons (int)
- travel_date (date)
- special_requests (text)
- booking_reference (text)
- status (text: pending | confirmed | cancelled)
- created_at (timestamp)

Table: admin_settings (single row)
- id (uuid, PK)
- logo_url, primary_color, secondary_color, font_family, site_title (text)
- updated_at (timestamp)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


BOOKING_STATUSES = ("pending", "confirmed", "cancelled")

DEFAULT_PACKAGE_IMAGE = "https://images.pexels.com/photos/1287460/pexels-photo-1287460.jpeg"


def _split_lines(text: Optional[str]) -> List[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class User:
    id: str
    email: str
    name: str = ""
    phone: str = ""
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "User":
        return cls(
            id=row.get("id", ""),
            email=row.get("email") or "",
            name=row.get("name") or "",
            phone=row.get("phone") or "",
            created_at=row.get("created_at"),
        )


@dataclass
class Package:
    id: str
    title: str
    description: str = ""
    destination: str = ""
    price: float = 0.0
    itinerary: str = ""
    images: List[str] = field(default_factory=list)
    inclusions: str = ""
    exclusions: str = ""
    available_dates: List[str] = field(default_factory=list)
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Package":
        return cls(
            id=row.get("id", ""),
            title=row.get("title") or "",
            description=row.get("description") or "",
            destination=row.get("destination") or "",
            price=_to_float(row.get("price")),
            itinerary=row.get("itinerary") or "",
            images=list(row.get("images") or []),
            inclusions=row.get("inclusions") or "",
            exclusions=row.get("exclusions") or "",
            available_dates=list(row.get("available_dates") or []),
            created_at=row.get("created_at"),
        )

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else DEFAULT_PACKAGE_IMAGE

    def inclusion_list(self) -> List[str]:
        return _split_lines(self.inclusions)

    def exclusion_list(self) -> List[str]:
        return _split_lines(self.exclusions)


@dataclass
class Booking:
    id: str
    user_id: str
    package_id: str
    full_name: str
    email: str
    phone: str = ""
    persons: int = 1
    travel_date: str = ""
    special_requests: str = ""
    booking_reference: str = ""
    status: str = "pending"
    created_at: Optional[str] = None
    package: Optional[Package] = None
    user: Optional[User] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Booking":
        # joined rows arrive as nested dicts under the alias used in select()
        pkg = row.get("package")
        usr = row.get("user")
        return cls(
            id=row.get("id", ""),
            user_id=row.get("user_id") or "",
            package_id=row.get("package_id") or "",
            full_name=row.get("full_name") or "",
            email=row.get("email") or "",
            phone=row.get("phone") or "",
            persons=int(row.get("persons") or 1),
            travel_date=row.get("travel_date") or "",
            special_requests=row.get("special_requests") or "",
            booking_reference=row.get("booking_reference") or "",
            status=row.get("status") or "pending",
            created_at=row.get("created_at"),
            package=Package.from_row(pkg) if isinstance(pkg, dict) else None,
            user=User.from_row(usr) if isinstance(usr, dict) else None,
        )

    def total(self) -> float:
        if self.package is None:
            return 0.0
        return max(self.package.price, 0.0) * max(self.persons, 0)


@dataclass
class AdminSettings:
    id: Optional[str] = None
    logo_url: str = ""
    primary_color: str = "#16a34a"
    secondary_color: str = "#059669"
    font_family: str = "Inter"
    site_title: str = "NatureTrails"

    @classmethod
    def defaults(cls) -> "AdminSettings":
        return cls()

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AdminSettings":
        # blank columns fall back to the defaults, same as a missing row
        base = cls.defaults()
        return cls(
            id=row.get("id"),
            logo_url=row.get("logo_url") or base.logo_url,
            primary_color=row.get("primary_color") or base.primary_color,
            secondary_color=row.get("secondary_color") or base.secondary_color,
            font_family=row.get("font_family") or base.font_family,
            site_title=row.get("site_title") or base.site_title,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "logo_url": self.logo_url,
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
            "font_family": self.font_family,
            "site_title": self.site_title,
        }
