# app/filters.py
"""Client-side filtering and aggregates over already fetched rows."""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple

from db.models import Booking, BOOKING_STATUSES, Package, User


# (value, label); "3000" has no upper bound
PRICE_BRACKETS: List[Tuple[str, str]] = [
    ("", "All Prices"),
    ("0-1000", "Under $1,000"),
    ("1000-2000", "$1,000 - $2,000"),
    ("2000-3000", "$2,000 - $3,000"),
    ("3000", "Above $3,000"),
]


def parse_price_range(value: str) -> Tuple[Optional[float], Optional[float]]:
    if not value:
        return None, None
    low, _, high = value.partition("-")
    return float(low), (float(high) if high else None)


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def matches_package(pkg: Package, search: str = "", price_range: str = "", destination: str = "") -> bool:
    if search and not (
        _contains(pkg.title, search)
        or _contains(pkg.destination, search)
        or _contains(pkg.description, search)
    ):
        return False

    low, high = parse_price_range(price_range)
    if low is not None and pkg.price < low:
        return False
    if high is not None and pkg.price > high:
        return False

    if destination and not _contains(pkg.destination, destination):
        return False

    return True


def filter_packages(packages: Iterable[Package], search: str = "", price_range: str = "",
                    destination: str = "") -> List[Package]:
    return [p for p in packages if matches_package(p, search, price_range, destination)]


def filter_bookings(bookings: Iterable[Booking], search: str = "", status: str = "") -> List[Booking]:
    results = []
    for b in bookings:
        if search:
            title = b.package.title if b.package else ""
            if not any(_contains(text, search) for text in (b.full_name, b.email, b.booking_reference, title)):
                continue
        if status and b.status != status:
            continue
        results.append(b)
    return results


def filter_users(users: Iterable[User], search: str = "") -> List[User]:
    if not search:
        return list(users)
    return [u for u in users if any(_contains(text, search) for text in (u.name, u.email, u.phone))]


def destinations(packages: Iterable[Package]) -> List[str]:
    return sorted({p.destination for p in packages if p.destination})


# ----------------- AGGREGATES ------------------------

def status_counts(bookings: Iterable[Booking]) -> Dict[str, int]:
    counts = {status: 0 for status in BOOKING_STATUSES}
    for b in bookings:
        counts[b.status] = counts.get(b.status, 0) + 1
    return counts


def confirmed_revenue(bookings: Iterable[Booking]) -> float:
    return sum(b.total() for b in bookings if b.status == "confirmed")


def booking_counts_by_user(bookings: Iterable[Booking]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for b in bookings:
        counts[b.user_id] = counts.get(b.user_id, 0) + 1
    return counts
