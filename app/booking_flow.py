from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional, Dict, Any
import random
import re
import string
import time

from email_validator import validate_email as _validate_email, EmailNotValidError

from db.models import Package, User


MIN_PERSONS = 1
MAX_PERSONS = 10

REFERENCE_PREFIX = "NT"
BASE36_ALPHABET = string.digits + string.ascii_uppercase


@dataclass
class BookingState:
    full_name: str = ""
    email: str = ""
    phone: str = ""
    persons: int = MIN_PERSONS
    travel_date: Optional[str] = None
    special_requests: str = ""

    errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_user(cls, user: Optional[User]) -> "BookingState":
        if user is None:
            return cls()
        return cls(full_name=user.name, email=user.email, phone=user.phone)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "full_name": self.full_name.strip(),
            "email": self.email.strip(),
            "phone": self.phone.strip(),
            "persons": self.persons,
            "travel_date": self.travel_date,
            "special_requests": self.special_requests.strip(),
        }


# ----------------- VALIDATORS ------------------------

def validate_email(email: str) -> bool:
    try:
        _validate_email(email, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


def validate_phone(phone: str) -> bool:
    digits = re.sub(r"\D", "", phone or "")
    return 10 <= len(digits) <= 15


def parse_date_str(val: str) -> Optional[date]:
    try:
        return datetime.strptime(val.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        return None


def validate_booking(state: BookingState, package: Package) -> Dict[str, str]:
    """Field -> message for every problem with the form; empty when it can be submitted."""
    errors: Dict[str, str] = {}

    if len(state.full_name.strip()) < 2:
        errors["full_name"] = "Please provide your full name."

    if not validate_email(state.email.strip()):
        errors["email"] = "Invalid email. Please try format: name@example.com"

    if not validate_phone(state.phone):
        errors["phone"] = "Invalid phone number. Please enter a valid mobile number."

    if not MIN_PERSONS <= state.persons <= MAX_PERSONS:
        errors["persons"] = f"Choose between {MIN_PERSONS} and {MAX_PERSONS} persons."

    if not state.travel_date:
        errors["travel_date"] = "Please select a travel date."
    elif package.available_dates and state.travel_date not in package.available_dates:
        errors["travel_date"] = "That date is not available for this package."
    elif parse_date_str(state.travel_date) is None:
        errors["travel_date"] = "Invalid date format. Please use YYYY-MM-DD."

    state.errors = errors
    return errors


# ----------------- TOTALS & REFERENCES ------------------------

def clamp_persons(persons: int) -> int:
    return max(MIN_PERSONS, min(MAX_PERSONS, int(persons)))


def booking_total(price: float, persons: int) -> float:
    return max(price, 0.0) * clamp_persons(persons)


def format_price(amount: float) -> str:
    """$1,500 for whole amounts, $1,500.50 otherwise."""
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("base36 needs a non-negative number")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_booking_reference(now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    # uniqueness is probabilistic only; the table does not enforce it
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    rng = rng or random
    suffix = "".join(rng.choice(BASE36_ALPHABET) for _ in range(4))
    return f"{REFERENCE_PREFIX}-{to_base36(now_ms)}-{suffix}"


def generate_confirmation_text(state: BookingState, package: Package, reference: str) -> str:
    return (
        f"Booking reference: {reference}\n"
        f"Package: {package.title} ({package.destination})\n"
        f"Name: {state.full_name}\n"
        f"Email: {state.email}\n"
        f"Phone: {state.phone or 'N/A'}\n"
        f"Persons: {state.persons}\n"
        f"Travel date: {state.travel_date}\n"
        f"Total: {format_price(booking_total(package.price, state.persons))}"
    )
