"""
Typed records for the rows held by the data store.

The store hands out loosely-typed dicts; every row that enters the booking
workflow is mapped through `from_row`, which coerces the column types and
raises InvalidInputError for rows that cannot be trusted.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from carhire.exceptions import InvalidInputError
from carhire.utils.constants import RESERVATION_STATUSES, VIOLATION_STATUSES

CENT = Decimal("0.01")


# ------------------------- coercion helpers -------------------------
def to_datetime(value) -> datetime:
    """
    Coerce a date-like value to a naive UTC datetime.
    Accepts datetime, date (taken as midnight), 'YYYY-MM-DD' or an ISO
    timestamp with an optional 'Z' / offset suffix.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            raise InvalidInputError(f"Invalid date: {value!r}") from None
    else:
        raise InvalidInputError(f"Invalid date: {value!r}")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def to_date(value) -> date:
    """Coerce a date-like value to a date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return to_datetime(value).date()


def to_decimal(value, name: str) -> Decimal:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"Invalid {name}: {value!r}") from None
    if not d.is_finite():
        raise InvalidInputError(f"Invalid {name}: {value!r}")
    return d


def to_money(value, name: str) -> Decimal:
    """A finite Decimal rounded to cents."""
    d = to_decimal(value, name)
    try:
        return d.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInputError(f"Invalid {name}: {value!r}") from None


def to_int(value, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid {name}: {value!r}") from None


def to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "on", "yes")
    return bool(value)


def _required(row: dict, key: str):
    value = row.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInputError(f"Missing {key.replace('_', ' ')}")
    return value


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


# ------------------------------ records ------------------------------
@dataclass
class Vehicle:
    id: str
    make: str
    model: str
    year: int
    type: str
    price_per_day: Decimal
    seats: int
    transmission: str
    fuel_type: str
    is_available: bool = True
    location_id: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    features: list[str] = field(default_factory=list)
    created_at: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.make} {self.model}"

    @classmethod
    def from_row(cls, row: dict) -> "Vehicle":
        price = to_money(_required(row, "price_per_day"), "daily rate")
        if price < 0:
            raise InvalidInputError("Daily rate cannot be negative")
        features = row.get("features") or []
        if not isinstance(features, (list, tuple)):
            features = [features]
        return cls(
            id=str(_required(row, "id")),
            make=str(_required(row, "make")),
            model=str(_required(row, "model")),
            year=to_int(row.get("year") or 0, "year"),
            type=str(row.get("type") or ""),
            price_per_day=price,
            seats=to_int(row.get("seats") or 0, "seats"),
            transmission=str(row.get("transmission") or ""),
            fuel_type=str(row.get("fuel_type") or ""),
            is_available=to_bool(row.get("is_available", True)),
            location_id=_optional_str(row.get("location_id")),
            image_url=_optional_str(row.get("image_url")),
            description=_optional_str(row.get("description")),
            features=[str(f) for f in features],
            created_at=row.get("created_at"),
        )


@dataclass
class Location:
    id: str
    name: str
    address: str
    city: str
    country: str
    is_active: bool = True
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Location":
        return cls(
            id=str(_required(row, "id")),
            name=str(_required(row, "name")),
            address=str(row.get("address") or ""),
            city=str(row.get("city") or ""),
            country=str(row.get("country") or ""),
            is_active=to_bool(row.get("is_active", True)),
            created_at=row.get("created_at"),
        )


@dataclass
class Reservation:
    id: str
    user_id: str
    vehicle_id: str
    location_id: str
    start_date: datetime
    end_date: datetime
    total_price: Decimal
    status: str
    discount_id: Optional[str] = None
    notified: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Reservation":
        status = str(_required(row, "status")).lower()
        if status not in RESERVATION_STATUSES:
            raise InvalidInputError(f"Unknown reservation status '{status}'")
        start = to_datetime(_required(row, "start_date"))
        end = to_datetime(_required(row, "end_date"))
        if end <= start:
            raise InvalidInputError("Reservation end date must be after its start date")
        return cls(
            id=str(_required(row, "id")),
            user_id=str(_required(row, "user_id")),
            vehicle_id=str(_required(row, "vehicle_id")),
            location_id=str(_required(row, "location_id")),
            start_date=start,
            end_date=end,
            total_price=to_decimal(row.get("total_price") or 0, "total price"),
            status=status,
            discount_id=_optional_str(row.get("discount_id")),
            notified=to_bool(row.get("notified", False)),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass
class Discount:
    id: str
    code: str
    percentage: int
    start_date: date
    end_date: date
    is_active: bool = True
    description: Optional[str] = None
    created_at: Optional[str] = None

    def is_valid_on(self, day: date) -> bool:
        """True if the discount is switched on and `day` falls inside its window."""
        return self.is_active and self.start_date <= day <= self.end_date

    @classmethod
    def from_row(cls, row: dict) -> "Discount":
        return cls(
            id=str(_required(row, "id")),
            code=str(_required(row, "code")).upper(),
            percentage=to_int(_required(row, "percentage"), "percentage"),
            start_date=to_date(_required(row, "start_date")),
            end_date=to_date(_required(row, "end_date")),
            is_active=to_bool(row.get("is_active", True)),
            description=_optional_str(row.get("description")),
            created_at=row.get("created_at"),
        )


@dataclass
class Feedback:
    id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    reservation_id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Feedback":
        return cls(
            id=str(_required(row, "id")),
            user_id=str(_required(row, "user_id")),
            rating=to_int(_required(row, "rating"), "rating"),
            comment=_optional_str(row.get("comment")),
            reservation_id=_optional_str(row.get("reservation_id")),
            created_at=row.get("created_at"),
        )


@dataclass
class Violation:
    id: str
    user_id: str
    description: str
    status: str = "pending"
    reservation_id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Violation":
        status = str(row.get("status") or "pending").lower()
        if status not in VIOLATION_STATUSES:
            raise InvalidInputError(f"Unknown violation status '{status}'")
        return cls(
            id=str(_required(row, "id")),
            user_id=str(_required(row, "user_id")),
            description=str(_required(row, "description")),
            status=status,
            reservation_id=_optional_str(row.get("reservation_id")),
            created_at=row.get("created_at"),
        )


@dataclass
class Profile:
    id: str
    username: str
    full_name: str = ""
    phone: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Profile":
        return cls(
            id=str(_required(row, "id")),
            username=str(_required(row, "username")),
            full_name=str(row.get("full_name") or ""),
            phone=_optional_str(row.get("phone")),
            created_at=row.get("created_at"),
        )
