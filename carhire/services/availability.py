"""Booking gate: decides whether a reservation attempt may go ahead."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from carhire.exceptions import (
    InvalidDateRangeError,
    InvalidInputError,
    MissingInputError,
    NotAuthenticatedError,
    VehicleUnavailableError,
)
from carhire.models.records import Location, Vehicle, to_datetime
from carhire.services.common import _today
from carhire.services.identity import Identity


@dataclass
class BookingRequest:
    """A booking attempt that passed every check."""
    identity: Identity
    vehicle: Vehicle
    location: Location
    start_date: datetime
    end_date: datetime


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_booking(
        identity: Optional[Identity],
        vehicle: Vehicle,
        start_date,
        end_date,
        location_id: Optional[str],
        active_locations: Mapping[str, Location],
        today: Optional[date] = None,
) -> BookingRequest:
    """
    Validate a booking attempt without touching the store.

    Checks, in order: signed-in identity, vehicle availability flag, presence
    of dates and location, end strictly after start, start not in the past,
    location offered for pickup. The date pickers enforce the same rules in
    the browser; they are checked again here.
    """
    if identity is None:
        raise NotAuthenticatedError("Please sign in to book a vehicle")

    if not vehicle.is_available:
        raise VehicleUnavailableError(f"{vehicle.label} is not available for booking")

    if _blank(start_date) or _blank(end_date) or _blank(location_id):
        raise MissingInputError()

    start = to_datetime(start_date)
    end = to_datetime(end_date)
    if end <= start:
        raise InvalidDateRangeError()
    if start.date() < (today or _today()):
        raise InvalidDateRangeError("Start date cannot be in the past")

    location = active_locations.get(str(location_id))
    if location is None or not location.is_active:
        raise InvalidInputError("Please choose an active pickup location")

    return BookingRequest(identity=identity, vehicle=vehicle, location=location,
                          start_date=start, end_date=end)
