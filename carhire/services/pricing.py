"""Reservation pricing: whole billable days times the vehicle's daily rate."""

from decimal import Decimal

from carhire.exceptions import InvalidDateRangeError, InvalidInputError
from carhire.models.records import to_datetime, to_decimal

MS_PER_DAY = 24 * 60 * 60 * 1000


def billable_days(start, end) -> int:
    """
    Number of days charged for [start, end): the duration rounded up to whole
    days. A partial day counts as a full one.
    """
    d1 = to_datetime(start)
    d2 = to_datetime(end)
    if d2 <= d1:
        raise InvalidDateRangeError()
    delta = d2 - d1
    ms = (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
    return -(-ms // MS_PER_DAY)


def total_price(start, end, rate) -> Decimal:
    """
    billable_days(start, end) x rate, exactly. Vehicle rates are stored in
    cents, so their totals are whole cents too.
    """
    per_day = to_decimal(rate, "daily rate")
    if per_day < 0:
        raise InvalidInputError("Daily rate cannot be negative")
    return per_day * billable_days(start, end)


def quote(vehicle, start, end) -> tuple[int, Decimal]:
    """(days, total) for a vehicle record, used for the booking preview."""
    return billable_days(start, end), total_price(start, end, vehicle.price_per_day)
