"""
Custom exception classes for the car rental web app.

Services raise these; controllers catch them and flash the message instead of
letting a generic 500 page through. Every error is scoped to the single
request that triggered it.
"""


class RentalAppError(Exception):
    """Base class for all application errors."""

    default_message = "Error: something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---- identity ----
class NotAuthenticatedError(RentalAppError):
    """Raised when no session identity can be resolved."""

    default_message = "Please sign in to continue"


class PermissionDeniedError(RentalAppError):
    """Raised when the identity lacks the role or ownership required."""

    default_message = "Insufficient permission"


# ---- input ----
class InvalidInputError(RentalAppError):
    """Raised when submitted data is malformed or out of range."""

    default_message = "Error: invalid input"


class MissingInputError(InvalidInputError):
    """Raised when a required field (dates, location, ...) is absent."""

    default_message = "Please select dates and location"


class InvalidDateRangeError(InvalidInputError):
    """Raised when the end date is not after the start date, or start is in the past."""

    default_message = "End date must be after start date"


# ---- lookups ----
class NotFoundError(RentalAppError):
    default_message = "Error: record not found"


class VehicleNotFoundError(NotFoundError):
    default_message = "Vehicle not found"


class ReservationNotFoundError(NotFoundError):
    default_message = "Reservation not found"


class LocationNotFoundError(NotFoundError):
    default_message = "Location not found"


class DiscountNotFoundError(NotFoundError):
    default_message = "Discount not found"


class ViolationNotFoundError(NotFoundError):
    default_message = "Violation report not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


# ---- workflow ----
class VehicleUnavailableError(RentalAppError):
    """Raised when a vehicle is flagged unavailable for new bookings."""

    default_message = "This vehicle is not available"


class InvalidTransitionError(RentalAppError):
    """Raised when a reservation is asked to leave a terminal status."""

    default_message = "This reservation can no longer change status"


# ---- persistence ----
class DataStoreError(RentalAppError):
    """Raised when a write to the data store fails; prior state is kept."""

    default_message = "The data store could not complete the operation"
