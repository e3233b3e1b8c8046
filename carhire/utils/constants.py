# carhire/utils/constants.py

"""
Global constants for roles, statuses, and allowed vehicle attributes.
These constants are imported by both models and services.
"""


class Role:
    ADMIN = "admin"
    USER = "user"


class ReservationStatus:
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


RESERVATION_STATUSES = (ReservationStatus.ACTIVE, ReservationStatus.COMPLETED, ReservationStatus.CANCELLED)
TERMINAL_STATUSES = {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}


class ViolationStatus:
    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


VIOLATION_STATUSES = (ViolationStatus.PENDING, ViolationStatus.RESOLVED, ViolationStatus.DISMISSED)

# --- Vehicle attributes ---
VEHICLE_TYPES = ("sedan", "suv", "truck", "van", "luxury", "sports")
TRANSMISSIONS = ("automatic", "manual")
FUEL_TYPES = ("gasoline", "diesel", "electric", "hybrid")

# Price filter buckets offered on the vehicles page ("min-max", or a bare "min" for open-ended)
PRICE_RANGES = ("0-50", "51-100", "101-200", "201")
