from .analytics_service import AnalyticsService
from .discount_service import DiscountService
from .feedback_service import FeedbackService
from .location_service import LocationService
from .reservation_service import ReservationService
from .user_service import UserService
from .vehicle_service import VehicleService
from .violation_service import ViolationService

__all__ = [
    "ReservationService",
    "VehicleService",
    "LocationService",
    "DiscountService",
    "FeedbackService",
    "ViolationService",
    "UserService",
    "AnalyticsService",
]
