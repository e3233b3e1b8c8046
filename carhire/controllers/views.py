from flask import Blueprint, g, render_template

from ..services.reservation_service import ReservationService
from ..services.user_service import UserService
from ..services.vehicle_service import VehicleService
from ..utils.constants import ReservationStatus
from ..utils.decorators import login_required

bp = Blueprint("views", __name__)


@bp.get("/")
def home():
    """Landing page with a few available vehicles."""
    return render_template("index.html", featured=VehicleService.featured())


@bp.get("/dashboard")
@login_required
def dashboard():
    active = ReservationService.reservations_for_user(g.identity, status=ReservationStatus.ACTIVE)
    return render_template("dashboards/dashboard.html", profile=UserService.profile_for(g.identity), active=active)
