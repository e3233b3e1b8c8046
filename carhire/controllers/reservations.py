"""Customer-facing pages: browse vehicles, book, manage own reservations, feedback and violations."""

import logging

from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from ..exceptions import (
    DataStoreError,
    NotAuthenticatedError,
    RentalAppError,
    VehicleNotFoundError,
)
from ..services.common import _today
from ..services.feedback_service import FeedbackService
from ..services.location_service import LocationService
from ..services.pricing import quote
from ..services.reservation_service import ReservationService
from ..services.vehicle_service import VehicleService
from ..services.violation_service import ViolationService
from ..utils.constants import PRICE_RANGES, TRANSMISSIONS, VEHICLE_TYPES, ReservationStatus
from ..utils.decorators import login_required

logger = logging.getLogger(__name__)

bp = Blueprint("reservations", __name__)


@bp.get("/vehicles")
def list_vehicles():
    """Vehicles list with filters. Strip empty query params and redirect to a clean URL."""
    q = {k: (v or "").strip() for k, v in request.args.items()}
    nonempty = {k: v for k, v in q.items() if v and v != "all"}

    # If URL has only empty params, redirect to /vehicles without ?search=&type=...
    if request.args and not nonempty:
        return redirect(url_for("reservations.list_vehicles"))

    vehicles = VehicleService.filter_vehicles(
        search=nonempty.get("search"),
        vtype=nonempty.get("type"),
        transmission=nonempty.get("transmission"),
        price_range=nonempty.get("price"),
    )
    return render_template("vehicles/vehicles.html", vehicles=vehicles, filters=nonempty,
                           types=VEHICLE_TYPES, transmissions=TRANSMISSIONS, price_ranges=PRICE_RANGES)


@bp.get("/vehicles/<vid>")
def vehicle_detail(vid):
    """Vehicle detail page with the booking form and, once dates are picked, a price preview."""
    try:
        v = VehicleService.get_vehicle(vid)
    except VehicleNotFoundError:
        flash("Vehicle not found", "danger")
        return redirect(url_for("reservations.list_vehicles"))

    start = request.args.get("start_date") or ""
    end = request.args.get("end_date") or ""
    preview = None
    if start and end:
        try:
            preview = quote(v, start, end)
        except RentalAppError:
            preview = None

    return render_template("vehicles/vehicle_detail.html", v=v,
                           locations=LocationService.active_locations(),
                           start_date=start, end_date=end, preview=preview,
                           min_date=_today().isoformat())


@bp.post("/vehicles/<vid>/book")
def book_vehicle(vid):
    """Create a reservation for the signed-in user; anonymous callers are sent to sign in."""
    form = request.form
    try:
        r = ReservationService.create_reservation(
            g.get("identity"),
            vehicle_id=vid,
            start_date=form.get("start_date"),
            end_date=form.get("end_date"),
            location_id=form.get("location_id"),
            discount_code=form.get("discount_code"),
        )
    except NotAuthenticatedError as e:
        flash(e.message, "warning")
        return redirect(url_for("auth.login_form", next=url_for("reservations.vehicle_detail", vid=vid)))
    except VehicleNotFoundError:
        flash("Vehicle not found", "danger")
        return redirect(url_for("reservations.list_vehicles"))
    except DataStoreError:
        logger.exception("Booking of vehicle %s failed in the data store", vid)
        flash("Failed to create reservation", "danger")
        return redirect(url_for("reservations.vehicle_detail", vid=vid))
    except RentalAppError as e:
        logger.warning("Booking of vehicle %s rejected: %s", vid, e.message)
        flash(e.message, "danger")
        return redirect(url_for("reservations.vehicle_detail", vid=vid))

    code = (form.get("discount_code") or "").strip()
    if code and not r.discount_id:
        flash(f"Discount code {code.upper()} is not valid and was not recorded", "warning")
    flash(f"Reservation created successfully! Total {r.total_price}", "success")
    return redirect(url_for("reservations.my_reservations"))


@bp.get("/my-reservations")
@login_required
def my_reservations():
    rows = ReservationService.reservations_for_user(g.identity)
    return render_template("reservations/my_reservations.html", rows=rows)


@bp.post("/reservations/<rid>/cancel")
@login_required
def cancel_reservation(rid):
    """Cancel one of the user's own reservations. Cancelling twice is harmless."""
    try:
        ReservationService.cancel_reservation(g.identity, rid)
    except DataStoreError:
        logger.exception("Cancelling reservation %s failed in the data store", rid)
        flash("Failed to cancel reservation", "danger")
    except RentalAppError as e:
        logger.warning("Cancel of reservation %s rejected: %s", rid, e.message)
        flash(e.message, "danger")
    else:
        flash("Reservation cancelled successfully", "success")
    return redirect(url_for("reservations.my_reservations"))


@bp.route("/feedback", methods=["GET", "POST"])
@login_required
def leave_feedback():
    if request.method == "POST":
        form = request.form
        try:
            FeedbackService.submit(g.identity, form.get("rating"), form.get("comment", ""),
                                   reservation_id=form.get("reservation_id"))
        except DataStoreError:
            logger.exception("Saving feedback failed")
            flash("Failed to submit feedback", "danger")
        except RentalAppError as e:
            flash(e.message, "danger")
        else:
            flash("Thank you for your feedback!", "success")
            return redirect(url_for("views.dashboard"))

    rows = ReservationService.reservations_for_user(g.identity)
    return render_template("reservations/feedback.html", rows=rows,
                           selected=request.values.get("reservation") or request.values.get("reservation_id"))


@bp.route("/violations", methods=["GET", "POST"])
@login_required
def report_violation():
    if request.method == "POST":
        form = request.form
        try:
            ViolationService.report(g.identity, form.get("description", ""),
                                    reservation_id=form.get("reservation_id"))
        except DataStoreError:
            logger.exception("Saving violation report failed")
            flash("Failed to submit violation report", "danger")
        except RentalAppError as e:
            flash(e.message, "danger")
        else:
            flash("Violation report submitted successfully", "success")
            return redirect(url_for("views.dashboard"))

    rows = ReservationService.reservations_for_user(g.identity, status=ReservationStatus.ACTIVE)
    return render_template("reservations/violation.html", rows=rows,
                           selected=request.values.get("reservation") or request.values.get("reservation_id"))
