"""Administrator screens. Every route requires the 'admin' role."""

import logging

from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from ..exceptions import DataStoreError, NotFoundError, RentalAppError
from ..services.analytics_service import AnalyticsService
from ..services.discount_service import DiscountService
from ..services.feedback_service import FeedbackService
from ..services.location_service import LocationService
from ..services.reservation_service import ReservationService
from ..services.user_service import UserService
from ..services.vehicle_service import VehicleService
from ..services.violation_service import ViolationService
from ..utils.constants import (
    FUEL_TYPES,
    RESERVATION_STATUSES,
    TRANSMISSIONS,
    VEHICLE_TYPES,
    VIOLATION_STATUSES,
)
from ..utils.decorators import admin_required

logger = logging.getLogger(__name__)

bp = Blueprint("admin", __name__, url_prefix="/admin")


@bp.before_request
@admin_required
def _guard():
    """Applies admin_required to the whole blueprint."""
    return None


def _run(action, success: str, failure: str, *args) -> bool:
    """Call a service action with the current identity and flash the outcome."""
    try:
        action(g.identity, *args)
    except DataStoreError:
        logger.exception("%s: data store error", failure)
        flash(failure, "danger")
    except RentalAppError as e:
        logger.warning("%s: %s", failure, e.message)
        flash(e.message, "danger")
    else:
        flash(success, "success")
        return True
    return False


# ---------- vehicles ----------
@bp.get("/vehicles")
def vehicles():
    return render_template("admin/vehicles.html", vehicles=VehicleService.filter_vehicles(),
                           locations=LocationService.active_locations(),
                           types=VEHICLE_TYPES, transmissions=TRANSMISSIONS, fuel_types=FUEL_TYPES)


@bp.post("/vehicles")
def add_vehicle():
    _run(VehicleService.admin_create_vehicle, "Vehicle added successfully", "Failed to add vehicle",
         request.form.to_dict())
    return redirect(url_for("admin.vehicles"))


@bp.get("/vehicles/<vid>/edit")
def edit_vehicle(vid):
    try:
        v = VehicleService.get_vehicle(vid)
    except NotFoundError as e:
        flash(e.message, "danger")
        return redirect(url_for("admin.vehicles"))
    return render_template("admin/vehicle_edit.html", v=v, locations=LocationService.active_locations(),
                           types=VEHICLE_TYPES, transmissions=TRANSMISSIONS, fuel_types=FUEL_TYPES)


@bp.post("/vehicles/<vid>/edit")
def update_vehicle(vid):
    if not _run(VehicleService.admin_update_vehicle, "Vehicle updated successfully", "Failed to update vehicle",
                vid, request.form.to_dict()):
        return redirect(url_for("admin.edit_vehicle", vid=vid))
    return redirect(url_for("admin.vehicles"))


@bp.post("/vehicles/<vid>/toggle")
def toggle_vehicle(vid):
    _run(VehicleService.toggle_availability, "Availability updated", "Failed to update availability", vid)
    return redirect(url_for("admin.vehicles"))


@bp.post("/vehicles/<vid>/delete")
def delete_vehicle(vid):
    _run(VehicleService.delete_vehicle, "Vehicle deleted successfully", "Failed to delete vehicle", vid)
    return redirect(url_for("admin.vehicles"))


# ---------- locations ----------
@bp.get("/locations")
def locations():
    return render_template("admin/locations.html", locations=LocationService.list_locations())


@bp.post("/locations")
def add_location():
    _run(LocationService.create_location, "Location added successfully", "Failed to add location",
         request.form.to_dict())
    return redirect(url_for("admin.locations"))


@bp.get("/locations/<lid>/edit")
def edit_location(lid):
    try:
        loc = LocationService.get_location(lid)
    except NotFoundError as e:
        flash(e.message, "danger")
        return redirect(url_for("admin.locations"))
    return render_template("admin/location_edit.html", loc=loc)


@bp.post("/locations/<lid>/edit")
def update_location(lid):
    if not _run(LocationService.update_location, "Location updated successfully", "Failed to update location",
                lid, request.form.to_dict()):
        return redirect(url_for("admin.edit_location", lid=lid))
    return redirect(url_for("admin.locations"))


@bp.post("/locations/<lid>/toggle")
def toggle_location(lid):
    _run(LocationService.toggle_active, "Location updated", "Failed to update location", lid)
    return redirect(url_for("admin.locations"))


@bp.post("/locations/<lid>/delete")
def delete_location(lid):
    _run(LocationService.delete_location, "Location deleted successfully", "Failed to delete location", lid)
    return redirect(url_for("admin.locations"))


# ---------- discounts ----------
@bp.get("/discounts")
def discounts():
    return render_template("admin/discounts.html", discounts=DiscountService.list_discounts())


@bp.post("/discounts")
def add_discount():
    _run(DiscountService.create_discount, "Discount created successfully", "Failed to create discount",
         request.form.to_dict())
    return redirect(url_for("admin.discounts"))


@bp.get("/discounts/<did>/edit")
def edit_discount(did):
    try:
        d = DiscountService.get_discount(did)
    except NotFoundError as e:
        flash(e.message, "danger")
        return redirect(url_for("admin.discounts"))
    return render_template("admin/discount_edit.html", d=d)


@bp.post("/discounts/<did>/edit")
def update_discount(did):
    if not _run(DiscountService.update_discount, "Discount updated successfully", "Failed to update discount",
                did, request.form.to_dict()):
        return redirect(url_for("admin.edit_discount", did=did))
    return redirect(url_for("admin.discounts"))


@bp.post("/discounts/<did>/toggle")
def toggle_discount(did):
    _run(DiscountService.toggle_active, "Discount updated", "Failed to update discount", did)
    return redirect(url_for("admin.discounts"))


@bp.post("/discounts/<did>/delete")
def delete_discount(did):
    _run(DiscountService.delete_discount, "Discount deleted successfully", "Failed to delete discount", did)
    return redirect(url_for("admin.discounts"))


# ---------- reservations ----------
@bp.get("/reservations")
def reservations():
    return render_template("admin/reservations.html", rows=ReservationService.all_reservations(g.identity),
                           statuses=RESERVATION_STATUSES)


@bp.post("/reservations/<rid>/status")
def reservation_status(rid):
    """Change a reservation's status; completing it makes the vehicle available again."""
    _run(ReservationService.transition_status, "Reservation updated successfully",
         "Failed to update reservation", rid, request.form.get("status", ""))
    return redirect(url_for("admin.reservations"))


# ---------- users ----------
@bp.get("/users")
def users():
    return render_template("admin/users.html", users=UserService.list_users(g.identity))


@bp.post("/users/<uid>/grant-admin")
def grant_admin(uid):
    _run(UserService.grant_admin, "Admin role granted", "Failed to update roles", uid)
    return redirect(url_for("admin.users"))


@bp.post("/users/<uid>/revoke-admin")
def revoke_admin(uid):
    _run(UserService.revoke_admin, "Admin role removed", "Failed to update roles", uid)
    return redirect(url_for("admin.users"))


# ---------- feedback & violations ----------
@bp.get("/feedback")
def feedback():
    return render_template("admin/feedback.html", rows=FeedbackService.list_feedback(g.identity))


@bp.get("/violations")
def violations():
    return render_template("admin/violations.html", rows=ViolationService.list_violations(g.identity),
                           statuses=VIOLATION_STATUSES)


@bp.post("/violations/<vid>/status")
def violation_status(vid):
    _run(ViolationService.update_status, "Violation status updated", "Failed to update violation status",
         vid, request.form.get("status", ""))
    return redirect(url_for("admin.violations"))


# ---------- analytics ----------
@bp.get("/analytics")
def analytics():
    return render_template("admin/analytics.html", data=AnalyticsService.analytics(g.identity))
