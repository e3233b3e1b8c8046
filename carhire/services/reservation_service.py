"""Reservation lifecycle: booking, status transitions, and per-user / admin listings."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from carhire.exceptions import (
    InvalidInputError,
    InvalidTransitionError,
    PermissionDeniedError,
    ReservationNotFoundError,
    VehicleNotFoundError,
)
from carhire.models.records import Reservation, Vehicle
from carhire.services.availability import check_booking
from carhire.services.common import _store, _today, norm
from carhire.services.discount_service import DiscountService
from carhire.services.identity import Identity, require_admin, require_identity
from carhire.services.location_service import LocationService
from carhire.services.pricing import total_price
from carhire.utils.constants import RESERVATION_STATUSES, TERMINAL_STATUSES, ReservationStatus

logger = logging.getLogger(__name__)


class ReservationService:
    """
    Reservation state machine.

        active --(admin)--------------> completed   vehicle.is_available := True
        active --(owner or admin)-----> cancelled

    completed and cancelled are terminal. Asking for the status a reservation
    already has is a no-op.
    """

    @staticmethod
    def create_reservation(
            identity: Optional[Identity],
            vehicle_id: str,
            start_date,
            end_date,
            location_id: Optional[str],
            discount_code: Optional[str] = None,
            store=None,
            today: Optional[date] = None,
    ) -> Reservation:
        """
        Book a vehicle for the identity.

        A discount code that is valid today is recorded on the reservation;
        any other code is ignored and the booking goes ahead.

        The gate check and the insert run in one store transaction, so the
        availability flag cannot change between them. Booking does not touch
        the vehicle's availability flag.
        """
        st = store or _store()
        with st.transaction():
            row = st.get("vehicles", vehicle_id)
            if not row:
                raise VehicleNotFoundError()
            vehicle = Vehicle.from_row(row)
            locations = {loc.id: loc for loc in LocationService.active_locations(store=st)}

            req = check_booking(identity, vehicle, start_date, end_date, location_id, locations, today=today)

            discount_id = None
            if (discount_code or "").strip():
                # Recorded on the reservation only; the total is not reduced.
                try:
                    discount_id = DiscountService.find_valid(discount_code, on=today or _today(), store=st).id
                except InvalidInputError as e:
                    logger.warning("Booking of vehicle %s: %s; code ignored", vehicle.id, e.message)

            price = total_price(req.start_date, req.end_date, vehicle.price_per_day)
            created = st.insert("reservations", {
                "user_id": req.identity.user_id,
                "vehicle_id": vehicle.id,
                "location_id": req.location.id,
                "start_date": req.start_date.isoformat(),
                "end_date": req.end_date.isoformat(),
                "total_price": price,
                "status": ReservationStatus.ACTIVE,
                "discount_id": discount_id,
                "notified": False,
            })

        logger.info("Reservation %s created: user=%s vehicle=%s total=%s",
                    created["id"], req.identity.user_id, vehicle.id, price)
        return Reservation.from_row(created)

    @staticmethod
    def transition_status(identity: Optional[Identity], reservation_id: str, new_status: str,
                          store=None) -> Reservation:
        """
        Move a reservation to `new_status`.

        Only administrators may complete (or set any other status); owners
        may cancel their own reservations. Completing frees the vehicle in
        the same transaction. If the store write fails nothing changes.
        """
        status = norm(new_status)
        if status not in RESERVATION_STATUSES:
            raise InvalidInputError(f"Unknown reservation status '{new_status}'")
        identity = require_identity(identity)

        st = store or _store()
        with st.transaction():
            row = st.get("reservations", reservation_id)
            if not row:
                raise ReservationNotFoundError()
            current = Reservation.from_row(row)

            if status == ReservationStatus.CANCELLED:
                if not (identity.is_admin or current.user_id == identity.user_id):
                    raise PermissionDeniedError("You can only cancel your own reservations")
            elif not identity.is_admin:
                raise PermissionDeniedError("Only administrators can change this reservation")

            if current.status == status:
                return current
            if current.status in TERMINAL_STATUSES:
                raise InvalidTransitionError(f"A {current.status} reservation cannot be set to {status}")

            updated = st.update("reservations", current.id, {"status": status})
            if status == ReservationStatus.COMPLETED:
                if st.update("vehicles", current.vehicle_id, {"is_available": True}) is None:
                    logger.warning("Reservation %s completed but vehicle %s no longer exists",
                                   current.id, current.vehicle_id)

        logger.info("Reservation %s: %s -> %s by %s", current.id, current.status, status, identity.user_id)
        return Reservation.from_row(updated)

    @staticmethod
    def cancel_reservation(identity: Optional[Identity], reservation_id: str, store=None) -> Reservation:
        return ReservationService.transition_status(identity, reservation_id, ReservationStatus.CANCELLED, store)

    @staticmethod
    def complete_reservation(identity: Optional[Identity], reservation_id: str, store=None) -> Reservation:
        return ReservationService.transition_status(identity, reservation_id, ReservationStatus.COMPLETED, store)

    # ---------- queries ----------
    @staticmethod
    def get_reservation(reservation_id: str, store=None) -> Reservation:
        st = store or _store()
        row = st.get("reservations", reservation_id)
        if not row:
            raise ReservationNotFoundError()
        return Reservation.from_row(row)

    @staticmethod
    def _joined(rows: list[dict], st) -> list[dict]:
        """Attach vehicle make/model/image and location name/city to each reservation."""
        out = []
        for r in rows:
            v = st.get("vehicles", r.get("vehicle_id")) or {}
            loc = st.get("locations", r.get("location_id")) or {}
            out.append({
                "reservation": Reservation.from_row(r),
                "vehicle": {
                    "id": r.get("vehicle_id"),
                    "make": v.get("make", ""),
                    "model": v.get("model", ""),
                    "image_url": v.get("image_url"),
                },
                "location": {"name": loc.get("name", ""), "city": loc.get("city", "")},
            })
        return out

    @staticmethod
    def reservations_for_user(identity: Optional[Identity], status: Optional[str] = None, store=None):
        """The identity's own reservations, newest first."""
        identity = require_identity(identity)
        st = store or _store()
        where = {"user_id": identity.user_id}
        if status:
            where["status"] = status
        rows = st.select("reservations", where, order_by="created_at", descending=True)
        return ReservationService._joined(rows, st)

    @staticmethod
    def all_reservations(identity: Optional[Identity], store=None):
        """Every reservation, newest first (administrators only)."""
        require_admin(identity)
        st = store or _store()
        rows = st.select("reservations", order_by="created_at", descending=True)
        return ReservationService._joined(rows, st)
