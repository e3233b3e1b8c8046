from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from carhire.exceptions import InvalidInputError, LocationNotFoundError, VehicleNotFoundError
from carhire.models.records import Vehicle, to_int, to_money
from carhire.services.common import _lc, _store, norm, to_float_safe, valid_image_url
from carhire.services.identity import require_admin
from carhire.utils.constants import FUEL_TYPES, TRANSMISSIONS, VEHICLE_TYPES, ReservationStatus

logger = logging.getLogger(__name__)


def _parse_price_range(value: Optional[str]) -> tuple[Optional[float], Optional[float]]:
    """'51-100' -> (51, 100); '201' -> (201, None); anything unparsable -> (None, None)."""
    if not value or value == "all":
        return None, None
    lo, _, hi = str(value).partition("-")
    return to_float_safe(lo), to_float_safe(hi) if hi else None


class VehicleService:
    """Vehicle catalogue: filter, lookup, admin create/edit/delete, availability toggle."""

    @staticmethod
    def filter_vehicles(search=None, vtype=None, transmission=None, price_range=None, *, store=None) -> list[Vehicle]:
        """
        Filter vehicles by make/model text, type, transmission and a price bucket.
        Empty or 'all' values are ignored; newest vehicles come first.
        """
        # 1. Resolve data source
        st = store or _store()
        res = [Vehicle.from_row(r) for r in st.select("vehicles", order_by="created_at", descending=True)]

        # 2. Make/model search (case-insensitive, partial match)
        kw = _lc(search).strip()
        if kw:
            res = [v for v in res if kw in _lc(v.make) or kw in _lc(v.model)]

        # 3. Type / transmission filters
        vt = norm(vtype)
        if vt and vt != "all":
            res = [v for v in res if norm(v.type) == vt]
        tr = norm(transmission)
        if tr and tr != "all":
            res = [v for v in res if norm(v.transmission) == tr]

        # 4. Price bucket (invalid bounds ignored)
        lo, hi = _parse_price_range(price_range)
        if lo is not None:
            res = [v for v in res if float(v.price_per_day) >= lo]
        if hi is not None:
            res = [v for v in res if float(v.price_per_day) <= hi]

        return res

    @staticmethod
    def featured(limit: int = 3, store=None) -> list[Vehicle]:
        """Newest available vehicles for the landing page."""
        st = store or _store()
        return [v for v in VehicleService.filter_vehicles(store=st) if v.is_available][:limit]

    @staticmethod
    def get_vehicle(vid: str, store=None) -> Vehicle:
        """Return a vehicle by ID or raise VehicleNotFoundError."""
        st = store or _store()
        row = st.get("vehicles", vid)
        if row is None:
            raise VehicleNotFoundError(f"Vehicle '{vid}' not found")
        return Vehicle.from_row(row)

    @staticmethod
    def _clean(payload: dict, st) -> dict:
        make = (payload.get("make") or "").strip()
        model = (payload.get("model") or "").strip()
        if not make or not model:
            raise InvalidInputError("Make and model are required")

        vtype = norm(payload.get("type")) or "sedan"
        transmission = norm(payload.get("transmission")) or "automatic"
        fuel = norm(payload.get("fuel_type")) or "gasoline"
        if vtype not in VEHICLE_TYPES:
            raise InvalidInputError(f"Unknown vehicle type '{vtype}'")
        if transmission not in TRANSMISSIONS:
            raise InvalidInputError(f"Unknown transmission '{transmission}'")
        if fuel not in FUEL_TYPES:
            raise InvalidInputError(f"Unknown fuel type '{fuel}'")

        price = to_money(payload.get("price_per_day"), "daily rate")
        if price <= 0:
            raise InvalidInputError("Daily rate must be positive")
        year = to_int(payload.get("year") or date.today().year, "year")
        if not 1900 <= year <= date.today().year + 1:
            raise InvalidInputError("Invalid year")
        seats = to_int(payload.get("seats") or 5, "seats")
        if seats < 1:
            raise InvalidInputError("Seats must be at least 1")

        location_id = (payload.get("location_id") or "").strip() or None
        if location_id and not st.get("locations", location_id):
            raise LocationNotFoundError()

        image_url = (payload.get("image_url") or "").strip() or None
        if image_url and not valid_image_url(image_url):
            raise InvalidInputError("Image must be a /static/ path or an http(s) URL")

        features = payload.get("features") or []
        if isinstance(features, str):
            features = [f.strip() for f in features.split(",")]

        return {
            "make": make,
            "model": model,
            "year": year,
            "type": vtype,
            "transmission": transmission,
            "fuel_type": fuel,
            "seats": seats,
            "price_per_day": price,
            "description": (payload.get("description") or "").strip() or None,
            "image_url": image_url,
            "location_id": location_id,
            "features": [f for f in features if f],
        }

    @staticmethod
    def admin_create_vehicle(identity, payload: dict, store=None) -> Vehicle:
        """Create a vehicle; new vehicles start available."""
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            data = VehicleService._clean(payload, st)
            data["is_available"] = True
            row = st.insert("vehicles", data)
        logger.info("Vehicle %s created (%s %s)", row["id"], row["make"], row["model"])
        return Vehicle.from_row(row)

    @staticmethod
    def admin_update_vehicle(identity, vehicle_id: str, payload: dict, store=None) -> Vehicle:
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            data = VehicleService._clean(payload, st)
            row = st.update("vehicles", vehicle_id, data)
            if row is None:
                raise VehicleNotFoundError()
        return Vehicle.from_row(row)

    @staticmethod
    def toggle_availability(identity, vehicle_id: str, store=None) -> Vehicle:
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            current = VehicleService.get_vehicle(vehicle_id, store=st)
            row = st.update("vehicles", vehicle_id, {"is_available": not current.is_available})
        logger.info("Vehicle %s availability -> %s", vehicle_id, row["is_available"])
        return Vehicle.from_row(row)

    @staticmethod
    def delete_vehicle(identity, vehicle_id: str, store=None) -> None:
        """
        Delete a vehicle if and only if:
        - the vehicle exists,
        - there are no active reservations referencing it.
        """
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            if not st.get("vehicles", vehicle_id):
                raise VehicleNotFoundError()
            if st.count("reservations", {"vehicle_id": vehicle_id, "status": ReservationStatus.ACTIVE}):
                raise InvalidInputError("Cannot delete: active reservations exist")
            st.delete("vehicles", vehicle_id)
        logger.info("Vehicle %s deleted", vehicle_id)
