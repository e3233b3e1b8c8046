from __future__ import annotations

import logging

from carhire.exceptions import InvalidInputError, LocationNotFoundError
from carhire.models.records import Location
from carhire.services.common import _store
from carhire.services.identity import require_admin

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "address", "city", "country")


class LocationService:
    """Pickup locations: listing for bookings, admin create/edit/delete/toggle."""

    @staticmethod
    def _clean(payload: dict) -> dict:
        data = {k: (payload.get(k) or "").strip() for k in REQUIRED_FIELDS}
        missing = [k for k in REQUIRED_FIELDS if not data[k]]
        if missing:
            raise InvalidInputError(f"Missing {', '.join(missing)}")
        return data

    @staticmethod
    def list_locations(store=None) -> list[Location]:
        st = store or _store()
        return [Location.from_row(r) for r in st.select("locations", order_by="created_at", descending=True)]

    @staticmethod
    def active_locations(store=None) -> list[Location]:
        """Locations offered as pickup points for new bookings."""
        st = store or _store()
        rows = st.select("locations", {"is_active": True}, order_by="name")
        return [Location.from_row(r) for r in rows]

    @staticmethod
    def get_location(location_id: str, store=None) -> Location:
        st = store or _store()
        row = st.get("locations", location_id)
        if not row:
            raise LocationNotFoundError()
        return Location.from_row(row)

    @staticmethod
    def create_location(identity, payload: dict, store=None) -> Location:
        require_admin(identity)
        st = store or _store()
        data = LocationService._clean(payload)
        data["is_active"] = True
        row = st.insert("locations", data)
        logger.info("Location %s created (%s)", row["id"], row["name"])
        return Location.from_row(row)

    @staticmethod
    def update_location(identity, location_id: str, payload: dict, store=None) -> Location:
        require_admin(identity)
        st = store or _store()
        row = st.update("locations", location_id, LocationService._clean(payload))
        if row is None:
            raise LocationNotFoundError()
        return Location.from_row(row)

    @staticmethod
    def toggle_active(identity, location_id: str, store=None) -> Location:
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            current = LocationService.get_location(location_id, store=st)
            row = st.update("locations", location_id, {"is_active": not current.is_active})
        return Location.from_row(row)

    @staticmethod
    def delete_location(identity, location_id: str, store=None) -> None:
        """
        Delete a location unless reservations still point at it.
        Vehicles homed there lose their home location.
        """
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            if not st.get("locations", location_id):
                raise LocationNotFoundError()
            if st.count("reservations", {"location_id": location_id}):
                raise InvalidInputError("Cannot delete: reservations exist for this location")
            for v in st.select("vehicles", {"location_id": location_id}):
                st.update("vehicles", v["id"], {"location_id": None})
            st.delete("locations", location_id)
        logger.info("Location %s deleted", location_id)
