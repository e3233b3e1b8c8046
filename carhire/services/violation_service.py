from __future__ import annotations

import logging
from typing import Optional

from carhire.exceptions import (
    InvalidInputError,
    PermissionDeniedError,
    ReservationNotFoundError,
    ViolationNotFoundError,
)
from carhire.models.records import Violation
from carhire.services.common import _store, norm
from carhire.services.feedback_service import _author_names
from carhire.services.identity import Identity, require_admin, require_identity
from carhire.utils.constants import VIOLATION_STATUSES, ReservationStatus, ViolationStatus

logger = logging.getLogger(__name__)


class ViolationService:
    """Violation reports filed by customers and triaged by administrators."""

    @staticmethod
    def report(identity: Optional[Identity], description: str, reservation_id: Optional[str] = None,
               store=None) -> Violation:
        """File a report; a referenced reservation must be the reporter's own active one."""
        identity = require_identity(identity)
        text = (description or "").strip()
        if not text:
            raise InvalidInputError("Please describe the violation")

        st = store or _store()
        reservation_id = (reservation_id or "").strip() or None
        with st.transaction():
            if reservation_id:
                r = st.get("reservations", reservation_id)
                if not r:
                    raise ReservationNotFoundError()
                if r.get("user_id") != identity.user_id:
                    raise PermissionDeniedError("You can only report on your own reservations")
                if r.get("status") != ReservationStatus.ACTIVE:
                    raise InvalidInputError("Violations can only be reported for active reservations")
            row = st.insert("violations", {
                "user_id": identity.user_id,
                "reservation_id": reservation_id,
                "description": text,
                "status": ViolationStatus.PENDING,
            })
        logger.info("Violation %s reported by %s", row["id"], identity.user_id)
        return Violation.from_row(row)

    @staticmethod
    def list_violations(identity: Optional[Identity], store=None) -> list[dict]:
        require_admin(identity)
        st = store or _store()
        names = _author_names(st)
        return [
            {"violation": Violation.from_row(r), "reporter": names.get(r.get("user_id"), "Unknown")}
            for r in st.select("violations", order_by="created_at", descending=True)
        ]

    @staticmethod
    def update_status(identity: Optional[Identity], violation_id: str, status: str, store=None) -> Violation:
        require_admin(identity)
        new = norm(status)
        if new not in VIOLATION_STATUSES:
            raise InvalidInputError(f"Unknown violation status '{status}'")
        st = store or _store()
        row = st.update("violations", violation_id, {"status": new})
        if row is None:
            raise ViolationNotFoundError()
        logger.info("Violation %s -> %s", violation_id, new)
        return Violation.from_row(row)
