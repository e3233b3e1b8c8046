from __future__ import annotations

import logging
from typing import Optional

from carhire.exceptions import InvalidInputError, PermissionDeniedError, ReservationNotFoundError
from carhire.models.records import Feedback, to_int
from carhire.services.common import _store
from carhire.services.identity import Identity, require_admin, require_identity

logger = logging.getLogger(__name__)


def _author_names(st) -> dict[str, str]:
    return {p["id"]: p.get("full_name") or p.get("username") or "" for p in st.select("profiles")}


class FeedbackService:
    """Customer ratings and comments, optionally tied to one of their reservations."""

    @staticmethod
    def submit(identity: Optional[Identity], rating, comment: str = "", reservation_id: Optional[str] = None,
               store=None) -> Feedback:
        identity = require_identity(identity)
        score = to_int(rating or 0, "rating")
        if not 1 <= score <= 5:
            raise InvalidInputError("Please select a rating")

        st = store or _store()
        reservation_id = (reservation_id or "").strip() or None
        with st.transaction():
            if reservation_id:
                r = st.get("reservations", reservation_id)
                if not r:
                    raise ReservationNotFoundError()
                if r.get("user_id") != identity.user_id:
                    raise PermissionDeniedError("You can only review your own reservations")
            row = st.insert("feedback", {
                "user_id": identity.user_id,
                "reservation_id": reservation_id,
                "rating": score,
                "comment": (comment or "").strip() or None,
            })
        logger.info("Feedback %s submitted by %s (rating %s)", row["id"], identity.user_id, score)
        return Feedback.from_row(row)

    @staticmethod
    def list_feedback(identity: Optional[Identity], store=None) -> list[dict]:
        """All feedback, newest first, with the author's name attached."""
        require_admin(identity)
        st = store or _store()
        names = _author_names(st)
        return [
            {"feedback": Feedback.from_row(r), "author": names.get(r.get("user_id"), "Unknown")}
            for r in st.select("feedback", order_by="created_at", descending=True)
        ]
