from __future__ import annotations

import logging
from datetime import date

from carhire.exceptions import DiscountNotFoundError, InvalidDateRangeError, InvalidInputError
from carhire.models.records import Discount, to_int
from carhire.services.common import _store, parse_optional_date
from carhire.services.identity import require_admin

logger = logging.getLogger(__name__)


class DiscountService:
    """
    Coupon codes with a percentage and a validity window.

    Codes are administered here and can be entered when booking, where a
    valid code is recorded on the reservation. They do not change the total.
    """

    @staticmethod
    def _clean(payload: dict) -> dict:
        code = (payload.get("code") or "").strip().upper()
        if not code:
            raise InvalidInputError("Missing discount code")
        pct = to_int(payload.get("percentage"), "percentage")
        if not 1 <= pct <= 100:
            raise InvalidInputError("Percentage must be between 1 and 100")
        start = parse_optional_date(payload.get("start_date"))
        end = parse_optional_date(payload.get("end_date"))
        if start is None or end is None:
            raise InvalidInputError("Missing validity dates")
        if end < start:
            raise InvalidDateRangeError("Discount end date cannot be before its start date")
        return {
            "code": code,
            "percentage": pct,
            "description": (payload.get("description") or "").strip() or None,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }

    @staticmethod
    def _ensure_unique(st, code: str, exclude_id: str | None = None):
        for r in st.select("discounts", {"code": code}):
            if r["id"] != exclude_id:
                raise InvalidInputError(f"Discount code {code} already exists")

    @staticmethod
    def list_discounts(store=None) -> list[Discount]:
        st = store or _store()
        return [Discount.from_row(r) for r in st.select("discounts", order_by="created_at", descending=True)]

    @staticmethod
    def get_discount(discount_id: str, store=None) -> Discount:
        st = store or _store()
        row = st.get("discounts", discount_id)
        if not row:
            raise DiscountNotFoundError()
        return Discount.from_row(row)

    @staticmethod
    def find_valid(code: str, on: date, store=None) -> Discount:
        """Return the active discount for `code` valid on `on`, else raise."""
        st = store or _store()
        key = (code or "").strip().upper()
        for r in st.select("discounts", {"code": key}):
            d = Discount.from_row(r)
            if d.is_valid_on(on):
                return d
        raise InvalidInputError(f"Discount code {key} is not valid")

    @staticmethod
    def create_discount(identity, payload: dict, store=None) -> Discount:
        require_admin(identity)
        st = store or _store()
        data = DiscountService._clean(payload)
        data["is_active"] = True
        with st.transaction():
            DiscountService._ensure_unique(st, data["code"])
            row = st.insert("discounts", data)
        logger.info("Discount %s created (%s%%)", row["code"], row["percentage"])
        return Discount.from_row(row)

    @staticmethod
    def update_discount(identity, discount_id: str, payload: dict, store=None) -> Discount:
        require_admin(identity)
        st = store or _store()
        data = DiscountService._clean(payload)
        with st.transaction():
            DiscountService._ensure_unique(st, data["code"], exclude_id=discount_id)
            row = st.update("discounts", discount_id, data)
            if row is None:
                raise DiscountNotFoundError()
        return Discount.from_row(row)

    @staticmethod
    def toggle_active(identity, discount_id: str, store=None) -> Discount:
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            current = DiscountService.get_discount(discount_id, store=st)
            row = st.update("discounts", discount_id, {"is_active": not current.is_active})
        return Discount.from_row(row)

    @staticmethod
    def delete_discount(identity, discount_id: str, store=None) -> None:
        require_admin(identity)
        st = store or _store()
        if not st.delete("discounts", discount_id):
            raise DiscountNotFoundError()
        logger.info("Discount %s deleted", discount_id)
