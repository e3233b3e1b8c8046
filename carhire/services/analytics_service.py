from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal

from carhire.models.records import to_datetime, to_decimal
from carhire.services.common import _store
from carhire.services.identity import require_admin


class AnalyticsService:
    """Aggregations for the admin analytics page."""

    @staticmethod
    def analytics(identity, months: int = 6, store=None):
        require_admin(identity)
        st = store or _store()
        reservations = st.select("reservations", order_by="created_at")

        revenue = sum((to_decimal(r.get("total_price") or 0, "total price") for r in reservations), Decimal("0"))

        # Reservations and revenue grouped by creation month, oldest first
        monthly: "OrderedDict[str, dict]" = OrderedDict()
        for r in reservations:
            if not r.get("created_at"):
                continue
            month = to_datetime(r["created_at"]).strftime("%b %Y")
            bucket = monthly.setdefault(month, {"month": month, "reservations": 0, "revenue": Decimal("0")})
            bucket["reservations"] += 1
            bucket["revenue"] += to_decimal(r.get("total_price") or 0, "total price")

        return {
            "totals": {
                "reservations": len(reservations),
                "users": st.count("profiles"),
                "vehicles": st.count("vehicles"),
                "revenue": revenue,
            },
            "monthly": list(monthly.values())[-months:],
        }
