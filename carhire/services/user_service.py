from __future__ import annotations

import logging

from carhire.exceptions import InvalidInputError, UserNotFoundError
from carhire.models.records import Profile
from carhire.services.common import _store
from carhire.services.identity import require_admin, require_identity
from carhire.utils.constants import Role

logger = logging.getLogger(__name__)


class UserService:
    """User admin operations (role grants) and profile listings."""

    @staticmethod
    def list_users(identity, store=None) -> list[dict]:
        """Every profile, newest first, with its role labels."""
        require_admin(identity)
        st = store or _store()
        roles: dict[str, list[str]] = {}
        for r in st.select("user_roles"):
            roles.setdefault(r["user_id"], []).append(r["role"])
        return [
            {"profile": Profile.from_row(p), "roles": sorted(roles.get(p["id"], []))}
            for p in st.select("profiles", order_by="created_at", descending=True)
        ]

    @staticmethod
    def grant_admin(identity, user_id: str, store=None) -> None:
        require_admin(identity)
        st = store or _store()
        with st.transaction():
            if not st.get("profiles", user_id):
                raise UserNotFoundError()
            if not st.select("user_roles", {"user_id": user_id, "role": Role.ADMIN}):
                st.insert("user_roles", {"user_id": user_id, "role": Role.ADMIN})
        logger.info("Admin role granted to %s by %s", user_id, identity.user_id)

    @staticmethod
    def revoke_admin(identity, user_id: str, store=None) -> None:
        """Remove the admin role; administrators cannot demote themselves."""
        require_admin(identity)
        if user_id == identity.user_id:
            raise InvalidInputError("You cannot remove your own admin role")
        st = store or _store()
        with st.transaction():
            if not st.get("profiles", user_id):
                raise UserNotFoundError()
            for r in st.select("user_roles", {"user_id": user_id, "role": Role.ADMIN}):
                st.delete("user_roles", r["id"])
        logger.info("Admin role revoked from %s by %s", user_id, identity.user_id)

    @staticmethod
    def profile_for(identity, store=None) -> Profile:
        identity = require_identity(identity)
        st = store or _store()
        row = st.get("profiles", identity.user_id)
        if not row:
            raise UserNotFoundError()
        return Profile.from_row(row)
