"""
Identity provider backed by the Flask session and the profiles/user_roles tables.

Workflows never read the session themselves: controllers resolve an
`Identity` once per request and pass it into each service call.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from flask import session

from carhire.exceptions import InvalidInputError, NotAuthenticatedError, PermissionDeniedError
from carhire.services.common import _store
from carhire.utils.constants import Role
from carhire.utils.security import check_hash, generate_hash

logger = logging.getLogger(__name__)

# Compile once at module import
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{6,}$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,30}$")


@dataclass(frozen=True)
class Identity:
    """An authenticated user and the role labels attached to it."""
    user_id: str
    username: str = ""
    roles: frozenset = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles


def roles_for(user_id: str, store=None) -> frozenset:
    """Return the set of role labels for a user id."""
    st = store or _store()
    return frozenset(r.get("role") for r in st.select("user_roles", {"user_id": str(user_id)}))


def identity_for(user_id: str, store=None) -> Identity | None:
    """Build an Identity for a stored profile; None if the profile is gone."""
    st = store or _store()
    profile = st.get("profiles", user_id)
    if not profile:
        return None
    return Identity(user_id=profile["id"], username=profile.get("username", ""),
                    roles=roles_for(profile["id"], st))


def current_identity(store=None) -> Identity | None:
    """Return the identity for the current session, or None when signed out."""
    uid = session.get("uid")
    if not uid:
        return None
    return identity_for(uid, store)


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise NotAuthenticatedError()
    return identity


def require_admin(identity: Identity | None) -> Identity:
    identity = require_identity(identity)
    if not identity.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return identity


# ---------- accounts ----------
def register(username: str, password: str, full_name: str = "", phone: str | None = None,
             store=None) -> Identity:
    """
    Create a profile with role 'user'. The very first profile of an empty
    store is also made an administrator so a fresh install can be managed.
    """
    st = store or _store()
    username = (username or "").strip()
    if not username or not password:
        raise InvalidInputError("Username and password are required.")
    if not USERNAME_PATTERN.match(username):
        raise InvalidInputError("Username must be 3-30 chars (letters, digits, ., _, -).")
    if not PASSWORD_PATTERN.match(password):
        raise InvalidInputError("Password must have at least 6 characters, including A-Z, a-z, and 0-9.")
    if password.lower() == username.lower():
        raise InvalidInputError("Password cannot be the same as username.")

    with st.transaction():
        if st.select("profiles", {"username": username}):
            raise InvalidInputError("Username already exists.")
        first = st.count("profiles") == 0
        profile = st.insert("profiles", {
            "username": username,
            "full_name": (full_name or "").strip() or username,
            "phone": (phone or "").strip() or None,
            "password_hash": generate_hash(password),
        })
        st.insert("user_roles", {"user_id": profile["id"], "role": Role.USER})
        if first:
            st.insert("user_roles", {"user_id": profile["id"], "role": Role.ADMIN})
    logger.info("Registered profile %s (%s)", username, profile["id"])
    return identity_for(profile["id"], st)


def authenticate(username: str, password: str, store=None) -> Identity | None:
    """Check credentials; return the Identity or None."""
    st = store or _store()
    rows = st.select("profiles", {"username": (username or "").strip()})
    if not rows or not check_hash(password or "", rows[0].get("password_hash")):
        return None
    return identity_for(rows[0]["id"], st)


def sign_in(identity: Identity) -> None:
    """Open a session for the identity."""
    session.clear()
    session["uid"] = identity.user_id
    session["username"] = identity.username


def sign_out() -> None:
    session.clear()
