from functools import wraps

from flask import flash, g, redirect, url_for

from carhire.services.identity import current_identity


def load_identity():
    """before_request hook: resolve the session identity once per request."""
    g.identity = current_identity()


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if g.get("identity") is None:
            flash("Please sign in first", "warning")
            return redirect(url_for("auth.login_form"))
        return fn(*args, **kwargs)

    return wrapper


def role_required(*roles):
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            identity = g.get("identity")
            if identity is None:
                flash("Please sign in first", "warning")
                return redirect(url_for("auth.login_form"))
            if not identity.roles & set(roles):
                flash("Insufficient permission", "danger")
                return redirect(url_for("views.dashboard"))
            return fn(*args, **kwargs)

        return wrapper

    return deco


admin_required = role_required("admin")
