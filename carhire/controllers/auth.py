from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from ..exceptions import InvalidInputError
from ..services import identity as idp

bp = Blueprint("auth", __name__, url_prefix="/auth")


def _safe_next(target: str | None) -> str | None:
    """Only follow relative, same-site redirect targets."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


@bp.get("/register")
def register_form():
    return render_template("auth/register.html")


@bp.post("/register")
def register_submit():
    form = request.form
    try:
        idp.register(
            username=form.get("username"),
            password=form.get("password") or "",
            full_name=form.get("full_name") or "",
            phone=form.get("phone"),
        )
    except InvalidInputError as e:
        flash(e.message, "danger")
        return redirect(url_for("auth.register_form"))

    flash("Registration successful. Please sign in.", "success")
    return redirect(url_for("auth.login_form"))


@bp.get("/login")
def login_form():
    if g.get("identity") is not None:
        return redirect(url_for("views.dashboard"))
    return render_template("auth/login.html", next=request.args.get("next", ""))


@bp.post("/login")
def login_submit():
    identity = idp.authenticate(request.form.get("username", ""), request.form.get("password", ""))
    if identity is None:
        flash("Invalid credentials", "danger")
        return redirect(url_for("auth.login_form"))

    idp.sign_in(identity)
    flash(f"Welcome back, {identity.username}", "success")
    return redirect(_safe_next(request.form.get("next")) or url_for("views.dashboard"))


@bp.get("/logout")
def logout():
    idp.sign_out()
    flash("Logged out", "info")
    return redirect(url_for("auth.login_form"))
