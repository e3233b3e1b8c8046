import logging

from flask import Flask, flash, redirect, request, url_for

from .config import Config
from .controllers.admin import bp as admin_bp
from .controllers.auth import bp as auth_bp
from .controllers.reservations import bp as reservations_bp
from .controllers.views import bp as views_bp
from .exceptions import NotAuthenticatedError, PermissionDeniedError, RentalAppError
from .models.store import Store
from .utils.decorators import load_identity
from .utils.filters import fmt_date, fmt_iso_local, money

logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask):
    """Service errors that escape a view become a flash message and a redirect."""

    @app.errorhandler(NotAuthenticatedError)
    def _unauthenticated(e):
        flash(e.message, "warning")
        return redirect(url_for("auth.login_form"))

    @app.errorhandler(PermissionDeniedError)
    def _forbidden(e):
        flash(e.message, "danger")
        return redirect(url_for("views.dashboard"))

    @app.errorhandler(RentalAppError)
    def _app_error(e):
        logger.warning("Unhandled %s on %s: %s", type(e).__name__, request.path, e.message)
        flash(e.message, "danger")
        return redirect(url_for("views.home"))


def create_app(config_object=None):
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(config_object or Config)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # load data.pkl or init default
    Store.instance(
        app.config["DATA_PATH"],
        default_admin=(app.config["DEFAULT_ADMIN_USERNAME"], app.config["DEFAULT_ADMIN_PASSWORD"]),
    )

    app.before_request(load_identity)
    app.register_blueprint(auth_bp)
    app.register_blueprint(views_bp)
    app.register_blueprint(reservations_bp)
    app.register_blueprint(admin_bp)
    _register_error_handlers(app)

    app.jinja_env.filters["fmt_iso_local"] = fmt_iso_local
    app.jinja_env.filters["fmt_date"] = fmt_date
    app.jinja_env.filters["money"] = money

    return app
