# backend/qrmenu/__init__.py
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # One clock for token lifetimes, the subscription gate and timestamps
    from .time_utils import SystemClock
    from .services.token_service import TokenCodec

    clock = app.config.get("CLOCK") or SystemClock()
    app.extensions["qrmenu.clock"] = clock
    app.extensions["qrmenu.token_codec"] = TokenCodec(
        secret=app.config["JWT_SECRET"],
        access_ttl=app.config["JWT_ACCESS_TTL"],
        refresh_ttl=app.config["JWT_REFRESH_TTL"],
        clock=clock,
    )

    # Principal -> subscription gate -> tenant scope, before every view
    from .request_context import register_request_hooks
    register_request_hooks(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.context import context_bp
    from .routes.categories import categories_bp
    from .routes.products import products_bp
    from .routes.catalog import catalog_bp
    from .routes.approvals import approvals_bp
    from .routes.restaurants import restaurants_bp
    from .routes.default_categories import default_categories_bp
    from .routes.menu import menu_bp
    from .routes.owner import owner_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(context_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(approvals_bp)
    app.register_blueprint(restaurants_bp)
    app.register_blueprint(default_categories_bp)
    app.register_blueprint(menu_bp)
    app.register_blueprint(owner_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    from .errors import AccessDenied, ApiError
    from .services.tenant_service import TenantAccessError

    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(TenantAccessError)
    def handle_tenant_access_error(exc: TenantAccessError):
        app.logger.warning("Tenant write refused: %s", exc)
        return handle_api_error(AccessDenied())

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({
            "status": exc.code,
            "type": (exc.name or "error").lower().replace(" ", "_"),
            "message": exc.description,
        }), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({
            "status": 500,
            "type": "internal_error",
            "message": "An internal error occurred.",
        }), 500
