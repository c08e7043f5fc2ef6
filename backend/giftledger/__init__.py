# backend/giftledger/__init__.py
from flask import Flask, jsonify

from .config import Config
from .exceptions import GiftLedgerError
from .extensions import store, sessions
from .logging_config import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(level=app.config["LOG_LEVEL"])

    # Initialize extensions
    store.init_app(app)
    sessions.init_app(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.inventory import inventory_bp
    from .routes.requests import requests_bp
    from .routes.transactions import transactions_bp
    from .routes.users import users_bp
    from .routes.gifts import gifts_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(requests_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(gifts_bp)

    @app.errorhandler(GiftLedgerError)
    def handle_engine_error(error: GiftLedgerError):
        # rejected operation, no partial effect
        logger.warning("operation rejected", extra={"error_code": error.code, "detail": error.message})
        return jsonify(error.to_dict()), error.http_status

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
