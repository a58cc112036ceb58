from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from billsplit.api.routes import api_bp
from billsplit.config import Config
from billsplit.logging_setup import configure_logging


def create_app() -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    configure_logging(level=app.config["LOG_LEVEL"], log_file=app.config["LOG_FILE"])
    CORS(app)

    app.register_blueprint(api_bp)
    return app
