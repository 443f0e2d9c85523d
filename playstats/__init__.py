import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

DEFAULT_CONFIG = {
    "SQLALCHEMY_DATABASE_URI": "sqlite:///playstats.db",
    "SQLALCHEMY_TRACK_MODIFICATIONS": False,
    "DEALS_API_URL": "https://www.cheapshark.com/api/1.0",
    "DEALS_MIN_INTERVAL": 0.35,
    "DEALS_TIMEOUT": 10,
    "PLAYSTATS_LOG_LEVEL": "INFO",
    "PLAYSTATS_REPOSITORY": None,
}


def create_app(database_uri: str | None = None, config: dict | None = None):
    app = Flask(__name__)
    app.config.update(DEFAULT_CONFIG)
    if database_uri:
        app.config["SQLALCHEMY_DATABASE_URI"] = database_uri
    if config:
        app.config.update(config)

    logging.getLogger(__name__).setLevel(
        str(app.config["PLAYSTATS_LOG_LEVEL"]).upper()
    )

    db.init_app(app)

    from . import models  # noqa: F401
    from .routes import bp as insights_bp

    app.register_blueprint(insights_bp)

    with app.app_context():
        db.create_all()

    return app
