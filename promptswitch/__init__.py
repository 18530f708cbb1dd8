from flask import Flask
from flask_cors import CORS
from config import config
from .extensions import db, cache
from .errors import ConfigError
from flask_migrate import Migrate
from flasgger import Flasgger
from .logging_config import configure_logging
from pathlib import Path
import os


def _ensure_sqlite_dir(uri: str):
    """Create the parent directory of a file-backed SQLite database."""
    prefix = "sqlite:///"
    if not uri.startswith(prefix) or uri == prefix:
        return
    Path(uri[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


def create_app(config_name=None):
    """
    Application factory function.
    """
    if config_name is None:
        config_name = os.getenv('FLASK_CONFIG', 'default')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    configure_logging(
        log_level=app.config.get("LOG_LEVEL", "INFO"),
        is_debug=app.config.get("DEBUG", False)
    )

    uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if not uri:
        raise ConfigError("Cannot find home directory to locate the database")
    _ensure_sqlite_dir(uri)

    # Initialize extensions
    db.init_app(app)
    cache.init_app(app)
    Migrate(app, db)

    with app.app_context():
        from .models import prompt  # noqa: F401  (registers the table)

        if app.config.get("AUTO_CREATE_TABLES", False):
            db.create_all()

        # Seed from an existing prompt file on first launch. Failures here
        # must never keep the app from starting.
        if app.config.get("PROMPT_BOOTSTRAP_ON_START", False):
            from .seeds.seed_prompts import import_on_first_launch
            import logging
            try:
                import_on_first_launch()
            except Exception as e:
                logging.getLogger(__name__).warning(
                    "Failed to auto-import prompts: %s", e
                )

        from .api.v1 import api_v1
        app.register_blueprint(api_v1, url_prefix='/api/v1')

    Flasgger(app)

    CORS(app, resources={r"/api/*": {"origins": "*"}}, supports_credentials=True)

    @app.after_request
    def set_security_headers(response):
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    return app
