import os
from pathlib import Path

basedir = os.path.abspath(os.path.dirname(__file__))


def _home_path(*parts):
    """Join ``parts`` under the user's home directory, or None if it cannot be resolved."""
    try:
        home = Path.home()
    except RuntimeError:
        return None
    return str(home.joinpath(*parts))


def _sqlite_uri(path):
    return "sqlite:///" + path if path else None


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "a-hard-to-guess-string"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CACHE_TYPE = "SimpleCache"
    SWAGGER = {"title": "promptswitch API", "uiversion": 3, "specs_route": "/api/docs/"}
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    # The file other tooling reads; the active prompt is mirrored into it.
    PROMPT_FILE_PATH = os.environ.get("PROMPT_FILE_PATH") or _home_path(
        ".config", "opencode", "AGENTS.md"
    )
    PROMPT_BOOTSTRAP_ON_START = True
    AUTO_CREATE_TABLES = True


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DEV_DATABASE_URL"
    ) or "sqlite:///" + os.path.join(basedir, "promptswitch-dev.db")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = (
        os.environ.get("TEST_DATABASE_URL") or "sqlite://"
    )  # In-memory database
    # Tests point this at a temporary file themselves
    PROMPT_FILE_PATH = None
    PROMPT_BOOTSTRAP_ON_START = False
    AUTO_CREATE_TABLES = False


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _sqlite_uri(
        _home_path(".promptswitch", "promptswitch.db")
    )


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
