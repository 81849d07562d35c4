import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Base configuration class"""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    DEBUG = os.getenv("DEBUG", "True") == "True"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # SQLAlchemy configuration
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI", "sqlite:///lexicard.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Card storage: "sql" persists through SQLAlchemy, "memory" keeps cards in the process
    CARD_STORE_BACKEND = os.getenv("CARD_STORE_BACKEND", "sql")

    # Demo deck for SRS_SAMPLE_USER_ID, added on startup when the user has no cards
    SRS_SEED_SAMPLE_DATA = _env_flag("SRS_SEED_SAMPLE_DATA", "False")
    SRS_SAMPLE_USER_ID = os.getenv("SRS_SAMPLE_USER_ID", "user123")

    # /srs/debug/* endpoints dump every user's cards
    SRS_DEBUG_ROUTES_ENABLED = _env_flag("SRS_DEBUG_ROUTES_ENABLED", "True")


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False
    SRS_DEBUG_ROUTES_ENABLED = _env_flag("SRS_DEBUG_ROUTES_ENABLED", "False")

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 20,
        "max_overflow": 10,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


class TestingConfig(Config):
    """Testing environment configuration"""

    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    CARD_STORE_BACKEND = "sql"
    SRS_SEED_SAMPLE_DATA = False
    SRS_DEBUG_ROUTES_ENABLED = True


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
