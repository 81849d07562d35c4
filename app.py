import logging
import os

from config import config
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate


def create_app(config_name=None, config_overrides=None):
    """Application factory pattern"""
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Initialize CORS for the web client
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")

    CORS(
        app,
        resources={r"/srs/*": {"origins": ALLOWED_ORIGINS}},
        supports_credentials=True,
    )

    # Initialize SQLAlchemy
    from models import db

    db.init_app(app)

    # Initialize Flask-Migrate
    Migrate(app, db)

    # Import all models to ensure they are registered with SQLAlchemy
    from models.card import CardRecord
    from models.user import User

    # Card store and service shared by all requests
    from services.card_service import CardService
    from services.card_store import create_card_store

    store = create_card_store(app.config["CARD_STORE_BACKEND"])
    app.extensions["card_service"] = CardService(store)

    with app.app_context():
        # Bootstrap tables on a fresh database; existing tables are left alone
        if app.config["CARD_STORE_BACKEND"] == "sql":
            db.create_all()

        if app.config["SRS_SEED_SAMPLE_DATA"]:
            from services.sample_data import seed_sample_cards

            seed_sample_cards(app.extensions["card_service"], app.config["SRS_SAMPLE_USER_ID"])

    # Register API blueprints
    from routes.srs import bp as srs_bp

    app.register_blueprint(srs_bp)

    if app.config["SRS_DEBUG_ROUTES_ENABLED"]:
        from routes.debug import bp as debug_bp

        app.register_blueprint(debug_bp)

    # Home route
    @app.route("/")
    def home():
        return jsonify({"message": "Welcome to Lexicard!", "version": "1.0.0"})

    # Health check route
    @app.route("/health")
    def health_check():
        try:
            db.session.execute(db.text("SELECT 1"))
            return jsonify({"status": "healthy", "database": "connected"}), 200
        except Exception as e:
            app.logger.error(f"Health check failed: {e}")
            return jsonify({"status": "unhealthy", "error": str(e)}), 500

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, port=5001)
