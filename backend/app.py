import sys
import os
import logging
import asyncio
from datetime import datetime, timezone

# Get the absolute path to the project root
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_DIR = os.path.join(BASE_DIR, "src")
PUBLIC_DIR = os.path.join(BASE_DIR, "public")

# Add directories to Python path
sys.path.insert(0, BASE_DIR)  # Add project root so 'backend' module is found
sys.path.insert(0, SRC_DIR)

from flask import Flask, request, jsonify, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge
from relink.config import Config
from relink.errors import (
    ConfigurationError,
    EmbeddingAcquisitionError,
    PermanentInputError,
    TransientProviderError,
)
from backend.routes.mapping_routes import mapping_blueprint

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s"
    )


def register_error_handlers(app: Flask) -> None:
    """
    Translate engine errors into JSON responses.
    """

    @app.errorhandler(PermanentInputError)
    def handle_input_error(e):
        return jsonify({
            "error": f"Invalid input: {e}",
            "solution": "Check that every URL is a non-empty string and both lists are non-empty."
        }), 400

    @app.errorhandler(EmbeddingAcquisitionError)
    def handle_acquisition_error(e):
        return jsonify({
            "error": "Embedding acquisition failed",
            "message": str(e),
            "failures": [
                {"url": o.input, "error": o.error, "solution": o.remediation}
                for o in e.failures
            ]
        }), 502

    @app.errorhandler(TransientProviderError)
    def handle_transient_error(e):
        return jsonify({
            "error": "Embedding service unavailable",
            "message": str(e),
            "solution": "Please retry the request in a moment."
        }), 502

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(e):
        logger.error("Configuration error on %s %s: %s", request.method, request.path, e)
        return jsonify({
            "error": "Service misconfigured",
            "message": str(e)
        }), 500

    @app.errorhandler(asyncio.TimeoutError)
    def handle_timeout(e):
        return jsonify({
            "error": "Request timed out",
            "solution": "Try fewer URLs per request."
        }), 504

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        return jsonify({
            "error": "Request body too large",
            "solution": f"Keep request bodies under {app.config['MAX_CONTENT_LENGTH']} bytes."
        }), 413

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e

        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({
            "error": "Internal server error",
            "message": str(e),
            "path": request.path,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }), 500


def create_app(provider_factory=None):
    """
    Build the Flask app.

    Args:
        provider_factory: Optional zero-argument callable returning an
            EmbeddingProvider. Defaults to the provider named in Config.
    """
    app = Flask(__name__, static_folder=PUBLIC_DIR, static_url_path="")
    CORS(app)  # allow frontend to call this backend

    app.config["MAX_CONTENT_LENGTH"] = Config.MAX_CONTENT_LENGTH
    app.config["PROVIDER_FACTORY"] = provider_factory

    @app.before_request
    def log_request():
        logger.info("%s %s", request.method, request.path)

    app.register_blueprint(mapping_blueprint, url_prefix="/api")
    register_error_handlers(app)

    @app.route("/")
    def home():
        if os.path.exists(os.path.join(PUBLIC_DIR, "index.html")):
            return send_from_directory(PUBLIC_DIR, "index.html")
        return "Relink backend is running!"

    @app.route("/api/health")
    def health():
        return jsonify({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": Config.ENVIRONMENT,
            "provider": Config.EMBEDDING_PROVIDER,
            "cors": "enabled"
        })

    return app


if __name__ == "__main__":
    configure_logging()
    Config.validate()
    app = create_app()
    logger.info("Server starting on port %d (environment: %s, provider: %s)",
                Config.PORT, Config.ENVIRONMENT, Config.EMBEDDING_PROVIDER)
    app.run(debug=Config.ENVIRONMENT == "development", port=Config.PORT)
