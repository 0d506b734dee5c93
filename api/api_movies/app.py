"""
Movie Catalog REST API
A Flask-based REST API for managing a movie catalog and its categories,
stored in MongoDB.
"""

import atexit
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_swagger_ui import get_swaggerui_blueprint
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from api_movies import config
from api_movies.categories import categories_bp
from api_movies.database import close_db, get_db, init_db, ping
from api_movies.movies import movies_bp
from api_movies.openapi import build_openapi_document

API_DOCS_URL = "/api-docs"
OPENAPI_URL = f"{API_DOCS_URL}/openapi.json"

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
)
logger = logging.getLogger(__name__)


def register_utility_routes(app: Flask):
    """Register health and documentation routes with the Flask app."""

    @app.route("/health", methods=["GET"])
    def health_check():
        """Check that MongoDB still answers."""
        try:
            ping(get_db())
        except PyMongoError as e:
            logger.error(f"Health check failed: {str(e)}")
            return jsonify({"status": "unhealthy", "error": str(e)}), 503
        return jsonify({"status": "healthy", "database": "up"})

    @app.route(OPENAPI_URL, methods=["GET"])
    def openapi_document():
        """Serve the OpenAPI description read by the documentation UI."""
        return jsonify(build_openapi_document(request.host_url.rstrip("/")))

    swagger_ui = get_swaggerui_blueprint(API_DOCS_URL, OPENAPI_URL, config={"app_name": "Movie Catalog API"})
    app.register_blueprint(swagger_ui)


def register_error_handlers(app: Flask):
    """Return JSON bodies for errors raised outside the views."""

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return jsonify({"error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_exception(exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_overrides: dict | None = None, client: MongoClient | None = None):
    """
    Build the Flask application and connect it to MongoDB.

    Args:
        config_overrides (dict | None): Settings replacing the environment values.
        client (MongoClient | None): Client to use instead of connecting to ``MONGO_URI``.

    Returns:
        Flask: Application ready to serve requests.

    Raises:
        PyMongoError: When MongoDB does not answer the readiness ping.
    """
    app = Flask(__name__)
    app.config.update(config.load_config(config_overrides))
    app.json.sort_keys = False
    CORS(app)

    init_db(app, client)

    app.register_blueprint(movies_bp)
    app.register_blueprint(categories_bp)
    register_utility_routes(app)
    register_error_handlers(app)
    return app


def main():
    """Run the API with the development server."""
    logger.info("Movie Catalog API starting...")
    app = create_app()
    atexit.register(close_db, app)
    app.run(host=app.config["API_HOST"], port=app.config["API_PORT"], debug=app.config["API_DEBUG"])


if __name__ == "__main__":
    main()
