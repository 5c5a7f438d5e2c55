"""Flask application entry point."""

import logging
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter.errors import RateLimitExceeded

from .config import settings
from .db import init_db
from .exceptions import GameCardError, RateLimitError
from .limiter import limiter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Create Flask app
app = Flask(__name__)

# Credentials are needed so browsers send the refresh cookie cross-origin
CORS(app, origins=settings.cors_origins, supports_credentials=True)
limiter.init_app(app)


# Database initialization (runs once on app startup)
def initialize_database():
    """Initialize database on app startup."""
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


with app.app_context():
    initialize_database()


# Error handlers
@app.errorhandler(GameCardError)
def handle_game_card_error(error):
    """Render any GameCardError using its status code and kind."""
    response = {
        "error": {
            "type": error.__class__.__name__,
            "kind": str(error.kind),
            "message": error.message
        }
    }
    if error.details:
        response["error"]["details"] = error.details
    if error.status_code >= 500:
        logger.error(f"{error.__class__.__name__}: {error.message}")
    return jsonify(response), error.status_code


@app.errorhandler(RateLimitExceeded)
def handle_rate_limit_exceeded(error):
    """Render a rate limit breach in the GameCardError format."""
    logger.warning(f"Rate limit exceeded on {request.path}")
    return handle_game_card_error(
        RateLimitError(error.description, {"code": "RATE_LIMITED"})
    )


@app.errorhandler(500)
def handle_internal_error(error):
    """Handle internal server errors."""
    logger.error(f"Internal error: {error}")
    return jsonify({
        "error": {
            "type": "InternalServerError",
            "kind": "internal",
            "message": "An internal error occurred"
        }
    }), 500


# Health check endpoint
@app.route("/health")
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok"})


# Register API blueprints
from .auth.api import auth_bp

app.register_blueprint(auth_bp, url_prefix=settings.api_prefix)


if __name__ == "__main__":
    app.run(debug=True)
