"""
Flask application factory for Footprint.
"""
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from .. import __version__
from ..config import Config
from ..logger import get_logger
from ..services.intelligence import ContentAnalyzer
from .routes import ANALYZER_EXTENSION, api_bp

logger = get_logger(__name__)


def create_app(analyzer: Optional[ContentAnalyzer] = None, initialize: bool = True) -> Flask:
    """
    Create and configure Flask application.

    Args:
        analyzer: Analyzer to serve (built from config if omitted)
        initialize: Initialize the analyzer before returning; training
            failures propagate and the app is never created

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)

    # Configure app
    app.config['SECRET_KEY'] = Config.SECRET_KEY
    app.config['ENV'] = Config.FLASK_ENV

    # Enable CORS with configured origins
    cors_origins = Config.get_cors_origins()
    if cors_origins == ["*"]:
        CORS(app)
    else:
        CORS(app, origins=cors_origins)

    analyzer = analyzer or ContentAnalyzer()
    if initialize:
        analyzer.initialize()
    app.extensions[ANALYZER_EXTENSION] = analyzer

    # Register blueprints
    app.register_blueprint(api_bp)

    # Health check
    @app.route('/health')
    def health():
        """Health check endpoint; 503 until the analyzer is ready."""
        if not analyzer.is_ready():
            return jsonify({'status': 'unavailable', 'version': __version__}), 503
        return jsonify({'status': 'healthy', 'version': __version__})

    # Log configuration
    logger.info("Flask app created")
    logger.info(f"Configuration: {Config.get_summary()}")

    # Validate configuration
    errors = Config.validate()
    if errors:
        logger.warning(f"Configuration warnings: {errors}")

    return app
