"""
Utility Filter - Scoring Service Application
============================================
Main application entry point that configures Flask and registers blueprints.

This module:
- Creates the Flask application factory
- Registers the scoring API blueprint
- Defines the health check route
- Installs JSON error handlers

Route Organization:
- /health               -> Health check
- /api/score            -> Score one video
- /api/score/batch      -> Score and rank a listing page
- /api/score/explain    -> Score with component breakdown
- /api/score/config     -> Active scoring configuration
"""

from flask import Flask, jsonify
from dotenv import load_dotenv
from flask_cors import CORS

# Import blueprints
from utility_filter.routes.score_routes import score_bp

# Import configuration system
from utility_filter.config import get_config, apply_environment_overrides

# Import logging system
from utility_filter.logging_config import get_utility_logger

# Load environment variables
load_dotenv()

# Initialize configuration with environment overrides
config = get_config()
apply_environment_overrides(config)

# Configure logging
logger = get_utility_logger("app", log_to_file=False)


def create_app(config_override=None):
    """
    Application factory function.

    Creates and configures the Flask application with:
    - CORS support
    - Blueprint registration
    - Directory setup

    Args:
        config_override: Optional AppConfig instance to use instead of global config

    Returns:
        Configured Flask application instance
    """
    app_config = config_override or get_config()

    app = Flask(__name__)
    CORS(app, origins=app_config.flask.cors_origins)

    # Store config in app for access in routes
    app.app_config = app_config

    # ==========================================================================
    # REGISTER BLUEPRINTS
    # ==========================================================================

    app.register_blueprint(score_bp, url_prefix='/api/score')

    # ==========================================================================
    # CONFIGURE DIRECTORIES
    # ==========================================================================

    app_config.paths.ensure_directories()
    app.config['SECRET_KEY'] = app_config.flask.secret_key

    logger.info(
        "Initialized Flask app",
        extra={
            'experiment': app_config.experiment.experiment_name,
            'strategy': app_config.scoring.strategy,
            'tier_yellow': app_config.scoring.thresholds.tier_yellow
        }
    )

    # ==========================================================================
    # CORE ROUTES
    # ==========================================================================

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint for monitoring."""
        return {
            'status': 'healthy',
            'experiment': app_config.experiment.experiment_name,
            'strategy': app_config.scoring.strategy,
            'version': app_config.experiment.experiment_version
        }, 200

    # ==========================================================================
    # ERROR HANDLERS
    # ==========================================================================

    @app.errorhandler(400)
    def bad_request(error):
        """Handle malformed requests."""
        return jsonify({'error': 'Bad request'}), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle wrong HTTP methods."""
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    flask_config = get_config().flask
    app.run(
        debug=flask_config.debug,
        host=flask_config.host,
        port=flask_config.port
    )
