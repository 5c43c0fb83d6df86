"""
Flask application factory.

Creates and configures the app, registers all blueprints and maps the
service error taxonomy onto JSON error responses.
"""
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

__version__ = '1.0.0'

logger = logging.getLogger('mission_control')


def create_app():
    """Create and configure the Flask application."""
    from mission_control.config import MAX_UPLOAD_MB
    from mission_control.errors import MissionControlError
    from mission_control.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_MB * 1024 * 1024
    app.json.sort_keys = False

    @app.errorhandler(MissionControlError)
    def handle_service_error(e):
        return jsonify({'error': str(e)}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    # Register blueprints
    from mission_control.routes.dashboard import bp as dashboard_bp
    from mission_control.routes.imports import bp as imports_bp
    from mission_control.routes.team import bp as team_bp
    from mission_control.routes.records import bp as records_bp

    app.register_blueprint(dashboard_bp)
    app.register_blueprint(imports_bp)
    app.register_blueprint(team_bp)
    app.register_blueprint(records_bp)

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    # Schema is managed by Alembic, no create_all() here.
    import importlib
    importlib.import_module('mission_control.models.team_member')
    importlib.import_module('mission_control.models.import_record')
    importlib.import_module('mission_control.models.activity')
    importlib.import_module('mission_control.models.prospect')

    logger.info("Mission Control %s ready", __version__)
    return app
