from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from .config import Config
from .errors import LMSError
from werkzeug.exceptions import HTTPException
import click
import logging
import logging.config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

logger = logging.getLogger(__name__)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({
        'success': False,
        'error': 'Please log in to continue.',
        'kind': 'AuthenticationRequired'
    }), 401


def register_error_handlers(app):
    @app.errorhandler(LMSError)
    def handle_lms_error(e):
        if e.retryable:
            logger.warning(f"{e.kind}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({'success': False, 'error': 'Not found.', 'kind': 'NotFound'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify({'success': False, 'error': 'Method not allowed.', 'kind': 'MethodNotAllowed'}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'error': e.description, 'kind': e.name}), e.code
        logger.exception(f"Unhandled error: {str(e)}")
        return jsonify({
            'success': False,
            'error': 'An unexpected error occurred. Please try again.',
            'kind': 'InternalError'
        }), 500


def register_commands(app):
    @app.cli.command('reconcile-enrollments')
    def reconcile_enrollments_command():
        """Recompute course enrollment counters from the enrollment ledger."""
        from .utils.ledger import reconcile
        from .utils.repository import get_repository

        corrected = reconcile(get_repository())
        if not corrected:
            click.echo('All course counters match the enrollment ledger.')
            return
        click.echo(f"Corrected {len(corrected)} course(s): {', '.join(corrected)}")


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize logging
    logging.config.dictConfig(app.config['LOGGING'])

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    # Register blueprints
    from .routes.main import main_bp
    from .routes.auth import auth_bp
    from .routes.courses import courses_bp
    from .routes.enrollments import enrollments_bp
    from .routes.assignments import assignments_bp
    from .routes.certificates import certificates_bp
    from .routes.reminders import reminders_bp
    from .routes.exams import exams_bp, certifications_bp
    from .routes.users import users_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(courses_bp, url_prefix='/courses')
    app.register_blueprint(enrollments_bp, url_prefix='/enrollments')
    app.register_blueprint(assignments_bp, url_prefix='/assignments')
    app.register_blueprint(certificates_bp, url_prefix='/certificates')
    app.register_blueprint(reminders_bp, url_prefix='/reminders')
    app.register_blueprint(exams_bp, url_prefix='/exams')
    app.register_blueprint(certifications_bp, url_prefix='/certifications')
    app.register_blueprint(users_bp, url_prefix='/users')

    register_error_handlers(app)
    register_commands(app)

    # Create database tables
    with app.app_context():
        from .models import user, store_entry  # noqa: F401
        db.create_all()

    return app
