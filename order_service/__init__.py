"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from order_service.database import init_db


def _configure_logging(app):
    """Apply LOG_LEVEL to the Flask logger and the service loggers."""
    level = app.config.get('LOG_LEVEL', 'INFO')
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
        )
    app.logger.setLevel(level)
    logging.getLogger('order_service').setLevel(level)


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    _configure_logging(app)

    # Initialize Sentry for error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=app.config.get('ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Setup Prometheus metrics instrumentation
    from order_service.blueprints.metrics import setup_metrics_instrumentation, record_rejection
    setup_metrics_instrumentation(app)

    # Initialize database
    init_db(app)

    # Error Handlers
    from order_service.exceptions import OrderServiceError

    @app.errorhandler(OrderServiceError)
    def handle_order_service_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"OrderServiceError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(
                f"{type(error).__name__} [{error.status_code}] {request.method} {request.path}: {error.message}"
            )
        record_rejection(error)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        """Render werkzeug errors (unknown route, bad method...) as JSON."""
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Error interno del servidor'}), 500

    # Register blueprints
    from order_service.blueprints.main import main_bp
    from order_service.blueprints.products import products_bp
    from order_service.blueprints.suppliers import suppliers_bp
    from order_service.blueprints.orders import orders_bp
    from order_service.blueprints.docs import docs_bp
    from order_service.blueprints.metrics import metrics_bp

    api_prefix = app.config.get('API_PREFIX', '/api').rstrip('/')

    app.register_blueprint(main_bp)
    app.register_blueprint(products_bp, url_prefix=f'{api_prefix}/products')
    app.register_blueprint(suppliers_bp, url_prefix=f'{api_prefix}/suppliers')
    app.register_blueprint(orders_bp, url_prefix=f'{api_prefix}/orders')
    app.register_blueprint(docs_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from order_service.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"Order API ready (env={app.config.get('ENV')}, prefix={api_prefix})")

    return app
