"""Main blueprint with banner and health check endpoints."""
from flask import Blueprint, jsonify, current_app

from order_service.database import get_database

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return jsonify({
        'name': 'API de Gestión de Pedidos y Productos',
        'api': current_app.config.get('API_PREFIX', '/api'),
        'docs': '/api-docs/openapi.json'
    })


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    try:
        if get_database().ping():
            return jsonify({
                'status': 'healthy',
                'database': 'connected',
                'message': 'Database connection successful'
            }), 200

        return jsonify({
            'status': 'unhealthy',
            'database': 'error',
            'message': 'Unexpected query result'
        }), 500

    except Exception as e:
        current_app.logger.error(f"Health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e),
            'message': 'Failed to connect to database'
        }), 500
