"""Orders blueprint - order CRUD and status changes."""
from flask import Blueprint, jsonify, request, current_app

from order_service.blueprints.metrics import record_order_event
from order_service.database import get_session
from order_service.services import orders_service
from order_service.utils.payloads import get_json_payload

orders_bp = Blueprint('orders', __name__, url_prefix='/orders')


@orders_bp.route('', methods=['GET'])
def list_orders():
    """List orders with their products (optional ?status= filter)."""
    status = request.args.get('status', '').strip() or None
    orders = orders_service.list_orders(get_session(), status=status)
    return jsonify([o.to_dict() for o in orders])


@orders_bp.route('/<int:order_id>', methods=['GET'])
def get_order(order_id):
    order = orders_service.get_order(get_session(), order_id)
    return jsonify(order.to_dict())


@orders_bp.route('', methods=['POST'])
def create_order():
    """
    Create an order from a list of line items.

    Body: order_number, customer_name, optional order_date, status, payment
    and shipping fields, and ``products: [{product_id, quantity, unit_price?}]``.
    Totals are always computed server-side.
    """
    order = orders_service.create_order(get_session(), get_json_payload())
    record_order_event('created')
    return jsonify(order.to_dict()), 201


@orders_bp.route('/<int:order_id>', methods=['PUT', 'PATCH'])
def update_order(order_id):
    """Update an order. Sending ``products`` replaces the full line-item set."""
    order = orders_service.update_order(get_session(), order_id, get_json_payload())
    record_order_event('updated')
    return jsonify(order.to_dict())


@orders_bp.route('/<int:order_id>', methods=['DELETE'])
def delete_order(order_id):
    """Delete an order and give its stock back."""
    result = orders_service.delete_order(get_session(), order_id)
    record_order_event('deleted')
    current_app.logger.info(f"Order {order_id} deleted, restocked={len(result['restocked'])}")
    return '', 204


@orders_bp.route('/<int:order_id>/status', methods=['PATCH', 'PUT'])
def change_order_status(order_id):
    data = get_json_payload()
    order = orders_service.change_order_status(get_session(), order_id, data.get('status'))
    record_order_event('status_changed')
    return jsonify({
        'message': 'Estado del pedido actualizado correctamente',
        'order': order.to_dict()
    })
