"""Suppliers blueprint for CRUD operations."""
from flask import Blueprint, jsonify, request

from order_service.database import get_session
from order_service.services import supplier_service
from order_service.utils.payloads import get_json_payload

suppliers_bp = Blueprint('suppliers', __name__, url_prefix='/suppliers')


@suppliers_bp.route('', methods=['GET'])
def list_suppliers():
    """List all suppliers with their products."""
    search_query = request.args.get('q', '').strip()
    suppliers = supplier_service.list_suppliers(get_session(), search=search_query or None)
    return jsonify([s.to_dict(include_products=True) for s in suppliers])


@suppliers_bp.route('/<int:supplier_id>', methods=['GET'])
def get_supplier(supplier_id):
    """Supplier detail with its products."""
    supplier = supplier_service.get_supplier(get_session(), supplier_id)
    return jsonify(supplier.to_dict(include_products=True))


@suppliers_bp.route('', methods=['POST'])
def create_supplier():
    supplier = supplier_service.create_supplier(get_session(), get_json_payload())
    return jsonify(supplier.to_dict(include_products=True)), 201


@suppliers_bp.route('/<int:supplier_id>', methods=['PUT', 'PATCH'])
def update_supplier(supplier_id):
    supplier = supplier_service.update_supplier(get_session(), supplier_id, get_json_payload())
    return jsonify(supplier.to_dict(include_products=True))


@suppliers_bp.route('/<int:supplier_id>', methods=['DELETE'])
def delete_supplier(supplier_id):
    """Delete a supplier; its products stay in the catalog without supplier."""
    supplier_service.delete_supplier(get_session(), supplier_id)
    return '', 204
