"""Products blueprint - JSON CRUD for the catalog."""
from flask import Blueprint, jsonify, request

from order_service.database import get_session
from order_service.services import catalog_service
from order_service.utils.payloads import get_json_payload

products_bp = Blueprint('products', __name__, url_prefix='/products')


@products_bp.route('', methods=['GET'])
def list_products():
    """List all products (optional ?q= text search and ?supplier_id= filter)."""
    supplier_id = request.args.get('supplier_id', type=int)
    products = catalog_service.list_products(
        get_session(),
        search=request.args.get('q', '').strip() or None,
        supplier_id=supplier_id
    )
    return jsonify([p.to_dict() for p in products])


@products_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id):
    product = catalog_service.get_product(get_session(), product_id)
    return jsonify(product.to_dict())


@products_bp.route('/supplier/<int:supplier_id>', methods=['GET'])
def list_products_by_supplier(supplier_id):
    """Products supplied by one supplier."""
    products = catalog_service.list_products_by_supplier(get_session(), supplier_id)
    return jsonify([p.to_dict() for p in products])


@products_bp.route('', methods=['POST'])
def create_product():
    product = catalog_service.create_product(get_session(), get_json_payload())
    return jsonify(product.to_dict()), 201


@products_bp.route('/<int:product_id>', methods=['PUT', 'PATCH'])
def update_product(product_id):
    """Update the fields present in the body."""
    product = catalog_service.update_product(get_session(), product_id, get_json_payload())
    return jsonify(product.to_dict())


@products_bp.route('/<int:product_id>', methods=['DELETE'])
def delete_product(product_id):
    catalog_service.delete_product(get_session(), product_id)
    return '', 204
