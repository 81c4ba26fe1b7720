"""OpenAPI 3.0 document for the REST API."""
from flask import Blueprint, jsonify, current_app, request

from order_service.models import OrderStatus, PaymentStatus, PaymentMethod

docs_bp = Blueprint('docs', __name__, url_prefix='/api-docs')


def _ref(name):
    return {'$ref': f'#/components/schemas/{name}'}


def _json(schema):
    return {'application/json': {'schema': schema}}


def _error(description):
    return {'description': description, 'content': _json(_ref('Error'))}


ID_PARAM = {
    'in': 'path', 'name': 'id', 'required': True,
    'schema': {'type': 'integer'}
}

SCHEMAS = {
    'Error': {
        'type': 'object',
        'properties': {
            'status': {'type': 'string', 'example': 'error'},
            'message': {'type': 'string'},
        },
    },
    'Supplier': {
        'type': 'object',
        'properties': {
            'id': {'type': 'integer', 'example': 1},
            'company_name': {'type': 'string', 'example': 'Distribuidora Andina S.A.C.'},
            'ruc': {'type': 'string', 'example': '20123456789'},
            'contact': {'type': 'string'},
            'address': {'type': 'string'},
            'products': {'type': 'array', 'items': _ref('ProductSummary')},
        },
    },
    'SupplierInput': {
        'type': 'object',
        'required': ['company_name'],
        'properties': {
            'company_name': {'type': 'string'},
            'ruc': {'type': 'string'},
            'contact': {'type': 'string'},
            'address': {'type': 'string'},
        },
    },
    'ProductSummary': {
        'type': 'object',
        'properties': {
            'id': {'type': 'integer'},
            'name': {'type': 'string'},
            'code_product': {'type': 'string'},
            'unit_price': {'type': 'number', 'format': 'float'},
            'stock': {'type': 'integer'},
        },
    },
    'Product': {
        'type': 'object',
        'properties': {
            'id': {'type': 'integer', 'example': 1},
            'code_product': {'type': 'string', 'example': 'LAP-001'},
            'name': {'type': 'string', 'example': 'Laptop Dell XPS 15'},
            'classification': {'type': 'string', 'example': 'Computadoras'},
            'stock': {'type': 'integer', 'example': 12},
            'unit_price': {'type': 'number', 'format': 'float', 'example': 1800.00},
            'previous_unit_price': {'type': 'number', 'format': 'float', 'nullable': True},
            'supplier_id': {'type': 'integer', 'nullable': True},
        },
    },
    'ProductInput': {
        'type': 'object',
        'required': ['code_product', 'name', 'unit_price'],
        'properties': {
            'code_product': {'type': 'string'},
            'name': {'type': 'string'},
            'classification': {'type': 'string'},
            'stock': {'type': 'integer', 'minimum': 0},
            'unit_price': {'type': 'number', 'format': 'float', 'minimum': 0},
            'supplier_id': {'type': 'integer', 'nullable': True},
        },
    },
    'OrderLine': {
        'type': 'object',
        'properties': {
            'product_id': {'type': 'integer', 'example': 1},
            'name': {'type': 'string'},
            'quantity': {'type': 'integer', 'example': 2},
            'unit_price': {'type': 'number', 'format': 'float', 'example': 10.00},
            'supplier_id': {'type': 'integer', 'nullable': True},
            'line_total': {'type': 'number', 'format': 'float', 'example': 20.00},
        },
    },
    'OrderLineInput': {
        'type': 'object',
        'required': ['product_id', 'quantity'],
        'properties': {
            'product_id': {'type': 'integer', 'description': 'Also accepted as productId or id'},
            'quantity': {'type': 'integer', 'minimum': 1},
            'unit_price': {'type': 'number', 'format': 'float', 'description': 'Optional price override (alias: price)'},
        },
    },
    'Order': {
        'type': 'object',
        'properties': {
            'id': {'type': 'integer', 'example': 1},
            'order_number': {'type': 'string', 'example': 'ORD-2025-001'},
            'customer_name': {'type': 'string', 'example': 'Juan Pérez'},
            'order_date': {'type': 'string', 'format': 'date', 'example': '2025-07-02'},
            'status': {'type': 'string', 'enum': [s.value for s in OrderStatus]},
            'payment_status': {'type': 'string', 'enum': [s.value for s in PaymentStatus]},
            'payment_method': {'type': 'string', 'enum': [m.value for m in PaymentMethod], 'nullable': True},
            'num_products': {'type': 'integer', 'example': 3},
            'final_price': {'type': 'number', 'format': 'float', 'example': 25.00},
            'shipping_address': {'type': 'string'},
            'shipping_method': {'type': 'string'},
            'tracking_number': {'type': 'string'},
            'notes': {'type': 'string'},
            'products': {'type': 'array', 'items': _ref('OrderLine')},
        },
    },
    'OrderInput': {
        'type': 'object',
        'required': ['order_number', 'customer_name'],
        'properties': {
            'order_number': {'type': 'string'},
            'customer_name': {'type': 'string'},
            'order_date': {'type': 'string', 'format': 'date'},
            'status': {'type': 'string', 'enum': [s.value for s in OrderStatus]},
            'payment_status': {'type': 'string', 'enum': [s.value for s in PaymentStatus]},
            'payment_method': {'type': 'string', 'enum': [m.value for m in PaymentMethod]},
            'shipping_address': {'type': 'string'},
            'shipping_method': {'type': 'string'},
            'tracking_number': {'type': 'string'},
            'notes': {'type': 'string'},
            'products': {'type': 'array', 'items': _ref('OrderLineInput')},
        },
    },
    'OrderStatusInput': {
        'type': 'object',
        'required': ['status'],
        'properties': {
            'status': {'type': 'string', 'enum': [s.value for s in OrderStatus], 'example': 'In Progress'},
        },
    },
}


def _crud_paths(resource, tag, schema, input_schema, extra_errors=None):
    """Collection and item paths for one resource."""
    extra_errors = extra_errors or {}
    collection = {
        'get': {
            'summary': f'Listar {tag.lower()}',
            'tags': [tag],
            'responses': {'200': {'description': 'OK', 'content': _json({'type': 'array', 'items': _ref(schema)})}},
        },
        'post': {
            'summary': f'Crear {tag.lower()}',
            'tags': [tag],
            'requestBody': {'required': True, 'content': _json(_ref(input_schema))},
            'responses': {
                '201': {'description': 'Creado', 'content': _json(_ref(schema))},
                '400': _error('Datos de entrada inválidos'),
                '409': _error('Clave única duplicada'),
                **extra_errors.get('post', {}),
            },
        },
    }
    update = {
        'summary': f'Actualizar {tag.lower()}',
        'tags': [tag],
        'parameters': [ID_PARAM],
        'requestBody': {'required': True, 'content': _json(_ref(input_schema))},
        'responses': {
            '200': {'description': 'Actualizado', 'content': _json(_ref(schema))},
            '400': _error('Datos inválidos'),
            '404': _error('No encontrado'),
            '409': _error('Clave única duplicada'),
            **extra_errors.get('update', {}),
        },
    }
    item = {
        'get': {
            'summary': f'Obtener {tag.lower()} por ID',
            'tags': [tag],
            'parameters': [ID_PARAM],
            'responses': {
                '200': {'description': 'OK', 'content': _json(_ref(schema))},
                '404': _error('No encontrado'),
            },
        },
        'put': update,
        'patch': update,
        'delete': {
            'summary': f'Eliminar {tag.lower()}',
            'tags': [tag],
            'parameters': [ID_PARAM],
            'responses': {
                '204': {'description': 'Eliminado'},
                '404': _error('No encontrado'),
                **extra_errors.get('delete', {}),
            },
        },
    }
    return {f'/{resource}': collection, f'/{resource}/{{id}}': item}


def build_openapi_spec(api_url: str) -> dict:
    """Assemble the OpenAPI document; ``api_url`` is the server base URL."""
    terminal_error = {'403': _error('El pedido está en un estado final')}
    paths = {}
    paths.update(_crud_paths('products', 'Products', 'Product', 'ProductInput', {
        'delete': {'409': _error('El producto forma parte de pedidos finalizados')},
    }))
    paths['/products/supplier/{id}'] = {
        'get': {
            'summary': 'Listar productos de un proveedor',
            'tags': ['Products'],
            'parameters': [ID_PARAM],
            'responses': {
                '200': {'description': 'OK', 'content': _json({'type': 'array', 'items': _ref('Product')})},
                '404': _error('Proveedor no encontrado'),
            },
        },
    }
    paths.update(_crud_paths('suppliers', 'Suppliers', 'Supplier', 'SupplierInput'))
    paths.update(_crud_paths('orders', 'Orders', 'Order', 'OrderInput', {
        'post': {'404': _error('Producto no encontrado')},
        'update': terminal_error,
        'delete': terminal_error,
    }))
    paths['/orders/{id}/status'] = {
        'patch': {
            'summary': 'Cambiar el estado de un pedido',
            'tags': ['Orders'],
            'parameters': [ID_PARAM],
            'requestBody': {'required': True, 'content': _json(_ref('OrderStatusInput'))},
            'responses': {
                '200': {'description': 'Estado actualizado'},
                '400': _error('Estado inválido o transición no permitida'),
                '404': _error('Pedido no encontrado'),
                **terminal_error,
            },
        },
    }

    return {
        'openapi': '3.0.0',
        'info': {
            'title': 'API de Gestión de Pedidos y Productos',
            'version': '1.0.0',
            'description': 'Gestión de pedidos, productos y proveedores.',
        },
        'servers': [{'url': api_url}],
        'tags': [
            {'name': 'Products', 'description': 'Operaciones de gestión de productos'},
            {'name': 'Suppliers', 'description': 'Operaciones de gestión de proveedores'},
            {'name': 'Orders', 'description': 'Operaciones de gestión de pedidos'},
        ],
        'paths': paths,
        'components': {'schemas': SCHEMAS},
    }


@docs_bp.route('/openapi.json')
def openapi_spec():
    api_url = request.host_url.rstrip('/') + current_app.config.get('API_PREFIX', '/api')
    return jsonify(build_openapi_spec(api_url))
