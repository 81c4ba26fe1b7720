"""
Integration tests for the products endpoints.
"""

import pytest
from decimal import Decimal

from order_service.models import Product, Order
from order_service.utils.number_format import MAX_INT


def _product_payload(**overrides):
    payload = {
        'code_product': 'NEW-001',
        'name': 'Nuevo Producto',
        'classification': 'General',
        'unit_price': 12.5,
        'stock': 7,
    }
    payload.update(overrides)
    return payload


class TestProductCrud:
    """CRUD happy paths."""

    def test_create_and_get(self, client, supplier):
        supplier_id = supplier.id
        response = client.post('/api/products', json=_product_payload(supplier_id=supplier_id))

        assert response.status_code == 201
        created = response.get_json()
        assert created['unit_price'] == 12.5
        assert created['supplier']['id'] == supplier_id

        response = client.get(f'/api/products/{created["id"]}')
        assert response.status_code == 200
        assert response.get_json()['code_product'] == 'NEW-001'

    def test_list_sorted_by_name(self, client, product_a, product_b):
        response = client.get('/api/products')

        assert response.status_code == 200
        assert [p['name'] for p in response.get_json()] == ['Product A', 'Product B']

    def test_search(self, client, product_a, product_b):
        response = client.get('/api/products?q=prod-b')
        assert [p['code_product'] for p in response.get_json()] == ['PROD-B']

    def test_list_by_supplier(self, client, supplier, product_a, product_b):
        supplier_id, a_id = supplier.id, product_a.id
        response = client.get(f'/api/products/supplier/{supplier_id}')

        assert response.status_code == 200
        assert [p['id'] for p in response.get_json()] == [a_id]

    def test_list_by_unknown_supplier(self, client):
        response = client.get('/api/products/supplier/999')
        assert response.status_code == 404

    def test_price_change_keeps_previous_price(self, client, product_a):
        response = client.put(f'/api/products/{product_a.id}', json={'unit_price': '12.00'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['unit_price'] == 12.0
        assert data['previous_unit_price'] == 10.0
        assert data['stock'] == 50

    def test_same_price_does_not_touch_previous(self, client, product_a):
        response = client.patch(f'/api/products/{product_a.id}', json={'unit_price': 10, 'stock': 5})

        data = response.get_json()
        assert data['previous_unit_price'] is None
        assert data['stock'] == 5

    def test_delete(self, client, session, product_b):
        product_id = product_b.id
        response = client.delete(f'/api/products/{product_id}')

        assert response.status_code == 204
        assert session.get(Product, product_id) is None


class TestProductValidation:
    """Error responses."""

    def test_missing_name(self, client):
        payload = _product_payload()
        del payload['name']
        response = client.post('/api/products', json=payload)

        assert response.status_code == 400
        assert response.get_json()['status'] == 'error'

    def test_negative_price(self, client):
        response = client.post('/api/products', json=_product_payload(unit_price=-1))
        assert response.status_code == 400

    def test_negative_stock(self, client):
        response = client.post('/api/products', json=_product_payload(stock=-3))
        assert response.status_code == 400

    @pytest.mark.parametrize('overrides', [
        {'unit_price': 1e30},
        {'unit_price': '1e30'},
        {'unit_price': 100000000},
        {'stock': 10 ** 20},
        {'stock': MAX_INT + 1},
        {'supplier_id': 10 ** 30},
    ])
    def test_out_of_range_numbers(self, client, session, overrides):
        response = client.post('/api/products', json=_product_payload(**overrides))

        assert response.status_code == 400
        assert response.get_json()['status'] == 'error'
        assert session.query(Product).count() == 0

    def test_update_stock_out_of_range(self, client, session, product_a):
        a_id = product_a.id

        response = client.patch(f'/api/products/{a_id}', json={'stock': 10 ** 20})

        assert response.status_code == 400
        assert session.get(Product, a_id).stock == 50

    def test_unknown_supplier(self, client):
        response = client.post('/api/products', json=_product_payload(supplier_id=999))
        assert response.status_code == 400

    def test_body_must_be_json_object(self, client):
        response = client.post('/api/products', data='not json', content_type='text/plain')
        assert response.status_code == 400

    def test_duplicate_name(self, client, product_a):
        response = client.post('/api/products', json=_product_payload(name='Product A'))
        assert response.status_code == 409

    def test_duplicate_code_on_update(self, client, product_a, product_b):
        response = client.put(f'/api/products/{product_b.id}', json={'code_product': 'PROD-A'})
        assert response.status_code == 409

    def test_unknown_product(self, client):
        assert client.get('/api/products/999').status_code == 404
        assert client.put('/api/products/999', json={'name': 'x'}).status_code == 404
        assert client.delete('/api/products/999').status_code == 404


class TestProductDeletionWithOrders:
    """Deleting a product referenced by orders."""

    def test_open_order_is_recomputed(self, client, session, product_a, product_b, make_order):
        a_id, b_id = product_a.id, product_b.id
        order = make_order([
            {'product_id': a_id, 'quantity': 2},
            {'product_id': b_id, 'quantity': 1},
        ])

        response = client.delete(f'/api/products/{b_id}')
        assert response.status_code == 204

        data = client.get(f'/api/orders/{order["id"]}').get_json()
        assert [line['product_id'] for line in data['products']] == [a_id]
        assert data['num_products'] == 2
        assert data['final_price'] == 20.0

    def test_terminal_order_blocks_deletion(self, client, session, completed_order, product_a):
        order_id, a_id = completed_order.id, product_a.id

        response = client.delete(f'/api/products/{a_id}')

        assert response.status_code == 409
        assert 'ORD-DONE-001' in response.get_json()['message']
        assert session.get(Product, a_id) is not None
        assert session.get(Order, order_id).final_price == Decimal('10.00')
