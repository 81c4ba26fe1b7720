"""
Unit tests for SQLAlchemy models.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from order_service.models import Supplier, Product, Order, OrderProduct


class TestSupplierModel:
    """Tests for Supplier model."""

    def test_create_supplier(self, session, supplier):
        assert supplier.id is not None
        assert supplier.to_dict()['ruc'] == supplier.ruc
        assert 'products' not in supplier.to_dict()

    def test_ruc_unique(self, session, supplier):
        """Test that RUC must be unique."""
        session.add(Supplier(company_name='Duplicado', ruc=supplier.ruc))

        with pytest.raises(IntegrityError):
            session.commit()


class TestProductModel:
    """Tests for Product model."""

    def test_create_product(self, session, product_a):
        data = product_a.to_dict()

        assert data['code_product'] == 'PROD-A'
        assert data['unit_price'] == 10.0
        assert data['stock'] == 50
        assert data['previous_unit_price'] is None

    @pytest.mark.parametrize('field, value', [('name', 'Product A'), ('code_product', 'PROD-A')])
    def test_unique_fields(self, session, product_a, field, value):
        values = {'name': 'Otro', 'code_product': 'OTRO-1', 'unit_price': Decimal('1.00')}
        values[field] = value
        session.add(Product(**values))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_negative_stock_rejected(self, session):
        session.add(Product(name='Negativo', code_product='NEG-1', unit_price=Decimal('1.00'), stock=-1))

        with pytest.raises(IntegrityError):
            session.commit()


class TestOrderModel:
    """Tests for Order and OrderProduct models."""

    def test_order_defaults(self, session):
        order = Order(order_number='ORD-M-001', customer_name='Cliente')
        session.add(order)
        session.commit()

        assert order.status == 'Pending'
        assert order.payment_status == 'Pending'
        assert order.num_products == 0
        assert order.order_date is not None

    def test_order_number_unique(self, session, completed_order):
        session.add(Order(order_number='ORD-DONE-001', customer_name='Otro'))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_line_serialization(self, session, product_a):
        order = Order(order_number='ORD-M-002', customer_name='Cliente')
        line = OrderProduct(order=order, product_id=product_a.id, quantity=3, unit_price=Decimal('9.99'))
        session.add(order)
        session.commit()

        data = order.to_dict()['products'][0]
        assert line.line_total == Decimal('29.97')
        assert data['product_id'] == product_a.id
        assert data['name'] == 'Product A'
        assert data['price'] == data['unit_price'] == 9.99
        assert data['line_total'] == 29.97

    def test_zero_quantity_rejected(self, session, product_a):
        order = Order(order_number='ORD-M-003', customer_name='Cliente')
        OrderProduct(order=order, product_id=product_a.id, quantity=0, unit_price=Decimal('1.00'))
        session.add(order)

        with pytest.raises(IntegrityError):
            session.commit()

    def test_unknown_product_rejected(self, session):
        order = Order(order_number='ORD-M-004', customer_name='Cliente')
        OrderProduct(order=order, product_id=999, quantity=1, unit_price=Decimal('1.00'))
        session.add(order)

        with pytest.raises(IntegrityError):
            session.commit()
