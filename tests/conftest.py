import pytest
import uuid
from decimal import Decimal

from order_service import create_app
from order_service.database import get_database
from order_service.models import Supplier, Product, Order, OrderProduct


@pytest.fixture(scope='function')
def app():
    """Create application instance with a fresh in-memory database."""
    app = create_app('config.TestConfig')
    database = get_database(app)
    database.create_all()
    yield app
    database.drop_all()
    database.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """Create CLI runner."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def session(app):
    """
    Scoped session registry of the test database.

    Requests remove the current session on teardown; the registry hands out
    a new one on next use, so tests can keep querying through this fixture.
    """
    database = get_database(app)
    yield database.session
    database.session.rollback()
    database.session.remove()


def _persist(session, obj):
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


@pytest.fixture(scope='function')
def supplier(session):
    """Create test supplier."""
    suffix = str(uuid.uuid4().int)[:8]
    return _persist(session, Supplier(
        company_name=f'Proveedor Test {suffix}',
        ruc=f'20{suffix}1',
        contact='Contacto Test',
        address='Av. Siempre Viva 742'
    ))


@pytest.fixture(scope='function')
def product_a(session, supplier):
    """Product A: price 10.00, stock 50."""
    return _persist(session, Product(
        code_product='PROD-A',
        name='Product A',
        classification='Test',
        unit_price=Decimal('10.00'),
        stock=50,
        supplier_id=supplier.id
    ))


@pytest.fixture(scope='function')
def product_b(session):
    """Product B: price 5.00, stock 20, no supplier."""
    return _persist(session, Product(
        code_product='PROD-B',
        name='Product B',
        unit_price=Decimal('5.00'),
        stock=20
    ))


@pytest.fixture(scope='function')
def make_order(client):
    """Factory creating orders through the API; returns the JSON body."""
    counter = {'n': 0}

    def _make(products, **fields):
        counter['n'] += 1
        payload = {
            'order_number': f'ORD-TEST-{counter["n"]:03d}',
            'customer_name': 'Cliente Test',
            'products': products,
        }
        payload.update(fields)
        response = client.post('/api/orders', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _make


@pytest.fixture(scope='function')
def completed_order(session, product_a):
    """Order already in a terminal status (inserted directly)."""
    order = Order(
        order_number='ORD-DONE-001',
        customer_name='Cliente Final',
        status='Completed',
        num_products=1,
        final_price=Decimal('10.00')
    )
    OrderProduct(order=order, product_id=product_a.id, quantity=1, unit_price=Decimal('10.00'))
    return _persist(session, order)
