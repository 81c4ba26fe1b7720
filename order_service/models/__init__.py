"""Models package - exports all SQLAlchemy models."""
from order_service.models.supplier import Supplier
from order_service.models.product import Product
from order_service.models.order import (
    Order, OrderStatus, PaymentStatus, PaymentMethod,
    normalize_payment_status, normalize_payment_method
)
from order_service.models.order_product import OrderProduct

__all__ = [
    'Supplier', 'Product',
    'Order', 'OrderStatus', 'PaymentStatus', 'PaymentMethod',
    'normalize_payment_status', 'normalize_payment_method',
    'OrderProduct',
]
