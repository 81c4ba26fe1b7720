"""Order model."""
import enum
from datetime import date
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from order_service.database import Base, BigIntegerType
from order_service.utils.number_format import money_to_json


class OrderStatus(str, enum.Enum):
    """Order lifecycle status."""
    PENDING = 'Pending'
    IN_PROGRESS = 'In Progress'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'
    SHIPPED = 'Shipped'
    DELIVERED = 'Delivered'


class PaymentStatus(str, enum.Enum):
    """Payment status of an order."""
    PAID = 'Paid'
    PENDING = 'Pending'


class PaymentMethod(str, enum.Enum):
    """Accepted payment methods."""
    PAYPAL = 'PAYPAL'
    CREDIT_CARD = 'Credit Card'
    BANK_TRANSFER = 'BANK_TRANSFER'


def normalize_payment_status(value) -> str:
    """
    Normalize payment status value to string for DB storage.

    Args:
        value: Can be None, PaymentStatus enum, or string (case-insensitive)

    Returns:
        str: 'Paid' or 'Pending'

    Raises:
        ValueError: If value is invalid
    """
    if value is None:
        return PaymentStatus.PENDING.value

    if isinstance(value, PaymentStatus):
        return value.value

    normalized = str(value).strip().lower()
    for status in PaymentStatus:
        if status.value.lower() == normalized:
            return status.value

    raise ValueError(f"Estado de pago inválido: {value}. Debe ser 'Paid' o 'Pending'.")


def normalize_payment_method(value):
    """
    Normalize payment method value to string for DB storage.

    ``None`` is kept (payment method is optional). Matching ignores case,
    spaces and underscores, so 'credit_card' and 'Bank Transfer' are valid.

    Raises:
        ValueError: If value is invalid
    """
    if value is None or value == '':
        return None

    if isinstance(value, PaymentMethod):
        return value.value

    def _key(text):
        return str(text).strip().lower().replace('_', ' ')

    for method in PaymentMethod:
        if _key(method.value) == _key(value):
            return method.value

    allowed = ', '.join(m.value for m in PaymentMethod)
    raise ValueError(f"Método de pago inválido: {value}. Valores permitidos: {allowed}.")


class Order(Base):
    """Customer order (pedido)."""

    # "order" is a reserved word in SQL
    __tablename__ = 'customer_order'

    id = Column(BigIntegerType, primary_key=True, autoincrement=True)
    order_number = Column(String(64), nullable=False, unique=True)
    customer_name = Column(String(255), nullable=False)
    order_date = Column(Date, nullable=False, default=date.today)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(20), nullable=True)

    # Derived from lines by services.order_totals, never set by clients
    num_products = Column(Integer, nullable=False, default=0, server_default='0')
    final_price = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')

    shipping_address = Column(String(255), nullable=True)
    shipping_method = Column(String(100), nullable=True)
    tracking_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    lines = relationship(
        'OrderProduct',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='OrderProduct.product_id'
    )

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.order_number}', status='{self.status}', total={self.final_price})>"

    def to_dict(self):
        return {
            'id': self.id,
            'order_number': self.order_number,
            'customer_name': self.customer_name,
            'order_date': self.order_date.isoformat() if self.order_date else None,
            'status': self.status,
            'payment_status': self.payment_status,
            'payment_method': self.payment_method,
            'num_products': self.num_products,
            'final_price': money_to_json(self.final_price),
            'shipping_address': self.shipping_address,
            'shipping_method': self.shipping_method,
            'tracking_number': self.tracking_number,
            'notes': self.notes,
            'products': [line.to_dict() for line in self.lines],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
