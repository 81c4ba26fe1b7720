"""Order Product model (order line item)."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from order_service.database import Base, BigIntegerType
from order_service.utils.number_format import money_to_json, quantize_money


class OrderProduct(Base):
    """Order line: quantity and price snapshot of one product in one order."""

    __tablename__ = 'order_product'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_product_quantity_positive'),
    )

    order_id = Column(BigIntegerType, ForeignKey('customer_order.id', ondelete='CASCADE'), primary_key=True)
    product_id = Column(BigIntegerType, ForeignKey('product.id', ondelete='CASCADE'), primary_key=True)
    quantity = Column(Integer, nullable=False)
    # Price at order time, NOT the live product price
    unit_price = Column(Numeric(10, 2), nullable=False)
    # Supplier of the product at order time
    supplier_id = Column(BigIntegerType, ForeignKey('supplier.id', ondelete='SET NULL'), nullable=True)

    # Relationships
    order = relationship('Order', back_populates='lines')
    product = relationship('Product', back_populates='order_lines')
    supplier = relationship('Supplier')

    def __repr__(self):
        return f"<OrderProduct(order_id={self.order_id}, product_id={self.product_id}, qty={self.quantity})>"

    @property
    def line_total(self):
        return quantize_money(self.unit_price * self.quantity)

    def to_dict(self):
        unit_price = money_to_json(self.unit_price)
        return {
            'id': self.product_id,
            'product_id': self.product_id,
            'name': self.product.name if self.product else None,
            'code_product': self.product.code_product if self.product else None,
            'quantity': self.quantity,
            'unit_price': unit_price,
            'price': unit_price,
            'supplier_id': self.supplier_id,
            'line_total': money_to_json(self.line_total),
        }
