"""Product model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from order_service.database import Base, BigIntegerType
from order_service.utils.number_format import money_to_json


class Product(Base):
    """Product of the catalog."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('stock >= 0', name='ck_product_stock_non_negative'),
        CheckConstraint('unit_price >= 0', name='ck_product_unit_price_non_negative'),
    )

    id = Column(BigIntegerType, primary_key=True, autoincrement=True)
    code_product = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False, unique=True)
    classification = Column(String(255), nullable=True)
    stock = Column(Integer, nullable=False, default=0, server_default='0')
    unit_price = Column(Numeric(10, 2), nullable=False)
    previous_unit_price = Column(Numeric(10, 2), nullable=True)
    supplier_id = Column(BigIntegerType, ForeignKey('supplier.id', ondelete='SET NULL'), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    supplier = relationship('Supplier', back_populates='products')
    # Deleting a product removes its order lines; totals are recomputed by the service
    order_lines = relationship('OrderProduct', back_populates='product', cascade='all')

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', code='{self.code_product}')>"

    def to_summary(self):
        """Short form nested inside supplier payloads."""
        return {
            'id': self.id,
            'name': self.name,
            'code_product': self.code_product,
            'unit_price': money_to_json(self.unit_price),
            'stock': self.stock,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'code_product': self.code_product,
            'name': self.name,
            'classification': self.classification,
            'stock': self.stock,
            'unit_price': money_to_json(self.unit_price),
            'previous_unit_price': money_to_json(self.previous_unit_price),
            'supplier_id': self.supplier_id,
            'supplier': {
                'id': self.supplier.id,
                'company_name': self.supplier.company_name,
            } if self.supplier else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
