"""Supplier model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from order_service.database import Base, BigIntegerType


class Supplier(Base):
    """Supplier (proveedor)."""

    __tablename__ = 'supplier'

    id = Column(BigIntegerType, primary_key=True, autoincrement=True)
    company_name = Column(String(255), nullable=False)
    ruc = Column(String(20), nullable=True, unique=True)
    contact = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    products = relationship('Product', back_populates='supplier', order_by='Product.name')

    def __repr__(self):
        return f"<Supplier(id={self.id}, company_name='{self.company_name}', ruc='{self.ruc}')>"

    def to_dict(self, include_products=False):
        data = {
            'id': self.id,
            'company_name': self.company_name,
            'ruc': self.ruc,
            'contact': self.contact,
            'address': self.address,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_products:
            data['products'] = [product.to_summary() for product in self.products]
        return data
