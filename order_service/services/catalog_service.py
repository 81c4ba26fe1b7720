"""Product catalog service: CRUD with uniqueness and supplier checks."""
import logging
from typing import List, Optional

from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from order_service.exceptions import ConflictError, NotFoundError, ValidationError
from order_service.models import Product, Supplier, OrderProduct
from order_service.services.order_status import is_terminal
from order_service.services.order_totals import refresh_order_totals
from order_service.utils.payloads import (
    required_text, optional_text, money_field, int_field, optional_id
)

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    'code_product', 'name', 'classification', 'unit_price', 'stock', 'supplier_id'
)


def list_products(session, search: Optional[str] = None, supplier_id: Optional[int] = None) -> List[Product]:
    """List products ordered by name, optionally filtered by text or supplier."""
    query = session.query(Product).options(joinedload(Product.supplier))

    if search:
        pattern = f'%{search.strip().lower()[:100]}%'
        query = query.filter(or_(
            func.lower(Product.name).like(pattern),
            func.lower(Product.code_product).like(pattern),
            func.lower(Product.classification).like(pattern)
        ))

    if supplier_id is not None:
        query = query.filter(Product.supplier_id == supplier_id)

    return query.order_by(Product.name).all()


def list_products_by_supplier(session, supplier_id: int) -> List[Product]:
    """Products of one supplier; 404 if the supplier does not exist."""
    if session.get(Supplier, supplier_id) is None:
        raise NotFoundError(f'Proveedor con ID {supplier_id} no encontrado')
    return list_products(session, supplier_id=supplier_id)


def get_product(session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if not product:
        raise NotFoundError(f'Producto con ID {product_id} no encontrado')
    return product


def _parse_product_payload(session, data: dict, partial: bool) -> dict:
    """Validate incoming fields. With ``partial`` only present keys are read."""
    values = {}

    def wanted(field):
        return not partial or field in data

    if wanted('code_product'):
        values['code_product'] = required_text(data, 'code_product', max_length=64)
    if wanted('name'):
        values['name'] = required_text(data, 'name')
    if wanted('classification'):
        values['classification'] = optional_text(data, 'classification')
    if wanted('unit_price'):
        values['unit_price'] = money_field(data, 'unit_price')
    if 'stock' in data:
        values['stock'] = int_field(data, 'stock', minimum=0)
    elif not partial:
        values['stock'] = 0
    if 'supplier_id' in data:
        supplier_id = optional_id(data, 'supplier_id')
        if supplier_id is not None and session.get(Supplier, supplier_id) is None:
            raise ValidationError(f'Proveedor con ID {supplier_id} no encontrado')
        values['supplier_id'] = supplier_id

    return values


def _check_unique(session, values: dict, exclude_id: Optional[int] = None) -> None:
    """Reject a name or code already used by another product."""
    for field, label in (('name', 'nombre'), ('code_product', 'código')):
        if field not in values:
            continue
        query = session.query(Product.id).filter(getattr(Product, field) == values[field])
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError(f'Ya existe un producto con el {label} "{values[field]}"')


def create_product(session, data: dict) -> Product:
    """Create a product. Raises ConflictError on duplicate name/code."""
    try:
        values = _parse_product_payload(session, data, partial=False)
        _check_unique(session, values)

        product = Product(**values)
        session.add(product)
        session.commit()

        logger.info(f"Product created: id={product.id} code={product.code_product}")
        return product

    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error creating product: {e.orig}")
        raise ConflictError('Ya existe un producto con ese nombre o código')
    except Exception:
        session.rollback()
        raise


def update_product(session, product_id: int, data: dict) -> Product:
    """
    Update the fields present in ``data``.

    When ``unit_price`` changes, the old price is kept in ``previous_unit_price``.
    Prices already snapshotted in order lines are not touched.
    """
    try:
        product = get_product(session, product_id)
        values = _parse_product_payload(session, data, partial=True)
        _check_unique(session, values, exclude_id=product.id)

        new_price = values.pop('unit_price', None)
        if new_price is not None and new_price != product.unit_price:
            product.previous_unit_price = product.unit_price
            product.unit_price = new_price

        for field, value in values.items():
            setattr(product, field, value)

        session.commit()
        logger.info(f"Product updated: id={product.id}")
        return product

    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error updating product {product_id}: {e.orig}")
        raise ConflictError('Ya existe un producto con ese nombre o código')
    except Exception:
        session.rollback()
        raise


def delete_product(session, product_id: int) -> None:
    """
    Delete a product and its order lines, recomputing the affected orders.

    Raises:
        ConflictError: the product is part of an order in a terminal status,
            whose totals must not change anymore.
    """
    try:
        product = get_product(session, product_id)

        lines = session.query(OrderProduct).options(
            joinedload(OrderProduct.order)
        ).filter(OrderProduct.product_id == product.id).all()

        locked = sorted({line.order.order_number for line in lines if is_terminal(line.order.status)})
        if locked:
            raise ConflictError(
                f'No se puede eliminar el producto "{product.name}": '
                f'forma parte de pedidos finalizados ({", ".join(locked)})'
            )

        for line in lines:
            order = line.order
            order.lines.remove(line)
            refresh_order_totals(order)

        session.delete(product)
        session.commit()
        logger.info(f"Product deleted: id={product_id} (removed from {len(lines)} order(s))")

    except Exception:
        session.rollback()
        raise
