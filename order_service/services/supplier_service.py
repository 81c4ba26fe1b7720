"""Supplier service - CRUD with RUC uniqueness."""
import logging
from typing import List, Optional

from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from order_service.exceptions import ConflictError, NotFoundError
from order_service.models import Supplier, Product, OrderProduct
from order_service.utils.payloads import required_text, optional_text

logger = logging.getLogger(__name__)


def list_suppliers(session, search: Optional[str] = None) -> List[Supplier]:
    """List suppliers with their products, ordered by company name."""
    query = session.query(Supplier).options(selectinload(Supplier.products))

    if search:
        pattern = f'%{search.strip().lower()[:100]}%'
        query = query.filter(or_(
            func.lower(Supplier.company_name).like(pattern),
            func.lower(Supplier.ruc).like(pattern),
            func.lower(Supplier.contact).like(pattern)
        ))

    return query.order_by(Supplier.company_name).all()


def get_supplier(session, supplier_id: int) -> Supplier:
    supplier = session.get(Supplier, supplier_id)
    if not supplier:
        raise NotFoundError(f'Proveedor con ID {supplier_id} no encontrado')
    return supplier


def _parse_supplier_payload(data: dict, partial: bool) -> dict:
    values = {}
    if not partial or 'company_name' in data:
        values['company_name'] = required_text(data, 'company_name')
    for field, max_length in (('ruc', 20), ('contact', 255), ('address', 255)):
        if not partial or field in data:
            values[field] = optional_text(data, field, max_length=max_length)
    return values


def _check_ruc_available(session, ruc: Optional[str], exclude_id: Optional[int] = None) -> None:
    if not ruc:
        return
    query = session.query(Supplier.id).filter(Supplier.ruc == ruc)
    if exclude_id is not None:
        query = query.filter(Supplier.id != exclude_id)
    if query.first():
        raise ConflictError(f'Ya existe un proveedor con el RUC {ruc}')


def create_supplier(session, data: dict) -> Supplier:
    try:
        values = _parse_supplier_payload(data, partial=False)
        _check_ruc_available(session, values.get('ruc'))

        supplier = Supplier(**values)
        session.add(supplier)
        session.commit()

        logger.info(f"Supplier created: id={supplier.id} ruc={supplier.ruc}")
        return supplier

    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error creating supplier: {e.orig}")
        raise ConflictError('Ya existe un proveedor con este RUC')
    except Exception:
        session.rollback()
        raise


def update_supplier(session, supplier_id: int, data: dict) -> Supplier:
    try:
        supplier = get_supplier(session, supplier_id)
        values = _parse_supplier_payload(data, partial=True)
        if 'ruc' in values and values['ruc'] != supplier.ruc:
            _check_ruc_available(session, values['ruc'], exclude_id=supplier.id)

        for field, value in values.items():
            setattr(supplier, field, value)

        session.commit()
        logger.info(f"Supplier updated: id={supplier.id}")
        return supplier

    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error updating supplier {supplier_id}: {e.orig}")
        raise ConflictError('Ya existe un proveedor con este RUC')
    except Exception:
        session.rollback()
        raise


def delete_supplier(session, supplier_id: int) -> dict:
    """
    Delete a supplier, detaching its products and order-line snapshots.

    Returns:
        dict with the number of detached products and order lines
    """
    try:
        supplier = get_supplier(session, supplier_id)

        detached_products = session.query(Product).filter(
            Product.supplier_id == supplier.id
        ).update({Product.supplier_id: None}, synchronize_session='fetch')

        detached_lines = session.query(OrderProduct).filter(
            OrderProduct.supplier_id == supplier.id
        ).update({OrderProduct.supplier_id: None}, synchronize_session='fetch')

        session.expire(supplier, ['products'])
        session.delete(supplier)
        session.commit()

        logger.info(
            f"Supplier deleted: id={supplier_id} "
            f"(products detached={detached_products}, order lines detached={detached_lines})"
        )
        return {'products': detached_products, 'order_lines': detached_lines}

    except Exception:
        session.rollback()
        raise
