"""
Orders service with transactional logic.

Handles order creation, line-item reconciliation, stock movements and
status transitions. Every public function commits on success and rolls
back on any error.
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from order_service.exceptions import ConflictError, NotFoundError, ValidationError
from order_service.models import (
    Order, OrderProduct, OrderStatus,
    normalize_payment_status, normalize_payment_method
)
from order_service.services.order_status import (
    normalize_status, is_terminal, ensure_mutable, check_transition
)
from order_service.services.order_totals import (
    parse_line_items, resolve_unit_price, refresh_order_totals
)
from order_service.services.stock_service import (
    lock_products, quantities_of, compute_stock_deltas, apply_stock_deltas,
    reserve_stock, restock
)
from order_service.utils.payloads import required_text, optional_text, date_field

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    ('shipping_address', 255),
    ('shipping_method', 100),
    ('tracking_number', 100),
    ('notes', 2000),
)


def list_orders(session, status: Optional[str] = None) -> List[Order]:
    """List orders (newest first) with their lines, optionally by status."""
    query = session.query(Order).options(
        selectinload(Order.lines).joinedload(OrderProduct.product)
    )
    if status:
        query = query.filter(Order.status == normalize_status(status))
    return query.order_by(Order.order_date.desc(), Order.id.desc()).all()


def get_order(session, order_id: int, for_update: bool = False) -> Order:
    query = session.query(Order).filter(Order.id == order_id)
    if for_update:
        query = query.with_for_update()
    order = query.first()
    if not order:
        raise NotFoundError(f'Pedido con ID {order_id} no encontrado')
    return order


def _check_order_number_available(session, order_number: str, exclude_id: Optional[int] = None) -> None:
    query = session.query(Order.id).filter(Order.order_number == order_number)
    if exclude_id is not None:
        query = query.filter(Order.id != exclude_id)
    if query.first():
        raise ConflictError(f'El número de pedido {order_number} ya existe')


def _parse_payment_fields(data: dict, values: dict) -> None:
    try:
        if 'payment_status' in data:
            values['payment_status'] = normalize_payment_status(data['payment_status'])
        if 'payment_method' in data:
            values['payment_method'] = normalize_payment_method(data['payment_method'])
    except ValueError as e:
        raise ValidationError(str(e))


def _parse_header(data: dict, partial: bool) -> dict:
    """Validate the order header fields (everything but lines and status)."""
    values = {}
    if not partial or 'order_number' in data:
        values['order_number'] = required_text(data, 'order_number', max_length=64)
    if not partial or 'customer_name' in data:
        values['customer_name'] = required_text(data, 'customer_name')
    if not partial:
        values['order_date'] = date_field(data, 'order_date', default=date.today())
    elif 'order_date' in data:
        values['order_date'] = date_field(data, 'order_date', default=date.today())

    _parse_payment_fields(data, values)

    for field, max_length in TEXT_FIELDS:
        if field in data:
            values[field] = optional_text(data, field, max_length=max_length)
    return values


def _build_line(order: Order, item: Dict, product) -> OrderProduct:
    return OrderProduct(
        order=order,
        product=product,
        quantity=item['quantity'],
        unit_price=resolve_unit_price(item, {product.id: product.unit_price}),
        supplier_id=product.supplier_id
    )


def create_order(session, data: dict) -> Order:
    """
    Create an order and its lines atomically, decrementing stock.

    Raises:
        ValidationError: bad payload or terminal initial status
        NotFoundError: a referenced product does not exist
        ConflictError: duplicated order_number
        InsufficientStockError: not enough stock for a line
    """
    try:
        values = _parse_header(data, partial=False)
        status = normalize_status(data['status']) if data.get('status') else OrderStatus.PENDING.value
        if is_terminal(status):
            raise ValidationError(f'Un pedido nuevo no puede crearse en estado {status}')

        items = parse_line_items(data.get('products'))
        _check_order_number_available(session, values['order_number'])

        products = lock_products(session, [item['product_id'] for item in items])
        reserve_stock(products, quantities_of(items))

        order = Order(status=status, **values)
        for item in items:
            _build_line(order, item, products[item['product_id']])
        refresh_order_totals(order)

        session.add(order)
        session.commit()

        logger.info(
            f"Order created: id={order.id} number={order.order_number} "
            f"items={order.num_products} total={order.final_price}"
        )
        return order

    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error creating order: {e.orig}")
        raise ConflictError('El número de pedido ya existe')
    except Exception:
        session.rollback()
        raise


def _reconcile_lines(session, order: Order, items: List[Dict]) -> None:
    """
    Merge the submitted items into the order lines in place.

    Existing lines keep their price snapshot unless the item carries a new
    price; new lines take the override or the current product price. Stock
    moves by the quantity delta of each product.
    """
    current = {line.product_id: line for line in order.lines}
    wanted = {item['product_id']: item for item in items}

    deltas = compute_stock_deltas(quantities_of(order.lines), quantities_of(items))
    products = lock_products(session, set(wanted) | set(deltas))
    apply_stock_deltas(products, deltas)

    for product_id, line in list(current.items()):
        if product_id not in wanted:
            order.lines.remove(line)

    for product_id, item in wanted.items():
        line = current.get(product_id)
        if line is None:
            _build_line(order, item, products[product_id])
            continue
        line.quantity = item['quantity']
        if item['unit_price'] is not None:
            line.unit_price = item['unit_price']

    refresh_order_totals(order)


def _cancel(session, order: Order) -> None:
    """Give back the stock held by an order that is being cancelled."""
    quantities = quantities_of(order.lines)
    restock(lock_products(session, quantities), quantities)


def update_order(session, order_id: int, data: dict) -> Order:
    """
    Update header fields, lines (when ``products`` is sent) and status.

    Raises:
        TerminalStateError: the order is Completed, Cancelled or Delivered
    """
    try:
        order = get_order(session, order_id, for_update=True)
        ensure_mutable(order, 'editar')

        values = _parse_header(data, partial=True)
        target_status = normalize_status(data['status']) if data.get('status') else None

        if 'order_number' in values and values['order_number'] != order.order_number:
            _check_order_number_available(session, values['order_number'], exclude_id=order.id)

        for field, value in values.items():
            setattr(order, field, value)

        if 'products' in data:
            _reconcile_lines(session, order, parse_line_items(data.get('products')))

        if target_status and check_transition(order.status, target_status):
            if target_status == OrderStatus.CANCELLED.value:
                _cancel(session, order)
            order.status = target_status

        session.commit()
        logger.info(f"Order updated: id={order.id} status={order.status} total={order.final_price}")
        return order

    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error updating order {order_id}: {e.orig}")
        raise ConflictError('El número de pedido ya existe')
    except Exception:
        session.rollback()
        raise


def delete_order(session, order_id: int) -> dict:
    """
    Delete an order and restore the stock of its lines.

    Returns:
        dict with the stock movements applied
    """
    try:
        order = get_order(session, order_id, for_update=True)
        ensure_mutable(order, 'eliminar')

        quantities = quantities_of(order.lines)
        movements = restock(lock_products(session, quantities), quantities)

        order_number = order.order_number
        session.delete(order)
        session.commit()

        logger.info(f"Order deleted: id={order_id} number={order_number}, stock restored for {len(movements)} product(s)")
        return {'order_id': order_id, 'restocked': movements}

    except Exception:
        session.rollback()
        raise


def change_order_status(session, order_id: int, raw_status) -> Order:
    """
    Move an order to a new status through the state machine.

    Re-setting the current status is a no-op. Cancelling gives back stock.
    """
    target = normalize_status(raw_status)
    try:
        order = get_order(session, order_id, for_update=True)
        if check_transition(order.status, target):
            if target == OrderStatus.CANCELLED.value:
                _cancel(session, order)
            previous = order.status
            order.status = target
            session.commit()
            logger.info(f"Order {order.id} status: {previous} -> {target}")
        return order

    except Exception:
        session.rollback()
        raise
