"""Stock adjustment for order creation, update, cancellation and deletion."""
import logging
from typing import Dict, Iterable, List, Mapping

from order_service.exceptions import NotFoundError, InsufficientStockError, ValidationError
from order_service.models import Product
from order_service.utils.number_format import MAX_INT

logger = logging.getLogger(__name__)


def lock_products(session, product_ids: Iterable[int]) -> Dict[int, Product]:
    """
    Load products FOR UPDATE and return them keyed by id.

    Raises:
        NotFoundError: if any of the ids does not exist.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return {}

    products = session.query(Product).filter(
        Product.id.in_(ids)
    ).order_by(Product.id).with_for_update().all()

    found = {p.id: p for p in products}
    missing = [pid for pid in ids if pid not in found]
    if missing:
        missing_str = ', '.join(str(pid) for pid in missing)
        raise NotFoundError(f'Producto(s) no encontrado(s): {missing_str}')

    return found


def quantities_of(lines) -> Dict[int, int]:
    """product_id -> quantity for a list of OrderProduct rows or item dicts."""
    result: Dict[int, int] = {}
    for line in lines:
        if isinstance(line, Mapping):
            pid, qty = line['product_id'], line['quantity']
        else:
            pid, qty = line.product_id, line.quantity
        result[pid] = result.get(pid, 0) + int(qty)
    return result


def compute_stock_deltas(old: Mapping[int, int], new: Mapping[int, int]) -> Dict[int, int]:
    """
    Units to take from stock per product when an order goes from ``old`` to ``new``.

    Positive delta: take from stock. Negative delta: give back. Zero deltas are dropped.
    """
    deltas = {}
    for pid in set(old) | set(new):
        delta = new.get(pid, 0) - old.get(pid, 0)
        if delta:
            deltas[pid] = delta
    return deltas


def apply_stock_deltas(products: Mapping[int, Product], deltas: Mapping[int, int]) -> List[Dict]:
    """
    Apply ``deltas`` to product stock, all-or-nothing.

    Every decrement is validated before any product is touched.

    Raises:
        InsufficientStockError: if a product cannot cover its delta.
        ValidationError: if giving units back would overflow the stock column.
    """
    for pid, delta in sorted(deltas.items()):
        product = products[pid]
        if delta > 0 and product.stock < delta:
            raise InsufficientStockError(product.name, delta, product.stock)
        if product.stock - delta > MAX_INT:
            raise ValidationError(f'El stock de {product.name} no puede superar {MAX_INT}')

    movements = []
    for pid, delta in sorted(deltas.items()):
        product = products[pid]
        old_stock = product.stock
        product.stock = old_stock - delta
        movements.append({
            'product_id': pid,
            'product_name': product.name,
            'old_stock': old_stock,
            'new_stock': product.stock
        })
        logger.debug(f"Stock product {pid}: {old_stock} -> {product.stock}")

    return movements


def reserve_stock(products: Mapping[int, Product], quantities: Mapping[int, int]) -> List[Dict]:
    """Decrement stock for a new order."""
    return apply_stock_deltas(products, compute_stock_deltas({}, quantities))


def restock(products: Mapping[int, Product], quantities: Mapping[int, int]) -> List[Dict]:
    """Give back the quantities of a deleted or cancelled order."""
    return apply_stock_deltas(products, compute_stock_deltas(quantities, {}))
