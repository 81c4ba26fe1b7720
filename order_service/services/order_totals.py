"""
Order totals calculator.

Derives ``num_products`` and ``final_price`` from a list of line items and
normalizes the line-item payloads sent by clients.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from order_service.exceptions import NotFoundError, ValidationError
from order_service.utils.number_format import MAX_ID, MAX_INT, MAX_MONEY, parse_int, parse_money, quantize_money

# Historical clients used different field names for the same thing
PRODUCT_KEYS = ('product_id', 'productId', 'id')
PRICE_KEYS = ('unit_price', 'price')


def _first_present(item: dict, keys: Tuple[str, ...]):
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def parse_line_items(raw_items) -> List[Dict]:
    """
    Validate and normalize the ``products`` array of an order payload.

    Each item becomes ``{'product_id': int, 'quantity': int, 'unit_price': Decimal | None}``.
    Duplicated products are merged: quantities are summed and the first
    explicit price wins. Item order is preserved.

    Raises:
        ValidationError: if the payload is not a list or an item is malformed.
    """
    if raw_items is None:
        return []

    if not isinstance(raw_items, list):
        raise ValidationError('El campo products debe ser una lista')

    merged: Dict[int, Dict] = {}
    for index, item in enumerate(raw_items):
        if not isinstance(item, dict):
            raise ValidationError(f'El producto en la posición {index} debe ser un objeto')

        raw_product_id = _first_present(item, PRODUCT_KEYS)
        raw_price = _first_present(item, PRICE_KEYS)
        try:
            product_id = parse_int(raw_product_id, 'product_id', minimum=1, maximum=MAX_ID)
            quantity = parse_int(item.get('quantity'), 'quantity', minimum=1)
            unit_price = parse_money(raw_price, 'unit_price') if raw_price is not None else None
        except ValueError as e:
            raise ValidationError(f'Producto en la posición {index}: {e}')

        if product_id in merged:
            merged[product_id]['quantity'] += quantity
            if merged[product_id]['quantity'] > MAX_INT:
                raise ValidationError(f'Cantidad total del producto {product_id} supera {MAX_INT}')
            if merged[product_id]['unit_price'] is None:
                merged[product_id]['unit_price'] = unit_price
        else:
            merged[product_id] = {
                'product_id': product_id,
                'quantity': quantity,
                'unit_price': unit_price
            }

    return list(merged.values())


def resolve_unit_price(item: Mapping, current_prices: Mapping[int, Decimal]) -> Decimal:
    """Price override of the item if present, else the product's current price."""
    if item.get('unit_price') is not None:
        return quantize_money(item['unit_price'])

    product_id = item['product_id']
    if product_id not in current_prices or current_prices[product_id] is None:
        raise NotFoundError(f'Producto con ID {product_id} no encontrado')
    return quantize_money(current_prices[product_id])


def calculate_order_totals(
    items: Optional[Iterable[Mapping]],
    current_prices: Optional[Mapping[int, Decimal]] = None
) -> Tuple[int, Decimal]:
    """
    Compute ``(num_products, final_price)`` for a list of line items.

    Args:
        items: dicts with ``product_id``, ``quantity`` and optional ``unit_price``
        current_prices: product_id -> current catalog price, used when an item
            carries no price override

    Returns:
        (sum of quantities, sum of unit_price * quantity rounded to 2 decimals)

    Raises:
        NotFoundError: an item without override references an unknown product.
            Nothing is partially computed.
        ValidationError: the totals do not fit the order columns.
    """
    current_prices = current_prices or {}
    num_products = 0
    final_price = Decimal('0.00')

    for item in items or []:
        unit_price = resolve_unit_price(item, current_prices)
        quantity = int(item['quantity'])
        num_products += quantity
        final_price += unit_price * quantity

    final_price = quantize_money(final_price)
    if num_products > MAX_INT:
        raise ValidationError(f'La cantidad total del pedido no puede superar {MAX_INT}')
    if final_price > MAX_MONEY:
        raise ValidationError(f'El total del pedido no puede superar {MAX_MONEY}')

    return num_products, final_price


def totals_from_lines(lines) -> Tuple[int, Decimal]:
    """Recompute totals from persisted OrderProduct rows (price snapshots)."""
    return calculate_order_totals(
        {'product_id': line.product_id, 'quantity': line.quantity, 'unit_price': line.unit_price}
        for line in lines
    )


def refresh_order_totals(order) -> None:
    """Store the derived totals of ``order`` from its current lines."""
    order.num_products, order.final_price = totals_from_lines(order.lines)
