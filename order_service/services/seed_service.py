"""Load demo data (suppliers, products, historical orders) from a JSON document."""
import logging
from datetime import date

from order_service.exceptions import ValidationError
from order_service.models import Supplier, Product, Order, OrderProduct, normalize_payment_status, normalize_payment_method
from order_service.services.order_status import normalize_status
from order_service.services.order_totals import parse_line_items, refresh_order_totals
from order_service.utils.payloads import (
    required_text, optional_text, money_field, int_field, date_field
)

logger = logging.getLogger(__name__)


def load_seed_data(session, data: dict) -> dict:
    """
    Insert the suppliers, products and orders described in ``data``.

    Products point to suppliers by ``supplier_ruc``; order items point to
    products by ``code_product``. Seeded orders are historical: their lines
    keep the given prices and stock is NOT decremented.

    Returns:
        dict with the number of rows created per table
    """
    try:
        suppliers_by_ruc = {}
        for raw in data.get('suppliers', []):
            supplier = Supplier(
                company_name=required_text(raw, 'company_name'),
                ruc=optional_text(raw, 'ruc', max_length=20),
                contact=optional_text(raw, 'contact'),
                address=optional_text(raw, 'address')
            )
            session.add(supplier)
            if supplier.ruc:
                suppliers_by_ruc[supplier.ruc] = supplier

        products_by_code = {}
        for raw in data.get('products', []):
            ruc = raw.get('supplier_ruc')
            if ruc and ruc not in suppliers_by_ruc:
                raise ValidationError(f'Producto {raw.get("code_product")}: proveedor con RUC {ruc} no existe')
            product = Product(
                code_product=required_text(raw, 'code_product', max_length=64),
                name=required_text(raw, 'name'),
                classification=optional_text(raw, 'classification'),
                unit_price=money_field(raw, 'unit_price'),
                stock=int_field(raw, 'stock') if 'stock' in raw else 0,
                supplier=suppliers_by_ruc.get(ruc)
            )
            session.add(product)
            products_by_code[product.code_product] = product

        session.flush()

        orders_created = 0
        for raw in data.get('orders', []):
            items = []
            for raw_item in raw.get('products', []):
                code = raw_item.get('code_product')
                if code not in products_by_code:
                    raise ValidationError(f'Pedido {raw.get("order_number")}: producto {code} no existe')
                items.append(dict(raw_item, product_id=products_by_code[code].id))
            items = parse_line_items(items)

            try:
                payment_status = normalize_payment_status(raw.get('payment_status'))
                payment_method = normalize_payment_method(raw.get('payment_method'))
            except ValueError as e:
                raise ValidationError(str(e))

            order = Order(
                order_number=required_text(raw, 'order_number', max_length=64),
                customer_name=required_text(raw, 'customer_name'),
                order_date=date_field(raw, 'order_date', default=date.today()),
                status=normalize_status(raw.get('status') or 'Pending'),
                payment_status=payment_status,
                payment_method=payment_method,
                shipping_address=optional_text(raw, 'shipping_address'),
                shipping_method=optional_text(raw, 'shipping_method', max_length=100),
                tracking_number=optional_text(raw, 'tracking_number', max_length=100),
                notes=optional_text(raw, 'notes', max_length=2000)
            )
            products = {p.id: p for p in products_by_code.values()}
            for item in items:
                product = products[item['product_id']]
                OrderProduct(
                    order=order,
                    product=product,
                    quantity=item['quantity'],
                    unit_price=item['unit_price'] if item['unit_price'] is not None else product.unit_price,
                    supplier_id=product.supplier_id
                )
            refresh_order_totals(order)
            session.add(order)
            orders_created += 1

        session.commit()

        counts = {
            'suppliers': len(data.get('suppliers', [])),
            'products': len(products_by_code),
            'orders': orders_created
        }
        logger.info(f"Seed data loaded: {counts}")
        return counts

    except Exception:
        session.rollback()
        raise
