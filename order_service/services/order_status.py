"""Order status state machine and terminal-state guard."""
from order_service.exceptions import TerminalStateError, ValidationError
from order_service.models import OrderStatus

TERMINAL_STATUSES = frozenset({
    OrderStatus.COMPLETED.value,
    OrderStatus.CANCELLED.value,
    OrderStatus.DELIVERED.value,
})

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING.value: {
        OrderStatus.IN_PROGRESS.value,
        OrderStatus.COMPLETED.value,
        OrderStatus.CANCELLED.value,
    },
    OrderStatus.IN_PROGRESS.value: {
        OrderStatus.COMPLETED.value,
        OrderStatus.CANCELLED.value,
        OrderStatus.SHIPPED.value,
    },
    OrderStatus.SHIPPED.value: {
        OrderStatus.DELIVERED.value,
        OrderStatus.CANCELLED.value,
    },
    OrderStatus.COMPLETED.value: set(),
    OrderStatus.CANCELLED.value: set(),
    OrderStatus.DELIVERED.value: set(),
}

# Spanish names stored by the first schema of the orders table
STATUS_ALIASES = {
    'pendiente': OrderStatus.PENDING.value,
    'en progreso': OrderStatus.IN_PROGRESS.value,
    'completado': OrderStatus.COMPLETED.value,
    'cancelado': OrderStatus.CANCELLED.value,
    'enviado': OrderStatus.SHIPPED.value,
    'entregado': OrderStatus.DELIVERED.value,
    'canceled': OrderStatus.CANCELLED.value,
}


def normalize_status(value) -> str:
    """
    Map a client status value to its canonical name.

    Raises:
        ValidationError: unknown or missing status.
    """
    if isinstance(value, OrderStatus):
        return value.value

    if not isinstance(value, str) or not value.strip():
        raise ValidationError('El estado es requerido')

    key = ' '.join(value.strip().lower().replace('_', ' ').split())
    for status in OrderStatus:
        if status.value.lower() == key:
            return status.value
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]

    allowed = ', '.join(s.value for s in OrderStatus)
    raise ValidationError(f'Estado inválido: {value}. Valores permitidos: {allowed}')


def is_terminal(status) -> bool:
    return status in TERMINAL_STATUSES


def ensure_mutable(order, action: str = 'modificar') -> None:
    """Reject any edit/delete of an order already in a terminal status."""
    if is_terminal(order.status):
        raise TerminalStateError(
            f'No se puede {action} el pedido {order.order_number}: está en estado {order.status}'
        )


def check_transition(current: str, target: str) -> bool:
    """
    Validate moving an order from ``current`` to ``target``.

    Returns:
        True if the status changes, False for an idempotent re-set.

    Raises:
        TerminalStateError: ``current`` is terminal and ``target`` differs.
        ValidationError: the transition is not allowed.
    """
    if current == target:
        return False

    if is_terminal(current):
        raise TerminalStateError(
            f'No se puede cambiar el estado de un pedido que ya está {current}'
        )

    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValidationError(f'Transición de estado no permitida: {current} -> {target}')

    return True
