"""
Unit tests for the order status state machine.
"""

import pytest
from types import SimpleNamespace

from order_service.exceptions import TerminalStateError, ValidationError
from order_service.models import OrderStatus
from order_service.services.order_status import (
    ALLOWED_TRANSITIONS, TERMINAL_STATUSES,
    normalize_status, is_terminal, ensure_mutable, check_transition
)


class TestNormalizeStatus:
    """Tests for status name normalization."""

    @pytest.mark.parametrize('raw, expected', [
        ('Pending', 'Pending'),
        ('pending', 'Pending'),
        ('  in progress ', 'In Progress'),
        ('IN_PROGRESS', 'In Progress'),
        ('Completado', 'Completed'),
        ('cancelado', 'Cancelled'),
        ('canceled', 'Cancelled'),
        ('Enviado', 'Shipped'),
        ('entregado', 'Delivered'),
        (OrderStatus.SHIPPED, 'Shipped'),
    ])
    def test_valid_values(self, raw, expected):
        assert normalize_status(raw) == expected

    @pytest.mark.parametrize('raw', [None, '', '   ', 'Archived', 42])
    def test_invalid_values(self, raw):
        with pytest.raises(ValidationError):
            normalize_status(raw)


class TestTerminalStatuses:

    def test_terminal_set(self):
        assert TERMINAL_STATUSES == {'Completed', 'Cancelled', 'Delivered'}

    def test_terminal_statuses_have_no_exit(self):
        for status in TERMINAL_STATUSES:
            assert ALLOWED_TRANSITIONS[status] == set()
            assert is_terminal(status)

    @pytest.mark.parametrize('status', ['Pending', 'In Progress', 'Shipped'])
    def test_open_statuses_are_mutable(self, status):
        order = SimpleNamespace(status=status, order_number='ORD-1')
        ensure_mutable(order)

    @pytest.mark.parametrize('status', ['Completed', 'Cancelled', 'Delivered'])
    def test_terminal_orders_are_locked(self, status):
        order = SimpleNamespace(status=status, order_number='ORD-1')
        with pytest.raises(TerminalStateError) as exc_info:
            ensure_mutable(order, 'eliminar')

        assert exc_info.value.status_code == 403
        assert 'ORD-1' in exc_info.value.message


class TestCheckTransition:
    """Tests for check_transition."""

    @pytest.mark.parametrize('current, target', [
        ('Pending', 'In Progress'),
        ('Pending', 'Completed'),
        ('Pending', 'Cancelled'),
        ('In Progress', 'Shipped'),
        ('In Progress', 'Completed'),
        ('In Progress', 'Cancelled'),
        ('Shipped', 'Delivered'),
        ('Shipped', 'Cancelled'),
    ])
    def test_allowed(self, current, target):
        assert check_transition(current, target) is True

    @pytest.mark.parametrize('status', [s.value for s in OrderStatus])
    def test_same_status_is_noop(self, status):
        assert check_transition(status, status) is False

    @pytest.mark.parametrize('current, target', [
        ('Pending', 'Shipped'),
        ('Pending', 'Delivered'),
        ('Shipped', 'Pending'),
        ('In Progress', 'Pending'),
    ])
    def test_disallowed(self, current, target):
        with pytest.raises(ValidationError):
            check_transition(current, target)

    @pytest.mark.parametrize('current', ['Completed', 'Cancelled', 'Delivered'])
    def test_leaving_terminal_status(self, current):
        with pytest.raises(TerminalStateError):
            check_transition(current, 'Pending')
