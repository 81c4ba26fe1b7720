"""
Unit tests for money and integer parsing helpers.
"""

import pytest
from decimal import Decimal

from order_service.utils.number_format import (
    MAX_INT, MAX_MONEY, parse_money, parse_int, money_to_json, quantize_money
)


class TestParseMoney:

    @pytest.mark.parametrize('raw, expected', [
        (10, Decimal('10.00')),
        (10.5, Decimal('10.50')),
        ('19.99', Decimal('19.99')),
        ('19,99', Decimal('19.99')),
        (' 3 ', Decimal('3.00')),
        ('0.005', Decimal('0.01')),
        (0, Decimal('0.00')),
    ])
    def test_valid(self, raw, expected):
        assert parse_money(raw) == expected

    @pytest.mark.parametrize('raw', [None, '', 'abc', '-1', -0.5, True, 'NaN', 'Infinity'])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_money(raw, 'unit_price')

    def test_upper_bound_is_accepted(self):
        assert parse_money('99999999.99') == MAX_MONEY

    @pytest.mark.parametrize('raw', [1e30, '1e30', '1E+999999', 100000000, '99999999.995'])
    def test_too_large(self, raw):
        with pytest.raises(ValueError):
            parse_money(raw, 'unit_price')


class TestParseInt:

    @pytest.mark.parametrize('raw, expected', [(3, 3), ('7', 7), (2.0, 2), (' 12 ', 12)])
    def test_valid(self, raw, expected):
        assert parse_int(raw, 'quantity') == expected

    @pytest.mark.parametrize('raw', [None, 1.5, 'x', '', False])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_int(raw, 'quantity')

    def test_minimum(self):
        with pytest.raises(ValueError):
            parse_int(0, 'quantity', minimum=1)

    @pytest.mark.parametrize('raw', [MAX_INT + 1, 10 ** 20, str(10 ** 20), 1e30])
    def test_too_large(self, raw):
        with pytest.raises(ValueError):
            parse_int(raw, 'stock')

    def test_maximum(self):
        assert parse_int(MAX_INT, 'stock') == MAX_INT
        assert parse_int(2 ** 40, 'product_id', maximum=2 ** 63 - 1) == 2 ** 40


def test_money_to_json():
    assert money_to_json(None) is None
    assert money_to_json(Decimal('25')) == 25.0
    assert money_to_json(quantize_money('2.345')) == 2.35
