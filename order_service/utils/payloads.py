"""Helpers to read JSON request bodies into validated Python values."""
from datetime import date

from flask import request

from order_service.exceptions import ValidationError
from order_service.utils.number_format import MAX_ID, MAX_INT, parse_int, parse_money


def get_json_payload() -> dict:
    """Return the request JSON object or raise ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('El cuerpo de la petición debe ser un objeto JSON')
    return data


def optional_text(data: dict, field: str, max_length: int = 255):
    """Stripped string or None when empty/absent."""
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ValidationError(f'El campo {field} debe ser texto')
    value = str(value).strip() or None
    if value and len(value) > max_length:
        raise ValidationError(f'El campo {field} supera los {max_length} caracteres')
    return value


def required_text(data: dict, field: str, max_length: int = 255) -> str:
    value = optional_text(data, field, max_length)
    if not value:
        raise ValidationError(f'El campo {field} es requerido')
    return value


def money_field(data: dict, field: str):
    try:
        return parse_money(data.get(field), field)
    except ValueError as e:
        raise ValidationError(str(e))


def int_field(data: dict, field: str, minimum: int = 0, maximum: int = MAX_INT) -> int:
    try:
        return parse_int(data.get(field), field, minimum=minimum, maximum=maximum)
    except ValueError as e:
        raise ValidationError(str(e))


def optional_id(data: dict, field: str):
    """Positive integer id, or None when null/absent/empty."""
    if data.get(field) in (None, ''):
        return None
    return int_field(data, field, minimum=1, maximum=MAX_ID)


def date_field(data: dict, field: str, default=None):
    """ISO date (YYYY-MM-DD; a datetime string is truncated to its date)."""
    value = data.get(field)
    if value in (None, ''):
        return default
    if not isinstance(value, str):
        raise ValidationError(f'El campo {field} debe ser una fecha YYYY-MM-DD')
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise ValidationError(f'Fecha inválida en {field}: {value}. Use YYYY-MM-DD')
