"""Number parsing and rendering helpers for JSON payloads."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTS = Decimal('0.01')

# Upper bounds of the Numeric(10, 2), INTEGER and BIGINT columns
MAX_MONEY = Decimal('99999999.99')
MAX_INT = 2 ** 31 - 1
MAX_ID = 2 ** 63 - 1


def quantize_money(value) -> Decimal:
    """Round a monetary amount to 2 decimal places (half up)."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_money(value, field: str = 'unit_price') -> Decimal:
    """
    Parse a monetary JSON value (number or numeric string) to Decimal.

    Rules:
    - Accepts int, float (via its str repr) or a string like "10.50"
    - A comma is accepted as decimal separator ("10,50")
    - No negatives, nothing above MAX_MONEY
    - Result is rounded to 2 decimal places

    Raises:
        ValueError: if the value is invalid, empty or out of range.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f'El campo {field} es requerido y debe ser numérico')

    cleaned = str(value).strip().replace(',', '.')
    if not cleaned:
        raise ValueError(f'El campo {field} es requerido y debe ser numérico')

    try:
        decimal_value = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        raise ValueError(f'Formato inválido para {field}: {value}')

    if not decimal_value.is_finite():
        raise ValueError(f'Formato inválido para {field}: {value}')

    if decimal_value < 0:
        raise ValueError(f'El campo {field} no puede ser negativo')

    try:
        decimal_value = quantize_money(decimal_value)
    except InvalidOperation:
        raise ValueError(f'El campo {field} no puede superar {MAX_MONEY}')

    if decimal_value > MAX_MONEY:
        raise ValueError(f'El campo {field} no puede superar {MAX_MONEY}')

    return decimal_value


def parse_int(value, field: str, minimum: int = 0, maximum: int = MAX_INT) -> int:
    """
    Parse an integer JSON value (int or digit string).

    Floats with a fractional part are rejected; 2.0 is accepted as 2.

    Raises:
        ValueError: if the value is not an integer or is outside [minimum, maximum].
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f'El campo {field} debe ser un número entero')

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f'El campo {field} debe ser un número entero')
        number = int(value)
    else:
        cleaned = str(value).strip()
        if not cleaned.lstrip('-').isdigit():
            raise ValueError(f'El campo {field} debe ser un número entero')
        number = int(cleaned)

    if number < minimum:
        raise ValueError(f'El campo {field} debe ser mayor o igual a {minimum}')

    if number > maximum:
        raise ValueError(f'El campo {field} no puede superar {maximum}')

    return number


def money_to_json(value):
    """Render a Numeric column for JSON (float with 2 decimals, None kept)."""
    if value is None:
        return None
    return float(quantize_money(value))
