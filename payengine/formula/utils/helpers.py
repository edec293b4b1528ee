import regex
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from payengine.formula.constants import (
    CURRENCY_QUANTUM,
    DEFAULT_MAX_EXPRESSION_LENGTH,
    DEFAULT_MAX_NESTING_DEPTH,
    RESERVED_WORDS,
    VARIABLE_NAME_REGEX
)

_variable_name_pattern = regex.compile(VARIABLE_NAME_REGEX)


def get_formula_setting(name, default):
    """Read a formula engine setting, falling back to `default` when the
    setting is missing or Django settings are not configured at all."""
    try:
        return getattr(settings, name, default)
    except ImproperlyConfigured:
        return default


def get_max_expression_length():
    return get_formula_setting(
        'PAYROLL_FORMULA_MAX_EXPRESSION_LENGTH',
        DEFAULT_MAX_EXPRESSION_LENGTH
    )


def get_max_nesting_depth():
    return get_formula_setting(
        'PAYROLL_FORMULA_MAX_NESTING_DEPTH',
        DEFAULT_MAX_NESTING_DEPTH
    )


def is_reserved_word(name):
    return name.lower() in RESERVED_WORDS


def is_valid_variable_name(name):
    return (
        isinstance(name, str) and
        bool(_variable_name_pattern.match(name)) and
        not is_reserved_word(name)
    )


def to_decimal(value):
    """Convert numbers (and numeric strings) to Decimal without float noise.

    :raises ValueError: when value is not numeric
    """
    if value is None:
        return Decimal('0')
    if isinstance(value, bool):
        raise ValueError(f'{value!r} is not a numeric value')

    if isinstance(value, Decimal):
        decimal_value = value
    else:
        try:
            # str() keeps 0.1 as 0.1 rather than its binary expansion
            decimal_value = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f'{value!r} is not a numeric value')

    if not decimal_value.is_finite():
        raise ValueError(f'{value!r} is not a finite value')
    return decimal_value


def round_amount(value):
    """Round to currency precision, half away from zero."""
    return to_decimal(value).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def format_amount(value):
    """Fixed two fraction digit text used when substituting into formulas."""
    return '{:f}'.format(round_amount(value))
