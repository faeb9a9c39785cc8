"""Resource quantities as wide-context Decimals.

Amounts are compared by the Decimal total order and never converted to
floats, so thresholds stay exact at very large magnitudes.
"""
from __future__ import annotations

import decimal
from decimal import Decimal
from typing import Union

Amount = Decimal

AmountLike = Union[int, str, float, Decimal]

AMOUNT_CONTEXT = decimal.Context(
    prec=50,
    Emin=-999_999_999,
    Emax=999_999_999,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
)

ZERO = Decimal(0)
ONE = Decimal(1)


def to_amount(value: AmountLike) -> Amount:
    """Normalise *value* to an Amount. Raises TypeError or ValueError."""
    if isinstance(value, bool):
        raise TypeError("bool is not a valid amount")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except decimal.InvalidOperation:
            raise ValueError(f"invalid amount literal {value!r}") from None
    else:
        raise TypeError(f"cannot convert {type(value).__name__} to an amount")
    if not amount.is_finite():
        raise ValueError(f"amount must be finite, got {value!r}")
    return amount


def add(a: Amount, b: Amount) -> Amount:
    return AMOUNT_CONTEXT.add(a, b)


def subtract(a: Amount, b: Amount) -> Amount:
    return AMOUNT_CONTEXT.subtract(a, b)


def multiply(a: Amount, b: Amount) -> Amount:
    return AMOUNT_CONTEXT.multiply(a, b)


def ratio(current: Amount, target: Amount) -> float:
    """Progress of *current* toward *target*, clamped to [0, 1]."""
    if target <= ZERO:
        return 1.0
    if current <= ZERO:
        return 0.0
    if current >= target:
        return 1.0
    return float(AMOUNT_CONTEXT.divide(current, target))


def amount_to_str(amount: Amount) -> str:
    return str(amount)


def amount_from_str(text: str) -> Amount:
    return to_amount(text)


def power(base: Amount, exponent: int) -> Amount:
    return AMOUNT_CONTEXT.power(base, exponent)
