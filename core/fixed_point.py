"""
EasySwap Reward Pool - Fixed Point
Целочисленная арифметика с проверкой границ uint256.

Все значения аккумуляторов и сумм - неотрицательные целые. При выходе
за границы операция отклоняется, а не заворачивается по модулю.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from config.constants import MAX_UINT256, SCALE
from core.errors import ArithmeticOverflowError


def _check(value: int, operation: str) -> int:
    if value < 0 or value > MAX_UINT256:
        raise ArithmeticOverflowError(f"uint256 overflow in {operation}: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    return _check(a + b, "add")


def checked_sub(a: int, b: int) -> int:
    return _check(a - b, "sub")


def checked_mul(a: int, b: int) -> int:
    return _check(a * b, "mul")


def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b // denominator с проверкой промежуточного произведения."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div: zero denominator")
    return checked_mul(a, b) // denominator


def to_share(amount: int, acc_per_share: int) -> int:
    """Доля награды позиции: amount * acc / SCALE."""
    return mul_div(amount, acc_per_share, SCALE)
