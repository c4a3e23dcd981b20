"""
Numerical Safeguards — Safe Math Primitives для пула ликвидности

Модуль обеспечивает численную устойчивость учётных операций пула:
- Epsilon-параметры, входящие в публичный контракт пула
- Сравнение float с относительной толерантностью
- NaN/Inf проверки для входных количеств
- Валидация количеств (неотрицательные, положительные, диапазон)

Все проверки равенства в пуле (invariant product k, соотношение депозита)
выполняются ТОЛЬКО через is_close. Точное сравнение float запрещено:
после деления и последующего умножения исходное значение в общем случае
не воспроизводится побитово.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. NaN/Inf никогда не попадают в баланс (validate_* отклоняют их)
2. Float сравнения всегда учитывают машинную точность
3. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Final

# =============================================================================
# EPSILON-ПАРАМЕТРЫ (публичный контракт пула)
# =============================================================================

# Относительная толерантность для сравнения invariant product и соотношений
# Два значения равны, если abs(a - b) <= rel_tol * max(|a|, |b|)
# Абсолютного порога нет: сравнение не зависит от масштаба балансов
POOL_INVARIANT_REL_TOL: Final[float] = 1e-9


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


# =============================================================================
# EPSILON-СРАВНЕНИЯ FLOAT
# =============================================================================


def is_close(
    a: float,
    b: float,
    rel_tol: float = POOL_INVARIANT_REL_TOL,
    abs_tol: float = 0.0,
) -> bool:
    """
    Сравнение float с учётом машинной точности.

    Алгоритм:
        abs(a - b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)

    Args:
        a: Первое значение
        b: Второе значение
        rel_tol: Относительная толерантность (default: 1e-9)
        abs_tol: Абсолютная толерантность (default: 0.0, только относительное сравнение)

    Returns:
        True если значения близки с учётом толерантности

    Examples:
        >>> is_close(1_000_000.0, 1_000_000.0 + 1e-6)
        True
        >>> is_close(1.0, 1.1)
        False
        >>> is_close(1e-20, 1.1e-20)
        False
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_positive(value: float, name: str) -> None:
    """
    Валидация, что значение строго положительное.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Raises:
        ValueError: Если value <= 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Raises:
        ValueError: Если value < 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_in_range(
    value: float,
    name: str,
    min_value: float | None = None,
    max_value: float | None = None,
) -> None:
    """
    Валидация, что значение в заданном диапазоне [min_value, max_value].

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)
        min_value: Минимальное допустимое значение (optional)
        max_value: Максимальное допустимое значение (optional)

    Raises:
        ValueError: Если value вне диапазона или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if min_value is not None and value < min_value:
        raise ValueError(f"{name} must be >= {min_value}, got {value}")

    if max_value is not None and value > max_value:
        raise ValueError(f"{name} must be <= {max_value}, got {value}")
