"""
CPMM — Constant-Product Market Maker Math

Чистые функции без побочных эффектов для пула x * y = k:
- Разделение входа свопа на комиссию и чистый вход
- Котировка свопа по инварианту k (без мутации балансов)
- Парное количество для депозита с сохранением соотношения
- Проверка инварианта и соотношения с epsilon-толерантностью
- Пропорциональное распределение комиссии по stake

ФОРМУЛЫ:
    fee             = fee_rate * input_amount
    net_input       = input_amount - fee
    new_from_amount = from_amount + net_input
    new_to_amount   = k / new_from_amount
    output_amount   = to_amount - new_to_amount

    paired_amount   = other_amount / this_amount * amount
    share_i         = stake_i / Σ stake * fee_amount
"""

from typing import Mapping, NamedTuple

from src.core.math.numerical_safeguards import POOL_INVARIANT_REL_TOL, is_close


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ZeroStakeError(ValueError):
    """
    Суммарный stake равен нулю: пропорциональное распределение не определено.
    """
    pass


# =============================================================================
# ТИПЫ
# =============================================================================


class SwapQuote(NamedTuple):
    """Котировка свопа (результат шагов 3-6 алгоритма свопа)."""

    fee: float
    net_input: float
    new_from_amount: float
    new_to_amount: float
    output_amount: float

    @property
    def effective_price(self) -> float:
        """Средняя цена исполнения: сколько to-актива получено за единицу входа."""
        gross_input = self.fee + self.net_input
        if gross_input <= 0:
            return 0.0
        return self.output_amount / gross_input


# =============================================================================
# СВОП
# =============================================================================


def split_fee(input_amount: float, fee_rate: float) -> tuple[float, float]:
    """
    Разделение входа свопа на комиссию и чистый вход.

    Args:
        input_amount: Количество входного актива
        fee_rate: Доля комиссии [0, 1)

    Returns:
        (fee, net_input)

    Examples:
        >>> split_fee(100.0, 0.003)
        (0.3, 99.7)
    """
    fee = fee_rate * input_amount
    return fee, input_amount - fee


def quote_swap(
    from_amount: float,
    to_amount: float,
    invariant_product: float,
    input_amount: float,
    fee_rate: float,
) -> SwapQuote:
    """
    Котировка свопа по инварианту постоянного произведения.

    Комиссия не поступает в пул: в from-баланс зачисляется только net_input,
    а новый to-баланс выводится из k, а не из текущего произведения.

    Выход никогда не отрицателен: если k немного выше текущего произведения
    (накопленное округление), to-баланс остаётся прежним и output = 0.
    Нулевой вход всегда даёт нулевой выход без изменения балансов.

    Args:
        from_amount: Текущий баланс входного актива в пуле
        to_amount: Текущий баланс выходного актива в пуле
        invariant_product: Инвариант k
        input_amount: Количество входного актива (включая комиссию)
        fee_rate: Доля комиссии [0, 1)

    Returns:
        SwapQuote

    Examples:
        >>> q = quote_swap(1000.0, 1000.0, 1_000_000.0, 100.0, 0.003)
        >>> round(q.output_amount, 4)
        90.6611
    """
    if input_amount == 0:
        return SwapQuote(0.0, 0.0, from_amount, to_amount, 0.0)

    fee, net_input = split_fee(input_amount, fee_rate)
    new_from_amount = from_amount + net_input
    new_to_amount = min(invariant_product / new_from_amount, to_amount)
    output_amount = to_amount - new_to_amount
    return SwapQuote(
        fee=fee,
        net_input=net_input,
        new_from_amount=new_from_amount,
        new_to_amount=new_to_amount,
        output_amount=output_amount,
    )


def invariant_holds(
    amount_a: float,
    amount_b: float,
    invariant_product: float,
    rel_tol: float = POOL_INVARIANT_REL_TOL,
) -> bool:
    """
    Проверка инварианта amount_a * amount_b ≈ k (только относительная толерантность).

    Args:
        amount_a: Баланс актива A
        amount_b: Баланс актива B
        invariant_product: Ожидаемый k
        rel_tol: Относительная толерантность

    Returns:
        True если произведение совпадает с k в пределах толерантности
    """
    return is_close(amount_a * amount_b, invariant_product, rel_tol=rel_tol)


# =============================================================================
# ЛИКВИДНОСТЬ
# =============================================================================


def paired_amount(this_amount: float, other_amount: float, amount: float) -> float:
    """
    Количество второго актива для депозита с сохранением текущего соотношения.

    Args:
        this_amount: Баланс депонируемого актива в пуле
        other_amount: Баланс второго актива в пуле
        amount: Количество депонируемого актива

    Returns:
        other_amount / this_amount * amount
    """
    return other_amount / this_amount * amount


def ratios_match(
    deposit_a: float,
    deposit_b: float,
    reserve_a: float,
    reserve_b: float,
    rel_tol: float = POOL_INVARIANT_REL_TOL,
) -> bool:
    """
    Проверка deposit_a / deposit_b ≈ reserve_a / reserve_b.

    Сравниваются перекрёстные произведения deposit_a * reserve_b и
    deposit_b * reserve_a с относительной толерантностью, поэтому результат
    не зависит от масштаба соотношения (1 : 1e13 проверяется так же, как 1 : 1).

    Args:
        deposit_a: Депозит актива A (> 0)
        deposit_b: Депозит актива B (> 0)
        reserve_a: Баланс пула по активу A (> 0)
        reserve_b: Баланс пула по активу B (> 0)
        rel_tol: Относительная толерантность

    Returns:
        True если соотношения совпадают в пределах толерантности
    """
    return is_close(deposit_a * reserve_b, deposit_b * reserve_a, rel_tol=rel_tol)


# =============================================================================
# КОМИССИИ
# =============================================================================


def stake_weights(stakes: Mapping[str, float]) -> dict[str, float]:
    """
    Доли участников в суммарном stake (сумма долей = 1).

    Args:
        stakes: provider_id → stake по одному активу

    Returns:
        provider_id → stake / Σ stake

    Raises:
        ZeroStakeError: Если Σ stake == 0
    """
    total = sum(stakes.values())
    if total <= 0:
        raise ZeroStakeError(f"Total stake is zero across {len(stakes)} providers")

    return {provider_id: stake / total for provider_id, stake in stakes.items()}


def proportional_shares(stakes: Mapping[str, float], amount: float) -> dict[str, float]:
    """
    Пропорциональное распределение amount по stake.

    Сумма долей равна amount с точностью до округления.

    Args:
        stakes: provider_id → stake по одному активу
        amount: Распределяемое количество (комиссия свопа)

    Returns:
        provider_id → stake / Σ stake * amount

    Raises:
        ZeroStakeError: Если Σ stake == 0

    Examples:
        >>> proportional_shares({"p0": 3.0, "p1": 1.0}, 2.0)
        {'p0': 1.5, 'p1': 0.5}
    """
    total = sum(stakes.values())
    if total <= 0:
        raise ZeroStakeError(f"Total stake is zero across {len(stakes)} providers")

    return {provider_id: stake / total * amount for provider_id, stake in stakes.items()}
