"""
Тесты для Pool.swap и Pool.quote_swap

Coverage:
- Эталонный своп 100 A→B на пуле 1000/1000 с комиссией 0.3%
- Сохранение инварианта k (в том числе после серии свопов)
- Зачисление net_input во from-баланс
- Ошибки до мутации: UnknownAsset, SameAssetSwap, InvalidArgument, InsufficientLiquidity
- Rollback при InvariantViolation
- NoStakeholders: своп не выполняется, пул не изменяется
"""

import logging

import pytest

from src.core.domain import (
    InsufficientLiquidity,
    InvalidArgument,
    InvariantViolation,
    NoStakeholders,
    SameAssetSwap,
    UnknownAsset,
)
from src.pool import Pool


@pytest.fixture
def pool() -> Pool:
    """Пул A-B 1000/1000, fee 0.3%, bootstrap провайдер p0."""
    return Pool.create("A-B", 1000.0, 1000.0, 0.003, "p0")


class TestSwapReferenceScenario:
    """Эталонный своп 100 A→B."""

    def test_output_amount(self, pool: Pool) -> None:
        output = pool.swap("A", "B", 100.0)

        assert output == pytest.approx(1000.0 - 1_000_000.0 / 1099.7)
        assert output == pytest.approx(90.6611, abs=1e-4)

    def test_balances_after_swap(self, pool: Pool) -> None:
        pool.swap("A", "B", 100.0)

        assert pool.asset_a.amount == pytest.approx(1099.7)
        assert pool.asset_b.amount == pytest.approx(1_000_000.0 / 1099.7)

    def test_fee_credited_to_bootstrap_provider(self, pool: Pool) -> None:
        """p0 — единственный провайдер: вся комиссия 0.3 уходит ему в stake A"""
        pool.swap("A", "B", 100.0)

        stake = pool.get_provider("p0")
        assert stake.stake_a.amount == pytest.approx(1000.3)
        assert stake.stake_b.amount == 1000.0
        assert pool.collected_fees == {"A": pytest.approx(0.3), "B": 0.0}

    def test_invariant_product_unchanged(self, pool: Pool) -> None:
        pool.swap("A", "B", 100.0)

        assert pool.invariant_product == 1_000_000.0
        assert pool.asset_a.amount * pool.asset_b.amount == pytest.approx(1_000_000.0, rel=1e-9)

    def test_reverse_direction(self, pool: Pool) -> None:
        """B→A симметричен A→B на симметричном пуле"""
        output = pool.swap("B", "A", 100.0)

        assert output == pytest.approx(1000.0 - 1_000_000.0 / 1099.7)
        assert pool.get_provider("p0").stake_b.amount == pytest.approx(1000.3)


class TestSwapProperties:
    """Свойства свопа: инвариант, сохранение с комиссией."""

    @pytest.mark.parametrize("input_amount", [0.001, 1.0, 100.0, 999.0, 1000.0])
    def test_source_increases_by_net_input(self, pool: Pool, input_amount: float) -> None:
        """from-баланс растёт ровно на input * (1 - fee_rate)"""
        before = pool.asset_a.amount
        pool.swap("A", "B", input_amount)

        assert pool.asset_a.amount - before == pytest.approx(input_amount * (1 - 0.003))

    def test_invariant_preserved_over_many_swaps(self, pool: Pool) -> None:
        k = pool.invariant_product
        for i in range(200):
            if i % 2 == 0:
                pool.swap("A", "B", 37.5)
            else:
                pool.swap("B", "A", 12.25)
            assert pool.asset_a.amount * pool.asset_b.amount == pytest.approx(k, rel=1e-9)

    def test_zero_input_swap(self, pool: Pool) -> None:
        """Нулевой вход: выход 0, балансы не меняются"""
        before = pool.snapshot()

        assert pool.swap("A", "B", 0.0) == 0.0
        assert pool.snapshot() == before

    def test_zero_input_after_drift_pays_nothing(self, pool: Pool) -> None:
        """k чуть выше произведения балансов: нулевой вход не уменьшает пул"""
        pool.swap("A", "B", 123.4)
        pool.invariant_product *= 1 + 1e-12
        before = pool.snapshot()

        assert pool.swap("A", "B", 0.0) == 0.0
        assert pool.swap("B", "A", 0.0) == 0.0
        assert pool.snapshot() == before

    def test_small_pool_swap_distributes_fee(self) -> None:
        """Пул 1e-13 / 1e-13: положительный stake получает комиссию"""
        pool = Pool.create("A-B", 1e-13, 1e-13, 0.003, "p0")

        output = pool.swap("A", "B", 1e-14)

        assert output == pytest.approx(1e-13 - pool.invariant_product / (1e-13 + 0.997e-14), rel=1e-9)
        assert output > 0
        assert pool.get_provider("p0").stake_a.amount == pytest.approx(1e-13 + 3e-17, rel=1e-12)
        assert pool.collected_fees["A"] == pytest.approx(3e-17)
        assert pool.asset_a.amount * pool.asset_b.amount == pytest.approx(pool.invariant_product, rel=1e-9)

    def test_zero_fee_rate_skips_distribution(self) -> None:
        pool = Pool.create("A-B", 1000.0, 1000.0, 0.0, "p0")
        output = pool.swap("A", "B", 100.0)

        assert output == pytest.approx(1000.0 - 1_000_000.0 / 1100.0)
        assert pool.get_provider("p0").stake_a.amount == 1000.0
        assert pool.collected_fees["A"] == 0.0


class TestQuoteSwap:
    """Котировка без мутации."""

    def test_quote_matches_swap(self, pool: Pool) -> None:
        quote = pool.quote_swap("A", "B", 100.0)
        output = pool.swap("A", "B", 100.0)

        assert quote.output_amount == output
        assert quote.fee == pytest.approx(0.3)
        assert quote.net_input == pytest.approx(99.7)

    def test_quote_has_no_side_effects(self, pool: Pool) -> None:
        before = pool.snapshot()
        pool.quote_swap("A", "B", 100.0)
        pool.quote_swap("B", "A", 500.0)

        assert pool.snapshot() == before

    def test_quote_runs_same_prechecks(self, pool: Pool) -> None:
        with pytest.raises(InsufficientLiquidity):
            pool.quote_swap("A", "B", 2000.0)
        with pytest.raises(UnknownAsset):
            pool.quote_swap("A", "C", 1.0)


class TestSwapPrecheckFailures:
    """Ошибки, обнаруживаемые до любой мутации."""

    def test_insufficient_liquidity(self, pool: Pool) -> None:
        """Вход 2000 A при балансе 1000 A"""
        before = pool.snapshot()

        with pytest.raises(InsufficientLiquidity, match="exceeds pool balance"):
            pool.swap("A", "B", 2000.0)

        assert pool.snapshot() == before

    def test_input_equal_to_balance_allowed(self, pool: Pool) -> None:
        output = pool.swap("A", "B", 1000.0)
        assert 0 < output < 1000.0

    @pytest.mark.parametrize("from_asset,to_asset", [("C", "B"), ("A", "C"), ("a", "b")])
    def test_unknown_asset(self, pool: Pool, from_asset: str, to_asset: str) -> None:
        before = pool.snapshot()

        with pytest.raises(UnknownAsset):
            pool.swap(from_asset, to_asset, 10.0)

        assert pool.snapshot() == before

    def test_same_asset(self, pool: Pool) -> None:
        with pytest.raises(SameAssetSwap):
            pool.swap("A", "A", 10.0)

    @pytest.mark.parametrize("bad_input", [-1.0, float("nan"), float("inf")])
    def test_invalid_input_amount(self, pool: Pool, bad_input: float) -> None:
        before = pool.snapshot()

        with pytest.raises(InvalidArgument):
            pool.swap("A", "B", bad_input)

        assert pool.snapshot() == before


class TestSwapRollback:
    """Rollback при нарушении инварианта."""

    def test_forced_invariant_failure_restores_balances_exactly(
        self, pool: Pool, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        pool.swap("A", "B", 123.4)  # неровные балансы
        a_before = pool.asset_a.amount
        b_before = pool.asset_b.amount
        stakes_before = pool.snapshot().providers
        fees_before = pool.collected_fees

        monkeypatch.setattr(pool, "_invariant_holds", lambda: False)

        with pytest.raises(InvariantViolation, match="Invariant product check failed"):
            pool.swap("A", "B", 77.7)

        assert pool.asset_a.amount == a_before
        assert pool.asset_b.amount == b_before
        assert pool.snapshot().providers == stakes_before
        assert pool.collected_fees == fees_before

    def test_rollback_is_logged(
        self, pool: Pool, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setattr(pool, "_invariant_holds", lambda: False)
        caplog.set_level(logging.WARNING, logger="src.pool.pool")

        with pytest.raises(InvariantViolation):
            pool.swap("B", "A", 10.0)

        assert "rolled back" in caplog.text

    def test_small_invariant_mismatch_detected(self) -> None:
        """k = 1e-14, балансы расходятся с k вдвое: InvariantViolation и rollback"""
        pool = Pool.create("A-B", 1e-7, 1e-7, 0.003, "p0")
        pool.invariant_product = 2e-14
        before = pool.snapshot()

        with pytest.raises(InvariantViolation):
            pool.swap("A", "B", 1e-8)

        assert pool.snapshot() == before

    def test_pool_usable_after_rollback(self, pool: Pool, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pool, "_invariant_holds", lambda: False)
        with pytest.raises(InvariantViolation):
            pool.swap("A", "B", 100.0)
        monkeypatch.undo()

        output = pool.swap("A", "B", 100.0)
        assert output == pytest.approx(1000.0 - 1_000_000.0 / 1099.7)


class TestSwapNoStakeholders:
    """Нулевой суммарный stake во входном активе: своп отклоняется целиком."""

    def test_no_stakeholders_rejects_swap(self, pool: Pool) -> None:
        pool.get_provider("p0").stake_a.debit(1000.0)
        before = pool.snapshot()

        with pytest.raises(NoStakeholders, match="no provider stake in 'A'"):
            pool.swap("A", "B", 100.0)

        assert pool.snapshot() == before

    def test_other_direction_still_works(self, pool: Pool) -> None:
        """Stake в B есть: своп B→A проходит"""
        pool.get_provider("p0").stake_a.debit(1000.0)

        pool.swap("B", "A", 100.0)

        assert pool.get_provider("p0").stake_b.amount == pytest.approx(1000.3)

    def test_zero_fee_swap_needs_no_stakeholders(self) -> None:
        """При fee_rate = 0 распределять нечего: своп проходит"""
        pool = Pool.create("A-B", 1000.0, 1000.0, 0.0, "p0")
        pool.get_provider("p0").stake_a.debit(1000.0)

        output = pool.swap("A", "B", 100.0)
        assert output > 0
