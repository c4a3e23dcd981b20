"""Pool — двухактивный пул ликвидности с постоянным произведением (x * y = k).

Операции:
- swap: обмен одного актива на другой с сохранением k и комиссией провайдерам
- add_liquidity: депозит в текущем соотношении, пересчёт k, учёт stake
- compute_paired_amount: парное количество для депозита (без побочных эффектов)
- fee_shares / get_provider / snapshot: чтение состояния

Каждая мутирующая операция либо применяется целиком, либо не меняет пул:
все ошибки, кроме InvariantViolation, обнаруживаются до мутации, а
InvariantViolation выбрасывается после восстановления обоих балансов.

Пул не потокобезопасен: встраивающее приложение сериализует мутирующие
вызовы для одного экземпляра.
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping

import jsonschema
from pydantic import ValidationError

from src.core.contracts import validate_pool_config
from src.core.domain.balance import Balance
from src.core.domain.errors import (
    InsufficientLiquidity,
    InvalidArgument,
    InvalidConfiguration,
    InvalidRatio,
    InvariantViolation,
    NoStakeholders,
    SameAssetSwap,
    UnknownAsset,
    UnknownProvider,
)
from src.core.domain.pool_snapshot import AssetSnapshot, PoolSnapshot, ProviderSnapshot
from src.core.domain.provider_stake import ProviderStake
from src.core.math.cpmm import (
    SwapQuote,
    ZeroStakeError,
    invariant_holds,
    paired_amount,
    proportional_shares,
    quote_swap,
    ratios_match,
    stake_weights,
)
from src.core.math.numerical_safeguards import validate_non_negative, validate_positive

from .config import PoolConfig, ToleranceConfig

logger = logging.getLogger(__name__)


class Pool:
    """Пул ликвидности для пары активов A/B.

    Владеет двумя балансами, инвариантом k, долей комиссии, политикой
    толерантности и реестром провайдеров (provider_id → ProviderStake).
    Реестр принадлежит экземпляру пула, глобального реестра нет.
    """

    def __init__(self, config: PoolConfig):
        """
        Args:
            config: валидированная конфигурация пула
        """
        name_a, name_b = config.asset_names

        self.pair_name: str = config.pair_name
        self.fee_rate: float = config.fee_rate
        self.tolerance: ToleranceConfig = config.tolerance

        self.asset_a = Balance(name=name_a, amount=config.amount_a)
        self.asset_b = Balance(name=name_b, amount=config.amount_b)
        self.invariant_product: float = config.amount_a * config.amount_b

        self._providers: dict[str, ProviderStake] = {}
        self._collected_fees: dict[str, float] = {name_a: 0.0, name_b: 0.0}

        self._upsert_provider(config.bootstrap_provider_id, config.amount_a, config.amount_b)

        logger.debug(
            "Pool %s created: %s=%s %s=%s k=%s fee_rate=%s bootstrap=%s",
            self.pair_name,
            name_a,
            config.amount_a,
            name_b,
            config.amount_b,
            self.invariant_product,
            self.fee_rate,
            config.bootstrap_provider_id,
        )

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def create(
        cls,
        pair_name: str,
        amount_a: float,
        amount_b: float,
        fee_rate: float,
        bootstrap_provider_id: str,
        tolerance: ToleranceConfig | None = None,
    ) -> "Pool":
        """Создание пула из начального двустороннего депозита.

        Args:
            pair_name: имя пары "<assetA>-<assetB>"
            amount_a: начальный баланс актива A
            amount_b: начальный баланс актива B
            fee_rate: доля комиссии свопа [0, 1)
            bootstrap_provider_id: провайдер начальной ликвидности
            tolerance: политика epsilon-сравнения (default: ToleranceConfig())

        Returns:
            Новый Pool

        Raises:
            InvalidConfiguration: если параметры не проходят валидацию
        """
        params: dict[str, Any] = {
            "pair_name": pair_name,
            "amount_a": amount_a,
            "amount_b": amount_b,
            "fee_rate": fee_rate,
            "bootstrap_provider_id": bootstrap_provider_id,
        }
        if tolerance is not None:
            params["tolerance"] = tolerance

        try:
            config = PoolConfig(**params)
        except (ValidationError, ValueError) as e:
            raise InvalidConfiguration(f"Invalid pool configuration: {e}") from e

        return cls(config)

    @classmethod
    def from_config(cls, config: PoolConfig | Mapping[str, Any]) -> "Pool":
        """Создание пула из PoolConfig или JSON документа (dict).

        Документ сначала проверяется по контракту pool_config.json,
        затем по модели PoolConfig.

        Raises:
            InvalidConfiguration: если документ не проходит валидацию
        """
        if isinstance(config, PoolConfig):
            return cls(config)

        data = dict(config)
        try:
            validate_pool_config(data)
        except jsonschema.ValidationError as e:
            raise InvalidConfiguration(f"pool_config contract violation: {e.message}") from e

        try:
            return cls(PoolConfig.model_validate(data))
        except (ValidationError, ValueError) as e:
            raise InvalidConfiguration(f"Invalid pool configuration: {e}") from e

    # =========================================================================
    # SWAP
    # =========================================================================

    def quote_swap(self, from_asset: str, to_asset: str, input_amount: float) -> SwapQuote:
        """Котировка свопа без мутации пула.

        Выполняет те же проверки, что и swap (кроме проверки инварианта).

        Raises:
            UnknownAsset, SameAssetSwap, InvalidArgument, InsufficientLiquidity
        """
        from_balance, to_balance = self._resolve_swap(from_asset, to_asset, input_amount)
        return quote_swap(
            from_balance.amount,
            to_balance.amount,
            self.invariant_product,
            input_amount,
            self.fee_rate,
        )

    def swap(self, from_asset: str, to_asset: str, input_amount: float) -> float:
        """Обмен input_amount актива from_asset на to_asset.

        Алгоритм:
            1. Разрешение имён активов; проверка достаточности from-баланса
               (нулевой вход: возврат 0.0, пул не меняется)
            2. fee = fee_rate * input; net_input = input - fee
            3. new_to = min(k / (from + net_input), to); output = to - new_to >= 0
            4. Зачисление net_input, списание output
            5. Проверка from * to ≈ k (иначе rollback + InvariantViolation)
            6. Распределение fee по stake провайдеров во from_asset

        Args:
            from_asset: имя входного актива
            to_asset: имя выходного актива
            input_amount: количество входного актива (включая комиссию)

        Returns:
            Количество to_asset, выданное вызывающему

        Raises:
            UnknownAsset: неизвестное имя актива
            SameAssetSwap: from_asset == to_asset
            InvalidArgument: input_amount отрицательный или NaN/Inf
            InsufficientLiquidity: input_amount больше баланса from_asset
            NoStakeholders: суммарный stake в from_asset равен нулю
            InvariantViolation: произведение балансов не совпало с k (пул восстановлен)
        """
        from_balance, to_balance = self._resolve_swap(from_asset, to_asset, input_amount)
        if input_amount == 0:
            return 0.0

        quote = quote_swap(
            from_balance.amount,
            to_balance.amount,
            self.invariant_product,
            input_amount,
            self.fee_rate,
        )

        # Доли комиссии считаются до мутации: NoStakeholders оставляет пул нетронутым
        shares = self._fee_shares_for(from_balance.name, quote.fee) if quote.fee > 0 else {}

        from_before = from_balance.amount
        to_before = to_balance.amount

        from_balance.credit(quote.net_input)
        to_balance.debit(quote.output_amount)

        if not self._invariant_holds():
            actual = self.asset_a.amount * self.asset_b.amount
            # Точное восстановление значений до вызова
            from_balance.amount = from_before
            to_balance.amount = to_before
            logger.warning(
                "Pool %s swap %s %s->%s rolled back: product %r != k %r",
                self.pair_name,
                input_amount,
                from_asset,
                to_asset,
                actual,
                self.invariant_product,
            )
            raise InvariantViolation(
                f"Invariant product check failed after swap {input_amount} {from_asset}->{to_asset}: "
                f"{actual!r} != {self.invariant_product!r}"
            )

        self._credit_fee_shares(from_balance.name, shares, quote.fee)

        logger.debug(
            "Pool %s swap %s %s -> %s %s (fee=%s)",
            self.pair_name,
            input_amount,
            from_asset,
            quote.output_amount,
            to_asset,
            quote.fee,
        )
        return quote.output_amount

    # =========================================================================
    # LIQUIDITY
    # =========================================================================

    def add_liquidity(self, amount_a: float, amount_b: float, provider_id: str) -> None:
        """Двусторонний депозит в текущем соотношении пула.

        Args:
            amount_a: количество актива A
            amount_b: количество актива B
            provider_id: провайдер (создаётся при первом депозите)

        Raises:
            InvalidArgument: неположительные/NaN количества или пустой provider_id
            InvalidRatio: amount_a / amount_b не совпадает с соотношением пула
        """
        self._require_positive(amount_a, "amount_a")
        self._require_positive(amount_b, "amount_b")
        if not isinstance(provider_id, str) or not provider_id:
            raise InvalidArgument(f"provider_id must be a non-empty string, got {provider_id!r}")

        if not ratios_match(
            amount_a,
            amount_b,
            self.asset_a.amount,
            self.asset_b.amount,
            rel_tol=self.tolerance.rel_tol,
        ):
            raise InvalidRatio(
                f"Deposit ratio {amount_a}/{amount_b} does not match pool ratio "
                f"{self.asset_a.amount}/{self.asset_b.amount}"
            )

        self.asset_a.credit(amount_a)
        self.asset_b.credit(amount_b)
        self._update_invariant()
        self._upsert_provider(provider_id, amount_a, amount_b)

        logger.debug(
            "Pool %s liquidity +%s %s +%s %s from %s (k=%s)",
            self.pair_name,
            amount_a,
            self.asset_a.name,
            amount_b,
            self.asset_b.name,
            provider_id,
            self.invariant_product,
        )

    def compute_paired_amount(self, asset_name: str, amount: float) -> float:
        """Количество второго актива для депозита amount актива asset_name.

        Без побочных эффектов; предназначено для вызова перед add_liquidity.

        Raises:
            UnknownAsset: неизвестное имя актива
            InvalidArgument: amount отрицательный или NaN/Inf
        """
        balance = self._get_balance(asset_name)
        self._require_non_negative(amount, "amount")
        other = self._other(balance)
        return paired_amount(balance.amount, other.amount, amount)

    # =========================================================================
    # FEES & PROVIDERS
    # =========================================================================

    def fee_shares(self, asset_name: str) -> dict[str, float]:
        """Доли провайдеров в распределении комиссии по активу (сумма = 1).

        Raises:
            UnknownAsset: неизвестное имя актива
            NoStakeholders: суммарный stake по активу равен нулю
        """
        balance = self._get_balance(asset_name)
        try:
            return stake_weights(self._stakes_in(balance.name))
        except ZeroStakeError as e:
            raise NoStakeholders(f"No provider stake in '{balance.name}'") from e

    def get_provider(self, provider_id: str) -> ProviderStake:
        """Запись провайдера по id.

        Raises:
            UnknownProvider: провайдер не зарегистрирован
        """
        try:
            return self._providers[provider_id]
        except KeyError:
            raise UnknownProvider(provider_id) from None

    def provider_ids(self) -> list[str]:
        return list(self._providers)

    @property
    def providers(self) -> Mapping[str, ProviderStake]:
        """Реестр провайдеров (read-only view)."""
        return MappingProxyType(self._providers)

    @property
    def collected_fees(self) -> dict[str, float]:
        """Суммарные распределённые комиссии по активам."""
        return dict(self._collected_fees)

    @property
    def asset_names(self) -> tuple[str, str]:
        return self.asset_a.name, self.asset_b.name

    def price(self, asset_name: str) -> float:
        """Спот-цена: количество второго актива за единицу asset_name."""
        balance = self._get_balance(asset_name)
        return self._other(balance).amount / balance.amount

    def snapshot(self) -> PoolSnapshot:
        """Immutable снапшот текущего состояния пула."""
        return PoolSnapshot(
            pair_name=self.pair_name,
            fee_rate=self.fee_rate,
            invariant_product=self.invariant_product,
            asset_a=AssetSnapshot(name=self.asset_a.name, amount=self.asset_a.amount),
            asset_b=AssetSnapshot(name=self.asset_b.name, amount=self.asset_b.amount),
            providers=[
                ProviderSnapshot(
                    provider_id=stake.provider_id,
                    stake_a=stake.stake_a.amount,
                    stake_b=stake.stake_b.amount,
                )
                for stake in self._providers.values()
            ],
            collected_fees=dict(self._collected_fees),
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _distribute_fee(self, asset_name: str, fee_amount: float) -> None:
        """Пропорциональное распределение fee_amount по stake в asset_name.

        Raises:
            UnknownAsset: неизвестное имя актива
            NoStakeholders: суммарный stake по активу равен нулю
        """
        balance = self._get_balance(asset_name)
        shares = self._fee_shares_for(balance.name, fee_amount)
        self._credit_fee_shares(balance.name, shares, fee_amount)

    def _fee_shares_for(self, asset_name: str, fee_amount: float) -> dict[str, float]:
        try:
            return proportional_shares(self._stakes_in(asset_name), fee_amount)
        except ZeroStakeError as e:
            raise NoStakeholders(
                f"Cannot distribute fee {fee_amount} {asset_name}: no provider stake in '{asset_name}'"
            ) from e

    def _credit_fee_shares(self, asset_name: str, shares: Mapping[str, float], fee_amount: float) -> None:
        for provider_id, share in shares.items():
            self._providers[provider_id].get_balance(asset_name).credit(share)
        self._collected_fees[asset_name] += fee_amount

    def _stakes_in(self, asset_name: str) -> dict[str, float]:
        return {pid: stake.amount_of(asset_name) for pid, stake in self._providers.items()}

    def _resolve_swap(self, from_asset: str, to_asset: str, input_amount: float) -> tuple[Balance, Balance]:
        from_balance = self._get_balance(from_asset)
        to_balance = self._get_balance(to_asset)
        if from_balance is to_balance:
            raise SameAssetSwap(f"Cannot swap '{from_asset}' for itself")

        self._require_non_negative(input_amount, "input_amount")

        # Balance.debit молча игнорирует недостаток средств: проверка здесь
        if input_amount > from_balance.amount:
            raise InsufficientLiquidity(
                f"Swap input {input_amount} {from_asset} exceeds pool balance {from_balance.amount}"
            )
        return from_balance, to_balance

    def _get_balance(self, asset_name: str) -> Balance:
        if asset_name == self.asset_a.name:
            return self.asset_a
        if asset_name == self.asset_b.name:
            return self.asset_b
        raise UnknownAsset(asset_name, self.asset_names)

    def _other(self, balance: Balance) -> Balance:
        return self.asset_b if balance is self.asset_a else self.asset_a

    def _invariant_holds(self) -> bool:
        return invariant_holds(
            self.asset_a.amount,
            self.asset_b.amount,
            self.invariant_product,
            rel_tol=self.tolerance.rel_tol,
        )

    def _update_invariant(self) -> None:
        self.invariant_product = self.asset_a.amount * self.asset_b.amount

    def _upsert_provider(self, provider_id: str, amount_a: float, amount_b: float) -> None:
        stake = self._providers.get(provider_id)
        if stake is None:
            stake = ProviderStake.empty(provider_id, self.asset_a.name, self.asset_b.name)
            self._providers[provider_id] = stake
        stake.stake_a.credit(amount_a)
        stake.stake_b.credit(amount_b)

    @staticmethod
    def _require_non_negative(value: float, name: str) -> None:
        try:
            validate_non_negative(value, name)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(str(e)) from e

    @staticmethod
    def _require_positive(value: float, name: str) -> None:
        try:
            validate_positive(value, name)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(str(e)) from e

    def __repr__(self) -> str:
        return (
            f"Pool({self.pair_name!r}, {self.asset_a.name}={self.asset_a.amount}, "
            f"{self.asset_b.name}={self.asset_b.amount}, k={self.invariant_product}, "
            f"fee_rate={self.fee_rate}, providers={len(self._providers)})"
        )
