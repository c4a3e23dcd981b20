"""
Pool Errors — таксономия ошибок пула ликвидности

Все ошибки возвращаются непосредственному вызывающему, внутренних повторов нет.
Только InvariantViolation требует компенсирующей мутации (rollback) перед
выбросом; остальные обнаруживаются до любой мутации.

Каждая ошибка несёт стабильный машинный code для встраивающих приложений.
"""


class PoolError(Exception):
    """Базовая ошибка пула ликвидности."""

    code: str = "pool_error"


class InvalidConfiguration(PoolError):
    """
    Некорректные параметры создания пула.

    Примеры: имя пары не делится на две непустые части, fee_rate вне [0, 1),
    неположительные начальные количества.
    """

    code = "invalid_configuration"


class InvalidArgument(PoolError, ValueError):
    """Некорректный аргумент операции (NaN/Inf, отрицательное количество, пустой provider_id)."""

    code = "invalid_argument"


class UnknownAsset(PoolError):
    """Имя актива не совпадает ни с одним из двух активов пула."""

    code = "unknown_asset"

    def __init__(self, asset_name: str, known: tuple[str, ...] = ()):
        self.asset_name = asset_name
        self.known = known
        suffix = f" (pool assets: {', '.join(known)})" if known else ""
        super().__init__(f"Unknown asset '{asset_name}'{suffix}")


class UnknownProvider(PoolError):
    """Провайдер ликвидности с таким id не зарегистрирован в пуле."""

    code = "unknown_provider"

    def __init__(self, provider_id: str):
        self.provider_id = provider_id
        super().__init__(f"Unknown provider '{provider_id}'")


class SameAssetSwap(PoolError):
    """Своп актива на самого себя."""

    code = "same_asset_swap"


class InsufficientLiquidity(PoolError):
    """Вход свопа превышает баланс входного актива в пуле."""

    code = "insufficient_liquidity"


class InvalidRatio(PoolError):
    """Соотношение депозита не совпадает с текущим соотношением пула."""

    code = "invalid_ratio"


class InvariantViolation(PoolError):
    """
    Проверка инварианта k после свопа не прошла.

    К моменту выброса оба баланса пула уже восстановлены до значений
    перед вызовом.
    """

    code = "invariant_violation"


class NoStakeholders(PoolError):
    """
    Суммарный stake во входном активе равен нулю: комиссию некому распределить.

    Своп при этом не выполняется, пул остаётся нетронутым.
    """

    code = "no_stakeholders"
