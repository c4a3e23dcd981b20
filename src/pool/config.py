"""
Pool Config — конфигурация создания пула ликвидности

PoolConfig: immutable Pydantic модель параметров создания пула.
ToleranceConfig: политика epsilon-сравнения (часть публичного контракта пула).

Имя пары задаётся как "<assetA>-<assetB>", например "eth-mtv":
актив A = "eth", актив B = "mtv".
"""

from dataclasses import dataclass
from typing import Final

from pydantic import BaseModel, Field, field_validator

from src.core.math.numerical_safeguards import POOL_INVARIANT_REL_TOL, validate_in_range


# =============================================================================
# CONSTANTS
# =============================================================================

PAIR_NAME_SEPARATOR: Final[str] = "-"

# Стандартная комиссия свопа (0.3%)
DEFAULT_FEE_RATE: Final[float] = 0.003


# =============================================================================
# PAIR NAME
# =============================================================================


def split_pair_name(pair_name: str) -> tuple[str, str]:
    """
    Разбор имени пары на два идентификатора активов.

    Args:
        pair_name: Составное имя, например "eth-mtv"

    Returns:
        (asset_a, asset_b)

    Raises:
        ValueError: Если имя не делится ровно на две непустые части

    Examples:
        >>> split_pair_name("eth-mtv")
        ('eth', 'mtv')
    """
    parts = pair_name.split(PAIR_NAME_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise ValueError(
            f"pair name must be '<assetA>{PAIR_NAME_SEPARATOR}<assetB>' "
            f"with two non-empty parts, got '{pair_name}'"
        )
    if parts[0] == parts[1]:
        raise ValueError(f"pair name must reference two different assets, got '{pair_name}'")
    return parts[0], parts[1]


# =============================================================================
# TOLERANCE
# =============================================================================


@dataclass(frozen=True)
class ToleranceConfig:
    """Политика epsilon-сравнения для инварианта k и соотношения депозита.

    Значения a и b равны, если:
        abs(a - b) <= rel_tol * max(abs(a), abs(b))
    """

    rel_tol: float = POOL_INVARIANT_REL_TOL

    def __post_init__(self) -> None:
        validate_in_range(self.rel_tol, "rel_tol", min_value=0.0, max_value=1.0)


# =============================================================================
# POOL CONFIG
# =============================================================================


class PoolConfig(BaseModel):
    """
    Параметры создания пула.

    Начальные количества строго положительные: пустой пул не имеет цены,
    и любое деление на его баланс не определено.
    """

    pair_name: str = Field(..., min_length=3, description="Имя пары '<assetA>-<assetB>'")
    amount_a: float = Field(..., gt=0, allow_inf_nan=False, description="Начальный баланс актива A")
    amount_b: float = Field(..., gt=0, allow_inf_nan=False, description="Начальный баланс актива B")
    fee_rate: float = Field(
        default=DEFAULT_FEE_RATE, ge=0, lt=1, allow_inf_nan=False, description="Доля комиссии свопа [0, 1)"
    )
    bootstrap_provider_id: str = Field(
        ..., min_length=1, description="Провайдер начальной ликвидности"
    )
    tolerance: ToleranceConfig = Field(default_factory=ToleranceConfig)

    model_config = {"frozen": True}

    @field_validator("pair_name")
    @classmethod
    def validate_pair_name(cls, v: str) -> str:
        """Имя пары делится ровно на два разных непустых актива."""
        split_pair_name(v)
        return v

    @property
    def asset_names(self) -> tuple[str, str]:
        """(asset_a, asset_b)"""
        return split_pair_name(self.pair_name)
