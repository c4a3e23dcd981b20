"""
PoolSnapshot — Модель снапшота состояния пула

Immutable Pydantic модель, представляющая снапшот пула ликвидности.
Полная совместимость с JSON Schema (src/core/contracts/schema/pool_snapshot.json)
через model_dump(mode="json").
"""

from pydantic import BaseModel, Field


# =============================================================================
# NESTED MODELS
# =============================================================================


class AssetSnapshot(BaseModel):
    """Баланс одного актива пула."""

    name: str = Field(..., min_length=1, description="Идентификатор актива")
    amount: float = Field(..., ge=0, description="Баланс актива в пуле")

    model_config = {"frozen": True}


class ProviderSnapshot(BaseModel):
    """Вклад провайдера ликвидности."""

    provider_id: str = Field(..., min_length=1, description="Идентификатор провайдера")
    stake_a: float = Field(..., ge=0, description="Вклад по активу A (включая начисленные комиссии)")
    stake_b: float = Field(..., ge=0, description="Вклад по активу B (включая начисленные комиссии)")

    model_config = {"frozen": True}


# =============================================================================
# POOL SNAPSHOT
# =============================================================================


class PoolSnapshot(BaseModel):
    """
    Снапшот пула ликвидности.

    Immutable (frozen=True): снапшот не связан с пулом, последующие
    операции пула его не изменяют.
    """

    pair_name: str = Field(..., min_length=3, description="Имя пары, например 'eth-mtv'")
    fee_rate: float = Field(..., ge=0, lt=1, description="Доля комиссии свопа")
    invariant_product: float = Field(..., ge=0, description="Инвариант k")

    asset_a: AssetSnapshot
    asset_b: AssetSnapshot

    providers: list[ProviderSnapshot] = Field(default_factory=list)
    collected_fees: dict[str, float] = Field(
        default_factory=dict, description="Суммарные распределённые комиссии по активам"
    )

    model_config = {"frozen": True}

    @property
    def spot_price_a(self) -> float:
        """Цена актива A в единицах актива B."""
        return self.asset_b.amount / self.asset_a.amount

    def provider(self, provider_id: str) -> ProviderSnapshot | None:
        """Снапшот провайдера по id (None если не найден)."""
        for p in self.providers:
            if p.provider_id == provider_id:
                return p
        return None
