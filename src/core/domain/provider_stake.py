"""
ProviderStake — учёт вклада провайдера ликвидности

Stake используется ИСКЛЮЧИТЕЛЬНО как вес при распределении комиссий,
а не как право на вывод средств (операции вывода нет).

Инвариант: stake_a.name и stake_b.name совпадают с именами активов пула.
"""

from pydantic import BaseModel, Field, model_validator

from .balance import Balance
from .errors import UnknownAsset


class ProviderStake(BaseModel):
    """
    Вклад одного провайдера по обоим активам пула.

    Создаётся лениво при первом депозите провайдера (включая bootstrap),
    обновляется при каждом депозите и каждом распределении комиссии,
    никогда не удаляется.
    """

    provider_id: str = Field(..., min_length=1, frozen=True, description="Идентификатор провайдера")
    stake_a: Balance = Field(..., description="Вклад по активу A")
    stake_b: Balance = Field(..., description="Вклад по активу B")

    @model_validator(mode="after")
    def validate_distinct_assets(self) -> "ProviderStake":
        """Stake ведётся по двум разным активам."""
        if self.stake_a.name == self.stake_b.name:
            raise ValueError(
                f"stake_a and stake_b must track different assets, got '{self.stake_a.name}' twice"
            )
        return self

    @classmethod
    def empty(cls, provider_id: str, asset_a: str, asset_b: str) -> "ProviderStake":
        """Новый провайдер с нулевым вкладом по обоим активам."""
        return cls(
            provider_id=provider_id,
            stake_a=Balance(name=asset_a),
            stake_b=Balance(name=asset_b),
        )

    def get_balance(self, asset_name: str) -> Balance:
        """
        Stake-баланс по имени актива.

        Raises:
            UnknownAsset: Если asset_name не совпадает ни с одним активом
        """
        if asset_name == self.stake_a.name:
            return self.stake_a
        if asset_name == self.stake_b.name:
            return self.stake_b
        raise UnknownAsset(asset_name, (self.stake_a.name, self.stake_b.name))

    def amount_of(self, asset_name: str) -> float:
        """Вклад провайдера в указанном активе."""
        return self.get_balance(asset_name).amount
