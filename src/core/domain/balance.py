"""
Balance — именованное неотрицательное количество одного актива

Листовой value-объект учёта: не знает ни о пуле, ни о провайдерах.
Имя актива неизменяемо после создания, количество меняется на месте
через credit/debit.

КОНТРАКТ debit:
    Списание больше текущего количества — тихий no-op (ошибка НЕ выбрасывается).
    Вызывающий уровень (Pool) обязан сам проверить достаточность средств
    до того, как полагаться на списание.
"""

from pydantic import BaseModel, Field


class Balance(BaseModel):
    """
    Баланс одного актива.

    Инвариант: amount >= 0 во всех наблюдаемых точках (обеспечивается
    отказом debit при недостатке средств).
    """

    name: str = Field(..., min_length=1, frozen=True, description="Идентификатор актива")
    amount: float = Field(default=0.0, ge=0, description="Количество актива (неотрицательное)")

    def credit(self, amount: float) -> None:
        """
        Зачисление amount на баланс.

        Args:
            amount: Зачисляемое количество (пул передаёт только неотрицательные)
        """
        self.amount += amount

    def debit(self, amount: float) -> bool:
        """
        Списание amount с баланса.

        Args:
            amount: Списываемое количество

        Returns:
            True если списание выполнено, False если средств недостаточно
            (баланс при этом не изменяется)
        """
        if amount <= self.amount:
            self.amount -= amount
            return True
        return False
