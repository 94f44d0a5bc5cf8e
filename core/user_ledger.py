"""
EasySwap Reward Pool - User Ledger
Позиции депозиторов: стейк и долг по наградам в каждом пуле.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from dataclasses import dataclass, replace
from typing import Dict, Tuple

from core.fixed_point import checked_add, checked_sub, to_share
from core.pool_registry import Pool

PositionKey = Tuple[int, str]


@dataclass
class UserPosition:
    """Позиция депозитора в пуле"""
    amount: int = 0
    reward_debt_a: int = 0
    reward_debt_b: int = 0

    def copy(self) -> "UserPosition":
        return replace(self)


class UserLedger:
    """Учет позиций по ключу (pool_id, адрес депозитора)"""

    def __init__(self):
        self._positions: Dict[PositionKey, UserPosition] = {}

    def get(self, pool_id: int, user: str) -> UserPosition:
        """Позиция без создания записи (пустая, если депозитов не было)"""
        return self._positions.get((pool_id, user), UserPosition())

    def position(self, pool_id: int, user: str) -> UserPosition:
        """Живая позиция; создается при первом обращении"""
        key = (pool_id, user)
        if key not in self._positions:
            self._positions[key] = UserPosition()
        return self._positions[key]

    def has_position(self, pool_id: int, user: str) -> bool:
        return (pool_id, user) in self._positions

    def positions_in_pool(self, pool_id: int) -> Dict[str, UserPosition]:
        return {user: position.copy() for (pid, user), position in self._positions.items() if pid == pool_id}

    @staticmethod
    def pending(position: UserPosition, acc_per_share_a: int, acc_per_share_b: int) -> Tuple[int, int]:
        """amount * acc / SCALE - reward_debt по каждой валюте"""
        return (
            checked_sub(to_share(position.amount, acc_per_share_a), position.reward_debt_a),
            checked_sub(to_share(position.amount, acc_per_share_b), position.reward_debt_b),
        )

    @staticmethod
    def reset_debt(position: UserPosition, pool: Pool) -> None:
        position.reward_debt_a = to_share(position.amount, pool.acc_per_share_a)
        position.reward_debt_b = to_share(position.amount, pool.acc_per_share_b)

    def credit(self, position: UserPosition, amount: int, pool: Pool) -> None:
        position.amount = checked_add(position.amount, amount)
        self.reset_debt(position, pool)

    def debit(self, position: UserPosition, amount: int, pool: Pool) -> None:
        position.amount = checked_sub(position.amount, amount)
        self.reset_debt(position, pool)

    @staticmethod
    def clear(position: UserPosition) -> None:
        position.amount = 0
        position.reward_debt_a = 0
        position.reward_debt_b = 0

    # ------------------------------------------------------------------
    # Снимок состояния для отката транзакций
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[PositionKey, UserPosition]:
        return {key: position.copy() for key, position in self._positions.items()}

    def restore(self, snapshot: Dict[PositionKey, UserPosition]) -> None:
        self._positions = {key: position.copy() for key, position in snapshot.items()}
