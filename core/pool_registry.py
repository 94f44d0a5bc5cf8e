"""
EasySwap Reward Pool - Pool Registry
Реестр пулов стейкинга и их весов.

Пулы никогда не удаляются, их можно только обнулить по весу. Суммарный
вес непустого реестра всегда больше нуля.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from dataclasses import dataclass, replace
from typing import Any, List, Tuple

from core.errors import DuplicatePoolError, UnknownPoolError, ZeroWeightError
from core.fixed_point import checked_add, checked_sub
from utils.logger import get_logger
from utils.validators import validate_amount, validate_block_number

logger = get_logger(__name__)


@dataclass
class Pool:
    """Пул стейкинга"""
    stake_asset: Any
    weight: int
    last_accrual_time: int
    acc_per_share_a: int = 0   # ESM * SCALE на единицу стейка
    acc_per_share_b: int = 0   # ESG * SCALE на единицу стейка

    def copy(self) -> "Pool":
        # Поверхностная копия: ссылка на актив разделяется
        return replace(self)


class PoolRegistry:
    """Хранилище пулов и суммарного веса"""

    def __init__(self):
        self._pools: List[Pool] = []
        self._total_weight = 0

    def __len__(self) -> int:
        return len(self._pools)

    def pool_ids(self) -> range:
        return range(len(self._pools))

    def pool_count(self) -> int:
        return len(self._pools)

    def total_weight(self) -> int:
        return self._total_weight

    def get(self, pool_id: int) -> Pool:
        """
        Живая запись пула (для изменения внутри леджера).

        Raises:
            UnknownPoolError: пула с таким id нет
        """
        if isinstance(pool_id, bool) or not isinstance(pool_id, int) or not 0 <= pool_id < len(self._pools):
            raise UnknownPoolError(f"Pool {pool_id} does not exist (total {len(self._pools)})")
        return self._pools[pool_id]

    def pool_info(self, pool_id: int) -> Pool:
        """Копия записи пула для внешнего чтения"""
        return self.get(pool_id).copy()

    def find_by_asset(self, stake_asset: Any) -> int:
        for pool_id, pool in enumerate(self._pools):
            if pool.stake_asset is stake_asset:
                return pool_id
        return -1

    def add(self, stake_asset: Any, weight: int, last_accrual_time: int) -> int:
        """
        Зарегистрировать новый пул.

        Args:
            stake_asset: Актив стейкинга
            weight: Вес пула (может быть 0, если суммарный вес останется > 0)
            last_accrual_time: Момент, с которого пул начинает начислять

        Returns:
            int: id нового пула

        Raises:
            DuplicatePoolError: актив уже зарегистрирован
            ZeroWeightError: суммарный вес стал бы нулевым
        """
        weight = validate_amount(weight)
        last_accrual_time = validate_block_number(last_accrual_time)

        existing = self.find_by_asset(stake_asset)
        if existing >= 0:
            raise DuplicatePoolError(f"Stake asset already registered in pool {existing}")

        new_total = checked_add(self._total_weight, weight)
        if new_total == 0:
            raise ZeroWeightError("Total weight of pools would become zero")

        self._pools.append(Pool(stake_asset=stake_asset, weight=weight, last_accrual_time=last_accrual_time))
        self._total_weight = new_total

        pool_id = len(self._pools) - 1
        logger.info(f"🏊 Пул #{pool_id} добавлен: вес={weight}, суммарный вес={new_total}")
        return pool_id

    def set_weight(self, pool_id: int, weight: int) -> int:
        """
        Изменить вес пула.

        Returns:
            int: Предыдущий вес

        Raises:
            UnknownPoolError: пула с таким id нет
            ZeroWeightError: суммарный вес стал бы нулевым
        """
        pool = self.get(pool_id)
        weight = validate_amount(weight)

        new_total = checked_add(checked_sub(self._total_weight, pool.weight), weight)
        if new_total == 0:
            raise ZeroWeightError("Total weight of pools would become zero")

        old_weight = pool.weight
        pool.weight = weight
        self._total_weight = new_total

        logger.info(f"⚖️ Пул #{pool_id}: вес {old_weight} -> {weight}, суммарный вес={new_total}")
        return old_weight

    def replace_asset(self, pool_id: int, stake_asset: Any) -> Any:
        """Заменить актив стейкинга (миграция). Возвращает старый актив."""
        pool = self.get(pool_id)
        old_asset = pool.stake_asset
        pool.stake_asset = stake_asset
        return old_asset

    # ------------------------------------------------------------------
    # Снимок состояния для отката транзакций
    # ------------------------------------------------------------------

    def snapshot(self) -> Tuple[List[Pool], int]:
        return [pool.copy() for pool in self._pools], self._total_weight

    def restore(self, snapshot: Tuple[List[Pool], int]) -> None:
        pools, total_weight = snapshot
        self._pools = [pool.copy() for pool in pools]
        self._total_weight = total_weight
