"""
EasySwap Reward Pool - Accrual Engine
Аккумуляторы награды на единицу стейка (accPerShare) для каждого пула.

Механика:
1. За блоки (last_accrual_time, now] берется эмиссия расписания
2. Доля пула: emission * weight / total_weight
3. acc_per_share += reward * SCALE / staked

Если в пуле нет стейка, время синхронизации сдвигается, а награда за
этот промежуток не начисляется никому.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from typing import Any, Tuple

from config.constants import SCALE
from core.fixed_point import checked_add, mul_div
from core.pool_registry import Pool, PoolRegistry
from core.stage_schedule import StageSchedule
from core.user_ledger import UserLedger, UserPosition
from utils.logger import get_logger

logger = get_logger(__name__)


class AccrualEngine:
    """Синхронизация аккумуляторов пулов с часами"""

    def __init__(self, schedule: StageSchedule, registry: PoolRegistry, clock: Any, holder: str):
        """
        Args:
            schedule: Расписание эмиссии
            registry: Реестр пулов
            clock: Источник логического времени (now())
            holder: Адрес леджера, на котором лежит стейк
        """
        self.schedule = schedule
        self.registry = registry
        self.clock = clock
        self.holder = holder

    def staked(self, pool: Pool) -> int:
        return pool.stake_asset.balance_of(self.holder)

    def simulate(self, pool: Pool, now: int) -> Tuple[int, int]:
        """
        Значения аккумуляторов, которые sync записал бы в момент now.

        Returns:
            Tuple[int, int]: (acc_per_share_a, acc_per_share_b)
        """
        if now <= pool.last_accrual_time:
            return pool.acc_per_share_a, pool.acc_per_share_b

        staked = self.staked(pool)
        if staked == 0:
            return pool.acc_per_share_a, pool.acc_per_share_b

        total_a, total_b = self.schedule.total_rewards(pool.last_accrual_time + 1, now)
        total_weight = self.registry.total_weight()
        reward_a = mul_div(total_a, pool.weight, total_weight)
        reward_b = mul_div(total_b, pool.weight, total_weight)

        return (
            checked_add(pool.acc_per_share_a, mul_div(reward_a, SCALE, staked)),
            checked_add(pool.acc_per_share_b, mul_div(reward_b, SCALE, staked)),
        )

    def sync(self, pool_id: int) -> Pool:
        """Довести аккумуляторы пула до текущего времени"""
        pool = self.registry.get(pool_id)
        now = self.clock.now()
        if now <= pool.last_accrual_time:
            return pool

        if self.staked(pool) == 0:
            logger.debug(f"⏭️ Пул #{pool_id}: нет стейка, блоки {pool.last_accrual_time + 1}..{now} не начислены")

        acc_a, acc_b = self.simulate(pool, now)
        pool.acc_per_share_a = acc_a
        pool.acc_per_share_b = acc_b
        pool.last_accrual_time = now
        return pool

    def sync_all(self) -> None:
        for pool_id in self.registry.pool_ids():
            self.sync(pool_id)

    def pending_reward(self, pool_id: int, position: UserPosition) -> Tuple[int, int]:
        """Невыплаченная награда позиции на текущий момент без изменения состояния"""
        pool = self.registry.get(pool_id)
        acc_a, acc_b = self.simulate(pool, self.clock.now())
        return UserLedger.pending(position, acc_a, acc_b)
