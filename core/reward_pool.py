"""
EasySwap Reward Pool - Reward Pool
Леджер наград ESM/ESG: административные операции и операции депозиторов.

Все вызовы выполняются под одной блокировкой. Изменяющие вызовы идут в
транзакции: при любом исключении внутреннее состояние восстанавливается
из снимка, а буфер событий отбрасывается.

Порядок внешних вызовов: сначала перевод стейка (может не пройти и
откатывает операцию), затем выплаты наград. Отказ актива награды не
откатывает операцию: он пишется в лог, сумма остается на балансе леджера.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Optional, Tuple

from config.constants import RewardCurrency, StakeDirection
from config.settings import settings
from core.accrual_engine import AccrualEngine
from core.errors import BadMigrationError, InsufficientStakeError, NoMigratorError, TransferFailedError
from core.events import (
    DevAddressChanged,
    DevFeeChanged,
    EventBus,
    MigratorChanged,
    OwnershipTransferred,
    PoolAdded,
    PoolMigrated,
    PoolWeightSet,
    StageAdded,
    StakeChanged,
)
from core.fee_splitter import FeeSplitter
from core.global_state import GlobalState
from core.pool_registry import Pool, PoolRegistry
from core.stage_schedule import RewardStage, StageSchedule
from core.user_ledger import UserLedger, UserPosition
from utils.logger import get_logger, get_pool_logger
from utils.validators import validate_address, validate_amount, validate_block_number

logger = get_logger(__name__)
pool_logger = get_pool_logger(__name__)


def _address_of(obj: Any) -> Optional[str]:
    if obj is None:
        return None
    return getattr(obj, "address", repr(obj))


class RewardPool:
    """
    Двухвалютный леджер стейкинга.

    Пример:
        ledger = RewardPool(owner, esm, esg, clock, address=ledger_address)
        ledger.add_stage(owner, 100, 199, 12, 6)
        pool_id = ledger.add(owner, 100, lp_token)
        ledger.deposit(user, pool_id, 100)
    """

    def __init__(self,
                 owner: str,
                 esm_asset: Any,
                 esg_asset: Any,
                 clock: Any,
                 address: str,
                 dev_address: Optional[str] = None,
                 dev_fee_ppm: Optional[int] = None,
                 events: Optional[EventBus] = None):
        """
        Args:
            owner: Адрес владельца
            esm_asset: Актив награды ESM (валюта A)
            esg_asset: Актив награды ESG (валюта B)
            clock: Источник логического времени
            address: Адрес самого леджера (держатель стейка и наград)
            dev_address: Получатель комиссии (по умолчанию владелец)
            dev_fee_ppm: Комиссия в ppm (по умолчанию из настроек)
            events: Шина событий (создается новая, если не передана)
        """
        owner = validate_address(owner)
        fee = settings.default_dev_fee_ppm if dev_fee_ppm is None else dev_fee_ppm

        self.address = validate_address(address)
        self.clock = clock
        self.events = events or EventBus()

        self.state = GlobalState(
            owner=owner,
            dev_address=validate_address(dev_address) if dev_address else owner,
            dev_fee_ppm=GlobalState.check_fee_rate(fee),
        )
        self.schedule = StageSchedule()
        self.registry = PoolRegistry()
        self.ledger = UserLedger()
        self.engine = AccrualEngine(self.schedule, self.registry, clock, self.address)
        self.splitter = FeeSplitter(
            self.state, self.events, self.address,
            {RewardCurrency.ESM: esm_asset, RewardCurrency.ESG: esg_asset},
        )

        self._lock = threading.RLock()

        logger.info(f"🚀 RewardPool инициализирован: леджер={self.address}, владелец={owner}, комиссия={fee} ppm")

    # ------------------------------------------------------------------
    # Транзакции
    # ------------------------------------------------------------------

    def _snapshot(self) -> tuple:
        return (
            self.schedule.snapshot(),
            self.registry.snapshot(),
            self.ledger.snapshot(),
            self.state.snapshot(),
        )

    def _restore(self, snapshot: tuple) -> None:
        stages, pools, positions, state = snapshot
        self.schedule.restore(stages)
        self.registry.restore(pools)
        self.ledger.restore(positions)
        self.state.restore(state)

    @contextmanager
    def _transaction(self, operation: str, **context):
        with self._lock:
            snapshot = self._snapshot()
            self.events.begin()
            try:
                yield
            except Exception as error:
                self._restore(snapshot)
                self.events.discard()
                pool_logger.log_error_with_context(error, {"operation": operation, **context})
                raise
            self.events.commit()

    def _require_owner(self, caller: str) -> str:
        caller = validate_address(caller)
        self.state.require_owner(caller)
        return caller

    # ------------------------------------------------------------------
    # Административные операции
    # ------------------------------------------------------------------

    def add_stage(self, caller: str, start: int, end: int, rate_a: int, rate_b: int) -> RewardStage:
        """Добавить стадию эмиссии в конец расписания"""
        with self._transaction("add_stage", caller=caller, start=start, end=end):
            self._require_owner(caller)
            self.engine.sync_all()
            stage = self.schedule.add_stage(start, end, rate_a, rate_b)
            self.events.emit(StageAdded(
                index=len(self.schedule) - 1,
                start=stage.start, end=stage.end,
                rate_a=stage.rate_a, rate_b=stage.rate_b,
            ))
            return stage

    def add(self, caller: str, weight: int, stake_asset: Any, with_global_sync: bool = False) -> int:
        """
        Зарегистрировать пул стейкинга.

        Пул начинает начислять с текущего момента, но не раньше начала
        первой стадии расписания.

        Args:
            caller: Вызывающий (должен быть владельцем)
            weight: Вес пула
            stake_asset: Актив стейкинга
            with_global_sync: Синхронизировать все пулы перед изменением веса

        Returns:
            int: id пула
        """
        with self._transaction("add", caller=caller, weight=weight):
            self._require_owner(caller)
            if with_global_sync:
                self.engine.sync_all()

            now = validate_block_number(self.clock.now())
            first_start = self.schedule.first_start
            start = first_start if first_start is not None and first_start > now else now

            pool_id = self.registry.add(stake_asset, weight, start)
            self.events.emit(PoolAdded(
                pool_id=pool_id,
                stake_asset=_address_of(stake_asset),
                weight=self.registry.get(pool_id).weight,
                last_accrual_time=start,
            ))
            pool_logger.log_admin_change("add", {"pool_id": pool_id, "weight": weight, "start": start})
            return pool_id

    def set(self, caller: str, pool_id: int, weight: int, with_global_sync: bool = False) -> None:
        """Изменить вес пула. Начисленное до изменения не пересчитывается."""
        with self._transaction("set", caller=caller, pool_id=pool_id, weight=weight):
            self._require_owner(caller)
            self.registry.get(pool_id)
            if with_global_sync:
                self.engine.sync_all()
            else:
                self.engine.sync(pool_id)

            old_weight = self.registry.set_weight(pool_id, weight)
            self.events.emit(PoolWeightSet(
                pool_id=pool_id, old_weight=old_weight, new_weight=self.registry.get(pool_id).weight,
            ))
            pool_logger.log_admin_change("set", {"pool_id": pool_id, "old": old_weight, "new": weight})

    def set_dev_fee(self, caller: str, fee_ppm: int) -> None:
        with self._transaction("set_dev_fee", caller=caller, fee_ppm=fee_ppm):
            self._require_owner(caller)
            fee_ppm = GlobalState.check_fee_rate(fee_ppm)
            old_fee = self.state.dev_fee_ppm
            self.state.dev_fee_ppm = fee_ppm
            self.events.emit(DevFeeChanged(old_ppm=old_fee, new_ppm=fee_ppm))
            pool_logger.log_admin_change("set_dev_fee", {"old": old_fee, "new": fee_ppm})

    def set_dev_address(self, caller: str, dev_address: str) -> None:
        with self._transaction("set_dev_address", caller=caller, dev_address=dev_address):
            self._require_owner(caller)
            dev_address = validate_address(dev_address)
            old_address = self.state.dev_address
            self.state.dev_address = dev_address
            self.events.emit(DevAddressChanged(old_address=old_address, new_address=dev_address))
            pool_logger.log_admin_change("set_dev_address", {"old": old_address, "new": dev_address})

    def set_migrator(self, caller: str, migrator: Any) -> None:
        """Установить мигратора (None - сбросить)"""
        with self._transaction("set_migrator", caller=caller):
            self._require_owner(caller)
            old_migrator = self.state.migrator
            self.state.migrator = migrator
            self.events.emit(MigratorChanged(
                old_migrator=_address_of(old_migrator),
                new_migrator=_address_of(migrator),
            ))
            pool_logger.log_admin_change("set_migrator", {"migrator": _address_of(migrator)})

    def migrate(self, caller: str, pool_id: int) -> Any:
        """
        Перенести стейк пула на новый актив через мигратора.

        Мигратор получает allowance на весь баланс старого актива и должен
        вернуть актив, на котором у леджера ровно такой же баланс.
        Учет позиций и аккумуляторов не меняется.

        Returns:
            Новый актив стейкинга

        Raises:
            NoMigratorError: мигратор не установлен
            BadMigrationError: баланс нового актива не совпадает
        """
        with self._transaction("migrate", caller=caller, pool_id=pool_id):
            self._require_owner(caller)
            migrator = self.state.migrator
            if migrator is None:
                raise NoMigratorError("migrate: no migrator")

            pool = self.registry.get(pool_id)
            old_asset = pool.stake_asset
            balance = old_asset.balance_of(self.address)
            old_asset.approve(self.address, _address_of(migrator), balance)

            new_asset = migrator.migrate(old_asset)
            new_balance = new_asset.balance_of(self.address)
            if new_balance != balance:
                raise BadMigrationError(f"migrate: bad (expected balance {balance}, got {new_balance})")

            self.registry.replace_asset(pool_id, new_asset)
            self.events.emit(PoolMigrated(
                pool_id=pool_id,
                old_asset=_address_of(old_asset),
                new_asset=_address_of(new_asset),
                amount=balance,
            ))
            pool_logger.log_admin_change("migrate", {"pool_id": pool_id, "amount": balance})
            return new_asset

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._transaction("transfer_ownership", caller=caller, new_owner=new_owner):
            old_owner = self._require_owner(caller)
            new_owner = validate_address(new_owner)
            self.state.owner = new_owner
            self.events.emit(OwnershipTransferred(old_owner=old_owner, new_owner=new_owner))
            pool_logger.log_admin_change("transfer_ownership", {"old": old_owner, "new": new_owner})

    # ------------------------------------------------------------------
    # Операции депозиторов
    # ------------------------------------------------------------------

    def _pull_stake(self, pool: Pool, user: str, amount: int) -> None:
        if not pool.stake_asset.transfer_from(self.address, user, self.address, amount):
            raise TransferFailedError(f"Stake transfer of {amount} from {user} failed")

    def _push_stake(self, pool: Pool, user: str, amount: int) -> None:
        if not pool.stake_asset.transfer(self.address, user, amount):
            raise TransferFailedError(f"Stake transfer of {amount} to {user} failed")

    def _stake_changed(self, pool_id: int, user: str, amount: int, direction: str) -> None:
        if amount == 0:
            return
        self.events.emit(StakeChanged(pool_id=pool_id, user=user, amount=amount, direction=direction))
        pool_logger.log_stake_change(pool_id, user, amount, direction)

    def deposit(self, caller: str, pool_id: int, amount: int) -> None:
        """
        Внести стейк в пул. amount=0 только выплачивает накопленное.

        Raises:
            UnknownPoolError: пула нет
            TransferFailedError: актив не перевел стейк
        """
        with self._transaction("deposit", caller=caller, pool_id=pool_id, amount=amount):
            user = validate_address(caller)
            amount = validate_amount(amount)
            pool = self.engine.sync(pool_id)
            position = self.ledger.position(pool_id, user)

            if amount > 0:
                self._pull_stake(pool, user, amount)

            if position.amount > 0:
                pending_a, pending_b = UserLedger.pending(position, pool.acc_per_share_a, pool.acc_per_share_b)
                self.splitter.settle(pool_id, user, pending_a, pending_b)

            self.ledger.credit(position, amount, pool)
            self._stake_changed(pool_id, user, amount, StakeDirection.DEPOSIT)

    def withdraw(self, caller: str, pool_id: int, amount: int) -> None:
        """
        Вывести стейк и получить накопленные награды.

        Raises:
            InsufficientStakeError: amount больше стейка
        """
        with self._transaction("withdraw", caller=caller, pool_id=pool_id, amount=amount):
            user = validate_address(caller)
            amount = validate_amount(amount)
            self.registry.get(pool_id)

            staked = self.ledger.get(pool_id, user).amount
            if amount > staked:
                raise InsufficientStakeError(f"withdraw: not good (requested {amount}, staked {staked})")

            pool = self.engine.sync(pool_id)
            position = self.ledger.position(pool_id, user)
            pending_a, pending_b = UserLedger.pending(position, pool.acc_per_share_a, pool.acc_per_share_b)

            if amount > 0:
                self._push_stake(pool, user, amount)

            self.splitter.settle(pool_id, user, pending_a, pending_b)
            self.ledger.debit(position, amount, pool)
            self._stake_changed(pool_id, user, amount, StakeDirection.WITHDRAW)

    def emergency_withdraw(self, caller: str, pool_id: int) -> int:
        """
        Вернуть весь стейк без выплаты наград. Накопленное сгорает.

        Returns:
            int: Возвращенная сумма стейка
        """
        with self._transaction("emergency_withdraw", caller=caller, pool_id=pool_id):
            user = validate_address(caller)
            pool = self.engine.sync(pool_id)
            position = self.ledger.position(pool_id, user)
            amount = position.amount

            if amount > 0:
                self._push_stake(pool, user, amount)

            UserLedger.clear(position)
            self._stake_changed(pool_id, user, amount, StakeDirection.EMERGENCY_WITHDRAW)
            if amount:
                logger.warning(f"🚨 Экстренный вывод: пул #{pool_id}, {user}, стейк={amount}")
            return amount

    def update_pool(self, pool_id: int) -> None:
        """Синхронизировать аккумуляторы одного пула"""
        with self._transaction("update_pool", pool_id=pool_id):
            self.engine.sync(pool_id)

    def mass_update_pools(self) -> None:
        """Синхронизировать аккумуляторы всех пулов"""
        with self._transaction("mass_update_pools"):
            self.engine.sync_all()

    # ------------------------------------------------------------------
    # Чтение состояния
    # ------------------------------------------------------------------

    def pending_reward(self, pool_id: int, user: str) -> Tuple[int, int]:
        """Невыплаченные награды (ESM, ESG) на текущий момент"""
        with self._lock:
            user = validate_address(user)
            return self.engine.pending_reward(pool_id, self.ledger.get(pool_id, user))

    def pending_esm(self, pool_id: int, user: str) -> int:
        return self.pending_reward(pool_id, user)[0]

    def pending_esg(self, pool_id: int, user: str) -> int:
        return self.pending_reward(pool_id, user)[1]

    def pool_count(self) -> int:
        with self._lock:
            return self.registry.pool_count()

    def total_weight(self) -> int:
        with self._lock:
            return self.registry.total_weight()

    def pool_info(self, pool_id: int) -> Pool:
        with self._lock:
            return self.registry.pool_info(pool_id)

    def user_info(self, pool_id: int, user: str) -> UserPosition:
        with self._lock:
            self.registry.get(pool_id)
            return self.ledger.get(pool_id, validate_address(user)).copy()

    def stage(self, index: int) -> RewardStage:
        with self._lock:
            return self.schedule.stage(index)

    def stage_count(self) -> int:
        with self._lock:
            return len(self.schedule)

    def total_rewards(self, from_block: int, to_block: int) -> Tuple[int, int]:
        with self._lock:
            return self.schedule.total_rewards(from_block, to_block)

    @property
    def owner(self) -> str:
        return self.state.owner

    @property
    def dev_address(self) -> str:
        return self.state.dev_address

    @property
    def dev_fee_ppm(self) -> int:
        return self.state.dev_fee_ppm

    @property
    def migrator(self) -> Any:
        return self.state.migrator

    def get_statistics(self) -> Dict[str, Any]:
        """Сводка состояния леджера"""
        with self._lock:
            return {
                "pool_count": self.registry.pool_count(),
                "total_weight": self.registry.total_weight(),
                "stage_count": len(self.schedule),
                "dev_fee_ppm": self.state.dev_fee_ppm,
                "owner": self.state.owner,
                "dev_address": self.state.dev_address,
                "migrator": _address_of(self.state.migrator),
            }
