"""
EasySwap Reward Pool - Events
События леджера и шина событий с публикацией при фиксации транзакции.

Внутри транзакции события только буферизуются. Подписчики получают их
после успешной фиксации; при откате буфер отбрасывается. Ошибка подписчика
пишется в лог и не мешает доставке остальных событий и подписчиков.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from collections import deque
from dataclasses import dataclass, asdict
from typing import Callable, ClassVar, Deque, List, Optional

from config.settings import settings
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerEvent:
    """Базовое событие леджера"""
    kind: ClassVar[str] = "event"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind
        return data


# ----------------------------------------------------------------------
# События депозиторов
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class StakeChanged(LedgerEvent):
    kind: ClassVar[str] = "stake_changed"
    pool_id: int
    user: str
    amount: int
    direction: str


@dataclass(frozen=True)
class RewardPaid(LedgerEvent):
    kind: ClassVar[str] = "reward_paid"
    pool_id: int
    user: str
    currency: str
    amount: int


@dataclass(frozen=True)
class FeePaid(LedgerEvent):
    kind: ClassVar[str] = "fee_paid"
    pool_id: int
    currency: str
    amount: int


# ----------------------------------------------------------------------
# Административные события
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class StageAdded(LedgerEvent):
    kind: ClassVar[str] = "stage_added"
    index: int
    start: int
    end: int
    rate_a: int
    rate_b: int


@dataclass(frozen=True)
class PoolAdded(LedgerEvent):
    kind: ClassVar[str] = "pool_added"
    pool_id: int
    stake_asset: str
    weight: int
    last_accrual_time: int


@dataclass(frozen=True)
class PoolWeightSet(LedgerEvent):
    kind: ClassVar[str] = "pool_weight_set"
    pool_id: int
    old_weight: int
    new_weight: int


@dataclass(frozen=True)
class DevFeeChanged(LedgerEvent):
    kind: ClassVar[str] = "dev_fee_changed"
    old_ppm: int
    new_ppm: int


@dataclass(frozen=True)
class DevAddressChanged(LedgerEvent):
    kind: ClassVar[str] = "dev_address_changed"
    old_address: str
    new_address: str


@dataclass(frozen=True)
class MigratorChanged(LedgerEvent):
    kind: ClassVar[str] = "migrator_changed"
    old_migrator: Optional[str]
    new_migrator: Optional[str]


@dataclass(frozen=True)
class PoolMigrated(LedgerEvent):
    kind: ClassVar[str] = "pool_migrated"
    pool_id: int
    old_asset: str
    new_asset: str
    amount: int


@dataclass(frozen=True)
class OwnershipTransferred(LedgerEvent):
    kind: ClassVar[str] = "ownership_transferred"
    old_owner: str
    new_owner: str


Subscriber = Callable[[LedgerEvent], None]


class EventBus:
    """
    Шина событий леджера.

    Транзакции могут вкладываться: буфер публикуется только при фиксации
    самой внешней транзакции. В published хранятся последние
    history_size опубликованных событий.
    """

    def __init__(self, history_size: Optional[int] = None):
        if history_size is None:
            history_size = settings.event_history_size
        self._subscribers: List[Subscriber] = []
        self._buffer: List[LedgerEvent] = []
        self._depth = 0
        self.published: Deque[LedgerEvent] = deque(maxlen=history_size)

    def subscribe(self, callback: Subscriber) -> None:
        """Подписаться на зафиксированные события"""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def begin(self) -> None:
        self._depth += 1

    def emit(self, event: LedgerEvent) -> None:
        if self.in_transaction:
            self._buffer.append(event)
        else:
            self._publish([event])

    def commit(self) -> None:
        if not self.in_transaction:
            raise RuntimeError("commit() called outside of a transaction")
        self._depth -= 1
        if self._depth == 0:
            events, self._buffer = self._buffer, []
            self._publish(events)

    def discard(self) -> None:
        if not self.in_transaction:
            raise RuntimeError("discard() called outside of a transaction")
        self._depth -= 1
        if self._depth == 0:
            if self._buffer:
                logger.debug(f"🗑️ Отброшено событий: {len(self._buffer)}")
            self._buffer = []

    def _publish(self, events: List[LedgerEvent]) -> None:
        for event in events:
            self.published.append(event)
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception as error:
                    logger.error(f"❌ Подписчик {getattr(callback, '__qualname__', callback)} не обработал {event.kind}: {error}", exc_info=True)

    def events_of(self, kind: str) -> List[LedgerEvent]:
        """Опубликованные события заданного типа"""
        return [event for event in self.published if event.kind == kind]
