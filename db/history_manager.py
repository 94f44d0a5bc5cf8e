"""
Модуль: Менеджер истории для EasySwap Reward Pool
Описание: Журнал зафиксированных событий леджера в БД и запросы к нему
Зависимости: sqlalchemy
Автор: EasySwap Reward Pool Team
"""

import json
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import select

from config.constants import REWARD_CURRENCIES
from config.settings import get_settings
from core.events import EventBus, FeePaid, LedgerEvent, RewardPaid
from db.models import DatabaseManager, LedgerEventRecord
from utils.logger import get_logger

logger = get_logger("HistoryManager")


class HistoryManager:
    """Журнал событий леджера"""

    def __init__(self, database: Optional[DatabaseManager] = None):
        self.database = database or DatabaseManager()
        self.database.create_tables()
        self.enabled = get_settings().history_enabled
        logger.info(f"HistoryManager инициализирован (запись {'включена' if self.enabled else 'выключена'})")

    def attach(self, events: EventBus) -> None:
        """Подписаться на зафиксированные события шины"""
        if not self.enabled:
            logger.info("📴 Журнал отключен настройкой history_enabled")
            return
        events.subscribe(self.record_event)

    def detach(self, events: EventBus) -> None:
        events.unsubscribe(self.record_event)

    def record_event(self, event: LedgerEvent) -> int:
        """
        Записать событие в журнал.

        Returns:
            int: id записи
        """
        data = event.to_dict()
        amount = data.get("amount")
        record = LedgerEventRecord(
            kind=event.kind,
            pool_id=data.get("pool_id"),
            user=data.get("user"),
            currency=data.get("currency"),
            amount=str(amount) if amount is not None else None,
            direction=data.get("direction"),
            payload=json.dumps(data, default=str),
        )
        with self.database.get_session() as session:
            session.add(record)
            session.flush()
            record_id = record.id

        logger.debug(f"📝 Событие {event.kind} записано (id={record_id})")
        return record_id

    def get_history(self,
                    pool_id: Optional[int] = None,
                    user: Optional[str] = None,
                    kind: Optional[str] = None,
                    limit: Optional[int] = None) -> List[Dict]:
        """Записи журнала с фильтрами, в порядке записи"""
        query = select(LedgerEventRecord)
        if pool_id is not None:
            query = query.where(LedgerEventRecord.pool_id == pool_id)
        if user is not None:
            query = query.where(LedgerEventRecord.user == user)
        if kind is not None:
            query = query.where(LedgerEventRecord.kind == kind)
        query = query.order_by(LedgerEventRecord.id)
        if limit is not None:
            query = query.limit(limit)

        with self.database.get_session() as session:
            return [record.to_dict() for record in session.scalars(query)]

    def get_by_pool(self, pool_id: int) -> List[Dict]:
        return self.get_history(pool_id=pool_id)

    def get_by_user(self, user: str) -> List[Dict]:
        return self.get_history(user=user)

    def get_by_kind(self, kind: str) -> List[Dict]:
        return self.get_history(kind=kind)

    def _totals(self, kind: str, pool_id: Optional[int], user: Optional[str]) -> Dict[str, int]:
        totals = defaultdict(int, {currency: 0 for currency in REWARD_CURRENCIES})
        for row in self.get_history(pool_id=pool_id, user=user, kind=kind):
            totals[row["currency"]] += int(row["amount"])
        return dict(totals)

    def total_rewards_paid(self, pool_id: Optional[int] = None, user: Optional[str] = None) -> Dict[str, int]:
        """Сумма выплаченных наград по валютам"""
        return self._totals(RewardPaid.kind, pool_id, user)

    def total_fees_paid(self, pool_id: Optional[int] = None) -> Dict[str, int]:
        """Сумма удержанных комиссий по валютам"""
        return self._totals(FeePaid.kind, pool_id, None)

    def get_statistics(self) -> Dict:
        """Количество записей по типам событий"""
        counts = defaultdict(int)
        for row in self.get_history():
            counts[row["kind"]] += 1
        return {
            "total_events": sum(counts.values()),
            "by_kind": dict(counts),
            "rewards_paid": self.total_rewards_paid(),
            "fees_paid": self.total_fees_paid(),
        }
