"""
Модуль: Модели базы данных для EasySwap Reward Pool
Описание: SQLAlchemy модель журнала событий леджера и менеджер подключения
Зависимости: sqlalchemy
Автор: EasySwap Reward Pool Team
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, Column, Integer, String, DateTime, Text, Index
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from config.settings import get_settings
from utils.logger import get_logger

logger = get_logger("RewardPool_Database")

Base = declarative_base()


class LedgerEventRecord(Base):
    """Зафиксированное событие леджера"""
    __tablename__ = 'ledger_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(32), nullable=False, index=True)
    pool_id = Column(Integer, nullable=True, index=True)
    user = Column(String(42), nullable=True, index=True)
    currency = Column(String(8), nullable=True)
    # uint256 не помещается в INTEGER, суммы храним десятичной строкой
    amount = Column(String(78), nullable=True)
    direction = Column(String(32), nullable=True)
    payload = Column(Text, nullable=False)
    recorded_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_ledger_events_pool_kind', 'pool_id', 'kind'),
        Index('idx_ledger_events_user_kind', 'user', 'kind'),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "pool_id": self.pool_id,
            "user": self.user,
            "currency": self.currency,
            "amount": self.amount,
            "direction": self.direction,
            "payload": self.payload,
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
        }


class DatabaseManager:
    """Менеджер базы данных журнала"""

    def __init__(self, database_url: Optional[str] = None):
        """
        Args:
            database_url: URL базы данных (если не указан, берется из настроек)
        """
        settings = get_settings()
        self.database_url = database_url or settings.database_url

        engine_options = {"echo": settings.debug_sql}
        if self.database_url.startswith("sqlite") and ":memory:" in self.database_url:
            # Одна общая in-memory база на все сессии
            engine_options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
        else:
            engine_options.update(pool_pre_ping=True)

        self.engine = create_engine(self.database_url, **engine_options)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        logger.info(f"🗄️ Подключение к БД: {self._mask_db_url()}")

    def _mask_db_url(self) -> str:
        """Скрыть пароль в URL для логов"""
        if "@" not in self.database_url:
            return self.database_url
        scheme, rest = self.database_url.split("://", 1)
        return f"{scheme}://***@{rest.split('@', 1)[1]}"

    def create_tables(self) -> None:
        """Создание всех таблиц"""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("✅ Таблицы БД созданы успешно")
        except Exception as e:
            logger.error(f"❌ Ошибка создания таблиц: {e}")
            raise

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Получение сессии БД с контекстным менеджером.

        Yields:
            Session: Сессия SQLAlchemy
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("🔌 Соединение с БД закрыто")
