"""
Скрипт: Инициализация журнала EasySwap Reward Pool
Описание: Создание таблиц журнала событий леджера
Автор: EasySwap Reward Pool Team
"""

import argparse
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import text

from db.models import DatabaseManager
from utils.logger import get_logger

logger = get_logger("DatabaseInit")


def init_database(database_url=None) -> bool:
    """Инициализация базы данных журнала"""
    try:
        logger.info("🗄️ Инициализация базы данных...")

        database = DatabaseManager(database_url)

        # Проверяем подключение
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.info("✅ Подключение к базе данных установлено")

        database.create_tables()
        database.close()

        logger.info("✅ База данных инициализирована")
        return True

    except Exception as e:
        logger.error(f"❌ Ошибка инициализации БД: {e}")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Инициализация журнала EasySwap Reward Pool")
    parser.add_argument("--database-url", help="URL базы данных (по умолчанию из настроек)")
    args = parser.parse_args()

    success = init_database(args.database_url)
    sys.exit(0 if success else 1)
