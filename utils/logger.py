"""
Модуль: Система логирования для EasySwap Reward Pool
Описание: Настройка логирования с ротацией файлов и форматированием
Зависимости: logging, pathlib
Автор: EasySwap Reward Pool Team
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from config.settings import settings


class ColoredFormatter(logging.Formatter):
    """Цветной форматтер для консольного вывода"""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m'  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        original = record.levelname
        log_color = self.COLORS.get(original, self.RESET)
        record.levelname = f"{log_color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Файловый хендлер не должен получить ANSI коды
            record.levelname = original


class RewardPoolLogger:
    """Централизованная система логирования для EasySwap Reward Pool"""

    def __init__(self, name: str = "RewardPool", log_file: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, settings.log_level))

        # Предотвращаем дублирование хендлеров
        if self.logger.handlers:
            return

        # Создаем директорию для логов
        log_file = log_file or settings.log_file
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Форматтеры
        file_formatter = logging.Formatter(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = ColoredFormatter(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        # Файловый хендлер с ротацией
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logging.DEBUG)

        # Консольный хендлер
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(getattr(logging, settings.log_level))

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)
        self.logger.propagate = False

    def get_logger(self) -> logging.Logger:
        """Получить настроенный логгер"""
        return self.logger

    def log_reward_payment(self, pool_id: int, recipient: str, currency: str, amount: int):
        """Логирование выплат наград"""
        self.logger.info(f"💰 REWARD: pool={pool_id} | {recipient} | Amount: {amount} {currency}")

    def log_fee_payment(self, pool_id: int, dev_address: str, currency: str, amount: int):
        """Логирование комиссии разработчика"""
        self.logger.info(f"🧾 FEE: pool={pool_id} | {dev_address} | Amount: {amount} {currency}")

    def log_stake_change(self, pool_id: int, user: str, amount: int, direction: str):
        """Логирование изменения стейка"""
        self.logger.info(f"📥 STAKE {direction.upper()}: pool={pool_id} | {user} | Amount: {amount}")

    def log_admin_change(self, operation: str, details: dict):
        """Логирование административных операций"""
        self.logger.warning(f"🛡️ ADMIN {operation}: {details}")

    def log_error_with_context(self, error: Exception, context: dict):
        """Логирование ошибок с контекстом"""
        self.logger.warning(f"❌ REJECTED: {type(error).__name__}: {error}")
        self.logger.debug(f"📍 Context: {context}")


# Глобальный логгер
main_logger = RewardPoolLogger("RewardPool_Main")


def get_logger(name: str) -> logging.Logger:
    """Получить логгер для конкретного модуля"""
    module_logger = RewardPoolLogger(f"RewardPool_{name}")
    return module_logger.get_logger()


def get_pool_logger(name: str) -> RewardPoolLogger:
    """Получить логгер со специализированными методами леджера"""
    return RewardPoolLogger(f"RewardPool_{name}")


def setup_logging_for_external_libs():
    """Настройка логирования для внешних библиотек"""
    # Устанавливаем уровень WARNING для шумных библиотек
    noisy_loggers = ['urllib3', 'web3', 'sqlalchemy.engine']

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


# Инициализация при импорте
setup_logging_for_external_libs()
