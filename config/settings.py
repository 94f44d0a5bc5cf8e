"""
Модуль: Настройки для EasySwap Reward Pool
Описание: Pydantic класс для настроек с валидацией и загрузкой из .env
Зависимости: pydantic, pydantic-settings
Автор: EasySwap Reward Pool Team
"""

from typing import Optional, Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Константы по умолчанию из файла констант
from .constants import SCALE_EXPONENT, MAX_DEV_FEE_PPM, BASE_DIR


class RewardPoolSettings(BaseSettings):
    """Настройки для EasySwap Reward Pool с валидацией"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REWARD_POOL_",
        case_sensitive=False,
        extra="ignore",
    )

    # Логирование
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Уровень логирования")
    log_file: str = Field(default="logs/reward_pool.log", description="Файл для логов")

    # Журнал событий (SQLAlchemy)
    database_url: str = Field(default="sqlite:///reward_pool_history.db", description="URL базы данных журнала")
    history_enabled: bool = Field(default=True, description="Записывать события леджера в журнал")
    debug_sql: bool = Field(default=False, description="Включить отладку SQL запросов")
    event_history_size: int = Field(default=1000, ge=0, description="Сколько опубликованных событий держать в памяти шины")

    # Параметры леджера
    default_dev_fee_ppm: int = Field(default=0, description="Комиссия разработчика по умолчанию (ppm)")
    reward_scale_exponent: int = Field(default=SCALE_EXPONENT, description="Степень множителя fixed-point")

    # Экспорт
    export_dir: str = Field(default=f"{BASE_DIR}/exports", description="Директория экспорта истории")

    @field_validator("default_dev_fee_ppm")
    @classmethod
    def validate_dev_fee(cls, v):
        """Комиссия должна быть в диапазоне 0..1_000_000 ppm"""
        if v < 0 or v > MAX_DEV_FEE_PPM:
            raise ValueError(f"Комиссия вне диапазона 0..{MAX_DEV_FEE_PPM} ppm: {v}")
        return v

    @field_validator("reward_scale_exponent")
    @classmethod
    def validate_scale(cls, v):
        """Критическая проверка: множитель аккумуляторов зашит в движок"""
        if v != SCALE_EXPONENT:
            raise ValueError(f"КРИТИЧЕСКАЯ ОШИБКА: reward_scale_exponent должен быть {SCALE_EXPONENT}, получен {v}")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Валидация URL базы данных"""
        if "://" not in v:
            raise ValueError(f"Неверный формат URL базы данных: {v}")
        return v

    def is_debug(self) -> bool:
        """Проверка debug режима"""
        return self.log_level == "DEBUG"


# Глобальный экземпляр настроек
settings = RewardPoolSettings()


def get_settings() -> RewardPoolSettings:
    """Получить глобальный экземпляр настроек"""
    return settings


# Функция для перезагрузки настроек
def reload_settings(env_file: Optional[str] = None) -> RewardPoolSettings:
    """Перезагрузить настройки из файла окружения"""
    global settings
    if env_file:
        settings = RewardPoolSettings(_env_file=env_file)
    else:
        settings = RewardPoolSettings()
    return settings


# Функция для создания тестовых настроек
def create_test_settings(**overrides) -> RewardPoolSettings:
    """Создать настройки для тестирования с переопределениями"""
    test_data = {
        "database_url": "sqlite:///:memory:",
        "log_level": "DEBUG",
        **overrides
    }
    return RewardPoolSettings(**test_data)
