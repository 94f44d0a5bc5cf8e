"""
EasySwap Reward Pool - Errors
Иерархия исключений леджера. Любое исключение отменяет операцию целиком.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""


class RewardPoolError(Exception):
    """Базовый класс для всех отказов леджера"""
    pass


# ----------------------------------------------------------------------
# Расписание наград
# ----------------------------------------------------------------------

class ScheduleError(RewardPoolError):
    """Ошибка расписания стадий"""
    pass


class NotAdjacentError(ScheduleError):
    """Новая стадия не примыкает к предыдущей"""
    pass


class InvertedRangeError(ScheduleError):
    """Конец стадии раньше начала"""
    pass


class UnknownStageError(ScheduleError):
    """Стадии с таким индексом нет"""
    pass


# ----------------------------------------------------------------------
# Реестр пулов
# ----------------------------------------------------------------------

class RegistryError(RewardPoolError):
    """Ошибка реестра пулов"""
    pass


class ZeroWeightError(RegistryError):
    """Суммарный вес пулов стал бы нулевым"""
    pass


class UnknownPoolError(RegistryError):
    """Пула с таким id нет"""
    pass


class DuplicatePoolError(RegistryError):
    """Актив стейкинга уже зарегистрирован в другом пуле"""
    pass


# ----------------------------------------------------------------------
# Леджер пользователей
# ----------------------------------------------------------------------

class LedgerError(RewardPoolError):
    """Ошибка операций леджера"""
    pass


class InsufficientStakeError(LedgerError):
    """Сумма вывода больше стейка"""
    pass


class NoMigratorError(LedgerError):
    """Мигратор не настроен"""
    pass


class BadMigrationError(LedgerError):
    """Мигратор вернул актив с другим балансом"""
    pass


class InvalidFeeRateError(LedgerError):
    """Ставка комиссии вне диапазона 0..1_000_000 ppm"""
    pass


class TransferFailedError(LedgerError):
    """Актив сообщил о неуспешном переводе"""
    pass


class ArithmeticOverflowError(LedgerError):
    """Переполнение uint256 в арифметике аккумуляторов"""
    pass


# ----------------------------------------------------------------------
# Права доступа
# ----------------------------------------------------------------------

class AuthError(RewardPoolError):
    """Ошибка прав доступа"""
    pass


class NotOwnerError(AuthError):
    """Вызывающий не является владельцем"""
    pass
