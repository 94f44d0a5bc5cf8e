"""
Модуль core - Основная бизнес-логика EasySwap Reward Pool
"""

from .errors import (
    RewardPoolError,
    ScheduleError,
    NotAdjacentError,
    InvertedRangeError,
    UnknownStageError,
    RegistryError,
    ZeroWeightError,
    UnknownPoolError,
    DuplicatePoolError,
    LedgerError,
    InsufficientStakeError,
    NoMigratorError,
    BadMigrationError,
    InvalidFeeRateError,
    TransferFailedError,
    ArithmeticOverflowError,
    AuthError,
    NotOwnerError,
)
from .stage_schedule import StageSchedule, RewardStage
from .pool_registry import PoolRegistry, Pool
from .user_ledger import UserLedger, UserPosition
from .accrual_engine import AccrualEngine
from .fee_splitter import FeeSplitter
from .global_state import GlobalState
from .events import EventBus, LedgerEvent
from .reward_pool import RewardPool

__all__ = [
    'RewardPool',
    'StageSchedule',
    'RewardStage',
    'PoolRegistry',
    'Pool',
    'UserLedger',
    'UserPosition',
    'AccrualEngine',
    'FeeSplitter',
    'GlobalState',
    'EventBus',
    'LedgerEvent',
    'RewardPoolError',
    'ScheduleError',
    'NotAdjacentError',
    'InvertedRangeError',
    'UnknownStageError',
    'RegistryError',
    'ZeroWeightError',
    'UnknownPoolError',
    'DuplicatePoolError',
    'LedgerError',
    'InsufficientStakeError',
    'NoMigratorError',
    'BadMigrationError',
    'InvalidFeeRateError',
    'TransferFailedError',
    'ArithmeticOverflowError',
    'AuthError',
    'NotOwnerError',
]
