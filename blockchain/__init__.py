"""
Модуль blockchain - Внешние интерфейсы леджера: активы, часы, мигратор
"""

from .asset import Asset, InMemoryAsset, TransferRecord
from .clock import Clock, ManualClock, Web3BlockClock
from .migrator import Migrator, MintingMigrator

__all__ = [
    'Asset',
    'InMemoryAsset',
    'TransferRecord',
    'Clock',
    'ManualClock',
    'Web3BlockClock',
    'Migrator',
    'MintingMigrator',
]
