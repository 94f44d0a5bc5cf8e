"""
Модуль db - Журнал событий EasySwap Reward Pool
"""

from .models import DatabaseManager, LedgerEventRecord
from .history_manager import HistoryManager

__all__ = [
    'DatabaseManager',
    'LedgerEventRecord',
    'HistoryManager',
]
