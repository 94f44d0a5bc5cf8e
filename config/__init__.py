"""
Модуль config - Настройки и константы EasySwap Reward Pool
"""

from .settings import settings, get_settings, reload_settings, create_test_settings, RewardPoolSettings

__all__ = [
    'settings',
    'get_settings',
    'reload_settings',
    'create_test_settings',
    'RewardPoolSettings'
]
