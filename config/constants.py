"""
Модуль: Константы проекта EasySwap Reward Pool
Описание: Фиксированные параметры движка начисления наград (fixed-point, комиссии, валюты)
Автор: EasySwap Reward Pool Team
"""

import os
from typing import Final

# 🏗️ Системные константы
BASE_DIR: Final[str] = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# 🚫 ОБЯЗАТЕЛЬНЫЕ КОНСТАНТЫ ДВИЖКА - НЕ ИЗМЕНЯЙ!
# Множитель fixed-point для аккумуляторов accPerShare
SCALE_EXPONENT: Final[int] = 12
SCALE: Final[int] = 10 ** SCALE_EXPONENT

# Комиссия разработчика задается в ppm (parts-per-million)
PPM_DENOMINATOR: Final[int] = 1_000_000
MAX_DEV_FEE_PPM: Final[int] = PPM_DENOMINATOR

# Границы целочисленной арифметики (uint256)
MAX_UINT256: Final[int] = 2 ** 256 - 1

# Валюты наград
class RewardCurrency:
    ESM = "ESM"  # Валюта A (EasySwap Maker)
    ESG = "ESG"  # Валюта B (EasySwap Governance)

REWARD_CURRENCIES: Final[tuple] = (RewardCurrency.ESM, RewardCurrency.ESG)

# Направления изменения стейка
class StakeDirection:
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    EMERGENCY_WITHDRAW = "emergency_withdraw"

# Адреса
ZERO_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"
ADDRESS_HEX_LENGTH: Final[int] = 40

# Форматы экспорта истории
EXPORT_FORMATS: Final[list] = ['csv', 'json']
