"""
EasySwap Reward Pool - Global State
Глобальные параметры леджера: владелец, комиссия, адрес разработчика, мигратор.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from config.constants import MAX_DEV_FEE_PPM
from core.errors import InvalidFeeRateError, NotOwnerError


@dataclass
class GlobalState:
    """Параметры, изменяемые только владельцем"""
    owner: str
    dev_address: str
    dev_fee_ppm: int = 0
    migrator: Optional[Any] = None

    def require_owner(self, caller: str) -> None:
        """
        Проверка прав владельца.

        Raises:
            NotOwnerError: вызывающий не владелец
        """
        if caller != self.owner:
            raise NotOwnerError(f"Ownable: caller {caller} is not the owner")

    @staticmethod
    def check_fee_rate(ppm: int) -> int:
        if isinstance(ppm, bool) or not isinstance(ppm, int) or not 0 <= ppm <= MAX_DEV_FEE_PPM:
            raise InvalidFeeRateError(f"Dev fee must be within 0..{MAX_DEV_FEE_PPM} ppm, got {ppm}")
        return ppm

    def snapshot(self) -> "GlobalState":
        return replace(self)

    def restore(self, snapshot: "GlobalState") -> None:
        # Восстанавливаем поля на месте: на объект ссылаются другие компоненты
        for item in fields(self):
            setattr(self, item.name, getattr(snapshot, item.name))
