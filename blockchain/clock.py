"""
Модуль: Часы леджера
Описание: Источники логического времени (номер блока) для начисления наград
Зависимости: web3
Автор: EasySwap Reward Pool Team
"""

from typing import Optional, Protocol, Union

from web3 import Web3

from utils.logger import get_logger
from utils.validators import ValidationError, validate_block_number

logger = get_logger(__name__)


class Clock(Protocol):
    """Монотонно неубывающее логическое время"""

    def now(self) -> int: ...


class ManualClock:
    """Часы, которые двигает хост (тесты, симуляции)"""

    def __init__(self, start: int = 0):
        self._now = validate_block_number(start)

    def now(self) -> int:
        return self._now

    def set(self, value: int) -> int:
        value = validate_block_number(value)
        if value < self._now:
            raise ValidationError(f"Clock cannot move backwards: {value} < {self._now}")
        self._now = value
        return self._now

    def advance(self, blocks: int = 1) -> int:
        return self.set(self._now + validate_block_number(blocks))


class Web3BlockClock:
    """Часы по номеру последнего блока сети"""

    def __init__(self, w3: Union[Web3, str]):
        """
        Args:
            w3: Экземпляр Web3 или HTTP URL ноды
        """
        self.w3 = Web3(Web3.HTTPProvider(w3)) if isinstance(w3, str) else w3
        self._last: Optional[int] = None

    def now(self) -> int:
        block = validate_block_number(self.w3.eth.block_number)
        # Ноды за балансировщиком могут отдать более старый блок
        if self._last is not None and block < self._last:
            logger.debug(f"⏪ Получен блок {block} < {self._last}, используется последний")
            return self._last
        self._last = block
        return block
