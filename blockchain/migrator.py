"""
Модуль: Мигратор активов стейкинга
Описание: Перенос баланса леджера со старого актива на новый
Автор: EasySwap Reward Pool Team
"""

from typing import Any, Protocol

from core.errors import TransferFailedError
from blockchain.asset import InMemoryAsset
from utils.logger import get_logger
from utils.validators import validate_address

logger = get_logger(__name__)


class Migrator(Protocol):
    address: str

    def migrate(self, asset: Any) -> Any: ...


class MintingMigrator:
    """
    Мигратор, который забирает баланс леджера в старом активе по
    allowance и выпускает такой же баланс нового актива на леджер.
    """

    def __init__(self, address: str, ledger_address: str, target: InMemoryAsset):
        self.address = validate_address(address)
        self.ledger_address = validate_address(ledger_address)
        self.target = target

    def migrate(self, asset: Any) -> InMemoryAsset:
        balance = asset.balance_of(self.ledger_address)
        if not asset.transfer_from(self.address, self.ledger_address, self.address, balance):
            raise TransferFailedError(f"Migrator could not pull {balance} from {self.ledger_address}")
        self.target.mint(self.ledger_address, balance)
        logger.info(f"🔁 Миграция: {balance} перенесено на {self.target.address}")
        return self.target
