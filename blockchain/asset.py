"""
Модуль: Активы для EasySwap Reward Pool
Описание: Интерфейс переводимого актива и ERC-20-подобная реализация в памяти
Зависимости: web3 (нормализация адресов)
Автор: EasySwap Reward Pool Team
"""

from dataclasses import dataclass
from typing import Dict, List, Protocol, Tuple

from config.constants import ZERO_ADDRESS
from utils.logger import get_logger
from utils.validators import validate_address, validate_amount

logger = get_logger(__name__)


class Asset(Protocol):
    """Интерфейс актива, с которым работает леджер"""
    address: str

    def balance_of(self, holder: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, source: str, to: str, amount: int) -> bool: ...

    def approve(self, owner: str, spender: str, amount: int) -> bool: ...


@dataclass(frozen=True)
class TransferRecord:
    """Запись о переводе (аналог события Transfer ERC-20)"""
    sender: str
    to: str
    amount: int


class InMemoryAsset:
    """
    ERC-20-подобный актив в памяти.

    Неуспешный перевод (нехватка баланса или allowance) возвращает False
    и не меняет состояние. Все успешные переводы и эмиссии попадают в
    журнал transfers; эмиссия записывается как перевод с нулевого адреса.
    """


    def __init__(self, symbol: str, address: str):
        self.symbol = symbol
        self.address = validate_address(address)
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self.total_supply = 0
        self.transfers: List[TransferRecord] = []

    def __repr__(self) -> str:
        return f"InMemoryAsset({self.symbol}, {self.address})"

    def balance_of(self, holder: str) -> int:
        return self._balances.get(validate_address(holder), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((validate_address(owner), validate_address(spender)), 0)

    def mint(self, to: str, amount: int) -> None:
        to = validate_address(to)
        amount = validate_amount(amount)
        self._balances[to] = self._balances.get(to, 0) + amount
        self.total_supply += amount
        self.transfers.append(TransferRecord(sender=ZERO_ADDRESS, to=to, amount=amount))
        logger.debug(f"🪙 {self.symbol}: эмиссия {amount} -> {to}")

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self._allowances[(validate_address(owner), validate_address(spender))] = validate_amount(amount)
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        return self._move(validate_address(sender), validate_address(to), validate_amount(amount))

    def transfer_from(self, spender: str, source: str, to: str, amount: int) -> bool:
        """Перевод от имени source по allowance, выданному spender"""
        spender = validate_address(spender)
        source = validate_address(source)
        amount = validate_amount(amount)

        allowed = self._allowances.get((source, spender), 0)
        if allowed < amount:
            logger.debug(f"⛔ {self.symbol}: allowance {allowed} < {amount} ({source} -> {spender})")
            return False
        if not self._move(source, validate_address(to), amount):
            return False
        self._allowances[(source, spender)] = allowed - amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> bool:
        balance = self._balances.get(sender, 0)
        if balance < amount:
            logger.debug(f"⛔ {self.symbol}: баланс {balance} < {amount} ({sender})")
            return False
        self._balances[sender] = balance - amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self.transfers.append(TransferRecord(sender=sender, to=to, amount=amount))
        return True

    def transfers_to(self, holder: str) -> List[TransferRecord]:
        holder = validate_address(holder)
        return [record for record in self.transfers if record.to == holder]
