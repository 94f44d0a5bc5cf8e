"""
Модуль: Валидаторы данных для EasySwap Reward Pool
Описание: Валидация адресов, сумм и номеров блоков
Зависимости: web3
Автор: EasySwap Reward Pool Team
"""

import re
from typing import Union
from web3 import Web3

from config.constants import ZERO_ADDRESS, MAX_UINT256
from utils.logger import get_logger

logger = get_logger("Validators")


class ValidationError(ValueError):
    """Ошибка валидации данных"""
    pass


class AddressValidator:
    """Валидатор Ethereum/BSC адресов"""

    @staticmethod
    def is_valid_address(address: str) -> bool:
        """Проверить корректность адреса"""
        if not isinstance(address, str):
            return False

        # Проверка формата 0x + 40 hex символов
        if not re.match(r'^0x[a-fA-F0-9]{40}$', address):
            return False

        try:
            return Web3.is_address(address)
        except Exception:
            return False

    @staticmethod
    def normalize_address(address: str) -> str:
        """Нормализовать адрес к checksum формату"""
        if not AddressValidator.is_valid_address(address):
            raise ValidationError(f"Invalid address format: {address}")

        return Web3.to_checksum_address(address)

    @staticmethod
    def is_zero_address(address: str) -> bool:
        """Проверить, является ли адрес нулевым"""
        try:
            return AddressValidator.normalize_address(address) == ZERO_ADDRESS
        except ValidationError:
            return False


class AmountValidator:
    """Валидатор целочисленных сумм (минимальные единицы токена)"""

    @staticmethod
    def validate_amount(amount: Union[int, str], allow_zero: bool = True) -> int:
        """Валидировать сумму в минимальных единицах"""
        if isinstance(amount, bool):
            raise ValidationError(f"Invalid amount format: {amount}")
        try:
            value = int(amount)
        except (ValueError, TypeError):
            raise ValidationError(f"Invalid amount format: {amount}")

        if isinstance(amount, float) and value != amount:
            raise ValidationError(f"Amount must be integral: {amount}")

        if value < 0:
            raise ValidationError(f"Amount cannot be negative: {value}")

        if not allow_zero and value == 0:
            raise ValidationError(f"Amount cannot be zero: {value}")

        if value > MAX_UINT256:
            raise ValidationError(f"Amount exceeds uint256: {value}")

        return value


class BlockValidator:
    """Валидатор номеров блоков"""

    @staticmethod
    def validate_block_number(block_number: Union[int, str]) -> int:
        """Валидировать номер блока"""
        try:
            block_num = int(block_number)
        except (ValueError, TypeError):
            raise ValidationError(f"Invalid block number format: {block_number}")
        if block_num < 0:
            raise ValidationError(f"Block number cannot be negative: {block_num}")
        return block_num


# Функции-обертки для удобства импорта
def validate_address(address: str) -> str:
    """Валидировать и нормализовать адрес"""
    return AddressValidator.normalize_address(address)

def is_valid_address(address: str) -> bool:
    """Проверить корректность адреса"""
    return AddressValidator.is_valid_address(address)

def validate_amount(amount: Union[int, str], allow_zero: bool = True) -> int:
    """Валидировать сумму"""
    return AmountValidator.validate_amount(amount, allow_zero=allow_zero)

def validate_block_number(block_number: Union[int, str]) -> int:
    """Валидировать номер блока"""
    return BlockValidator.validate_block_number(block_number)
