"""EasySwap Reward Pool - Utilities"""

from .logger import get_logger, get_pool_logger, RewardPoolLogger
from .validators import (
    ValidationError,
    validate_address,
    is_valid_address,
    validate_amount,
    validate_block_number,
)

__all__ = [
    'get_logger',
    'get_pool_logger',
    'RewardPoolLogger',
    'ValidationError',
    'validate_address',
    'is_valid_address',
    'validate_amount',
    'validate_block_number'
]
