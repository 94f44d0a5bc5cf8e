"""
EasySwap Reward Pool - Fee Splitter
Выплата накопленных наград с удержанием комиссии разработчика.

Каждая выплата ограничена текущим балансом леджера в валюте награды.
Нулевые суммы не порождают ни перевода, ни события. Перевод, отклоненный
активом, не прерывает операцию: отказ пишется в лог с уровнем ERROR, а
сумма остается на балансе леджера и, как и недостача, не учитывается.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from typing import Any, Dict, Tuple

from config.constants import PPM_DENOMINATOR, RewardCurrency
from core.events import EventBus, FeePaid, RewardPaid
from core.fixed_point import checked_sub, mul_div
from core.global_state import GlobalState
from utils.logger import get_logger, get_pool_logger

logger = get_logger(__name__)
pool_logger = get_pool_logger(__name__)


class FeeSplitter:
    """Расчет комиссии и перевод наград"""

    def __init__(self, state: GlobalState, events: EventBus, holder: str, reward_assets: Dict[str, Any]):
        """
        Args:
            state: Глобальные параметры (ставка и адрес комиссии)
            events: Шина событий
            holder: Адрес леджера, с которого идут выплаты
            reward_assets: Активы наград по валютам {ESM: ..., ESG: ...}
        """
        self.state = state
        self.events = events
        self.holder = holder
        self.reward_assets = reward_assets

    @staticmethod
    def split(pending: int, fee_ppm: int) -> Tuple[int, int]:
        """
        Разделить сумму на чистую выплату и комиссию.

        Returns:
            Tuple[int, int]: (net, fee)
        """
        fee = mul_div(pending, fee_ppm, PPM_DENOMINATOR)
        return checked_sub(pending, fee), fee

    def safe_transfer(self, currency: str, to: str, amount: int) -> int:
        """
        Перевести не больше, чем есть на балансе леджера.

        Returns:
            int: Фактически переведенная сумма (0 - перевода не было или актив
                 его отклонил)
        """
        if amount <= 0:
            return 0
        asset = self.reward_assets[currency]
        amount = min(amount, asset.balance_of(self.holder))
        if amount == 0:
            return 0
        if not asset.transfer(self.holder, to, amount):
            logger.error(f"❌ Актив {currency} отклонил перевод {amount} на {to}, сумма остается в леджере")
            return 0
        return amount

    def settle_currency(self, pool_id: int, user: str, currency: str, pending: int) -> Tuple[int, int]:
        if pending <= 0:
            return 0, 0

        net, fee = self.split(pending, self.state.dev_fee_ppm)

        paid = self.safe_transfer(currency, user, net)
        if paid:
            self.events.emit(RewardPaid(pool_id=pool_id, user=user, currency=currency, amount=paid))
            pool_logger.log_reward_payment(pool_id, user, currency, paid)

        fee_paid = self.safe_transfer(currency, self.state.dev_address, fee)
        if fee_paid:
            self.events.emit(FeePaid(pool_id=pool_id, currency=currency, amount=fee_paid))
            pool_logger.log_fee_payment(pool_id, self.state.dev_address, currency, fee_paid)

        return paid, fee_paid

    def settle(self, pool_id: int, user: str, pending_a: int, pending_b: int) -> Dict[str, Tuple[int, int]]:
        """
        Выплатить невыплаченные награды в обеих валютах.

        Returns:
            Dict[str, Tuple[int, int]]: {валюта: (выплачено депозитору, комиссия)}
        """
        return {
            RewardCurrency.ESM: self.settle_currency(pool_id, user, RewardCurrency.ESM, pending_a),
            RewardCurrency.ESG: self.settle_currency(pool_id, user, RewardCurrency.ESG, pending_b),
        }
