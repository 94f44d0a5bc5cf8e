"""
EasySwap Reward Pool - Тестирование начисления и выплаты наград
Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

import unittest

from blockchain.asset import InMemoryAsset
from blockchain.clock import ManualClock
from config.constants import RewardCurrency, StakeDirection
from core.errors import (
    InsufficientStakeError,
    InvalidFeeRateError,
    NotOwnerError,
    TransferFailedError,
    UnknownPoolError,
    ZeroWeightError,
)
from core.events import EventBus, FeePaid, RewardPaid, StakeChanged, StageAdded
from core.reward_pool import RewardPool
from utils.validators import ValidationError

OWNER = "0x" + "1" * 40
ALICE = "0x" + "2" * 40
BOB = "0x" + "3" * 40
CAROL = "0x" + "4" * 40
DEV = "0x" + "5" * 40
LEDGER = "0x" + "6" * 40


class LedgerTestCase(unittest.TestCase):
    """Общее окружение: леджер, активы наград и LP токен с балансами."""

    def setUp(self):
        self.clock = ManualClock()
        self.esm = InMemoryAsset("ESM", "0x" + "7" * 40)
        self.esg = InMemoryAsset("ESG", "0x" + "8" * 40)
        self.lp = InMemoryAsset("LP", "0x" + "9" * 40)
        self.lp2 = InMemoryAsset("LP2", "0x" + "12" * 20)
        self.ledger = RewardPool(OWNER, self.esm, self.esg, self.clock, LEDGER, dev_address=DEV, dev_fee_ppm=0)

        for user in (ALICE, BOB, CAROL):
            for lp in (self.lp, self.lp2):
                lp.mint(user, 1000)
                lp.approve(user, LEDGER, 1000)

    def fund(self, esm: int, esg: int):
        self.esm.mint(LEDGER, esm)
        self.esg.mint(LEDGER, esg)

    def counts(self):
        return (
            len(self.lp.transfers),
            len(self.esm.transfers),
            len(self.esg.transfers),
            len(self.ledger.events.published),
        )

    def delta(self, before):
        return tuple(after - prior for after, prior in zip(self.counts(), before))


class TestSingleDepositor(LedgerTestCase):
    """Один депозитор, одна стадия."""

    def test_concrete_schedule_scenario(self):
        self.ledger.add_stage(OWNER, 100, 199, 12, 6)
        self.fund(1201, 601)
        self.ledger.add(OWNER, 100, self.lp, True)
        self.ledger.deposit(BOB, 0, 100)

        self.clock.set(90)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))
        self.ledger.deposit(BOB, 0, 0)
        self.assertEqual(self.esm.balance_of(BOB), 0)
        self.assertEqual(self.esm.balance_of(LEDGER), 1201)

        # первый блок расписания не выплачивается
        self.clock.set(100)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))
        self.ledger.deposit(BOB, 0, 0)
        self.assertEqual(self.esm.balance_of(BOB), 0)

        self.clock.set(101)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (12, 6))
        self.ledger.deposit(BOB, 0, 0)
        self.assertEqual(self.esm.balance_of(BOB), 12)
        self.assertEqual(self.esg.balance_of(BOB), 6)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))

        self.clock.set(103)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (24, 12))
        self.ledger.deposit(BOB, 0, 0)
        self.assertEqual(self.esm.balance_of(BOB), 36)
        self.assertEqual(self.esg.balance_of(BOB), 18)

        self.clock.set(199)
        self.ledger.deposit(BOB, 0, 0)
        self.assertEqual(self.esm.balance_of(BOB), 1200 - 12)
        self.assertEqual(self.esg.balance_of(BOB), 600 - 6)
        self.assertEqual(self.esm.balance_of(LEDGER), 12 + 1)

        self.clock.set(202)
        self.ledger.deposit(BOB, 0, 0)
        self.assertEqual(self.esm.balance_of(BOB), 1200 - 12)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))

    def test_pending_follows_schedule(self):
        self.ledger.add_stage(OWNER, 121, 132, 100, 100)
        self.fund(300, 300)
        self.ledger.add(OWNER, 100, self.lp, True)
        self.ledger.deposit(BOB, 0, 20)

        expected = {121: 0, 122: 100, 123: 200, 124: 300, 125: 400}
        for block, pending in expected.items():
            self.clock.set(block)
            self.assertEqual(self.ledger.pending_esm(0, BOB), pending)
            self.assertEqual(self.ledger.pending_esg(0, BOB), pending)

    def test_payout_capped_at_ledger_balance(self):
        self.ledger.add_stage(OWNER, 121, 132, 100, 100)
        self.fund(300, 299)
        self.ledger.add(OWNER, 100, self.lp, True)
        self.ledger.deposit(BOB, 0, 20)

        self.clock.set(126)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 500)
        self.ledger.withdraw(BOB, 0, 10)

        self.assertEqual(self.esm.balance_of(BOB), 300)
        self.assertEqual(self.esg.balance_of(BOB), 299)
        self.assertEqual(self.esm.balance_of(LEDGER), 0)
        paid = self.ledger.events.events_of(RewardPaid.kind)
        self.assertEqual([event.amount for event in paid], [300, 299])

    def test_no_rewards_while_nobody_staked(self):
        self.fund(1200, 600)
        self.ledger.add_stage(OWNER, 100, 1000, 12, 6)
        self.ledger.add(OWNER, 100, self.lp, True)

        self.clock.set(200)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))
        self.clock.set(205)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))

        self.clock.set(210)
        self.ledger.deposit(BOB, 0, 10)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))

        self.clock.set(211)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (12, 6))

    def test_zero_deposit_has_no_rewards(self):
        self.ledger.add_stage(OWNER, 1, 100, 100, 10)
        self.fund(1000, 100)
        self.ledger.add(OWNER, 1, self.lp, True)

        self.clock.set(1)
        self.ledger.deposit(CAROL, 0, 0)
        self.clock.set(20)
        self.assertEqual(self.ledger.pending_reward(0, CAROL), (0, 0))

    def test_pending_is_zero_after_full_withdraw(self):
        self.ledger.add_stage(OWNER, 1, 100, 100, 10)
        self.fund(1000, 100)
        self.ledger.add(OWNER, 1, self.lp, True)

        self.clock.set(1)
        self.ledger.deposit(CAROL, 0, 10)
        self.clock.set(2)
        self.ledger.withdraw(CAROL, 0, 10)
        self.clock.set(3)

        self.assertEqual(self.ledger.pending_reward(0, CAROL), (0, 0))
        self.assertEqual(self.ledger.user_info(0, CAROL).amount, 0)
        self.assertEqual(self.lp.balance_of(CAROL), 1000)


class TestFees(LedgerTestCase):
    """Комиссия разработчика удерживается при выплате."""

    def test_fee_split_on_settlement(self):
        self.ledger.set_dev_fee(OWNER, 50000)
        self.ledger.add_stage(OWNER, 100, 101, 1000, 2000)
        self.fund(2000, 4000)
        self.ledger.add(OWNER, 100, self.lp, True)
        self.ledger.deposit(BOB, 0, 100)
        self.assertEqual(self.lp.balance_of(BOB), 900)

        self.clock.set(102)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (1000, 2000))
        self.ledger.withdraw(BOB, 0, 100)

        self.assertEqual(self.esm.balance_of(BOB), 950)
        self.assertEqual(self.esg.balance_of(BOB), 1900)
        self.assertEqual(self.esm.balance_of(DEV), 50)
        self.assertEqual(self.esg.balance_of(DEV), 100)
        self.assertEqual(self.lp.balance_of(BOB), 1000)
        self.assertEqual(self.esm.balance_of(LEDGER), 1000)
        self.assertEqual(self.esg.balance_of(LEDGER), 2000)

        fees = self.ledger.events.events_of(FeePaid.kind)
        self.assertEqual(
            [(event.currency, event.amount) for event in fees],
            [(RewardCurrency.ESM, 50), (RewardCurrency.ESG, 100)],
        )

    def test_no_rewards_in_single_block_stage(self):
        self.ledger.set_dev_fee(OWNER, 50000)
        self.ledger.add_stage(OWNER, 100, 100, 1000, 2000)
        self.fund(1000, 2000)
        self.ledger.add(OWNER, 100, self.lp, True)
        self.ledger.deposit(BOB, 0, 100)

        self.clock.set(101)
        self.ledger.withdraw(BOB, 0, 100)
        self.assertEqual(self.lp.balance_of(BOB), 1000)
        self.assertEqual(self.esm.balance_of(BOB), 0)
        self.assertEqual(self.esg.balance_of(BOB), 0)
        self.assertEqual(self.esm.balance_of(DEV), 0)

    def test_fee_setter(self):
        self.assertEqual(self.ledger.dev_fee_ppm, 0)
        with self.assertRaises(NotOwnerError):
            self.ledger.set_dev_fee(BOB, 10)
        self.ledger.set_dev_fee(OWNER, 123456)
        self.assertEqual(self.ledger.dev_fee_ppm, 123456)

        with self.assertRaises(InvalidFeeRateError):
            self.ledger.set_dev_fee(OWNER, 1_000_001)
        with self.assertRaises(InvalidFeeRateError):
            self.ledger.set_dev_fee(OWNER, -1)
        self.assertEqual(self.ledger.dev_fee_ppm, 123456)

    def test_full_fee_pays_nothing_to_depositor(self):
        self.ledger.set_dev_fee(OWNER, 1_000_000)
        self.ledger.add_stage(OWNER, 10, 20, 100, 0)
        self.fund(1000, 0)
        self.ledger.add(OWNER, 1, self.lp)
        self.ledger.deposit(BOB, 0, 10)

        self.clock.set(12)
        before = self.counts()
        self.ledger.deposit(BOB, 0, 0)

        self.assertEqual(self.esm.balance_of(BOB), 0)
        self.assertEqual(self.esm.balance_of(DEV), 200)
        # только перевод комиссии, выплаты депозитору нет
        self.assertEqual(self.delta(before), (0, 1, 0, 1))

    def test_dev_address_setter(self):
        self.assertEqual(self.ledger.dev_address, DEV)
        with self.assertRaises(NotOwnerError):
            self.ledger.set_dev_address(BOB, BOB)
        self.ledger.set_dev_address(OWNER, BOB)
        self.assertEqual(self.ledger.dev_address, BOB)
        with self.assertRaises(ValidationError):
            self.ledger.set_dev_address(OWNER, "0x1234")


class TestSilentSettlement(LedgerTestCase):
    """Нулевые суммы не порождают переводов и событий."""

    def test_zero_amount_transfers_are_skipped(self):
        self.ledger.add_stage(OWNER, 121, 125, 10, 10)
        self.fund(600, 600)
        self.ledger.add(OWNER, 100, self.lp, True)

        self.clock.set(122)
        before = self.counts()
        self.ledger.deposit(BOB, 0, 20)
        self.assertEqual(self.delta(before), (1, 0, 0, 1))

        # выплата наград: стейк, ESM, ESG и событие по каждому
        self.clock.set(126)
        before = self.counts()
        self.ledger.withdraw(BOB, 0, 11)
        self.assertEqual(self.delta(before), (1, 1, 1, 3))
        self.assertEqual(self.esm.balance_of(BOB), 30)

        # расписание закончилось: только возврат стейка
        self.clock.set(128)
        before = self.counts()
        self.ledger.withdraw(BOB, 0, 9)
        self.assertEqual(self.delta(before), (1, 0, 0, 1))

        before = self.counts()
        self.ledger.deposit(BOB, 0, 30)
        self.assertEqual(self.delta(before), (1, 0, 0, 1))

        self.clock.set(144)
        before = self.counts()
        self.ledger.withdraw(BOB, 0, 30)
        self.assertEqual(self.delta(before), (1, 0, 0, 1))

    def test_zero_deposit_without_stake_is_silent(self):
        self.ledger.add_stage(OWNER, 1, 100, 10, 10)
        self.fund(600, 600)
        self.ledger.add(OWNER, 1, self.lp)

        self.clock.set(5)
        before = self.counts()
        self.ledger.deposit(CAROL, 0, 0)
        self.assertEqual(self.delta(before), (0, 0, 0, 0))

    def test_stake_changed_event_fields(self):
        self.ledger.add(OWNER, 1, self.lp)
        self.ledger.deposit(ALICE, 0, 25)
        event = self.ledger.events.events_of(StakeChanged.kind)[-1]
        self.assertEqual(event, StakeChanged(pool_id=0, user=ALICE, amount=25, direction=StakeDirection.DEPOSIT))


class TestMultipleStakers(LedgerTestCase):
    """Распределение между несколькими депозиторами одного пула."""

    def setUp(self):
        super().setUp()
        self.ledger.add_stage(OWNER, 300, 1000, 100, 10)
        self.fund(7000, 700)
        self.ledger.add(OWNER, 100, self.lp, True)

    def test_scenario_three_stakers(self):
        self.clock.set(310)
        self.ledger.deposit(ALICE, 0, 10)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 0)

        self.clock.set(314)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 400)
        self.ledger.deposit(BOB, 0, 20)
        self.ledger.deposit(CAROL, 0, 30)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 400)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 0)
        self.assertEqual(self.ledger.pending_esm(0, CAROL), 0)

        self.clock.set(315)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 416)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 33)
        self.assertEqual(self.ledger.pending_esm(0, CAROL), 49)

        self.clock.set(316)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 433)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 66)
        self.assertEqual(self.ledger.pending_esm(0, CAROL), 99)

        self.ledger.withdraw(ALICE, 0, 10)
        self.assertEqual(self.esm.balance_of(ALICE), 433)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 66)
        self.assertEqual(self.ledger.pending_esm(0, CAROL), 99)

        self.ledger.withdraw(BOB, 0, 20)
        self.ledger.withdraw(CAROL, 0, 30)
        self.assertEqual(self.esm.balance_of(BOB), 66)
        self.assertEqual(self.esm.balance_of(CAROL), 99)
        self.assertEqual(self.esg.balance_of(BOB), 6)
        self.assertEqual(self.esg.balance_of(CAROL), 9)

        for user in (ALICE, BOB, CAROL):
            self.assertEqual(self.ledger.pending_reward(0, user), (0, 0))

        # выплачено не больше начисленного за блоки 311..316
        paid = sum(self.esm.balance_of(user) for user in (ALICE, BOB, CAROL))
        self.assertLessEqual(paid, 600)
        self.assertEqual(self.esm.balance_of(LEDGER), 7000 - paid)

    def test_scenario_settlement_by_zero_deposit(self):
        self.clock.set(310)
        self.ledger.deposit(ALICE, 0, 10)

        self.clock.set(314)
        self.ledger.deposit(BOB, 0, 20)

        self.clock.set(315)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 433)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 66)

        self.clock.set(318)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 533)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 266)

        self.ledger.deposit(CAROL, 0, 0)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 533)
        self.assertEqual(self.ledger.pending_esm(0, CAROL), 0)

        self.ledger.deposit(BOB, 0, 0)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 0)
        self.assertEqual(self.esm.balance_of(BOB), 266)
        self.assertEqual(self.esm.balance_of(ALICE), 0)

        self.clock.set(319)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 566)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 67)
        self.ledger.withdraw(ALICE, 0, 10)
        self.assertEqual(self.esm.balance_of(ALICE), 566)
        self.assertEqual(self.esg.balance_of(ALICE), 56)

        self.ledger.deposit(ALICE, 0, 0)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 0)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 67)

        self.clock.set(320)
        self.assertEqual(self.ledger.pending_esm(0, BOB), 167)
        self.ledger.withdraw(BOB, 0, 20)
        self.assertEqual(self.esm.balance_of(BOB), 433)
        self.assertEqual(self.esg.balance_of(BOB), 43)


class TestWeights(LedgerTestCase):
    """Веса пулов и их изменение."""

    def setUp(self):
        super().setUp()
        self.ledger.add_stage(OWNER, 10, 1000, 100, 10)
        self.fund(100000, 10000)
        self.ledger.add(OWNER, 100, self.lp)
        self.ledger.add(OWNER, 100, self.lp2)
        self.ledger.deposit(ALICE, 0, 10)
        self.ledger.deposit(BOB, 1, 10)

    def test_reward_split_by_weight(self):
        self.clock.set(20)
        self.assertEqual(self.ledger.pending_reward(0, ALICE), (500, 50))
        self.assertEqual(self.ledger.pending_reward(1, BOB), (500, 50))

    def test_weight_change_with_global_sync(self):
        self.clock.set(20)
        self.ledger.set(OWNER, 1, 300, True)
        self.assertEqual(self.ledger.total_weight(), 400)

        self.clock.set(30)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 500 + 250)
        self.assertEqual(self.ledger.pending_esm(1, BOB), 500 + 750)

    def test_weight_change_without_global_sync(self):
        self.clock.set(20)
        self.ledger.set(OWNER, 1, 300, False)

        # пул 1 синхронизирован перед изменением, пул 0 нет
        self.clock.set(30)
        self.assertEqual(self.ledger.pending_esm(1, BOB), 500 + 750)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 20 * 100 * 100 // 400)

    def test_mass_update_pools(self):
        self.clock.set(25)
        self.ledger.mass_update_pools()
        for pool_id in (0, 1):
            self.assertEqual(self.ledger.pool_info(pool_id).last_accrual_time, 25)


class TestSyncAndPending(LedgerTestCase):
    """pending_reward совпадает с тем, что сохраняет синхронизация."""

    def setUp(self):
        super().setUp()
        self.ledger.add_stage(OWNER, 300, 1000, 100, 10)
        self.fund(7000, 700)
        self.ledger.add(OWNER, 100, self.lp)
        self.clock.set(310)
        self.ledger.deposit(ALICE, 0, 10)
        self.ledger.deposit(BOB, 0, 20)

    def test_pending_matches_sync(self):
        self.clock.set(317)
        pending_alice = self.ledger.pending_reward(0, ALICE)
        pending_bob = self.ledger.pending_reward(0, BOB)

        self.ledger.update_pool(0)
        self.assertEqual(self.ledger.pending_reward(0, ALICE), pending_alice)
        self.assertEqual(self.ledger.pending_reward(0, BOB), pending_bob)
        self.assertEqual(self.ledger.pool_info(0).last_accrual_time, 317)

    def test_sync_is_idempotent(self):
        self.clock.set(320)
        self.ledger.update_pool(0)
        first = self.ledger.pool_info(0)
        self.ledger.update_pool(0)
        self.assertEqual(self.ledger.pool_info(0), first)

    def test_accumulators_never_decrease(self):
        previous = self.ledger.pool_info(0)
        for block in (311, 315, 315, 400, 1000, 1200):
            self.clock.set(block)
            self.ledger.update_pool(0)
            current = self.ledger.pool_info(0)
            self.assertGreaterEqual(current.acc_per_share_a, previous.acc_per_share_a)
            self.assertGreaterEqual(current.acc_per_share_b, previous.acc_per_share_b)
            self.assertGreaterEqual(current.last_accrual_time, previous.last_accrual_time)
            previous = current

    def test_unknown_pool(self):
        with self.assertRaises(UnknownPoolError):
            self.ledger.pending_reward(3, ALICE)
        with self.assertRaises(UnknownPoolError):
            self.ledger.deposit(ALICE, 3, 10)
        with self.assertRaises(UnknownPoolError):
            self.ledger.update_pool(3)


class TestWithdrawals(LedgerTestCase):
    """Обычный и экстренный вывод стейка."""

    def setUp(self):
        super().setUp()
        self.ledger.add_stage(OWNER, 123, 99999, 1, 1)
        self.fund(1000, 1000)
        self.ledger.add(OWNER, 100, self.lp, True)

    def test_emergency_withdraw(self):
        self.ledger.deposit(BOB, 0, 100)
        self.assertEqual(self.lp.balance_of(BOB), 900)

        self.clock.set(200)
        self.assertGreater(self.ledger.pending_esm(0, BOB), 0)
        returned = self.ledger.emergency_withdraw(BOB, 0)

        self.assertEqual(returned, 100)
        self.assertEqual(self.lp.balance_of(BOB), 1000)
        self.assertEqual(self.esm.balance_of(BOB), 0)
        self.assertEqual(self.ledger.pending_reward(0, BOB), (0, 0))

        position = self.ledger.user_info(0, BOB)
        self.assertEqual((position.amount, position.reward_debt_a, position.reward_debt_b), (0, 0, 0))

        event = self.ledger.events.published[-1]
        self.assertEqual(event.kind, StakeChanged.kind)
        self.assertEqual(event.direction, StakeDirection.EMERGENCY_WITHDRAW)
        self.assertEqual(self.ledger.events.events_of(RewardPaid.kind), [])

    def test_emergency_withdraw_without_stake(self):
        before = self.counts()
        self.assertEqual(self.ledger.emergency_withdraw(BOB, 0), 0)
        self.assertEqual(self.delta(before), (0, 0, 0, 0))

    def test_withdraw_more_than_staked(self):
        self.ledger.deposit(BOB, 0, 100)
        with self.assertRaises(InsufficientStakeError):
            self.ledger.withdraw(BOB, 0, 101)
        with self.assertRaises(InsufficientStakeError):
            self.ledger.withdraw(ALICE, 0, 1)
        self.assertEqual(self.ledger.user_info(0, BOB).amount, 100)

    def test_negative_amount_rejected(self):
        with self.assertRaises(ValidationError):
            self.ledger.deposit(BOB, 0, -1)


class TestAtomicity(LedgerTestCase):
    """Отклоненная операция не оставляет следов в состоянии и событиях."""

    def setUp(self):
        super().setUp()
        self.ledger.add_stage(OWNER, 10, 1000, 100, 10)
        self.fund(100000, 10000)
        self.ledger.add(OWNER, 10, self.lp)
        self.ledger.add(OWNER, 10, self.lp2)
        self.ledger.deposit(ALICE, 0, 10)

    def test_failed_stake_transfer_rolls_back(self):
        self.lp.approve(BOB, LEDGER, 0)
        self.clock.set(20)
        events_before = len(self.ledger.events.published)
        pool_before = self.ledger.pool_info(0)

        with self.assertRaises(TransferFailedError):
            self.ledger.deposit(BOB, 0, 10)

        self.assertEqual(self.ledger.pool_info(0), pool_before)
        self.assertEqual(len(self.ledger.events.published), events_before)
        self.assertEqual(self.ledger.user_info(0, BOB).amount, 0)
        self.assertEqual(self.lp.balance_of(BOB), 1000)

    def test_failed_weight_change_rolls_back_sync(self):
        self.ledger.set(OWNER, 0, 0)
        self.clock.set(50)
        with self.assertRaises(ZeroWeightError):
            self.ledger.set(OWNER, 1, 0)
        self.assertEqual(self.ledger.pool_info(1).last_accrual_time, 10)
        self.assertEqual(self.ledger.pool_info(1).weight, 10)
        self.assertEqual(self.ledger.total_weight(), 10)

    def test_rejected_admin_call_emits_nothing(self):
        events_before = len(self.ledger.events.published)
        with self.assertRaises(NotOwnerError):
            self.ledger.set_dev_fee(ALICE, 100)
        self.assertEqual(len(self.ledger.events.published), events_before)

    def test_subscriber_sees_only_committed_events(self):
        received = []
        self.ledger.events.subscribe(received.append)
        self.clock.set(20)

        with self.assertRaises(InsufficientStakeError):
            self.ledger.withdraw(ALICE, 0, 11)
        self.assertEqual(received, [])

        self.ledger.withdraw(ALICE, 0, 5)
        self.assertEqual([event.kind for event in received], ["reward_paid", "reward_paid", "stake_changed"])


class TestOwnership(LedgerTestCase):
    """Передача прав владельца."""

    def test_transfer_ownership(self):
        with self.assertRaises(NotOwnerError):
            self.ledger.transfer_ownership(ALICE, ALICE)

        self.ledger.transfer_ownership(OWNER, ALICE)
        self.assertEqual(self.ledger.owner, ALICE)

        with self.assertRaises(NotOwnerError):
            self.ledger.add_stage(OWNER, 1, 2, 1, 1)
        self.ledger.add_stage(ALICE, 1, 2, 1, 1)
        self.assertEqual(self.ledger.stage_count(), 1)

    def test_statistics(self):
        self.ledger.add(OWNER, 5, self.lp)
        stats = self.ledger.get_statistics()
        self.assertEqual(stats["pool_count"], 1)
        self.assertEqual(stats["total_weight"], 5)
        self.assertEqual(stats["owner"], OWNER)
        self.assertIsNone(stats["migrator"])


class RejectingAsset(InMemoryAsset):
    """Актив награды, который отклоняет любой исходящий перевод."""

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        return False


class TestLateStage(LedgerTestCase):
    """Стадия, добавленная позже, не платит за уже прошедшие блоки."""

    def test_stage_appended_after_its_start(self):
        self.ledger.add_stage(OWNER, 1, 100, 10, 10)
        self.fund(10000, 10000)
        self.ledger.add(OWNER, 100, self.lp)

        self.clock.set(50)
        self.ledger.deposit(ALICE, 0, 10)

        self.clock.set(150)
        self.ledger.add_stage(OWNER, 101, 200, 10, 10)
        self.assertEqual(self.ledger.pool_info(0).last_accrual_time, 150)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 500)

        self.clock.set(160)
        self.assertEqual(self.ledger.pending_reward(0, ALICE), (600, 600))
        self.assertEqual(len(self.ledger.events.events_of(StageAdded.kind)), 2)


class TestEmergencyExit(LedgerTestCase):
    """Экстренный выход одного из депозиторов не отдает его награды остальным."""

    def setUp(self):
        super().setUp()
        self.ledger.add_stage(OWNER, 10, 1000, 100, 10)
        self.fund(100000, 10000)
        self.ledger.add(OWNER, 100, self.lp)
        self.clock.set(10)
        self.ledger.deposit(ALICE, 0, 10)
        self.ledger.deposit(BOB, 0, 10)

    def test_exit_between_syncs(self):
        self.clock.set(20)
        self.assertEqual(self.ledger.emergency_withdraw(BOB, 0), 10)
        self.assertEqual(self.ledger.pool_info(0).last_accrual_time, 20)
        self.assertEqual(self.ledger.pending_esm(0, ALICE), 500)

        self.clock.set(30)
        self.assertEqual(self.ledger.pending_reward(0, ALICE), (500 + 1000, 50 + 100))
        self.assertEqual(self.esm.balance_of(BOB), 0)
        self.assertEqual(self.lp.balance_of(BOB), 1000)
        self.assertEqual(self.lp.balance_of(LEDGER), 10)

        self.ledger.withdraw(ALICE, 0, 10)
        self.assertEqual(self.esm.balance_of(ALICE), 1500)
        # доля Боба за блоки 11..20 осталась в леджере
        self.assertEqual(self.esm.balance_of(LEDGER), 100000 - 1500)


class TestRejectedRewardTransfer(LedgerTestCase):
    """Отказ актива награды не возвращает стейк дважды."""

    def setUp(self):
        super().setUp()
        self.esm = RejectingAsset("ESM", "0x" + "7" * 40)
        self.ledger = RewardPool(OWNER, self.esm, self.esg, self.clock, LEDGER, dev_address=DEV, dev_fee_ppm=0)
        self.ledger.add_stage(OWNER, 10, 1000, 100, 10)
        self.fund(100000, 10000)
        self.ledger.add(OWNER, 100, self.lp)
        self.clock.set(10)
        self.ledger.deposit(ALICE, 0, 100)
        self.ledger.deposit(BOB, 0, 100)

    def test_withdraw_completes_when_reward_transfer_rejected(self):
        self.clock.set(20)
        self.ledger.withdraw(ALICE, 0, 100)

        self.assertEqual(self.lp.balance_of(ALICE), 1000)
        self.assertEqual(self.lp.balance_of(LEDGER), 100)
        self.assertEqual(self.ledger.user_info(0, ALICE).amount, 0)
        self.assertEqual(self.ledger.pending_reward(0, ALICE), (0, 0))

        self.assertEqual(self.esm.balance_of(ALICE), 0)
        self.assertEqual(self.esm.balance_of(LEDGER), 100000)
        self.assertEqual(self.esg.balance_of(ALICE), 50)
        paid = self.ledger.events.events_of(RewardPaid.kind)
        self.assertEqual([event.currency for event in paid], [RewardCurrency.ESG])

        with self.assertRaises(InsufficientStakeError):
            self.ledger.withdraw(ALICE, 0, 100)
        self.assertEqual(self.lp.balance_of(LEDGER), 100)

        self.ledger.withdraw(BOB, 0, 100)
        self.assertEqual(self.lp.balance_of(BOB), 1000)
        self.assertEqual(self.lp.balance_of(LEDGER), 0)

    def test_deposit_completes_when_reward_transfer_rejected(self):
        self.clock.set(20)
        self.ledger.deposit(ALICE, 0, 50)

        self.assertEqual(self.ledger.user_info(0, ALICE).amount, 150)
        self.assertEqual(self.lp.balance_of(LEDGER), 250)
        self.assertEqual(self.esg.balance_of(ALICE), 50)
        self.assertEqual(self.ledger.pending_reward(0, ALICE), (0, 0))


class TestEventDelivery(LedgerTestCase):
    """Доставка зафиксированных событий подписчикам."""

    def setUp(self):
        super().setUp()
        self.ledger.add_stage(OWNER, 10, 1000, 100, 10)
        self.fund(100000, 10000)
        self.ledger.add(OWNER, 100, self.lp)
        self.clock.set(10)
        self.ledger.deposit(ALICE, 0, 100)

    def test_failing_subscriber_does_not_stop_delivery(self):
        calls = []

        def failing(event):
            calls.append(event)
            if len(calls) == 1:
                raise RuntimeError("journal is down")

        received = []
        self.ledger.events.subscribe(failing)
        self.ledger.events.subscribe(received.append)
        published_before = len(self.ledger.events.published)

        self.clock.set(20)
        self.ledger.withdraw(ALICE, 0, 50)

        self.assertEqual(len(calls), 3)
        self.assertEqual([event.kind for event in received], ["reward_paid", "reward_paid", "stake_changed"])
        self.assertEqual(len(self.ledger.events.published), published_before + 3)
        self.assertEqual(self.ledger.user_info(0, ALICE).amount, 50)
        self.assertEqual(self.esm.balance_of(ALICE), 1000)

    def test_published_history_is_bounded(self):
        bus = EventBus(history_size=2)
        for pool_id in range(3):
            bus.emit(StakeChanged(pool_id=pool_id, user=ALICE, amount=1, direction=StakeDirection.DEPOSIT))
        self.assertEqual([event.pool_id for event in bus.published], [1, 2])


if __name__ == "__main__":
    unittest.main()
