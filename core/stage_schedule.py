"""
EasySwap Reward Pool - Stage Schedule
Расписание эмиссии наград: упорядоченный список примыкающих стадий.

Каждая стадия задает эмиссию ESM и ESG на единицу логического времени
(блок). Стадии только добавляются и никогда не изменяются.

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.errors import NotAdjacentError, InvertedRangeError, UnknownStageError
from core.fixed_point import checked_add, checked_mul
from utils.logger import get_logger
from utils.validators import validate_amount, validate_block_number

logger = get_logger(__name__)


@dataclass(frozen=True)
class RewardStage:
    """Стадия эмиссии [start, end] включительно."""
    start: int
    end: int
    rate_a: int   # ESM за блок
    rate_b: int   # ESG за блок

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def overlap(self, from_block: int, to_block: int) -> int:
        """Количество блоков пересечения с [from_block, to_block]."""
        return max(0, min(to_block, self.end) - max(from_block, self.start) + 1)

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "rate_a": self.rate_a,
            "rate_b": self.rate_b,
        }


class StageSchedule:
    """
    Append-only расписание стадий наград.

    Инварианты:
    - стадии упорядочены по возрастанию
    - start каждой следующей стадии == end предыдущей + 1
    - end >= start
    """

    def __init__(self):
        self._stages: List[RewardStage] = []

    def __len__(self) -> int:
        return len(self._stages)

    @property
    def stages(self) -> Tuple[RewardStage, ...]:
        return tuple(self._stages)

    @property
    def first_start(self) -> Optional[int]:
        return self._stages[0].start if self._stages else None

    @property
    def last_end(self) -> Optional[int]:
        return self._stages[-1].end if self._stages else None

    def stage(self, index: int) -> RewardStage:
        """
        Получить стадию по индексу.

        Raises:
            UnknownStageError: если индекс вне списка
        """
        if not isinstance(index, int) or index < 0 or index >= len(self._stages):
            raise UnknownStageError(f"Stage {index} does not exist (total {len(self._stages)})")
        return self._stages[index]

    def add_stage(self, start: int, end: int, rate_a: int, rate_b: int) -> RewardStage:
        """
        Добавить стадию в конец расписания.

        Args:
            start: Первый блок стадии (включительно)
            end: Последний блок стадии (включительно)
            rate_a: Эмиссия ESM за блок (может быть 0)
            rate_b: Эмиссия ESG за блок (может быть 0)

        Returns:
            RewardStage: Добавленная стадия

        Raises:
            NotAdjacentError: start не равен end предыдущей стадии + 1
            InvertedRangeError: end < start
        """
        start = validate_block_number(start)
        end = validate_block_number(end)
        rate_a = validate_amount(rate_a)
        rate_b = validate_amount(rate_b)

        if self._stages and start != self._stages[-1].end + 1:
            raise NotAdjacentError(
                f"addStage: new start {start} should be adjacent to previous stage "
                f"(expected {self._stages[-1].end + 1})"
            )
        if end < start:
            raise InvertedRangeError(f"addStage: new end {end} shouldn't be less than start {start}")

        stage = RewardStage(start=start, end=end, rate_a=rate_a, rate_b=rate_b)
        self._stages.append(stage)

        logger.info(f"📅 Стадия #{len(self._stages) - 1}: [{start}, {end}] ESM/блок={rate_a} ESG/блок={rate_b}")
        return stage

    def total_rewards(self, from_block: int, to_block: int) -> Tuple[int, int]:
        """
        Суммарная эмиссия (ESM, ESG) за блоки [from_block, to_block] включительно.

        Вызывающий код передает (last_accrual_time + 1, now), поэтому блок
        последней синхронизации не учитывается дважды.
        """
        total_a = 0
        total_b = 0
        if to_block < from_block:
            return total_a, total_b

        for stage in self._stages:
            if stage.start > to_block:
                break
            blocks = stage.overlap(from_block, to_block)
            if blocks < 1:
                continue
            total_a = checked_add(total_a, checked_mul(blocks, stage.rate_a))
            total_b = checked_add(total_b, checked_mul(blocks, stage.rate_b))

        return total_a, total_b

    # ------------------------------------------------------------------
    # Снимок состояния для отката транзакций
    # ------------------------------------------------------------------

    def snapshot(self) -> List[RewardStage]:
        return list(self._stages)

    def restore(self, snapshot: List[RewardStage]) -> None:
        self._stages = list(snapshot)
