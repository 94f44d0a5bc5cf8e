"""
EasySwap Reward Pool - Export History Script

Экспорт журнала событий леджера:
- Фильтры по пулу, пользователю и типу события
- Форматы JSON и CSV
- Сводка выплат и комиссий

Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

import argparse
import csv
import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
sys.path.append(str(Path(__file__).parent.parent))

from config.constants import EXPORT_FORMATS
from config.settings import settings
from db.history_manager import HistoryManager
from db.models import DatabaseManager
from utils.logger import get_logger

logger = get_logger(__name__)

CSV_FIELDS = ["id", "kind", "pool_id", "user", "currency", "amount", "direction", "recorded_at", "payload"]


class HistoryExporter:
    """Экспортер журнала событий"""

    def __init__(self, history: Optional[HistoryManager] = None, export_dir: Optional[str] = None):
        self.history = history or HistoryManager()
        self.export_dir = export_dir or settings.export_dir
        os.makedirs(self.export_dir, exist_ok=True)

        logger.info(f"HistoryExporter инициализирован ({self.export_dir})")

    def export_events(self,
                      output_format: str = "json",
                      pool_id: Optional[int] = None,
                      user: Optional[str] = None,
                      kind: Optional[str] = None,
                      limit: Optional[int] = None) -> str:
        """
        Экспорт записей журнала в файл.

        Returns:
            str: Путь к созданному файлу
        """
        output_format = output_format.lower()
        if output_format not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {output_format}")

        rows = self.history.get_history(pool_id=pool_id, user=user, kind=kind, limit=limit)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = os.path.join(self.export_dir, f"ledger_events_{timestamp}.{output_format}")

        if output_format == "json":
            self._write_json(filepath, {
                "exported_at": datetime.now().isoformat(),
                "filters": {"pool_id": pool_id, "user": user, "kind": kind},
                "summary": self.summary(pool_id),
                "events": rows,
            })
        else:
            self._write_csv(filepath, rows)

        logger.info(f"📤 Экспортировано {len(rows)} событий: {filepath}")
        return filepath

    def summary(self, pool_id: Optional[int] = None) -> Dict[str, Dict[str, str]]:
        """Суммы выплат и комиссий (строками, uint256 не помещается в JSON number)"""
        rewards = self.history.total_rewards_paid(pool_id=pool_id)
        fees = self.history.total_fees_paid(pool_id=pool_id)
        return {
            "rewards_paid": {currency: str(amount) for currency, amount in rewards.items()},
            "fees_paid": {currency: str(amount) for currency, amount in fees.items()},
        }

    @staticmethod
    def _write_json(filepath: str, data: Dict) -> None:
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @staticmethod
    def _write_csv(filepath: str, rows: List[Dict]) -> None:
        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for row in rows:
                writer.writerow({field: row.get(field) for field in CSV_FIELDS})


def main():
    """Главная функция скрипта"""
    parser = argparse.ArgumentParser(description="Экспорт журнала EasySwap Reward Pool")

    parser.add_argument("--format",
                        choices=EXPORT_FORMATS,
                        default="json",
                        help="Формат экспорта")

    parser.add_argument("--pool-id",
                        type=int,
                        help="Только события пула")

    parser.add_argument("--user",
                        help="Только события депозитора")

    parser.add_argument("--kind",
                        help="Тип события (reward_paid, fee_paid, stake_changed, ...)")

    parser.add_argument("--limit",
                        type=int,
                        help="Лимит записей для экспорта")

    parser.add_argument("--database-url",
                        help="URL базы данных (по умолчанию из настроек)")

    args = parser.parse_args()

    try:
        exporter = HistoryExporter(HistoryManager(DatabaseManager(args.database_url)))
        file_path = exporter.export_events(
            output_format=args.format,
            pool_id=args.pool_id,
            user=args.user,
            kind=args.kind,
            limit=args.limit,
        )
        print(f"✅ Экспорт завершен: {file_path}")
        return 0
    except Exception as e:
        logger.error(f"❌ Ошибка экспорта: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
