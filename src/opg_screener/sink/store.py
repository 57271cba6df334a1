"""JSON result store for enriched selections."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from opg_screener.types import NewsItem, Selection, TradePlan


class DeliveryError(Exception):
    """Raised when the result file cannot be written."""


class SelectionStore:
    """Write-once JSON array of selections."""

    def __init__(self, output_path: Path) -> None:
        self._output_path = output_path

    def write(self, selections: list[Selection]) -> Path:
        """Write the whole batch at once, replacing any previous file."""
        records = [selection.to_dict() for selection in selections]
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._output_path.parent,
                prefix=f".{self._output_path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, ensure_ascii=True, indent=2)
                    f.write("\n")
                os.replace(tmp_name, self._output_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise DeliveryError(f"error_writing_selections: {exc}") from exc
        return self._output_path

    def load(self) -> list[Selection]:
        """Read a previously written batch back into selections."""
        rows = json.loads(self._output_path.read_text(encoding="utf-8"))
        if not isinstance(rows, list):
            raise ValueError("selections_file_not_array")
        return [_selection_from_dict(row) for row in rows]


def _selection_from_dict(row: dict[str, Any]) -> Selection:
    plan = TradePlan(
        entry_price=float(row["entry_price"]),
        stop_loss_price=float(row["stop_loss_price"]),
        take_profit_price=float(row["take_profit_price"]),
        shares=int(row["shares"]),
        expected_profit=float(row["expected_profit"]),
    )
    news = tuple(
        NewsItem(
            published_at=datetime.fromisoformat(item["published_at"]),
            headline=str(item["headline"]),
        )
        for item in row.get("news") or []
    )
    return Selection(symbol=str(row["symbol"]), plan=plan, news=news)
