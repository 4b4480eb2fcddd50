from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from airboard.core.errors import NoData
from airboard.models.sample import Sample
from airboard.repositories.keys import days_range
from airboard.services.executor import ModeExecutor

CSV_COLUMNS = ("timestamp", "temp", "hum", "co2", "pm1", "pm25", "pm10")
CSV_SEPARATOR = ";"


def to_csv(samples: Sequence[Sample], *, separator: str = CSV_SEPARATOR) -> str:
    """Spreadsheet-friendly CSV: BOM, `;` separator, CRLF between rows, blank cells for gaps."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=separator, lineterminator="\r\n")
    writer.writerow(CSV_COLUMNS)
    for sample in samples:
        writer.writerow(
            [sample.timestamp]
            + [_cell(sample.get(column)) for column in CSV_COLUMNS[1:]]
        )
    return "\ufeff" + buffer.getvalue().removesuffix("\r\n")


def export_filename(board: str | None, day_from: str, day_to: str) -> str:
    return f"datos_{board or 'board'}_{day_from}_a_{day_to}.csv"


async def export_csv(executor: ModeExecutor, root: str, day_from: str, day_to: str) -> str:
    samples = await executor.load(root, days_range(day_from, day_to))
    if not samples:
        raise NoData("No data in the selected range")
    return to_csv(samples)


def _cell(value: float | None) -> str:
    if value is None:
        return ""
    return str(int(value)) if value.is_integer() else str(value)
