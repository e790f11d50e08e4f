from __future__ import annotations

import csv
import logging
import time
from pathlib import Path
from typing import Final, Protocol, TextIO

from botocore.exceptions import ClientError

from .models import UpsetRecord

log: Final = logging.getLogger("upset-finder")


class UpsetSink(Protocol):
    def write(self, record: UpsetRecord) -> None: ...

    def close(self) -> None: ...


class CsvUpsetSink:
    """Append upset rows to a CSV file, flushing after every row."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle: TextIO = self.path.open("w+", encoding="utf-8", newline="")
        self._writer = csv.writer(self._handle, quoting=csv.QUOTE_NONNUMERIC)
        self.count = 0

    @classmethod
    def in_directory(cls, directory: Path | str) -> CsvUpsetSink:
        return cls(Path(directory) / f"{int(time.time() * 1000)}.csv")

    def write(self, record: UpsetRecord) -> None:
        self._writer.writerow(record.as_row())
        self._handle.flush()
        self.count += 1

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()


class DynamoUpsetStorage:
    def __init__(self, table) -> None:
        self._table = table

    def ensure_table(self) -> None:
        if self._table is None:
            raise RuntimeError("Upset table is not configured")

    def write(self, record: UpsetRecord) -> None:
        self.save_upset(record)

    def close(self) -> None:
        return None

    def save_upset(self, record: UpsetRecord) -> None:
        self.ensure_table()
        try:
            self._table.put_item(Item=record.to_item())
        except ClientError as exc:
            log.error("Failed to store upset %s: %s", record.set_id, exc)
            raise


__all__ = ["CsvUpsetSink", "DynamoUpsetStorage", "UpsetSink"]
