"""
CSV storage implementation.

Keeps every rated item as one headerless CSV record:
``name, rating, deviation, bucket``. Full saves go to a sibling ``.new`` file
that atomically replaces the live file, so an interrupted write never leaves a
half-written store behind.
"""

import csv
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from typing_extensions import TypedDict, override

from ..exceptions import StorageError, ValidationError
from ..interfaces import Storage
from ..logging_config import get_logger
from ..models import DEFAULT_BUCKET, DEFAULT_DEVIATION, DEFAULT_RATING, RatedItem

# Module-level logger
logger = get_logger("csv_storage")

FIELDS = ("name", "rating", "deviation", "bucket")


class ItemRecord(TypedDict):
    """One CSV row, as validated on load."""

    name: Annotated[str, Field(min_length=1)]
    rating: float
    deviation: Annotated[float, Field(ge=0.0, allow_inf_nan=False)]
    bucket: int


_record_adapter = TypeAdapter(ItemRecord)


def _to_row(item: RatedItem) -> list[str]:
    """Format an item as a CSV record; floats keep full precision."""
    return [item.name, repr(float(item.rating)), repr(float(item.deviation)), str(int(item.bucket))]


class CSVStorage(Storage):
    """
    Headerless CSV storage.

    Record order is not meaningful; saves write items in the order given.
    """

    path: Path

    def __init__(self, path: Path | str):
        """
        Initialize CSV storage.

        Args:
            path: CSV file holding the items
        """
        self.path = Path(path)
        logger.debug(f"CSV storage initialized: path={self.path}")

    @property
    def temp_path(self) -> Path:
        """Scratch file that replaces the live file on save."""
        return self.path.with_name(self.path.name + ".new")

    @override
    def load_items(self) -> list[RatedItem]:
        """Load all items, failing on the first bad record."""
        logger.info(f"Loading ratings from {self.path}")
        try:
            items = list[RatedItem]()
            with open(self.path, "r", encoding="utf-8", newline="") as f:
                reader = csv.reader(f)
                for row in reader:
                    if not any(cell.strip() for cell in row):
                        continue
                    items.append(self._parse_row(row, reader.line_num))
        except csv.Error as e:
            raise StorageError(f"Failed to parse {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to open file {self.path}: {e}") from e

        logger.info(f"Loaded {len(items)} items from {self.path}")
        return items

    def _parse_row(self, row: list[str], line_no: int) -> RatedItem:
        """Validate one CSV row into a RatedItem."""
        if len(row) != len(FIELDS):
            raise StorageError(
                f"{self.path}:{line_no}: expected {len(FIELDS)} fields, got {len(row)}"
            )
        try:
            record = _record_adapter.validate_python(dict(zip(FIELDS, row)))
        except PydanticValidationError as e:
            raise StorageError(f"{self.path}:{line_no}: invalid record {row!r}: {e}") from e

        return RatedItem(
            name=record["name"],
            rating=record["rating"],
            deviation=record["deviation"],
            bucket=record["bucket"],
        )

    @override
    def save_items(self, items: Sequence[RatedItem]) -> None:
        """Write a fresh copy of all items and swap it in atomically."""
        temp_path = self.temp_path
        logger.debug(f"Saving {len(items)} items to {self.path} via {temp_path}")
        try:
            with open(temp_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f, lineterminator="\n")
                writer.writerows(_to_row(item) for item in items)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.is_file():
                temp_path.unlink()
            raise StorageError(f"Failed to replace old ratings list {self.path} with new one: {e}") from e

        logger.debug(f"Successfully saved {len(items)} items to {self.path}")

    @override
    def append_item(
        self,
        name: str,
        rating: float = DEFAULT_RATING,
        deviation: float = DEFAULT_DEVIATION,
        bucket: int = DEFAULT_BUCKET,
    ) -> RatedItem:
        """Append one record, creating the file if needed."""
        if not name:
            raise ValidationError("Item name cannot be empty")
        item = RatedItem(name=name, rating=rating, deviation=deviation, bucket=bucket)

        try:
            with open(self.path, "a", encoding="utf-8", newline="") as f:
                writer = csv.writer(f, lineterminator="\n")
                writer.writerow(_to_row(item))
        except OSError as e:
            raise StorageError(f"Failed to write new row to {self.path}: {e}") from e

        logger.info(f"Added new record {item.name!r} to {self.path}")
        return item
