"""
Row Normalization

Turns the raw cell grid from the fetcher into a RecordSet: the first row
names the columns, every following row becomes one record.
"""

import logging
from typing import Any, List, Sequence

from etl.errors import DuplicateHeaderError, EmptyDataError
from etl.records import Record, RecordSet

logger = logging.getLogger(__name__)


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value)


class RowNormalizer:
    """
    Converts fetched rows into records.

    Operations:
    - Header extraction (first row)
    - Ragged row backfill (missing trailing cells become "")
    - Excess cell truncation (cells past the header width are dropped)
    - Duplicate header detection
    """

    def __init__(self, allow_duplicate_headers: bool = False):
        """
        Args:
            allow_duplicate_headers: Keep legacy "last write wins" behaviour
                instead of rejecting repeated column names
        """
        self.allow_duplicate_headers = allow_duplicate_headers

    def normalize(self, rows: Sequence[Sequence[Any]]) -> RecordSet:
        """
        Normalize raw rows into a RecordSet.

        Args:
            rows: Header row followed by data rows

        Returns:
            RecordSet in sheet row order

        Raises:
            EmptyDataError: If there is no header row or it has no cells
            DuplicateHeaderError: If a column name repeats and duplicates are not allowed
        """
        if not rows or not rows[0]:
            raise EmptyDataError("No header row found")

        headers = [_cell_text(cell) for cell in rows[0]]
        columns = self._resolve_columns(headers)

        records: List[Record] = []
        for row in rows[1:]:
            record: Record = {}
            for index, header in enumerate(headers):
                record[header] = _cell_text(row[index]) if index < len(row) else ""
            records.append(record)

        logger.info(f"Normalized {len(records)} records with {len(columns)} columns")
        logger.debug(f"Columns: {list(columns)}")

        return RecordSet(columns=columns, records=tuple(records))

    def _resolve_columns(self, headers: List[str]) -> tuple:
        seen = []
        duplicates = []
        for header in headers:
            if header in seen:
                if header not in duplicates:
                    duplicates.append(header)
            else:
                seen.append(header)

        if duplicates:
            if not self.allow_duplicate_headers:
                raise DuplicateHeaderError(duplicates)
            logger.warning(
                f"Duplicate column headers {duplicates}: the rightmost value wins"
            )

        return tuple(seen)


def normalize_rows(rows: Sequence[Sequence[Any]], allow_duplicate_headers: bool = False) -> RecordSet:
    """
    Convenience function to normalize fetched rows.

    Args:
        rows: Raw rows from the fetcher
        allow_duplicate_headers: Keep legacy "last write wins" behaviour

    Returns:
        RecordSet
    """
    normalizer = RowNormalizer(allow_duplicate_headers=allow_duplicate_headers)
    return normalizer.normalize(rows)
