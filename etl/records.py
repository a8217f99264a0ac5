"""
Record Model

A Record is one spreadsheet row as an ordered ``{column: value}`` dict.
A RecordSet keeps the records of one fetch in sheet order together with
the header columns they were built from.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, Tuple

Record = Dict[str, str]


@dataclass(frozen=True)
class RecordSet:
    """Immutable, ordered collection of records sharing one column schema."""

    columns: Tuple[str, ...]
    records: Tuple[Record, ...] = ()

    @classmethod
    def from_records(cls, records: Iterable[Record]) -> "RecordSet":
        """Build a set from plain dicts, taking columns from the first record."""
        records = tuple(records)
        columns = tuple(records[0].keys()) if records else ()
        return cls(columns=columns, records=records)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    def filter(self, predicate: Callable[[Record], bool]) -> "RecordSet":
        """Return the records matching ``predicate``, keeping order and columns."""
        return RecordSet(
            columns=self.columns,
            records=tuple(record for record in self.records if predicate(record)),
        )
