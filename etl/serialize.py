"""
Record Serialization

Renders a RecordSet as pretty JSON, compact JSON and CSV text.
All functions are pure and deterministic.
"""

import json
from typing import Iterable, List

from etl.records import Record, RecordSet

CSV_SPECIAL_CHARS = (",", '"', "\n")


def _as_list(records: Iterable[Record]) -> List[Record]:
    return [dict(record) for record in records]


def to_pretty_json(records: Iterable[Record]) -> str:
    """JSON array of record objects, indented by two spaces."""
    return json.dumps(_as_list(records), indent=2, ensure_ascii=False)


def to_compact_json(records: Iterable[Record]) -> str:
    """JSON array of record objects without any whitespace."""
    return json.dumps(_as_list(records), separators=(",", ":"), ensure_ascii=False)


def quote_csv_field(value: str) -> str:
    """
    Quote a field only if it contains a comma, a double quote or a newline.

    Inner double quotes are doubled.
    """
    if any(char in value for char in CSV_SPECIAL_CHARS):
        return '"{}"'.format(value.replace('"', '""'))
    return value


def to_csv(records: Iterable[Record]) -> str:
    """
    Render records as CSV text.

    The header uses the key order of the first record. Lines are joined
    with ``\\n`` and there is no trailing newline. An empty input renders
    as an empty string, without a header line.
    """
    records = list(records)
    if not records:
        return ""

    headers = list(records[0].keys())
    lines = [",".join(quote_csv_field(header) for header in headers)]
    for record in records:
        lines.append(
            ",".join(quote_csv_field(record.get(header) or "") for header in headers)
        )
    return "\n".join(lines)


FORMATS = (
    (".json", to_pretty_json),
    (".min.json", to_compact_json),
    (".csv", to_csv),
)


def serialize_all(record_set: RecordSet) -> List[tuple]:
    """Return ``(suffix, content)`` pairs for every output format, in write order."""
    return [(suffix, render(record_set)) for suffix, render in FORMATS]
