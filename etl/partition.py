"""
Shop Partitioning

Splits one RecordSet into per-shop subsets by matching each record's
``Country`` value against the shop's allow-list.
"""

import logging
from typing import Dict, Iterable, Sequence

from config.settings import Destination
from etl.errors import MissingColumnError
from etl.records import RecordSet

logger = logging.getLogger(__name__)

COUNTRY_COLUMN = "Country"


def require_columns(record_set: RecordSet, required: Iterable[str]) -> None:
    """
    Raises:
        MissingColumnError: If any required column is absent from the header
    """
    missing = [column for column in required if column not in record_set.columns]
    if missing:
        raise MissingColumnError(missing)


def filter_for_destination(record_set: RecordSet, destination: Destination) -> RecordSet:
    """
    Return the records served by ``destination``.

    An empty allow-list serves every country. Otherwise the record's
    ``Country`` value must match an allow-list entry exactly; records
    without that key never match.
    """
    if destination.serves_all_countries:
        return record_set

    allowed = frozenset(destination.countries)
    return record_set.filter(
        lambda record: COUNTRY_COLUMN in record and record[COUNTRY_COLUMN] in allowed
    )


def partition(record_set: RecordSet, destinations: Sequence[Destination]) -> Dict[str, RecordSet]:
    """
    Filter the same source set once per destination.

    Args:
        record_set: Unfiltered records
        destinations: Shops in declaration order

    Returns:
        Mapping of destination key to its RecordSet, in declaration order.
        Outputs may overlap when allow-lists overlap.

    Raises:
        MissingColumnError: If a destination filters by country but the
            sheet has no Country column
    """
    if any(not destination.serves_all_countries for destination in destinations):
        require_columns(record_set, [COUNTRY_COLUMN])

    partitions: Dict[str, RecordSet] = {}
    for destination in destinations:
        subset = filter_for_destination(record_set, destination)
        countries = ", ".join(destination.countries) or "all countries"
        logger.info(
            f"{destination.key.upper()}: {len(subset)} of {len(record_set)} records ({countries})"
        )
        partitions[destination.key] = subset
    return partitions
