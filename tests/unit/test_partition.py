from __future__ import annotations

import pytest

from config.settings import Destination
from etl.errors import MissingColumnError
from etl.partition import filter_for_destination, partition, require_columns
from etl.records import RecordSet
from etl.transform import normalize_rows


@pytest.fixture()
def nordic_set() -> RecordSet:
    return normalize_rows([
        ["Company", "Country"],
        ["Acme", "DK"],
        ["Beta", "NO"],
        ["Gamma", "SE"],
        ["Delta", "dk"],
    ])


def test_empty_allow_list_is_identity(nordic_set):
    result = filter_for_destination(nordic_set, Destination(key="int"))
    assert result.records == nordic_set.records
    assert result.columns == nordic_set.columns


def test_allow_list_membership(nordic_set):
    result = filter_for_destination(nordic_set, Destination(key="nordic", countries=("DK", "SE")))
    assert [r["Company"] for r in result] == ["Acme", "Gamma"]


def test_match_is_case_sensitive(nordic_set):
    result = filter_for_destination(nordic_set, Destination(key="dk", countries=("DK",)))
    assert [r["Company"] for r in result] == ["Acme"]


def test_record_without_country_never_matches():
    record_set = RecordSet.from_records([
        {"Company": "Acme", "Country": "DK"},
        {"Company": "Nowhere"},
    ])
    result = filter_for_destination(record_set, Destination(key="dk", countries=("DK", "SE")))
    assert [r["Company"] for r in result] == ["Acme"]


def test_record_without_country_kept_for_all_countries():
    record_set = RecordSet.from_records([{"Company": "Nowhere"}])
    result = filter_for_destination(record_set, Destination(key="int"))
    assert len(result) == 1


def test_partition_filters_same_source_per_destination(nordic_set):
    shops = [
        Destination(key="dk", countries=("DK",)),
        Destination(key="nordic", countries=("DK", "NO", "SE")),
        Destination(key="fi", countries=("FI",)),
    ]
    result = partition(nordic_set, shops)
    assert list(result) == ["dk", "nordic", "fi"]
    assert [r["Company"] for r in result["dk"]] == ["Acme"]
    assert [r["Company"] for r in result["nordic"]] == ["Acme", "Beta", "Gamma"]
    assert len(result["fi"]) == 0


def test_partition_requires_country_column_when_filtering():
    record_set = normalize_rows([["Company", "City"], ["Acme", "Aarhus"]])
    with pytest.raises(MissingColumnError) as e:
        partition(record_set, [Destination(key="dk", countries=("DK",))])
    assert e.value.missing == ["Country"]


def test_partition_without_filters_needs_no_country_column():
    record_set = normalize_rows([["Company", "City"], ["Acme", "Aarhus"]])
    result = partition(record_set, [Destination(key="int")])
    assert len(result["int"]) == 1


def test_require_columns_passes_when_present(nordic_set):
    require_columns(nordic_set, ["Company", "Country"])
