from datetime import date, datetime

import pytest
from bson.timestamp import Timestamp

from dates import format_date, format_month_year, sort_key, to_datetime


class StoreTimestamp:
    def __init__(self, value: datetime) -> None:
        self.value = value

    def toDate(self) -> datetime:
        return self.value


def test_formats_datetime_values() -> None:
    assert format_date(datetime(2024, 3, 5, 10, 30)) == "03/05/2024"
    assert format_date(date(2024, 12, 31)) == "12/31/2024"


def test_formats_strings_and_epoch_milliseconds() -> None:
    assert format_date("2024-03-05T10:00:00Z") == "03/05/2024"
    assert format_date(0) == "01/01/1970"


def test_formats_store_timestamp_objects() -> None:
    assert format_date(StoreTimestamp(datetime(2023, 7, 9))) == "07/09/2023"
    assert format_date(Timestamp(1700000000, 1)) == "11/14/2023"


@pytest.mark.parametrize("value", ["not-a-date", "", None, True, object(), float("inf")])
def test_unusable_values_format_as_empty(value) -> None:
    assert format_date(value) == ""


def test_month_year() -> None:
    assert format_month_year(datetime(2024, 3, 5)) == "March 2024"
    assert format_month_year("garbage") == ""


def test_sort_key_orders_mixed_shapes() -> None:
    values = ["2024-01-02T00:00:00Z", datetime(2023, 1, 1), None]
    ordered = sorted(values, key=sort_key, reverse=True)
    assert ordered == ["2024-01-02T00:00:00Z", datetime(2023, 1, 1), None]
    assert to_datetime(None) is None
