"""Unit tests for datetime utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from src.utils.datetime_utils import parse_iso_timestamp, to_iso_timestamp, utc_now


class TestDatetimeUtils:
    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None

    def test_to_iso_timestamp_millisecond_z(self):
        value = datetime(2025, 3, 1, 18, 4, 5, 123456, tzinfo=timezone.utc)
        assert to_iso_timestamp(value) == "2025-03-01T18:04:05.123Z"

    def test_to_iso_timestamp_converts_offsets(self):
        value = datetime(2025, 3, 1, 20, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso_timestamp(value) == "2025-03-01T18:00:00.000Z"

    def test_naive_values_treated_as_utc(self):
        assert to_iso_timestamp(datetime(2025, 1, 1)) == "2025-01-01T00:00:00.000Z"

    def test_parse_accepts_z_suffix(self):
        parsed = parse_iso_timestamp("2025-03-01T18:04:05.123Z")
        assert parsed.tzinfo == timezone.utc
        assert parsed.microsecond == 123000

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_iso_timestamp("yesterday")
