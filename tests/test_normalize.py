from datetime import date, datetime, timedelta, timezone

import pytest

from timebank.services.normalize import (
    format_date_iso, month_bounds, normalize_tags, parse_month, to_utc_date, week_start_for,
)


class TestNormalizeTags:
    def test_trims_lowercases_and_dedupes(self):
        assert normalize_tags(["  Dev  ", "DEV", "design"]) == ["dev", "design"]

    def test_drops_empty_tags(self):
        assert normalize_tags(["dev", "", "   ", "design"]) == ["dev", "design"]

    def test_keeps_first_seen_order(self):
        assert normalize_tags(["b", "A", "a", "B", "c"]) == ["b", "a", "c"]

    def test_caps_at_ten(self):
        tags = [f"tag{i}" for i in range(15)]
        assert normalize_tags(tags) == [f"tag{i}" for i in range(10)]

    def test_duplicates_do_not_count_towards_cap(self):
        tags = ["x", "X", " x "] + [f"t{i}" for i in range(10)]
        result = normalize_tags(tags)
        assert len(result) == 10
        assert result[0] == "x"

    @pytest.mark.parametrize("tags", [
        [],
        ["  Dev  ", "DEV", "design"],
        ["Ünïcode", "ünïcode", " spaced tag "],
        [f"T{i}" for i in range(20)],
    ])
    def test_idempotent(self, tags):
        once = normalize_tags(tags)
        assert normalize_tags(once) == once
        assert len(once) <= 10


class TestWeekStart:
    def test_wednesday_snaps_to_monday(self):
        assert week_start_for("2025-01-22") == date(2025, 1, 20)

    def test_sunday_belongs_to_previous_monday(self):
        assert week_start_for("2025-01-26") == date(2025, 1, 20)
        assert week_start_for("2026-02-01") == date(2026, 1, 26)

    def test_monday_is_fixed_point(self):
        assert week_start_for(date(2025, 1, 20)) == date(2025, 1, 20)

    def test_idempotent_across_two_weeks(self):
        start = date(2024, 12, 23)
        for offset in range(14):
            day = start + timedelta(days=offset)
            monday = week_start_for(day)
            assert monday.weekday() == 0
            assert week_start_for(monday) == monday
            assert 0 <= (day - monday).days <= 6

    def test_aware_datetime_uses_utc_calendar_day(self):
        # Monday 08:00 in Tokyo is still Sunday in UTC
        tokyo = timezone(timedelta(hours=9))
        moment = datetime(2025, 1, 20, 8, 0, tzinfo=tokyo)
        assert to_utc_date(moment) == date(2025, 1, 19)
        assert week_start_for(moment) == date(2025, 1, 13)

    def test_plain_date_string_is_not_shifted(self):
        assert to_utc_date("2025-03-31") == date(2025, 3, 31)

    def test_rejects_malformed_string(self):
        with pytest.raises(ValueError):
            week_start_for("2025/01/22")

    def test_format_date_iso(self):
        assert format_date_iso(datetime(2025, 1, 22, 0, 0, tzinfo=timezone.utc)) == "2025-01-22"


class TestMonths:
    def test_parse_month(self):
        assert parse_month("2025-07") == date(2025, 7, 1)

    @pytest.mark.parametrize("value", ["2025-13", "2025-7", "July", "2025-07-01"])
    def test_parse_month_rejects(self, value):
        with pytest.raises(ValueError):
            parse_month(value)

    def test_month_bounds_wraps_december(self):
        assert month_bounds(date(2025, 12, 1)) == (date(2025, 12, 1), date(2026, 1, 1))
        assert month_bounds(date(2025, 2, 14)) == (date(2025, 2, 1), date(2025, 3, 1))
