"""Tests for volume.py - weekly gym volume."""

from datetime import date, datetime, timezone

from workout_sync.volume import week_start, weekly_volume
from tests.conftest import gym_record, run_record

# Wednesday; its week starts Monday 2026-02-16
NOW = datetime(2026, 2, 18, 12, 0, tzinfo=timezone.utc)


class TestWeekStart:
    def test_monday(self):
        assert week_start(datetime(2026, 2, 16, 0, 0, tzinfo=timezone.utc)) == date(2026, 2, 16)

    def test_sunday_belongs_to_previous_week(self):
        assert week_start(datetime(2026, 2, 15, 23, 59, tzinfo=timezone.utc)) == date(2026, 2, 9)


class TestWeeklyVolume:
    def test_empty_weeks_included_oldest_first(self):
        weeks = weekly_volume([], NOW, weeks=3)
        assert [w.week_start for w in weeks] == [date(2026, 2, 2), date(2026, 2, 9), date(2026, 2, 16)]
        assert all(w.volume_kg == 0.0 and w.workout_count == 0 for w in weeks)

    def test_zero_weeks(self):
        assert weekly_volume([], NOW, weeks=0) == []

    def test_sums_gym_sets(self, bench_records):
        weeks = weekly_volume(bench_records, NOW, weeks=3)
        by_start = {w.week_start: w for w in weeks}
        # 2026-02-01 is a Sunday, so it falls in the week of 2026-01-26 (out of range)
        assert by_start[date(2026, 2, 2)].volume_kg == 285.0
        assert by_start[date(2026, 2, 2)].set_count == 1
        assert by_start[date(2026, 2, 2)].workout_count == 1
        assert by_start[date(2026, 2, 9)].volume_kg == 0.0

    def test_ignores_non_gym_and_zero_rep_sets(self):
        records = [
            gym_record("a", "2026-02-17T10:00:00Z", [("Press", [40, 50], [10, 0])]),
            run_record("r", "2026-02-17T07:00:00Z"),
        ]
        current = weekly_volume(records, NOW, weeks=1)[0]
        assert current.volume_kg == 400.0
        assert current.set_count == 1
        assert current.workout_count == 1

    def test_skips_unparseable_dates(self):
        records = [gym_record("a", "not a date", [("Press", [40], [10])])]
        assert weekly_volume(records, NOW, weeks=1)[0].volume_kg == 0.0
