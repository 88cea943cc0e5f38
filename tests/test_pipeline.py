"""Tests for series normalization and record imports."""

from datetime import date, datetime, timezone

import pytest

from pet_health.models import ActiveLevel, DataStatus, TrendLabel, VitalStatus
from pet_health.pipeline import day_window, local_today, normalize_series, override_from_records
from pet_health.row_accessor import RawSeries


class TestDates:
    @pytest.mark.unit
    def test_local_today_follows_timezone(self):
        moment = datetime(2024, 6, 15, 20, 0, tzinfo=timezone.utc)

        assert local_today(moment, "UTC") == date(2024, 6, 15)
        assert local_today(moment, "Asia/Shanghai") == date(2024, 6, 16)

    @pytest.mark.unit
    def test_local_today_accepts_naive_utc(self):
        assert local_today(datetime(2024, 6, 15, 23, 30), "UTC") == date(2024, 6, 15)

    @pytest.mark.unit
    def test_day_window_spans_one_local_day(self):
        start, end = day_window(date(2024, 6, 15), "Asia/Shanghai")

        assert start.isoformat() == "2024-06-15T00:00:00+08:00"
        assert (end - start).total_seconds() == 86400


class TestNormalizeSeries:
    @pytest.mark.unit
    def test_live_fixture_end_to_end(self, tracker_series, now):
        report = normalize_series(tracker_series, "221", now=now)

        assert report.report_date == date(2024, 6, 15)
        assert report.pet_id == "221"
        assert report.species_id == 1

        assert report.activity.steps == 5000
        assert report.activity.completion_rate == 0.5
        assert report.activity.active_level == ActiveLevel.NORMAL
        assert report.activity.stride == 0.45

        assert report.vitals.avg_temp == 38.5
        assert report.vitals.avg_pressure == 1013
        assert report.vitals.avg_height == 13.0
        assert report.vitals.status == VitalStatus.NORMAL

        assert report.device.battery == 3.81
        assert report.device.rsrp == -75
        assert report.device.data_status == DataStatus.NORMAL

        assert report.trend.vs_yesterday == 0.0
        assert report.trend.vs_7_day_avg == -0.09
        assert report.trend.trend_label == TrendLabel.STABLE

        assert report.coordinates == [(31.2310, 121.4740), (31.2300, 121.4730)]

    @pytest.mark.unit
    def test_stale_device_is_offline(self, tracker_series):
        later = datetime(2024, 6, 15, 13, 0, tzinfo=timezone.utc)
        report = normalize_series(tracker_series, "221", now=later)

        assert report.device.data_status == DataStatus.OFFLINE

    @pytest.mark.unit
    def test_rows_without_usable_fields_still_normalize(self, now):
        series = RawSeries(columns=["firmware"], values=[["v1"]])
        report = normalize_series(series, "105", now=now)

        assert report.activity.steps == 0
        assert report.vitals.avg_temp == 38.5
        assert report.device.last_seen == now
        assert len(report.coordinates) == 1


class TestOverrideFromRecords:
    @pytest.mark.unit
    def test_records_become_camel_case_partial(self, now):
        records = [
            {"tracker_id": "105", "step": 100, "temp": 38.0, "lat": 31.2, "lng": 121.4},
            {"tracker_id": "105", "step": 340, "temp": 39.0, "lat": 0, "lng": 0},
            {"tracker_id": "105", "step": 90},
        ]
        override = override_from_records(records, now=now)

        assert override["petId"] == "105"
        assert "speciesId" not in override
        assert override["activity"]["steps"] == 250
        assert override["activity"]["activeLevel"] == "LOW"
        assert override["vitals"]["avgTemp"] == 38.5
        assert override["coordinates"] == [[31.2, 121.4]]

    @pytest.mark.unit
    def test_localized_headers(self, now):
        records = [{"步数": "1200", "体温": "38.2"}, {"步数": "5200", "体温": "38.4"}]
        override = override_from_records(records, now=now)

        assert override["activity"]["steps"] == 4000
        assert override["vitals"]["avgTemp"] == 38.3
        assert "coordinates" not in override
        assert "petId" not in override

    @pytest.mark.unit
    def test_empty_records(self):
        assert override_from_records([]) == {}
