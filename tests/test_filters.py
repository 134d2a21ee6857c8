"""Tests de filtros de muestras de condición."""

from datetime import datetime, timedelta, timezone

from operating_time.filters import all_samples, ignore_old_samples, max_age_filter
from operating_time.samples import Quality, Sample

NOW = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)


def test_all_samples_passthrough():
    sample = Sample(NOW - timedelta(days=30), True)
    assert all_samples(sample, NOW) is sample


def test_recent_sample_kept():
    sample = Sample(NOW - timedelta(minutes=4, seconds=59), True)
    assert ignore_old_samples(sample, NOW) is sample


def test_old_sample_marked_bad(caplog):
    sample = Sample(NOW - timedelta(minutes=5), True)

    result = ignore_old_samples(sample, NOW)

    assert result.quality == Quality.BAD
    assert result.value is True
    assert result.timestamp == sample.timestamp
    assert "Ignoring old samples. Age=5.0 min" in caplog.text


def test_naive_timestamps_treated_as_utc():
    sample = Sample(NOW.replace(tzinfo=None) - timedelta(minutes=1), False)
    assert ignore_old_samples(sample, NOW).is_good


def test_max_age_filter():
    f = max_age_filter(timedelta(hours=1))
    assert f(Sample(NOW - timedelta(minutes=30), True), NOW).is_good
    assert not f(Sample(NOW - timedelta(hours=2), True), NOW).is_good
