"""Tests de validación de configuración de monitores."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from operating_time.monitor_config import MAX_PERIOD_SECONDS, MonitorConfig
from operating_time.units import CalculationUnit


def test_defaults():
    cfg = MonitorConfig(monitor_key="crusher")
    assert cfg.calculation_unit is CalculationUnit.SECONDS
    assert cfg.reset_period == timedelta(0)
    assert cfg.condition_filter() is None
    assert cfg.enabled is True


def test_unit_normalized():
    assert MonitorConfig(monitor_key="c", unit="HOURS").unit == "hours"
    assert MonitorConfig(monitor_key="c", unit=None).unit == "seconds"


def test_blank_series_become_none():
    cfg = MonitorConfig(monitor_key="c", condition_series="  ", status_series="")
    assert cfg.condition_series is None
    assert cfg.status_series is None


def test_condition_filter_from_max_age():
    cfg = MonitorConfig(monitor_key="c", max_condition_age_seconds=300)
    assert cfg.condition_filter() is not None


@pytest.mark.parametrize(
    "data",
    [
        {"monitor_key": ""},
        {"monitor_key": "c", "unit": "weeks"},
        {"monitor_key": "c", "reset_seconds": -1},
        {"monitor_key": "c", "max_condition_age_seconds": 0},
    ],
)
def test_invalid(data):
    with pytest.raises(ValidationError):
        MonitorConfig(**data)


@pytest.mark.parametrize(
    "data",
    [
        {"monitor_key": "c", "reset_seconds": 1e14},
        {"monitor_key": "c", "reset_seconds": float("inf")},
        {"monitor_key": "c", "reset_seconds": float("nan")},
        {"monitor_key": "c", "max_condition_age_seconds": 1e14},
        {"monitor_key": "c", "max_condition_age_seconds": float("inf")},
    ],
)
def test_periods_outside_timedelta_range_rejected(data):
    with pytest.raises(ValidationError):
        MonitorConfig(**data)


def test_largest_period_is_representable():
    cfg = MonitorConfig(
        monitor_key="c",
        reset_seconds=MAX_PERIOD_SECONDS,
        max_condition_age_seconds=MAX_PERIOD_SECONDS,
    )
    assert cfg.reset_period == timedelta(days=timedelta.max.days)
    assert cfg.condition_filter() is not None


def test_validators_use_field_validator_api():
    decorators = MonitorConfig.__pydantic_decorators__
    assert set(decorators.field_validators) == {"validate_unit", "blank_to_none"}
    assert not decorators.validators
