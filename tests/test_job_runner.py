"""Tests del job batch de tiempo de operación (SQLite en archivo)."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, text

from common import db as common_db
from common.config import Settings
from jobs.operating_time.cli import main
from jobs.operating_time.config import JobConfig
from jobs.operating_time.db_queries import list_monitor_rows, upsert_monitor
from jobs.operating_time import runner
from jobs.operating_time.runner import build_monitor, run_once
from operating_time.errors import MonitorConfigError
from operating_time.monitor_config import MonitorConfig
from operating_time.samples import Sample, SampleType
from operating_time.state_codec import decode
from operating_time.state_models import TimeState
from operating_time.stores.sql import SqlSampleStream, ensure_schema

T0 = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def make_settings(**overrides) -> Settings:
    values = dict(
        db_host="localhost", db_port=1434, db_user="sa", db_password="",
        db_name="test", odbc_driver="ODBC Driver 17 for SQL Server", db_url=None,
        log_level="INFO", default_unit="seconds", reset_period_seconds=0.0,
        max_condition_age_seconds=None, parallel_workers=1,
    )
    values.update(overrides)
    return Settings(**values)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "ot.db"


@pytest.fixture
def engine(db_path):
    eng = create_engine(
        f"sqlite:///{db_path}", future=True, connect_args={"check_same_thread": False, "timeout": 30},
    )
    with eng.begin() as conn:
        ensure_schema(conn)
    yield eng
    eng.dispose()


@pytest.fixture
def crusher(engine) -> MonitorConfig:
    """Monitor en horas con 1 h de gracia y condición verdadera desde T0."""
    monitor = MonitorConfig(
        monitor_key="crusher",
        condition_series="crusher:running",
        status_series="crusher:status",
        output_series="crusher:hours",
        unit="hours",
        reset_seconds=3600,
    )
    with engine.begin() as conn:
        upsert_monitor(conn, monitor)
        SqlSampleStream(conn, "crusher:running", SampleType.BOOLEAN).write(Sample(at(0), True))
    return monitor


def read(engine, series_id, sample_type, time):
    with engine.connect() as conn:
        return SqlSampleStream(conn, series_id, sample_type).latest_at_or_before(time)


# =============================================================================
# RUN ONCE
# =============================================================================

class TestRunOnce:

    def test_evaluates_and_persists(self, engine, crusher):
        summary = run_once(JobConfig(at=at(1800)), engine=engine, settings=make_settings())

        assert (summary.ok, summary.failed, summary.skipped) == (1, 0, 0)
        assert summary.results["crusher"].value == pytest.approx(0.5)
        assert read(engine, "crusher:hours", SampleType.DOUBLE, at(1800)).value == pytest.approx(0.5)
        status = read(engine, "crusher:status", SampleType.STRING, at(1800))
        assert decode(status.value) == TimeState.operating(0.0, at(0))

    def test_state_carried_across_runs(self, engine, crusher):
        settings = make_settings()
        run_once(JobConfig(at=at(1800)), engine=engine, settings=settings)

        with engine.begin() as conn:
            SqlSampleStream(conn, "crusher:running", SampleType.BOOLEAN).write(Sample(at(3600), False))

        held = run_once(JobConfig(at=at(5400)), engine=engine, settings=settings)
        assert held.results["crusher"].value == pytest.approx(1.0)

        expired = run_once(JobConfig(at=at(7300)), engine=engine, settings=settings)
        assert expired.results["crusher"].state == TimeState.reset(at(7200))
        assert expired.results["crusher"].value == 0.0

    def test_invalid_monitor_skipped(self, engine, crusher):
        with engine.begin() as conn:
            conn.execute(text("""
                INSERT INTO ot_monitors (monitor_key, condition_series, status_series,
                    output_series, unit, reset_seconds, max_condition_age_seconds, enabled)
                VALUES ('broken', 'x', 'y', NULL, 'weeks', 0, NULL, 1)
            """))

        summary = run_once(JobConfig(at=at(60)), engine=engine, settings=make_settings())

        assert summary.ok == 1
        assert summary.skipped == 1
        assert "broken" in summary.errors

    def test_disabled_and_filtered_monitors(self, engine, crusher):
        with engine.begin() as conn:
            upsert_monitor(conn, MonitorConfig(monitor_key="idle", enabled=False))
            upsert_monitor(conn, MonitorConfig(monitor_key="pump", condition_series="pump:running"))
            assert [r["monitor_key"] for r in list_monitor_rows(conn)] == ["crusher", "pump"]

        summary = run_once(JobConfig(at=at(60), monitor_key="pump"), engine=engine, settings=make_settings())

        assert list(summary.results) == ["pump"]
        assert {i.code for i in summary.results["pump"].issues} == {"missing_status_store"}

    def test_out_of_range_reset_period_skipped(self, engine, crusher):
        with engine.begin() as conn:
            conn.execute(text("""
                INSERT INTO ot_monitors (monitor_key, condition_series, status_series,
                    output_series, unit, reset_seconds, max_condition_age_seconds, enabled)
                VALUES ('forever', 'crusher:running', 'forever:status', NULL, 'seconds', 1e14, NULL, 1)
            """))

        summary = run_once(JobConfig(at=at(60)), engine=engine, settings=make_settings())

        assert (summary.ok, summary.failed, summary.skipped) == (1, 0, 1)
        assert "forever" in summary.errors
        assert read(engine, "forever:status", SampleType.STRING, at(60)) is None

    def test_monitor_locks_released_after_run(self, engine, crusher):
        with engine.begin() as conn:
            for n in range(3):
                upsert_monitor(conn, MonitorConfig(monitor_key=f"m{n}", condition_series="crusher:running"))

        run_once(JobConfig(at=at(60), workers=3), engine=engine, settings=make_settings())
        run_once(JobConfig(at=at(120), workers=3), engine=engine, settings=make_settings())

        assert runner._monitor_locks == {}

    def test_parallel_workers(self, engine, crusher):

        with engine.begin() as conn:
            for n in range(5):
                upsert_monitor(conn, MonitorConfig(
                    monitor_key=f"m{n}", condition_series="crusher:running",
                    status_series=f"m{n}:status",
                ))

        summary = run_once(JobConfig(at=at(120), workers=4), engine=engine, settings=make_settings())

        assert summary.ok == 6
        assert summary.results["m3"].value == 120.0


class TestBuildMonitor:

    def test_null_columns_use_settings_defaults(self):
        settings = make_settings(default_unit="minutes", reset_period_seconds=900,
                                 max_condition_age_seconds=300)
        monitor = build_monitor({"monitor_key": "c", "unit": None, "reset_seconds": None}, settings)

        assert monitor.unit == "minutes"
        assert monitor.reset_seconds == 900
        assert monitor.max_condition_age_seconds == 300

    def test_invalid_row_raises(self):
        with pytest.raises(MonitorConfigError) as exc:
            build_monitor({"monitor_key": "c", "reset_seconds": -5}, make_settings())
        assert exc.value.monitor_key == "c"

    @pytest.mark.parametrize("reset_seconds", [1e14, float("inf")])
    def test_reset_period_beyond_timedelta_raises(self, reset_seconds):
        with pytest.raises(MonitorConfigError):
            build_monitor({"monitor_key": "c", "reset_seconds": reset_seconds}, make_settings())


# =============================================================================
# CLI
# =============================================================================

class TestCli:

    @pytest.fixture
    def cli_env(self, monkeypatch, tmp_path, db_path):
        monkeypatch.setenv("OT_ENV_FILE", str(tmp_path / "missing.env"))
        monkeypatch.setenv("DB_URL", f"sqlite:///{db_path}")
        common_db.reset_engine()
        yield
        common_db.reset_engine()

    def test_main_runs_single_evaluation(self, cli_env, engine, crusher):
        assert main(["--at", "2026-01-05T09:00:00Z"]) == 0
        assert read(engine, "crusher:hours", SampleType.DOUBLE, at(3600)).value == pytest.approx(1.0)

    def test_invalid_at_is_usage_error(self, cli_env, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--at", "not-a-date"])

        assert exc.value.code == 2
        assert "not-a-date" in capsys.readouterr().err

    def test_at_defaults_to_now(self, cli_env, engine, crusher):
        assert main([]) == 0
