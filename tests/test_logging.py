import io
import json
import logging

import pytest

from fleet_risk import assess_project_risk, run_monte_carlo_simulation
from fleet_risk.core.logging import (
    JSONFormatter,
    LoggingConfig,
    current_run_context,
    get_logger,
    run_context,
    setup_logging,
)


@pytest.fixture
def captured_logs():
    setup_logging()
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    try:
        yield buffer
    finally:
        root_logger.removeHandler(handler)


def _payloads(buffer):
    lines = [line.strip() for line in buffer.getvalue().splitlines() if line.strip()]
    assert lines, "No JSON log output captured"
    return [json.loads(line) for line in lines]


def test_setup_logging_emits_json(captured_logs):
    get_logger(__name__).info("test_event", foo="bar")

    payload = _payloads(captured_logs)[-1]
    assert payload["event"] == "test_event"
    assert payload["foo"] == "bar"
    assert payload["level"] == "info"
    assert payload["logger"] == __name__


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first.normalized_level == second.normalized_level

    handlers = logging.getLogger().handlers
    assert handlers, "Root logger has no handlers"
    assert any(isinstance(handler.formatter, JSONFormatter) for handler in handlers)


def test_stream_must_be_stdout_or_stderr(monkeypatch):
    monkeypatch.setenv("LOG_STREAM", "stdout")
    assert LoggingConfig().stream == "stdout"

    monkeypatch.setenv("LOG_STREAM", "/var/log/fleet.log")
    with pytest.raises(ValueError):
        LoggingConfig()


def test_bound_fields_and_run_context_are_merged(captured_logs):
    with run_context(run_id="run-42"):
        logger = get_logger(__name__).bind(project="Harbour Tower")
        logger.info("simulation_completed", mean_cost=125.0)

    payload = _payloads(captured_logs)[-1]
    assert payload["run_id"] == "run-42"
    assert payload["project"] == "Harbour Tower"
    assert payload["mean_cost"] == 125.0


def test_run_context_nests_and_restores():
    with run_context(run_id="outer", seed=1):
        with run_context(seed=2) as inner:
            assert inner == {"run_id": "outer", "seed": 2}
        assert current_run_context() == {"run_id": "outer", "seed": 1}

    assert current_run_context() == {}


def test_exceptions_are_rendered(captured_logs):
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        get_logger(__name__).exception("run_failed")

    payload = _payloads(captured_logs)[-1]
    assert payload["level"] == "error"
    assert "RuntimeError: boom" in payload["exc_info"]


def test_simulation_records_carry_run_id_and_seed(captured_logs, small_project, drilling_tool):
    run_monte_carlo_simulation(small_project, [drilling_tool], {"iterations": 20}, seed=7)

    completed = [p for p in _payloads(captured_logs) if p["event"] == "simulation_completed"]
    assert len(completed) == 1
    assert completed[0]["seed"] == 7
    assert len(completed[0]["run_id"]) == 12
    assert current_run_context() == {}


def test_simulation_seed_falls_back_to_settings(monkeypatch, captured_logs, small_project, drilling_tool):
    monkeypatch.setenv("FLEET_RISK_RANDOM_SEED", "11")

    run_monte_carlo_simulation(small_project, [drilling_tool], {"iterations": 5})

    completed = [p for p in _payloads(captured_logs) if p["event"] == "simulation_completed"]
    assert completed[-1]["seed"] == 11


def test_each_assessment_gets_its_own_run_id(captured_logs, small_project, drilling_tool):
    assess_project_risk(small_project, [drilling_tool])
    assess_project_risk(small_project, [drilling_tool])

    run_ids = {p["run_id"] for p in _payloads(captured_logs) if p["event"] == "risk_profile_assessed"}
    assert len(run_ids) == 2
