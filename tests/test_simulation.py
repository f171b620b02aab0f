import logging

import pytest
from rich.logging import RichHandler

from schedsim.config import SimulationConfig
from schedsim.errors import InvalidConfiguration
from schedsim.log import setup_logging
from schedsim.models import Process
from schedsim.simulation import parse_selection, simulate, simulate_many


def _procs():
    return [
        Process(2, arrival=1, burst=4, priority=1),
        Process(1, arrival=0, burst=8, priority=2),
    ]


def test_parse_selection_all():
    everything = ["fcfs", "srtf", "priority", "rr"]
    assert parse_selection("") == everything
    assert parse_selection("0") == everything
    assert parse_selection(" ALL ") == everything
    assert parse_selection(None) == everything


def test_parse_selection_numbers_and_names():
    assert parse_selection("4 1") == ["rr", "fcfs"]
    assert parse_selection("srtf, pp,round-robin") == ["srtf", "priority", "rr"]
    assert parse_selection("1 1 fcfs") == ["fcfs"]


def test_parse_selection_unknown():
    with pytest.raises(InvalidConfiguration):
        parse_selection("1 7")


def test_simulate_orders_report_by_pid():
    result = simulate(_procs(), "srtf")
    assert [m.pid for m in result.processes] == [1, 2]
    assert result.quantum is None


def test_simulate_ignores_quantum_for_non_rr():
    result = simulate(_procs(), "FCFS", quantum=0)
    assert result.algorithm == "FCFS"


def test_simulate_rejects_bad_quantum():
    with pytest.raises(InvalidConfiguration):
        simulate(_procs(), "rr", quantum=0)


@pytest.mark.parametrize(
    "processes",
    [
        [],
        [Process(1, 0, 2), Process(1, 1, 2)],
        [Process(0, 0, 2)],
        [Process(1, -1, 2)],
        [Process(1, 0, 0)],
    ],
)
def test_simulate_rejects_invalid_process_sets(processes):
    with pytest.raises(InvalidConfiguration):
        simulate(processes, "fcfs")


def test_simulate_many_runs_independently():
    procs = _procs()
    results = simulate_many(procs, ["fcfs", "srtf", "priority", "rr"], quantum=2)

    assert [r.algorithm for r in results] == ["FCFS", "SRTF", "Preemptive Priority", "Round Robin"]
    for r in results:
        assert r.timeline.count(1) == 8
        assert r.timeline.count(2) == 4
    assert results[0].metrics_for(2).completion_time == 12
    assert results[1].metrics_for(2).completion_time == 5


def test_simulate_many_validates_quantum_up_front():
    with pytest.raises(InvalidConfiguration):
        simulate_many(_procs(), ["fcfs", "rr"], quantum=-3)


def test_config_defaults_validate():
    config = SimulationConfig().validate()
    assert config.quantum == 2
    assert config.algorithms == ["fcfs", "srtf", "priority", "rr"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"algorithms": []},
        {"algorithms": ["lottery"]},
        {"quantum": 0},
        {"log_level": "chatty"},
    ],
)
def test_config_rejects(kwargs):
    with pytest.raises(InvalidConfiguration):
        SimulationConfig(**kwargs).validate()


def test_config_zero_quantum_allowed_without_rr():
    SimulationConfig(algorithms=["fcfs"], quantum=0).validate()


def test_config_from_env():
    config = SimulationConfig.from_env({"SCHEDSIM_QUANTUM": "5", "SCHEDSIM_LOG_LEVEL": "debug"})
    assert config.quantum == 5
    assert config.log_level == "debug"
    config.validate()

    with pytest.raises(InvalidConfiguration):
        SimulationConfig.from_env({"SCHEDSIM_QUANTUM": "two"})


def test_setup_logging_is_idempotent():
    logger = setup_logging("debug")
    setup_logging(logging.INFO)
    assert logger.level == logging.INFO
    assert sum(1 for h in logger.handlers if isinstance(h, RichHandler)) == 1
