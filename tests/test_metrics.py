import pytest

from schedsim.metrics import compute_report, count_context_switches, summarize_process_metrics
from schedsim.models import IDLE, UNSET, Process, timeline_to_slices


def _finished(pid, arrival, burst, start, completion, response=UNSET):
    p = Process(pid, arrival=arrival, burst=burst)
    p.start = start
    p.completion = completion
    p.response = response
    p.remaining = 0
    return p


def test_context_switches_ignore_idle_to_process():
    assert count_context_switches([]) == 0
    assert count_context_switches([IDLE, IDLE, 1, 1]) == 0
    assert count_context_switches([1, 1, 2, 2, 1]) == 2
    # leaving a process for idle counts once; resuming from idle does not
    assert count_context_switches([1, IDLE, IDLE, 2]) == 1


def test_compute_report_identities():
    procs = [
        _finished(1, arrival=0, burst=3, start=0, completion=3, response=0),
        _finished(2, arrival=1, burst=2, start=5, completion=7),
    ]
    timeline = [1, 1, 1, IDLE, IDLE, 2, 2]

    metrics, system = compute_report(procs, timeline)

    m1, m2 = metrics
    assert (m1.turnaround_time, m1.waiting_time, m1.response_time) == (3, 0, 0)
    # response falls back to start - arrival when the policy left it unset
    assert (m2.turnaround_time, m2.waiting_time, m2.response_time) == (6, 4, 4)

    assert system.makespan == 7
    assert system.cpu_busy_time == 5
    assert system.cpu_utilization == pytest.approx(5 / 7 * 100)
    assert system.throughput == pytest.approx(2 / 7)
    assert system.context_switches == 1
    assert system.avg_waiting == pytest.approx(2.0)
    assert system.avg_turnaround == pytest.approx(4.5)
    assert system.avg_response == pytest.approx(2.0)

    # the calculator only reads the run's records
    assert procs[1].response == UNSET
    assert (procs[1].waiting, procs[1].turnaround) == (0, 0)


def test_compute_report_empty_timeline_floors_length():
    metrics, system = compute_report([], [])
    assert metrics == []
    assert system.throughput == 0.0
    assert system.cpu_utilization == 0.0
    assert system.avg_waiting == 0.0


def test_summarize_empty():
    assert summarize_process_metrics([]) == {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}


def test_process_reset_clears_run_state():
    p = _finished(1, arrival=2, burst=4, start=3, completion=9, response=1)
    p.waiting = 3
    p.turnaround = 7

    p.reset()

    assert p.remaining == 4
    assert (p.start, p.completion, p.response) == (UNSET, UNSET, UNSET)
    assert (p.waiting, p.turnaround) == (0, 0)
    assert not p.finished


def test_snapshot_is_independent():
    p = Process(1, arrival=0, burst=5, priority=2)
    copy = p.snapshot()
    copy.remaining = 1
    copy.dispatch(4)

    assert p.remaining == 5
    assert p.start == UNSET
    assert copy == p  # identity fields only


def test_dispatch_records_first_touch_only():
    p = Process(1, arrival=1, burst=5)
    p.dispatch(3)
    p.dispatch(8)
    assert p.start == 3
    assert p.response == 2


def test_timeline_to_slices_skips_idle():
    slices = timeline_to_slices([IDLE, 1, 1, 2, 1, IDLE, IDLE, 2])
    assert [(s.pid, s.start_time, s.end_time) for s in slices] == [
        (1, 1, 3),
        (2, 3, 4),
        (1, 4, 5),
        (2, 7, 8),
    ]
