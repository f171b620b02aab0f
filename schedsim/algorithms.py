from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional

from .errors import InvalidConfiguration
from .metrics import compute_report
from .models import IDLE, Process, ScheduleResult, Timeline, prepare_run


def _finish(algorithm: str, quantum: Optional[int], procs: List[Process], timeline: Timeline) -> ScheduleResult:
    metrics, system = compute_report(procs, timeline)
    return ScheduleResult(
        algorithm=algorithm,
        quantum=quantum,
        timeline=timeline,
        processes=metrics,
        system=system,
    )


def run_fcfs(procs: List[Process]) -> Timeline:
    """
    First-Come First-Serve (non-preemptive) on already reset records.
    """
    timeline: Timeline = []
    time = 0

    for p in sorted(procs, key=lambda x: (x.arrival, x.pid)):
        while time < p.arrival:
            timeline.append(IDLE)
            time += 1

        p.dispatch(time)
        timeline.extend([p.pid] * p.burst)
        time += p.burst
        p.remaining = 0
        p.completion = time

    return timeline


def _run_preemptive(procs: List[Process], pick: Callable[[List[Process]], Process]) -> Timeline:
    """
    Shared one-tick loop for SRTF and preemptive priority.

    ``pick`` receives the eligible processes in run order and returns the one
    to execute for the next tick.
    """
    timeline: Timeline = []
    time = 0
    completed = 0

    while completed < len(procs):
        ready = [p for p in procs if p.arrival <= time and p.remaining > 0]
        if not ready:
            timeline.append(IDLE)
            time += 1
            continue

        current = pick(ready)
        current.dispatch(time)

        timeline.append(current.pid)
        current.remaining -= 1
        time += 1

        if current.remaining == 0:
            current.completion = time
            completed += 1

    return timeline


def _shortest_remaining(ready: List[Process]) -> Process:
    # min() keeps the first of equal keys, i.e. the lowest pid in run order.
    return min(ready, key=lambda p: p.remaining)


def _highest_priority(ready: List[Process]) -> Process:
    return min(ready, key=lambda p: (p.priority, p.remaining))


def run_srtf(procs: List[Process]) -> Timeline:
    return _run_preemptive(procs, _shortest_remaining)


def run_priority(procs: List[Process]) -> Timeline:
    return _run_preemptive(procs, _highest_priority)


def run_rr(procs: List[Process], quantum: int) -> Timeline:
    """
    Round Robin with a fixed quantum.

    Arrivals are checked after every executed tick, so a process that arrives
    mid-slice is queued ahead of the process whose slice is running.
    """
    validate_quantum(quantum)

    timeline: Timeline = []
    ready: Deque[int] = deque()
    queued = [False] * len(procs)
    time = 0
    completed = 0

    def enqueue_new_arrivals(current_time: int) -> None:
        for i, p in enumerate(procs):
            if not queued[i] and p.arrival <= current_time and p.remaining > 0:
                ready.append(i)
                queued[i] = True

    while completed < len(procs):
        enqueue_new_arrivals(time)

        if not ready:
            timeline.append(IDLE)
            time += 1
            continue

        idx = ready.popleft()
        p = procs[idx]
        p.dispatch(time)

        for _ in range(min(quantum, p.remaining)):
            timeline.append(p.pid)
            p.remaining -= 1
            time += 1
            enqueue_new_arrivals(time)

        if p.remaining > 0:
            # Still flagged as queued, so only this append puts it back.
            ready.append(idx)
        else:
            p.completion = time
            completed += 1

    return timeline


def validate_quantum(quantum: Optional[int]) -> int:
    if isinstance(quantum, bool) or not isinstance(quantum, int) or quantum <= 0:
        raise InvalidConfiguration(f"Round Robin requires a positive integer quantum, got {quantum!r}")
    return quantum


def schedule_fcfs(processes: Iterable[Process], quantum: Optional[int] = None) -> ScheduleResult:
    procs = prepare_run(processes)
    return _finish("FCFS", None, procs, run_fcfs(procs))


def schedule_srtf(processes: Iterable[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF), re-evaluated every tick.
    """
    procs = prepare_run(processes)
    return _finish("SRTF", None, procs, run_srtf(procs))


def schedule_priority(processes: Iterable[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Preemptive priority scheduling.

    Lower numeric priority value means higher priority. Equal priorities are
    broken by smaller remaining time, then by lowest pid.
    """
    procs = prepare_run(processes)
    return _finish("Preemptive Priority", None, procs, run_priority(procs))


def schedule_rr(processes: Iterable[Process], quantum: Optional[int] = None) -> ScheduleResult:
    quantum = validate_quantum(quantum)
    procs = prepare_run(processes)
    return _finish("Round Robin", quantum, procs, run_rr(procs, quantum))


ALGORITHMS: Dict[str, Callable[..., ScheduleResult]] = {
    "fcfs": schedule_fcfs,
    "srtf": schedule_srtf,
    "priority": schedule_priority,
    "rr": schedule_rr,
}

NEEDS_QUANTUM = {"rr"}


def run_algorithm(name: str, processes: Iterable[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum is only used by round-robin.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise InvalidConfiguration(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    func = ALGORITHMS[name]
    return func(processes, quantum=quantum)
