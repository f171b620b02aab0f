from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import IDLE, UNSET, Process, ProcessMetrics, SystemMetrics, Timeline


def count_context_switches(timeline: Timeline) -> int:
    """
    Count changes of the occupying pid between consecutive ticks.

    A change is only counted when the tick before it was busy, so switching
    from idle into a process (including the very first dispatch) is free.
    """
    switches = 0
    for prev, cur in zip(timeline, timeline[1:]):
        if cur != prev and prev != IDLE:
            switches += 1
    return switches


def compute_process_metrics(p: Process) -> ProcessMetrics:
    turnaround = p.completion - p.arrival
    waiting = turnaround - p.burst
    response = p.response if p.response != UNSET else p.start - p.arrival

    return ProcessMetrics(
        pid=p.pid,
        arrival_time=p.arrival,
        burst_time=p.burst,
        priority=p.priority,
        start_time=p.start,
        completion_time=p.completion,
        waiting_time=waiting,
        turnaround_time=turnaround,
        response_time=response,
    )


def compute_report(
    processes: Sequence[Process], timeline: Timeline
) -> Tuple[List[ProcessMetrics], SystemMetrics]:
    """
    Derive per-process and run-level metrics from a drained process set.

    Every process is expected to have a completion time; the policies only
    return once all of them have finished.
    """
    metrics = [compute_process_metrics(p) for p in processes]

    length = max(1, len(timeline))
    total_burst = sum(p.burst for p in processes)
    completed = sum(1 for p in processes if p.finished)

    summary = summarize_process_metrics(metrics)
    system = SystemMetrics(
        cpu_busy_time=total_burst,
        makespan=len(timeline),
        throughput=completed / length,
        cpu_utilization=total_burst / length * 100.0,
        context_switches=count_context_switches(timeline),
        avg_waiting=summary["avg_waiting"],
        avg_turnaround=summary["avg_turnaround"],
        avg_response=summary["avg_response"],
    )
    return metrics, system


def summarize_process_metrics(processes: Sequence[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
