from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence

from .errors import InvalidConfiguration

# Timeline entry for a tick where no process holds the CPU. Pids are positive.
IDLE = 0
UNSET = -1

Timeline = List[int]


@dataclass
class Process:
    pid: int
    arrival: int
    burst: int
    priority: int = 0

    remaining: int = field(default=0, init=False, compare=False)
    start: int = field(default=UNSET, init=False, compare=False)
    completion: int = field(default=UNSET, init=False, compare=False)
    waiting: int = field(default=0, init=False, compare=False)
    turnaround: int = field(default=0, init=False, compare=False)
    response: int = field(default=UNSET, init=False, compare=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """
        Clear everything a policy run writes so the record can be scheduled again.
        """
        self.remaining = self.burst
        self.start = UNSET
        self.completion = UNSET
        self.waiting = 0
        self.turnaround = 0
        self.response = UNSET

    def snapshot(self) -> "Process":
        copy = replace(self)
        copy.reset()
        return copy

    def dispatch(self, now: int) -> None:
        # Response time is defined by the first dispatch only.
        if self.start == UNSET:
            self.start = now
            self.response = now - self.arrival

    @property
    def finished(self) -> bool:
        return self.completion != UNSET


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int


def timeline_to_slices(timeline: Timeline) -> List[ScheduledSlice]:
    slices: List[ScheduledSlice] = []
    for t, pid in enumerate(timeline):
        if pid == IDLE:
            continue
        if slices and slices[-1].pid == pid and slices[-1].end_time == t:
            slices[-1].end_time = t + 1
        else:
            slices.append(ScheduledSlice(pid=pid, start_time=t, end_time=t + 1))
    return slices


@dataclass(frozen=True)
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass(frozen=True)
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    context_switches: int
    avg_waiting: float
    avg_turnaround: float
    avg_response: float


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    timeline: Timeline = field(default_factory=list)
    processes: List[ProcessMetrics] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    @property
    def slices(self) -> List[ScheduledSlice]:
        return timeline_to_slices(self.timeline)

    def metrics_for(self, pid: int) -> ProcessMetrics:
        for m in self.processes:
            if m.pid == pid:
                return m
        raise KeyError(pid)


def validate_processes(processes: Sequence[Process]) -> None:
    if not processes:
        raise InvalidConfiguration("The process set is empty")

    seen = set()
    for p in processes:
        if p.pid <= 0:
            raise InvalidConfiguration(f"Process id must be positive, got {p.pid}")
        if p.pid in seen:
            raise InvalidConfiguration(f"Duplicate process id {p.pid}")
        seen.add(p.pid)
        if p.arrival < 0:
            raise InvalidConfiguration(f"P{p.pid}: arrival time must be >= 0, got {p.arrival}")
        if p.burst <= 0:
            raise InvalidConfiguration(f"P{p.pid}: burst time must be > 0, got {p.burst}")


def prepare_run(processes: Iterable[Process]) -> List[Process]:
    """
    Check the process set and return reset, independent copies ordered by pid.

    Policies mutate what they are given, so every run must start from this.
    """
    processes = list(processes)
    validate_processes(processes)
    return sorted((p.snapshot() for p in processes), key=lambda p: p.pid)
