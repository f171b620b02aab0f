from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence

from .algorithms import ALGORITHMS, NEEDS_QUANTUM, run_algorithm, validate_quantum
from .errors import InvalidConfiguration
from .models import Process, ScheduleResult, validate_processes

logger = logging.getLogger(__name__)

# Numbering used by the interactive menu.
MENU_CHOICES = {
    "1": "fcfs",
    "2": "srtf",
    "3": "priority",
    "4": "rr",
}

ALIASES = {
    "pp": "priority",
    "preemptive-priority": "priority",
    "round-robin": "rr",
    "roundrobin": "rr",
}


def parse_selection(text: Optional[str]) -> List[str]:
    """
    Turn a user selection like ``"1 4"``, ``"fcfs,rr"`` or ``"all"`` into
    algorithm identifiers, in the order given and without duplicates.
    """
    tokens = [t for t in re.split(r"[\s,]+", (text or "").strip().lower()) if t]
    if not tokens or tokens == ["0"] or tokens == ["all"]:
        return list(ALGORITHMS)

    selected: List[str] = []
    for token in tokens:
        name = MENU_CHOICES.get(token) or ALIASES.get(token) or token
        if name not in ALGORITHMS:
            raise InvalidConfiguration(f"Unknown choice: {token}")
        if name not in selected:
            selected.append(name)
    return selected


def simulate(processes: Sequence[Process], algorithm: str, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Run one policy on a private copy of ``processes`` and return its report.

    The caller's records are left untouched.
    """
    validate_processes(processes)
    algorithm = algorithm.lower()
    q = validate_quantum(quantum) if algorithm in NEEDS_QUANTUM else None

    logger.info("Running %s on %d processes%s", algorithm, len(processes), f" (quantum={q})" if q else "")
    result = run_algorithm(algorithm, processes, quantum=q)
    logger.debug(
        "%s finished after %d ticks, %d context switches",
        result.algorithm,
        len(result.timeline),
        result.system.context_switches if result.system else 0,
    )
    return result


def simulate_many(
    processes: Sequence[Process], algorithms: Iterable[str], quantum: Optional[int] = None
) -> List[ScheduleResult]:
    algorithms = list(algorithms)
    # Reject a bad quantum before any policy runs.
    if any(a.lower() in NEEDS_QUANTUM for a in algorithms):
        validate_quantum(quantum)
    return [simulate(processes, a, quantum=quantum) for a in algorithms]
