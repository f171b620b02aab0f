from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from .errors import InputFormatError, InputIOError, InvalidConfiguration
from .models import Process

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordResult:
    """
    Outcome of parsing one workload record: exactly one of ``process`` or
    ``error`` is set.
    """

    line: int
    process: Optional[Process] = None
    error: Optional[InputFormatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_record(fields: List[str], next_pid: int, line: int = 0) -> RecordResult:
    """
    Parse ``arrival,burst,priority`` or ``pid,arrival,burst,priority``.

    With three fields the pid is ``next_pid``.
    """
    fields = [f.strip() for f in fields]
    if len(fields) not in (3, 4):
        return RecordResult(
            line=line,
            error=InputFormatError(f"expected 3 or 4 columns, got {len(fields)}", line=line or None),
        )

    try:
        values = [int(f) for f in fields]
    except ValueError:
        return RecordResult(
            line=line,
            error=InputFormatError(f"non-integer field in {','.join(fields)!r}", line=line or None),
        )

    if len(values) == 3:
        values.insert(0, next_pid)
    pid, arrival, burst, priority = values
    return RecordResult(line=line, process=Process(pid=pid, arrival=arrival, burst=burst, priority=priority))


def _looks_like_header(fields: List[str]) -> bool:
    return any(ch.isalpha() for f in fields for ch in f)


def parse_csv_text(text: str) -> List[RecordResult]:
    results: List[RecordResult] = []
    parsed = 0
    reader = csv.reader(text.splitlines())
    for line_no, row in enumerate(reader, start=1):
        if not row or all(not cell.strip() for cell in row):
            continue
        if line_no == 1 and _looks_like_header(row):
            continue

        result = parse_record(row, next_pid=parsed + 1, line=line_no)
        if result.ok:
            parsed += 1
        else:
            logger.warning("Rejected workload record: %s", result.error)
        results.append(result)
    return results


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a CSV or JSON file into a list of Process objects.

    The first malformed record aborts the load with InputFormatError.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        reason = getattr(exc, "strerror", None) or exc
        raise InputIOError(f"Cannot read workload file {path}: {reason}") from exc

    if path.suffix.lower() == ".json":
        processes = _load_json(text)
    else:
        processes = []
        for result in parse_csv_text(text):
            if result.error is not None:
                raise result.error
            processes.append(result.process)

    logger.debug("Loaded %d processes from %s", len(processes), path)
    return processes


def _load_json(text: str) -> List[Process]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputFormatError(f"invalid JSON: {exc.msg}", line=exc.lineno) from exc

    if not isinstance(raw, list):
        raise InputFormatError("JSON workload must be a list of process objects")

    processes: List[Process] = []
    for entry in raw:
        processes.append(_process_from_mapping(entry, next_pid=len(processes) + 1))
    return processes


def _first(mapping: Mapping, *keys: str):
    for key in keys:
        if key in mapping:
            return mapping[key]
    raise KeyError(keys[0])


def _process_from_mapping(mapping, next_pid: int) -> Process:
    try:
        pid = int(mapping.get("pid", next_pid))
        arrival = int(_first(mapping, "arrival", "arrival_time"))
        burst = int(_first(mapping, "burst", "burst_time"))
        priority_val = mapping.get("priority")
        priority = int(priority_val) if priority_val not in (None, "") else 0
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InputFormatError(f"Invalid process entry: {mapping!r}") from exc

    return Process(pid=pid, arrival=arrival, burst=burst, priority=priority)


def read_processes_interactive(
    ask: Callable[[str], str] = input,
    say: Callable[[str], None] = print,
) -> List[Process]:
    """
    Prompt for a process count, then arrival, burst and priority for each.

    Invalid answers are reported and asked again; pids are assigned from 1.
    """

    def ask_int(prompt: str, minimum: Optional[int] = None) -> int:
        while True:
            raw = ask(prompt).strip()
            try:
                value = int(raw)
                if minimum is not None and value < minimum:
                    raise InvalidConfiguration(f"value must be >= {minimum}")
                return value
            except ValueError as exc:
                message = str(exc) if isinstance(exc, InvalidConfiguration) else "enter an integer"
                say(f"Invalid input ({message}).")

    count = ask_int("Enter number of processes: ", minimum=1)
    processes: List[Process] = []
    for pid in range(1, count + 1):
        say(f"=== Process {pid} ===")
        arrival = ask_int("Arrival time: ", minimum=0)
        burst = ask_int("Burst time  : ", minimum=1)
        priority = ask_int("Priority    : ")
        processes.append(Process(pid=pid, arrival=arrival, burst=burst, priority=priority))
    return processes
