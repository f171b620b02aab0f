from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import IDLE, ScheduledSlice, Timeline

CELL_WIDTH = 7


def _cell(pid: int) -> str:
    label = "Idle" if pid == IDLE else f"P{pid}"
    return f" {label:<{CELL_WIDTH - 2}}|"


def render_gantt(timeline: Timeline) -> str:
    """
    Plain-text Gantt chart with one cell per tick and a time marker under
    each cell boundary.
    """
    if not timeline:
        return "Gantt Chart:\n(no execution)"

    strip = "|" + "".join(_cell(pid) for pid in timeline)
    marks = "0" + "".join(f"{t:>{CELL_WIDTH}}" for t in range(1, len(timeline) + 1))
    return "\n".join(["Gantt Chart:", strip, marks])


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            timeline.append("." * idle_gap, style="dim")
            labels.append(" " * idle_gap)
            last_time = sl.start_time
            time_marks += f"{last_time:>3}"

        width = max(1, sl.end_time - sl.start_time)
        label = f"P{sl.pid}"

        timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
        labels.append(label[:width].ljust(width), style="bold")

        last_time = sl.end_time
        time_marks += f"{last_time:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
