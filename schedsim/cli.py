from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .algorithms import NEEDS_QUANTUM, validate_quantum
from .config import SimulationConfig
from .errors import SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .log import setup_logging
from .models import Process, ScheduleResult
from .simulation import parse_selection, simulate, simulate_many
from .workload_io import load_workload, read_processes_interactive

logger = logging.getLogger(__name__)


def build_parser(config: SimulationConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SRTF, Preemptive Priority, Round Robin).",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help=f"Logging level (default: {config.log_level}).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (fcfs, srtf, priority, rr).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a CSV (pid,arrival,burst,priority) or JSON workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=config.quantum,
        help=f"Time quantum for round-robin (default: {config.quantum}).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print the per-tick text Gantt chart instead of the colored one.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a CSV or JSON workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=config.algorithms,
        help="Algorithms to compare (default: all).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=config.quantum,
        help=f"Time quantum used for rr when included (default: {config.quantum}).",
    )

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu: enter processes or load a CSV, then pick algorithms.",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=config.quantum,
        help=f"Default quantum offered for round-robin (default: {config.quantum}).",
    )

    return parser


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False, soft_wrap=True)
    else:
        panel, time_marks = build_rich_gantt(result.slices)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            f"P{p.pid}",
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    if result.system:
        sys = result.system
        sys_table = Table(title="Summary", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Avg waiting", f"{sys.avg_waiting:.3f}")
        sys_table.add_row("Avg turnaround", f"{sys.avg_turnaround:.3f}")
        sys_table.add_row("Avg response", f"{sys.avg_response:.3f}")
        sys_table.add_row("Context switches", str(sys.context_switches))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization:.3f} %")

        console.print(sys_table)


def _print_comparison(results: List[ScheduleResult], console: Console, title: str) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm", no_wrap=True)
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg WT", justify="right")
    summary_table.add_column("Avg TAT", justify="right")
    summary_table.add_column("Avg RT", justify="right")
    summary_table.add_column("Switches", justify="right")
    summary_table.add_column("CPU %", justify="right")

    for result in results:
        sys = result.system
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{sys.avg_waiting:.2f}",
            f"{sys.avg_turnaround:.2f}",
            f"{sys.avg_response:.2f}",
            str(sys.context_switches),
            f"{sys.cpu_utilization:.1f}%",
        )

    console.print(summary_table)


def _ask_quantum(console: Console, default: int) -> int:
    while True:
        q_in = input(f"Time quantum for Round Robin [{default}]: ").strip()
        try:
            return validate_quantum(int(q_in) if q_in else default)
        except ValueError:
            console.print("[red]Invalid quantum. Enter a positive integer.[/red]")


def _ask_selection(console: Console) -> List[str]:
    while True:
        try:
            return parse_selection(input("Choice: "))
        except SchedulerError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")


def _load_processes_interactive(console: Console) -> Optional[List[Process]]:
    console.print("[bold]Input mode:[/bold]")
    console.print("  [yellow]1[/yellow]. Enter processes on the console")
    console.print("  [yellow]2[/yellow]. Load a CSV file (pid,arrival,burst,priority)")
    mode = input("Choose input mode [1/2 or q]: ").strip().lower()

    if mode in {"q", "quit", "exit"}:
        return None
    if mode == "2":
        path = input("CSV file path: ").strip()
        return load_workload(Path(path))
    return read_processes_interactive(ask=input, say=console.print)


def _interactive_menu(default_quantum: int, console: Console) -> None:
    while True:
        console.print("\n[bold cyan]Scheduler Simulator Menu[/bold cyan] [dim](q to quit)[/dim]")
        try:
            processes = _load_processes_interactive(console)
        except SchedulerError as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")
            continue
        if processes is None:
            return

        console.print("\n[bold]Select algorithms to run (e.g. 1 2 3 4) or 0 for all:[/bold]")
        console.print("  [yellow]1[/yellow]. FCFS")
        console.print("  [yellow]2[/yellow]. SRTF (preemptive SJF)")
        console.print("  [yellow]3[/yellow]. Preemptive Priority")
        console.print("  [yellow]4[/yellow]. Round Robin")

        selection = _ask_selection(console)

        quantum = _ask_quantum(console, default_quantum) if NEEDS_QUANTUM & set(selection) else None

        try:
            for result in simulate_many(processes, selection, quantum=quantum):
                _print_result(result, console, plain=True)
                console.rule()
        except SchedulerError as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")
            continue

        console.print("[dim]Simulation complete. Press Enter to return to menu...[/dim]")
        input()


def main(argv: list[str] | None = None) -> int:
    try:
        config = SimulationConfig.from_env()
    except SchedulerError as exc:
        Console(stderr=True).print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser = build_parser(config)
    args = parser.parse_args(argv)

    console = Console()

    try:
        config.log_level = args.log_level
        config.quantum = args.quantum
        if args.command == "run":
            config.algorithms = [args.algorithm.lower()]
        elif args.command == "compare":
            config.algorithms = parse_selection(" ".join(args.algorithms))
        config.validate()
        setup_logging(config.log_level)

        if args.command == "run":
            processes = load_workload(Path(args.workload))
            result = simulate(processes, args.algorithm, quantum=args.quantum)
            _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            processes = load_workload(Path(args.workload))
            results = simulate_many(processes, config.algorithms, quantum=config.quantum)
            _print_comparison(results, console, title=f"Algorithm comparison: {args.workload}")
            return 0

        if args.command == "menu":
            _interactive_menu(config.quantum, console)
            return 0
    except SchedulerError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
