from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, run_algorithm
from .gantt import build_rich_gantt
from .models import Job, ScheduleResult
from .workload_io import SAMPLE_STREAMS, load_workload, sample_stream

# Shown in place of values a job does not have (never started, or no
# positive service time for the weighted turnaround).
MISSING = -1.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batch-scheduler",
        description="Non-preemptive batch job dispatch simulator (FCFS, SJF, HRRN) over m cores.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch decision and clock jump.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a job stream.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (fcfs, sjf, hrrn).",
    )
    _add_source_arguments(run_parser)
    run_parser.add_argument(
        "--cores",
        "-m",
        type=int,
        default=1,
        help="Number of identical cores (default: 1).",
    )
    run_parser.add_argument(
        "--no-gantt",
        action="store_true",
        help="Skip the per-core Gantt chart.",
    )
    run_parser.add_argument(
        "--scale",
        type=float,
        default=1.0,
        help="Gantt columns per time unit (default: 1.0).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several algorithms and core counts on the same job stream and compare averages.",
    )
    _add_source_arguments(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: fcfs sjf hrrn).",
    )
    compare_parser.add_argument(
        "--cores",
        "-m",
        type=int,
        nargs="+",
        default=[1, 2],
        help="Core counts to compare (default: 1 2).",
    )

    subparsers.add_parser(
        "demo",
        help="Walk through every algorithm on the built-in streams with one and two cores.",
    )

    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV job stream (fields: id, arrival, service).",
    )
    source.add_argument(
        "--sample",
        "-s",
        choices=sorted(SAMPLE_STREAMS),
        help="Use a built-in job stream instead of a file.",
    )


def _load_jobs(args: argparse.Namespace) -> List[Job]:
    if args.workload:
        return load_workload(Path(args.workload))
    return sample_stream(args.sample)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _fmt(value: Optional[float], digits: int = 2) -> str:
    return f"{MISSING if value is None else value:.{digits}f}"


def _print_result(
    result: ScheduleResult,
    console: Console,
    title: Optional[str] = None,
    gantt: bool = True,
    scale: float = 1.0,
) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    console.print(f"[bold]Cores:[/bold] {result.cores}")
    console.print()

    if gantt:
        console.print(build_rich_gantt(result.jobs, result.cores, scale=scale))
        console.print()

    headers = ["ID", "Arrive", "Service", "Core", "Start", "End", "Turnaround", "Weighted"]

    job_table = Table(title=title or "Per-job metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"ID", "Core"} else "right"
        job_table.add_column(h, justify=justify)

    for j in sorted(result.jobs, key=lambda j: j.id):
        job_table.add_row(
            str(j.id),
            _fmt(j.arrival),
            _fmt(j.service),
            "" if j.core is None else str(j.core),
            _fmt(j.start),
            _fmt(j.end),
            _fmt(j.turnaround),
            _fmt(j.weighted_turnaround),
        )

    console.print(job_table)

    summary = result.summary
    if summary is not None and summary.count > 0:
        sys_table = Table(title="Summary", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Avg turnaround", f"{summary.avg_turnaround:.4f}")
        sys_table.add_row("Avg weighted turnaround", f"{summary.avg_weighted_turnaround:.4f}")
        if result.system:
            sys = result.system
            sys_table.add_row("Makespan", f"{sys.makespan:.2f}")
            sys_table.add_row("Throughput (jobs/time)", f"{sys.throughput:.3f}")
            sys_table.add_row("Core utilization", f"{sys.core_utilization*100:.1f}%")

        console.print(sys_table)
    console.print()


def _comparison_table(title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Algorithm")
    table.add_column("Cores", justify="right")
    table.add_column("Avg turnaround", justify="right")
    table.add_column("Avg weighted", justify="right")
    table.add_column("Makespan", justify="right")
    return table


def _add_comparison_row(table: Table, result: ScheduleResult, *extra: str) -> None:
    table.add_row(
        result.algorithm,
        str(result.cores),
        f"{result.summary.avg_turnaround:.4f}",
        f"{result.summary.avg_weighted_turnaround:.4f}",
        f"{result.system.makespan:.2f}",
        *extra,
    )


def _run_demo(console: Console) -> None:
    """
    Every algorithm on stream a with one and two cores, then the same
    algorithm (FCFS) on both built-in streams.
    """
    for cores, label in ((1, "single core"), (2, "dual core")):
        for alg in ALGORITHMS:
            result = run_algorithm(alg, sample_stream("a"), cores=cores)
            _print_result(result, console, title=f"{result.algorithm} - {label}", gantt=False)

    console.rule("Same algorithm on different job streams")
    table = _comparison_table("FCFS - single core")
    table.add_column("Stream")
    for stream in sorted(SAMPLE_STREAMS):
        result = run_algorithm("fcfs", sample_stream(stream), cores=1)
        _print_result(result, console, title=f"Stream {stream.upper()} - FCFS - single core", gantt=False)
        _add_comparison_row(table, result, stream.upper())
    console.print(table)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            jobs = _load_jobs(args)
            result = run_algorithm(args.algorithm, jobs, cores=args.cores)
            _print_result(result, console, gantt=not args.no_gantt, scale=args.scale)
            return 0

        if args.command == "compare":
            jobs = _load_jobs(args)
            source = args.workload or f"sample stream {args.sample}"
            summary_table = _comparison_table(f"Algorithm comparison: {source}")
            for alg in args.algorithms:
                for cores in args.cores:
                    _add_comparison_row(summary_table, run_algorithm(alg, jobs, cores=cores))
            console.print(summary_table)
            return 0

        if args.command == "demo":
            _run_demo(console)
            return 0
    except ValueError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
