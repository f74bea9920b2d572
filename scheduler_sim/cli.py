from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .gantt import build_rich_gantt
from .metrics import summarize_metrics
from .models import SchedulerConfig, SchedulerType, ScheduleResult
from .simulator import BENCHMARK_SIZES, Simulator, sample_processes
from .workload_io import export_results, load_config, load_workload, save_workload

logger = logging.getLogger(__name__)

ALGORITHM_CODES = [t.value for t in SchedulerType]


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        help="JSON file with scheduler settings; command-line flags override it.",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Base time quantum (default: 4).",
    )
    parser.add_argument(
        "--context",
        "-c",
        type=int,
        default=None,
        help="Context switch cost in ticks (default: 1).",
    )
    parser.add_argument(
        "--queues",
        type=int,
        default=None,
        help="Number of queue levels for MLQ/MLFQ (default: 3).",
    )
    parser.add_argument(
        "--quantums",
        type=int,
        nargs="+",
        default=None,
        help="Explicit MLFQ quantum per level; missing levels use the doubling default.",
    )
    parser.add_argument(
        "--no-aging",
        action="store_true",
        help="Disable priority aging and the MLFQ priority boost.",
    )
    parser.add_argument(
        "--aging-threshold",
        type=int,
        default=None,
        help="Ticks of waiting before a priority is raised (default: 10).",
    )
    parser.add_argument(
        "--boost-interval",
        type=int,
        default=None,
        help="MLFQ priority boost interval (default: aging threshold x 5).",
    )


def _add_workload_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--workload",
        "-w",
        help="Path to a .txt, .json or .csv workload file.",
    )
    source.add_argument(
        "--num",
        "-n",
        type=int,
        help="Generate N random processes instead of loading a file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed used with --num.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-sim",
        description="CPU scheduling simulator (Round Robin, Priority, MLQ, MLFQ).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduling decisions (context switches, aging, demotions).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=ALGORITHM_CODES,
        help="rr, pp (priority preemptive), pnp (priority non-preemptive), mlq, mlfq.",
    )
    _add_workload_arguments(run_parser)
    _add_config_arguments(run_parser)
    run_parser.add_argument(
        "--no-gantt",
        action="store_true",
        help="Do not print the Gantt chart.",
    )
    run_parser.add_argument(
        "--detailed",
        action="store_true",
        help="Also print variance and min/max waiting time.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare their metrics.",
    )
    _add_workload_arguments(compare_parser)
    _add_config_arguments(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=ALGORITHM_CODES,
        default=ALGORITHM_CODES,
        help="Algorithms to compare (default: all).",
    )
    compare_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the comparison to this CSV file.",
    )

    generate_parser = subparsers.add_parser("generate", help="Write a random workload file.")
    generate_parser.add_argument("--num", "-n", type=int, required=True, help="Number of processes.")
    generate_parser.add_argument("--output", "-o", required=True, help="Destination .txt file.")
    generate_parser.add_argument("--seed", type=int, default=None, help="Random seed.")

    demo_parser = subparsers.add_parser(
        "demo",
        help="Compare every algorithm on a small built-in workload.",
    )
    _add_config_arguments(demo_parser)
    demo_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the comparison to this CSV file.",
    )

    bench_parser = subparsers.add_parser(
        "benchmark",
        help="Time RR, preemptive priority and MLFQ on growing random workloads.",
    )
    _add_config_arguments(bench_parser)
    bench_parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=list(BENCHMARK_SIZES),
        help="Workload sizes to benchmark (default: 5 10 20 50 100).",
    )
    bench_parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    bench_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the benchmark runs' metrics to this CSV file.",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def config_from_args(args: argparse.Namespace) -> SchedulerConfig:
    config = load_config(args.config) if args.config else SchedulerConfig()

    overrides = {
        "time_quantum": args.quantum,
        "context_switch_cost": args.context,
        "num_queues": args.queues,
        "quantums": args.quantums,
        "aging_threshold": args.aging_threshold,
        "boost_interval": args.boost_interval,
    }
    values = dataclasses.asdict(config)
    values.update({k: v for k, v in overrides.items() if v is not None})
    if args.no_aging:
        values["aging_enabled"] = False
    return SchedulerConfig(**values)


def _load_processes(args: argparse.Namespace, simulator: Simulator) -> None:
    if args.workload:
        simulator.set_processes(load_workload(Path(args.workload)))
    else:
        simulator.generate_processes(args.num, seed=args.seed)


def _print_result(result: ScheduleResult, console: Console, show_gantt: bool = True, detailed: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    console.print()

    if show_gantt:
        panel, time_marks = build_rich_gantt(result.timeline, result.processes)
        console.print(panel)
        if time_marks:
            console.print(time_marks)
        console.print()

    headers = [
        "PID",
        "Name",
        "Priority",
        "Arrive",
        "Burst",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Name", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in sorted(result.processes, key=lambda p: p.pid):
        proc_table.add_row(
            str(p.pid),
            p.name,
            str(p.priority),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    m = result.metrics
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Processes", str(m.process_count))
    sys_table.add_row("Total time", str(m.total_time))
    sys_table.add_row("Avg waiting", f"{m.avg_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{m.avg_turnaround_time:.2f}")
    sys_table.add_row("Avg response", f"{m.avg_response_time:.2f}")
    sys_table.add_row("CPU utilization", f"{m.cpu_utilization:.1f}%")
    sys_table.add_row("Throughput (proc/time)", f"{m.throughput:.4f}")
    sys_table.add_row("Context switches", str(m.context_switches))
    sys_table.add_row("Context switch overhead", str(m.context_switch_overhead))
    if detailed:
        sys_table.add_row("Idle time", str(m.idle_time))
        sys_table.add_row("Min / max waiting", f"{m.min_waiting_time} / {m.max_waiting_time}")
        sys_table.add_row("Waiting variance", f"{m.waiting_time_variance:.2f}")
        sys_table.add_row("Turnaround variance", f"{m.turnaround_time_variance:.2f}")

    console.print(sys_table)


def _print_comparison(results: List[ScheduleResult], console: Console, title: str = "Algorithm comparison") -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("CPU util.", justify="right")
    summary_table.add_column("Throughput", justify="right")
    summary_table.add_column("Switches", justify="right")

    for result in results:
        summary = summarize_metrics(result.metrics)
        summary_table.add_row(
            result.algorithm,
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
            f"{summary['cpu_utilization']:.1f}%",
            f"{summary['throughput']:.4f}",
            str(summary["context_switches"]),
        )

    console.print(summary_table)


def _dispatch(args: argparse.Namespace, console: Console) -> int:
    if args.command == "generate":
        simulator = Simulator()
        processes = simulator.generate_processes(args.num, seed=args.seed)
        path = save_workload(processes, args.output)
        console.print(f"Wrote {len(processes)} processes to [green]{path}[/green]")
        return 0

    simulator = Simulator(config_from_args(args))

    if args.command == "run":
        _load_processes(args, simulator)
        result = simulator.run(args.algorithm)
        _print_result(result, console, show_gantt=not args.no_gantt, detailed=args.detailed)
        return 0

    if args.command == "compare":
        _load_processes(args, simulator)
        results = simulator.run_all(args.algorithms)
        _print_comparison(results, console)
        if args.output:
            path = simulator.export_results(args.output)
            console.print(f"Results exported to [green]{path}[/green]")
        return 0

    if args.command == "demo":
        simulator.set_processes(sample_processes())
        results = simulator.run_all()
        _print_comparison(results, console, title="Demo: all algorithms on the sample workload")
        if args.output:
            path = simulator.export_results(args.output)
            console.print(f"Results exported to [green]{path}[/green]")
        return 0

    if args.command == "benchmark":
        entries = simulator.run_benchmark(sizes=args.sizes, seed=args.seed)
        table = Table(title="Benchmark", box=box.SIMPLE_HEAVY)
        table.add_column("Processes", justify="right")
        table.add_column("Algorithm")
        table.add_column("Elapsed (ms)", justify="right")
        for entry in entries:
            table.add_row(str(entry.process_count), entry.algorithm, f"{entry.elapsed_ms:.2f}")
        console.print(table)
        if args.output:
            path = export_results([e.result for e in entries], args.output)
            console.print(f"Results exported to [green]{path}[/green]")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        return _dispatch(args, console)
    except (OSError, ValueError) as exc:
        logger.debug("command failed", exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
