from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List

from .models import Process, ScheduleResult, SchedulerConfig

logger = logging.getLogger(__name__)

RESULTS_HEADER = [
    "Algorithm",
    "AvgWaitTime",
    "AvgTurnaroundTime",
    "AvgResponseTime",
    "CPUUtilization",
    "Throughput",
    "ContextSwitches",
]

TEXT_HEADER = "PID Priority BurstTime ArrivalTime"


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON, CSV or whitespace-separated text file into a
    list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)
    if suffix in {".txt", ".dat", ""}:
        return _load_text(path)

    raise ValueError(f"Unsupported workload format: {suffix} (use .json, .csv or .txt)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _load_text(path: Path) -> List[Process]:
    """
    Columns: PID Priority BurstTime ArrivalTime. A first line mentioning
    ``PID`` is treated as a header; malformed lines are skipped.
    """
    processes: List[Process] = []
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if lineno == 1 and "PID" in line:
                continue
            fields = line.split()
            if not fields:
                continue
            try:
                pid, priority, burst, arrival = (int(v) for v in fields[:4])
                processes.append(Process(pid=pid, priority=priority, burst_time=burst, arrival_time=arrival))
            except ValueError as exc:
                logger.warning(f"{path}:{lineno}: skipping malformed line {line.strip()!r} ({exc})")
    return processes


def _process_from_mapping(mapping) -> Process:
    try:
        pid = int(mapping["pid"])
        priority = int(mapping["priority"])
        burst_time = int(mapping["burst_time"])
        arrival_time = int(mapping.get("arrival_time") or 0)
        name = str(mapping.get("name") or "")
        return Process(
            pid=pid,
            priority=priority,
            burst_time=burst_time,
            arrival_time=arrival_time,
            name=name,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc


def save_workload(processes: Iterable[Process], path: str | Path) -> Path:
    """
    Write processes in the whitespace-separated text format, with header.
    """
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        f.write(TEXT_HEADER + "\n")
        for p in processes:
            f.write(f"{p.pid} {p.priority} {p.burst_time} {p.arrival_time}\n")
    return path


def export_results(results: Iterable[ScheduleResult], path: str | Path) -> Path:
    """
    Write one CSV row of headline metrics per algorithm run.
    """
    path = Path(path)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(RESULTS_HEADER)
        for result in results:
            m = result.metrics
            writer.writerow(
                [
                    result.algorithm,
                    f"{m.avg_waiting_time:.2f}",
                    f"{m.avg_turnaround_time:.2f}",
                    f"{m.avg_response_time:.2f}",
                    f"{m.cpu_utilization:.2f}",
                    f"{m.throughput:.4f}",
                    m.context_switches,
                ]
            )
    return path


def load_config(path: str | Path) -> SchedulerConfig:
    """
    Read a SchedulerConfig from a JSON object; unknown keys are rejected.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError("JSON config must be an object")

    try:
        return SchedulerConfig(**raw)
    except TypeError as exc:
        raise ValueError(f"Invalid scheduler config: {exc}") from exc
