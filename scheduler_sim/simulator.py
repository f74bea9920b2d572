"""
Runs one or more scheduling algorithms over the same base workload.
"""

from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from .algorithms import parse_scheduler_type, run_algorithm
from .models import Process, ScheduleResult, SchedulerConfig, SchedulerType
from .workload_io import export_results

logger = logging.getLogger(__name__)

ALL_SCHEDULERS: List[SchedulerType] = list(SchedulerType)

BENCHMARK_SCHEDULERS: List[SchedulerType] = [
    SchedulerType.ROUND_ROBIN,
    SchedulerType.PRIORITY_PREEMPTIVE,
    SchedulerType.MULTILEVEL_FEEDBACK_QUEUE,
]

BENCHMARK_SIZES = (5, 10, 20, 50, 100)


def generate_processes(
    count: int,
    max_burst: int = 20,
    max_arrival: int = 10,
    max_priority: int = 10,
    seed: Optional[int] = None,
) -> List[Process]:
    """
    Build ``count`` random processes with PIDs 0..count-1.
    """
    if count < 0:
        raise ValueError(f"Process count must be non-negative, got {count}")

    rng = random.Random(seed)
    return [
        Process(
            pid=i,
            priority=rng.randint(0, max_priority),
            burst_time=rng.randint(1, max_burst),
            arrival_time=rng.randint(0, max_arrival),
        )
        for i in range(count)
    ]


def sample_processes() -> List[Process]:
    """
    Small fixed workload used by the demo command.
    """
    return [
        Process(1, priority=2, burst_time=10, arrival_time=0),
        Process(2, priority=1, burst_time=5, arrival_time=1),
        Process(3, priority=3, burst_time=8, arrival_time=2),
        Process(4, priority=2, burst_time=4, arrival_time=3),
        Process(5, priority=4, burst_time=6, arrival_time=4),
    ]


@dataclass
class BenchmarkEntry:
    process_count: int
    algorithm: str
    elapsed_ms: float
    result: ScheduleResult


class Simulator:
    """
    Holds a base workload and a configuration and runs algorithms over them.

    Every run gets a freshly constructed scheduler, so results never depend
    on the order in which algorithms were run.
    """

    def __init__(self, config: Optional[SchedulerConfig] = None, processes: Optional[Iterable[Process]] = None):
        self.config = config or SchedulerConfig()
        self.processes: List[Process] = list(processes or [])
        self.results: List[ScheduleResult] = []

    def set_processes(self, processes: Iterable[Process]) -> None:
        self.processes = list(processes)

    def generate_processes(self, count: int, seed: Optional[int] = None) -> List[Process]:
        self.processes = generate_processes(count, seed=seed)
        return self.processes

    def run(self, kind: Union[str, SchedulerType]) -> ScheduleResult:
        kind = parse_scheduler_type(kind)
        logger.info(f"Running {kind.value} on {len(self.processes)} processes")
        result = run_algorithm(kind, self.processes, self.config)
        self.results.append(result)
        return result

    def run_all(self, kinds: Optional[Sequence[Union[str, SchedulerType]]] = None) -> List[ScheduleResult]:
        """
        Run each requested algorithm (all of them by default) and return the
        results in the same order.
        """
        self.results = []
        for kind in kinds or ALL_SCHEDULERS:
            self.run(kind)
        return list(self.results)

    def run_benchmark(
        self,
        sizes: Sequence[int] = BENCHMARK_SIZES,
        kinds: Sequence[SchedulerType] = tuple(BENCHMARK_SCHEDULERS),
        seed: Optional[int] = None,
    ) -> List[BenchmarkEntry]:
        entries: List[BenchmarkEntry] = []
        for size in sizes:
            workload = generate_processes(size, seed=seed)
            for kind in kinds:
                started = time.perf_counter()
                result = run_algorithm(kind, workload, self.config)
                elapsed_ms = (time.perf_counter() - started) * 1000.0
                logger.info(f"Benchmark {result.algorithm} n={size}: {elapsed_ms:.2f} ms")
                entries.append(BenchmarkEntry(size, result.algorithm, elapsed_ms, result))
        return entries

    def export_results(self, path: Union[str, Path]) -> Path:
        """
        Write the accumulated results to a CSV file.
        """
        return export_results(self.results, path)

    def reset(self) -> None:
        self.processes = []
        self.results = []
