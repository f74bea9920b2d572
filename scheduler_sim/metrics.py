from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from .models import ExecutionEvent, Process


@dataclass
class Metrics:
    """
    Summary statistics for one finished simulation run.
    """

    waiting_times: List[int] = field(default_factory=list)
    turnaround_times: List[int] = field(default_factory=list)
    response_times: List[int] = field(default_factory=list)

    process_count: int = 0
    total_time: int = 0
    idle_time: int = 0
    context_switches: int = 0
    context_switch_overhead: int = 0

    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    avg_response_time: float = 0.0
    cpu_utilization: float = 0.0
    throughput: float = 0.0

    waiting_time_variance: float = 0.0
    turnaround_time_variance: float = 0.0
    min_waiting_time: int = 0
    max_waiting_time: int = 0


def _mean(samples: Sequence[int]) -> float:
    return sum(samples) / len(samples) if samples else 0.0


def sample_variance(samples: Sequence[int]) -> float:
    """
    Sample variance (n - 1 denominator); 0.0 with fewer than two samples.
    """
    if len(samples) < 2:
        return 0.0
    mean = _mean(samples)
    return sum((s - mean) ** 2 for s in samples) / (len(samples) - 1)


def compute_idle_time(timeline: Sequence[ExecutionEvent]) -> int:
    """
    Ticks not covered by any execution or context-switch segment, up to the
    end of the last such segment.
    """
    busy = sorted(
        (ev for ev in timeline if not ev.is_idle),
        key=lambda ev: (ev.start, ev.end),
    )

    idle = 0
    last_end = 0
    for ev in busy:
        if ev.start > last_end:
            idle += ev.start - last_end
        last_end = max(last_end, ev.end)
    return idle


def compute_metrics(
    processes: Sequence[Process],
    timeline: Sequence[ExecutionEvent],
    total_time: int,
    context_switches: int,
    context_switch_cost: int,
) -> Metrics:
    """
    Aggregate finalized processes and the run's timeline into a Metrics record.
    """
    metrics = Metrics(
        waiting_times=[p.waiting_time for p in processes],
        turnaround_times=[p.turnaround_time for p in processes],
        response_times=[p.response_time for p in processes],
        process_count=len(processes),
        total_time=total_time,
        context_switches=context_switches,
        context_switch_overhead=context_switches * context_switch_cost,
    )

    if not processes:
        return metrics

    metrics.avg_waiting_time = _mean(metrics.waiting_times)
    metrics.avg_turnaround_time = _mean(metrics.turnaround_times)
    metrics.avg_response_time = _mean(metrics.response_times)

    metrics.waiting_time_variance = sample_variance(metrics.waiting_times)
    metrics.turnaround_time_variance = sample_variance(metrics.turnaround_times)
    metrics.min_waiting_time = min(metrics.waiting_times)
    metrics.max_waiting_time = max(metrics.waiting_times)

    metrics.idle_time = compute_idle_time(timeline)
    if total_time > 0:
        useful = total_time - metrics.idle_time - metrics.context_switch_overhead
        metrics.cpu_utilization = useful / total_time * 100.0
        metrics.throughput = metrics.process_count / total_time

    return metrics


def summarize_metrics(metrics: Metrics) -> dict:
    """
    Return the headline numbers used for cross-algorithm comparison.
    """
    return {
        "avg_waiting": metrics.avg_waiting_time,
        "avg_turnaround": metrics.avg_turnaround_time,
        "avg_response": metrics.avg_response_time,
        "cpu_utilization": metrics.cpu_utilization,
        "throughput": metrics.throughput,
        "context_switches": metrics.context_switches,
    }
