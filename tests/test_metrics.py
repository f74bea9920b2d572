import pytest

from scheduler_sim.metrics import compute_idle_time, compute_metrics, sample_variance, summarize_metrics
from scheduler_sim.models import IDLE_PID, ExecutionEvent, Process


def _finished(pid, burst, waiting, turnaround, response):
    p = Process(pid=pid, priority=0, burst_time=burst)
    p.remaining_time = 0
    p.waiting_time = waiting
    p.turnaround_time = turnaround
    p.response_time = response
    return p


def test_empty_run_has_zero_metrics():
    m = compute_metrics([], [], total_time=0, context_switches=0, context_switch_cost=1)
    assert m.process_count == 0
    assert m.avg_waiting_time == 0.0
    assert m.avg_turnaround_time == 0.0
    assert m.avg_response_time == 0.0
    assert m.cpu_utilization == 0.0
    assert m.throughput == 0.0
    assert m.waiting_time_variance == 0.0
    assert m.min_waiting_time == 0
    assert m.max_waiting_time == 0


def test_sample_variance():
    assert sample_variance([]) == 0.0
    assert sample_variance([5]) == 0.0
    assert sample_variance([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(32 / 7)


def test_idle_time_ignores_context_switches():
    timeline = [
        ExecutionEvent(1, 0, 2),
        ExecutionEvent(IDLE_PID, 2, 5, description="CPU Idle"),
        ExecutionEvent(IDLE_PID, 5, 6, is_context_switch=True),
        ExecutionEvent(2, 6, 9),
    ]
    assert compute_idle_time(timeline) == 3


def test_compute_metrics_from_finished_processes():
    procs = [
        _finished(1, burst=4, waiting=0, turnaround=4, response=0),
        _finished(2, burst=2, waiting=3, turnaround=5, response=3),
    ]
    timeline = [
        ExecutionEvent(1, 0, 4),
        ExecutionEvent(IDLE_PID, 4, 5, is_context_switch=True),
        ExecutionEvent(2, 5, 7),
    ]

    m = compute_metrics(procs, timeline, total_time=7, context_switches=1, context_switch_cost=1)

    assert m.process_count == 2
    assert m.avg_waiting_time == pytest.approx(1.5)
    assert m.avg_turnaround_time == pytest.approx(4.5)
    assert m.avg_response_time == pytest.approx(1.5)
    assert m.idle_time == 0
    assert m.context_switch_overhead == 1
    assert m.cpu_utilization == pytest.approx(6 / 7 * 100)
    assert m.throughput == pytest.approx(2 / 7)
    assert m.waiting_time_variance == pytest.approx(4.5)
    assert m.turnaround_time_variance == pytest.approx(0.5)
    assert (m.min_waiting_time, m.max_waiting_time) == (0, 3)

    summary = summarize_metrics(m)
    assert summary["avg_waiting"] == pytest.approx(1.5)
    assert summary["context_switches"] == 1
