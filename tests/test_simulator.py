import pytest

from scheduler_sim.models import ProcessState, SchedulerConfig, SchedulerType
from scheduler_sim.simulator import BENCHMARK_SCHEDULERS, Simulator, generate_processes, sample_processes


def test_generate_processes_is_seeded():
    first = generate_processes(8, seed=42)
    second = generate_processes(8, seed=42)

    assert [p.pid for p in first] == list(range(8))
    assert [(p.priority, p.burst_time, p.arrival_time) for p in first] == [
        (p.priority, p.burst_time, p.arrival_time) for p in second
    ]
    for p in first:
        assert 0 <= p.priority <= 10
        assert 1 <= p.burst_time <= 20
        assert 0 <= p.arrival_time <= 10


def test_generate_negative_count():
    with pytest.raises(ValueError):
        generate_processes(-1)


def test_run_all_uses_every_algorithm_in_order():
    sim = Simulator()
    sim.generate_processes(6, seed=1)
    results = sim.run_all()

    assert [r.scheduler_type for r in results] == list(SchedulerType)
    assert [r.algorithm for r in results] == [
        "Round Robin",
        "Priority (Preemptive)",
        "Priority (Non-Preemptive)",
        "Multilevel Queue",
        "Multilevel Feedback Queue",
    ]
    assert all(r.metrics.process_count == 6 for r in results)
    assert sim.results == results


def test_base_processes_are_left_untouched():
    sim = Simulator()
    procs = sim.generate_processes(5, seed=3)
    sim.run_all(["rr", "mlq"])
    assert all(p.state is ProcessState.NEW for p in procs)
    assert all(p.remaining_time == p.burst_time for p in procs)


def test_results_do_not_depend_on_run_order():
    procs = generate_processes(10, seed=7)
    config = SchedulerConfig(time_quantum=3)

    forward = Simulator(config, procs).run_all(["rr", "pp", "mlfq"])
    backward = Simulator(config, procs).run_all(["mlfq", "pp", "rr"])

    assert [r.metrics for r in forward] == [r.metrics for r in reversed(backward)]


def test_unknown_algorithm():
    with pytest.raises(ValueError):
        Simulator().run("fcfs")


def test_benchmark_runs_each_size_and_algorithm():
    entries = Simulator().run_benchmark(sizes=(5, 10), seed=0)

    assert [(e.process_count, e.result.scheduler_type) for e in entries] == [
        (size, kind) for size in (5, 10) for kind in BENCHMARK_SCHEDULERS
    ]
    assert all(e.elapsed_ms >= 0 for e in entries)


def test_export_accumulated_results(tmp_path):
    sim = Simulator(processes=generate_processes(4, seed=2))
    sim.run("rr")
    sim.run("pnp")

    path = sim.export_results(tmp_path / "results.csv")

    lines = path.read_text().splitlines()
    assert len(lines) == 3
    assert lines[1].startswith("Round Robin,")
    assert lines[2].startswith("Priority (Non-Preemptive),")


def test_sample_workload():
    procs = sample_processes()
    assert [(p.pid, p.priority, p.burst_time, p.arrival_time) for p in procs] == [
        (1, 2, 10, 0),
        (2, 1, 5, 1),
        (3, 3, 8, 2),
        (4, 2, 4, 3),
        (5, 4, 6, 4),
    ]
