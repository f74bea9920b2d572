"""
CPU scheduling simulator.

Simulates Round Robin, Priority (preemptive and non-preemptive), Multilevel
Queue and Multilevel Feedback Queue dispatching over synthetic processes and
reports the resulting timeline and performance metrics.
"""

from .algorithms import ALGORITHMS, create_scheduler, run_algorithm
from .metrics import Metrics, compute_metrics
from .models import (
    IDLE_PID,
    ExecutionEvent,
    Process,
    ProcessState,
    ScheduleResult,
    SchedulerConfig,
    SchedulerType,
)
from .simulator import Simulator, generate_processes

__all__ = [
    "ALGORITHMS",
    "IDLE_PID",
    "ExecutionEvent",
    "Metrics",
    "Process",
    "ProcessState",
    "ScheduleResult",
    "SchedulerConfig",
    "SchedulerType",
    "Simulator",
    "compute_metrics",
    "create_scheduler",
    "generate_processes",
    "run_algorithm",
]
