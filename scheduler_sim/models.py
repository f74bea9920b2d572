from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .metrics import Metrics

# Timeline pid used for CPU-idle and context-switch segments.
IDLE_PID = -1

# Priority boost interval multiplier applied to the aging threshold when no
# explicit boost interval is configured.
DEFAULT_BOOST_MULTIPLIER = 5


class ProcessState(Enum):
    NEW = "New"
    READY = "Ready"
    RUNNING = "Running"
    WAITING = "Waiting"  # reserved for I/O modelling, never entered
    TERMINATED = "Terminated"


class SchedulerType(Enum):
    ROUND_ROBIN = "rr"
    PRIORITY_PREEMPTIVE = "pp"
    PRIORITY_NON_PREEMPTIVE = "pnp"
    MULTILEVEL_QUEUE = "mlq"
    MULTILEVEL_FEEDBACK_QUEUE = "mlfq"


@dataclass(eq=False)
class Process:
    """
    A simulated process and its scheduling state.

    Lower ``priority`` values mean higher priority. Timing outputs are
    filled in by the scheduler that owns the process; ``reset`` puts the
    process back into its freshly-created state so it can be replayed under
    another algorithm.
    """

    pid: int
    priority: int
    burst_time: int
    arrival_time: int = 0
    name: str = ""

    remaining_time: int = field(init=False)
    waiting_time: int = field(default=0, init=False)
    turnaround_time: int = field(default=0, init=False)
    response_time: int = field(default=-1, init=False)
    completion_time: int = field(default=0, init=False)
    queue_level: int = field(default=0, init=False)
    has_started: bool = field(default=False, init=False)
    state: ProcessState = field(default=ProcessState.NEW, init=False)

    # Scheduler bookkeeping
    base_priority: int = field(init=False)
    waiting_since: Optional[int] = field(default=None, init=False)
    time_in_queue: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.burst_time <= 0:
            raise ValueError(f"Process {self.pid}: burst time must be positive, got {self.burst_time}")
        if self.arrival_time < 0:
            raise ValueError(f"Process {self.pid}: arrival time must be non-negative, got {self.arrival_time}")
        if self.priority < 0:
            raise ValueError(f"Process {self.pid}: priority must be non-negative, got {self.priority}")
        if not self.name:
            self.name = f"P{self.pid}"
        self.remaining_time = self.burst_time
        self.base_priority = self.priority

    def execute(self, time_slice: int) -> int:
        """
        Run the process for up to ``time_slice`` ticks.

        Returns the number of ticks actually consumed, which is less than the
        slice only when the process finishes early. Executing a finished
        process is a no-op that returns 0.
        """
        if self.remaining_time == 0:
            return 0

        executed = min(time_slice, self.remaining_time)
        self.remaining_time -= executed
        assert self.remaining_time >= 0, f"{self.name}: negative remaining time"
        self.has_started = True

        if self.remaining_time == 0:
            self.state = ProcessState.TERMINATED
        else:
            self.state = ProcessState.RUNNING
        return executed

    def reset(self) -> None:
        self.remaining_time = self.burst_time
        self.waiting_time = 0
        self.turnaround_time = 0
        self.response_time = -1
        self.completion_time = 0
        self.queue_level = 0
        self.has_started = False
        self.state = ProcessState.NEW
        self.priority = self.base_priority
        self.waiting_since = None
        self.time_in_queue = 0

    @property
    def is_completed(self) -> bool:
        return self.remaining_time == 0

    def sort_key(self):
        # Highest priority first, then earliest arrival, then lowest PID.
        return (self.priority, self.arrival_time, self.pid)

    def __str__(self) -> str:
        return (
            f"Process[PID={self.pid}, Name={self.name}, Priority={self.priority}, "
            f"Burst={self.burst_time}, Remaining={self.remaining_time}, "
            f"Arrival={self.arrival_time}, State={self.state.name}]"
        )


@dataclass
class ExecutionEvent:
    """
    One contiguous segment of the simulated CPU timeline.

    Idle and context-switch segments carry ``IDLE_PID``.
    """

    pid: int
    start: int
    end: int
    is_context_switch: bool = False
    description: str = ""
    queue_level: Optional[int] = None

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def is_idle(self) -> bool:
        return self.pid == IDLE_PID and not self.is_context_switch

    @property
    def is_execution(self) -> bool:
        return self.pid != IDLE_PID and not self.is_context_switch


@dataclass
class SchedulerConfig:
    """
    Tunables shared by all algorithms.

    ``quantums`` overrides the computed per-level MLFQ quanta index by index;
    levels it does not cover keep the computed value. ``boost_interval``
    defaults to ``aging_threshold * DEFAULT_BOOST_MULTIPLIER``.
    """

    time_quantum: int = 4
    context_switch_cost: int = 1
    num_queues: int = 3
    quantums: List[int] = field(default_factory=list)
    aging_enabled: bool = True
    aging_threshold: int = 10
    boost_interval: Optional[int] = None

    def __post_init__(self) -> None:
        if self.time_quantum <= 0:
            raise ValueError(f"time_quantum must be positive, got {self.time_quantum}")
        if self.context_switch_cost < 0:
            raise ValueError(f"context_switch_cost must be non-negative, got {self.context_switch_cost}")
        if self.num_queues < 1:
            raise ValueError(f"num_queues must be at least 1, got {self.num_queues}")
        if self.aging_threshold <= 0:
            raise ValueError(f"aging_threshold must be positive, got {self.aging_threshold}")

    @property
    def effective_boost_interval(self) -> int:
        if self.boost_interval is not None and self.boost_interval > 0:
            return self.boost_interval
        return self.aging_threshold * DEFAULT_BOOST_MULTIPLIER

    def level_quantums(self, num_queues: Optional[int] = None) -> List[int]:
        """
        Per-level quanta for feedback queues: explicit entries win per index,
        the doubling schedule fills the rest.
        """
        levels = num_queues or self.num_queues
        computed = [self.time_quantum]
        for _ in range(1, levels):
            computed.append(computed[-1] * 2)

        for idx, value in enumerate(self.quantums[:levels]):
            if value > 0:
                computed[idx] = value
        return computed


@dataclass
class ScheduleResult:
    algorithm: str
    scheduler_type: SchedulerType
    processes: List[Process] = field(default_factory=list)
    timeline: List[ExecutionEvent] = field(default_factory=list)
    metrics: Optional[Metrics] = None

