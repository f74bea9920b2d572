"""
Shared scheduler bookkeeping and the interface every algorithm implements.

Algorithms do not inherit from a common base class. Each one owns a
``SchedulerState`` (process registry, virtual clock, timeline, context-switch
counter) and exposes the ``Scheduler`` protocol. The orchestrator picks an
algorithm through ``scheduler_sim.algorithms`` by ``SchedulerType``.
"""

from __future__ import annotations

import copy
import logging
from typing import Dict, List, Optional, Protocol

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

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    config: SchedulerConfig

    @property
    def name(self) -> str: ...

    @property
    def scheduler_type(self) -> SchedulerType: ...

    @property
    def processes(self) -> List[Process]: ...

    @property
    def timeline(self) -> List[ExecutionEvent]: ...

    @property
    def metrics(self) -> Metrics: ...

    def add_process(self, process: Process) -> None: ...

    def run(self) -> ScheduleResult: ...

    def get_next_process(self) -> Optional[Process]: ...

    def reset(self) -> None: ...


class SchedulerState:
    """
    Per-instance simulation state shared by all algorithms.

    Processes are held by value and addressed by PID, so queues only ever
    store integers.
    """

    def __init__(self, config: SchedulerConfig):
        self.config = config
        self.processes: List[Process] = []
        self._index: Dict[int, int] = {}
        self.current_time = 0
        self.context_switches = 0
        self.timeline: List[ExecutionEvent] = []
        self.metrics = Metrics()
        self.last_pid: Optional[int] = None

    # Registry

    def add_process(self, process: Process) -> Process:
        if process.pid in self._index:
            raise ValueError(f"Duplicate process id: {process.pid}")
        owned = copy.copy(process)
        self._index[owned.pid] = len(self.processes)
        self.processes.append(owned)
        return owned

    def lookup(self, pid: int) -> Process:
        return self.processes[self._index[pid]]

    def reset(self) -> None:
        self.timeline.clear()
        self.metrics = Metrics()
        self.current_time = 0
        self.context_switches = 0
        self.last_pid = None
        for process in self.processes:
            process.reset()

    # Arrivals and clock

    def check_arrivals(self, time: int) -> List[Process]:
        """
        Promote every NEW process that has arrived by ``time`` to READY.

        Returns the promoted processes in arrival order; equal arrivals keep
        their insertion order.
        """
        arrived = [
            p for p in self.processes
            if p.state is ProcessState.NEW and p.arrival_time <= time
        ]
        arrived.sort(key=lambda p: p.arrival_time)
        for process in arrived:
            process.state = ProcessState.READY
        return arrived

    def next_arrival(self) -> Optional[int]:
        future = [p.arrival_time for p in self.processes if p.state is ProcessState.NEW]
        return min(future) if future else None

    def record_idle(self, until: int) -> None:
        """
        Jump the clock forward to ``until`` and record the idle gap.
        """
        assert until > self.current_time, "idle jump must move the clock forward"
        self.record_event(IDLE_PID, self.current_time, until, description="CPU Idle")
        self.current_time = until

    def idle_until_next_arrival(self) -> None:
        nxt = self.next_arrival()
        assert nxt is not None, "scheduler stalled with no runnable or pending process"
        self.record_idle(nxt)

    # Dispatch bookkeeping

    def perform_context_switch(self, from_pid: Optional[int], to: Process) -> None:
        if from_pid is None or from_pid == to.pid:
            return

        self.context_switches += 1
        cost = self.config.context_switch_cost
        self.record_event(
            IDLE_PID,
            self.current_time,
            self.current_time + cost,
            is_context_switch=True,
            description=f"Context Switch P{from_pid} -> {to.name}",
        )
        logger.debug(f"t={self.current_time}: context switch P{from_pid} -> {to.name}")
        self.current_time += cost

    def switch_to(self, process: Process) -> None:
        """
        Charge a context switch if needed and mark ``process`` as running.
        """
        self.perform_context_switch(self.last_pid, process)
        process.state = ProcessState.RUNNING
        if not process.has_started and process.response_time < 0:
            process.response_time = self.current_time - process.arrival_time

    def execute(self, process: Process, time_slice: int, queue_level: Optional[int] = None) -> int:
        """
        Run ``process`` for up to ``time_slice`` ticks, advance the clock and
        record the segment.
        """
        start = self.current_time
        used = process.execute(time_slice)
        self.current_time += used
        self.record_event(
            process.pid,
            start,
            self.current_time,
            description=f"Execute {process.name}",
            queue_level=queue_level,
        )
        self.last_pid = process.pid
        return used

    def finish(self, process: Process) -> None:
        assert process.remaining_time == 0
        process.state = ProcessState.TERMINATED
        process.completion_time = self.current_time
        process.turnaround_time = process.completion_time - process.arrival_time
        process.waiting_time = process.turnaround_time - process.burst_time
        logger.debug(
            f"t={self.current_time}: {process.name} terminated "
            f"(WT={process.waiting_time}, TT={process.turnaround_time})"
        )

    def record_event(
        self,
        pid: int,
        start: int,
        end: int,
        is_context_switch: bool = False,
        description: str = "",
        queue_level: Optional[int] = None,
    ) -> None:
        self.timeline.append(
            ExecutionEvent(
                pid=pid,
                start=start,
                end=end,
                is_context_switch=is_context_switch,
                description=description,
                queue_level=queue_level,
            )
        )

    def is_complete(self) -> bool:
        return all(p.state is ProcessState.TERMINATED for p in self.processes)

    # Results

    def calculate_metrics(self) -> Metrics:
        self.metrics = compute_metrics(
            self.processes,
            self.timeline,
            total_time=self.current_time,
            context_switches=self.context_switches,
            context_switch_cost=self.config.context_switch_cost,
        )
        return self.metrics

    def result(self, name: str, scheduler_type: SchedulerType) -> ScheduleResult:
        return ScheduleResult(
            algorithm=name,
            scheduler_type=scheduler_type,
            processes=[copy.copy(p) for p in self.processes],
            timeline=[copy.copy(e) for e in self.timeline],
            metrics=self.metrics,
        )


class StateAccessors:
    """
    Read-only views over ``self.state`` shared by the algorithm classes.
    """

    state: SchedulerState

    @property
    def processes(self) -> List[Process]:
        return self.state.processes

    @property
    def timeline(self) -> List[ExecutionEvent]:
        return self.state.timeline

    @property
    def metrics(self) -> Metrics:
        return self.state.metrics

    @property
    def current_time(self) -> int:
        return self.state.current_time

    @property
    def context_switches(self) -> int:
        return self.state.context_switches

    def get_process(self, pid: int) -> Process:
        return self.state.lookup(pid)
