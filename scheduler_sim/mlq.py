from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from .base import SchedulerState, StateAccessors
from .models import Process, ProcessState, ScheduleResult, SchedulerConfig, SchedulerType

logger = logging.getLogger(__name__)


class QueueType(Enum):
    SYSTEM = "System"
    INTERACTIVE = "Interactive"
    BATCH = "Batch"


@dataclass
class QueueLevel:
    """
    Configuration of one band of the multilevel queue.

    ``preemptive`` is descriptive only; every band is served round robin
    with its own quantum.
    """

    queue_type: QueueType
    quantum: int
    preemptive: bool
    name: str


def build_queue_levels(num_queues: int, base_quantum: int) -> List[QueueLevel]:
    levels = [QueueLevel(QueueType.SYSTEM, max(1, base_quantum // 2), True, "System")]
    if num_queues > 1:
        levels.append(QueueLevel(QueueType.INTERACTIVE, base_quantum, True, "Interactive"))
    for i in range(2, num_queues):
        levels.append(QueueLevel(QueueType.BATCH, base_quantum * 2, False, f"Batch-{i - 1}"))
    return levels


def assign_queue(priority: int, num_queues: int) -> int:
    """
    Map a priority value to its fixed band: 0-2 system, 3-5 interactive,
    everything else the last (batch) queue.
    """
    if priority <= 2:
        return 0
    if priority <= 5 and num_queues > 1:
        return 1
    return num_queues - 1


class MultilevelQueueScheduler(StateAccessors):
    """
    Multilevel Queue scheduling.

    Processes are placed in a band once, by priority, and never move. The
    lowest-numbered non-empty band is always served first, so a busy upper
    band can starve the ones below it.
    """

    scheduler_type = SchedulerType.MULTILEVEL_QUEUE
    name = "Multilevel Queue"

    def __init__(self, num_queues: Optional[int] = None, config: Optional[SchedulerConfig] = None):
        self.config = config or SchedulerConfig()
        self.num_queues = num_queues if num_queues is not None and num_queues > 0 else self.config.num_queues
        self.queue_levels = build_queue_levels(self.num_queues, self.config.time_quantum)
        self.state = SchedulerState(self.config)
        self._queues: List[Deque[int]] = [deque() for _ in range(self.num_queues)]

    def add_process(self, process: Process) -> None:
        owned = self.state.add_process(process)
        owned.queue_level = assign_queue(owned.priority, self.num_queues)

    def reset(self) -> None:
        self.state.reset()
        for queue in self._queues:
            queue.clear()
        # Process.reset() clears queue levels; bands depend only on the base priority.
        for process in self.state.processes:
            process.queue_level = assign_queue(process.priority, self.num_queues)

    def queue_size(self, level: int) -> int:
        return len(self._queues[level])

    def _active_queue(self) -> Optional[int]:
        for level, queue in enumerate(self._queues):
            if queue:
                return level
        return None

    def get_next_process(self) -> Optional[Process]:
        level = self._active_queue()
        if level is None:
            return None
        return self.state.lookup(self._queues[level][0])

    def _enqueue_arrivals(self) -> None:
        for process in self.state.check_arrivals(self.state.current_time):
            self._queues[process.queue_level].append(process.pid)

    def run(self) -> ScheduleResult:
        self.reset()
        state = self.state

        self._enqueue_arrivals()

        while not state.is_complete():
            level = self._active_queue()
            if level is None:
                state.idle_until_next_arrival()
                self._enqueue_arrivals()
                continue

            process = state.lookup(self._queues[level].popleft())
            state.switch_to(process)
            state.execute(process, self.queue_levels[level].quantum, queue_level=level)

            self._enqueue_arrivals()

            if process.is_completed:
                state.finish(process)
            else:
                process.state = ProcessState.READY
                self._queues[level].append(process.pid)

        state.calculate_metrics()
        logger.info(f"{self.name} finished at t={state.current_time}")
        return state.result(self.name, self.scheduler_type)
