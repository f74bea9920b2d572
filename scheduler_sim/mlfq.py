from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional

from .base import SchedulerState, StateAccessors
from .models import Process, ProcessState, ScheduleResult, SchedulerConfig, SchedulerType

logger = logging.getLogger(__name__)


class MultilevelFeedbackQueueScheduler(StateAccessors):
    """
    Multi-Level Feedback Queue with per-level quanta and periodic boost.

    - Every process enters the top queue (level 0).
    - Each queue is served round robin with its own quantum.
    - A process that uses its whole quantum and is not finished is demoted
      one level (the last level keeps it).
    - When aging is enabled, every ``boost_interval`` ticks all unfinished
      processes are moved back to level 0.
    """

    scheduler_type = SchedulerType.MULTILEVEL_FEEDBACK_QUEUE
    name = "Multilevel Feedback Queue"

    def __init__(self, num_queues: Optional[int] = None, config: Optional[SchedulerConfig] = None):
        self.config = config or SchedulerConfig()
        self.num_queues = num_queues if num_queues is not None and num_queues > 0 else self.config.num_queues
        self.quantums = self.config.level_quantums(self.num_queues)
        self.aging_enabled = self.config.aging_enabled
        self.boost_interval = self.config.effective_boost_interval
        self.state = SchedulerState(self.config)
        self._queues: List[Deque[int]] = [deque() for _ in range(self.num_queues)]
        self._last_boost = 0

    def add_process(self, process: Process) -> None:
        owned = self.state.add_process(process)
        owned.queue_level = 0

    def reset(self) -> None:
        self.state.reset()
        for queue in self._queues:
            queue.clear()
        self._last_boost = 0

    def set_quantum(self, level: int, quantum: int) -> None:
        if quantum > 0:
            self.quantums[level] = quantum

    def process_queue_level(self, pid: int) -> int:
        return self.state.lookup(pid).queue_level

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
            process.queue_level = 0
            process.time_in_queue = 0
            self._queues[0].append(process.pid)

    def _demote(self, process: Process) -> None:
        if process.queue_level < self.num_queues - 1:
            process.queue_level += 1
            process.time_in_queue = 0
            logger.debug(f"t={self.state.current_time}: demoted {process.name} to Q{process.queue_level}")

    def _priority_boost(self) -> None:
        now = self.state.current_time
        for process in self.state.processes:
            if process.state is not ProcessState.TERMINATED:
                process.queue_level = 0
                process.time_in_queue = 0

        # Keep relative order: upper queues first, FIFO within each.
        waiting = [pid for queue in self._queues for pid in queue]
        for queue in self._queues:
            queue.clear()
        self._queues[0].extend(
            pid for pid in waiting if self.state.lookup(pid).state is ProcessState.READY
        )

        self._last_boost = now
        logger.debug(f"t={now}: priority boost, {len(self._queues[0])} processes moved to Q0")

    def run(self) -> ScheduleResult:
        self.reset()
        state = self.state

        self._enqueue_arrivals()

        while not state.is_complete():
            if self.aging_enabled and state.current_time - self._last_boost >= self.boost_interval:
                self._priority_boost()

            level = self._active_queue()
            if level is None:
                state.idle_until_next_arrival()
                self._enqueue_arrivals()
                continue

            process = state.lookup(self._queues[level].popleft())
            quantum = self.quantums[level]
            state.switch_to(process)
            used = state.execute(process, quantum, queue_level=level)
            process.time_in_queue += used

            self._enqueue_arrivals()

            if process.is_completed:
                state.finish(process)
                continue

            # Demote once the whole allotment at this level is used up.
            if process.time_in_queue >= quantum:
                self._demote(process)
            process.state = ProcessState.READY
            self._queues[process.queue_level].append(process.pid)

        state.calculate_metrics()
        logger.info(f"{self.name} (quanta={self.quantums}) finished at t={state.current_time}")
        return state.result(self.name, self.scheduler_type)
