from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Optional

from .base import SchedulerState, StateAccessors
from .models import Process, ProcessState, ScheduleResult, SchedulerConfig, SchedulerType

logger = logging.getLogger(__name__)


class RoundRobinScheduler(StateAccessors):
    """
    Round Robin scheduling with a fixed time quantum.

    - Ready processes wait in a FIFO ring.
    - Each dispatch runs for at most one quantum; an unfinished process goes
      to the back of the ring, behind anything that arrived during its slice.
    - If the ring is empty the clock jumps straight to the next arrival.
    """

    scheduler_type = SchedulerType.ROUND_ROBIN
    name = "Round Robin"

    def __init__(self, quantum: Optional[int] = None, config: Optional[SchedulerConfig] = None):
        self.config = config or SchedulerConfig()
        self.quantum = quantum if quantum is not None and quantum > 0 else self.config.time_quantum
        self.state = SchedulerState(self.config)
        self._ring: Deque[int] = deque()

    def add_process(self, process: Process) -> None:
        self.state.add_process(process)

    def reset(self) -> None:
        self.state.reset()
        self._ring.clear()

    def get_next_process(self) -> Optional[Process]:
        if not self._ring:
            return None
        return self.state.lookup(self._ring[0])

    def _enqueue_arrivals(self) -> None:
        for process in self.state.check_arrivals(self.state.current_time):
            self._ring.append(process.pid)

    def run(self) -> ScheduleResult:
        self.reset()
        state = self.state

        self._enqueue_arrivals()

        while not state.is_complete():
            if not self._ring:
                state.idle_until_next_arrival()
                self._enqueue_arrivals()
                continue

            process = state.lookup(self._ring.popleft())
            state.switch_to(process)
            used = state.execute(process, self.quantum)
            assert used <= self.quantum

            # Arrivals during the slice queue up ahead of the preempted process.
            self._enqueue_arrivals()

            if process.is_completed:
                state.finish(process)
            else:
                process.state = ProcessState.READY
                self._ring.append(process.pid)

        state.calculate_metrics()
        logger.info(f"{self.name} (q={self.quantum}) finished at t={state.current_time}")
        return state.result(self.name, self.scheduler_type)
