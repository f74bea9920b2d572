from __future__ import annotations

import logging
from typing import Optional

from .base import SchedulerState, StateAccessors
from .models import Process, ProcessState, ScheduleResult, SchedulerConfig, SchedulerType

logger = logging.getLogger(__name__)


class PriorityScheduler(StateAccessors):
    """
    Priority scheduling, preemptive or non-preemptive, with optional aging.

    Lower numeric priority value means higher priority. Among ready
    processes, choose the one with the smallest priority; break ties by
    earlier arrival time, then PID.

    In preemptive mode the running process is re-evaluated every tick and
    gives up the CPU only to a strictly better ready process. Aging lowers
    the priority value of a process by one for every ``aging_threshold``
    ticks it spends waiting.
    """

    def __init__(self, preemptive: bool = False, config: Optional[SchedulerConfig] = None):
        self.config = config or SchedulerConfig()
        self.preemptive = preemptive
        self.aging_enabled = self.config.aging_enabled
        self.aging_threshold = self.config.aging_threshold
        self.state = SchedulerState(self.config)
        self._current: Optional[int] = None

    @property
    def name(self) -> str:
        return "Priority (Preemptive)" if self.preemptive else "Priority (Non-Preemptive)"

    @property
    def scheduler_type(self) -> SchedulerType:
        if self.preemptive:
            return SchedulerType.PRIORITY_PREEMPTIVE
        return SchedulerType.PRIORITY_NON_PREEMPTIVE

    def add_process(self, process: Process) -> None:
        self.state.add_process(process)

    def reset(self) -> None:
        self.state.reset()
        self._current = None

    def get_next_process(self) -> Optional[Process]:
        return self._highest_priority()

    def _highest_priority(self) -> Optional[Process]:
        now = self.state.current_time
        ready = [
            p for p in self.state.processes
            if p.state is ProcessState.READY and p.arrival_time <= now
        ]
        return min(ready, key=Process.sort_key, default=None)

    def _admit_arrivals(self) -> None:
        now = self.state.current_time
        for process in self.state.check_arrivals(now):
            process.waiting_since = now

    def _apply_aging(self) -> None:
        if not self.aging_enabled:
            return

        now = self.state.current_time
        for process in self.state.processes:
            if process.state is not ProcessState.READY:
                continue
            if process.waiting_since is None:
                process.waiting_since = now
                continue
            if now - process.waiting_since >= self.aging_threshold:
                if process.priority > 0:
                    process.priority -= 1
                    logger.debug(f"t={now}: aging {process.name} -> priority {process.priority}")
                process.waiting_since = now

    def _maybe_preempt(self) -> None:
        if not self.preemptive or self._current is None:
            return

        current = self.state.lookup(self._current)
        candidate = self._highest_priority()
        if candidate is not None and candidate.priority < current.priority:
            logger.debug(
                f"t={self.state.current_time}: {candidate.name} (prio {candidate.priority}) "
                f"preempts {current.name} (prio {current.priority})"
            )
            current.state = ProcessState.READY
            current.waiting_since = self.state.current_time
            self._current = None

    def _run_slice(self, process: Process) -> None:
        state = self.state
        slice_ = 1 if self.preemptive else process.remaining_time

        last = state.timeline[-1] if state.timeline else None
        if self.preemptive and last is not None and last.pid == process.pid and last.end == state.current_time:
            # Coalesce consecutive ticks of the same process into one segment.
            last.end += process.execute(slice_)
            state.current_time = last.end
        else:
            state.execute(process, slice_)

    def run(self) -> ScheduleResult:
        self.reset()
        state = self.state

        while not state.is_complete():
            self._admit_arrivals()
            self._maybe_preempt()
            self._apply_aging()

            if self._current is None:
                selected = self._highest_priority()
                if selected is None:
                    state.idle_until_next_arrival()
                    continue
                state.switch_to(selected)
                selected.waiting_since = None
                self._current = selected.pid

            process = state.lookup(self._current)
            self._run_slice(process)

            if process.is_completed:
                state.finish(process)
                self._current = None

        state.calculate_metrics()
        logger.info(f"{self.name} finished at t={state.current_time}")
        return state.result(self.name, self.scheduler_type)
