from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Union

from .base import Scheduler
from .mlfq import MultilevelFeedbackQueueScheduler
from .mlq import MultilevelQueueScheduler
from .models import Process, ScheduleResult, SchedulerConfig, SchedulerType
from .priority import PriorityScheduler
from .round_robin import RoundRobinScheduler


ALGORITHMS: Dict[SchedulerType, Callable[[SchedulerConfig], Scheduler]] = {
    SchedulerType.ROUND_ROBIN: lambda cfg: RoundRobinScheduler(cfg.time_quantum, cfg),
    SchedulerType.PRIORITY_PREEMPTIVE: lambda cfg: PriorityScheduler(True, cfg),
    SchedulerType.PRIORITY_NON_PREEMPTIVE: lambda cfg: PriorityScheduler(False, cfg),
    SchedulerType.MULTILEVEL_QUEUE: lambda cfg: MultilevelQueueScheduler(cfg.num_queues, cfg),
    SchedulerType.MULTILEVEL_FEEDBACK_QUEUE: lambda cfg: MultilevelFeedbackQueueScheduler(cfg.num_queues, cfg),
}


def parse_scheduler_type(name: Union[str, SchedulerType]) -> SchedulerType:
    """
    Accept a SchedulerType or its short code (rr, pp, pnp, mlq, mlfq).
    """
    if isinstance(name, SchedulerType):
        return name
    try:
        return SchedulerType(name.lower())
    except ValueError:
        choices = ", ".join(t.value for t in SchedulerType)
        raise ValueError(f"Unknown algorithm '{name}' (choose from {choices})") from None


def create_scheduler(
    kind: Union[str, SchedulerType],
    config: Optional[SchedulerConfig] = None,
) -> Scheduler:
    config = config or SchedulerConfig()
    return ALGORITHMS[parse_scheduler_type(kind)](config)


def run_algorithm(
    kind: Union[str, SchedulerType],
    processes: Iterable[Process],
    config: Optional[SchedulerConfig] = None,
) -> ScheduleResult:
    """
    Build a fresh scheduler of the requested kind, load ``processes`` into it
    and run it. The caller's process objects are not modified.
    """
    scheduler = create_scheduler(kind, config)
    for process in processes:
        scheduler.add_process(process)
    return scheduler.run()
