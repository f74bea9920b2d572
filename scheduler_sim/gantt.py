from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ExecutionEvent, Process


def _label(event: ExecutionEvent, names: Dict[int, str]) -> str:
    if event.is_context_switch:
        return "CS"
    if event.is_idle:
        return "idle"
    return names.get(event.pid, f"P{event.pid}")


def render_gantt(timeline: Sequence[ExecutionEvent], processes: Optional[Sequence[Process]] = None) -> str:
    """
    Plain-text Gantt chart: ``=`` for execution, ``x`` for context switches,
    ``.`` for idle time.
    """
    if not timeline:
        return "(no execution)"

    names = {p.pid: p.name for p in processes or []}
    events = sorted(timeline, key=lambda e: (e.start, e.end))

    line = "|"
    labels = ""
    time_marks = str(events[0].start)

    for ev in events:
        width = max(1, ev.duration)
        if ev.is_context_switch:
            fill = "x"
        elif ev.is_idle:
            fill = "."
        else:
            fill = "="
        line += fill * width
        labels += _label(ev, names)[:width].ljust(width)
        time_marks += f" {ev.end}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            " " + labels,
            time_marks,
        ]
    )


def build_rich_gantt(
    timeline: Sequence[ExecutionEvent],
    processes: Optional[Sequence[Process]] = None,
) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not timeline:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    names = {p.pid: p.name for p in processes or []}
    events = sorted(timeline, key=lambda e: (e.start, e.end))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    bar = Text()
    labels = Text()
    marks: List[str] = [str(events[0].start)]

    for ev in events:
        width = max(1, ev.duration)
        if ev.is_context_switch:
            bar.append("/" * width, style="dim")
            labels.append("".ljust(width))
        elif ev.is_idle:
            bar.append(" " * width)
            labels.append("".ljust(width))
        else:
            bar.append(" " * width, style=f"on {pid_color(ev.pid)}")
            labels.append(_label(ev, names)[:width].ljust(width), style="bold")
        marks.append(str(ev.end))

    table = Table.grid(padding=(0, 0))
    table.add_row(bar)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, " ".join(marks)
