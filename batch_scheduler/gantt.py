from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Job

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _column(t: float, scale: float) -> int:
    return int(round(t * scale))


def _time_marks(points: List[float], scale: float) -> str:
    """
    Place each boundary time under its column; later marks that would
    collide with an earlier one are dropped.
    """
    line = ""
    for t in points:
        col = _column(t, scale)
        label = f"{t:g}"
        if col < len(line) + (1 if line else 0):
            continue
        line = line.ljust(col) + label
    return line


def build_rich_gantt(jobs: List[Job], cores: int, scale: float = 1.0) -> Panel:
    """
    Build a Rich Panel with one colored lane per core.
    """
    scheduled = [j for j in jobs if j.is_scheduled and j.core is not None]
    if not scheduled:
        return Panel("No execution", title="Gantt Chart")

    job_to_color: Dict[int, str] = {}

    def job_color(job_id: int) -> str:
        if job_id not in job_to_color:
            job_to_color[job_id] = COLORS[len(job_to_color) % len(COLORS)]
        return job_to_color[job_id]

    table = Table.grid(padding=(0, 1))

    for core in range(cores):
        lane = sorted((j for j in scheduled if j.core == core), key=lambda j: (j.start, j.end))

        timeline = Text()
        labels = Text()
        cursor = 0
        points = [0.0]

        for job in lane:
            start_col = max(_column(job.start, scale), cursor)
            gap = start_col - cursor
            if gap > 0:
                timeline.append(" " * gap)
                labels.append(" " * gap)

            width = max(1, _column(job.end, scale) - start_col)
            label = str(job.id)
            timeline.append(" " * width, style=f"on {job_color(job.id)}")
            labels.append(label[:width].ljust(width), style="bold")
            cursor = start_col + width

            for t in (job.start, job.end):
                if t != points[-1]:
                    points.append(t)

        table.add_row(Text(f"core {core}", style="bold"), timeline)
        table.add_row("", labels)
        table.add_row("", Text(_time_marks(points, scale), style="dim"))

    return Panel.fit(table, title="Gantt Chart")
