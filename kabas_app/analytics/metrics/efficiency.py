"""Board efficiency heuristic.

The score is the average task duration expressed as a percentage of the time
elapsed since the earliest board issue was created. Completed issues count
their full duration and open issues their age so far. Lower is better. It is
a rough indicator of flow, not a statistically meaningful metric.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from kabas_app.core.config import EFFICIENCY_NOTE, EFFICIENCY_PRECISION, MIN_PROJECT_DURATION_HOURS
from kabas_app.core.models import Issue

from .timing import hours_between, round_hours


@dataclass(slots=True)
class EfficiencyReport:
    project_duration_hours: float
    total_time_all_tasks_hours: float
    avg_time_per_task_hours: float
    efficiency_score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectDurationHours": round_hours(self.project_duration_hours),
            "totalTimeAllTasksHours": round_hours(self.total_time_all_tasks_hours),
            "avgTimePerTaskHours": round_hours(self.avg_time_per_task_hours),
            "efficiencyScore": round(self.efficiency_score, EFFICIENCY_PRECISION),
            "note": EFFICIENCY_NOTE,
        }


def estimate_efficiency(board: Sequence[Issue], now: datetime) -> EfficiencyReport:
    if not board:
        duration = MIN_PROJECT_DURATION_HOURS
    else:
        earliest = min(issue.created_at for issue in board)
        duration = max(MIN_PROJECT_DURATION_HOURS, hours_between(earliest, now))

    total = 0.0
    for issue in board:
        end = issue.completed_at if issue.completed_at is not None else now
        total += hours_between(issue.created_at, end)

    avg = total / len(board) if board else 0.0
    return EfficiencyReport(
        project_duration_hours=duration,
        total_time_all_tasks_hours=total,
        avg_time_per_task_hours=avg,
        efficiency_score=(avg / duration) * 100,
    )
