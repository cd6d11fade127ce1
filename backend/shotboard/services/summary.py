from typing import Any, Dict, List

from shotboard import models, schemas


def to_minutes(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def to_amount(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def duration_label(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def build_report(project: models.Project) -> schemas.ProjectReport:
    """Shot counts, setup durations and budget totals for one project."""
    data: Dict[str, Any] = project.data or {}

    setups: List[schemas.SetupReport] = []
    shot_ids: List[str] = []
    for setup in data.get("setups") or []:
        shots = setup.get("shots") or []
        total = sum(to_minutes(shot.get("time")) for shot in shots)
        shot_ids.extend(str(shot.get("id")) for shot in shots)
        setups.append(
            schemas.SetupReport(
                title=setup.get("title") or "",
                shotCount=len(shots),
                totalMinutes=total,
                label=duration_label(total),
            )
        )

    days = data.get("schedule") or []
    scheduled = {str(ref) for day in days for ref in (day.get("shots") or [])}

    budget = data.get("production_budget") or []
    estimated = sum(to_amount(item.get("estCost")) for item in budget)
    actual = sum(to_amount(item.get("actCost")) for item in budget)

    return schemas.ProjectReport(
        id=project.id,
        title=project.title,
        shotCount=len(shot_ids),
        setups=setups,
        scheduleDays=len(days),
        unscheduledShots=[sid for sid in shot_ids if sid not in scheduled],
        budget=schemas.BudgetTotals(
            estimated=round(estimated, 2),
            actual=round(actual, 2),
            remaining=round(estimated - actual, 2),
        ),
    )
