"""Program table rows and the downloadable "save" snapshot."""

from __future__ import annotations

from datetime import datetime, timezone

from ..schemas.base import WireModel
from ..schemas.program import Exercise, GeneratedProgram

DEFAULT_EQUIPMENT = "Mat"
BODYWEIGHT = "bodyweight"
LIGHT_WEIGHTS = "light weights"


class ExerciseRow(WireModel):
    no: int
    equipment: str
    exercise: str
    weight: str
    sets_reps: str


def _volume(exercise: Exercise) -> str:
    if exercise.repetitions:
        return f"{exercise.repetitions} reps"
    return f"{exercise.duration:g} min"


def _row(no: int, exercise: Exercise, main: bool) -> ExerciseRow:
    equipment = ", ".join(exercise.equipment) if exercise.equipment else DEFAULT_EQUIPMENT
    uses_weights = main and any("weight" in e.lower() for e in exercise.equipment or [])
    return ExerciseRow(
        no=no,
        equipment=equipment,
        exercise=exercise.name,
        weight=LIGHT_WEIGHTS if uses_weights else BODYWEIGHT,
        sets_reps=f"{exercise.sets or 1} sets x {_volume(exercise)}" if main else _volume(exercise),
    )


def program_to_rows(program: GeneratedProgram) -> list[ExerciseRow]:
    """Flatten warm-up, main workout and cool-down into rows numbered 1..n."""
    rows: list[ExerciseRow] = []
    sections = [(program.warm_up, False), (program.main_workout, True), (program.cool_down, False)]
    for exercises, main in sections:
        for exercise in exercises:
            rows.append(_row(len(rows) + 1, exercise, main))
    return rows


def append_rows(rows: list[ExerciseRow], exercises: list[Exercise]) -> list[ExerciseRow]:
    """Number new main-workout rows after the existing ones."""
    start = len(rows)
    return rows + [_row(start + i + 1, e, True) for i, e in enumerate(exercises)]


def build_snapshot(program: GeneratedProgram, rows: list[ExerciseRow] | None = None) -> dict:
    now = datetime.now(timezone.utc)
    rows = program_to_rows(program) if rows is None else rows
    return {
        "generatedProgram": program.model_dump(mode="json", by_alias=True),
        "exercises": [r.model_dump(by_alias=True) for r in rows],
        "timestamp": now.isoformat(),
    }


def snapshot_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"soulfit-program-{now.date().isoformat()}.json"
