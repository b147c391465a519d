"""Pure reducers over WizardState snapshots.

None of these mutate their input; each returns a new snapshot (or the same
one when nothing changes). None of them perform I/O.
"""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel

from ..errors import ValidationError
from ..schemas.goals import EQUIPMENT_CATALOG
from ..schemas.posture import POSTURE_ROLES
from ..schemas.program import Exercise, GeneratedProgram
from ..services.export import append_rows, program_to_rows
from .state import (
    FIRST_STEP,
    LAST_STEP,
    GoalsUpdate,
    HealthUpdate,
    PostureUpdate,
    Step,
    WizardState,
    initial_state,
)

AggregateT = TypeVar("AggregateT", bound=BaseModel)


def _merge(current: AggregateT, update: BaseModel) -> AggregateT:
    changes = {name: getattr(update, name) for name in update.model_fields_set}
    return current.model_copy(update=changes)


def _coerce(update: BaseModel | Mapping[str, Any], model: type[BaseModel]) -> BaseModel:
    if isinstance(update, model):
        return update
    if isinstance(update, BaseModel):
        update = {name: getattr(update, name) for name in update.model_fields_set}
    return model.model_validate(update)


def advance(state: WizardState) -> WizardState:
    if state.current_step >= LAST_STEP:
        return state
    return state.model_copy(update={"current_step": Step(state.current_step + 1)})


def retreat(state: WizardState) -> WizardState:
    if state.current_step <= FIRST_STEP:
        return state
    return state.model_copy(update={"current_step": Step(state.current_step - 1)})


def update_posture(state: WizardState, update: PostureUpdate | Mapping[str, Any]) -> WizardState:
    update = _coerce(update, PostureUpdate)
    return state.model_copy(update={"posture_submission": _merge(state.posture_submission, update)})


def update_health(state: WizardState, update: HealthUpdate | Mapping[str, Any]) -> WizardState:
    update = _coerce(update, HealthUpdate)
    return state.model_copy(update={"health_assessment": _merge(state.health_assessment, update)})


def update_goals(state: WizardState, update: GoalsUpdate | Mapping[str, Any]) -> WizardState:
    update = _coerce(update, GoalsUpdate)
    return state.model_copy(update={"user_goals": _merge(state.user_goals, update)})


def update_equipment(state: WizardState, equipment: list[str]) -> WizardState:
    unknown = [e for e in equipment if e not in EQUIPMENT_CATALOG]
    if unknown:
        raise ValidationError("Unknown equipment", details=", ".join(unknown))
    return state.model_copy(update={"selected_equipment": list(dict.fromkeys(equipment))})


def set_program(state: WizardState, program: GeneratedProgram) -> WizardState:
    return state.model_copy(
        update={"generated_program": program, "program_rows": program_to_rows(program)}
    )


def append_exercises(state: WizardState, exercises: list[Exercise]) -> WizardState:
    """Append extra main-workout entries, leaving existing ones untouched.

    The new table rows go after every existing row, cool-down included.
    """
    program = state.generated_program
    if program is None:
        raise ValidationError("No program to extend")
    main_workout = [*program.main_workout, *exercises]
    extended = program.model_copy(
        update={
            "main_workout": main_workout,
            "total_exercises": len(program.warm_up) + len(main_workout) + len(program.cool_down),
        }
    )
    return state.model_copy(
        update={
            "generated_program": extended,
            "program_rows": append_rows(state.program_rows, exercises),
        }
    )


def set_loading(state: WizardState, loading: bool) -> WizardState:
    return state.model_copy(update={"is_loading": loading})


def set_error(state: WizardState, error: str | None) -> WizardState:
    return state.model_copy(update={"error": error})


def reset(state: WizardState | None = None) -> WizardState:
    return initial_state()


def advance_blockers(state: WizardState) -> list[str]:
    """Reasons the current step cannot be left forward; empty when it can."""
    step = state.current_step
    if step == Step.POSTURE_CAPTURE:
        missing = [
            role
            for role in POSTURE_ROLES
            if getattr(state.posture_submission, f"{role}_image") is None
        ]
        return [f"{role} image is required" for role in missing]
    if step == Step.HEALTH_ASSESSMENT:
        report = state.health_assessment.body_composition_report
        blockers = []
        if report is None or report.height is None:
            blockers.append("height is required")
        if report is None or report.weight is None:
            blockers.append("weight is required")
        return blockers
    if step == Step.ANALYSIS_REVIEW:
        if not state.posture_submission.analysis:
            return ["posture analysis has not completed"]
        return []
    if step == Step.EQUIPMENT_SELECTION:
        if not state.selected_equipment:
            return ["select at least one piece of equipment"]
        return []
    if step == LAST_STEP:
        return ["already at the last step"]
    return []


def can_advance(state: WizardState) -> bool:
    return not advance_blockers(state)
