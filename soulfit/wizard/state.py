from __future__ import annotations

from enum import IntEnum

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..schemas.base import WireModel
from ..schemas.goals import UserGoals
from ..schemas.health import HealthAssessment
from ..schemas.posture import PostureSubmission
from ..schemas.program import GeneratedProgram
from ..services.export import ExerciseRow


class Step(IntEnum):
    POSTURE_CAPTURE = 1
    HEALTH_ASSESSMENT = 2
    ANALYSIS_REVIEW = 3
    GOALS_QUESTIONNAIRE = 4
    EQUIPMENT_SELECTION = 5
    PROGRAM_VIEW = 6


FIRST_STEP = Step.POSTURE_CAPTURE
LAST_STEP = Step.PROGRAM_VIEW


class WizardState(WireModel):
    """One snapshot of the wizard. Reducers return new snapshots."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    current_step: Step = FIRST_STEP
    posture_submission: PostureSubmission = Field(default_factory=PostureSubmission)
    health_assessment: HealthAssessment = Field(default_factory=HealthAssessment)
    user_goals: UserGoals = Field(default_factory=UserGoals)
    selected_equipment: list[str] = Field(default_factory=list)
    generated_program: GeneratedProgram | None = None
    # Display table for the program. Rows added by "generate more" are
    # numbered after the existing ones and never renumber them.
    program_rows: list[ExerciseRow] = Field(default_factory=list)
    is_loading: bool = False
    error: str | None = None


def initial_state() -> WizardState:
    return WizardState()


# --- Partial update shapes ---
#
# Each update model has the fields of its aggregate; only fields the caller
# set explicitly are applied. Values replace the aggregate's field as a
# whole: a new body_composition_report, report_image or preferences object
# replaces the old one, it is never merged field by field.


class PostureUpdate(PostureSubmission):
    pass


class HealthUpdate(HealthAssessment):
    pass


class GoalsUpdate(UserGoals):
    pass
