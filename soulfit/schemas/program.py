from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .base import WireModel
from .goals import UserGoals
from .health import HealthAssessment

Difficulty = Literal["easy", "medium", "hard"]


class Exercise(WireModel):
    name: str
    description: str = ""
    duration: float = Field(description="Duration in minutes")
    repetitions: int | None = None
    sets: int | None = None
    modifications: list[str] = Field(default_factory=list)
    target_areas: list[str] = Field(default_factory=list)
    difficulty: Difficulty = "medium"
    equipment: list[str] | None = None
    reasoning: str = Field(
        description="Why this exercise was chosen: link between the assessment findings and the user's goals"
    )

    @field_validator("reasoning")
    @classmethod
    def _reasoning_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("reasoning must not be empty")
        return value


# --- Phase-one clinical analysis ---


class MovementAssessment(BaseModel):
    primary_dysfunctions: list[str] = Field(description="Movement patterns that need correction")
    muscle_imbalances: list[str] = Field(description="Specific muscle imbalances identified")
    postural_deviations: list[str] = Field(description="Postural issues observed from the images")
    mobility_restrictions: list[str] = Field(description="Areas with limited mobility or flexibility")
    postural_description: str | None = Field(
        default=None, description="Overall posture from front, back, side and bend-down views"
    )


class HealthConsiderations(BaseModel):
    body_composition_insights: str = Field(description="How body composition affects exercise selection")
    strength_levels: str = Field(description="Overall strength capacity")
    risk_factors: list[str] = Field(description="Conditions or injuries that require modifications")
    exercise_contraindications: list[str] = Field(description="Exercises or movements to avoid")


class PriorityAreas(BaseModel):
    immediate_focus: list[str]
    secondary_goals: list[str]
    long_term_objectives: list[str]


class PilatesStrategy(BaseModel):
    key_principles: list[str]
    optimal_exercise_types: list[str]
    progression_approach: str
    session_structure_rationale: str


class ComprehensiveAnalysis(BaseModel):
    movement_assessment: MovementAssessment
    health_considerations: HealthConsiderations
    priority_areas: PriorityAreas
    pilates_strategy: PilatesStrategy


# --- Program ---


class ProgramDraft(WireModel):
    """Program as returned by the design phase, before acceptance."""

    id: str | None = None
    title: str
    duration: float = Field(description="Total program duration in minutes")
    warm_up: list[Exercise]
    main_workout: list[Exercise]
    cool_down: list[Exercise]
    reasoning: str = Field(description="Overall explanation of the program design")
    targeted_issues: list[str] = Field(default_factory=list)
    expected_outcomes: list[str] = Field(default_factory=list)
    progression_tips: list[str] = Field(default_factory=list)


class GeneratedProgram(ProgramDraft):
    id: str
    total_exercises: int = 0
    comprehensive_analysis: ComprehensiveAnalysis = Field(alias="comprehensive_analysis")
    created_at: datetime
    strategy: Literal["two_phase", "single_phase"] = "two_phase"
    # Catalog identifiers the model returned that could not be resolved.
    unresolved_exercises: list[str] = Field(default_factory=list)

    def all_exercises(self) -> list[Exercise]:
        return [*self.warm_up, *self.main_workout, *self.cool_down]


# --- Single-phase (catalog identifier) response ---


class SelectedExercise(BaseModel):
    exercise_id: str = Field(description="Identifier from the candidate catalog")
    duration: float
    repetitions: int | None = None
    sets: int | None = None
    modifications: list[str] = Field(default_factory=list)
    reasoning: str

    @field_validator("reasoning")
    @classmethod
    def _reasoning_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("reasoning must not be empty")
        return value


class CatalogProgramSelection(BaseModel):
    title: str
    duration: float
    warm_up: list[SelectedExercise]
    main_workout: list[SelectedExercise]
    cool_down: list[SelectedExercise]
    comprehensive_analysis: ComprehensiveAnalysis
    reasoning: str
    targeted_issues: list[str] = Field(default_factory=list)
    expected_outcomes: list[str] = Field(default_factory=list)
    progression_tips: list[str] = Field(default_factory=list)


class AdditionalExercises(BaseModel):
    """Reply shape for "generate more exercises" requests."""

    main_workout: list[Exercise]


class AdditionalCatalogExercises(BaseModel):
    main_workout: list[SelectedExercise]


# --- Request ---


class GenerateProgramRequest(WireModel):
    posture_analysis: str | None = None
    recommendations: list[str] = Field(default_factory=list)
    health_assessment: HealthAssessment = Field(default_factory=HealthAssessment)
    user_goals: UserGoals = Field(default_factory=UserGoals)
    selected_equipment: list[str] = Field(default_factory=list)
    request_more_exercises: bool = False
