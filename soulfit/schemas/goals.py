from __future__ import annotations

from typing import Literal

from pydantic import Field

from .base import WireModel

# Equipment a studio can offer. Identifiers are what the client sends.
EQUIPMENT_CATALOG = (
    "Mat",
    "Reformer",
    "Ladder barrel, corrector spine",
    "Cadillac",
    "Chair",
    "Arm Chair",
)

PrimaryGoal = Literal["strength", "flexibility", "rehabilitation", "weight-loss", "general-fitness"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced"]


class Preferences(WireModel):
    equipment: list[str] = Field(default_factory=list)
    intensity: Literal["low", "moderate", "high"] = "moderate"
    style: Literal["classical", "contemporary", "mixed"] = "mixed"


class UserGoals(WireModel):
    primary_goal: PrimaryGoal = "general-fitness"
    experience_level: ExperienceLevel = "beginner"
    available_time: Literal[30, 45, 60] = 45
    frequency: Literal[2, 3, 4, 5] = 3
    focus_areas: list[str] = Field(default_factory=list)
    limitations: list[str] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)

    other_goals: str | None = None
    has_exercised_before: bool | None = None
    has_pilates_experience: bool | None = None
    preferred_style: Literal["slow", "fast", "challenging", "relaxing"] | None = None
    motivation: str | None = None
    expected_results: str | None = None
    past_barriers: str | None = None
    potential_obstacles: list[str] | None = None
    concerns: list[str] | None = None
    medical_conditions: list[str] | None = None
    other_medical_conditions: str | None = None
    medical_release_required: bool | None = None

    # Physical measurements
    height: float | None = None
    weight: float | None = None
    body_fat_percentage: float | None = None
    oxygen_level: float | None = None
    blood_pressure: str | None = None
    resting_heart_rate: float | None = None
    chest_measurement: float | None = None
    waist_measurement: float | None = None
    hip_measurement: float | None = None
    left_arm_measurement: float | None = None
    right_arm_measurement: float | None = None
    left_thigh_measurement: float | None = None
    right_thigh_measurement: float | None = None

    # Expectations
    desired_transformation: str | None = None
    inspiration: str | None = None
    preferred_instructor_type: Literal["encouraging", "calm", "strict"] | None = None
    preferred_training_style: Literal["detailed", "fun", "others"] | None = None
