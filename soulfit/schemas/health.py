from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .base import WireModel
from .posture import PostureImage

Level = Literal["Low", "Normal", "High"]
FatLevel = Literal["Low", "Low-normal", "Normal", "High"]


class SegmentMeasure(WireModel):
    muscle: float | None = None
    fat: float | None = None


class SegmentalData(WireModel):
    right_arm: SegmentMeasure | None = None
    left_arm: SegmentMeasure | None = None
    torso: SegmentMeasure | None = None
    right_leg: SegmentMeasure | None = None
    left_leg: SegmentMeasure | None = None


class NutritionalAssessment(WireModel):
    protein: Level | None = None
    fat: FatLevel | None = None
    minerals: Level | None = None
    water: Level | None = None


class ExerciseRecommendations(WireModel):
    """Suggested daily minutes per activity, as printed on some reports."""

    walking: float | None = None
    running: float | None = None
    swimming: float | None = None


class BodyCompositionReport(WireModel):
    # Basic info
    age: int | None = None
    gender: Literal["Male", "Female", "Other"] | None = None
    height: float | None = None  # cm
    weight: float | None = None  # kg
    test_date: str | None = None
    overall_rating: float | None = None  # 0-100

    # Composition
    intracellular_fluid: float | None = None  # L
    extracellular_fluid: float | None = None  # L
    body_water: float | None = None  # kg
    muscle_mass: float | None = None  # kg
    lean_body_mass: float | None = None  # kg
    protein: float | None = None  # kg
    minerals: float | None = None  # kg
    fat_mass: float | None = None  # kg

    # Analysis
    bmi: float | None = None
    body_fat_percentage: float | None = None
    skeletal_muscle_mass: float | None = None  # kg

    # Belly fat
    visceral_fat_area: float | None = None  # cm2
    subcutaneous_fat_area: float | None = None  # cm2
    body_water_fat_free_ratio: float | None = None  # kg/L

    segmental_data: SegmentalData | None = None
    nutritional_assessment: NutritionalAssessment | None = None

    calories_per_day: float | None = None
    exercise_recommendations: ExerciseRecommendations | None = None

    # History
    previous_weight: float | None = None
    previous_body_water: float | None = None
    previous_fat_percentage: float | None = None


class HealthAssessment(WireModel):
    id: str = ""
    body_composition_report: BodyCompositionReport | None = None
    report_image: PostureImage | None = None
    extracted_from_image: bool = False
    health_conditions: list[str] = Field(default_factory=list)
    injuries: list[str] = Field(default_factory=list)
    notes: str | None = None


# --- Nested shape returned by the extraction model ---


class ExtractedBasicInfo(BaseModel):
    age: int | None = Field(default=None, description="Age in years")
    gender: Literal["Male", "Female"] | None = Field(default=None, description="Biological gender")
    height_cm: float | None = Field(default=None, description="Height in centimeters", ge=50, le=250)
    weight_kg: float | None = Field(default=None, description="Weight in kilograms", ge=20, le=250)
    test_date: str | None = Field(default=None, description="Test date, YYYY-MM-DD")
    overall_rating: float | None = Field(default=None, description="Overall rating out of 100", ge=0, le=100)


class ExtractedBodyComposition(BaseModel):
    intracellular_fluid_L: float | None = None
    extracellular_fluid_L: float | None = None
    body_water_kg: float | None = None
    body_water_range_kg: str | None = None
    muscle_mass_kg: float | None = None
    muscle_mass_range_kg: str | None = None
    lean_mass_kg: float | None = None
    lean_mass_range_kg: str | None = None
    protein_kg: float | None = None
    protein_range_kg: str | None = None
    minerals_kg: float | None = None
    minerals_range_kg: str | None = None
    fat_mass_kg: float | None = None
    fat_mass_range_kg: str | None = None


class ExtractedMuscleFatAnalysis(BaseModel):
    bmi: float | None = None
    bmi_range: str | None = None
    body_fat_percentage: float | None = None
    body_fat_description: str | None = None
    weight_observation: str | None = None
    skeletal_muscle_mass_observation: str | None = None


class ExtractedBellyFat(BaseModel):
    visceral_fat_area_cm2: float | None = None
    visceral_fat_area_healthy_upper_cm2: float | None = None
    subcutaneous_fat_area_cm2: float | None = None
    body_water_fat_free_mass_ratio: float | None = None


class ExtractedSegment(BaseModel):
    muscle_mass_kg: float | None = None
    fat_mass_kg: float | None = None


class ExtractedSegmentalAnalysis(BaseModel):
    right_arm: ExtractedSegment | None = None
    left_arm: ExtractedSegment | None = None
    torso: ExtractedSegment | None = None
    right_leg: ExtractedSegment | None = None
    left_leg: ExtractedSegment | None = None
    muscle_balance_comment: str | None = None


class ExtractedNutritionalAssessment(BaseModel):
    protein: Level | None = None
    fat: FatLevel | None = None
    minerals: Level | None = None
    water: Level | None = None


class ExtractedHistory(BaseModel):
    previous_weight_kg: float | None = None
    previous_body_water_kg: float | None = None
    previous_fat_percentage: float | None = None
    history_comment: str | None = None


class ExtractedRecommendations(BaseModel):
    calories_per_day: float | None = None
    walking_min: float | None = None
    running_min: float | None = None
    swimming_min: float | None = None


class ExtractedReport(BaseModel):
    basic_info: ExtractedBasicInfo | None = None
    body_composition: ExtractedBodyComposition | None = None
    muscle_fat_analysis: ExtractedMuscleFatAnalysis | None = None
    belly_fat: ExtractedBellyFat | None = None
    segmental_analysis: ExtractedSegmentalAnalysis | None = None
    nutritional_assessment: ExtractedNutritionalAssessment | None = None
    history: ExtractedHistory | None = None
    exercise_recommendations: ExtractedRecommendations | None = None
