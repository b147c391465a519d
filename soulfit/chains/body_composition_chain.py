"""Body-composition report extraction client.

The model reads a report photo and answers in a nested schema
(``ExtractedReport``); ``remap_report`` flattens that into the
``BodyCompositionReport`` the wizard stores. There is no degraded path:
any failure is fatal and the caller falls back to manual entry.
"""

from __future__ import annotations

import logging

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage

from .. import config
from ..errors import ValidationError
from ..llm.dedalus_chat_model import DedalusChatModel
from ..schemas.health import (
    BodyCompositionReport,
    ExerciseRecommendations,
    ExtractedReport,
    ExtractedSegment,
    NutritionalAssessment,
    SegmentalData,
    SegmentMeasure,
)
from ..schemas.posture import PostureImage
from .structured import invoke_model, json_schema_format, language_instruction, parse_structured

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to extract data from body composition report"

PROMPT = """\
Analyze this body composition report image and extract all numerical data, \
measurements, and health metrics. Read all text, numbers, charts, and tables \
visible in the image. Convert the extracted data into the JSON format specified \
in the schema. Leave out any value that is not printed on the report. {language}"""


def _segment(segment: ExtractedSegment | None) -> SegmentMeasure | None:
    if segment is None:
        return None
    return SegmentMeasure(muscle=segment.muscle_mass_kg, fat=segment.fat_mass_kg)


def remap_report(extracted: ExtractedReport) -> BodyCompositionReport:
    """Flatten the extraction schema into a BodyCompositionReport.

    Each measured external field has exactly one target field; absent
    values stay absent. Reference ranges and free-text comments are not
    carried over.
    """
    basic = extracted.basic_info
    comp = extracted.body_composition
    analysis = extracted.muscle_fat_analysis
    belly = extracted.belly_fat
    seg = extracted.segmental_analysis
    nutrition = extracted.nutritional_assessment
    history = extracted.history
    recs = extracted.exercise_recommendations

    return BodyCompositionReport(
        age=basic.age if basic else None,
        gender=basic.gender if basic else None,
        height=basic.height_cm if basic else None,
        weight=basic.weight_kg if basic else None,
        test_date=basic.test_date if basic else None,
        overall_rating=basic.overall_rating if basic else None,
        intracellular_fluid=comp.intracellular_fluid_L if comp else None,
        extracellular_fluid=comp.extracellular_fluid_L if comp else None,
        body_water=comp.body_water_kg if comp else None,
        muscle_mass=comp.muscle_mass_kg if comp else None,
        lean_body_mass=comp.lean_mass_kg if comp else None,
        protein=comp.protein_kg if comp else None,
        minerals=comp.minerals_kg if comp else None,
        fat_mass=comp.fat_mass_kg if comp else None,
        bmi=analysis.bmi if analysis else None,
        body_fat_percentage=analysis.body_fat_percentage if analysis else None,
        # Reports print skeletal muscle mass as the muscle mass figure.
        skeletal_muscle_mass=comp.muscle_mass_kg if comp else None,
        visceral_fat_area=belly.visceral_fat_area_cm2 if belly else None,
        subcutaneous_fat_area=belly.subcutaneous_fat_area_cm2 if belly else None,
        body_water_fat_free_ratio=belly.body_water_fat_free_mass_ratio if belly else None,
        segmental_data=SegmentalData(
            right_arm=_segment(seg.right_arm),
            left_arm=_segment(seg.left_arm),
            torso=_segment(seg.torso),
            right_leg=_segment(seg.right_leg),
            left_leg=_segment(seg.left_leg),
        )
        if seg
        else None,
        nutritional_assessment=NutritionalAssessment(
            protein=nutrition.protein,
            fat=nutrition.fat,
            minerals=nutrition.minerals,
            water=nutrition.water,
        )
        if nutrition
        else None,
        calories_per_day=recs.calories_per_day if recs else None,
        exercise_recommendations=ExerciseRecommendations(
            walking=recs.walking_min,
            running=recs.running_min,
            swimming=recs.swimming_min,
        )
        if recs
        else None,
        previous_weight=history.previous_weight_kg if history else None,
        previous_body_water=history.previous_body_water_kg if history else None,
        previous_fat_percentage=history.previous_fat_percentage if history else None,
    )


class BodyCompositionClient:
    """Client for the report-extraction model call."""

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        self.llm = llm or DedalusChatModel(
            max_tokens=config.EXTRACTION_MAX_TOKENS,
            response_format=json_schema_format("body_composition_report", ExtractedReport),
        )

    def build_messages(self, report_image: PostureImage) -> list[HumanMessage]:
        return [
            HumanMessage(
                content=[
                    {"type": "text", "text": PROMPT.format(language=language_instruction())},
                    {"type": "image_url", "image_url": {"url": report_image.to_data_url()}},
                ]
            )
        ]

    async def extract(self, report_image: PostureImage | None) -> BodyCompositionReport:
        """Extract a flat report from one report photo.

        Raises ValidationError if no image is given, ServiceCallError on
        transport failure and ResponseShapeError on an empty or invalid reply.
        """
        if report_image is None or not report_image.data:
            raise ValidationError("Please provide a body composition report image")

        logger.info(
            "Extracting body composition: name=%s size=%d type=%s",
            report_image.filename,
            report_image.size,
            report_image.content_type,
        )
        content = await invoke_model(self.llm, self.build_messages(report_image), FAILURE_MESSAGE)
        extracted = parse_structured(content, ExtractedReport, FAILURE_MESSAGE)

        report = remap_report(extracted)
        logger.info(
            "Extraction complete: height=%s weight=%s", report.height, report.weight
        )
        return report
