"""Posture analysis client.

Sends the four posture photos to the model, renders the structured
findings into a fixed multi-section text block and derives a
recommendation list from keywords in the side-view findings.
"""

from __future__ import annotations

import logging
from typing import Mapping

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage

from .. import config
from ..errors import ResponseShapeError, ValidationError
from ..llm.dedalus_chat_model import DedalusChatModel
from ..schemas.posture import (
    POSTURE_ROLES,
    PostureAnalysisResult,
    PostureFindings,
    PostureImage,
)
from .structured import invoke_model, json_schema_format, language_instruction, parse_structured

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to analyze posture images"

FALLBACK_RECOMMENDATION = "Follow the analysis recommendations provided above"
POSTURAL_AWARENESS = "Focus on postural awareness throughout daily activities"

# (field on side_findings, keyword, recommendations), applied in this order.
KEYWORD_RULES: list[tuple[str, str, tuple[str, ...]]] = [
    (
        "head_posture",
        "forward",
        (
            "Focus on cervical spine alignment exercises",
            "Strengthen deep neck flexors",
        ),
    ),
    (
        "shoulder_posture",
        "rounded",
        (
            "Strengthen middle trapezius and rhomboids",
            "Stretch chest muscles and anterior deltoids",
        ),
    ),
    (
        "lumbar_pelvic_posture",
        "tilt",
        ("Core stabilization exercises for pelvic alignment",),
    ),
]

PROMPT = """\
Analyze these 4 posture images (front, back, side and bend-down, in that order) \
and provide a comprehensive postural assessment. Describe front/back asymmetries, \
side-view alignment, and the quality of the forward bend (spinal flexibility, \
movement quality, compensations, hip hinge). {language}"""


def render_findings(findings: PostureFindings) -> str:
    """Render structured findings as the fixed three-section text block."""
    fb = findings.front_back_findings
    side = findings.side_findings
    bend = findings.bend_down_findings
    return "\n".join(
        [
            "Front/Back View Analysis:",
            f"- Head: {fb.head_asymmetry}",
            f"- Shoulders: {fb.shoulder_and_scapular}",
            f"- Feet: {fb.feet_position}",
            "",
            "Side View Analysis:",
            f"- Head Posture: {side.head_posture}",
            f"- Shoulder Posture: {side.shoulder_posture}",
            f"- Lumbar/Pelvic: {side.lumbar_pelvic_posture}",
            f"- Knees: {side.knee_observation}",
            "",
            "Bend-Down Analysis:",
            f"- Spinal Flexibility: {bend.spinal_flexibility}",
            f"- Movement Quality: {bend.movement_quality}",
            f"- Compensations: {bend.compensations}",
            f"- Hip Hinge: {bend.hip_hinge_pattern}",
        ]
    )


def derive_recommendations(findings: PostureFindings) -> list[str]:
    recommendations: list[str] = []
    for field, keyword, recs in KEYWORD_RULES:
        text = getattr(findings.side_findings, field)
        if keyword in text.lower():
            recommendations.extend(recs)
    recommendations.append(POSTURAL_AWARENESS)
    return recommendations


def _validate_images(images: Mapping[str, PostureImage | None]) -> list[PostureImage]:
    missing = [role for role in POSTURE_ROLES if not images.get(role)]
    if missing:
        raise ValidationError(
            "Please provide all 4 posture images",
            details=f"Missing: {', '.join(missing)}",
        )
    return [images[role] for role in POSTURE_ROLES]


class PostureAnalysisClient:
    """Client for the posture-analysis model call."""

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        self.llm = llm or DedalusChatModel(
            max_tokens=config.ANALYSIS_MAX_TOKENS,
            response_format=json_schema_format("postural_assessment", PostureFindings),
        )

    def build_messages(self, images: list[PostureImage]) -> list[HumanMessage]:
        content: list[dict] = [
            {"type": "text", "text": PROMPT.format(language=language_instruction())}
        ]
        content.extend(
            {"type": "image_url", "image_url": {"url": img.to_data_url()}}
            for img in images
        )
        return [HumanMessage(content=content)]

    async def analyze(self, images: Mapping[str, PostureImage | None]) -> PostureAnalysisResult:
        """Analyze the four posture photos keyed by role.

        Raises ValidationError before any call if a role is missing, and
        ServiceCallError/ResponseShapeError if the call fails or returns
        nothing. A reply that is not valid findings JSON degrades to the raw
        text with a single fallback recommendation.
        """
        ordered = _validate_images(images)
        logger.info(
            "Analyzing posture: %s",
            ", ".join(f"{role}={img.size}B" for role, img in zip(POSTURE_ROLES, ordered)),
        )

        content = await invoke_model(self.llm, self.build_messages(ordered), FAILURE_MESSAGE)

        try:
            findings = parse_structured(content, PostureFindings, FAILURE_MESSAGE)
        except ResponseShapeError:
            logger.warning("Posture findings unparseable, returning raw analysis text")
            return PostureAnalysisResult(
                analysis=content,
                recommendations=[FALLBACK_RECOMMENDATION],
                degraded=True,
            )

        result = PostureAnalysisResult(
            analysis=render_findings(findings),
            recommendations=derive_recommendations(findings),
        )
        logger.info("Posture analysis complete: %d recommendations", len(result.recommendations))
        return result
