from __future__ import annotations

import base64

from pydantic import BaseModel, Field, computed_field

from .base import WireModel

# Logical roles of the four posture photos, in prompt order.
POSTURE_ROLES = ("front", "back", "side", "bend_down")


class PostureImage(WireModel):
    """An uploaded photo. Raw bytes never leave the process in JSON dumps."""

    content_type: str = "image/jpeg"
    filename: str | None = None
    data: bytes = Field(default=b"", exclude=True, repr=False)

    @computed_field
    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class PostureSubmission(WireModel):
    id: str = ""
    front_image: PostureImage | None = None
    back_image: PostureImage | None = None
    side_image: PostureImage | None = None
    bend_down_image: PostureImage | None = None
    analysis: str | None = None
    recommendations: list[str] | None = None

    def images_by_role(self) -> dict[str, PostureImage]:
        """Return the uploaded images keyed by role, skipping empty slots."""
        slots = {role: getattr(self, f"{role}_image") for role in POSTURE_ROLES}
        return {role: img for role, img in slots.items() if img is not None}


# --- Structured findings returned by the analysis model ---


class FrontBackFindings(BaseModel):
    head_asymmetry: str = Field(
        description="Right-to-left asymmetry or tilt/rotation of the head."
    )
    shoulder_and_scapular: str = Field(
        description="Shoulder level and scapular positioning."
    )
    feet_position: str = Field(description="How the feet are positioned or rotated.")


class SideFindings(BaseModel):
    head_posture: str = Field(description="Head position relative to the body.")
    shoulder_posture: str = Field(
        description="Shoulders and upper-back curvature."
    )
    lumbar_pelvic_posture: str = Field(
        description="Lumbar curve and pelvic alignment."
    )
    knee_observation: str = Field(description="Knee joint posture.")


class BendDownFindings(BaseModel):
    spinal_flexibility: str = Field(
        description="Segmental spinal flexion observed while bending forward."
    )
    movement_quality: str = Field(description="Smoothness and control of the bend.")
    compensations: str = Field(description="Compensatory movements observed.")
    hip_hinge_pattern: str = Field(description="Quality of the hip hinge.")


class PostureFindings(BaseModel):
    front_back_findings: FrontBackFindings
    side_findings: SideFindings
    bend_down_findings: BendDownFindings


class PostureAnalysisResult(WireModel):
    analysis: str
    recommendations: list[str]
    # Set when the model's reply could not be parsed and raw text is returned.
    degraded: bool = Field(default=False, exclude=True)
