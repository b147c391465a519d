from .goals import EQUIPMENT_CATALOG, Preferences, UserGoals
from .health import BodyCompositionReport, HealthAssessment
from .posture import POSTURE_ROLES, PostureAnalysisResult, PostureImage, PostureSubmission
from .program import ComprehensiveAnalysis, Exercise, GeneratedProgram, GenerateProgramRequest

__all__ = [
    "EQUIPMENT_CATALOG",
    "POSTURE_ROLES",
    "BodyCompositionReport",
    "ComprehensiveAnalysis",
    "Exercise",
    "GenerateProgramRequest",
    "GeneratedProgram",
    "HealthAssessment",
    "PostureAnalysisResult",
    "PostureImage",
    "PostureSubmission",
    "Preferences",
    "UserGoals",
]
