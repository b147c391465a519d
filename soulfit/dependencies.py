"""Process-wide service clients, exposed as FastAPI dependencies.

Tests swap them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from .chains.body_composition_chain import BodyCompositionClient
from .chains.posture_chain import PostureAnalysisClient
from .chains.program_chain import ProgramGenerator
from .wizard.store import SessionRegistry

_posture_client: PostureAnalysisClient | None = None
_body_composition_client: BodyCompositionClient | None = None
_program_generator: ProgramGenerator | None = None
_sessions = SessionRegistry()


def get_posture_client() -> PostureAnalysisClient:
    global _posture_client
    if _posture_client is None:
        _posture_client = PostureAnalysisClient()
    return _posture_client


def get_body_composition_client() -> BodyCompositionClient:
    global _body_composition_client
    if _body_composition_client is None:
        _body_composition_client = BodyCompositionClient()
    return _body_composition_client


def get_program_generator() -> ProgramGenerator:
    global _program_generator
    if _program_generator is None:
        _program_generator = ProgramGenerator()
    return _program_generator


def get_sessions() -> SessionRegistry:
    return _sessions
