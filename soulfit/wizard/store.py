"""Wizard store and in-memory session registry.

``WizardStore`` owns the current snapshot for one wizard session, applies
reducers to it and drives the service clients for the steps that need
them. Nothing is persisted; a session lives until it is
deleted or evicted by the idle timeout or the session limit.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Mapping

from .. import config
from ..chains.body_composition_chain import BodyCompositionClient
from ..chains.posture_chain import PostureAnalysisClient
from ..chains.program_chain import ProgramGenerator
from ..errors import SoulFitError, ValidationError
from ..schemas.posture import PostureImage
from ..schemas.program import Exercise, GeneratedProgram, GenerateProgramRequest
from . import reducers
from .state import GoalsUpdate, HealthUpdate, PostureUpdate, WizardState, initial_state

logger = logging.getLogger(__name__)


class WizardStore:
    def __init__(
        self,
        session_id: str | None = None,
        state: WizardState | None = None,
        last_access: float | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.state = state or initial_state()
        self.last_access = time.monotonic() if last_access is None else last_access

    def _apply(self, new_state: WizardState) -> WizardState:
        self.state = new_state
        return new_state

    # --- transitions ---

    def advance(self) -> WizardState:
        before = self.state.current_step
        after = self._apply(reducers.advance(self.state)).current_step
        if after != before:
            logger.info("Session %s: step %d -> %d", self.session_id, before, after)
        return self.state

    def retreat(self) -> WizardState:
        before = self.state.current_step
        after = self._apply(reducers.retreat(self.state)).current_step
        if after != before:
            logger.info("Session %s: step %d -> %d", self.session_id, before, after)
        return self.state

    def try_advance(self) -> list[str]:
        """Advance only if the current step's requirements are met.

        Returns the blockers; an empty list means the step advanced.
        """
        blockers = reducers.advance_blockers(self.state)
        if blockers:
            logger.info(
                "Session %s: advance from step %d blocked: %s",
                self.session_id,
                self.state.current_step,
                "; ".join(blockers),
            )
            return blockers
        self.advance()
        return []

    def can_advance(self) -> bool:
        return reducers.can_advance(self.state)

    # --- updates ---

    def update_posture(self, update: PostureUpdate | Mapping[str, Any]) -> WizardState:
        return self._apply(reducers.update_posture(self.state, update))

    def update_health(self, update: HealthUpdate | Mapping[str, Any]) -> WizardState:
        return self._apply(reducers.update_health(self.state, update))

    def update_goals(self, update: GoalsUpdate | Mapping[str, Any]) -> WizardState:
        return self._apply(reducers.update_goals(self.state, update))

    def update_equipment(self, equipment: list[str]) -> WizardState:
        return self._apply(reducers.update_equipment(self.state, equipment))

    def set_program(self, program: GeneratedProgram) -> WizardState:
        return self._apply(reducers.set_program(self.state, program))

    def append_exercises(self, exercises: list[Exercise]) -> WizardState:
        return self._apply(reducers.append_exercises(self.state, exercises))

    def set_loading(self, loading: bool) -> WizardState:
        return self._apply(reducers.set_loading(self.state, loading))

    def set_error(self, error: str | None) -> WizardState:
        return self._apply(reducers.set_error(self.state, error))

    def reset(self) -> WizardState:
        logger.info("Session %s: reset", self.session_id)
        return self._apply(reducers.reset(self.state))

    # --- service-backed steps ---

    def program_request(self, more: bool = False) -> GenerateProgramRequest:
        posture = self.state.posture_submission
        return GenerateProgramRequest(
            posture_analysis=posture.analysis,
            recommendations=posture.recommendations or [],
            health_assessment=self.state.health_assessment,
            user_goals=self.state.user_goals,
            selected_equipment=self.state.selected_equipment,
            request_more_exercises=more,
        )

    async def _run(self, coro):
        self._apply(reducers.set_error(reducers.set_loading(self.state, True), None))
        try:
            return await coro
        except SoulFitError as e:
            self.set_error(e.message)
            raise
        finally:
            self.set_loading(False)

    async def analyze_posture(self, client: PostureAnalysisClient) -> WizardState:
        result = await self._run(client.analyze(self.state.posture_submission.images_by_role()))
        return self.update_posture(
            {"analysis": result.analysis, "recommendations": result.recommendations}
        )

    async def extract_report(
        self, client: BodyCompositionClient, report_image: PostureImage
    ) -> WizardState:
        report = await self._run(client.extract(report_image))
        return self.update_health(
            {
                "body_composition_report": report,
                "report_image": report_image,
                "extracted_from_image": True,
            }
        )

    async def generate_program(self, generator: ProgramGenerator) -> WizardState:
        program = await self._run(generator.generate(self.program_request()))
        return self.set_program(program)

    async def generate_more(self, generator: ProgramGenerator) -> WizardState:
        if self.state.generated_program is None:
            raise ValidationError("Generate a program before requesting more exercises")
        exercises = await self._run(
            generator.generate_more(self.program_request(more=True), self.state.generated_program)
        )
        return self.append_exercises(exercises)


class SessionRegistry:
    """In-memory wizard sessions keyed by id.

    Sessions idle longer than ``timeout_seconds`` are dropped, and the
    least recently used one is dropped when ``create`` would go past
    ``max_sessions``. Expiry is checked on ``create`` and ``get``.
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        max_sessions: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout_seconds = (
            config.SESSION_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self.max_sessions = config.MAX_SESSIONS if max_sessions is None else max_sessions
        self._clock = clock
        self._sessions: dict[str, WizardStore] = {}

    def create(self) -> WizardStore:
        self._evict_expired()
        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest = min(self._sessions.values(), key=lambda s: s.last_access)
            logger.info("Session limit reached, dropping session %s", oldest.session_id)
            del self._sessions[oldest.session_id]

        store = WizardStore(last_access=self._clock())
        self._sessions[store.session_id] = store
        logger.info("Created wizard session %s", store.session_id)
        return store

    def get(self, session_id: str) -> WizardStore | None:
        self._evict_expired()
        store = self._sessions.get(session_id)
        if store is not None:
            store.last_access = self._clock()
        return store

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self.timeout_seconds
        expired = [sid for sid, s in self._sessions.items() if s.last_access < cutoff]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Expired %d idle wizard session(s)", len(expired))

    def __len__(self) -> int:
        return len(self._sessions)
