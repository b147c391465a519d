"""Error taxonomy for the SoulFit backend.

Every error carries a short, fixed, user-facing ``message`` plus an optional
``details`` string forwarded from the underlying cause. The HTTP layer
returns these two fields and nothing else.
"""

from __future__ import annotations


class SoulFitError(Exception):
    """Base class for all SoulFit errors."""

    message = "Unexpected error"

    def __init__(
        self,
        message: str | None = None,
        details: str | None = None,
        phase: str | None = None,
    ) -> None:
        if message is not None:
            self.message = message
        self.details = details
        self.phase = phase
        super().__init__(self.message if details is None else f"{self.message}: {details}")

    def to_payload(self) -> dict:
        payload: dict = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        if self.phase:
            payload["phase"] = self.phase
        return payload


class ValidationError(SoulFitError):
    """Caller-supplied preconditions not met. Raised before any model call."""

    message = "Invalid request"


class NoExercisesAvailable(SoulFitError):
    """The exercise catalog has no entries for the selected equipment."""

    message = "No exercises available for the selected equipment"


class ServiceCallError(SoulFitError):
    """Transport failure or non-2xx response from the model provider."""

    message = "External service call failed"


class ResponseShapeError(SoulFitError):
    """A response arrived but could not be parsed or failed its schema."""

    message = "External service returned an unexpected response"


class SessionNotFound(SoulFitError):
    """No wizard session with the given id; it was deleted or expired."""

    message = "Session not found"
