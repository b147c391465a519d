"""Six-step wizard state: immutable snapshots, pure reducers and a store."""

from .state import Step, WizardState, initial_state
from .store import SessionRegistry, WizardStore

__all__ = ["SessionRegistry", "Step", "WizardState", "WizardStore", "initial_state"]
