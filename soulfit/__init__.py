"""SoulFit AI backend.

Collects posture photos, a body-composition report and a goals
questionnaire through a six-step wizard, and delegates posture analysis,
report extraction and Pilates program generation to an LLM.
"""

__version__ = "0.1.0"
