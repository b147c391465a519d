"""LLM-backed service clients: posture analysis, report extraction, program generation."""
