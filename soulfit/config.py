"""Configuration settings for the SoulFit backend"""
import os
from typing import Any, Dict

from dotenv import load_dotenv

load_dotenv()

# Model provider. DEDALUS_API_KEY is read by the Dedalus SDK itself.
MODEL_NAME = os.getenv("SOULFIT_MODEL", "openai/gpt-5-mini")
TEMPERATURE = float(os.getenv("SOULFIT_TEMPERATURE", "1.0"))
ANALYSIS_MAX_TOKENS = int(os.getenv("ANALYSIS_MAX_TOKENS", "5000"))
EXTRACTION_MAX_TOKENS = int(os.getenv("EXTRACTION_MAX_TOKENS", "10000"))
GENERATION_MAX_TOKENS = int(os.getenv("GENERATION_MAX_TOKENS", "12000"))

# Language the model must answer in
RESPONSE_LANGUAGE = os.getenv("RESPONSE_LANGUAGE", "Thai")

# Program generation
GENERATION_STRATEGY = os.getenv("GENERATION_STRATEGY", "two_phase")  # two_phase | single_phase
REQUIRE_EQUIPMENT = os.getenv("REQUIRE_EQUIPMENT", "true").lower() == "true"
REJECT_UNRESOLVED_EXERCISES = os.getenv("REJECT_UNRESOLVED_EXERCISES", "false").lower() == "true"
PHASE_DELAY_SECONDS = float(os.getenv("PHASE_DELAY_SECONDS", "0"))
PROGRAM_DURATION_MINUTES = int(os.getenv("PROGRAM_DURATION_MINUTES", "50"))

# Session management
SESSION_TIMEOUT_SECONDS = int(os.getenv("SESSION_TIMEOUT_SECONDS", "3600"))  # 1 hour
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "100"))

# API configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "")
CORS_ORIGINS = [
    o for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",") if o
]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def get_config() -> Dict[str, Any]:
    """Get all non-secret configuration as a dictionary"""
    return {
        "model_name": MODEL_NAME,
        "temperature": TEMPERATURE,
        "analysis_max_tokens": ANALYSIS_MAX_TOKENS,
        "extraction_max_tokens": EXTRACTION_MAX_TOKENS,
        "generation_max_tokens": GENERATION_MAX_TOKENS,
        "response_language": RESPONSE_LANGUAGE,
        "generation_strategy": GENERATION_STRATEGY,
        "require_equipment": REQUIRE_EQUIPMENT,
        "reject_unresolved_exercises": REJECT_UNRESOLVED_EXERCISES,
        "phase_delay_seconds": PHASE_DELAY_SECONDS,
        "program_duration_minutes": PROGRAM_DURATION_MINUTES,
        "session_timeout_seconds": SESSION_TIMEOUT_SECONDS,
        "max_sessions": MAX_SESSIONS,
    }
