"""
GRC AI Assist - Configuration
Environment-driven settings for the local inference endpoint and the AI audit trail.
"""

import os
from dataclasses import dataclass
from typing import List


def _float_env(name: str, default: float) -> float:
    """Read a float setting; blank or unparseable values fall back to ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Local inference endpoint (Ollama)
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.2")
OLLAMA_TIMEOUT_SEC = _float_env("OLLAMA_TIMEOUT_SEC", 120.0)
OLLAMA_TEMPERATURE = _float_env("OLLAMA_TEMPERATURE", 0.7)
OLLAMA_TOP_P = _float_env("OLLAMA_TOP_P", 0.9)

# AI audit trail (in-memory, process lifetime only)
AI_AUDIT_ENABLED = os.getenv("AI_AUDIT_ENABLED", "true").lower() == "true"

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Version string
VERSION = "1.0.0"


@dataclass(frozen=True)
class OllamaSettings:
    """Connection parameters for the inference endpoint."""
    base_url: str
    model: str
    timeout_sec: float
    temperature: float
    top_p: float


def get_ollama_url() -> str:
    """Base URL of the Ollama service, without trailing slash."""
    url = os.getenv("OLLAMA_URL", "").strip() or "http://localhost:11434"
    return url.rstrip("/")


def get_ollama_model() -> str:
    """Model identifier sent with every generation request."""
    return os.getenv("OLLAMA_MODEL", "").strip() or "llama3.2"


def get_ollama_timeout() -> float:
    """Upper bound in seconds for a single inference call."""
    return _float_env("OLLAMA_TIMEOUT_SEC", 120.0)


def get_ollama_settings() -> OllamaSettings:
    """Resolve endpoint settings from the current environment."""
    return OllamaSettings(
        base_url=get_ollama_url(),
        model=get_ollama_model(),
        timeout_sec=get_ollama_timeout(),
        temperature=_float_env("OLLAMA_TEMPERATURE", 0.7),
        top_p=_float_env("OLLAMA_TOP_P", 0.9),
    )


def is_ai_audit_enabled() -> bool:
    """Check if AI interactions should be recorded in the audit trail."""
    return os.getenv("AI_AUDIT_ENABLED", "true").lower() == "true"


def debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def validate_ai_config() -> List[str]:
    """Validate AI endpoint configuration and return any issues."""
    issues = []
    settings = get_ollama_settings()

    if not settings.base_url.startswith(("http://", "https://")):
        issues.append(f"OLLAMA_URL must be an http(s) URL, got '{settings.base_url}'")

    if settings.timeout_sec <= 0:
        issues.append("OLLAMA_TIMEOUT_SEC must be positive")

    if not 0.0 <= settings.temperature <= 2.0:
        issues.append("OLLAMA_TEMPERATURE must be between 0.0 and 2.0")

    if not 0.0 < settings.top_p <= 1.0:
        issues.append("OLLAMA_TOP_P must be in (0.0, 1.0]")

    return issues
