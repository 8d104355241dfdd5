# projectgen/utils/config.py
"""
Runtime configuration, read once from the environment (and a local .env file).
"""
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# Storage
GENERATED_PROJECTS_DIR = os.environ.get("GENERATED_PROJECTS_DIR", "generated_projects")
ARTIFACT_TTL_SECONDS = float(os.environ.get("ARTIFACT_TTL_SECONDS", 5 * 60))

# Model call
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash-lite")
LLM_TEMPERATURE = float(os.environ.get("LLM_TEMPERATURE", 0.2))
LLM_RETRIES = int(os.environ.get("AI_RETRY_COUNT", 2))
TIMEOUT = int(os.environ.get("AI_TIMEOUT", 180))
LOG_DIR = os.environ.get("AI_BACKEND_LOG_DIR", "./ai_backend_logs")

# HTTP
ALLOWED_ORIGINS = _env_list(
    "ALLOWED_ORIGINS",
    [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080",
    ],
)
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "").rstrip("/")

# Remediation hints: ask the npm registry for concrete versions of missing packages
NPM_REGISTRY_LOOKUP = _env_bool("NPM_REGISTRY_LOOKUP", False)
