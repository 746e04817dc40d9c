# symptra/config.py
import os
from typing import Optional


def _bool_env(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _float_env(name: str) -> Optional[float]:
    v = os.getenv(name, "").strip()
    if not v:
        return None
    return float(v)


DATABASE_URL = os.getenv("DATABASE_URL")

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "ollama").strip().lower()  # "ollama" or "mock"
MODEL_NAME = os.getenv("MODEL_NAME", "llama3")
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://127.0.0.1:11434")
COMPLETION_TIMEOUT = _float_env("COMPLETION_TIMEOUT")  # seconds, unset = no timeout
EXECUTOR_WORKERS = int(os.getenv("EXECUTOR_WORKERS", "3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _bool_env("LOG_JSON", default=False)
