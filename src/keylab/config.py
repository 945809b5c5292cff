"""Service configuration.

Values come from the environment (optionally a local .env file) and are
exposed through a single pydantic model so route handlers and the CLI read
the same settings.
"""
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _csv(value: str) -> List[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


class KeylabConfig(BaseModel):
    api_prefix: str = os.getenv("KEYLAB_API_PREFIX", "/api/crypto")
    cors_origins: List[str] = _csv(os.getenv("KEYLAB_CORS_ORIGINS", os.getenv("FRONTEND_URL", "http://localhost:5173")))
    log_level: str = os.getenv("KEYLAB_LOG_LEVEL", "INFO").upper()

    # Algorithms used when a request omits one
    default_algorithm: str = os.getenv("KEYLAB_DEFAULT_ALGORITHM", "RSA-2048")
    default_kx_algorithm: str = os.getenv("KEYLAB_DEFAULT_KX_ALGORITHM", "P-256")

    # Upper bound on message text accepted over HTTP (RSA has its own, much lower, ceiling)
    max_message_bytes: int = int(os.getenv("KEYLAB_MAX_MESSAGE_BYTES", "65536"))

    metrics_enabled: bool = os.getenv("KEYLAB_METRICS_ENABLED", "true").lower() == "true"


CFG = KeylabConfig()


def load_config() -> KeylabConfig:
    return CFG
