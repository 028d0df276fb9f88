from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ApiConfig:
    cors_origins: Tuple[str, ...]
    log_level: str


_cached_config: ApiConfig | None = None


def _origins_from_env(name: str) -> Tuple[str, ...]:
    # Unset or blank leaves cross-origin requests disabled
    raw = os.getenv(name, "")
    return tuple(origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip())


def get_api_config() -> ApiConfig:
    global _cached_config
    if _cached_config is None:
        _cached_config = ApiConfig(
            cors_origins=_origins_from_env("INSIGHT_VALIDATION_CORS_ORIGINS"),
            log_level=os.getenv("INSIGHT_VALIDATION_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
    return _cached_config
