"""Runtime settings resolved from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)

_CACHE_TTL_ENV = "CLUBSTATS_CACHE_TTL_SECONDS"
_CACHE_VERSION_ENV = "CLUBSTATS_CACHE_VERSION"
_WORKERS_ENV = "CLUBSTATS_WORKERS"
_ROSTER_MEMO_ENV = "CLUBSTATS_ROSTER_MEMO_SECONDS"
_DB_PATH_ENV = "CLUBSTATS_DB_PATH"

CACHE_TTL_SECONDS_DEFAULT = 10 * 60.0
CACHE_VERSION_DEFAULT = 1
WORKERS_DEFAULT = 8
ROSTER_MEMO_SECONDS_DEFAULT = 300.0
DB_PATH_DEFAULT = Path(__file__).resolve().parents[1] / "clubstats.sqlite"


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass(frozen=True)
class EngineSettings:
    cache_ttl_seconds: float = CACHE_TTL_SECONDS_DEFAULT
    cache_version: int = CACHE_VERSION_DEFAULT
    workers: int = WORKERS_DEFAULT
    roster_memo_seconds: float = ROSTER_MEMO_SECONDS_DEFAULT
    db_path: str = str(DB_PATH_DEFAULT)

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            cache_ttl_seconds=_env_float(_CACHE_TTL_ENV, CACHE_TTL_SECONDS_DEFAULT, clamp_min=0.0),
            cache_version=_env_int(_CACHE_VERSION_ENV, CACHE_VERSION_DEFAULT),
            workers=_env_int(_WORKERS_ENV, WORKERS_DEFAULT, min_value=1),
            roster_memo_seconds=_env_float(_ROSTER_MEMO_ENV, ROSTER_MEMO_SECONDS_DEFAULT, clamp_min=0.0),
            db_path=os.getenv(_DB_PATH_ENV) or str(DB_PATH_DEFAULT),
        )
