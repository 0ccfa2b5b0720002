"""Persist and load engine setting overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict

from clubstats.config import EngineSettings


logger = logging.getLogger(__name__)

_PROFILE_ENV = "CLUBSTATS_PROFILE"
_KNOWN_KEYS = {f.name for f in fields(EngineSettings)}


@dataclass
class EngineProfile:
    overrides: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "EngineProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        overrides = data.get("overrides", {})
        unknown = set(overrides) - _KNOWN_KEYS
        if unknown:
            raise ValueError(f"Unknown engine settings in {path}: {sorted(unknown)}")
        return cls(overrides=overrides)

    def save(self, path: Path) -> None:
        payload = {"overrides": self.overrides}
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def apply(self, settings: EngineSettings) -> EngineSettings:
        return replace(settings, **self.overrides)


def load_settings() -> EngineSettings:
    """Environment settings, with the ``CLUBSTATS_PROFILE`` file applied on top."""

    settings = EngineSettings.from_env()
    raw = os.getenv(_PROFILE_ENV)
    if not raw:
        return settings
    path = Path(raw).expanduser()
    if not path.is_file():
        logger.warning("Engine profile %s not found; using environment settings", path)
        return settings
    logger.info("Applying engine profile %s", path)
    return EngineProfile.load(path).apply(settings)
