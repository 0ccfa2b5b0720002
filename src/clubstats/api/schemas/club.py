from __future__ import annotations

from typing import Dict

from pydantic import BaseModel


class MenuSettingsResponse(BaseModel):
    ok: bool = True
    settings: Dict[str, bool]
