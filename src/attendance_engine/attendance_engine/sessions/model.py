from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class SessionType:
    """Domain entity: a named scheduled work window (e.g. "Morning")."""

    session_type_id: int
    name: str
    start_time: time
    end_time: time
    is_active: bool = True
    description: Optional[str] = None
