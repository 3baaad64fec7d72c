from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SessionType


class SessionTypeRepository(Protocol):
    def list_session_types(self, active_only: bool = True) -> Sequence[SessionType]:
        raise NotImplementedError

    def get_by_id(self, session_type_id: int) -> Optional[SessionType]:
        raise NotImplementedError
