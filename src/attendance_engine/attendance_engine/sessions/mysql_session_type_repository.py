from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import SessionType
from .repository import SessionTypeRepository

_COLUMNS = "session_type_id, name, start_time, end_time, description, is_active"


def _to_session_type(r: Dict[str, Any]) -> SessionType:
    return SessionType(
        session_type_id=int(r["session_type_id"]),
        name=r["name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        description=r.get("description"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLSessionTypeRepository(SessionTypeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_session_types(self, active_only: bool = True) -> Sequence[SessionType]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM session_types
                {where}
                ORDER BY start_time
                """
            )
            return [_to_session_type(r) for r in fetchall(cur)]

    def get_by_id(self, session_type_id: int) -> Optional[SessionType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM session_types
                WHERE session_type_id=%s
                """,
                (int(session_type_id),),
            )
            r = fetchone(cur)
            return _to_session_type(r) if r else None
