from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Embedding
from .repository import FaceTemplateRepository, decode_template, encode_template


class MySQLFaceTemplateRepository(FaceTemplateRepository):
    """Templates live in ``users.face_encoding`` as JSON text."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_template(self, user_id: int) -> Optional[Embedding]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT face_encoding FROM users WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
        if not r or not r.get("face_encoding"):
            return None
        return decode_template(r["face_encoding"])

    def set_template(self, user_id: int, vector: Sequence[float]) -> None:
        self._write(user_id, encode_template(vector))

    def remove_template(self, user_id: int) -> None:
        self._write(user_id, None)

    def _write(self, user_id: int, encoded: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET face_encoding=%s WHERE user_id=%s", (encoded, int(user_id)))
            if cur.rowcount == 0:
                cur.execute("SELECT 1 AS found FROM users WHERE user_id=%s", (int(user_id),))
                if not fetchone(cur):
                    raise PersistenceError(f"User {user_id} does not exist.")
