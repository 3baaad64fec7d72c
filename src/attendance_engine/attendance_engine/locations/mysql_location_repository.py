from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import CompanyLocation
from .repository import LocationRepository


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_sites(self, active_only: bool = True) -> Sequence[CompanyLocation]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT location_id, name, address, latitude, longitude, radius_meters, is_active
                FROM company_locations
                {where}
                ORDER BY location_id
                """
            )
            rows = fetchall(cur)
            return [
                CompanyLocation(
                    location_id=int(r["location_id"]),
                    name=r["name"],
                    address=r.get("address"),
                    latitude=float(r["latitude"]),
                    longitude=float(r["longitude"]),
                    radius_meters=float(r["radius_meters"]),
                    is_active=bool(r["is_active"]),
                )
                for r in rows
            ]
