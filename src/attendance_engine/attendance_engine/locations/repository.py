from __future__ import annotations

from typing import Protocol, Sequence

from .model import CompanyLocation


class LocationRepository(Protocol):
    def list_sites(self, active_only: bool = True) -> Sequence[CompanyLocation]:
        raise NotImplementedError
