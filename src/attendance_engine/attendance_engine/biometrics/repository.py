from __future__ import annotations

import json
import math
from typing import Optional, Protocol, Sequence

from ..core.exceptions import TemplateParseError
from .model import Embedding


def encode_template(vector: Sequence[float]) -> str:
    """Store a template as a JSON array of floats."""
    return json.dumps([float(x) for x in vector])


def decode_template(raw: str) -> Embedding:
    try:
        values = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise TemplateParseError() from exc

    if not isinstance(values, list) or not values:
        raise TemplateParseError()
    try:
        vector = tuple(float(x) for x in values)
    except (TypeError, ValueError) as exc:
        raise TemplateParseError() from exc
    if not all(math.isfinite(x) for x in vector):
        raise TemplateParseError()
    return vector


class FaceTemplateRepository(Protocol):
    """Zero or one reference embedding per user."""

    def get_template(self, user_id: int) -> Optional[Embedding]:
        """Return the stored template, None if not enrolled; TemplateParseError if unreadable."""
        raise NotImplementedError

    def set_template(self, user_id: int, vector: Sequence[float]) -> None:
        raise NotImplementedError

    def remove_template(self, user_id: int) -> None:
        raise NotImplementedError
