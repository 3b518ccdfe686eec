from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: a class (section) that owns subjects and students."""

    class_id: int
    name: str
    school_id: Optional[int] = None
