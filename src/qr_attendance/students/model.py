from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student as seen by the scanner (read-only here)."""

    id: str
    display_name: str
    school_id: str
    year_level: Optional[str] = None
