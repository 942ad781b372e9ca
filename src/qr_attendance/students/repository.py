from __future__ import annotations

from typing import Optional, Protocol

from .model import Student


class StudentRepository(Protocol):
    """Read-only identity store.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_school_id(self, school_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError
