from __future__ import annotations

import logging
from typing import Optional

from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentDirectory:
    """Look up the student a scanned payload refers to.

    A QR code normally carries the school ID; older cards carry the internal
    id, so that is tried second.
    """

    def __init__(self, students: StudentRepository):
        self._students = students

    def find_by_payload(self, payload: str) -> Optional[Student]:
        student = self._students.get_by_school_id(payload)
        if student:
            return student

        student = self._students.get_by_id(payload)
        if student is None:
            logger.debug("no student for payload %r", payload)
        return student
