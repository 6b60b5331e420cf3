from __future__ import annotations

from typing import Optional, Protocol

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def count(self) -> int:
        """Registered (active) students; the denominator of attendance KPIs."""

        raise NotImplementedError
