from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Student
from .repository import StudentRepository


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.student_number, s.first_name, s.last_name, s.email,
                       s.year, s.is_active, p.name AS program_name
                FROM students s
                LEFT JOIN programs p ON p.program_id = s.program_id
                WHERE s.student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Student(
                student_id=int(r["student_id"]),
                student_number=r["student_number"],
                first_name=r["first_name"],
                last_name=r["last_name"],
                email=r["email"],
                program_name=r.get("program_name"),
                year=int(r.get("year") or 1),
                is_active=bool(r["is_active"]),
            )

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students WHERE is_active=1")
            r = fetchone(cur)
            return int(r["n"]) if r else 0
