"""Principal and classroom-scoped access checks.

Every decision resolves through the classroom: the owning teacher
(``classroom.teacher_id``) or the set of enrolled students. Reads by
outsiders surface as ``NotFound`` so the existence of a classroom is not
leaked; writes by authenticated non-owners surface as ``Forbidden``.
"""
from dataclasses import dataclass

from flask import current_app, request
from flask_login import current_user
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from . import csrf, db
from .errors import Forbidden, NotFound, Unauthorized
from .models import (
    Classrooms, Enrollments, Users, ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER,
)


@dataclass(frozen=True)
class Principal:
    id: int
    role: str

    @property
    def is_teacher(self) -> bool:
        return self.role == ROLE_TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == ROLE_STUDENT

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(id=user.id, role=user.role)


def current_principal() -> Principal:
    """Resolve the caller: bearer JWT first, Flask-Login session second."""
    if verify_jwt_in_request(optional=True):
        return Principal(id=int(get_jwt_identity()), role=get_jwt().get("role"))
    if current_user.is_authenticated:
        if current_app.config.get("WTF_CSRF_ENABLED", True) and \
                request.method not in ("GET", "HEAD", "OPTIONS"):
            csrf.protect()
        return Principal.from_user(current_user)
    raise Unauthorized()


def require_role(principal: Principal, *roles: str, message: str = None):
    if principal.role not in roles:
        raise Forbidden(message or "Access denied")


def is_enrolled(student_id: int, classroom_id: int) -> bool:
    return db.session.query(
        Enrollments.query.filter_by(student_id=student_id, classroom_id=classroom_id).exists()
    ).scalar()


def can_access_classroom(principal: Principal, classroom: Classrooms) -> bool:
    if principal.is_teacher:
        return classroom.teacher_id == principal.id
    if principal.is_student:
        return is_enrolled(principal.id, classroom.id)
    return False


def can_modify_classroom(principal: Principal, classroom: Classrooms) -> bool:
    return principal.is_teacher and classroom.teacher_id == principal.id


def can_access_assignment(principal, assignment) -> bool:
    return can_access_classroom(principal, assignment.classroom)


def can_modify_assignment(principal, assignment) -> bool:
    return can_modify_classroom(principal, assignment.classroom)


def can_access_submission(principal, submission) -> bool:
    # students only ever see their own row
    if principal.is_student:
        return submission.student_id == principal.id
    return can_modify_classroom(principal, submission.assignment.classroom)


def can_modify_submission(principal, submission) -> bool:
    return can_modify_classroom(principal, submission.assignment.classroom)


def readable_classroom(principal: Principal, classroom_id: int) -> Classrooms:
    """Load a classroom the principal may read, or raise NotFound."""
    classroom = db.session.get(Classrooms, classroom_id)
    if classroom is None or not can_access_classroom(principal, classroom):
        raise NotFound("Classroom not found or access denied")
    return classroom


def owned_classroom(principal: Principal, classroom_id: int) -> Classrooms:
    """Load a classroom the principal owns; NotFound if missing, Forbidden otherwise."""
    classroom = db.session.get(Classrooms, classroom_id)
    if classroom is None:
        raise NotFound("Classroom not found")
    if not can_modify_classroom(principal, classroom):
        raise Forbidden("You do not have permission to modify this classroom")
    return classroom


def principal_user(principal: Principal) -> Users:
    user = db.session.get(Users, principal.id)
    if user is None:
        raise Unauthorized("User no longer exists")
    return user
