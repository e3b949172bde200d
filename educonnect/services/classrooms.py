"""Classroom membership registry: ownership, join codes, enrollments and
classroom resources."""
import secrets
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import db
from ..access import (
    Principal, owned_classroom, principal_user, readable_classroom, require_role,
)
from ..errors import Conflict, Forbidden, NotFound, ValidationError
from ..models import (
    Classrooms, Enrollments, Resources, Users, RESOURCE_TYPES, ROLE_STUDENT, ROLE_TEACHER,
)
from ..serializers import classroom_json, enrollment_json, resource_json, user_json

# 32 symbols, no more: uppercase letters without I and O, digits without 0 and 1
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6
MIN_NAME_LENGTH = 3


def generate_code(rng=None) -> str:
    choice = rng.choice if rng is not None else secrets.choice
    return "".join(choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def _clean_text(value, field) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("Invalid data", errors={field: ["Not a valid string."]})
    return value.strip()


def _clean_name(name) -> str:
    name = _clean_text(name, "name")
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError("Invalid data", errors={"name": [f"Must be at least {MIN_NAME_LENGTH} characters."]})
    return name


def _unique_code(rng=None) -> str:
    attempts = current_app.config.get("CLASSROOM_CODE_MAX_ATTEMPTS", 20)
    for _ in range(attempts):
        code = generate_code(rng)
        if Classrooms.query.filter_by(code=code).first() is None:
            return code
    current_app.logger.error("No free classroom code after %d attempts", attempts)
    raise Conflict("Could not generate a unique classroom code, try again")


def create_classroom(principal: Principal, name, description=None, rng=None) -> Classrooms:
    require_role(principal, ROLE_TEACHER, message="Only teachers can create classrooms")
    name = _clean_name(name)
    c = Classrooms(
        name=name,
        description=_clean_text(description, "description") or None,
        code=_unique_code(rng),
        teacher=principal_user(principal),
    )
    db.session.add(c)
    try:
        db.session.commit()
    except IntegrityError as exc:
        # another request took the code between the check and the insert
        db.session.rollback()
        raise Conflict("Classroom code collision, try again") from exc
    current_app.logger.info("Classroom %s (%s) created by teacher %s", c.id, c.code, principal.id)
    return c


def join_classroom(principal: Principal, code) -> Enrollments:
    require_role(principal, ROLE_STUDENT, message="Only students can join classrooms")
    code = _clean_text(code, "code").upper()
    if len(code) != CODE_LENGTH:
        raise ValidationError("Invalid classroom code", errors={"code": ["Invalid classroom code"]})

    classroom = Classrooms.query.filter_by(code=code).first()
    if classroom is None:
        raise NotFound("Invalid classroom code")

    existing = Enrollments.query.filter_by(student_id=principal.id, classroom_id=classroom.id).first()
    if existing:
        raise Conflict("You are already enrolled in this classroom")

    e = Enrollments(classroom=classroom, student=principal_user(principal))
    db.session.add(e)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict("You are already enrolled in this classroom") from exc
    current_app.logger.info("Student %s joined classroom %s", principal.id, classroom.id)
    return e


def list_classrooms(principal: Principal):
    """Owned classrooms for a teacher, enrolled ones for a student; newest update first."""
    order = (Classrooms.updated_at.desc(), Classrooms.id.desc())
    if principal.is_teacher:
        rows = Classrooms.query.filter_by(teacher_id=principal.id).order_by(*order).all()
        return [dict(classroom_json(c), student_count=len(c.enrollments)) for c in rows]
    if principal.is_student:
        rows = (Classrooms.query
                .join(Enrollments, Enrollments.classroom_id == Classrooms.id)
                .filter(Enrollments.student_id == principal.id)
                .order_by(*order).all())
        return [dict(classroom_json(c), teacher={"name": c.teacher.name}) for c in rows]
    raise Forbidden("Access denied")


def get_classroom(principal: Principal, classroom_id: int) -> dict:
    c = readable_classroom(principal, classroom_id)
    data = classroom_json(c)
    if principal.is_teacher:
        data["enrollments"] = [enrollment_json(e, with_student=True) for e in c.enrollments]
        data["student_count"] = len(c.enrollments)
    else:
        data["teacher"] = {"name": c.teacher.name, "email": c.teacher.email}
    return data


def update_classroom(principal: Principal, classroom_id: int, name=None, description=None) -> Classrooms:
    require_role(principal, ROLE_TEACHER, message="Only teachers can update classrooms")
    c = owned_classroom(principal, classroom_id)
    if name is not None:
        c.name = _clean_name(name)
    if description is not None:
        c.description = _clean_text(description, "description") or None
    c.updated_at = datetime.utcnow()
    db.session.commit()
    current_app.logger.info("Classroom %s updated", c.id)
    return c


def delete_classroom(principal: Principal, classroom_id: int) -> None:
    """Delete a classroom with its enrollments, resources, assignments,
    questions and submissions in a single transaction."""
    require_role(principal, ROLE_TEACHER, message="Only teachers can delete classrooms")
    c = owned_classroom(principal, classroom_id)
    try:
        db.session.delete(c)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete classroom %s", classroom_id)
        raise
    current_app.logger.info("Classroom %s deleted by teacher %s", classroom_id, principal.id)


def list_students(principal: Principal):
    """Students enrolled in any of the teacher's classrooms, by name."""
    require_role(principal, ROLE_TEACHER)
    students = (Users.query
                .join(Enrollments, Enrollments.student_id == Users.id)
                .join(Classrooms, Classrooms.id == Enrollments.classroom_id)
                .filter(Users.role == ROLE_STUDENT, Classrooms.teacher_id == principal.id)
                .distinct()
                .order_by(Users.name.asc())
                .all())
    out = []
    for s in students:
        mine = [e for e in s.enrollments if e.classroom.teacher_id == principal.id]
        out.append(dict(user_json(s), enrollments=[
            dict(enrollment_json(e), classroom={"id": e.classroom.id, "name": e.classroom.name})
            for e in mine
        ]))
    return out


# ----------------- Resources -----------------

def create_resource(principal: Principal, classroom_id: int, title, file_url,
                    type="OTHER", description=None) -> Resources:
    require_role(principal, ROLE_TEACHER, message="Only teachers can add resources")
    c = owned_classroom(principal, classroom_id)
    title = _clean_text(title, "title")
    file_url = _clean_text(file_url, "file_url")
    errors = {}
    if not title:
        errors["title"] = ["This field is required."]
    if not file_url:
        errors["file_url"] = ["This field is required."]
    if type not in RESOURCE_TYPES:
        errors["type"] = ["Not a valid choice."]
    if errors:
        raise ValidationError("Invalid data", errors=errors)
    r = Resources(classroom=c, title=title, file_url=file_url, type=type,
                  description=_clean_text(description, "description") or None)
    db.session.add(r)
    db.session.commit()
    current_app.logger.info("Resource %s added to classroom %s", r.id, c.id)
    return r


def list_resources(principal: Principal, classroom_id: int):
    c = readable_classroom(principal, classroom_id)
    return (Resources.query.filter_by(classroom_id=c.id)
            .order_by(Resources.created_at.desc(), Resources.id.desc()).all())


def delete_resource(principal: Principal, classroom_id: int, resource_id: int) -> None:
    c = owned_classroom(principal, classroom_id)
    r = Resources.query.filter_by(id=resource_id, classroom_id=c.id).first()
    if r is None:
        raise NotFound("Resource not found")
    db.session.delete(r)
    db.session.commit()
    current_app.logger.info("Resource %s deleted from classroom %s", resource_id, c.id)


def list_student_resources(principal: Principal):
    require_role(principal, ROLE_STUDENT)
    rows = (Resources.query
            .join(Enrollments, Enrollments.classroom_id == Resources.classroom_id)
            .filter(Enrollments.student_id == principal.id)
            .order_by(Resources.created_at.desc(), Resources.id.desc())
            .all())
    return [dict(resource_json(r), classroom={"name": r.classroom.name}) for r in rows]
