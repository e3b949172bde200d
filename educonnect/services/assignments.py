"""Assignment repository: definitions, embedded test questions and the
role-dependent projections of an assignment."""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..access import (
    Principal, can_access_assignment, can_modify_assignment, owned_classroom,
    readable_classroom, require_role,
)
from ..errors import Forbidden, NotFound
from ..models import (
    Assignments, Classrooms, Enrollments, Questions, Submissions, ROLE_STUDENT, ROLE_TEACHER,
    TYPE_TEST,
)
from ..schemas import AssignmentCreate, AssignmentUpdate
from ..serializers import assignment_json, submission_json
from .submissions import derive_status


def _load(assignment_id: int) -> Assignments:
    a = db.session.get(Assignments, assignment_id)
    if a is None:
        raise NotFound("Assignment not found")
    return a


def readable_assignment(principal: Principal, assignment_id: int) -> Assignments:
    a = db.session.get(Assignments, assignment_id)
    if a is None or not can_access_assignment(principal, a):
        raise NotFound("Assignment not found")
    return a


def owned_assignment(principal: Principal, assignment_id: int) -> Assignments:
    a = _load(assignment_id)
    if not can_modify_assignment(principal, a):
        raise Forbidden("You don't have permission to modify this assignment")
    return a


def create_assignment(principal: Principal, classroom_id: int, payload: AssignmentCreate) -> Assignments:
    """Create the assignment and, for TEST, all its questions in one transaction."""
    require_role(principal, ROLE_TEACHER, message="Only teachers can create assignments")
    c = owned_classroom(principal, classroom_id)

    total = payload.total_points
    if total is None and payload.type == TYPE_TEST:
        total = sum(q.points for q in payload.questions)

    a = Assignments(
        classroom=c,
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        type=payload.type,
        total_points=total,
    )
    for pos, q in enumerate(payload.questions, start=1):
        a.questions.append(Questions(
            position=pos,
            question_text=q.question_text,
            type=q.type,
            options=list(q.options) if q.options else None,
            correct_answer=q.correct_answer,
            points=q.points,
        ))
    db.session.add(a)
    c.updated_at = datetime.utcnow()
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create assignment in classroom %s", c.id)
        raise
    current_app.logger.info("Assignment %s (%s, %d questions) created in classroom %s",
                            a.id, a.type, len(a.questions), c.id)
    return a


def update_assignment(principal: Principal, assignment_id: int, payload: AssignmentUpdate) -> Assignments:
    require_role(principal, ROLE_TEACHER, message="Only teachers can update assignments")
    a = owned_assignment(principal, assignment_id)
    fields = payload.model_dump(exclude_unset=True)
    for name, value in fields.items():
        # total_points may be cleared; the other columns are NOT NULL
        if value is None and name != "total_points":
            continue
        setattr(a, name, value)
    a.updated_at = datetime.utcnow()
    db.session.commit()
    current_app.logger.info("Assignment %s updated (%s)", a.id, ", ".join(sorted(fields)) or "no fields")
    return a


def delete_assignment(principal: Principal, assignment_id: int) -> None:
    """Delete an assignment with its questions and submissions atomically."""
    require_role(principal, ROLE_TEACHER, message="Only teachers can delete assignments")
    a = owned_assignment(principal, assignment_id)
    try:
        db.session.delete(a)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete assignment %s", assignment_id)
        raise
    current_app.logger.info("Assignment %s deleted by teacher %s", assignment_id, principal.id)


def get_assignment(principal: Principal, assignment_id: int) -> dict:
    """Teachers see every submission with the student's identity; a student
    sees only their own submission and never the answer key."""
    a = readable_assignment(principal, assignment_id)
    c = a.classroom
    teacher_view = principal.is_teacher
    data = assignment_json(a, with_questions=True, with_key=teacher_view)
    data["classroom"] = {"id": c.id, "name": c.name, "teacher": {"id": c.teacher.id, "name": c.teacher.name}}
    if teacher_view:
        data["submissions"] = [submission_json(s, with_student=True) for s in
                               sorted(a.submissions, key=lambda s: s.submitted_at, reverse=True)]
    else:
        own = Submissions.query.filter_by(assignment_id=a.id, student_id=principal.id).first()
        data["submissions"] = [submission_json(own)] if own else []
    return data


def list_classroom_assignments(principal: Principal, classroom_id: int, now=None):
    c = readable_classroom(principal, classroom_id)
    now = now or datetime.utcnow()
    rows = Assignments.query.filter_by(classroom_id=c.id).order_by(Assignments.due_date.asc(), Assignments.id.asc()).all()
    out = []
    for a in rows:
        d = assignment_json(a)
        if principal.is_student:
            own = next((s for s in a.submissions if s.student_id == principal.id), None)
            d["submissions"] = [submission_json(own)] if own else []
            d["status"] = derive_status(a, own, now)
        else:
            d["submissions"] = [submission_json(s, with_student=True) for s in a.submissions]
            d["submission_count"] = len(a.submissions)
        out.append(d)
    return out


def list_teacher_assignments(principal: Principal):
    require_role(principal, ROLE_TEACHER)
    rows = (Assignments.query
            .join(Classrooms, Classrooms.id == Assignments.classroom_id)
            .filter(Classrooms.teacher_id == principal.id)
            .order_by(Assignments.due_date.asc(), Assignments.id.asc())
            .all())
    return [dict(assignment_json(a), classroom={"name": a.classroom.name},
                 submission_count=len(a.submissions)) for a in rows]


def list_student_assignments(principal: Principal, now=None):
    require_role(principal, ROLE_STUDENT)
    now = now or datetime.utcnow()
    rows = (Assignments.query
            .join(Enrollments, Enrollments.classroom_id == Assignments.classroom_id)
            .filter(Enrollments.student_id == principal.id)
            .order_by(Assignments.due_date.asc(), Assignments.id.asc())
            .all())
    out = []
    for a in rows:
        own = Submissions.query.filter_by(assignment_id=a.id, student_id=principal.id).first()
        out.append(dict(
            assignment_json(a),
            classroom={"name": a.classroom.name, "teacher": {"name": a.classroom.teacher.name}},
            has_submitted=own is not None,
            submission=submission_json(own) if own else None,
            status=derive_status(a, own, now),
        ))
    return out
