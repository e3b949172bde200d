"""Submission lifecycle.

A submission moves NOT_SUBMITTED -> SUBMITTED -> GRADED. Re-submitting
before the due date updates the single row for (assignment, student) and
clears grade and feedback, so GRADED goes back to SUBMITTED. Past the due
date nothing is accepted, first submission or not.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from .. import db
from ..access import (
    Principal, can_access_submission, can_modify_submission, is_enrolled, principal_user,
    require_role,
)
from ..errors import Conflict, DeadlinePassed, Forbidden, NotFound, ValidationError
from ..models import (
    Assignments, Submissions, ROLE_STUDENT, ROLE_TEACHER, TYPE_DOCUMENT, TYPE_TEST,
)
from ..serializers import submission_json
from . import grading

NOT_SUBMITTED, OVERDUE, SUBMITTED, GRADED = "NOT_SUBMITTED", "OVERDUE", "SUBMITTED", "GRADED"

MIN_GRADE, MAX_GRADE = 0, 100


def derive_status(assignment, submission, now) -> str:
    if submission is None:
        return OVERDUE if assignment.is_past_due(now) else NOT_SUBMITTED
    return GRADED if submission.is_graded else SUBMITTED


def check_can_submit(principal: Principal, assignment_id: int, now=None, payload_type=None):
    """Resolve the assignment and enforce membership, the due date and, when
    ``payload_type`` is given, that it matches the assignment type.

    Returns ``(assignment, existing_submission_or_None)``.
    """
    require_role(principal, ROLE_STUDENT, message="Only students can submit assignments")
    now = now or datetime.utcnow()
    assignment = db.session.get(Assignments, assignment_id)
    if assignment is None or assignment.classroom is None:
        raise NotFound("Assignment not found")
    if not is_enrolled(principal.id, assignment.classroom_id):
        current_app.logger.warning("Student %s tried to submit to assignment %s without enrollment",
                                   principal.id, assignment_id)
        raise Forbidden("You don't have access to this assignment")

    existing = Submissions.query.filter_by(assignment_id=assignment.id, student_id=principal.id).first()
    if assignment.is_past_due(now):
        if existing is None:
            raise DeadlinePassed("Assignment is past due date")
        raise DeadlinePassed("Assignment is past due date, resubmission is closed")
    if payload_type is not None and payload_type != assignment.type:
        raise ValidationError("Invalid data", errors={
            "type": [f"This assignment expects a {assignment.type} submission."],
        })
    return assignment, existing


def _validate_answers(assignment, payload):
    if assignment.type == TYPE_TEST:
        expected = {str(q.id) for q in assignment.questions}
        given = set(payload.answers)
        errors = {}
        missing = sorted(expected - given, key=int)
        unknown = sorted(given - expected)
        blank = sorted((k for k in given & expected if not payload.answers[k].strip()), key=int)
        if missing:
            errors["missing"] = missing
        if unknown:
            errors["unknown"] = unknown
        if blank:
            errors["blank"] = blank
        if errors:
            raise ValidationError("Every question must be answered", errors=errors)


def submit(principal: Principal, assignment_id: int, payload, now=None) -> Submissions:
    """Create or replace the caller's submission; grade and feedback are reset."""
    now = now or datetime.utcnow()
    assignment, existing = check_can_submit(principal, assignment_id, now, payload.type)
    _validate_answers(assignment, payload)

    s = existing or Submissions(assignment=assignment, student=principal_user(principal))
    if assignment.type == TYPE_DOCUMENT:
        s.file_url = payload.file_url
        s.answers = None
    else:
        s.answers = dict(payload.answers)
        s.file_url = None
    s.submitted_at = now
    s.grade = None
    s.feedback = None
    s.updated_at = now
    if existing is None:
        db.session.add(s)
    try:
        db.session.commit()
    except IntegrityError as exc:
        # a concurrent first submission took the (assignment, student) row
        db.session.rollback()
        raise Conflict("A submission for this assignment was just saved, try again") from exc
    current_app.logger.info("Student %s %s assignment %s (submission %s)", principal.id,
                            "resubmitted" if existing else "submitted", assignment.id, s.id)
    return s


def _load(submission_id: int) -> Submissions:
    s = db.session.get(Submissions, submission_id)
    if s is None or s.assignment is None or s.assignment.classroom is None:
        raise NotFound("Submission not found")
    return s


def _owned(principal: Principal, submission_id: int) -> Submissions:
    s = _load(submission_id)
    if not can_modify_submission(principal, s):
        current_app.logger.warning("User %s denied write on submission %s", principal.id, submission_id)
        raise Forbidden("Forbidden")
    return s


def grade(principal: Principal, submission_id: int, grade, feedback=None, now=None) -> Submissions:
    s = _owned(principal, submission_id)
    try:
        value = float(grade)
    except (TypeError, ValueError):
        raise ValidationError("Invalid data", errors={"grade": ["Not a valid number."]})
    if not MIN_GRADE <= value <= MAX_GRADE:
        raise ValidationError("Invalid data", errors={"grade": [f"Must be between {MIN_GRADE} and {MAX_GRADE}."]})
    s.grade = value
    s.feedback = feedback
    s.updated_at = now or datetime.utcnow()
    db.session.commit()
    current_app.logger.info("Submission %s graded %.2f by teacher %s", s.id, value, principal.id)
    return s


def get_submission(principal: Principal, submission_id: int) -> dict:
    s = _load(submission_id)
    if not can_access_submission(principal, s):
        raise NotFound("Submission not found")
    a = s.assignment
    data = submission_json(s, with_student=True)
    data["assignment"] = {
        "id": a.id, "title": a.title, "description": a.description,
        "due_date": a.due_date.isoformat(timespec="seconds"), "type": a.type,
        "classroom": {"id": a.classroom.id, "name": a.classroom.name},
    }
    return data


def list_submissions(principal: Principal, assignment_id: int):
    """All submissions (newest first) for the owning teacher, or the
    caller's own for a student."""
    a = db.session.get(Assignments, assignment_id)
    if a is None:
        raise NotFound("Assignment not found")
    if principal.is_teacher:
        if a.classroom.teacher_id != principal.id:
            raise NotFound("Assignment not found")
        rows = (Submissions.query.filter_by(assignment_id=a.id)
                .order_by(Submissions.submitted_at.desc(), Submissions.id.desc()).all())
        return [submission_json(s, with_student=True) for s in rows]
    if principal.is_student:
        if not is_enrolled(principal.id, a.classroom_id):
            raise NotFound("Assignment not found")
        own = Submissions.query.filter_by(assignment_id=a.id, student_id=principal.id).first()
        return submission_json(own) if own else None
    raise NotFound("Assignment not found")


def delete_submission(principal: Principal, submission_id: int) -> None:
    require_role(principal, ROLE_TEACHER, message="Only teachers can delete submissions")
    s = _owned(principal, submission_id)
    db.session.delete(s)
    db.session.commit()
    current_app.logger.info("Submission %s deleted by teacher %s", submission_id, principal.id)


def auto_score(principal: Principal, submission_id: int) -> grading.AutoScore:
    """Advisory objective score for a TEST submission; never touches ``grade``."""
    s = _owned(principal, submission_id)
    if s.assignment.type != TYPE_TEST:
        raise ValidationError("Only TEST assignments can be auto-scored")
    return grading.evaluate(s.assignment.questions, s.answers or {})
