"""Read-side aggregates for the dashboards. Nothing here is stored; the
upcoming / overdue split is computed against ``now`` at query time."""
from datetime import datetime

from sqlalchemy import func, select

from .. import db
from ..access import Principal, can_access_assignment, require_role
from ..errors import NotFound
from ..models import (
    Assignments, Classrooms, Enrollments, Submissions, Users,
    ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER,
)

RECENT_LIMIT = 5


def average_grade(submissions) -> float:
    """sum(grade) / count(submissions), ungraded counted as 0; 0 when empty."""
    submissions = list(submissions)
    if not submissions:
        return 0.0
    return sum(s.grade or 0 for s in submissions) / len(submissions)


def partition_by_due(assignments, now=None):
    """Split into (upcoming, overdue) by comparing due dates to ``now``."""
    now = now or datetime.utcnow()
    upcoming, overdue = [], []
    for a in assignments:
        (overdue if a.is_past_due(now) else upcoming).append(a)
    return upcoming, overdue


def assignment_stats(principal: Principal, assignment_id: int) -> dict:
    a = db.session.get(Assignments, assignment_id)
    if a is None or not can_access_assignment(principal, a):
        raise NotFound("Assignment not found")
    require_role(principal, ROLE_TEACHER, message="Only teachers can view assignment statistics")
    subs = a.submissions
    enrolled = Enrollments.query.filter_by(classroom_id=a.classroom_id).count()
    return {
        "assignment_id": a.id,
        "enrolled_count": enrolled,
        "submission_count": len(subs),
        "graded_count": sum(1 for s in subs if s.is_graded),
        "pending_count": sum(1 for s in subs if not s.is_graded),
        "average_grade": average_grade(subs),
    }


def teacher_dashboard(principal: Principal) -> dict:
    require_role(principal, ROLE_TEACHER)
    tid = principal.id

    classroom_count = Classrooms.query.filter_by(teacher_id=tid).count()
    student_count = (Enrollments.query
                     .join(Classrooms, Classrooms.id == Enrollments.classroom_id)
                     .filter(Classrooms.teacher_id == tid).count())
    assignment_count = (Assignments.query
                        .join(Classrooms, Classrooms.id == Assignments.classroom_id)
                        .filter(Classrooms.teacher_id == tid).count())
    pending_q = (Submissions.query
                 .join(Assignments, Assignments.id == Submissions.assignment_id)
                 .join(Classrooms, Classrooms.id == Assignments.classroom_id)
                 .filter(Classrooms.teacher_id == tid, Submissions.grade.is_(None)))
    pending_count = pending_q.count()

    recent_classrooms = (Classrooms.query.filter_by(teacher_id=tid)
                         .order_by(Classrooms.created_at.desc(), Classrooms.id.desc())
                         .limit(RECENT_LIMIT).all())
    pending = (pending_q.order_by(Submissions.submitted_at.desc(), Submissions.id.desc())
               .limit(RECENT_LIMIT).all())

    return {
        "classroom_count": classroom_count,
        "student_count": student_count,
        "assignment_count": assignment_count,
        "pending_grading_count": pending_count,
        "recent_classrooms": [
            {"id": c.id, "name": c.name, "student_count": len(c.enrollments)}
            for c in recent_classrooms
        ],
        "pending_submissions": [
            {
                "id": s.id,
                "assignment_title": s.assignment.title,
                "student_name": s.student.name,
                "submitted_at": s.submitted_at.isoformat(timespec="seconds"),
                "classroom_name": s.assignment.classroom.name,
            }
            for s in pending
        ],
    }


def student_dashboard(principal: Principal, now=None) -> dict:
    require_role(principal, ROLE_STUDENT)
    now = now or datetime.utcnow()
    sid = principal.id

    classroom_count = Enrollments.query.filter_by(student_id=sid).count()

    submitted_ids = select(Submissions.assignment_id).where(Submissions.student_id == sid)
    enrolled = (Assignments.query
                .join(Enrollments, Enrollments.classroom_id == Assignments.classroom_id)
                .filter(Enrollments.student_id == sid)
                .filter(~Assignments.id.in_(submitted_ids))
                .order_by(Assignments.due_date.asc(), Assignments.id.asc())
                .all())
    upcoming, overdue = partition_by_due(enrolled, now)

    recent = (Submissions.query.filter_by(student_id=sid)
              .order_by(Submissions.submitted_at.desc(), Submissions.id.desc())
              .limit(RECENT_LIMIT).all())

    return {
        "classroom_count": classroom_count,
        "upcoming_assignments": [
            {
                "id": a.id,
                "title": a.title,
                "due_date": a.due_date.isoformat(timespec="seconds"),
                "classroom_name": a.classroom.name,
            }
            for a in upcoming[:RECENT_LIMIT]
        ],
        "overdue_count": len(overdue),
        "recent_submissions": [
            {
                "id": s.id,
                "assignment_title": s.assignment.title,
                "submitted_at": s.submitted_at.isoformat(timespec="seconds"),
                "grade": s.grade,
            }
            for s in recent
        ],
    }


def admin_dashboard(principal: Principal) -> dict:
    """Cross-classroom counts only; no classroom content."""
    require_role(principal, ROLE_ADMIN)

    classroom_counts = dict(db.session.query(Classrooms.teacher_id, func.count(Classrooms.id))
                            .group_by(Classrooms.teacher_id).all())
    enrollment_counts = dict(db.session.query(Enrollments.student_id, func.count(Enrollments.id))
                             .group_by(Enrollments.student_id).all())

    teachers = Users.query.filter_by(role=ROLE_TEACHER).order_by(Users.id.asc()).all()
    students = Users.query.filter_by(role=ROLE_STUDENT).order_by(Users.id.asc()).all()

    return {
        "teacher_count": len(teachers),
        "student_count": len(students),
        "classroom_count": Classrooms.query.count(),
        "assignment_count": Assignments.query.count(),
        "submission_count": Submissions.query.count(),
        "teachers": [
            {"id": t.id, "name": t.name, "email": t.email,
             "classroom_count": classroom_counts.get(t.id, 0)}
            for t in teachers
        ],
        "students": [
            {"id": s.id, "name": s.name, "email": s.email,
             "enrolled_classrooms": enrollment_counts.get(s.id, 0)}
            for s in students
        ],
    }
