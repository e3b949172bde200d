from datetime import timedelta
from types import SimpleNamespace

import pytest

from educonnect.errors import Forbidden, NotFound
from educonnect.models import ROLE_TEACHER
from educonnect.schemas import AssignmentCreate, DocumentSubmission, parse
from educonnect.services import assignments, classrooms, reporting, submissions

from conftest import NOW, document_payload, principal


def test_average_grade_counts_ungraded_as_zero():
    subs = [SimpleNamespace(grade=90), SimpleNamespace(grade=None), SimpleNamespace(grade=60)]
    assert reporting.average_grade(subs) == 50.0
    assert reporting.average_grade([]) == 0.0


class Due:
    def __init__(self, due_date):
        self.due_date = due_date

    def is_past_due(self, now):
        return now > self.due_date


def test_partition_by_due():
    due = [Due(NOW - timedelta(days=1)), Due(NOW), Due(NOW + timedelta(days=1))]
    upcoming, overdue = reporting.partition_by_due(due, now=NOW)
    assert overdue == [due[0]]
    assert upcoming == due[1:]


def test_assignment_stats(essay, teacher, enrolled, classroom, make_user):
    other = make_user()
    classrooms.join_classroom(principal(other), classroom.code)
    s = submissions.submit(principal(enrolled), essay.id, DocumentSubmission(file_url="https://x.test/1"), now=NOW)
    submissions.submit(principal(other), essay.id, DocumentSubmission(file_url="https://x.test/2"), now=NOW)
    submissions.grade(principal(teacher), s.id, 80)

    stats = reporting.assignment_stats(principal(teacher), essay.id)
    assert stats == {
        "assignment_id": essay.id,
        "enrolled_count": 2,
        "submission_count": 2,
        "graded_count": 1,
        "pending_count": 1,
        "average_grade": 40.0,
    }
    with pytest.raises(Forbidden):
        reporting.assignment_stats(principal(enrolled), essay.id)
    with pytest.raises(NotFound):
        reporting.assignment_stats(principal(make_user(ROLE_TEACHER)), essay.id)
    with pytest.raises(NotFound):
        reporting.assignment_stats(principal(make_user()), essay.id)


def test_teacher_dashboard(classroom, teacher, enrolled, essay, quiz):
    submissions.submit(principal(enrolled), essay.id, DocumentSubmission(file_url="https://x.test/e"), now=NOW)
    data = reporting.teacher_dashboard(principal(teacher))
    assert data["classroom_count"] == 1
    assert data["student_count"] == 1
    assert data["assignment_count"] == 2
    assert data["pending_grading_count"] == 1
    assert data["recent_classrooms"] == [{"id": classroom.id, "name": classroom.name, "student_count": 1}]
    pending = data["pending_submissions"][0]
    assert pending["assignment_title"] == essay.title
    assert pending["student_name"] == enrolled.name


def test_student_dashboard(classroom, teacher, enrolled, essay):
    p = principal(teacher)
    assignments.create_assignment(p, classroom.id, parse(
        AssignmentCreate, document_payload(title="Missed", due=NOW - timedelta(days=2))))
    later = assignments.create_assignment(p, classroom.id, parse(
        AssignmentCreate, document_payload(title="Later", due=NOW + timedelta(days=3))))
    submissions.submit(principal(enrolled), essay.id, DocumentSubmission(file_url="https://x.test/e"), now=NOW)

    data = reporting.student_dashboard(principal(enrolled), now=NOW)
    assert data["classroom_count"] == 1
    # submitted work is not "upcoming"; the missed one only counts as overdue
    assert [a["id"] for a in data["upcoming_assignments"]] == [later.id]
    assert data["overdue_count"] == 1
    assert [s["assignment_title"] for s in data["recent_submissions"]] == [essay.title]


def test_dashboards_are_role_bound(teacher, student):
    with pytest.raises(Forbidden):
        reporting.teacher_dashboard(principal(student))
    with pytest.raises(Forbidden):
        reporting.student_dashboard(principal(teacher))
    with pytest.raises(Forbidden):
        reporting.admin_dashboard(principal(teacher))


def test_admin_dashboard(admin, classroom, teacher, enrolled, make_user):
    make_user(ROLE_TEACHER)
    data = reporting.admin_dashboard(principal(admin))
    assert data["teacher_count"] == 2
    assert data["student_count"] == 1
    assert data["classroom_count"] == 1
    assert {t["id"]: t["classroom_count"] for t in data["teachers"]}[teacher.id] == 1
    assert data["students"][0]["enrolled_classrooms"] == 1
