from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from educonnect import create_app, db
from educonnect.access import Principal
from educonnect.config import TestConfig
from educonnect.models import (
    Users, ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER,
    QUESTION_MULTIPLE_CHOICE, QUESTION_SHORT_ANSWER, TYPE_DOCUMENT, TYPE_TEST,
)
from educonnect.schemas import AssignmentCreate
from educonnect.services import assignments, classrooms

NOW = datetime.utcnow().replace(microsecond=0)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role=ROLE_STUDENT, name=None, password="password123"):
        counter["n"] += 1
        n = counter["n"]
        u = Users(name=name or f"{role.title()} {n}", email=f"{role.lower()}{n}@example.test", role=role)
        u.set_password(password)
        db.session.add(u)
        db.session.commit()
        return u
    return _make


@pytest.fixture
def teacher(make_user):
    return make_user(ROLE_TEACHER, name="Ada Teacher")


@pytest.fixture
def student(make_user):
    return make_user(ROLE_STUDENT, name="Sam Student")


@pytest.fixture
def admin(make_user):
    return make_user(ROLE_ADMIN, name="Root Admin")


def principal(user):
    return Principal.from_user(user)


def auth(user):
    token = create_access_token(identity=str(user.id),
                                additional_claims={"role": user.role, "name": user.name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def classroom(teacher):
    return classrooms.create_classroom(principal(teacher), "Biology 101", "Cells and more")


@pytest.fixture
def enrolled(classroom, student):
    classrooms.join_classroom(principal(student), classroom.code)
    return student


def quiz_payload(due=None, **overrides):
    """A two-question TEST assignment: MC worth 5 (key "2"), SA worth 2."""
    data = {
        "title": "Cells quiz",
        "description": "Quick check",
        "due_date": (due or NOW + timedelta(days=7)).isoformat(),
        "type": TYPE_TEST,
        "questions": [
            {"question_text": "Which organelle makes ATP?", "type": QUESTION_MULTIPLE_CHOICE,
             "options": ["Nucleus", "Mitochondrion", "Ribosome"], "correct_answer": "2", "points": 5},
            {"question_text": "Outer boundary of the cell?", "type": QUESTION_SHORT_ANSWER,
             "correct_answer": "Cell membrane", "points": 2},
        ],
    }
    data.update(overrides)
    return data


def document_payload(due=None, **overrides):
    data = {
        "title": "Essay",
        "description": "Two pages",
        "due_date": (due or NOW + timedelta(days=7)).isoformat(),
        "type": TYPE_DOCUMENT,
    }
    data.update(overrides)
    return data


@pytest.fixture
def quiz(classroom, teacher):
    return assignments.create_assignment(principal(teacher), classroom.id,
                                         AssignmentCreate.model_validate(quiz_payload()))


@pytest.fixture
def essay(classroom, teacher):
    return assignments.create_assignment(principal(teacher), classroom.id,
                                         AssignmentCreate.model_validate(document_payload()))
