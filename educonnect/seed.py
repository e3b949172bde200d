from datetime import datetime, timedelta

from . import db
from .models import (
    Users, Classrooms, Enrollments, Assignments, Questions,
    ROLE_ADMIN, ROLE_TEACHER, ROLE_STUDENT, TYPE_DOCUMENT, TYPE_TEST,
    QUESTION_MULTIPLE_CHOICE, QUESTION_SHORT_ANSWER,
)
from .services.classrooms import generate_code


def ensure_user(email, name, role, password):
    u = Users.query.filter_by(email=email).first()
    if not u:
        u = Users(name=name, email=email, role=role)
        u.set_password(password)
        db.session.add(u)
        db.session.commit()
    return u


def run_seed():
    # Demo users
    ensure_user("admin@educonnect.local", "Admin", ROLE_ADMIN, "admin1234")
    teacher = ensure_user("teacher@educonnect.local", "Demo Teacher", ROLE_TEACHER, "teacher123")
    student = ensure_user("student@educonnect.local", "Demo Student", ROLE_STUDENT, "student123")

    # Demo classroom with one assignment of each type
    if not Classrooms.query.filter_by(name="Biology", teacher_id=teacher.id).first():
        code = generate_code()
        while Classrooms.query.filter_by(code=code).first():
            code = generate_code()
        c = Classrooms(name="Biology", description="Introductory biology.",
                       code=code, teacher=teacher)
        db.session.add(c)
        db.session.flush()

        db.session.add(Enrollments(classroom=c, student=student))

        due = datetime.utcnow() + timedelta(days=7)
        essay = Assignments(classroom=c, title="Cell structure essay",
                            description="Two pages on eukaryotic cells.",
                            due_date=due, type=TYPE_DOCUMENT)
        quiz = Assignments(classroom=c, title="Cells quiz",
                           description="Quick check.", due_date=due, type=TYPE_TEST, total_points=7)
        quiz.questions = [
            Questions(position=1, question_text="Which organelle makes ATP?",
                      type=QUESTION_MULTIPLE_CHOICE,
                      options=["Nucleus", "Mitochondrion", "Ribosome"],
                      correct_answer="2", points=5),
            Questions(position=2, question_text="Name the cell's outer boundary.",
                      type=QUESTION_SHORT_ANSWER, correct_answer="Cell membrane", points=2),
        ]
        db.session.add_all([essay, quiz])

    db.session.commit()
