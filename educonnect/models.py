from datetime import datetime
from typing import Optional
from flask_login import UserMixin
from sqlalchemy.orm import backref

from . import db, login_manager
from werkzeug.security import generate_password_hash, check_password_hash

ROLE_STUDENT, ROLE_TEACHER, ROLE_ADMIN = "STUDENT", "TEACHER", "ADMIN"

TYPE_TEST, TYPE_DOCUMENT = "TEST", "DOCUMENT"

QUESTION_MULTIPLE_CHOICE, QUESTION_SHORT_ANSWER = "MULTIPLE_CHOICE", "SHORT_ANSWER"

RESOURCE_TYPES = ("PDF", "DOCUMENT", "PRESENTATION", "VIDEO", "LINK", "OTHER")

class Users(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(db.String(16), nullable=False, default=ROLE_STUDENT)
    hashed_pw = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    classrooms_taught = db.relationship("Classrooms", backref="teacher", lazy=True,
                                        cascade="all, delete-orphan")
    def set_password(self, raw): self.hashed_pw = generate_password_hash(raw)
    def check_password(self, raw): return check_password_hash(self.hashed_pw, raw)
    def get_id(self): return str(self.id)

@login_manager.user_loader
def load_user(user_id: str) -> Optional["Users"]:
    return db.session.get(Users, int(user_id))

class Classrooms(db.Model):
    __tablename__ = "classrooms"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text)
    code = db.Column(db.String(6), unique=True, nullable=False, index=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # children go away with the classroom, in the same flush
    enrollments = db.relationship("Enrollments", backref=backref("classroom"),
                                  cascade="all, delete-orphan", lazy="select")
    assignments = db.relationship("Assignments", backref=backref("classroom"),
                                  cascade="all, delete-orphan", lazy="select",
                                  order_by="Assignments.due_date")
    resources = db.relationship("Resources", backref=backref("classroom"),
                                cascade="all, delete-orphan", lazy="select")

class Enrollments(db.Model):
    __tablename__ = "enrollments"
    id = db.Column(db.Integer, primary_key=True)
    classroom_id = db.Column(db.Integer, db.ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    __table_args__ = (db.UniqueConstraint("classroom_id", "student_id", name="uq_enrollments_classroom_student"),)

    student = db.relationship("Users", backref=backref("enrollments", lazy="select",
                                                       cascade="all, delete-orphan"))

class Assignments(db.Model):
    __tablename__ = "assignments"
    id = db.Column(db.Integer, primary_key=True)
    classroom_id = db.Column(db.Integer, db.ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    due_date = db.Column(db.DateTime, nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False, default=TYPE_DOCUMENT)
    total_points = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    questions = db.relationship("Questions", backref=backref("assignment"),
                                cascade="all, delete-orphan", lazy="select",
                                order_by="Questions.position")
    submissions = db.relationship("Submissions", backref=backref("assignment"),
                                  cascade="all, delete-orphan", lazy="select")

    def is_past_due(self, now: datetime) -> bool:
        return now > self.due_date

class Questions(db.Model):
    __tablename__ = "questions"
    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=1)   # 1-based
    question_text = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False)
    options = db.Column(db.JSON)                                  # only MULTIPLE_CHOICE
    correct_answer = db.Column(db.String(500), nullable=False)
    points = db.Column(db.Integer, nullable=False, default=1)

class Submissions(db.Model):
    __tablename__ = "submissions"
    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url = db.Column(db.String(500))
    answers = db.Column(db.JSON)                                  # {"<question id>": "<answer>"}
    submitted_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    grade = db.Column(db.Float)                                   # 0..100, None = ungraded
    feedback = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    __table_args__ = (db.UniqueConstraint("assignment_id", "student_id", name="uq_submissions_assignment_student"),)

    student = db.relationship("Users", backref=backref("submissions", lazy="select",
                                                       cascade="all, delete-orphan"))

    @property
    def is_graded(self) -> bool:
        return self.grade is not None

class Resources(db.Model):
    __tablename__ = "resources"
    id = db.Column(db.Integer, primary_key=True)
    classroom_id = db.Column(db.Integer, db.ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    file_url = db.Column(db.String(500), nullable=False)
    type = db.Column(db.String(20), nullable=False, default="OTHER")
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
