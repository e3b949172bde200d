from functools import wraps

from flask import Blueprint, g, jsonify

from ..access import current_principal, require_role
from ..models import ROLE_TEACHER
from ..services import assignments, classrooms, reporting

teacher_bp = Blueprint("teacher", __name__)


def teacher_required(view_func):
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        g.principal = current_principal()
        require_role(g.principal, ROLE_TEACHER)
        return view_func(*args, **kwargs)
    return wrapper


@teacher_bp.get("/dashboard")
@teacher_required
def dashboard():
    return jsonify(reporting.teacher_dashboard(g.principal))


@teacher_bp.get("/assignments")
@teacher_required
def assignments_list():
    return jsonify(assignments.list_teacher_assignments(g.principal))


@teacher_bp.get("/students")
@teacher_required
def students_list():
    return jsonify(classrooms.list_students(g.principal))
