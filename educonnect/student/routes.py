from functools import wraps

from flask import Blueprint, g, jsonify

from ..access import current_principal, require_role
from ..models import ROLE_STUDENT
from ..services import assignments, classrooms, reporting

student_bp = Blueprint("student", __name__)


def student_required(view_func):
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        g.principal = current_principal()
        require_role(g.principal, ROLE_STUDENT)
        return view_func(*args, **kwargs)
    return wrapper


@student_bp.get("/dashboard")
@student_required
def dashboard():
    """Upcoming unsubmitted work, recent submissions and enrollment count."""
    return jsonify(reporting.student_dashboard(g.principal))


@student_bp.get("/assignments")
@student_required
def assignments_list():
    return jsonify(assignments.list_student_assignments(g.principal))


@student_bp.get("/resources")
@student_required
def resources_list():
    return jsonify(classrooms.list_student_resources(g.principal))
