from flask import Blueprint, jsonify, request

from ..access import current_principal, require_role
from ..forms import ClassroomForm, ClassroomUpdateForm, JoinClassroomForm, ResourceForm, validated
from ..schemas import AssignmentCreate, parse
from ..models import ROLE_STUDENT, ROLE_TEACHER
from ..serializers import assignment_json, classroom_json, enrollment_json, resource_json
from ..services import assignments, classrooms

classroom_bp = Blueprint("classroom", __name__)


@classroom_bp.route("", methods=["POST"])
def create():
    principal = current_principal()
    require_role(principal, ROLE_TEACHER,
                 message="Only teachers can create classrooms")
    form = validated(ClassroomForm())
    c = classrooms.create_classroom(principal, form.name.data, form.description.data)
    return jsonify(id=c.id, code=c.code, message="Classroom created successfully"), 201


@classroom_bp.route("", methods=["GET"])
def index():
    return jsonify(classrooms.list_classrooms(current_principal()))


@classroom_bp.post("/join")
def join():
    principal = current_principal()
    require_role(principal, ROLE_STUDENT,
                 message="Only students can join classrooms")
    form = validated(JoinClassroomForm())
    e = classrooms.join_classroom(principal, form.code.data)
    return jsonify(
        message="Successfully joined classroom",
        classroom_id=e.classroom_id,
        enrollment=enrollment_json(e),
    ), 201


@classroom_bp.get("/<int:classroom_id>")
def detail(classroom_id):
    return jsonify(classrooms.get_classroom(current_principal(), classroom_id))


@classroom_bp.put("/<int:classroom_id>")
def update(classroom_id):
    principal = current_principal()
    form = validated(ClassroomUpdateForm())
    c = classrooms.update_classroom(principal, classroom_id,
                                    name=form.name.data, description=form.description.data)
    return jsonify(classroom_json(c))


@classroom_bp.delete("/<int:classroom_id>")
def delete(classroom_id):
    classrooms.delete_classroom(current_principal(), classroom_id)
    return jsonify(message="Classroom deleted successfully")


# ----------------- Assignments -----------------
@classroom_bp.get("/<int:classroom_id>/assignments")
def assignments_index(classroom_id):
    return jsonify(assignments.list_classroom_assignments(current_principal(), classroom_id))


@classroom_bp.post("/<int:classroom_id>/assignments")
def assignments_create(classroom_id):
    principal = current_principal()
    payload = parse(AssignmentCreate, request.get_json(silent=True))
    a = assignments.create_assignment(principal, classroom_id, payload)
    return jsonify(assignment_json(a, with_questions=True)), 201


# ----------------- Resources -----------------
@classroom_bp.get("/<int:classroom_id>/resources")
def resources_index(classroom_id):
    rows = classrooms.list_resources(current_principal(), classroom_id)
    return jsonify([resource_json(r) for r in rows])


@classroom_bp.post("/<int:classroom_id>/resources")
def resources_create(classroom_id):
    principal = current_principal()
    require_role(principal, ROLE_TEACHER,
                 message="Only teachers can add resources")
    form = validated(ResourceForm())
    r = classrooms.create_resource(
        principal, classroom_id,
        title=form.title.data, file_url=form.file_url.data,
        type=form.type.data, description=form.description.data,
    )
    return jsonify(resource_json(r)), 201


@classroom_bp.delete("/<int:classroom_id>/resources/<int:resource_id>")
def resources_delete(classroom_id, resource_id):
    classrooms.delete_resource(current_principal(), classroom_id, resource_id)
    return jsonify(message="Resource deleted")
