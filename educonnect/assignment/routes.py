from flask import Blueprint, jsonify, request

from ..access import current_principal
from ..errors import ValidationError
from ..models import TYPE_DOCUMENT
from ..schemas import AssignmentUpdate, DocumentSubmission, parse, parse_submission_payload
from ..serializers import assignment_json, submission_json
from ..services import assignments, reporting, submissions
from ..uploads import save_submission_file

assignment_bp = Blueprint("assignment", __name__)


@assignment_bp.get("/<int:assignment_id>")
def detail(assignment_id):
    return jsonify(assignments.get_assignment(current_principal(), assignment_id))


@assignment_bp.put("/<int:assignment_id>")
def update(assignment_id):
    principal = current_principal()
    payload = parse(AssignmentUpdate, request.get_json(silent=True))
    a = assignments.update_assignment(principal, assignment_id, payload)
    return jsonify(assignment_json(a))


@assignment_bp.delete("/<int:assignment_id>")
def delete(assignment_id):
    assignments.delete_assignment(current_principal(), assignment_id)
    return jsonify(success=True)


@assignment_bp.post("/<int:assignment_id>/submit")
def submit(assignment_id):
    """JSON ``{file_url}`` / ``{answers}``, or multipart with a ``file`` part."""
    principal = current_principal()
    if request.files:
        # lifecycle checks first so a rejected submission never writes a file
        submissions.check_can_submit(principal, assignment_id, payload_type=TYPE_DOCUMENT)
        file_url = save_submission_file(request.files.get("file"), assignment_id)
        payload = DocumentSubmission(file_url=file_url)
    elif request.is_json:
        payload = parse_submission_payload(request.get_json(silent=True))
    else:
        raise ValidationError("Expected a JSON body or a file upload")
    s = submissions.submit(principal, assignment_id, payload)
    return jsonify(submission_json(s))


@assignment_bp.get("/<int:assignment_id>/submissions")
def submissions_index(assignment_id):
    return jsonify(submissions.list_submissions(current_principal(), assignment_id))


@assignment_bp.get("/<int:assignment_id>/stats")
def stats(assignment_id):
    return jsonify(reporting.assignment_stats(current_principal(), assignment_id))
