from flask import Blueprint, jsonify

from ..access import current_principal
from ..forms import GradeForm, validated
from ..serializers import submission_json
from ..services import submissions

submission_bp = Blueprint("submission", __name__)


@submission_bp.get("/<int:submission_id>")
def detail(submission_id):
    return jsonify(submissions.get_submission(current_principal(), submission_id))


@submission_bp.put("/<int:submission_id>")
def grade(submission_id):
    principal = current_principal()
    form = validated(GradeForm())
    s = submissions.grade(principal, submission_id, form.grade.data, form.feedback.data or None)
    return jsonify(submission_json(s))


@submission_bp.delete("/<int:submission_id>")
def delete(submission_id):
    submissions.delete_submission(current_principal(), submission_id)
    return jsonify(message="Submission deleted successfully")


@submission_bp.get("/<int:submission_id>/auto-score")
def auto_score(submission_id):
    result = submissions.auto_score(current_principal(), submission_id)
    return jsonify(dict(result.to_dict(), submission_id=submission_id))
