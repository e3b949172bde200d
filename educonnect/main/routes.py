from flask import jsonify
from . import main_bp

@main_bp.route("/")
def index():
    return jsonify(name="EduConnect", status="ok")
