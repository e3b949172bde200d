from flask import g, jsonify

from . import admin_bp
from ..access import current_principal, require_role
from ..models import ROLE_ADMIN
from ..services import reporting


# Guards
@admin_bp.before_request
def guard():
    g.principal = current_principal()
    require_role(g.principal, ROLE_ADMIN)


# Dashboard
@admin_bp.route("/dashboard")
def dashboard():
    return jsonify(reporting.admin_dashboard(g.principal))
