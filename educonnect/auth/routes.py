from flask import current_app, jsonify
from flask_login import login_user, logout_user, current_user
from flask_jwt_extended import create_access_token

from . import auth_bp
from .. import db
from ..access import current_principal
from ..errors import Conflict, NotFound, Unauthorized
from ..forms import LoginForm, RegisterForm, validated
from ..models import Users
from ..serializers import user_json


def _issue_token(user):
    # identity as string; role/name travel as additional claims
    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role, "name": user.name},
    )


@auth_bp.route("/register", methods=["POST"])
def register():
    form = validated(RegisterForm())
    email = form.email.data.strip().lower()
    if Users.query.filter_by(email=email).first():
        raise Conflict("User with this email already exists")

    user = Users(name=form.name.data.strip(), email=email, role=form.role.data)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Registered %s user %s", user.role, user.id)
    return jsonify(user=user_json(user), message="User registered successfully"), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    form = validated(LoginForm())
    email = (form.email.data or "").strip().lower()
    user = Users.query.filter_by(email=email).first()
    if not user or not user.check_password(form.password.data):
        current_app.logger.warning("Failed login for %s", email)
        raise Unauthorized("Invalid email or password")

    # cookie session for browser clients, bearer token for API clients
    login_user(user, remember=False)
    return jsonify(access_token=_issue_token(user), user=user_json(user))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify(message="Logged out")


@auth_bp.route("/me")
def me():
    principal = current_principal()
    user = db.session.get(Users, principal.id)
    if user is None:
        raise NotFound("User not found")
    return jsonify(user_json(user))
