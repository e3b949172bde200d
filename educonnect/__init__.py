"""App factory for EduConnect (Flask)."""
import logging
from time import perf_counter

from flask import Flask, g, request
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_jwt_extended import JWTManager
from .config import Config


db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
jwt = JWTManager()

def create_app(config_object: type = Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    db.init_app(app); migrate.init_app(app, db)
    login_manager.init_app(app); csrf.init_app(app); jwt.init_app(app)

    from .errors import register_error_handlers, register_jwt_callbacks
    register_error_handlers(app)
    register_jwt_callbacks(jwt)

    from .auth.routes import auth_bp
    from .main.routes import main_bp
    from .classroom.routes import classroom_bp
    from .assignment.routes import assignment_bp
    from .submission.routes import submission_bp
    from .student.routes import student_bp
    from .teacher.routes import teacher_bp
    from .admin.routes import admin_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(classroom_bp, url_prefix="/classrooms")
    app.register_blueprint(assignment_bp, url_prefix="/assignments")
    app.register_blueprint(submission_bp, url_prefix="/submissions")
    app.register_blueprint(student_bp, url_prefix="/student")
    app.register_blueprint(teacher_bp, url_prefix="/teacher")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.cli.command("seed")
    def seed_command():
        from .seed import run_seed; run_seed(); print("Seed loaded.")

    @app.cli.command("reset-db")
    def reset_db_command():
        """
        Dev only: resets the database.
        - SQLite: deletes the file and creates the tables.
        - Then runs the seed.
        """
        from pathlib import Path
        uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
        if uri.startswith("sqlite:///") and uri != "sqlite:///:memory:":
            p = Path(uri.replace("sqlite:///", ""))
            if p.exists():
                p.unlink()
        with app.app_context():
            db.drop_all()
            db.create_all()
            from .seed import run_seed
            run_seed()
        print("Database recreated and seed loaded.")

    @app.before_request
    def _rq_start():
        g._rq_t0 = perf_counter()

    @app.after_request
    def _rq_stop(response):
        t0 = getattr(g, "_rq_t0", None)
        if t0 is not None:
            duration_ms = int((perf_counter() - t0) * 1000)
            app.logger.debug("%s %s -> %s (%d ms)", request.method, request.path,
                             response.status_code, duration_ms)
        return response

    return app
