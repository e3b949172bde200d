import os
from io import BytesIO

import pytest

from educonnect import db
from educonnect.models import Classrooms, Enrollments, Submissions, ROLE_TEACHER

from conftest import auth, document_payload, quiz_payload


# ----------------- auth -----------------

def test_index(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.get_json() == {"name": "EduConnect", "status": "ok"}


def test_register_login_me(client):
    res = client.post("/auth/register", json={
        "name": "Ada Lovelace", "email": "Ada@SchoolMail.com", "password": "analytical", "role": "TEACHER",
    })
    assert res.status_code == 201
    user = res.get_json()["user"]
    assert user["email"] == "ada@schoolmail.com"
    assert user["role"] == ROLE_TEACHER

    res = client.post("/auth/login", json={"email": "ada@schoolmail.com", "password": "analytical"})
    assert res.status_code == 200
    token = res.get_json()["access_token"]

    res = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.get_json()["name"] == "Ada Lovelace"


def test_session_login_also_authenticates(client, make_user):
    u = make_user(password="longenough")
    client.post("/auth/login", json={"email": u.email, "password": "longenough"})
    assert client.get("/auth/me").get_json()["id"] == u.id
    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401


def test_register_defaults_to_student_and_rejects_duplicates(client):
    body = {"name": "Sam", "email": "sam@schoolmail.com", "password": "password1"}
    res = client.post("/auth/register", json=body)
    assert res.get_json()["user"]["role"] == "STUDENT"
    assert client.post("/auth/register", json=body).status_code == 409


@pytest.mark.parametrize("body,field", [
    ({"name": "Sam", "email": "sam@schoolmail.com", "password": "short"}, "password"),
    ({"name": "Sam", "email": "not-an-email", "password": "password1"}, "email"),
    ({"name": "Sam", "email": "sam@schoolmail.com", "password": "password1", "role": "ADMIN"}, "role"),
])
def test_register_validation(client, body, field):
    res = client.post("/auth/register", json=body)
    assert res.status_code == 400
    assert field in res.get_json()["errors"]


def test_bad_credentials(client, make_user):
    u = make_user()
    res = client.post("/auth/login", json={"email": u.email, "password": "wrong-password"})
    assert res.status_code == 401
    assert res.get_json()["error"] == "Invalid email or password"


def test_anonymous_requests_are_rejected(client):
    for path in ("/classrooms", "/teacher/dashboard", "/student/dashboard", "/admin/dashboard"):
        res = client.get(path)
        assert res.status_code == 401
        assert "error" in res.get_json()


def test_garbage_token_is_rejected(client):
    res = client.get("/classrooms", headers={"Authorization": "Bearer not.a.jwt"})
    assert res.status_code == 401


# ----------------- classrooms -----------------

def test_classroom_flow(client, teacher, student):
    res = client.post("/classrooms", json={"name": "Geometry", "description": "Shapes"},
                      headers=auth(teacher))
    assert res.status_code == 201
    created = res.get_json()
    code = created["code"]

    assert client.post("/classrooms", json={"name": "Nope"}, headers=auth(student)).status_code == 403
    assert client.post("/classrooms", json={"name": "ab"}, headers=auth(teacher)).status_code == 400

    res = client.post("/classrooms/join", json={"code": code.lower()}, headers=auth(student))
    assert res.status_code == 201
    assert res.get_json()["classroom_id"] == created["id"]
    assert client.post("/classrooms/join", json={"code": code}, headers=auth(student)).status_code == 409

    listed = client.get("/classrooms", headers=auth(student)).get_json()
    assert [c["id"] for c in listed] == [created["id"]]

    detail = client.get(f"/classrooms/{created['id']}", headers=auth(teacher)).get_json()
    assert detail["student_count"] == 1

    res = client.put(f"/classrooms/{created['id']}", json={"name": "Geometry II"}, headers=auth(teacher))
    assert res.get_json()["name"] == "Geometry II"


@pytest.mark.parametrize("method,path,body,field", [
    ("post", "/classrooms", {"name": 12345}, "name"),
    ("post", "/classrooms", {"name": "Algebra", "description": 42}, "description"),
    ("put", "/classrooms/{cid}", {"name": 12345}, "name"),
    ("put", "/classrooms/{cid}", {"description": {"text": "x"}}, "description"),
])
def test_non_string_classroom_fields_are_rejected(client, classroom, teacher, method, path, body, field):
    res = getattr(client, method)(path.format(cid=classroom.id), json=body, headers=auth(teacher))
    assert res.status_code == 400
    assert field in res.get_json()["errors"]


def test_non_string_join_code_and_feedback_are_rejected(client, classroom, essay, teacher, make_user):
    newcomer = make_user()
    res = client.post("/classrooms/join", json={"code": 123456}, headers=auth(newcomer))
    assert res.status_code == 400
    assert "code" in res.get_json()["errors"]

    client.post("/classrooms/join", json={"code": classroom.code}, headers=auth(newcomer))
    sid = client.post(f"/assignments/{essay.id}/submit", json={"file_url": "https://x.test/e.pdf"},
                      headers=auth(newcomer)).get_json()["id"]
    res = client.put(f"/submissions/{sid}", json={"grade": 70, "feedback": 5}, headers=auth(teacher))
    assert res.status_code == 400
    assert "feedback" in res.get_json()["errors"]


def test_non_string_login_password_is_rejected(client, make_user):
    u = make_user()
    res = client.post("/auth/login", json={"email": u.email, "password": 12345678})
    assert res.status_code == 400


def test_outsiders_get_not_found(client, classroom, make_user):
    assert client.get(f"/classrooms/{classroom.id}", headers=auth(make_user())).status_code == 404
    other = make_user(ROLE_TEACHER)
    assert client.get(f"/classrooms/{classroom.id}", headers=auth(other)).status_code == 404
    assert client.delete(f"/classrooms/{classroom.id}", headers=auth(other)).status_code == 403


def test_delete_classroom(client, classroom, teacher, enrolled, quiz):
    cid = classroom.id
    res = client.delete(f"/classrooms/{cid}", headers=auth(teacher))
    assert res.status_code == 200
    db.session.expire_all()
    assert Classrooms.query.count() == 0
    assert client.get(f"/classrooms/{cid}/assignments", headers=auth(enrolled)).status_code == 404


def test_enrollment_cannot_be_dropped_under_a_submission(client, classroom, essay, teacher, enrolled):
    client.post(f"/assignments/{essay.id}/submit", json={"file_url": "https://x.test/e.pdf"},
                headers=auth(enrolled))
    assert client.delete(f"/classrooms/{classroom.id}/enrollment", headers=auth(enrolled)).status_code == 404
    db.session.expire_all()
    assert Enrollments.query.filter_by(student_id=enrolled.id, classroom_id=classroom.id).count() == 1
    rows = client.get(f"/assignments/{essay.id}/submissions", headers=auth(teacher)).get_json()
    assert [r["student"]["id"] for r in rows] == [enrolled.id]


def test_resources(client, classroom, teacher, enrolled):
    res = client.post(f"/classrooms/{classroom.id}/resources",
                      json={"title": "Slides", "file_url": "https://x.test/s.pdf", "type": "PDF"},
                      headers=auth(teacher))
    assert res.status_code == 201
    rid = res.get_json()["id"]
    assert client.post(f"/classrooms/{classroom.id}/resources",
                       json={"title": "Slides", "file_url": "https://x.test/s.pdf"},
                       headers=auth(enrolled)).status_code == 403

    listed = client.get(f"/classrooms/{classroom.id}/resources", headers=auth(enrolled)).get_json()
    assert [r["id"] for r in listed] == [rid]
    assert len(client.get("/student/resources", headers=auth(enrolled)).get_json()) == 1

    res = client.delete(f"/classrooms/{classroom.id}/resources/{rid}", headers=auth(teacher))
    assert res.status_code == 200


# ----------------- assignments and submissions -----------------

def test_quiz_end_to_end(client, classroom, teacher, enrolled):
    res = client.post(f"/classrooms/{classroom.id}/assignments", json=quiz_payload(), headers=auth(teacher))
    assert res.status_code == 201
    quiz = res.get_json()
    assert quiz["total_points"] == 7
    q1, q2 = quiz["questions"]

    seen = client.get(f"/assignments/{quiz['id']}", headers=auth(enrolled)).get_json()
    assert all("correct_answer" not in q for q in seen["questions"])

    res = client.post(f"/assignments/{quiz['id']}/submit",
                      json={"answers": {str(q1["id"]): "2"}}, headers=auth(enrolled))
    assert res.status_code == 400
    assert res.get_json()["errors"]["missing"] == [str(q2["id"])]

    res = client.post(f"/assignments/{quiz['id']}/submit",
                      json={"answers": {str(q1["id"]): "2", str(q2["id"]): "cell membrane"}},
                      headers=auth(enrolled))
    assert res.status_code == 200
    sid = res.get_json()["id"]

    res = client.get(f"/submissions/{sid}/auto-score", headers=auth(teacher))
    assert res.status_code == 200
    score = res.get_json()
    assert score["submission_id"] == sid
    assert (score["earned"], score["possible"]) == (5, 7)
    assert score["manual_review"] == [q2["id"]]
    assert client.get(f"/submissions/{sid}/auto-score", headers=auth(enrolled)).status_code == 403

    assert client.put(f"/submissions/{sid}", json={"grade": 150}, headers=auth(teacher)).status_code == 400
    assert client.put(f"/submissions/{sid}", json={"feedback": "no grade"}, headers=auth(teacher)).status_code == 400
    res = client.put(f"/submissions/{sid}", json={"grade": 95, "feedback": "Great"}, headers=auth(teacher))
    assert res.status_code == 200
    assert res.get_json()["grade"] == 95.0

    mine = client.get(f"/submissions/{sid}", headers=auth(enrolled)).get_json()
    assert (mine["grade"], mine["feedback"]) == (95.0, "Great")

    stats = client.get(f"/assignments/{quiz['id']}/stats", headers=auth(teacher)).get_json()
    assert stats["average_grade"] == 95.0


def test_zero_is_a_valid_grade(client, essay, teacher, enrolled):
    res = client.post(f"/assignments/{essay.id}/submit", json={"file_url": "https://x.test/e.pdf"},
                      headers=auth(enrolled))
    sid = res.get_json()["id"]
    res = client.put(f"/submissions/{sid}", json={"grade": 0}, headers=auth(teacher))
    assert res.status_code == 200
    assert res.get_json()["grade"] == 0.0


def test_document_upload(client, essay, enrolled, app):
    res = client.post(
        f"/assignments/{essay.id}/submit",
        data={"file": (BytesIO(b"%PDF-1.4 essay"), "my essay.pdf")},
        content_type="multipart/form-data",
        headers=auth(enrolled),
    )
    assert res.status_code == 200
    url = res.get_json()["file_url"]
    assert url.startswith(f"/uploads/{essay.id}/")
    assert url.endswith("-my_essay.pdf")


def test_upload_rejected_for_outsider_writes_nothing(client, essay, make_user):
    res = client.post(
        f"/assignments/{essay.id}/submit",
        data={"file": (BytesIO(b"data"), "x.pdf")},
        content_type="multipart/form-data",
        headers=auth(make_user()),
    )
    assert res.status_code == 403
    db.session.expire_all()
    assert Submissions.query.count() == 0


def test_upload_to_a_test_assignment_writes_nothing(client, app, quiz, enrolled):
    res = client.post(
        f"/assignments/{quiz.id}/submit",
        data={"file": (BytesIO(b"%PDF-1.4"), "upload for quiz.pdf")},
        content_type="multipart/form-data",
        headers=auth(enrolled),
    )
    assert res.status_code == 400
    assert res.get_json()["errors"]["type"] == ["This assignment expects a TEST submission."]
    folder = os.path.join(app.config["UPLOAD_FOLDER"], str(quiz.id))
    stored = os.listdir(folder) if os.path.isdir(folder) else []
    assert not [f for f in stored if f.endswith("-upload_for_quiz.pdf")]


def test_submit_needs_a_body(client, essay, enrolled):
    res = client.post(f"/assignments/{essay.id}/submit", data="plain", headers=auth(enrolled))
    assert res.status_code == 400


def test_assignment_update_and_delete(client, classroom, teacher, enrolled):
    aid = client.post(f"/classrooms/{classroom.id}/assignments", json=document_payload(),
                      headers=auth(teacher)).get_json()["id"]
    res = client.put(f"/assignments/{aid}", json={"title": "Essay (revised)"}, headers=auth(teacher))
    assert res.get_json()["title"] == "Essay (revised)"
    assert client.put(f"/assignments/{aid}", json={"title": "x"}, headers=auth(enrolled)).status_code == 403
    assert client.delete(f"/assignments/{aid}", headers=auth(teacher)).get_json() == {"success": True}
    assert client.get(f"/assignments/{aid}", headers=auth(teacher)).status_code == 404


def test_student_assignment_list(client, essay, enrolled):
    rows = client.get("/student/assignments", headers=auth(enrolled)).get_json()
    assert [(r["id"], r["status"], r["has_submitted"]) for r in rows] == [(essay.id, "NOT_SUBMITTED", False)]


# ----------------- dashboards -----------------

def test_dashboards(client, classroom, teacher, enrolled, admin, essay):
    assert client.get("/teacher/dashboard", headers=auth(teacher)).get_json()["classroom_count"] == 1
    assert client.get("/teacher/students", headers=auth(teacher)).get_json()[0]["id"] == enrolled.id
    assert len(client.get("/teacher/assignments", headers=auth(teacher)).get_json()) == 1
    data = client.get("/student/dashboard", headers=auth(enrolled)).get_json()
    assert [a["id"] for a in data["upcoming_assignments"]] == [essay.id]
    assert client.get("/admin/dashboard", headers=auth(admin)).get_json()["classroom_count"] == 1

    assert client.get("/teacher/dashboard", headers=auth(enrolled)).status_code == 403
    assert client.get("/student/dashboard", headers=auth(teacher)).status_code == 403
    assert client.get("/admin/dashboard", headers=auth(teacher)).status_code == 403


def test_unexpected_errors_are_hidden(app, client):
    @app.route("/boom")
    def boom():
        raise RuntimeError("database password is hunter2")

    res = client.get("/boom")
    assert res.status_code == 500
    assert res.get_json() == {"error": "Internal server error"}
