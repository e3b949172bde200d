"""Model -> JSON-ready dict helpers used by the blueprints."""


def _iso(dt):
    return dt.isoformat(timespec="seconds") if dt else None


def user_json(u, with_email=True):
    d = {"id": u.id, "name": u.name, "role": u.role}
    if with_email:
        d["email"] = u.email
    return d


def classroom_json(c):
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "code": c.code,
        "teacher_id": c.teacher_id,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }


def enrollment_json(e, with_student=False):
    d = {
        "id": e.id,
        "student_id": e.student_id,
        "classroom_id": e.classroom_id,
        "created_at": _iso(e.created_at),
    }
    if with_student:
        d["student"] = user_json(e.student)
    return d


def question_json(q, with_key=True):
    d = {
        "id": q.id,
        "position": q.position,
        "question_text": q.question_text,
        "type": q.type,
        "options": q.options,
        "points": q.points,
    }
    # students never receive the answer key
    if with_key:
        d["correct_answer"] = q.correct_answer
    return d


def submission_json(s, with_student=False):
    d = {
        "id": s.id,
        "assignment_id": s.assignment_id,
        "student_id": s.student_id,
        "file_url": s.file_url,
        "answers": s.answers,
        "submitted_at": _iso(s.submitted_at),
        "grade": s.grade,
        "feedback": s.feedback,
        "updated_at": _iso(s.updated_at),
    }
    if with_student:
        d["student"] = user_json(s.student)
    return d


def assignment_json(a, with_questions=False, with_key=True):
    d = {
        "id": a.id,
        "classroom_id": a.classroom_id,
        "title": a.title,
        "description": a.description,
        "due_date": _iso(a.due_date),
        "type": a.type,
        "total_points": a.total_points,
        "created_at": _iso(a.created_at),
        "updated_at": _iso(a.updated_at),
    }
    if with_questions:
        d["questions"] = [question_json(q, with_key=with_key) for q in a.questions]
    return d


def resource_json(r):
    return {
        "id": r.id,
        "classroom_id": r.classroom_id,
        "title": r.title,
        "description": r.description,
        "file_url": r.file_url,
        "type": r.type,
        "created_at": _iso(r.created_at),
    }
