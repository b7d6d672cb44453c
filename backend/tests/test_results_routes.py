from quizhub.models.result import Result

from tests.conftest import register


STARTED_AT = "2026-03-01T10:00:00Z"


def _exam_with_questions(client, headers, total_points=100, passing_score=60):
    exam = client.post(
        "/api/exams",
        json={
            "title": "Capitals",
            "subject": "Geography",
            "totalQuestions": 2,
            "totalPoints": total_points,
            "passingScore": passing_score,
        },
        headers=headers,
    ).json()["data"]
    ids = []
    for text, answer in (("Capital of France?", "Paris"), ("Capital of Italy?", "Rome")):
        q = client.post(
            "/api/questions",
            json={"question": text, "correctAnswer": answer, "points": 50, "exam": exam["id"]},
            headers=headers,
        ).json()["data"]
        ids.append(q["id"])
    return exam, ids


def _submit(client, headers, exam_id, answers, time_spent=90):
    return client.post(
        "/api/results",
        json={
            "examId": exam_id,
            "answers": [{"questionId": qid, "selectedAnswer": a} for qid, a in answers],
            "timeSpent": time_spent,
            "startedAt": STARTED_AT,
        },
        headers=headers,
    )


def test_submit_scores_and_stores_result(client):
    _, author = register(client, "author")
    student_id, student = register(client, "student")
    exam, (q1, q2) = _exam_with_questions(client, author)

    res = _submit(client, student, exam["id"], [(q1, "Paris"), (q2, "Milan")])

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["user_id"] == student_id
    assert data["total_score"] == 50
    assert data["max_score"] == 100
    assert data["percentage"] == 50
    assert data["is_passed"] is False
    assert data["time_spent"] == 90
    assert [a["is_correct"] for a in data["answers"]] == [True, False]

    fetched = client.get(f"/api/results/{data['id']}", headers=student).json()["data"]
    for key in ("total_score", "max_score", "percentage", "is_passed", "answers"):
        assert fetched[key] == data[key]
    assert fetched["exam"]["passing_score"] == 60
    assert fetched["user"]["username"] == "student"


def test_submit_requires_token(client):
    _, author = register(client, "author")
    exam, (q1, _) = _exam_with_questions(client, author)

    assert _submit(client, {}, exam["id"], [(q1, "Paris")]).status_code == 401


def test_submit_to_missing_exam(client):
    _, student = register(client, "student")

    res = _submit(client, student, 12345, [])
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Exam not found"


def test_zero_point_exam_is_rejected_without_storing(client, session_factory):
    _, author = register(client, "author")
    exam, (q1, _) = _exam_with_questions(client, author, total_points=0, passing_score=0)

    res = _submit(client, author, exam["id"], [(q1, "Paris")])

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_EXAM_CONFIGURATION"
    with session_factory() as s:
        assert s.query(Result).count() == 0


def test_history_and_exam_results(client):
    _, author = register(client, "author")
    _, alice = register(client, "alice")
    _, bob = register(client, "bob")
    exam, (q1, q2) = _exam_with_questions(client, author)

    first = _submit(client, alice, exam["id"], [(q1, "Paris")]).json()["data"]
    second = _submit(client, alice, exam["id"], [(q1, "Paris"), (q2, "Rome")]).json()["data"]
    _submit(client, bob, exam["id"], [])

    history = client.get("/api/results/user/history", headers=alice).json()
    assert history["count"] == 2
    assert [r["id"] for r in history["data"]] == [second["id"], first["id"]]
    assert history["data"][0]["exam"]["title"] == "Capitals"
    assert history["data"][0]["is_passed"] is True

    per_exam = client.get(f"/api/results/exam/{exam['id']}", headers=author).json()
    assert per_exam["count"] == 3
    assert {r["user"]["username"] for r in per_exam["data"]} == {"alice", "bob"}


def test_results_survive_exam_deletion(client):
    _, author = register(client, "author")
    exam, (q1, _) = _exam_with_questions(client, author)
    result = _submit(client, author, exam["id"], [(q1, "Paris")]).json()["data"]

    client.delete(f"/api/exams/{exam['id']}", headers=author)

    res = client.get(f"/api/results/{result['id']}", headers=author)
    assert res.status_code == 200
    assert res.json()["data"]["exam"] is None
    assert res.json()["data"]["total_score"] == 50


def test_missing_result(client):
    _, headers = register(client, "alice")

    assert client.get("/api/results/999", headers=headers).status_code == 404
