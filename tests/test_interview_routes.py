"""
Tests for the interview HTTP surface: start, answer loop, results, dashboard,
performance report and the plain AI function endpoints.
"""
import base64

from conftest import feedback_json
from interviewai.core.security import create_access_token
from interviewai.db.models.profile import Profile


def start(client, headers, **payload):
    payload.setdefault("subjects", ["DSA", "OS"])
    payload.setdefault("total_questions", 2)
    return client.post("/interviews", json=payload, headers=headers)


def test_requires_authentication(client):
    assert client.get("/interviews").status_code == 401
    assert client.post("/interviews", json={"subjects": ["DSA"]}).status_code == 401


def test_list_subjects(client):
    response = client.get("/interviews/subjects")
    assert response.status_code == 200
    keys = [s["key"] for s in response.json()]
    assert "dsa" in keys and "system design" in keys


def test_begin_interview(client, auth_headers, registry):
    response = start(client, auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["state"] == "awaiting_answer"
    assert body["question_number"] == 1
    assert body["current_question"] == "Generated question 1"
    assert body["current_subject"] == "DSA"
    assert len(registry) == 1

    run = client.get(f"/interviews/{body['session_id']}", headers=auth_headers)
    assert run.status_code == 200
    assert run.json()["current_question"] == "Generated question 1"


def test_begin_with_interview_type(client, auth_headers):
    response = client.post("/interviews", json={"interview_type": "HR & Behavioral"}, headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["subjects"] == ["HR & Behavioral"]
    assert response.json()["total_questions"] == 5


def test_begin_validation(client, auth_headers, registry):
    assert client.post("/interviews", json={}, headers=auth_headers).status_code == 422

    response = start(client, auth_headers, total_questions=0)
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_QUOTA"
    assert len(registry) == 0


def test_full_interview_flow(client, auth_headers, provider, registry):
    provider.analyses = [feedback_json(score=90), feedback_json(score=70, feedback="Needs more depth.")]
    session_id = start(client, auth_headers).json()["session_id"]

    empty = client.post(f"/interviews/{session_id}/answer", json={"answer": "   "}, headers=auth_headers)
    assert empty.status_code == 422
    assert empty.json()["code"] == "EMPTY_ANSWER"
    assert empty.json()["retryable"] is False

    first = client.post(f"/interviews/{session_id}/answer", json={"answer": "Binary search halves the range."}, headers=auth_headers)
    assert first.status_code == 200
    assert first.json()["score"] == 90
    assert first.json()["completed"] is False
    assert first.json()["next_question"] == "Generated question 2"

    second = client.post(f"/interviews/{session_id}/answer", json={"answer": "A process owns an address space."}, headers=auth_headers)
    assert second.status_code == 200
    assert second.json()["completed"] is True
    assert len(registry) == 0

    # The finished run is gone from memory; its data is not
    gone = client.get(f"/interviews/{session_id}", headers=auth_headers)
    assert gone.status_code == 404
    assert gone.json()["code"] == "SESSION_NOT_FOUND"

    results = client.get(f"/interviews/{session_id}/results", headers=auth_headers).json()
    assert results["average_score"] == 80
    assert results["score_label"] == "Excellent"
    assert results["session"]["status"] == "completed"
    assert [r["score"] for r in results["responses"]] == [90, 70]
    assert results["responses"][1]["feedback"]["feedback"] == "Needs more depth."

    dashboard = client.get("/interviews", headers=auth_headers).json()
    assert dashboard["stats"]["total_interviews"] == 1
    assert dashboard["stats"]["completed_interviews"] == 1
    assert dashboard["stats"]["questions_answered"] == 2
    assert dashboard["stats"]["average_score"] == 80
    assert dashboard["sessions"][0]["id"] == session_id

    report = client.get("/profile/report", headers=auth_headers)
    assert report.status_code == 200
    assert "attachment" in report.headers["content-disposition"]
    assert "INTERVIEW PERFORMANCE REPORT" in report.text
    assert "Total Interviews Completed: 1" in report.text
    assert "Average Score: 80%" in report.text


def test_retry_after_question_failure(client, auth_headers, provider):
    provider.questions = [RuntimeError("gateway down"), "Explain virtual memory."]
    body = start(client, auth_headers).json()
    assert body["state"] == "awaiting_question"
    assert body["last_error"]

    retry = client.post(f"/interviews/{body['session_id']}/question", headers=auth_headers)
    assert retry.status_code == 200
    assert retry.json()["current_question"] == "Explain virtual memory."

    # Not awaiting a question any more
    again = client.post(f"/interviews/{body['session_id']}/question", headers=auth_headers)
    assert again.status_code == 409
    assert again.json()["code"] == "INVALID_STATE"


def test_analysis_failure_is_retryable(client, auth_headers, provider):
    provider.analyses = [RuntimeError("timeout")]
    session_id = start(client, auth_headers).json()["session_id"]

    response = client.post(f"/interviews/{session_id}/answer", json={"answer": "My answer"}, headers=auth_headers)
    assert response.status_code == 502
    assert response.json()["code"] == "ANSWER_ANALYSIS_FAILED"
    assert response.json()["retryable"] is True

    run = client.get(f"/interviews/{session_id}", headers=auth_headers).json()
    assert run["state"] == "awaiting_answer"


def test_complete_early_and_teardown(client, auth_headers, registry):
    session_id = start(client, auth_headers, total_questions=5).json()["session_id"]

    response = client.post(f"/interviews/{session_id}/complete", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["state"] == "completed"
    assert len(registry) == 0

    other_id = start(client, auth_headers).json()["session_id"]
    assert client.delete(f"/interviews/{other_id}/run", headers=auth_headers).status_code == 204
    assert len(registry) == 0

    dashboard = client.get("/interviews", headers=auth_headers).json()
    statuses = {s["id"]: s["status"] for s in dashboard["sessions"]}
    assert statuses == {session_id: "completed", other_id: "in-progress"}


def test_runs_are_private(client, db, auth_headers):
    session_id = start(client, auth_headers).json()["session_id"]

    other = Profile(full_name="Other", email="other@example.com", password_hash="x")
    db.add(other)
    db.commit()
    other_headers = {"Authorization": f"Bearer {create_access_token({'sub': 'other@example.com'})}"}

    assert client.get(f"/interviews/{session_id}", headers=other_headers).status_code == 404
    assert client.post(f"/interviews/{session_id}/answer", json={"answer": "x"}, headers=other_headers).status_code == 404
    assert client.get(f"/interviews/{session_id}/results", headers=other_headers).status_code == 404


def test_empty_dashboard(client, auth_headers):
    body = client.get("/interviews", headers=auth_headers).json()
    assert body["sessions"] == []
    assert body["stats"]["average_score"] == 0


# ============================================
# AI function endpoints
# ============================================

def test_generate_question_function(client, auth_headers, provider):
    response = client.post(
        "/functions/generate-question",
        json={
            "subjects": ["DSA", "OS"],
            "questionNumber": 2,
            "totalQuestions": 2,
            "previousQuestions": ["Reverse a linked list."],
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["question"] == "Generated question 1"
    _, user_prompt = provider.question_prompts[0]
    assert "Operating Systems" in user_prompt
    assert "- Reverse a linked list." in user_prompt


def test_analyze_answer_function(client, auth_headers, provider):
    provider.analyses = [feedback_json(score=64)]
    response = client.post(
        "/functions/analyze-answer",
        json={"question": "What is a mutex?", "answer": "A lock.", "interviewType": "OS"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["score"] == 64
    assert response.json()["strengths"] == ["Good structure"]


def test_speech_functions(client, auth_headers):
    tts = client.post("/functions/text-to-speech", json={"text": "Hello"}, headers=auth_headers)
    assert tts.status_code == 200
    assert base64.b64decode(tts.json()["audioContent"]) == b"mp3-bytes"

    stt = client.post(
        "/functions/speech-to-text",
        json={"audio": base64.b64encode(b"clip").decode(), "mimeType": "audio/webm"},
        headers=auth_headers,
    )
    assert stt.status_code == 200
    assert stt.json()["text"] == "my spoken answer"

    bad = client.post("/functions/speech-to-text", json={"audio": "***"}, headers=auth_headers)
    assert bad.status_code == 502
    assert bad.json()["code"] == "TRANSCRIPTION_FAILED"


def test_functions_require_authentication(client):
    assert client.post("/functions/text-to-speech", json={"text": "Hello"}).status_code == 401
