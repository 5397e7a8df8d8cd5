from models.processing_session import ProcessingSession
from processing import classifier, sessions

from tests.conftest import csrf_headers


def test_session_created_lazily(user_client):
    assert ProcessingSession.query.count() == 0

    resp = user_client.get("/processing/session")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["tested_count"] == 0
    assert body["is_active"] is False

    user_client.get("/processing/session")
    assert ProcessingSession.query.count() == 1


def test_run_returns_ordered_results_and_counters(user_client):
    resp = user_client.post(
        "/processing/run",
        json={"input": "a@b.com\n\nnot-an-email\n  x@y.org  "},
        headers=csrf_headers(user_client),
    )
    assert resp.status_code == 200
    body = resp.get_json()

    assert body["results"] == [
        {"input": "a@b.com", "approved": True, "message": "Valid email format"},
        {"input": "not-an-email", "approved": False, "message": "Invalid format or domain"},
        {"input": "x@y.org", "approved": True, "message": "Valid email format"},
    ]
    assert body["stopped"] is False
    session = body["session"]
    assert (session["loaded_count"], session["tested_count"]) == (3, 3)
    assert (session["approved_count"], session["rejected_count"]) == (2, 1)
    assert session["is_active"] is False


def test_run_rejects_empty_input(user_client):
    resp = user_client.post("/processing/run", json={"input": " \n "}, headers=csrf_headers(user_client))
    assert resp.status_code == 400


def test_run_requires_login(client):
    assert client.post("/processing/run", json={"input": "a@b.com"}).status_code == 401


def test_run_refused_while_active(user_client):
    user_client.get("/processing/session")
    sess = ProcessingSession.query.one()
    sessions.start_run(sess, 10)

    resp = user_client.post("/processing/run", json={"input": "a@b.com"}, headers=csrf_headers(user_client))
    assert resp.status_code == 409


def test_stop_marks_running_batch(user_client):
    user_client.get("/processing/session")
    sess = ProcessingSession.query.one()
    sessions.start_run(sess, 10)

    resp = user_client.post("/processing/stop", headers=csrf_headers(user_client))
    assert resp.get_json()["stopped"] is True
    assert sessions.stop_requested(sess) is True
    # the loop owns is_active until it exits
    assert sess.is_active is True

    resp = user_client.post("/processing/stop", headers=csrf_headers(user_client))
    assert resp.get_json()["stopped"] is False


def test_stop_during_run_halts_dispatch_and_blocks_restart(user_client, app, monkeypatch):
    app.config["CLASSIFIER_ENDPOINT"] = "http://verdicts.invalid/api/check"
    headers = csrf_headers(user_client)
    sent = []
    during = {}

    class _Resp:
        def raise_for_status(self):
            pass

        def json(self):
            return {"status": "approved", "message": "remote"}

    def slow_remote(url, json=None, **kwargs):
        sent.append(json["data"])
        if len(sent) == 2:
            during["stop"] = user_client.post("/processing/stop", headers=headers)
            during["run"] = user_client.post("/processing/run", json={"input": "z@z.com"}, headers=headers)
            during["clear"] = user_client.post("/processing/clear", headers=headers)
        return _Resp()

    monkeypatch.setattr(classifier.requests, "post", slow_remote)

    resp = user_client.post(
        "/processing/run",
        json={"input": "a@b.com\nb@c.com\nc@d.com\nd@e.com\ne@f.com"},
        headers=headers,
    )

    assert during["stop"].get_json()["stopped"] is True
    assert during["run"].status_code == 409
    assert during["clear"].status_code == 409
    assert sent == ["a@b.com", "b@c.com"]

    body = resp.get_json()
    assert body["stopped"] is True
    assert len(body["results"]) == 2
    session = body["session"]
    assert (session["loaded_count"], session["tested_count"]) == (5, 2)
    assert session["is_active"] is False
    assert session["stop_requested"] is False


def test_clear_zeroes_counters(user_client):
    headers = csrf_headers(user_client)
    user_client.post("/processing/run", json={"input": "a@b.com\nnope"}, headers=headers)

    resp = user_client.post("/processing/clear", headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert (body["loaded_count"], body["tested_count"], body["approved_count"], body["rejected_count"]) == (0, 0, 0, 0)


def test_check_endpoint_uses_local_heuristic(client):
    resp = client.post("/api/check", json={"data": "a@b.com"})
    assert resp.get_json() == {"status": "approved", "message": "Valid email format", "approved": True}

    resp = client.post("/api/check", json={"data": "someone@domain.io"})
    assert resp.get_json()["status"] == "rejected"

    assert client.post("/api/check", json={}).status_code == 400


def test_check_endpoint_does_not_trim_input(client):
    resp = client.post("/api/check", json={"data": "a@b.com "})
    assert resp.get_json()["status"] == "rejected"
