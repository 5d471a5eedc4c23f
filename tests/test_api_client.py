import json

import pytest
import requests

from app.core.exceptions import (
    AlreadyCompletedError,
    DuplicateAnswerError,
    NotFoundError,
    TransientPersistenceError,
)
from app.session import QuizApiClient


def make_response(status_code, body=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = "http://quiz.test/"
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    return response


@pytest.fixture
def client():
    return QuizApiClient("http://quiz.test/", token="token")


def reply_with(monkeypatch, client, response, seen=None):
    def fake_request(method, url, **kwargs):
        if seen is not None:
            seen.append((method, url, kwargs))
        return response

    monkeypatch.setattr(client.session, "request", fake_request)


def test_sends_bearer_token_and_payload(monkeypatch, client):
    seen = []
    reply_with(
        monkeypatch,
        client,
        make_response(201, {"is_correct": True, "correct_option_ids": [3], "justification": None}),
        seen,
    )

    feedback = client.submit_answer(7, 2, [3])

    assert feedback["is_correct"] is True
    method, url, kwargs = seen[0]
    assert method == "POST"
    assert url == "http://quiz.test/attempts/7/answers"
    assert kwargs["json"] == {"question_id": 2, "selected_option_ids": [3]}
    assert client.session.headers["Authorization"] == "Bearer token"


def test_null_body_is_returned_as_none(monkeypatch, client):
    reply_with(monkeypatch, client, make_response(200, None, text="null"))

    assert client.get_open_attempt(1) is None


@pytest.mark.parametrize(
    "status_code, error_type, error_cls",
    [
        (404, "not_found", NotFoundError),
        (409, "duplicate_answer", DuplicateAnswerError),
        (409, "already_completed", AlreadyCompletedError),
    ],
)
def test_error_types_become_domain_errors(monkeypatch, client, status_code, error_type, error_cls):
    body = {"error": "nope", "type": error_type, "retryable": False}
    reply_with(monkeypatch, client, make_response(status_code, body))

    with pytest.raises(error_cls) as exc_info:
        client.complete_attempt(1)

    assert exc_info.value.message == "nope"


def test_retryable_database_error_is_transient(monkeypatch, client):
    body = {"error": "Database temporarily unavailable", "type": "database_error", "retryable": True}
    reply_with(monkeypatch, client, make_response(503, body))

    with pytest.raises(TransientPersistenceError):
        client.start_attempt(1)


def test_server_error_without_body_is_transient(monkeypatch, client):
    reply_with(monkeypatch, client, make_response(502, text="Bad Gateway"))

    with pytest.raises(TransientPersistenceError):
        client.get_quiz(1)


def test_other_client_errors_raise_http_error(monkeypatch, client):
    body = {"error": "Validation error", "type": "validation_error", "details": []}
    reply_with(monkeypatch, client, make_response(422, body))

    with pytest.raises(requests.HTTPError):
        client.submit_answer(1, 1, [])


def test_connection_failure_is_transient(monkeypatch, client):
    def refuse(method, url, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(client.session, "request", refuse)

    with pytest.raises(TransientPersistenceError):
        client.complete_attempt(1)
