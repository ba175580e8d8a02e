"""
Tests for the ``requests`` based API client.

The session is a ``MagicMock`` so no network traffic happens; the tests
check URLs, headers and how responses map to ``(data, error)``.
"""

from unittest.mock import MagicMock

import requests

from skill_swap_client import SkillSwapAPI


def _response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"x" if payload is not None or text else b""
    response.text = text
    if payload is not None:
        response.json.return_value = payload
    else:
        response.json.side_effect = ValueError("no json")
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


def _client(*responses, token=None):
    session = MagicMock()
    session.request.side_effect = list(responses)
    return SkillSwapAPI(base_url="http://testserver/", token=token, session=session), session


def test_login_stores_token_and_sends_it_afterwards():
    api, session = _client(
        _response(payload={"access_token": "abc", "token_type": "bearer", "user": {"id": 1}}),
        _response(payload={"id": 1, "email": "alice@example.com"}),
    )

    data, error = api.login("alice@example.com", "secret123")
    assert error is None
    assert api.token == "abc"

    api.me()
    _, kwargs = session.request.call_args
    assert kwargs["url"] == "http://testserver/api/v1/auth/me"
    assert kwargs["headers"] == {"Authorization": "Bearer abc"}


def test_clients_do_not_share_tokens():
    first, _ = _client(token="one")
    second, second_session = _client(_response(payload=[]), token="two")

    second.my_requests()

    assert first.token == "one"
    _, kwargs = second_session.request.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer two"


def test_logout_drops_authorization_header():
    api, session = _client(_response(payload=[]), token="abc")
    api.logout()

    api.alerts()

    _, kwargs = session.request.call_args
    assert "Authorization" not in kwargs["headers"]


def test_none_params_are_dropped():
    api, session = _client(_response(payload=[]))

    api.discover(skill="guitar")

    _, kwargs = session.request.call_args
    assert kwargs["params"] == {"skill": "guitar"}


def test_remove_skill_quotes_path_segment():
    api, session = _client(_response(payload={"kind": "offered", "skills": []}))

    api.remove_skill("offered", "c/c++")

    _, kwargs = session.request.call_args
    assert kwargs["method"] == "DELETE"
    assert kwargs["url"].endswith("/users/skills/offered/c%2Fc%2B%2B")


def test_http_error_returns_detail():
    api, _ = _client(_response(400, payload={"detail": "Invalid rating target"}))

    data, error = api.submit_rating(1, 1, 5)

    assert data is None
    assert error == {"status_code": 400, "message": "Invalid rating target"}


def test_http_error_without_json_falls_back_to_text():
    api, _ = _client(_response(502, text="Bad Gateway"))

    data, error = api.swap_stats()

    assert data is None
    assert error == {"status_code": 502, "message": "Bad Gateway"}


def test_list_methods_return_empty_list_on_failure():
    session = MagicMock()
    session.request.side_effect = requests.ConnectionError("refused")
    api = SkillSwapAPI(base_url="http://testserver", session=session)

    data, error = api.ratings_for_user(3)

    assert data == []
    assert error["status_code"] is None
    assert "refused" in error["message"]
