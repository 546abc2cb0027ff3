import pytest
import requests

from backend.api_client import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT, SessionApiClient


class _Response:
    def __init__(self, status=200, payload=None, content=b"{}"):
        self.status_code = status
        self._payload = payload if payload is not None else {}
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response or _Response()
        self.error = error
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append((method, url, json, timeout))
        if self.error:
            raise self.error
        return self.response


def test_update_puts_session_payload():
    session = _Session(_Response(payload={"id": "abc", "status": "completed"}))
    client = SessionApiClient("http://server/api/", session=session)
    result = client.update_workout_session("abc", {"status": "completed"})
    assert result == {"id": "abc", "status": "completed"}
    assert session.calls == [
        (
            "PUT",
            "http://server/api/workout-sessions/abc",
            {"status": "completed"},
            DEFAULT_TIMEOUT,
        )
    ]


def test_create_posts():
    session = _Session(_Response(payload={"id": "new"}))
    client = SessionApiClient(session=session)
    assert client.create_workout_session({"a": 1}) == {"id": "new"}
    assert session.calls[0][:2] == ("POST", f"{DEFAULT_API_BASE_URL}/workout-sessions")


def test_empty_body_returns_empty_dict():
    client = SessionApiClient(session=_Session(_Response(content=b"")))
    assert client.get_workout_session("x") == {}


@pytest.mark.parametrize(
    "session",
    [
        _Session(error=requests.ConnectionError("offline")),
        _Session(error=requests.Timeout("slow")),
        _Session(_Response(status=500)),
        _Session(_Response(payload=ValueError("bad json"))),
    ],
)
def test_failures_are_logged_not_raised(session, caplog):
    client = SessionApiClient(session=session)
    with caplog.at_level("ERROR"):
        assert client.update_workout_session("abc", {}) is None
    assert "abc" in caplog.text
