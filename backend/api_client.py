"""REST client used to push workout sessions to the server."""

from __future__ import annotations

import logging

import requests


DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT = 10


class SessionApiClient:
    """Best-effort client for the ``/workout-sessions`` endpoints.

    Network and HTTP errors are logged and reported as ``None``; a session
    keeps running locally when the server cannot be reached.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, payload: dict | None = None):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json() if resp.content else {}
        except requests.RequestException:
            logging.exception("%s %s failed", method, url)
        except ValueError:
            logging.exception("Invalid JSON returned by %s %s", method, url)
        return None

    def create_workout_session(self, payload: dict):
        return self._request("POST", "/workout-sessions", payload)

    def update_workout_session(self, session_id: str, payload: dict):
        return self._request("PUT", f"/workout-sessions/{session_id}", payload)

    def get_workout_session(self, session_id: str):
        return self._request("GET", f"/workout-sessions/{session_id}")
