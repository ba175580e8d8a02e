"""Skill Swap API client.

A thin wrapper around the REST API built on ``requests``.  The bearer
token is held on the client instance and sent with every call; nothing
is read from global state, so several clients (e.g. two users in a
test or a script) can coexist.

Every high-level method returns a tuple ``(data, error)``.  On success
``error`` is ``None``; on failure ``data`` is ``None`` (or an empty
list) and ``error`` is a dictionary with ``status_code`` and
``message``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class SkillSwapAPI:
    """Client for the Skill Swap API (``/api/v1``)."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Server root, e.g. ``http://localhost:8000``.  The
                ``/api/v1`` prefix is appended automatically.
            token: Optional bearer token from a previous login.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/") + "/api/v1"
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helper
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Returns ``(parsed JSON or None, None)`` on success and
        ``(None, {"status_code", "message"})`` on failure.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    detail = err_json.get("detail") or err_json.get("message")
                    message = detail if isinstance(detail, str) else str(detail or err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def register(self, name: str, email: str, password: str) -> Result:
        """Create an account and keep the returned token on the client."""
        data, error = self._request(
            "POST", "/auth/register", json_body={"name": name, "email": email, "password": password}
        )
        if data:
            self.token = data.get("access_token")
        return data, error

    def login(self, email: str, password: str) -> Result:
        data, error = self._request(
            "POST", "/auth/login", json_body={"email": email, "password": password}
        )
        if data:
            self.token = data.get("access_token")
        return data, error

    def logout(self) -> None:
        """Forget the token; subsequent calls are unauthenticated."""
        self.token = None

    def me(self) -> Result:
        return self._request("GET", "/auth/me")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def discover(self, skill: Optional[str] = None, search: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/users/discover", params={"skill": skill, "search": search})
        return (data or []), error

    def get_user(self, user_id: int) -> Result:
        return self._request("GET", f"/users/{user_id}")

    def update_profile(self, **fields: Any) -> Result:
        return self._request("PUT", "/users/profile", json_body=fields)

    def add_skill(self, kind: str, skill: str) -> Result:
        """Add ``skill`` to the ``offered`` or ``wanted`` list."""
        return self._request("POST", f"/users/skills/{kind}", json_body={"skill": skill})

    def remove_skill(self, kind: str, skill: str) -> Result:
        return self._request("DELETE", f"/users/skills/{kind}/{quote(skill, safe='')}")

    # ------------------------------------------------------------------
    # Swaps
    # ------------------------------------------------------------------
    def request_swap(
        self,
        target_user_id: int,
        message: str,
        skills_offered: List[str],
        skills_requested: List[str],
    ) -> Result:
        return self._request(
            "POST",
            "/swaps/request",
            json_body={
                "target_user_id": target_user_id,
                "message": message,
                "skills_offered": skills_offered,
                "skills_requested": skills_requested,
            },
        )

    def my_requests(self, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/swaps/my-requests", params={"status": status})
        return (data or []), error

    def accept_swap(self, swap_id: int) -> Result:
        return self._request("PUT", f"/swaps/{swap_id}/accept")

    def reject_swap(self, swap_id: int) -> Result:
        return self._request("PUT", f"/swaps/{swap_id}/reject")

    def complete_swap(self, swap_id: int) -> Result:
        return self._request("PUT", f"/swaps/{swap_id}/complete")

    def cancel_swap(self, swap_id: int) -> Result:
        return self._request("DELETE", f"/swaps/{swap_id}/cancel")

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------
    def submit_rating(
        self, swap_request_id: int, rated_user_id: int, score: int, feedback: Optional[str] = None
    ) -> Result:
        return self._request(
            "POST",
            "/ratings/submit",
            json_body={
                "swap_request_id": swap_request_id,
                "rated_user_id": rated_user_id,
                "score": score,
                "feedback": feedback,
            },
        )

    def ratings_for_user(self, user_id: int) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", f"/ratings/user/{user_id}")
        return (data or []), error

    def my_ratings(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/ratings/my-ratings")
        return (data or []), error

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------
    def promote(self, user_id: int, secret_key: Optional[str] = None) -> Result:
        return self._request("POST", f"/admin/promote/{user_id}", json_body={"secret_key": secret_key})

    def admin_users(self, page: int = 1, banned: Optional[bool] = None) -> Result:
        params: Dict[str, Any] = {"page": page}
        if banned is not None:
            params["banned"] = "true" if banned else "false"
        return self._request("GET", "/admin/users", params=params)

    def set_ban(self, user_id: int, is_banned: bool) -> Result:
        return self._request("PUT", f"/admin/users/{user_id}/ban", json_body={"is_banned": is_banned})

    def swap_stats(self) -> Result:
        return self._request("GET", "/admin/stats/swaps")

    def admin_swaps(self, page: int = 1, status: Optional[str] = None) -> Result:
        return self._request("GET", "/admin/swaps", params={"page": page, "status": status})

    def delete_swap(self, swap_id: int) -> Result:
        return self._request("DELETE", f"/admin/swaps/{swap_id}")

    def export(self, export_type: str) -> Result:
        """Export ``users``, ``swaps`` or ``ratings``."""
        return self._request("GET", f"/admin/export/{export_type}")

    def admin_logs(self, page: int = 1) -> Result:
        return self._request("GET", "/admin/logs", params={"page": page})

    def send_alert(self, title: str, message: str) -> Result:
        return self._request("POST", "/admin/alerts", json_body={"title": title, "message": message})

    def alerts(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/alerts")
        return (data or []), error
