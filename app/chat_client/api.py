"""
REST client for the chat backend.

Thin synchronous wrapper over httpx that mirrors the server routes under
/api/. Every method returns the decoded JSON body; any non-2xx response
raises ChatAPIError.

Related files:
    - authentication/urls.py, chat/urls.py: the routes called here
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ChatAPIError(Exception):
    """
    Raised when the backend answers with a non-2xx status.

    Attributes:
        status_code: HTTP status of the response
        message: Server error message ("error" or "detail"), or the raw body
        error_code: Machine-readable code when the server sent one
        payload: Decoded response body (empty dict if not JSON)
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str | None = None,
        payload: Any = None,
    ):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        self.payload = payload if payload is not None else {}
        super().__init__(f"{status_code}: {message}")


class ChatAPI:
    """
    Synchronous REST client.

    Register and login store the returned access and refresh tokens on the
    client; later calls send the access token as a Bearer header.

    Args:
        base_url: Server origin, e.g. "http://localhost:8000"
        token: Access token from an earlier login
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.token = token
        self.refresh = None
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/api",
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # =========================================================================
    # Users
    # =========================================================================

    def register(self, name: str, email: str, password: str, pic: str = "") -> dict:
        body = {"name": name, "email": email, "password": password}
        if pic:
            body["pic"] = pic
        data = self._request("POST", "/user", json=body, authenticated=False)
        self._store_tokens(data)
        return data

    def login(self, email: str, password: str) -> dict:
        data = self._request(
            "POST",
            "/user/login",
            json={"email": email, "password": password},
            authenticated=False,
        )
        self._store_tokens(data)
        return data

    def refresh_token(self) -> str:
        """Exchange the stored refresh token for a new access token."""
        if not self.refresh:
            raise ChatAPIError(401, "No refresh token available")
        data = self._request(
            "POST",
            "/user/token/refresh",
            json={"refresh": self.refresh},
            authenticated=False,
        )
        self.token = data["access"]
        # Rotation hands out a new refresh token as well
        self.refresh = data.get("refresh", self.refresh)
        return self.token

    def search_users(self, query: str) -> list[dict]:
        return self._request("GET", "/user", params={"search": query})

    # =========================================================================
    # Chats
    # =========================================================================

    def access_chat(self, user_id: int) -> dict:
        return self._request("POST", "/chat", json={"userId": user_id})

    def list_chats(self) -> list[dict]:
        return self._request("GET", "/chat")

    def create_group(self, name: str, user_ids: list[int]) -> dict:
        return self._request("POST", "/chat/group", json={"name": name, "users": user_ids})

    def rename_group(self, chat_id: int, name: str) -> dict:
        return self._request(
            "PUT", "/chat/rename", json={"chatId": chat_id, "chatName": name}
        )

    def add_to_group(self, chat_id: int, user_id: int) -> dict:
        return self._request(
            "PUT", "/chat/groupadd", json={"chatId": chat_id, "userId": user_id}
        )

    def remove_from_group(self, chat_id: int, user_id: int) -> dict:
        return self._request(
            "PUT", "/chat/groupremove", json={"chatId": chat_id, "userId": user_id}
        )

    # =========================================================================
    # Messages
    # =========================================================================

    def fetch_messages(self, chat_id: int) -> list[dict]:
        return self._request("GET", f"/message/{chat_id}")

    def send_message(self, chat_id: int, content: str) -> dict:
        return self._request("POST", "/message", json={"chatId": chat_id, "content": content})

    # =========================================================================
    # Helpers
    # =========================================================================

    def _store_tokens(self, data: dict) -> None:
        self.token = data.get("token")
        self.refresh = data.get("refresh")

    def _request(self, method: str, path: str, authenticated: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if authenticated and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = self._client.request(method, path, headers=headers, **kwargs)

        if response.is_success:
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if isinstance(payload, dict):
            message = payload.get("error") or payload.get("detail") or response.text
            error_code = payload.get("error_code")
        else:
            message, error_code = response.text, None

        logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
        raise ChatAPIError(response.status_code, str(message), error_code, payload)
