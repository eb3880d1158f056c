"""
Tests for the REST client.

The backend is replaced by httpx.MockTransport; tests check the requests
ChatAPI builds and how it reports errors.
"""

import json

import httpx
import pytest

from chat_client.api import ChatAPI, ChatAPIError


def make_api(handler, token=None):
    return ChatAPI("http://chat.test", token=token, transport=httpx.MockTransport(handler))


# =============================================================================
# TestAuthentication
# =============================================================================


class TestAuthentication:
    """
    Tests for register, login and token refresh.

    Verifies:
    - Tokens from register/login are stored and sent afterwards
    - Refresh replaces the stored access token
    """

    def test_login_stores_and_sends_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path == "/api/user/login":
                return httpx.Response(
                    200, json={"id": 1, "name": "Ada", "token": "access-1", "refresh": "refresh-1"}
                )
            return httpx.Response(200, json=[])

        api = make_api(handler)

        user = api.login("ada@example.com", "s3cret-pass")
        api.list_chats()

        assert user["name"] == "Ada"
        assert api.token == "access-1"
        assert "Authorization" not in seen[0].headers
        assert json.loads(seen[0].content) == {
            "email": "ada@example.com",
            "password": "s3cret-pass",
        }
        assert seen[1].headers["Authorization"] == "Bearer access-1"

    def test_register_omits_empty_pic(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": 2, "token": "t", "refresh": "r"})

        make_api(handler).register("Grace", "grace@example.com", "s3cret-pass")

        assert bodies == [
            {"name": "Grace", "email": "grace@example.com", "password": "s3cret-pass"}
        ]

    def test_refresh_token_updates_access_token(self):
        def handler(request):
            assert json.loads(request.content) == {"refresh": "old-refresh"}
            return httpx.Response(200, json={"access": "new-access", "refresh": "new-refresh"})

        api = make_api(handler, token="stale")
        api.refresh = "old-refresh"

        assert api.refresh_token() == "new-access"
        assert api.refresh == "new-refresh"

    def test_refresh_without_refresh_token_raises(self):
        api = make_api(lambda request: httpx.Response(200, json={}))

        with pytest.raises(ChatAPIError) as exc_info:
            api.refresh_token()

        assert exc_info.value.status_code == 401


# =============================================================================
# TestRequests
# =============================================================================


class TestRequests:
    """
    Tests for the chat and message calls.

    Verifies:
    - Each call hits the matching route with the expected body
    """

    @pytest.mark.parametrize(
        "call, method, path, body",
        [
            (lambda api: api.access_chat(5), "POST", "/api/chat", {"userId": 5}),
            (
                lambda api: api.create_group("Team", [2, 3]),
                "POST",
                "/api/chat/group",
                {"name": "Team", "users": [2, 3]},
            ),
            (
                lambda api: api.rename_group(7, "New"),
                "PUT",
                "/api/chat/rename",
                {"chatId": 7, "chatName": "New"},
            ),
            (
                lambda api: api.add_to_group(7, 4),
                "PUT",
                "/api/chat/groupadd",
                {"chatId": 7, "userId": 4},
            ),
            (
                lambda api: api.remove_from_group(7, 4),
                "PUT",
                "/api/chat/groupremove",
                {"chatId": 7, "userId": 4},
            ),
            (
                lambda api: api.send_message(7, "hi"),
                "POST",
                "/api/message",
                {"chatId": 7, "content": "hi"},
            ),
        ],
    )
    def test_routes(self, call, method, path, body):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": 7})

        call(make_api(handler, token="t"))

        assert seen[0].method == method
        assert seen[0].url.path == path
        assert json.loads(seen[0].content) == body

    def test_fetch_messages_uses_chat_id_in_path(self):
        def handler(request):
            assert request.url.path == "/api/message/12"
            return httpx.Response(200, json=[{"id": 1}])

        assert make_api(handler, token="t").fetch_messages(12) == [{"id": 1}]

    def test_search_sends_query(self):
        def handler(request):
            assert request.url.params["search"] == "ada"
            return httpx.Response(200, json=[])

        assert make_api(handler, token="t").search_users("ada") == []


# =============================================================================
# TestErrors
# =============================================================================


class TestErrors:
    """
    Tests for error reporting.

    Verifies:
    - Non-2xx responses raise ChatAPIError with status and message
    """

    def test_service_error_carries_code(self):
        def handler(request):
            return httpx.Response(
                400,
                json={
                    "error": "At least 2 users are required to form a group chat",
                    "error_code": "NOT_ENOUGH_USERS",
                },
            )

        with pytest.raises(ChatAPIError) as exc_info:
            make_api(handler, token="t").create_group("Small", [2])

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "At least 2 users are required to form a group chat"
        assert exc_info.value.error_code == "NOT_ENOUGH_USERS"

    def test_drf_detail_is_used_as_message(self):
        def handler(request):
            return httpx.Response(401, json={"detail": "Authentication credentials were not provided."})

        with pytest.raises(ChatAPIError) as exc_info:
            make_api(handler).list_chats()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Authentication credentials were not provided."

    def test_non_json_body_uses_text(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(ChatAPIError) as exc_info:
            make_api(handler, token="t").list_chats()

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"
