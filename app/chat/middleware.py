"""
WebSocket authentication middleware.

Provides JWT authentication for relay connections.
Supports token via query string or subprotocol.

Related files:
    - routing.py: WebSocket URL patterns
    - consumers.py: WebSocket handlers
    - config/asgi.py: ASGI configuration

Token Passing Methods:
    1. Query string: ws://host/ws/relay/?token=<jwt_token>
    2. Subprotocol: Sec-WebSocket-Protocol: jwt, <jwt_token>
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(BaseMiddleware):
    """
    JWT authentication middleware for WebSocket connections.

    Extracts JWT token from query string or subprotocol, validates it,
    and attaches the user to the scope. Anything that does not resolve to
    an active user leaves an AnonymousUser in scope; the consumer decides
    what to do with it.

    Token sources (in order of precedence):
        1. Query string: ?token=<jwt_token>
        2. Subprotocol: Sec-WebSocket-Protocol: jwt, <jwt_token>

    Usage:
        application = ProtocolTypeRouter({
            "websocket": JWTAuthMiddleware(
                URLRouter(websocket_urlpatterns)
            ),
        })
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        token = self._get_token_from_query(scope) or self._get_token_from_subprotocol(scope)

        if token:
            scope["user"] = await self._get_user_from_token(token)
        else:
            scope["user"] = AnonymousUser()

        return await super().__call__(scope, receive, send)

    def _get_token_from_query(self, scope) -> str | None:
        query_string = scope.get("query_string", b"").decode()
        token_list = parse_qs(query_string).get("token", [])
        return token_list[0] if token_list else None

    def _get_token_from_subprotocol(self, scope) -> str | None:
        """Expects: Sec-WebSocket-Protocol: jwt, <token>"""
        subprotocols = scope.get("subprotocols", [])
        if len(subprotocols) >= 2 and subprotocols[0] == "jwt":
            return subprotocols[1]
        return None

    @database_sync_to_async
    def _get_user_from_token(self, token: str):
        """
        Validate JWT token and get user.

        Returns:
            User instance if valid, AnonymousUser otherwise
        """
        User = get_user_model()

        try:
            user_id = AccessToken(token)["user_id"]
        except (TokenError, KeyError) as e:
            logger.warning(f"Invalid JWT token on relay connection: {e}")
            return AnonymousUser()

        user = User.objects.filter(id=user_id).first()
        if user is None:
            logger.warning(f"User {user_id} from relay token not found")
            return AnonymousUser()
        if not user.is_active:
            logger.warning(f"Inactive user attempted relay connection: {user_id}")
            return AnonymousUser()

        return user
