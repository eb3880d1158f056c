"""
Authentication views.

This module provides API views for:
- Registration and user search (same path, POST vs GET)
- Email/password login
- Access token refresh (simplejwt)

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (AuthService)
    - urls.py: URL routing

Note:
    Register and login are the only endpoints that accept anonymous
    callers. Both return the user summary plus a token pair so the client
    can authenticate immediately.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenRefreshView as BaseTokenRefreshView

from authentication.serializers import (
    AuthResponseSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserSummarySerializer,
)
from authentication.services import AuthService


class UserView(APIView):
    """
    API view for the user collection.

    POST: Register a new user (anonymous)
    GET: Search users by name or email (authenticated)

    URL: /api/user
    """

    def _is_register(self) -> bool:
        # Schema generation builds the view without a request
        request = getattr(self, "request", None)
        return getattr(request, "method", None) == "POST"

    def get_permissions(self):
        if self._is_register():
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_authenticators(self):
        # A stale token on the register request must not turn into a 401
        if self._is_register():
            return []
        return super().get_authenticators()

    @extend_schema(
        operation_id="api_user_register",
        summary="Register",
        description="Create an account and receive an access/refresh token pair.",
        tags=["Users"],
        request=RegisterSerializer,
        responses={201: AuthResponseSerializer},
    )
    def post(self, request):
        """
        Register a new user.

        Request body:
            {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "s3cret-pass",
                "pic": "https://..."   // Optional
            }
        """
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AuthService.register(**serializer.validated_data)
        tokens = AuthService.issue_tokens(user)

        return Response(
            AuthResponseSerializer(user, context={"tokens": tokens}).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        operation_id="api_user_search",
        summary="Search users",
        description=(
            "Users whose name or email contains the search term "
            "(case-insensitive). The caller is never included."
        ),
        tags=["Users"],
        parameters=[
            OpenApiParameter(
                name="search",
                type=str,
                required=False,
                description="Substring to match against name and email",
            ),
        ],
        responses={200: UserSummarySerializer(many=True)},
    )
    def get(self, request):
        users = AuthService.search_users(
            request.query_params.get("search", "").strip(),
            exclude=request.user,
        )
        return Response(UserSummarySerializer(users, many=True).data)


class LoginView(APIView):
    """
    API view for email/password login.

    POST: Exchange credentials for a token pair

    URL: /api/user/login
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        operation_id="api_user_login",
        summary="Log in",
        description="Authenticate with email and password.",
        tags=["Users"],
        request=LoginSerializer,
        responses={200: AuthResponseSerializer},
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AuthService.login(
            serializer.validated_data["email"],
            serializer.validated_data["password"],
        )
        tokens = AuthService.issue_tokens(user)

        return Response(AuthResponseSerializer(user, context={"tokens": tokens}).data)


class TokenRefreshView(BaseTokenRefreshView):
    """
    POST: Exchange a refresh token for a new access token.

    URL: /api/user/token/refresh
    """

    authentication_classes = []
