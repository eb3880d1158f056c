"""
URL configuration for the chat backend.

URL Structure:
    /                          - ReDoc API documentation
    /schema/                   - OpenAPI schema (YAML)
    /admin/                    - Django admin interface
    /health/                   - Health check endpoint (load balancers, Docker)
    /api/user                  - Register (POST), search users (GET ?search=)
    /api/user/login            - Email/password login
    /api/user/token/refresh    - Exchange a refresh token for a new access token
    /api/chat                  - Access direct chat (POST), list chats (GET)
    /api/chat/group            - Create group chat
    /api/chat/rename           - Rename group chat
    /api/chat/groupadd         - Add user to group chat
    /api/chat/groupremove      - Remove user from group chat
    /api/message               - Send message
    /api/message/{chat_id}     - Fetch chat history

The real-time relay (ws/relay/) is routed in config.asgi, not here.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API Routes
# =============================================================================
# All routes here are prefixed with /api/ and carry no trailing slash
api_patterns = [
    path("", include("authentication.urls")),
    path("", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API
    path("api/", include(api_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Users, chats and messages"
