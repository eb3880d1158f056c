"""
URL configuration for authentication app.

URL structure (all under /api/):
    user                  - Register (POST), search users (GET ?search=)
    user/login            - Email/password login
    user/token/refresh    - Refresh access token
"""

from django.urls import path

from authentication.views import LoginView, TokenRefreshView, UserView

app_name = "authentication"

urlpatterns = [
    path("user", UserView.as_view(), name="user"),
    path("user/login", LoginView.as_view(), name="login"),
    path("user/token/refresh", TokenRefreshView.as_view(), name="token-refresh"),
]
