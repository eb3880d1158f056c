"""
Service-level authorization for chat operations.

This module provides centralized authorization checks shared by the REST
services and the relay consumer.

Key Components:
    ChatAuthorizationService: Stateless service class with authorization methods

Error Codes:
    CHAT_NOT_FOUND: Chat does not exist or the user is not a participant
    ADMIN_REQUIRED: Group management restricted to the admin

Usage:
    chat = ChatAuthorizationService.get_visible_chat(user, chat_id)

    if ChatAuthorizationService.is_chat_participant(user, chat_id):
        # proceed with operation
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings

from core.exceptions import NotFoundError, PermissionDeniedError

if TYPE_CHECKING:
    from authentication.models import User
    from chat.models import Chat


class ChatAuthorizationService:
    """
    Stateless service providing authorization checks for chat operations.

    A chat the user does not participate in is reported as not found, so
    its existence is not leaked to outsiders.
    """

    @classmethod
    def is_chat_participant(cls, user: User, chat_id: int) -> bool:
        """Check if user currently participates in the chat."""
        from chat.models import ChatMember

        return ChatMember.objects.filter(chat_id=chat_id, user=user).exists()

    @classmethod
    def get_visible_chat(cls, user: User, chat_id, queryset=None) -> Chat:
        """
        Return the chat if the user participates in it.

        Args:
            user: User requesting access
            chat_id: ID of the chat
            queryset: Optional base queryset (e.g. with prefetches applied)

        Raises:
            NotFoundError: Chat missing, or user is not a participant
        """
        from chat.models import Chat

        if queryset is None:
            queryset = Chat.objects.all()

        chat = queryset.filter(pk=chat_id, memberships__user=user).first()
        if chat is None:
            raise NotFoundError(
                "Chat not found",
                error_code="CHAT_NOT_FOUND",
                details={"chat_id": chat_id},
            )
        return chat

    @classmethod
    def admin_only(cls) -> bool:
        """Whether group management is restricted to the group admin."""
        return getattr(settings, "CHAT_GROUP_ADMIN_ONLY", False)

    @classmethod
    def require_group_manager(
        cls,
        user: User,
        chat: Chat,
        target_user_id: int | None = None,
    ) -> None:
        """
        Enforce admin-only group management when it is switched on.

        Any participant may remove themself even when the restriction is on.

        Raises:
            PermissionDeniedError: Restriction on and user is not the admin
        """
        if not cls.admin_only():
            return
        if target_user_id is not None and target_user_id == user.pk:
            return
        if not chat.is_admin(user):
            raise PermissionDeniedError(
                "Only the group admin can manage this group",
                error_code="ADMIN_REQUIRED",
            )
