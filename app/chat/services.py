"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on chats, group membership and messages.

Services:
    ChatService: Direct chat access, chat listing, group lifecycle and membership
    MessageService: Message history and sending

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - A chat the caller cannot see raises NotFoundError (rendered as 404)
    - Admin-only violations raise PermissionDeniedError (rendered as 403)
    - All multi-row writes run inside a transaction

Usage:
    from chat.services import ChatService, MessageService

    # Find or create the direct chat between two users
    result = ChatService.access_direct(user, other_user.id)
    if result.success:
        chat = result.data

    # Create a group chat
    result = ChatService.create_group(
        creator=user,
        name="Project Team",
        user_ids=[user2.id, user3.id],
    )

    # Send a message
    result = MessageService.send_message(
        chat_id=chat.id,
        sender=user,
        content="Hello everyone!",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import IntegrityError
from django.db.models import Prefetch
from django.db.models.functions import Coalesce

from authentication.models import User
from chat.authorization import ChatAuthorizationService
from chat.constants import GROUP_CONFIG, MESSAGE_CONFIG, chat_room
from chat.models import Chat, ChatMember, ChatType, DirectChatPair, Message
from core.exceptions import NotFoundError
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet


class ChatService(BaseService):
    """
    Service for chat lifecycle operations.

    Methods:
        populated: Base queryset loading everything a chat payload renders
        access_direct: Find or create the direct chat between two users
        list_for_user: The user's chats, most recently active first
        create_group: Create a new group chat
        rename_group: Rename a group chat
        add_to_group: Add a user to a group chat
        remove_from_group: Remove a user from a group chat
    """

    @staticmethod
    def populated() -> QuerySet[Chat]:
        """
        Chats with participants, admin and latest message preloaded.

        Participants are prefetched in join order.
        """
        return Chat.objects.select_related(
            "group_admin",
            "latest_message__sender",
        ).prefetch_related(
            Prefetch(
                "memberships",
                queryset=ChatMember.objects.select_related("user").order_by(
                    "created_at", "id"
                ),
            )
        )

    @classmethod
    def reload(cls, chat: Chat) -> Chat:
        """Re-read a chat through populated() after a write."""
        return cls.populated().get(pk=chat.pk)

    @classmethod
    def _get_user(cls, user_id) -> User:
        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            raise NotFoundError(
                "User not found",
                error_code="USER_NOT_FOUND",
                details={"user_id": user_id},
            )
        return user

    @classmethod
    def access_direct(cls, user: User, other_user_id) -> ServiceResult[Chat]:
        """
        Find or create the direct chat between two users.

        Direct chats are unique per user pair: the same pair, in either
        order, always yields the same chat.

        Implementation:
            1. Validate users are different and the other user exists
            2. Canonicalize order (lower user_id first)
            3. Look up existing DirectChatPair
            4. If not found, create chat, pair and memberships in one transaction
            5. If a concurrent request created the pair first, return that one

        Returns:
            ServiceResult with the populated Chat

        Error codes:
            SAME_USER: Cannot create a direct chat with yourself

        Raises:
            NotFoundError: other_user_id does not identify an active user
        """
        if other_user_id == user.pk:
            return ServiceResult.failure(
                "Cannot create a direct chat with yourself",
                error_code="SAME_USER",
            )

        other = cls._get_user(other_user_id)
        lower_id, higher_id = DirectChatPair.canonical(user.pk, other.pk)

        existing = DirectChatPair.objects.filter(
            user_lower_id=lower_id, user_higher_id=higher_id
        ).first()
        if existing is not None:
            cls.get_logger().debug(
                f"Found existing direct chat {existing.chat_id} "
                f"between users {lower_id} and {higher_id}"
            )
            return ServiceResult.success(cls.reload(existing.chat))

        try:
            with cls.atomic():
                chat = Chat.objects.create(chat_type=ChatType.DIRECT, name="")
                DirectChatPair.objects.create(
                    chat=chat,
                    user_lower_id=lower_id,
                    user_higher_id=higher_id,
                )
                ChatMember.objects.create(chat=chat, user=user)
                ChatMember.objects.create(chat=chat, user=other)
        except IntegrityError:
            existing = DirectChatPair.objects.get(
                user_lower_id=lower_id, user_higher_id=higher_id
            )
            cls.get_logger().info(
                f"Direct chat for users {lower_id} and {higher_id} "
                f"was created concurrently, reusing chat {existing.chat_id}"
            )
            return ServiceResult.success(cls.reload(existing.chat))

        cls.get_logger().info(
            f"Created direct chat {chat.id} between users {lower_id} and {higher_id}"
        )
        return ServiceResult.success(cls.reload(chat))

    @classmethod
    def list_for_user(cls, user: User) -> QuerySet[Chat]:
        """
        Chats the user participates in, most recently active first.

        Activity is the latest message time, falling back to the chat's
        creation time for chats without messages.
        """
        return (
            cls.populated()
            .filter(memberships__user=user)
            .annotate(last_activity=Coalesce("latest_message__created_at", "created_at"))
            .order_by("-last_activity", "-id")
        )

    @classmethod
    def create_group(
        cls,
        creator: User,
        name: str,
        user_ids: list[int],
    ) -> ServiceResult[Chat]:
        """
        Create a new group chat.

        The creator is always added as a participant and becomes the group
        admin. Duplicate ids and the creator's own id are ignored when
        counting invited users.

        Args:
            creator: User creating the group (becomes admin)
            name: Required group name (cannot be blank)
            user_ids: Ids of users to invite

        Returns:
            ServiceResult with the populated Chat

        Error codes:
            NAME_REQUIRED: Group name cannot be empty
            NOT_ENOUGH_USERS: Fewer than 2 invited users besides the creator

        Raises:
            NotFoundError: An invited id does not identify an active user
        """
        name = name.strip() if name else ""
        if not name:
            return ServiceResult.failure(
                "Group name is required",
                error_code="NAME_REQUIRED",
            )

        invited_ids = list(dict.fromkeys(uid for uid in user_ids if uid != creator.pk))
        if len(invited_ids) < GROUP_CONFIG.MIN_INVITED_USERS:
            return ServiceResult.failure(
                "At least 2 users are required to form a group chat",
                error_code="NOT_ENOUGH_USERS",
            )

        invited = User.objects.in_bulk(invited_ids)
        missing = [uid for uid in invited_ids if uid not in invited or not invited[uid].is_active]
        if missing:
            raise NotFoundError(
                "User not found",
                error_code="USER_NOT_FOUND",
                details={"user_ids": missing},
            )

        with cls.atomic():
            chat = Chat.objects.create(
                chat_type=ChatType.GROUP,
                name=name,
                group_admin=creator,
            )
            ChatMember.objects.create(chat=chat, user=creator)
            for uid in invited_ids:
                ChatMember.objects.create(chat=chat, user=invited[uid])

        cls.get_logger().info(
            f"Created group chat {chat.id} named '{name}' "
            f"with {1 + len(invited_ids)} participants"
        )
        return ServiceResult.success(cls.reload(chat))

    @staticmethod
    def _not_group() -> ServiceResult[Chat]:
        return ServiceResult.failure(
            "This operation is only available for group chats",
            error_code="NOT_GROUP",
        )

    @classmethod
    def rename_group(cls, user: User, chat_id, name: str) -> ServiceResult[Chat]:
        """
        Rename a group chat.

        Error codes:
            NOT_GROUP: Direct chats have no name
            NAME_REQUIRED: Name cannot be empty

        Raises:
            NotFoundError: Chat missing or caller not a participant
            PermissionDeniedError: Admin-only management is on and caller is not admin
        """
        chat = ChatAuthorizationService.get_visible_chat(user, chat_id)
        if not chat.is_group:
            return cls._not_group()

        name = name.strip() if name else ""
        if not name:
            return ServiceResult.failure(
                "Group name cannot be empty",
                error_code="NAME_REQUIRED",
            )

        ChatAuthorizationService.require_group_manager(user, chat)

        old_name = chat.name
        chat.name = name
        chat.save(update_fields=["name", "updated_at"])

        cls.get_logger().info(
            f"Renamed chat {chat.id} from '{old_name}' to '{name}' by user {user.id}"
        )
        return ServiceResult.success(cls.reload(chat))

    @classmethod
    def add_to_group(cls, user: User, chat_id, user_id) -> ServiceResult[Chat]:
        """
        Add a user to a group chat.

        Error codes:
            NOT_GROUP: Direct chat membership is fixed
            ALREADY_PARTICIPANT: User is already in this chat

        Raises:
            NotFoundError: Chat not visible to caller, or user_id unknown
            PermissionDeniedError: Admin-only management is on and caller is not admin
        """
        chat = ChatAuthorizationService.get_visible_chat(user, chat_id)
        if not chat.is_group:
            return cls._not_group()

        ChatAuthorizationService.require_group_manager(user, chat)
        new_member = cls._get_user(user_id)

        if chat.has_participant(new_member):
            return ServiceResult.failure(
                "User is already a participant in this chat",
                error_code="ALREADY_PARTICIPANT",
            )

        with cls.atomic():
            ChatMember.objects.create(chat=chat, user=new_member)
            chat.save(update_fields=["updated_at"])

        cls.get_logger().info(
            f"Added user {new_member.id} to chat {chat.id} by user {user.id}"
        )
        return ServiceResult.success(cls.reload(chat))

    @classmethod
    def remove_from_group(cls, user: User, chat_id, user_id) -> ServiceResult[Chat]:
        """
        Remove a user from a group chat.

        If the removed user was the admin, the earliest-joined remaining
        participant becomes admin. The removed user's relay connections
        are told to leave the chat room.

        Error codes:
            NOT_GROUP: Direct chat membership is fixed
            NOT_PARTICIPANT: User to remove is not in this chat
            MIN_PARTICIPANTS: Removal would leave fewer than 2 participants

        Raises:
            NotFoundError: Chat not visible to caller
            PermissionDeniedError: Admin-only management is on and caller is
                neither the admin nor removing themself
        """
        chat = ChatAuthorizationService.get_visible_chat(user, chat_id)
        if not chat.is_group:
            return cls._not_group()

        ChatAuthorizationService.require_group_manager(user, chat, target_user_id=user_id)

        with cls.atomic():
            memberships = list(
                ChatMember.objects.select_for_update()
                .filter(chat=chat)
                .order_by("created_at", "id")
            )
            target = next((m for m in memberships if m.user_id == user_id), None)
            if target is None:
                return ServiceResult.failure(
                    "User is not a participant in this chat",
                    error_code="NOT_PARTICIPANT",
                )
            if len(memberships) - 1 < GROUP_CONFIG.MIN_PARTICIPANTS:
                return ServiceResult.failure(
                    "A group chat needs at least 2 participants",
                    error_code="MIN_PARTICIPANTS",
                )

            target.delete()

            update_fields = ["updated_at"]
            if chat.group_admin_id == user_id:
                successor = next(m for m in memberships if m.user_id != user_id)
                chat.group_admin_id = successor.user_id
                update_fields.append("group_admin")
                cls.get_logger().info(
                    f"Admin of chat {chat.id} passed to user {successor.user_id}"
                )
            chat.save(update_fields=update_fields)

        cls.get_logger().info(
            f"Removed user {user_id} from chat {chat.id} by user {user.id}"
        )
        cls._evict_from_room(chat.id, user_id)
        return ServiceResult.success(cls.reload(chat))

    @staticmethod
    def _evict_from_room(chat_id: int, user_id: int) -> None:
        """Ask the relay connections of `user_id` to leave the chat room."""
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        async_to_sync(channel_layer.group_send)(
            chat_room(chat_id),
            {"type": "relay.member_removed", "chat_id": chat_id, "user_id": user_id},
        )


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        populated: Base queryset loading everything a message payload renders
        list_messages: A chat's history, oldest first
        send_message: Create a message and move the chat's latest_message pointer
        get_for_relay: Load a message for relay fan-out
    """

    @staticmethod
    def populated() -> QuerySet[Message]:
        return Message.objects.select_related("sender", "chat").prefetch_related(
            Prefetch(
                "chat__memberships",
                queryset=ChatMember.objects.select_related("user").order_by(
                    "created_at", "id"
                ),
            )
        )

    @classmethod
    def list_messages(cls, user: User, chat_id) -> QuerySet[Message]:
        """
        Messages of a chat, oldest first.

        Raises:
            NotFoundError: Chat missing or caller not a participant
        """
        chat = ChatAuthorizationService.get_visible_chat(user, chat_id)
        return cls.populated().filter(chat=chat).order_by("created_at", "id")

    @classmethod
    def send_message(
        cls,
        chat_id,
        sender: User,
        content: str,
    ) -> ServiceResult[Message]:
        """
        Send a text message to a chat.

        The message insert and the chat's latest_message update happen in
        one transaction, so the preview never points at a missing message
        and never lags behind a committed one.

        Returns:
            ServiceResult with the populated Message

        Error codes:
            EMPTY_CONTENT: Message content cannot be blank
            CONTENT_TOO_LONG: Content exceeds the maximum length

        Raises:
            NotFoundError: Chat missing or sender not a participant
        """
        chat = ChatAuthorizationService.get_visible_chat(sender, chat_id)

        if not content or not content.strip():
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="EMPTY_CONTENT",
            )
        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message content cannot exceed {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code="CONTENT_TOO_LONG",
            )

        with cls.atomic():
            message = Message.objects.create(chat=chat, sender=sender, content=content)
            chat.latest_message = message
            chat.save(update_fields=["latest_message", "updated_at"])

        cls.get_logger().debug(
            f"User {sender.id} sent message {message.id} to chat {chat.id}"
        )
        return ServiceResult.success(cls.populated().get(pk=message.pk))

    @classmethod
    def get_for_relay(cls, message_id) -> Message | None:
        """Populated message by id, or None if it does not exist."""
        return cls.populated().filter(pk=message_id).first()
