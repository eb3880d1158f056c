"""
Serializers for chat API.

This module provides serializers for the chat system:
- Chat serializers (populated chat, chat summary, request bodies)
- Message serializers (populated message, preview, send request)

Serializer Hierarchy:
    ChatSerializer: Full chat with participants, admin and latest message
    ChatSummarySerializer: Chat embedded in a message payload
    AccessChatSerializer: Direct chat find-or-create request
    GroupCreateSerializer: Group creation request (users as list or JSON string)
    GroupRenameSerializer: Group rename request
    GroupMemberSerializer: Group add/remove request

    MessageSerializer: Message with sender and chat summary
    MessagePreviewSerializer: Latest message shown in chat lists
    MessageCreateSerializer: Send new message

Design Decisions:
    - Read and write serializers are separate for clarity
    - Participants render in join order from the prefetched memberships
    - Group name is exposed as chat_name and is empty for direct chats
    - Request bodies use the camelCase keys web clients send (userId,
      chatId, chatName); validated_data carries the snake_case names
"""

from __future__ import annotations

import json

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from chat.constants import GROUP_CONFIG, MESSAGE_CONFIG
from chat.models import Chat, Message


# =============================================================================
# Message Serializers
# =============================================================================


class MessagePreviewSerializer(serializers.ModelSerializer):
    """
    Minimal message serializer for chat list preview.

    Content is truncated to MESSAGE_CONFIG.PREVIEW_LENGTH characters.
    """

    sender = UserSummarySerializer(read_only=True)
    content = serializers.SerializerMethodField(
        help_text="Message content, truncated for previews"
    )

    class Meta:
        model = Message
        fields = ["id", "sender", "content", "created_at"]
        read_only_fields = fields

    def get_content(self, obj: Message) -> str:
        limit = MESSAGE_CONFIG.PREVIEW_LENGTH
        if len(obj.content) > limit:
            return obj.content[:limit] + "..."
        return obj.content


# =============================================================================
# Chat Serializers
# =============================================================================


class ChatSummarySerializer(serializers.ModelSerializer):
    """
    Chat as embedded in a message payload.

    Carries the participant list so a receiving client can tell who else
    should see the message.
    """

    chat_name = serializers.CharField(source="name", read_only=True)
    is_group_chat = serializers.BooleanField(source="is_group", read_only=True)
    users = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = ["id", "chat_name", "is_group_chat", "users"]
        read_only_fields = fields

    def get_users(self, obj: Chat) -> list[dict]:
        return UserSummarySerializer(obj.get_ordered_users(), many=True).data


class ChatSerializer(ChatSummarySerializer):
    """
    Populated chat.

    Example:
        {
            "id": 3,
            "chat_name": "Project Team",
            "is_group_chat": true,
            "users": [{"id": 1, "name": "Ada", "email": "...", "pic": ""}, ...],
            "group_admin": {"id": 1, ...},
            "latest_message": {"id": 40, "sender": {...}, "content": "...", ...},
            "created_at": "...",
            "updated_at": "..."
        }
    """

    group_admin = UserSummarySerializer(read_only=True, allow_null=True)
    latest_message = MessagePreviewSerializer(read_only=True, allow_null=True)

    class Meta(ChatSummarySerializer.Meta):
        fields = ChatSummarySerializer.Meta.fields + [
            "group_admin",
            "latest_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    """Populated message as returned by the REST API and the relay."""

    sender = UserSummarySerializer(read_only=True)
    chat = ChatSummarySerializer(read_only=True)

    class Meta:
        model = Message
        fields = ["id", "sender", "content", "chat", "created_at"]
        read_only_fields = fields


# =============================================================================
# Request Serializers
# =============================================================================


class AccessChatSerializer(serializers.Serializer):
    """Request body for POST /api/chat."""

    userId = serializers.IntegerField(
        source="user_id",
        help_text="User to open a direct chat with",
    )


class UserIdListField(serializers.ListField):
    """
    List of user ids, also accepted as a JSON-encoded string.

    Web clients posting multipart forms send `users` as '[1, 2, 3]'.
    """

    child = serializers.IntegerField()

    def to_internal_value(self, data):
        # Form input arrives as a one-element list holding the JSON string
        if isinstance(data, list) and len(data) == 1 and isinstance(data[0], str):
            if data[0].lstrip().startswith("["):
                data = data[0]
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError:
                self.fail("not_a_list", input_type="string")
        return super().to_internal_value(data)


class GroupCreateSerializer(serializers.Serializer):
    """Request body for POST /api/chat/group."""

    name = serializers.CharField(
        max_length=GROUP_CONFIG.MAX_NAME_LENGTH,
        help_text="Group name",
    )
    users = UserIdListField(help_text="Ids of the users to invite")


class GroupRenameSerializer(serializers.Serializer):
    """Request body for PUT /api/chat/rename."""

    chatId = serializers.IntegerField(source="chat_id")
    chatName = serializers.CharField(
        source="chat_name",
        max_length=GROUP_CONFIG.MAX_NAME_LENGTH,
    )


class GroupMemberSerializer(serializers.Serializer):
    """Request body for PUT /api/chat/groupadd and /api/chat/groupremove."""

    chatId = serializers.IntegerField(source="chat_id")
    userId = serializers.IntegerField(source="user_id")


class MessageCreateSerializer(serializers.Serializer):
    """
    Request body for POST /api/message.

    Whitespace is kept as sent; blank content is rejected.
    """

    chatId = serializers.IntegerField(source="chat_id")
    content = serializers.CharField(
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        trim_whitespace=False,
    )

    def validate_content(self, value):
        if not value.strip():
            raise serializers.ValidationError("Message content cannot be empty.")
        return value
