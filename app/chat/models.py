"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) chats between exactly two users
- Group chats with a name and a single admin

Models:
    Chat: Container for messages between participants
    ChatMember: Through table recording who is in a chat and since when
    DirectChatPair: Helper for enforcing uniqueness of direct chats
    Message: Individual message within a chat

Design Decisions:
    - Direct chats never change membership once created
    - Participants are an ordered set; join order decides admin succession
    - Chat.latest_message is a denormalized pointer updated in the same
      transaction that creates the message
    - Chats and messages are never deleted through the API
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from chat.constants import MESSAGE_CONFIG
from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class ChatType(models.TextChoices):
    """
    Type of chat.

    DIRECT: Exactly two participants, fixed membership, no name or admin
    GROUP: Two or more participants, mutable membership, named, one admin
    """

    DIRECT = "direct", "Direct Message"
    GROUP = "group", "Group"


class Chat(BaseModel):
    """
    A chat between two or more users.

    Chat Types:
        DIRECT: Exactly 2 participants, no name, no admin.
                Unique per user pair (enforced via DirectChatPair).

        GROUP: 2+ participants, non-empty name.
               Creator automatically becomes group admin.

    Fields:
        chat_type: Type of chat (direct or group)
        name: Group name (empty string for direct chats)
        group_admin: Admin of a group chat (null for direct chats)
        users: Participants, through ChatMember
        latest_message: Most recent message (null until the first one)

    Relationships:
        memberships: ChatMember rows, one per participant
        messages: All Message records for this chat
        direct_pair: DirectChatPair if type is DIRECT
    """

    chat_type = models.CharField(
        max_length=10,
        choices=ChatType.choices,
        default=ChatType.GROUP,
        db_index=True,
        help_text="Type of chat (direct or group)",
    )

    name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Name for group chats (empty for direct)",
    )

    group_admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="administered_chats",
        help_text="Admin of this group chat (null for direct chats)",
    )

    users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="ChatMember",
        related_name="chats",
        help_text="Participants of this chat",
    )

    latest_message = models.ForeignKey(
        "Message",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Most recent message in this chat (for previews and sorting)",
    )

    class Meta:
        db_table = "chat_chat"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(
                fields=["chat_type", "-updated_at"],
                name="chat_chat_type_updated_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        if self.chat_type == ChatType.DIRECT:
            return f"Direct({self.pk})"
        if self.name:
            return f"Group: {self.name}"
        return f"Group({self.pk})"

    @property
    def is_direct(self) -> bool:
        """Check if this is a direct (1:1) chat."""
        return self.chat_type == ChatType.DIRECT

    @property
    def is_group(self) -> bool:
        """Check if this is a group chat."""
        return self.chat_type == ChatType.GROUP

    def get_ordered_users(self) -> list[User]:
        """
        Participants in join order.

        Reads self.memberships.all() so a prefetch of memberships__user
        (see ChatService.populated) is used when present.
        """
        return [membership.user for membership in self.memberships.all()]

    def has_participant(self, user: User) -> bool:
        return self.memberships.filter(user=user).exists()

    def is_admin(self, user: User) -> bool:
        return self.is_group and self.group_admin_id == user.pk


class ChatMember(BaseModel):
    """
    Membership of a user in a chat.

    Rows are created when a user joins and deleted when they leave or are
    removed. created_at is the join time and orders the participant list.

    Constraints:
        - UniqueConstraint(chat, user): A user appears at most once per chat
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Chat the user participates in",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_memberships",
        help_text="Participating user",
    )

    class Meta:
        db_table = "chat_member"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["chat", "user"],
                name="unique_chat_member",
            ),
        ]
        indexes = [
            # A user's chats
            models.Index(
                fields=["user", "chat"],
                name="chat_member_user_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Member: {self.user_id} in {self.chat_id}"


class DirectChatPair(models.Model):
    """
    Enforces uniqueness of direct chats between two users.

    This helper table stores user pairs in canonical order (lower user_id first)
    so that regardless of who initiates the chat there can only be one direct
    chat between any pair.

    Fields:
        chat: The direct chat (OneToOne, serves as PK)
        user_lower: User with lower ID
        user_higher: User with higher ID

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One chat per pair
        - CheckConstraint(user_lower_id < user_higher_id): Enforce canonical order
    """

    chat = models.OneToOneField(
        Chat,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct chat this pair represents",
    )

    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this chat pair",
    )

    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this chat pair",
    )

    class Meta:
        db_table = "chat_direct_chat_pair"
        constraints = [
            # Ensure only one direct chat exists per user pair
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_chat_pair",
            ),
            # Enforce canonical ordering: lower ID first
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="direct_pair_user_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        """Return the (lower, higher) ordering of two user ids."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Message(BaseModel):
    """
    A message within a chat.

    Messages are immutable once created: there is no edit or delete.

    Fields:
        chat: Chat this message belongs to
        sender: User who sent the message
        content: Message text (non-blank, bounded length)
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Chat this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    content = models.TextField(
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        help_text="Message text",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            # Messages in a chat, oldest first
            models.Index(
                fields=["chat", "created_at", "id"],
                name="chat_msg_chat_created_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"User {self.sender_id}: {content_preview}"
