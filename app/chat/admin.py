"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Chat management with inline membership
- Direct chat pair inspection
- Message moderation (read-only content)
"""

from django.contrib import admin

from chat.models import Chat, ChatMember, DirectChatPair, Message


class ChatMemberInline(admin.TabularInline):
    """Inline display of participants in chat admin."""

    model = ChatMember
    extra = 0
    readonly_fields = ["created_at"]
    raw_id_fields = ["user"]


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    """Admin interface for Chat model."""

    list_display = [
        "id",
        "chat_type",
        "name",
        "group_admin",
        "created_at",
        "updated_at",
    ]
    list_filter = ["chat_type", "created_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at", "latest_message"]
    raw_id_fields = ["group_admin"]
    inlines = [ChatMemberInline]
    ordering = ["-updated_at"]


@admin.register(DirectChatPair)
class DirectChatPairAdmin(admin.ModelAdmin):
    """Admin interface for DirectChatPair model."""

    list_display = ["chat", "user_lower", "user_higher"]
    raw_id_fields = ["chat", "user_lower", "user_higher"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "chat",
        "sender",
        "content_preview",
        "created_at",
    ]
    list_filter = ["created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["chat", "sender"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
