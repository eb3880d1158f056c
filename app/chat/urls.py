"""
URL configuration for chat API.

URL Structure:
    Chats:
        chat                  GET (list), POST (access direct chat)
        chat/group            POST
        chat/rename           PUT
        chat/groupadd         PUT
        chat/groupremove      PUT

    Messages:
        message               POST
        message/{chat_id}     GET

All URLs are prefixed with /api/ in the main URL configuration.
"""

from django.urls import path

from chat.views import (
    ChatView,
    GroupAddView,
    GroupCreateView,
    GroupRemoveView,
    GroupRenameView,
    MessageCreateView,
    MessageListView,
)

app_name = "chat"

urlpatterns = [
    # Chats
    path("chat", ChatView.as_view(), name="chat"),
    path("chat/group", GroupCreateView.as_view(), name="group-create"),
    path("chat/rename", GroupRenameView.as_view(), name="group-rename"),
    path("chat/groupadd", GroupAddView.as_view(), name="group-add"),
    path("chat/groupremove", GroupRemoveView.as_view(), name="group-remove"),
    # Messages
    path("message", MessageCreateView.as_view(), name="message-create"),
    path("message/<int:chat_id>", MessageListView.as_view(), name="message-list"),
]
