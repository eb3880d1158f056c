"""
Views for chat API.

This module provides REST API endpoints for the chat system:
- ChatView: Access a direct chat, list the caller's chats
- GroupCreateView, GroupRenameView, GroupAddView, GroupRemoveView: Group management
- MessageListView, MessageCreateView: Chat history and sending

URL Structure:
    /api/chat                  GET (list), POST (access direct chat)
    /api/chat/group            POST
    /api/chat/rename           PUT
    /api/chat/groupadd         PUT
    /api/chat/groupremove      PUT
    /api/message               POST
    /api/message/{chat_id}     GET

Design Decisions:
    - Request bodies are validated by serializers (400 with field errors)
    - All operations use the service layer for business logic
    - ServiceResult failures become 400 {"error", "error_code"}
    - NotFoundError / PermissionDeniedError raised by services are rendered
      by core.exceptions.application_exception_handler (404 / 403)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.serializers import (
    AccessChatSerializer,
    ChatSerializer,
    GroupCreateSerializer,
    GroupMemberSerializer,
    GroupRenameSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)
from chat.services import ChatService, MessageService


def failure_response(result) -> Response:
    """Render a failed ServiceResult as a 400 response."""
    return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)


# =============================================================================
# Chat Views
# =============================================================================


class ChatView(APIView):
    """
    GET: List the caller's chats, most recently active first
    POST: Find or create the direct chat with another user

    URL: /api/chat
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="api_chat_list",
        summary="List chats",
        description=(
            "Chats the caller participates in, sorted by latest message time "
            "(chat creation time when there are no messages), newest first."
        ),
        tags=["Chats"],
        responses={200: ChatSerializer(many=True)},
    )
    def get(self, request):
        chats = ChatService.list_for_user(request.user)
        return Response(ChatSerializer(chats, many=True).data)

    @extend_schema(
        operation_id="api_chat_access",
        summary="Access direct chat",
        description=(
            "Return the direct chat between the caller and userId, creating "
            "it on first access. The same pair always yields the same chat."
        ),
        tags=["Chats"],
        request=AccessChatSerializer,
        responses={
            200: ChatSerializer,
            400: OpenApiResponse(description="Missing userId or chat with yourself"),
            404: OpenApiResponse(description="User not found"),
        },
    )
    def post(self, request):
        serializer = AccessChatSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.access_direct(
            request.user, serializer.validated_data["user_id"]
        )
        if not result.success:
            return failure_response(result)

        return Response(ChatSerializer(result.data).data)


class GroupCreateView(APIView):
    """
    POST: Create a group chat with the caller as admin

    URL: /api/chat/group
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="api_chat_group_create",
        summary="Create group chat",
        description=(
            "Create a named group with at least 2 other users. The caller is "
            "added automatically and becomes the group admin."
        ),
        tags=["Chats"],
        request=GroupCreateSerializer,
        responses={
            201: ChatSerializer,
            400: OpenApiResponse(description="Missing name or fewer than 2 users"),
            404: OpenApiResponse(description="An invited user was not found"),
        },
    )
    def post(self, request):
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.create_group(
            creator=request.user,
            name=serializer.validated_data["name"],
            user_ids=serializer.validated_data["users"],
        )
        if not result.success:
            return failure_response(result)

        return Response(ChatSerializer(result.data).data, status=status.HTTP_201_CREATED)


class GroupRenameView(APIView):
    """
    PUT: Rename a group chat

    URL: /api/chat/rename
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="api_chat_rename",
        summary="Rename group chat",
        tags=["Chats"],
        request=GroupRenameSerializer,
        responses={200: ChatSerializer},
    )
    def put(self, request):
        serializer = GroupRenameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.rename_group(
            request.user,
            serializer.validated_data["chat_id"],
            serializer.validated_data["chat_name"],
        )
        if not result.success:
            return failure_response(result)

        return Response(ChatSerializer(result.data).data)


class GroupAddView(APIView):
    """
    PUT: Add a user to a group chat

    URL: /api/chat/groupadd
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="api_chat_group_add",
        summary="Add user to group",
        tags=["Chats"],
        request=GroupMemberSerializer,
        responses={200: ChatSerializer},
    )
    def put(self, request):
        serializer = GroupMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.add_to_group(
            request.user,
            serializer.validated_data["chat_id"],
            serializer.validated_data["user_id"],
        )
        if not result.success:
            return failure_response(result)

        return Response(ChatSerializer(result.data).data)


class GroupRemoveView(APIView):
    """
    PUT: Remove a user from a group chat (or leave it)

    URL: /api/chat/groupremove
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="api_chat_group_remove",
        summary="Remove user from group",
        description=(
            "Remove a participant. Removing yourself leaves the group. If the "
            "admin is removed, the longest-standing remaining member becomes admin."
        ),
        tags=["Chats"],
        request=GroupMemberSerializer,
        responses={200: ChatSerializer},
    )
    def put(self, request):
        serializer = GroupMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.remove_from_group(
            request.user,
            serializer.validated_data["chat_id"],
            serializer.validated_data["user_id"],
        )
        if not result.success:
            return failure_response(result)

        return Response(ChatSerializer(result.data).data)


# =============================================================================
# Message Views
# =============================================================================


class MessageListView(APIView):
    """
    GET: A chat's messages, oldest first

    URL: /api/message/{chat_id}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="api_message_list",
        summary="Fetch messages",
        tags=["Messages"],
        responses={
            200: MessageSerializer(many=True),
            404: OpenApiResponse(description="Chat not found or not a participant"),
        },
    )
    def get(self, request, chat_id):
        messages = MessageService.list_messages(request.user, chat_id)
        return Response(MessageSerializer(messages, many=True).data)


class MessageCreateView(APIView):
    """
    POST: Send a message

    URL: /api/message
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="api_message_send",
        summary="Send message",
        description=(
            "Store a message and make it the chat's latest message. Clients "
            "then emit 'new message' on the relay to notify other participants."
        ),
        tags=["Messages"],
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Missing or blank content"),
            404: OpenApiResponse(description="Chat not found or not a participant"),
        },
    )
    def post(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MessageService.send_message(
            chat_id=serializer.validated_data["chat_id"],
            sender=request.user,
            content=serializer.validated_data["content"],
        )
        if not result.success:
            return failure_response(result)

        return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)
