"""
Chat app for real-time messaging.

This app handles:
- Chats (direct and group) and group membership management
- Message sending and history
- The real-time relay: room joins, typing signals, new-message fan-out

Related apps:
    - authentication: User model for participants

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for the relay consumer.
    See middleware.py for JWT websocket authentication.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import ChatService, MessageService

    result = ChatService.access_direct(user, other_user)
    chat = result.data

    result = MessageService.send_message(chat.id, user, "Hello!")
"""
