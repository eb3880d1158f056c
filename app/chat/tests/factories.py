"""
Factory Boy factories for chat models.

Provides realistic test data generation for:
- Chat: Direct and group chats
- ChatMember: User participation in chats
- DirectChatPair: Helper for direct chat uniqueness
- Message: Text messages

Usage:
    from chat.tests.factories import (
        DirectChatFactory,
        GroupChatFactory,
        MessageFactory,
    )

    # Group chat with admin and two more members
    chat = GroupChatFactory(members=[user2, user3])

    # Direct chat between two users
    chat = DirectChatFactory(user_a=user1, user_b=user2)

    # Message that also moves the chat's latest_message pointer
    message = MessageFactory(chat=chat, sender=user1)
"""

import factory

from authentication.tests.factories import UserFactory
from chat.models import Chat, ChatMember, ChatType, DirectChatPair, Message


class ChatMemberFactory(factory.django.DjangoModelFactory):
    """Factory for ChatMember (a user's membership in a chat)."""

    class Meta:
        model = ChatMember

    chat = factory.SubFactory("chat.tests.factories.GroupChatFactory", members=[])
    user = factory.SubFactory(UserFactory)


class GroupChatFactory(factory.django.DjangoModelFactory):
    """
    Factory for group chats.

    The admin is always added as the first member. Pass `members` to add
    more participants after the admin, in order; by default two fresh
    users are added so the group meets the minimum size.

    Examples:
        # Group with generated admin and two members
        chat = GroupChatFactory()

        # Group with specific admin and members
        chat = GroupChatFactory(group_admin=ada, members=[grace, alan])
    """

    class Meta:
        model = Chat
        skip_postgeneration_save = True

    chat_type = ChatType.GROUP
    name = factory.Sequence(lambda n: f"Group Chat {n}")
    group_admin = factory.SubFactory(UserFactory)

    @factory.post_generation
    def members(self, create, extracted, **kwargs):
        """Add the admin, then the given members (or two new users)."""
        if not create:
            return

        if self.group_admin is not None:
            ChatMember.objects.create(chat=self, user=self.group_admin)

        users = extracted if extracted is not None else [UserFactory(), UserFactory()]
        for user in users:
            ChatMember.objects.create(chat=self, user=user)


class DirectChatFactory(factory.django.DjangoModelFactory):
    """
    Factory for direct (1:1) chats.

    Creates the chat, its DirectChatPair in canonical order and both
    memberships.

    Examples:
        # Direct chat between two new users
        chat = DirectChatFactory()

        # Direct chat between specific users
        chat = DirectChatFactory(user_a=ada, user_b=grace)
    """

    class Meta:
        model = Chat
        skip_postgeneration_save = True

    chat_type = ChatType.DIRECT
    name = ""
    group_admin = None

    user_a = factory.SubFactory(UserFactory)
    user_b = factory.SubFactory(UserFactory)

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        user_a = kwargs.pop("user_a")
        user_b = kwargs.pop("user_b")
        chat = super()._create(model_class, *args, **kwargs)

        lower_id, higher_id = DirectChatPair.canonical(user_a.pk, user_b.pk)
        DirectChatPair.objects.create(
            chat=chat, user_lower_id=lower_id, user_higher_id=higher_id
        )
        ChatMember.objects.create(chat=chat, user=user_a)
        ChatMember.objects.create(chat=chat, user=user_b)
        return chat


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for messages.

    Like MessageService.send_message, creating a message moves the chat's
    latest_message pointer to it.

    Examples:
        message = MessageFactory(chat=chat, sender=user)
        message = MessageFactory(chat=chat, sender=user, content="Hi")
    """

    class Meta:
        model = Message

    chat = factory.SubFactory(GroupChatFactory)
    sender = factory.LazyAttribute(lambda obj: obj.chat.memberships.first().user)
    content = factory.Sequence(lambda n: f"Message number {n}")

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        message = super()._create(model_class, *args, **kwargs)
        Chat.objects.filter(pk=message.chat_id).update(latest_message=message)
        message.chat.latest_message = message
        return message
