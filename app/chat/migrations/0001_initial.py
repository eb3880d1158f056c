import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Chat",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "chat_type",
                    models.CharField(
                        choices=[("direct", "Direct Message"), ("group", "Group")],
                        db_index=True,
                        default="group",
                        help_text="Type of chat (direct or group)",
                        max_length=10,
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Name for group chats (empty for direct)",
                        max_length=100,
                    ),
                ),
                (
                    "group_admin",
                    models.ForeignKey(
                        blank=True,
                        help_text="Admin of this group chat (null for direct chats)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="administered_chats",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_chat",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="ChatMember",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "chat",
                    models.ForeignKey(
                        help_text="Chat the user participates in",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="chat.chat",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Participating user",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chat_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_member",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["user", "chat"], name="chat_member_user_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("chat", "user"), name="unique_chat_member"
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="chat",
            name="users",
            field=models.ManyToManyField(
                help_text="Participants of this chat",
                related_name="chats",
                through="chat.ChatMember",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "content",
                    models.TextField(help_text="Message text", max_length=10000),
                ),
                (
                    "chat",
                    models.ForeignKey(
                        help_text="Chat this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.chat",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["chat", "created_at", "id"],
                        name="chat_msg_chat_created_idx",
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="chat",
            name="latest_message",
            field=models.ForeignKey(
                blank=True,
                help_text="Most recent message in this chat (for previews and sorting)",
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="chat.message",
            ),
        ),
        migrations.AddIndex(
            model_name="chat",
            index=models.Index(
                fields=["chat_type", "-updated_at"],
                name="chat_chat_type_updated_idx",
            ),
        ),
        migrations.CreateModel(
            name="DirectChatPair",
            fields=[
                (
                    "chat",
                    models.OneToOneField(
                        help_text="The direct chat this pair represents",
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="direct_pair",
                        serialize=False,
                        to="chat.chat",
                    ),
                ),
                (
                    "user_higher",
                    models.ForeignKey(
                        help_text="User with higher ID in this chat pair",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user_lower",
                    models.ForeignKey(
                        help_text="User with lower ID in this chat pair",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_direct_chat_pair",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_lower", "user_higher"),
                        name="unique_direct_chat_pair",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("user_lower_id__lt", models.F("user_higher_id"))
                        ),
                        name="direct_pair_user_lower_less_than_higher",
                    ),
                ],
            },
        ),
    ]
