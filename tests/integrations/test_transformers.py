"""
Unit tests for row transformation of joined Supabase reads.
"""

from chatgenius.integrations.supabase.transformers import DataTransformer
from chatgenius.models.chat import UserStatus


def message_row(**overrides):
    row = {
        "id": "m1",
        "content": "hello",
        "created_at": "2024-01-15T10:00:00+00:00",
        "channel_id": "chan-1",
        "conversation_id": None,
        "parent_message_id": None,
        "user_id": "u1",
        "users": {"id": "u1", "username": "alice", "full_name": "Alice", "status": "online"},
        "reactions": [],
        "files": [],
    }
    row.update(overrides)
    return row


def test_message_with_joined_user():
    message = DataTransformer.to_message(message_row())
    assert message.user.username == "alice"
    assert message.user.status == UserStatus.ONLINE
    assert message.file is None


def test_missing_user_falls_back_to_placeholder():
    message = DataTransformer.to_message(message_row(users=None))
    assert message is not None
    assert message.user.id == "u1"
    assert message.user.username == "Unknown"
    assert message.user.full_name == "Unknown User"
    assert message.user.status == UserStatus.OFFLINE


def test_joined_relation_as_list():
    row = message_row(users=[{"id": "u1", "username": "alice", "full_name": "Alice"}])
    assert DataTransformer.to_message(row).user.full_name == "Alice"


def test_reactions_without_user_are_dropped():
    row = message_row(
        reactions=[
            {"id": "r1", "emoji": "👍", "users": {"id": "u2", "username": "bob", "full_name": "Bob"}},
            {"id": "r2", "emoji": "🎉", "users": None},
        ]
    )
    message = DataTransformer.to_message(row)
    assert [r.emoji for r in message.reactions] == ["👍"]


def test_file_attachment():
    row = message_row(
        files=[
            {
                "id": "f1",
                "message_id": "m1",
                "user_id": "u1",
                "bucket_path": "chan-1/cat.png",
                "file_name": "cat.png",
                "file_size": 2048,
                "content_type": "image/png",
                "is_image": True,
                "image_width": 640,
                "image_height": 480,
            }
        ]
    )
    message = DataTransformer.to_message(row)
    assert message.file.file_name == "cat.png"
    assert message.file.image_width == 640


def test_row_with_both_contexts_is_skipped():
    assert DataTransformer.to_message(message_row(conversation_id="conv-1")) is None


def test_conversation_resolves_other_user():
    row = {
        "id": "conv-1",
        "user1_id": "u1",
        "user2_id": "u2",
        "is_ai_chat": False,
        "user1": {"id": "u1", "username": "alice", "full_name": "Alice"},
        "user2": {"id": "u2", "username": "bob", "full_name": "Bob"},
    }
    conversation = DataTransformer.to_conversation(row, current_user_id="u1")
    assert conversation.other_user.username == "bob"


def test_conversation_missing_other_user_is_skipped():
    row = {"id": "conv-1", "user1_id": "u1", "user2_id": "u2", "user1": {"id": "u1", "username": "alice"}, "user2": None}
    assert DataTransformer.to_conversation(row, current_user_id="u1") is None
