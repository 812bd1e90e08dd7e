"""
Optimistic Writer

Shows an outgoing message immediately, then performs the durable write and
reconciles the store with the outcome. There is no retry policy: failed
sends stay in ``MessageStore.failed`` until the user resends them.
"""

import itertools
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from chatgenius.config import Settings, get_settings
from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.models.chat import FileAttachment, FileMetadata, Message, MessageContext, User
from chatgenius.sync.store import EntryState, MessageStore, StoreEntry
from chatgenius.utils.validators import ValidationError, validate_file, validate_message_content

logger = logging.getLogger(__name__)


class OptimisticWriter:
    """Sends messages for one context with optimistic local insertion."""

    def __init__(
        self,
        store: MessageStore,
        repository,
        context: MessageContext,
        user: User,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.repository = repository
        self.context = context
        self.user = user
        self.settings = settings or get_settings()
        self._sequence = itertools.count()

    def _next_local_id(self) -> str:
        return f"{time.time_ns()}-{next(self._sequence)}"

    def validate(self, content: str, file: Optional[FileMetadata] = None) -> None:
        """
        Raises:
            ValidationError: If the text or the file would be rejected
        """
        if content:
            is_valid, message = validate_message_content(content, self.settings.max_message_length)
            if not is_valid:
                raise ValidationError(message)
        if file:
            is_valid, message = validate_file(
                file, self.settings.max_file_size_bytes, self.settings.allowed_content_types
            )
            if not is_valid:
                raise ValidationError(message)

    def _provisional(self, local_id: str, content: str, file: Optional[FileMetadata]) -> Message:
        columns = self.context.target_columns()
        return Message(
            id=local_id,
            content=content,
            created_at=datetime.now(timezone.utc),
            channel_id=columns.get("channel_id"),
            conversation_id=columns.get("conversation_id"),
            parent_message_id=columns.get("parent_message_id"),
            user=self.user,
            file=FileAttachment(**file.model_dump(), user_id=self.user.id) if file else None,
        )

    async def send(self, content: str, file: Optional[FileMetadata] = None) -> Optional[StoreEntry]:
        """
        Send a message to the writer's context.

        Args:
            content: Raw input text (trimmed here)
            file: Metadata of an already uploaded attachment

        Returns:
            The resulting entry (CONFIRMED or FAILED), or None when there is
            nothing to send

        Raises:
            ValidationError: Before any network call, if the input is invalid
        """
        trimmed = content.strip()
        if not trimmed and not file:
            return None

        self.validate(trimmed, file)

        local_id = self._next_local_id()
        entry = self.store.add_pending(local_id, self._provisional(local_id, trimmed, file))
        return await self._write(entry, trimmed, file)

    async def resend(self, local_id: str) -> Optional[StoreEntry]:
        """Manually resend a failed message."""
        failed = self.store.failed.pop(local_id, None)
        if failed is None:
            return None

        message = failed.message
        file = None
        if message.file:
            file = FileMetadata(**message.file.model_dump(include=set(FileMetadata.model_fields)))
        entry = self.store.add_pending(local_id, message)
        return await self._write(entry, message.content, file)

    async def _write(self, entry: StoreEntry, content: str, file: Optional[FileMetadata]) -> StoreEntry:
        local_id = entry.local_id
        try:
            confirmed = await self.repository.create_message(
                self.context, self.user.id, content, file
            )
        except ChatRepositoryError as e:
            logger.error(f"Error sending message in {self.context.type.value} {self.context.id}: {e}")
            return self.store.fail(local_id, str(e)) or entry

        self.store.confirm(local_id, confirmed)
        logger.debug(f"Message {confirmed.id} confirmed (provisional {local_id})")
        return StoreEntry(confirmed, EntryState.CONFIRMED, local_id=local_id)
