"""
Export Service

CSV export of all messages.
"""

import csv
import io
import logging

from chatgenius.integrations.supabase.messages import MessageRepository

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["id", "content", "created_at", "user_id"]


class NoMessagesError(Exception):
    """Raised when there is nothing to export (404)."""

    pass


async def export_messages_csv(repository: MessageRepository) -> str:
    """
    Render every message as CSV, oldest first.

    Raises:
        NoMessagesError: If the messages table is empty
    """
    rows = await repository.fetch_all(", ".join(EXPORT_COLUMNS))
    if not rows:
        raise NoMessagesError("No messages found")

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)

    logger.info(f"Exported {len(rows)} messages")
    return buffer.getvalue()
