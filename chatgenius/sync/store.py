"""
Message Store

In-memory ordered message list for one context. Each entry is tagged with
its origin state so optimistic (locally created) items never need to be
recognized by their id:

- PENDING: provisional record shown before the write is acknowledged
- CONFIRMED: server record (fetched, fed, or acknowledged)
- FAILED: a send that did not go through; kept aside for manual resend

All mutators are synchronous, so a mutation is never interleaved with
another one on the event loop.
"""

import bisect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from chatgenius.models.chat import Message

logger = logging.getLogger(__name__)


class EntryState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class StoreEntry:
    message: Message
    state: EntryState
    local_id: Optional[str] = None  # set for locally originated entries
    error: Optional[str] = None

    @property
    def key(self) -> str:
        return self.local_id if self.state == EntryState.PENDING else self.message.id


class MessageStore:
    """Ordered entries for a single conversation context."""

    def __init__(self):
        self._entries: List[StoreEntry] = []
        self.failed: Dict[str, StoreEntry] = {}
        self.error: Optional[str] = None

    @property
    def entries(self) -> List[StoreEntry]:
        return list(self._entries)

    @property
    def messages(self) -> List[Message]:
        return [entry.message for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def _index_of_confirmed(self, message_id: str) -> int:
        for i, entry in enumerate(self._entries):
            if entry.state == EntryState.CONFIRMED and entry.message.id == message_id:
                return i
        return -1

    def _index_of_pending(self, local_id: str) -> int:
        for i, entry in enumerate(self._entries):
            if entry.state == EntryState.PENDING and entry.local_id == local_id:
                return i
        return -1

    def contains(self, message_id: str) -> bool:
        return self._index_of_confirmed(message_id) != -1

    def pending(self) -> List[StoreEntry]:
        return [e for e in self._entries if e.state == EntryState.PENDING]

    # Server data

    def reset(self, messages: Optional[List[Message]] = None) -> None:
        """Replace the whole list (initial fetch or context change)."""
        self._entries = [StoreEntry(m, EntryState.CONFIRMED) for m in messages or []]
        self.failed.clear()
        self.error = None

    def load_latest(self, messages: List[Message]) -> None:
        """
        Install the latest page while keeping entries that arrived meanwhile
        (feed inserts or pending sends not part of the page).
        """
        page_ids = {m.id for m in messages}
        live = [
            e for e in self._entries
            if e.state == EntryState.PENDING or e.message.id not in page_ids
        ]
        self._entries = [StoreEntry(m, EntryState.CONFIRMED) for m in messages] + live

    def prepend_older(self, messages: List[Message]) -> None:
        """Put an older page (ascending) in front, skipping ids already present."""
        older = [
            StoreEntry(m, EntryState.CONFIRMED)
            for m in messages
            if not self.contains(m.id)
        ]
        self._entries = older + self._entries

    def apply_insert(self, message: Message) -> None:
        """A confirmed message arrived; append it unless its id is already present."""
        index = self._index_of_confirmed(message.id)
        if index != -1:
            self._entries[index].message = message
            return
        self._entries.append(StoreEntry(message, EntryState.CONFIRMED))

    def apply_update(self, message: Message) -> None:
        """Replace by id; unseen messages are inserted at their timestamp position."""
        index = self._index_of_confirmed(message.id)
        if index != -1:
            self._entries[index].message = message
            return

        confirmed_times = [
            (i, e.message.created_at)
            for i, e in enumerate(self._entries)
            if e.state == EntryState.CONFIRMED
        ]
        position = bisect.bisect_right(
            [created_at for _, created_at in confirmed_times], message.created_at
        )
        insert_at = (
            confirmed_times[position][0]
            if position < len(confirmed_times)
            else len(self._entries)
        )
        self._entries.insert(insert_at, StoreEntry(message, EntryState.CONFIRMED))

    def apply_delete(self, message_id: str) -> None:
        index = self._index_of_confirmed(message_id)
        if index != -1:
            del self._entries[index]

    # Optimistic entries

    def add_pending(self, local_id: str, message: Message) -> StoreEntry:
        entry = StoreEntry(message, EntryState.PENDING, local_id=local_id)
        self._entries.append(entry)
        return entry

    def confirm(self, local_id: str, message: Message) -> None:
        """
        Swap a provisional entry for its server record.

        If the change feed already delivered the same id, the provisional
        entry is simply dropped so the message appears once. A provisional
        entry that is gone (the store was reset meanwhile) is not revived.
        """
        index = self._index_of_pending(local_id)
        if index == -1:
            logger.debug(f"Provisional {local_id} no longer in store, ignoring confirmation")
            return

        if self.contains(message.id):
            del self._entries[index]
            logger.debug(f"Message {message.id} already delivered by feed, dropped provisional {local_id}")
            return

        self._entries[index] = StoreEntry(message, EntryState.CONFIRMED, local_id=local_id)

    def fail(self, local_id: str, error: str) -> Optional[StoreEntry]:
        """
        Remove a provisional entry, keep it as FAILED and record the error.

        A provisional entry that is gone (the store was reset for another
        context) leaves the error untouched.
        """
        index = self._index_of_pending(local_id)
        if index == -1:
            logger.debug(f"Provisional {local_id} no longer in store, ignoring failure")
            return None

        self.error = error

        entry = self._entries.pop(index)
        entry.state = EntryState.FAILED
        entry.error = error
        self.failed[local_id] = entry
        return entry
