"""
Realtime change feed abstractions.

The sync layer only depends on these types; the Supabase realtime adapter
lives in chatgenius.integrations.supabase.realtime.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeBinding:
    """One postgres_changes listener: event type, table and row filter."""

    event: ChangeType
    table: str
    filter: Optional[str] = None
    schema: str = "public"


@dataclass
class ChangeEvent:
    """Row-level change delivered by the feed (partial row, no joins)."""

    type: ChangeType
    table: str
    record: Dict[str, Any] = field(default_factory=dict)
    old_record: Dict[str, Any] = field(default_factory=dict)

    @property
    def row_id(self) -> Optional[str]:
        return self.record.get("id") or self.old_record.get("id")


ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]


class Subscription(Protocol):
    async def unsubscribe(self) -> None: ...


class ChangeFeed(Protocol):
    async def subscribe(
        self, topic: str, bindings: List[ChangeBinding], handler: ChangeHandler
    ) -> Subscription: ...
