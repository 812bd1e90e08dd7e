"""
Unit tests for CSV export.
"""

import asyncio
import csv
import io
from unittest.mock import AsyncMock

import pytest

from chatgenius.services.export_service import NoMessagesError, export_messages_csv


def test_export_writes_header_and_rows():
    repository = AsyncMock()
    repository.fetch_all.return_value = [
        {"id": "m1", "content": 'says "hi", then leaves', "created_at": "2024-01-15T10:00:00Z", "user_id": "u1"},
        {"id": "m2", "content": "line one\nline two", "created_at": "2024-01-15T10:01:00Z", "user_id": "u2"},
    ]

    text = asyncio.run(export_messages_csv(repository))

    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == ["id", "content", "created_at", "user_id"]
    assert rows[1][1] == 'says "hi", then leaves'
    assert rows[2][1] == "line one\nline two"
    repository.fetch_all.assert_awaited_once_with("id, content, created_at, user_id")


def test_export_without_messages():
    repository = AsyncMock()
    repository.fetch_all.return_value = []

    with pytest.raises(NoMessagesError):
        asyncio.run(export_messages_csv(repository))
