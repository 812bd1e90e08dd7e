"""
Validation utilities for user input.

All checks here run before any network call so that problems can be
reported inline.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from chatgenius.models.chat import Channel, FileMetadata

CHANNEL_NAME_MIN_LENGTH = 3
CHANNEL_NAME_MAX_LENGTH = 50
CHANNEL_NAME_PATTERN = re.compile(r"[a-z0-9-]*")


class ValidationError(ValueError):
    """Raised when user input fails a client-side check."""

    pass


@dataclass(frozen=True)
class ChannelNameValidation:
    """Result of checking a proposed channel name."""

    length: bool
    format: bool
    unique: bool
    has_content: bool

    @property
    def is_valid(self) -> bool:
        return self.length and self.format and self.unique and self.has_content

    @property
    def error(self) -> Optional[str]:
        if not self.has_content:
            return "Channel name is required"
        if not self.length:
            return "Channel name must be between 3 and 50 characters"
        if not self.format:
            return "Channel name can only contain lowercase letters, numbers, and hyphens"
        if not self.unique:
            return "Channel name already exists"
        return None


def validate_channel_name(
    name: str, existing_channels: Iterable[Channel]
) -> ChannelNameValidation:
    """
    Validate a channel name against format rules and existing channels.

    The name is lower-cased before checking, so "General" collides with an
    existing "general".
    """
    lowercase_name = name.lower()
    return ChannelNameValidation(
        length=CHANNEL_NAME_MIN_LENGTH <= len(lowercase_name) <= CHANNEL_NAME_MAX_LENGTH,
        format=CHANNEL_NAME_PATTERN.fullmatch(lowercase_name) is not None,
        unique=not any(c.name == lowercase_name for c in existing_channels),
        has_content=len(lowercase_name) > 0,
    )


def validate_channel_deletion(confirmation: str, channel_name: str) -> tuple[bool, str]:
    """
    Check the typed confirmation for deleting a channel.

    Returns:
        tuple: (is_valid, message)
    """
    if confirmation != channel_name:
        return False, f"Type '{channel_name}' to confirm deletion."
    return True, "Confirmation matches channel name."


def unicode_length(text: str) -> int:
    """Length in code points (a Python str is already a code point sequence)."""
    return len(text)


def validate_message_content(content: str, max_length: int) -> tuple[bool, str]:
    """
    Validate outgoing message text (expected to be trimmed already).

    Returns:
        tuple: (is_valid, message)
    """
    if not content:
        return False, "Message cannot be empty."

    length = unicode_length(content)
    if length > max_length:
        return False, f"Message is too long ({length}/{max_length} characters)."

    return True, "Valid message."


def validate_file(
    file: FileMetadata, max_size: int, allowed_types: Sequence[str]
) -> tuple[bool, str]:
    """
    Validate declared file size and content type.

    Entries of ``allowed_types`` ending in "/" match a whole family
    (e.g. "image/"); other entries must match exactly.

    Returns:
        tuple: (is_valid, message)
    """
    if file.file_size > max_size:
        return False, f"File is too large ({file.file_size} bytes, max {max_size})."

    content_type = file.content_type.lower()
    for allowed in allowed_types:
        if allowed.endswith("/") and content_type.startswith(allowed):
            return True, "Valid file."
        if content_type == allowed:
            return True, "Valid file."

    return False, f"File type '{file.content_type}' is not allowed."
