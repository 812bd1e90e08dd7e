"""
Utility package exports
"""

from chatgenius.utils.validators import (
    ValidationError,
    ChannelNameValidation,
    validate_channel_name,
    validate_channel_deletion,
    validate_message_content,
    validate_file,
    unicode_length,
)

__all__ = [
    "ValidationError",
    "ChannelNameValidation",
    "validate_channel_name",
    "validate_channel_deletion",
    "validate_message_content",
    "validate_file",
    "unicode_length",
]
