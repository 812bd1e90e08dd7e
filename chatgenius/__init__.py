"""ChatGenius - Slack-like chat with AI-assisted search."""

__version__ = "0.1.0"
