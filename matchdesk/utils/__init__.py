"""Utility functions."""

from matchdesk.utils.error_messages import get_error_message
from matchdesk.utils.timestamps import ensure_aware, utcnow

__all__ = [
    "get_error_message",
    "ensure_aware",
    "utcnow",
]
