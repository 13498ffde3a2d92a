"""Protocol interfaces for the portfolio analytics service."""
from .notifier import Notifier
from .payload_source import PayloadSource

__all__ = ["Notifier", "PayloadSource"]
