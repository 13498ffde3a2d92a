"""Payload sources."""
from .analytics_api import AnalyticsApiClient
from .file_source import FilePayloadSource

__all__ = ["AnalyticsApiClient", "FilePayloadSource"]
