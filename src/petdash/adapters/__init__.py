"""Adapters for the dashboard's outside collaborators."""

from petdash.adapters.ai_service import AIServiceAdapter
from petdash.adapters.base import (
    AdapterError,
    AuthenticationError,
    BaseAdapter,
    CalendarAccessError,
    CalendarEventProvider,
    ContentGenerationService,
    FetchError,
    RateLimitError,
)
from petdash.adapters.calendar import CalendarFileAdapter, InMemoryCalendarProvider

__all__ = [
    # Base
    "BaseAdapter",
    "CalendarEventProvider",
    "ContentGenerationService",
    "AdapterError",
    "AuthenticationError",
    "CalendarAccessError",
    "FetchError",
    "RateLimitError",
    # Adapters
    "AIServiceAdapter",
    "CalendarFileAdapter",
    "InMemoryCalendarProvider",
]
