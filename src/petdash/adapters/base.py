"""Base adapter interface and collaborator contracts."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import structlog

from petdash.models import CalendarEvent, Pet, Reminder, Status, Tip

logger = structlog.get_logger()


class BaseAdapter(ABC):
    """Lifecycle shared by adapters that wrap an outside system.

    Subclasses open their resources in connect(), release them in
    disconnect() and report liveness from health_check(). Adapters can be
    used as async context managers.
    """

    def __init__(self, name: str) -> None:
        """Initialize adapter with a name for logging."""
        self.name = name
        self._connected = False
        self.logger = logger.bind(adapter=name)

    @property
    def is_connected(self) -> bool:
        """Check if adapter is currently connected."""
        return self._connected

    @abstractmethod
    async def connect(self) -> bool:
        """Establish connection to the outside system.

        Returns:
            True if connection successful, False otherwise.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect and clean up resources."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the adapter is operational."""
        pass

    async def __aenter__(self) -> "BaseAdapter":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()


class CalendarEventProvider(ABC):
    """Source of per-pet calendar events."""

    @abstractmethod
    def load_events(
        self, pet_id: str, start: datetime, end: datetime
    ) -> Iterable[CalendarEvent]:
        """Return the pet's events between start and end.

        Raises:
            CalendarAccessError: calendar access has not been granted.
        """


class ContentGenerationService(ABC):
    """Produces the AI-derived dashboard artifacts for one pet."""

    @abstractmethod
    async def generate_tip(self, pet: Pet, events: list[CalendarEvent]) -> Tip | None:
        """Generate one care tip, or None when nothing could be produced."""

    @abstractmethod
    async def generate_status(self, pet: Pet, events: list[CalendarEvent]) -> Status:
        """Generate a health status. Implementations must not raise."""

    @abstractmethod
    async def generate_reminders(
        self, pet: Pet, events: list[CalendarEvent]
    ) -> list[Reminder]:
        """Generate dated care reminders."""


class AdapterError(Exception):
    """Base exception for adapter errors."""

    def __init__(self, adapter_name: str, message: str) -> None:
        self.adapter_name = adapter_name
        self.message = message
        super().__init__(f"[{adapter_name}] {message}")


class AuthenticationError(AdapterError):
    """Raised when the backend rejects the access token."""

    pass


class FetchError(AdapterError):
    """Raised when a backend or file read fails."""

    pass


class RateLimitError(FetchError):
    """Raised when the AI backend is throttling (429/503 or timeout)."""

    pass


class CalendarAccessError(AdapterError):
    """Raised when calendar access has not been granted."""

    pass
