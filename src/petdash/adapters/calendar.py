"""Calendar adapters for pet care events."""

from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

import yaml

from petdash.adapters.base import (
    BaseAdapter,
    CalendarAccessError,
    CalendarEventProvider,
    FetchError,
)
from petdash.config.settings import settings
from petdash.models import CalendarEvent, CalendarEventType, RecurrenceRule

PET_ID_PREFIX = "Pet ID: "
TYPE_PREFIX = "Type: "


def extract_pet_id(notes: str) -> str | None:
    """Find the owning pet in an event's notes ("Pet ID: <id>" line)."""
    for line in notes.splitlines():
        if line.startswith(PET_ID_PREFIX):
            return line[len(PET_ID_PREFIX):].strip()
    return None


def infer_event_type(title: str) -> CalendarEventType:
    """Guess the event type from its title."""
    lowered = title.lower()
    if "vaccination" in lowered or "vaccine" in lowered:
        return CalendarEventType.VACCINATION
    if "medication" in lowered or "med" in lowered or "pill" in lowered:
        return CalendarEventType.MEDICATION
    if "appointment" in lowered or "vet" in lowered:
        return CalendarEventType.APPOINTMENT
    return CalendarEventType.REMINDER


def build_event_notes(pet_id: str, event_type: CalendarEventType, notes: str | None = None) -> str:
    """Notes layout written for pet events; read back by parse_entry."""
    text = f"{PET_ID_PREFIX}{pet_id}\n{TYPE_PREFIX}{event_type.value}\n"
    if notes:
        text += f"\n{notes}"
    return text


def parse_entry(entry: dict[str, Any]) -> CalendarEvent | None:
    """Convert one raw calendar entry into a pet event.

    Entries without a "Pet ID:" line in their notes are not pet events and
    yield None. A missing or unknown "Type:" line falls back to a guess from
    the title.
    """
    notes = entry.get("notes") or ""
    pet_id = extract_pet_id(notes)
    if not pet_id:
        return None

    title = entry.get("title") or "Untitled"
    lines = notes.splitlines()
    type_value = next(
        (line[len(TYPE_PREFIX):].strip() for line in lines if line.startswith(TYPE_PREFIX)),
        None,
    )
    try:
        event_type = CalendarEventType(type_value)
    except ValueError:
        event_type = infer_event_type(title)

    extra = "\n".join(
        line for line in lines if not line.startswith((PET_ID_PREFIX, TYPE_PREFIX))
    ).strip()

    recurrence = entry.get("recurrence")
    return CalendarEvent(
        pet_id=pet_id,
        type=event_type,
        title=title,
        date=parse_datetime(entry["start"]),
        end_date=parse_datetime(entry["end"]) if entry.get("end") else None,
        notes=extra or None,
        recurrence=RecurrenceRule.model_validate(recurrence) if recurrence else None,
    )


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are read in the configured timezone."""
    # YAML already turns unquoted timestamps into datetimes
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(
        str(value).replace("Z", "+00:00")
    )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo(settings.timezone))
    return parsed


class CalendarFileAdapter(BaseAdapter, CalendarEventProvider):
    """Adapter for an exported device calendar (YAML or JSON file).

    The export is a list of entries with title, notes, start, end and an
    optional recurrence mapping. Pet events carry the owning pet in their
    notes, as written by build_event_notes.
    """

    def __init__(self, path: Path | None = None, authorized: bool | None = None) -> None:
        super().__init__("calendar")
        self._path = (path or settings.calendar.events_file).expanduser()
        self._authorized = settings.calendar.authorized if authorized is None else authorized
        self._entries: list[dict[str, Any]] = []

    async def connect(self) -> bool:
        """Load the calendar export."""
        if not self._authorized:
            self.logger.warning("Calendar access not authorized")
            return False

        if not self._path.exists():
            self.logger.warning("Calendar export not found", path=str(self._path))
            return False

        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8")) or []
        except yaml.YAMLError as e:
            self.logger.error("Failed to parse calendar export", error=str(e))
            raise FetchError(self.name, f"Invalid calendar export: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("events", [])
        self._entries = list(raw)
        self._connected = True
        self.logger.info("Loaded calendar export", path=str(self._path), count=len(self._entries))
        return True

    async def disconnect(self) -> None:
        """Drop the loaded entries."""
        self._entries = []
        self._connected = False
        self.logger.info("Disconnected from calendar")

    async def health_check(self) -> bool:
        return self._authorized and self._path.exists()

    def load_events(
        self, pet_id: str, start: datetime, end: datetime
    ) -> Iterator[CalendarEvent]:
        """Yield the pet's events between start and end, in file order."""
        if not self._authorized:
            raise CalendarAccessError(self.name, "Calendar access not authorized")

        for entry in self._entries:
            try:
                event = parse_entry(entry)
            except (KeyError, ValueError) as e:
                self.logger.warning("Skipping malformed calendar entry", error=str(e))
                continue
            if event is None or event.pet_id != pet_id:
                continue
            if start <= event.date <= end:
                yield event


class InMemoryCalendarProvider(CalendarEventProvider):
    """Calendar provider over events already held in memory."""

    def __init__(self, events: Iterable[CalendarEvent] = ()) -> None:
        self._events = list(events)

    def add(self, event: CalendarEvent) -> None:
        self._events.append(event)

    def load_events(
        self, pet_id: str, start: datetime, end: datetime
    ) -> Iterator[CalendarEvent]:
        return (
            e for e in self._events if e.pet_id == pet_id and start <= e.date <= end
        )
