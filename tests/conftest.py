"""Pytest configuration and fixtures for petdash tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from petdash.adapters.base import ContentGenerationService
from petdash.adapters.calendar import InMemoryCalendarProvider
from petdash.models import (
    CalendarEvent,
    CalendarEventType,
    Medication,
    MedicalHistory,
    Pet,
    Reminder,
    Status,
    Tip,
)

NOW = datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc)


def days(n: float) -> datetime:
    """NOW shifted by n days."""
    return NOW + timedelta(days=n)


class RecordingSink:
    """Presentation sink that records every notification in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def on_tips_updated(self, tips):
        self.events.append(("tips", list(tips)))

    def on_status_updated(self, pet_id, status):
        self.events.append(("status", (pet_id, status)))

    def on_reminders_updated(self, reminders):
        self.events.append(("reminders", list(reminders)))

    def on_loading_changed(self, is_loading):
        self.events.append(("loading", is_loading))

    def on_error_changed(self, error):
        self.events.append(("error", error))

    def of(self, name: str) -> list:
        return [payload for kind, payload in self.events if kind == name]


class FakeGenerator(ContentGenerationService):
    """Content generator with canned per-pet results.

    A value that is an exception instance is raised instead of returned.
    When a gate is set, tip generation waits on it.
    """

    def __init__(self, tips=None, statuses=None, reminders=None, gate=None):
        self.tips = tips or {}
        self.statuses = statuses or {}
        self.reminders = reminders or {}
        self.gate: asyncio.Event | None = gate
        self.calls: list[tuple[str, str]] = []
        self.events_seen: dict[str, list[CalendarEvent]] = {}

    @staticmethod
    def _resolve(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def generate_tip(self, pet, events):
        self.calls.append(("tip", pet.id))
        self.events_seen[pet.id] = list(events)
        if self.gate is not None:
            await self.gate.wait()
        return self._resolve(self.tips.get(pet.id))

    async def generate_status(self, pet, events):
        self.calls.append(("status", pet.id))
        default = Status(pet_id=pet.id, status="Healthy", summary="ok")
        return self._resolve(self.statuses.get(pet.id, default))

    async def generate_reminders(self, pet, events):
        self.calls.append(("reminders", pet.id))
        return self._resolve(self.reminders.get(pet.id, []))


def make_tip(pet_id: str, title: str = "Hydration") -> Tip:
    return Tip(pet_id=pet_id, emoji="🐾", title=title, detail=f"{title} for {pet_id}")


def make_reminder(title: str, due: datetime, pet_id: str = "max") -> Reminder:
    return Reminder(pet_id=pet_id, title=title, detail=title, due=due)


@pytest.fixture
def max_pet() -> Pet:
    return Pet(
        id="max",
        name="Max",
        species="Dog",
        breed="Beagle",
        age=4,
        weight=12.5,
        medical_history=MedicalHistory(
            vaccinations=["Rabies"],
            current_medications=[Medication(name="Apoquel", dosage="16mg")],
        ),
    )


@pytest.fixture
def luna_pet() -> Pet:
    return Pet(id="luna", name="Luna", species="Cat")


@pytest.fixture
def pets(max_pet, luna_pet) -> list[Pet]:
    return [max_pet, luna_pet]


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def calendar() -> InMemoryCalendarProvider:
    return InMemoryCalendarProvider(
        [
            CalendarEvent(
                pet_id="max",
                type=CalendarEventType.VACCINATION,
                title="Rabies booster",
                date=days(3),
            ),
            CalendarEvent(
                pet_id="luna",
                type=CalendarEventType.APPOINTMENT,
                title="Dental check",
                date=days(20),
            ),
        ]
    )
