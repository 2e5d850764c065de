"""Data models for the home dashboard pipeline."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RefreshMode(str, Enum):
    """Priority of a dashboard refresh request."""

    INTERACTIVE = "interactive"  # user-triggered, shows loading indicator
    BACKGROUND = "background"  # timer-driven, keeps stale content visible


# --- Pets (read-only snapshot from pet management) ---


class Medication(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    dosage: str = ""


class MedicalHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    vaccinations: list[str] = Field(default_factory=list)
    chronic_conditions: list[str] = Field(default_factory=list)
    current_medications: list[Medication] = Field(default_factory=list)


class Pet(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    species: str = ""
    breed: str | None = None
    age: float | None = None
    weight: float | None = None
    medical_history: MedicalHistory | None = None

    @property
    def meds_count(self) -> int:
        if self.medical_history is None:
            return 0
        return len(self.medical_history.current_medications)

    @property
    def weight_text(self) -> str:
        return f"{self.weight:.1f} kg" if self.weight is not None else "Weight n/a"


# --- Calendar ---


class CalendarEventType(str, Enum):
    MEDICATION = "medication"
    VACCINATION = "vaccination"
    APPOINTMENT = "appointment"
    REMINDER = "reminder"

    @property
    def icon(self) -> str:
        return _EVENT_ICONS[self]

    @property
    def tint(self) -> str:
        return _EVENT_TINTS[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_EVENT_ICONS = {
    CalendarEventType.MEDICATION: "pills.fill",
    CalendarEventType.VACCINATION: "syringe.fill",
    CalendarEventType.APPOINTMENT: "calendar.badge.clock",
    CalendarEventType.REMINDER: "bell.fill",
}

_EVENT_TINTS = {
    CalendarEventType.MEDICATION: "blue",
    CalendarEventType.VACCINATION: "green",
    CalendarEventType.APPOINTMENT: "canyon",
    CalendarEventType.REMINDER: "purple",
}


class RecurrenceRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: str  # daily, weekly, monthly, yearly
    interval: int = 1
    end_date: datetime | None = None


class CalendarEvent(BaseModel):
    """A calendar entry belonging to exactly one pet."""

    model_config = ConfigDict(frozen=True)

    pet_id: str
    type: CalendarEventType
    title: str
    date: datetime
    end_date: datetime | None = None
    notes: str | None = None
    recurrence: RecurrenceRule | None = None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None


# --- Generated artifacts ---


class Tip(BaseModel):
    model_config = ConfigDict(frozen=True)

    pet_id: str
    emoji: str
    title: str
    detail: str


class StatusPill(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    fg: str
    bg: str


class Status(BaseModel):
    model_config = ConfigDict(frozen=True)

    pet_id: str
    status: str
    summary: str
    pills: list[StatusPill] = Field(default_factory=list)


class Reminder(BaseModel):
    model_config = ConfigDict(frozen=True)

    pet_id: str
    title: str
    detail: str
    due: datetime
    icon: str = "bell.fill"
    tint: str = "purple"

    @property
    def dedup_key(self) -> tuple[str, int]:
        """Reminders with the same title due at the same second are duplicates."""
        return (self.title, int(self.due.timestamp()))


# --- Dashboard ---


class DashboardSnapshot(BaseModel):
    """Read-only view of the dashboard state at one point in time."""

    model_config = ConfigDict(frozen=True)

    tips: tuple[Tip, ...] = ()
    statuses: dict[str, Status] = Field(default_factory=dict)
    reminders: tuple[Reminder, ...] = ()
    is_loading: bool = False
    error: str | None = None
    has_loaded_once: bool = False
