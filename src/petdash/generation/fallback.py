"""Local content derivation used when the AI backend cannot answer.

Everything here is deterministic and works from the pet record and its
calendar events alone, so a dashboard can always show a status and the
calendar-backed reminders.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from petdash.models import CalendarEvent, Pet, Reminder, Status, StatusPill

HEALTHY_PILL = StatusPill(text="Healthy", fg="#1E7B34", bg="#E3F4E8")
ATTENTION_PILL = StatusPill(text="Needs Attention", fg="#B35C00", bg="#FFF0E0")
DUE_SOON_PILL = StatusPill(text="Due Soon", fg="#C2703D", bg="#F8EAE1")


def emoji_for_species(species: str) -> str:
    return {"dog": "🐕", "cat": "🐈", "bird": "🐦"}.get(species.lower(), "🐾")


def upcoming_events(
    events: Iterable[CalendarEvent], now: datetime, window_days: int | None = None
) -> list[CalendarEvent]:
    """Events at or after now (and within the window, if given), soonest first."""
    horizon = now + timedelta(days=window_days) if window_days is not None else None
    upcoming = [
        e for e in events if e.date >= now and (horizon is None or e.date <= horizon)
    ]
    return sorted(upcoming, key=lambda e: e.date)


def status_pills(
    status: str, events: Iterable[CalendarEvent], now: datetime, window_days: int = 7
) -> list[StatusPill]:
    lowered = status.lower()
    if "healthy" in lowered:
        pills = [HEALTHY_PILL]
    elif "attention" in lowered or "checkup" in lowered:
        pills = [ATTENTION_PILL]
    else:
        pills = [StatusPill(text=status, fg=DUE_SOON_PILL.fg, bg=DUE_SOON_PILL.bg)]

    if upcoming_events(events, now, window_days):
        pills.append(DUE_SOON_PILL)
    return pills


def with_due_soon(
    pills: list[StatusPill], events: Iterable[CalendarEvent], now: datetime, window_days: int = 7
) -> list[StatusPill]:
    """Append a "Due Soon" pill when an event falls inside the window."""
    if not upcoming_events(events, now, window_days):
        return list(pills)
    if any(p.text == DUE_SOON_PILL.text for p in pills):
        return list(pills)
    return [*pills, DUE_SOON_PILL]


def status_summary(pet: Pet) -> str:
    history = pet.medical_history
    parts = ["✓ Up-to-date" if history and history.vaccinations else "⚠ Needs vaccines"]
    if pet.meds_count > 0:
        parts.append(f"{pet.meds_count} med")
    parts.append(pet.weight_text)
    return " | ".join(parts)


def local_status(
    pet: Pet, events: Iterable[CalendarEvent], now: datetime, window_days: int = 7
) -> Status:
    """Status computed without the model."""
    events = list(events)
    history = pet.medical_history
    if history is None or not history.vaccinations:
        status = "Needs Attention"
    elif pet.meds_count > 0:
        status = "On Medication"
    else:
        status = "Healthy"
    return Status(
        pet_id=pet.id,
        status=status,
        summary=status_summary(pet),
        pills=status_pills(status, events, now, window_days),
    )


def calendar_reminders(
    pet: Pet, events: Iterable[CalendarEvent], now: datetime, limit: int = 3
) -> list[Reminder]:
    """Turn the next few calendar events into reminders."""
    return [
        Reminder(
            pet_id=pet.id,
            title=f"{pet.name} • {event.title}",
            detail=event.type.display_name,
            due=event.date,
            icon=event.type.icon,
            tint=event.type.tint,
        )
        for event in upcoming_events(events, now)[:limit]
    ]


def icon_for_reminder(text: str) -> str:
    lowered = text.lower()
    if "vaccin" in lowered:
        return "syringe.fill"
    if "medic" in lowered or "pill" in lowered:
        return "pills.fill"
    if "appointment" in lowered or "check" in lowered:
        return "calendar.badge.clock"
    if "groom" in lowered:
        return "scissors"
    return "bell.fill"


def tint_for_reminder(text: str) -> str:
    lowered = text.lower()
    if "vaccin" in lowered:
        return "green"
    if "medic" in lowered or "pill" in lowered:
        return "blue"
    if "appointment" in lowered:
        return "canyon"
    return "purple"


def reminder_title(text: str) -> str:
    """Short title: the first four words of longer reminder texts."""
    words = text.split()
    return " ".join(words[:4]) if len(words) > 5 else text


def due_date_from_text(text: str, now: datetime) -> datetime | None:
    lowered = text.lower()
    if "today" in lowered:
        return now
    if "tomorrow" in lowered:
        return now + timedelta(days=1)
    if "week" in lowered:
        return now + timedelta(days=7)
    return None

