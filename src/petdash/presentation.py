"""Presentation sink interface the dashboard pushes updates to."""

from typing import Protocol

from petdash.models import Reminder, Status, Tip


class PresentationSink(Protocol):
    """Receives incremental dashboard updates. Never pulls."""

    def on_tips_updated(self, tips: list[Tip]) -> None: ...

    def on_status_updated(self, pet_id: str, status: Status) -> None: ...

    def on_reminders_updated(self, reminders: list[Reminder]) -> None: ...

    def on_loading_changed(self, is_loading: bool) -> None: ...

    def on_error_changed(self, error: str | None) -> None: ...


class NullSink:
    """Sink that discards every update."""

    def on_tips_updated(self, tips: list[Tip]) -> None:
        pass

    def on_status_updated(self, pet_id: str, status: Status) -> None:
        pass

    def on_reminders_updated(self, reminders: list[Reminder]) -> None:
        pass

    def on_loading_changed(self, is_loading: bool) -> None:
        pass

    def on_error_changed(self, error: str | None) -> None:
        pass
