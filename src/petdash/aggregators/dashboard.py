"""Dashboard aggregator: per-pet AI tips, statuses and reminders."""

import asyncio
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog

from petdash.adapters.base import (
    BaseAdapter,
    CalendarAccessError,
    CalendarEventProvider,
    ContentGenerationService,
)
from petdash.aggregators.reminders import merge_reminders, prune_expired
from petdash.config.settings import settings
from petdash.models import (
    CalendarEvent,
    DashboardSnapshot,
    Pet,
    RefreshMode,
    Reminder,
    Status,
    Tip,
)
from petdash.presentation import NullSink, PresentationSink

logger = structlog.get_logger()


def combine_tips(prior: Sequence[Tip], batch: Sequence[Tip]) -> list[Tip]:
    """Fold a batch of new tips into the previous tip list.

    A pet's new tip replaces its previous one; pets without a new tip keep
    theirs. An empty batch leaves the previous list unchanged.
    """
    if not batch:
        return list(prior)
    refreshed = {tip.pet_id for tip in batch}
    return [*batch, *(tip for tip in prior if tip.pet_id not in refreshed)]


class DashboardState:
    """Dashboard content and run flags. Written only by DashboardAggregator."""

    def __init__(self) -> None:
        self.tips: list[Tip] = []
        self.statuses: dict[str, Status] = {}
        self.reminders: list[Reminder] = []
        self.is_loading = False
        self.error: str | None = None
        self.has_loaded_once = False

    @property
    def has_content(self) -> bool:
        return bool(self.tips or self.statuses or self.reminders)

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            tips=tuple(self.tips),
            statuses=dict(self.statuses),
            reminders=tuple(self.reminders),
            is_loading=self.is_loading,
            error=self.error,
            has_loaded_once=self.has_loaded_once,
        )


class DashboardAggregator:
    """Builds the home dashboard's AI content for a list of pets.

    Pipeline per run:
    - Calendar events for every pet, loaded once
    - Per pet, in order: tip, status, reminders, each pushed to the sink
      as soon as it exists
    - Reminders merged across pets without duplicates, soonest first

    Only one run executes at a time; a request arriving mid-run is dropped.
    """

    def __init__(
        self,
        generator: ContentGenerationService,
        calendar: CalendarEventProvider | None = None,
        sink: PresentationSink | None = None,
        clock: Callable[[], datetime] | None = None,
        prune_expired_reminders: bool | None = None,
    ) -> None:
        self.generator = generator
        self.calendar = calendar
        self.sink: PresentationSink = sink or NullSink()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._prune_expired = (
            settings.refresh.prune_expired_reminders
            if prune_expired_reminders is None
            else prune_expired_reminders
        )
        self._state = DashboardState()
        self._run_lock = asyncio.Lock()

    async def __aenter__(self) -> "DashboardAggregator":
        """Connect collaborators that are adapters."""
        for adapter in self._adapters():
            await adapter.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Disconnect collaborators that are adapters."""
        for adapter in self._adapters():
            await adapter.disconnect()

    def _adapters(self) -> list[BaseAdapter]:
        return [c for c in (self.generator, self.calendar) if isinstance(c, BaseAdapter)]

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._state.snapshot()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    async def run(
        self, pets: Sequence[Pet], mode: RefreshMode = RefreshMode.INTERACTIVE
    ) -> DashboardSnapshot | None:
        """Refresh the dashboard content for the given pets.

        Args:
            pets: Pets to process, in display order.
            mode: INTERACTIVE shows the loading indicator; BACKGROUND keeps
                existing content on screen without one.

        Returns:
            The resulting snapshot, or None when there was nothing to do or
            another run was already in progress.
        """
        if not pets:
            logger.debug("No pets, skipping dashboard refresh")
            return None

        if self._run_lock.locked():
            logger.info("Dashboard refresh already running, dropping request", mode=mode.value)
            return None

        async with self._run_lock:
            await self._run_cycle(list(pets), mode)
        return self.snapshot

    async def retry(self, pets: Sequence[Pet]) -> DashboardSnapshot | None:
        """User-triggered retry after a failed load."""
        return await self.run(pets, RefreshMode.INTERACTIVE)

    async def _run_cycle(self, pets: list[Pet], mode: RefreshMode) -> None:
        state = self._state
        log = logger.bind(mode=mode.value, pets=len(pets))
        now = self._clock()

        if mode is RefreshMode.INTERACTIVE or not state.has_content:
            self._set_loading(True)
        self._set_error(None)
        log.info("Dashboard refresh started")

        try:
            if self._prune_expired:
                self._prune_reminders(now)

            events_by_pet = self._load_calendar(pets, now)
            # Tips of pets that are no longer listed are dropped
            pet_ids = {pet.id for pet in pets}
            prior_tips = [tip for tip in state.tips if tip.pet_id in pet_ids]
            batch: list[Tip] = []

            for pet in pets:
                events = events_by_pet[pet.id]

                tip = await self._generate_tip(pet, events)
                if tip is not None:
                    batch.append(tip)
                    state.tips = combine_tips(prior_tips, batch)
                    self.sink.on_tips_updated(list(state.tips))

                status = await self._generate_status(pet, events)
                if status is not None:
                    state.statuses[pet.id] = status
                    self.sink.on_status_updated(pet.id, status)

                reminders = await self._generate_reminders(pet, events)
                if reminders is not None:
                    state.reminders = merge_reminders(state.reminders, reminders)
                    self.sink.on_reminders_updated(list(state.reminders))

            tips = combine_tips(prior_tips, batch)
            if tips != state.tips:
                state.tips = tips
                self.sink.on_tips_updated(list(tips))
            state.reminders = merge_reminders(state.reminders, [])

            if batch:
                log.info("Dashboard refresh complete", tips=len(batch), reminders=len(state.reminders))
            elif prior_tips:
                # Previous tips stay on screen; the failure is only logged
                log.warning("No new tips this cycle, keeping previous tips")
            else:
                log.warning("No tips generated")
                self._set_error(settings.dashboard.generic_error)
        finally:
            self._set_loading(False)
            state.has_loaded_once = True

    def _prune_reminders(self, now: datetime) -> None:
        """Drop expired reminders; the sink sees the result with the next merge."""
        remaining = prune_expired(self._state.reminders, now)
        if len(remaining) != len(self._state.reminders):
            logger.debug("Pruned expired reminders", count=len(self._state.reminders) - len(remaining))
            self._state.reminders = remaining

    def _load_calendar(self, pets: list[Pet], now: datetime) -> dict[str, list[CalendarEvent]]:
        """Load every pet's upcoming events for this cycle."""
        events: dict[str, list[CalendarEvent]] = {pet.id: [] for pet in pets}
        if self.calendar is None:
            return events

        end = now + timedelta(days=settings.calendar.lookahead_days)
        for pet in pets:
            try:
                events[pet.id] = list(self.calendar.load_events(pet.id, now, end))
            except CalendarAccessError:
                logger.info("Calendar not authorized, continuing without events", pet=pet.name)
            except Exception as e:
                logger.warning("Failed to load calendar events", pet=pet.name, error=str(e))
        return events

    async def _generate_tip(self, pet: Pet, events: list[CalendarEvent]) -> Tip | None:
        try:
            tip = await self.generator.generate_tip(pet, events)
        except Exception as e:
            logger.warning("Tip generation failed", pet=pet.name, error=str(e))
            return None
        if tip is None:
            logger.warning("No tip generated", pet=pet.name)
            return None
        return tip.model_copy(update={"pet_id": pet.id})

    async def _generate_status(self, pet: Pet, events: list[CalendarEvent]) -> Status | None:
        try:
            status = await self.generator.generate_status(pet, events)
        except Exception as e:
            logger.error("Status generation failed", pet=pet.name, error=str(e))
            return None
        if status is None:
            return None
        return status.model_copy(update={"pet_id": pet.id})

    async def _generate_reminders(
        self, pet: Pet, events: list[CalendarEvent]
    ) -> list[Reminder] | None:
        try:
            reminders = await self.generator.generate_reminders(pet, events)
        except Exception as e:
            logger.warning("Reminder generation failed", pet=pet.name, error=str(e))
            return None
        return [r.model_copy(update={"pet_id": pet.id}) for r in reminders]

    def _set_loading(self, value: bool) -> None:
        if self._state.is_loading != value:
            self._state.is_loading = value
            self.sink.on_loading_changed(value)

    def _set_error(self, value: str | None) -> None:
        if self._state.error != value:
            self._state.error = value
            self.sink.on_error_changed(value)
