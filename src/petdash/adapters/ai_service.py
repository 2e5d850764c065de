"""Backend AI service adapter for dashboard tips, status and reminders."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from petdash.adapters.base import (
    AuthenticationError,
    BaseAdapter,
    ContentGenerationService,
    FetchError,
    RateLimitError,
)
from petdash.adapters.calendar import parse_datetime
from petdash.config.settings import settings
from petdash.generation import fallback
from petdash.models import CalendarEvent, Pet, Reminder, Status, StatusPill, Tip


class AIServiceAdapter(BaseAdapter, ContentGenerationService):
    """Adapter for the backend AI endpoints.

    Endpoints (bearer token auth):
    - GET /ai/pets/{pet_id}/tips
    - GET /ai/pets/{pet_id}/status
    - GET /ai/pets/{pet_id}/reminders

    The backend rate-limits its model calls internally, so requests are
    slow rather than rejected most of the time. Throttling that does surface
    (timeouts, 429, 503) is reported as RateLimitError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__("ai_service")
        self._base_url = (base_url or settings.ai.base_url).rstrip("/")
        self._access_token = (
            access_token
            if access_token is not None
            else settings.ai.access_token.get_secret_value()
        )
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._client: httpx.AsyncClient | None = None

    @property
    def has_session(self) -> bool:
        """Whether there is an access token to call the backend with."""
        return bool(self._access_token)

    async def connect(self) -> bool:
        """Open the HTTP client."""
        if not self.has_session:
            self.logger.warning("No access token configured, using local content only")
            return False

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._access_token}"},
            timeout=settings.ai.timeout_seconds,
            transport=self._transport
            or httpx.AsyncHTTPTransport(retries=settings.ai.max_retries),
        )
        self._connected = True
        self.logger.info("Connected to AI service", url=self._base_url)
        return True

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
        self._client = None
        self._connected = False
        self.logger.info("Disconnected from AI service")

    async def health_check(self) -> bool:
        if not self._client:
            return False
        try:
            response = await self._client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def _get(self, pet_id: str, resource: str) -> dict[str, Any]:
        if not self._client:
            raise FetchError(self.name, "Not connected")

        try:
            response = await self._client.get(f"/ai/pets/{pet_id}/{resource}")
        except httpx.TimeoutException as e:
            raise RateLimitError(self.name, f"{resource} request timed out") from e
        except httpx.HTTPError as e:
            raise FetchError(self.name, f"{resource} request failed: {e}") from e

        if response.status_code in (429, 503):
            raise RateLimitError(
                self.name, f"{resource} unavailable (HTTP {response.status_code})"
            )
        if response.status_code == 401:
            raise AuthenticationError(self.name, "Access token rejected")
        if response.is_error:
            raise FetchError(self.name, f"{resource} failed (HTTP {response.status_code})")
        return response.json()

    async def generate_tip(self, pet: Pet, events: list[CalendarEvent]) -> Tip | None:
        """First tip from the backend, or None when throttled or empty."""
        if not self._client:
            self.logger.warning("No session, skipping tip", pet=pet.name)
            return None

        try:
            data = await self._get(pet.id, "tips")
        except RateLimitError as e:
            self.logger.warning("AI service rate-limited, try again later", pet=pet.name, error=str(e))
            return None

        tips = data.get("tips", [])
        if not tips:
            self.logger.warning("No tips in backend response", pet=pet.name)
            return None

        first = tips[0]
        return Tip(
            pet_id=pet.id,
            emoji=first.get("emoji") or fallback.emoji_for_species(pet.species),
            title=first.get("title") or f"Tips about {pet.name}",
            detail=first.get("detail", ""),
        )

    async def generate_status(self, pet: Pet, events: list[CalendarEvent]) -> Status:
        """Backend status with a "Due Soon" pill for upcoming events.

        Falls back to a locally derived status on any failure.
        """
        now = self._clock()
        window = settings.dashboard.upcoming_window_days

        if self._client:
            try:
                data = await self._get(pet.id, "status")
                pills = [
                    StatusPill(text=p["text"], fg=p.get("fg", ""), bg=p.get("bg", ""))
                    for p in data.get("pills", [])
                ]
                return Status(
                    pet_id=pet.id,
                    status=data.get("status", "Healthy"),
                    summary=data.get("summary", ""),
                    pills=fallback.with_due_soon(pills, events, now, window),
                )
            except (FetchError, AuthenticationError, KeyError, ValueError) as e:
                self.logger.warning(
                    "Status request failed, using local status", pet=pet.name, error=str(e)
                )

        return fallback.local_status(pet, events, now, window)

    async def generate_reminders(
        self, pet: Pet, events: list[CalendarEvent]
    ) -> list[Reminder]:
        """Backend reminders plus the next calendar events, soonest first.

        The calendar reminders are returned alone when the backend fails.
        """
        now = self._clock()
        from_calendar = fallback.calendar_reminders(
            pet, events, now, settings.dashboard.calendar_reminder_limit
        )
        if not self._client:
            return from_calendar

        try:
            data = await self._get(pet.id, "reminders")
        except (FetchError, AuthenticationError) as e:
            self.logger.warning(
                "Reminder request failed, using calendar reminders", pet=pet.name, error=str(e)
            )
            return from_calendar

        from_ai = [
            self._to_reminder(pet, raw, index, now)
            for index, raw in enumerate(data.get("reminders", []))
        ]
        self.logger.info(
            "Built reminders", pet=pet.name, ai=len(from_ai), calendar=len(from_calendar)
        )
        return sorted(from_ai + from_calendar, key=lambda r: r.due)

    def _to_reminder(
        self, pet: Pet, raw: dict[str, Any], index: int, now: datetime
    ) -> Reminder:
        detail = raw.get("detail", "")
        due = None
        if raw.get("date"):
            try:
                due = parse_datetime(raw["date"])
            except ValueError:
                self.logger.warning("Unparsable reminder date", date=raw["date"])
                due = now
        if due is None:
            due = fallback.due_date_from_text(detail, now) or now + timedelta(days=index + 2)

        return Reminder(
            pet_id=pet.id,
            title=raw.get("title") or f"{pet.name} • {fallback.reminder_title(detail)}",
            detail=detail,
            due=due,
            icon=raw.get("icon") or fallback.icon_for_reminder(detail),
            tint=raw.get("tint") or fallback.tint_for_reminder(detail),
        )
