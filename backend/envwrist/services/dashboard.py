from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, replace
from typing import Protocol

from envwrist.schemas import (
    MAX_TEMPERATURE_C,
    MIN_TEMPERATURE_C,
    ChatRole,
    ChatTurn,
    Condition,
    ForecastDay,
    HourlyPoint,
    TimeOfDay,
    Unavailable,
    WeatherSnapshot,
)
from envwrist.services.geolocation import GeoResult, GeoUnavailable
from envwrist.services.localization import DEFAULT_LANGUAGE, normalize_language
from envwrist.services.normalizer import normalize_daily, normalize_hourly, normalize_snapshot


logger = logging.getLogger(__name__)

PLACEHOLDER_SNAPSHOT = WeatherSnapshot(
    temperature=30,
    condition=Condition.SUNNY,
    location="...",
    pressure=1013,
    altitude=0,
    humidity=50,
    voc=0.1,
    air_status="Good",
    description="Hang tight! Fetching real-time data from the sky...",
)


class WeatherSource(Protocol):
    async def fetch_current_conditions(self, latitude: float, longitude: float, language: str) -> dict | Unavailable: ...

    async def fetch_hourly(self, location: str, language: str) -> list: ...

    async def fetch_daily(self, location: str, language: str) -> list: ...


class ChatSource(Protocol):
    async def fetch_chat_reply(self, user_text: str, context_summary: str, language: str) -> str: ...


@dataclass(frozen=True)
class DashboardState:
    """Everything the presentation layer renders. Replaced on every update."""

    language: str = DEFAULT_LANGUAGE
    time_of_day: TimeOfDay = TimeOfDay.NOON
    snapshot: WeatherSnapshot = PLACEHOLDER_SNAPSHOT
    snapshot_live: bool = False
    hourly: tuple[HourlyPoint, ...] = ()
    daily: tuple[ForecastDay, ...] = ()
    transcript: tuple[ChatTurn, ...] = ()


def time_of_day_for(hour: int) -> TimeOfDay:
    if 5 <= hour < 11:
        return TimeOfDay.MORNING
    if 11 <= hour < 16:
        return TimeOfDay.NOON
    if 16 <= hour < 19:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.NIGHT


def with_language(state: DashboardState, language: str | None) -> DashboardState:
    return replace(state, language=normalize_language(language))


def with_hour(state: DashboardState, hour: int) -> DashboardState:
    return replace(state, time_of_day=time_of_day_for(hour))


def is_bad_weather(snapshot: WeatherSnapshot) -> bool:
    return snapshot.condition in {Condition.RAINY, Condition.THUNDER} or snapshot.air_status == "Bad"


async def refresh(
    state: DashboardState,
    client: WeatherSource,
    position: GeoResult,
    *,
    default_location: str,
) -> DashboardState:
    if isinstance(position, GeoUnavailable):
        logger.info("No position fix (%s); showing %s", position.reason, default_location)
        relabeled = state.snapshot.model_copy(update={"location": default_location})
        return replace(state, snapshot=relabeled, snapshot_live=False)

    raw_current = await client.fetch_current_conditions(
        latitude=position.latitude,
        longitude=position.longitude,
        language=state.language,
    )
    snapshot = normalize_snapshot(raw_current)
    if isinstance(snapshot, Unavailable):
        logger.warning("Current conditions unavailable; keeping previous dashboard state")
        return state

    raw_hourly, raw_daily = await asyncio.gather(
        client.fetch_hourly(location=snapshot.location, language=state.language),
        client.fetch_daily(location=snapshot.location, language=state.language),
    )
    return replace(
        state,
        snapshot=snapshot,
        snapshot_live=True,
        hourly=tuple(normalize_hourly(raw_hourly)),
        daily=tuple(normalize_daily(raw_daily)),
    )


def build_context_summary(state: DashboardState) -> str:
    snapshot = state.snapshot
    return (
        f"Current Weather in {snapshot.location}: {_fmt_number(snapshot.temperature)}°C, "
        f"{snapshot.condition.value}. Humidity: {_fmt_number(snapshot.humidity)}%, "
        f"Air: {snapshot.air_status}. Advice: {snapshot.description}. App: EnvWrist. "
        f"Current language: {state.language}. "
        f"Current strict temp range: {MIN_TEMPERATURE_C:.0f}-{MAX_TEMPERATURE_C:.0f}°C."
    )


async def send_chat(state: DashboardState, client: ChatSource, text: str) -> DashboardState:
    if not text.strip():
        return state

    user_turn = ChatTurn(role=ChatRole.USER, text=text)
    context = build_context_summary(state)
    state = replace(state, transcript=state.transcript + (user_turn,))

    reply = await client.fetch_chat_reply(user_text=text, context_summary=context, language=state.language)
    return replace(state, transcript=state.transcript + (ChatTurn(role=ChatRole.ASSISTANT, text=reply),))


def _fmt_number(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    if abs(value - int(value)) < 0.05:
        return str(int(round(value)))
    return f"{value:.1f}"
