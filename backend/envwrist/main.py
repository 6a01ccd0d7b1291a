from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from envwrist.config import get_settings
from envwrist.schemas import ChatRequest, Unavailable
from envwrist.services.dashboard import (
    PLACEHOLDER_SNAPSHOT,
    DashboardState,
    is_bad_weather,
    refresh,
    send_chat,
    time_of_day_for,
)
from envwrist.services.genai_client import GenAIClient
from envwrist.services.geolocation import position_from_coordinates
from envwrist.services.localization import describe_languages, normalize_language
from envwrist.services.normalizer import normalize_daily, normalize_hourly, normalize_snapshot


settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

genai_client = GenAIClient(settings=settings)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await genai_client.close()


@app.get("/api/health")
async def health() -> dict:
    return {
        "status": "ok",
        "service": settings.app_name,
        "model": settings.genai_model,
        "timestamp_utc": datetime.now(tz=timezone.utc).isoformat(),
    }


@app.get("/api/languages")
async def languages() -> dict:
    return {"default": "en", "languages": describe_languages()}


@app.get("/api/weather/current")
async def current_conditions(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    language: str = Query(default="en", max_length=10),
) -> dict:
    normalized_language = normalize_language(language)
    raw = await genai_client.fetch_current_conditions(
        latitude=latitude,
        longitude=longitude,
        language=normalized_language,
    )
    snapshot = normalize_snapshot(raw)
    if isinstance(snapshot, Unavailable):
        return {"status": "unavailable", "language": normalized_language, "snapshot": None}
    return {"status": "ok", "language": normalized_language, "snapshot": snapshot.model_dump(mode="json")}


@app.get("/api/weather/hourly")
async def hourly_forecast(
    location: str = Query(min_length=1, max_length=120),
    language: str = Query(default="en", max_length=10),
) -> dict:
    normalized_language = normalize_language(language)
    raw = await genai_client.fetch_hourly(location=location, language=normalized_language)
    points = normalize_hourly(raw)
    return {
        "location": location,
        "language": normalized_language,
        "hourly": [point.model_dump(mode="json") for point in points],
    }


@app.get("/api/weather/daily")
async def daily_forecast(
    location: str = Query(min_length=1, max_length=120),
    language: str = Query(default="en", max_length=10),
) -> dict:
    normalized_language = normalize_language(language)
    raw = await genai_client.fetch_daily(location=location, language=normalized_language)
    days = normalize_daily(raw)
    return {
        "location": location,
        "language": normalized_language,
        "daily": [day.model_dump(mode="json") for day in days],
    }


@app.get("/api/dashboard")
async def dashboard(
    latitude: float | None = Query(default=None, ge=-90, le=90),
    longitude: float | None = Query(default=None, ge=-180, le=180),
    language: str = Query(default="en", max_length=10),
    hour: int | None = Query(default=None, ge=0, le=23),
) -> dict:
    local_hour = hour if hour is not None else datetime.now().hour
    state = DashboardState(
        language=normalize_language(language),
        time_of_day=time_of_day_for(local_hour),
    )
    position = position_from_coordinates(latitude, longitude)
    state = await refresh(state, genai_client, position, default_location=settings.default_location)
    return _serialize_state(state)


@app.post("/api/chat")
async def chat(payload: ChatRequest) -> dict:
    snapshot = normalize_snapshot(payload.snapshot)
    if isinstance(snapshot, Unavailable):
        snapshot = PLACEHOLDER_SNAPSHOT

    state = DashboardState(
        language=normalize_language(payload.language),
        snapshot=snapshot,
        transcript=tuple(payload.transcript),
    )
    state = await send_chat(state, genai_client, payload.message)
    return {
        "language": state.language,
        "reply": state.transcript[-1].text,
        "transcript": [turn.model_dump(mode="json") for turn in state.transcript],
    }


def _serialize_state(state: DashboardState) -> dict:
    return {
        "language": state.language,
        "time_of_day": state.time_of_day.value,
        "snapshot": state.snapshot.model_dump(mode="json"),
        "snapshot_live": state.snapshot_live,
        "bad_weather": is_bad_weather(state.snapshot),
        "hourly": [point.model_dump(mode="json") for point in state.hourly],
        "daily": [day.model_dump(mode="json") for day in state.daily],
        "generated_at_utc": datetime.now(tz=timezone.utc).isoformat(),
    }
