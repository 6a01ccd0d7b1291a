"""Repair layer between raw generative-AI output and the weather data model.

Every temperature leaving this module is clamped into the product range and
every condition is one of the four supported values. Other fields are only
checked for type presence.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from pydantic import ValidationError

from envwrist.schemas import (
    MAX_TEMPERATURE_C,
    MIN_TEMPERATURE_C,
    UNAVAILABLE,
    Condition,
    ForecastDay,
    HourlyPoint,
    SnapshotResult,
    WeatherSnapshot,
)


logger = logging.getLogger(__name__)

DEFAULT_CONDITION = Condition.CLOUDY
HOURLY_POINTS = 8
FORECAST_DAYS = 20

SNAPSHOT_NUMERIC_FIELDS = ("pressure", "altitude", "humidity", "voc")
SNAPSHOT_TEXT_FIELDS = (("location", "location"), ("airStatus", "air_status"), ("description", "description"))

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_CONDITION_VALUES = {item.value: item for item in Condition}


def parse_payload(text: str | None) -> Any | None:
    if not text or not text.strip():
        return None

    stripped = text.strip()
    fenced = _FENCE_PATTERN.match(stripped)
    if fenced:
        stripped = fenced.group(1)

    try:
        return json.loads(stripped)
    except ValueError:
        logger.warning("Discarding unparsable AI payload (%d chars)", len(text))
        return None


def clamp_temperature(value: float) -> float:
    return min(MAX_TEMPERATURE_C, max(MIN_TEMPERATURE_C, value))


def normalize_condition(value: object) -> Condition:
    if isinstance(value, Condition):
        return value
    if isinstance(value, str) and value in _CONDITION_VALUES:
        return _CONDITION_VALUES[value]
    return DEFAULT_CONDITION


def normalize_snapshot(payload: Any) -> SnapshotResult:
    if not isinstance(payload, dict):
        return UNAVAILABLE

    temperature = _as_temperature(_first_present(payload, "temp", "temperature"))
    if temperature is None:
        logger.warning("Snapshot payload has no numeric temperature")
        return UNAVAILABLE

    fields: dict[str, Any] = {
        "temperature": temperature,
        "condition": normalize_condition(payload.get("condition")),
    }

    for name in SNAPSHOT_NUMERIC_FIELDS:
        number = _as_number(payload.get(name))
        if number is None:
            logger.warning("Snapshot payload field %r is missing or not numeric", name)
            return UNAVAILABLE
        fields[name] = number

    for raw_name, name in SNAPSHOT_TEXT_FIELDS:
        text = _first_present(payload, raw_name, name)
        if not isinstance(text, str):
            logger.warning("Snapshot payload field %r is missing or not text", raw_name)
            return UNAVAILABLE
        fields[name] = text

    try:
        return WeatherSnapshot(**fields)
    except ValidationError as exc:
        logger.warning("Normalized snapshot failed validation: %s", exc)
        return UNAVAILABLE


def normalize_hourly(payload: Any, limit: int = HOURLY_POINTS) -> list[HourlyPoint]:
    points: list[HourlyPoint] = []
    for item in _as_list(payload):
        label, temperature, condition = _normalize_point(item, "time")
        if label is None or temperature is None:
            continue
        points.append(HourlyPoint(time=label, temperature=temperature, condition=condition))
    return points[:limit]


def normalize_daily(payload: Any, limit: int = FORECAST_DAYS) -> list[ForecastDay]:
    days: list[ForecastDay] = []
    for item in _as_list(payload):
        label, temperature, condition = _normalize_point(item, "dayName", "day_name")
        if label is None or temperature is None:
            continue
        days.append(ForecastDay(day_name=label, temperature=temperature, condition=condition))
    return days[:limit]


def decode_snapshot(text: str | None) -> SnapshotResult:
    return normalize_snapshot(parse_payload(text))


def decode_hourly(text: str | None) -> list[HourlyPoint]:
    return normalize_hourly(parse_payload(text))


def decode_daily(text: str | None) -> list[ForecastDay]:
    return normalize_daily(parse_payload(text))


def _normalize_point(item: object, *label_keys: str) -> tuple[str | None, float | None, Condition]:
    if not isinstance(item, dict):
        return None, None, DEFAULT_CONDITION

    label = _first_present(item, *label_keys)
    if not isinstance(label, str):
        label = None

    temperature = _as_temperature(_first_present(item, "temp", "temperature"))

    return label, temperature, normalize_condition(item.get("condition"))


def _as_list(payload: Any) -> list:
    if isinstance(payload, list):
        return payload
    if payload is not None:
        logger.warning("Expected a JSON array from the AI backend, got %s", type(payload).__name__)
    return []


def _first_present(payload: dict, *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _as_temperature(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        # Integers past the float range still saturate like any other reading.
        return MAX_TEMPERATURE_C if value > 0 else MIN_TEMPERATURE_C
    if math.isnan(number):
        return None
    return clamp_temperature(number)


def _as_number(value: object) -> float | None:
    # bool is an int subclass; JSON true/false is not a reading.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return value
