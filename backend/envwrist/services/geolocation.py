from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoPosition:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeoUnavailable:
    reason: str


GeoResult = GeoPosition | GeoUnavailable

PositionSource = Callable[[], Awaitable[tuple[float, float]]]


def position_from_coordinates(latitude: float | None, longitude: float | None) -> GeoResult:
    if latitude is None or longitude is None:
        return GeoUnavailable(reason="Coordinates were not provided.")
    if not (_is_finite(latitude) and _is_finite(longitude)):
        return GeoUnavailable(reason="Coordinates are not numeric.")
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        return GeoUnavailable(reason=f"Coordinates out of range: {latitude}, {longitude}.")
    return GeoPosition(latitude=float(latitude), longitude=float(longitude))


async def request_position(source: PositionSource, timeout_seconds: float | None = None) -> GeoResult:
    """
    Await a single position fix from ``source``.

    This is the awaitable entry point for callers that own a device position
    source, such as a background refresher or a script. HTTP routes receive
    coordinates as query parameters and go through ``position_from_coordinates``.

    Denial, errors and timeouts come back as ``GeoUnavailable`` so callers can
    fall back to the default location without handling exceptions.
    """
    try:
        latitude, longitude = await asyncio.wait_for(source(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.info("Position request timed out after %ss", timeout_seconds)
        return GeoUnavailable(reason="Position request timed out.")
    except Exception as exc:  # noqa: BLE001 - any provider failure means no fix
        logger.info("Position request failed: %s", exc)
        return GeoUnavailable(reason=str(exc) or exc.__class__.__name__)

    return position_from_coordinates(latitude, longitude)


def _is_finite(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
