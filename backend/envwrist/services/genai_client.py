from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from envwrist.config import Settings
from envwrist.schemas import MAX_TEMPERATURE_C, MIN_TEMPERATURE_C, UNAVAILABLE, Unavailable
from envwrist.services.localization import language_name
from envwrist.services.normalizer import FORECAST_DAYS, HOURLY_POINTS, parse_payload


logger = logging.getLogger(__name__)

EMPTY_REPLY_FALLBACK = "Oops, my clouds are a bit foggy. Can you ask again?"
CHAT_FAILURE_FALLBACK = "I'm having trouble connecting to the environmental satellites right now."

_TEMPERATURE_POLICY = f"STRICTLY between {MIN_TEMPERATURE_C:.0f} and {MAX_TEMPERATURE_C:.0f}"

CHAT_SYSTEM_INSTRUCTION = (
    "You are EnvAI, a friendly and cute environmental assistant for the EnvWrist app. "
    "Respond in {language}. Use simple, encouraging language suitable for 14-year-olds and seniors. "
    "Use emojis! Always answer in the requested language. "
    "Note: For this specific app, temperatures are strictly maintained between "
    f"{MIN_TEMPERATURE_C:.0f}°C and {MAX_TEMPERATURE_C:.0f}°C."
)

CURRENT_CONDITIONS_PROMPT = (
    "Find the current real-time weather and city name for coordinates: "
    "latitude {latitude}, longitude {longitude}.\n"
    f"Provide: City Name, Temperature in Celsius ({_TEMPERATURE_POLICY}), "
    "Condition (choose ONLY from: Sunny, Cloudy, Rainy, Thunder), Pressure (hPa), Altitude (meters), "
    "Humidity (%), VOC (ppm, 0.0-0.5), and Air Status (Good, Moderate, Bad).\n"
    'Include a "description" field which is a short 1-sentence advice or status update in {language}.'
)

HOURLY_PROMPT = (
    "Provide an hourly weather forecast for the next {count} hours for {location}. "
    f"Include Time (e.g., 2 PM), Temp ({_TEMPERATURE_POLICY}), "
    "and Condition (Sunny, Cloudy, Rainy, or Thunder). "
    "Translate the time format suitable for {language}."
)

DAILY_PROMPT = (
    "Provide a {count}-day weather forecast for {location}. "
    f"For each day, provide the Day Name, Estimated Temperature ({_TEMPERATURE_POLICY}), "
    "and Condition (Sunny, Cloudy, Rainy, or Thunder). Translate day names to {language}."
)

CURRENT_CONDITIONS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "location": {"type": "STRING"},
        "temp": {"type": "NUMBER"},
        "condition": {"type": "STRING"},
        "pressure": {"type": "NUMBER"},
        "altitude": {"type": "NUMBER"},
        "humidity": {"type": "NUMBER"},
        "voc": {"type": "NUMBER"},
        "airStatus": {"type": "STRING"},
        "description": {"type": "STRING"},
    },
    "required": ["location", "temp", "condition", "pressure", "altitude", "humidity", "voc", "airStatus", "description"],
}

HOURLY_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "time": {"type": "STRING"},
            "temp": {"type": "NUMBER"},
            "condition": {"type": "STRING"},
        },
        "required": ["time", "temp", "condition"],
    },
}

DAILY_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "dayName": {"type": "STRING"},
            "temp": {"type": "NUMBER"},
            "condition": {"type": "STRING"},
        },
        "required": ["dayName", "temp", "condition"],
    },
}


class GenAIError(RuntimeError):
    """Raised inside the client when the service answers with something unusable."""


@dataclass
class GenAIClient:
    settings: Settings
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds,
            transport=self.transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_chat_reply(self, user_text: str, context_summary: str, language: str) -> str:
        try:
            reply = await self._generate(
                prompt=f"Context: {context_summary}\n\nUser Question: {user_text}",
                system_instruction=CHAT_SYSTEM_INSTRUCTION.format(language=language_name(language)),
            )
        except (httpx.HTTPError, httpx.InvalidURL, GenAIError) as exc:
            logger.warning("Chat reply failed: %s", exc)
            return CHAT_FAILURE_FALLBACK

        return reply or EMPTY_REPLY_FALLBACK

    async def fetch_current_conditions(
        self, latitude: float, longitude: float, language: str
    ) -> dict | Unavailable:
        prompt = CURRENT_CONDITIONS_PROMPT.format(
            latitude=latitude,
            longitude=longitude,
            language=language_name(language),
        )
        try:
            text = await self._generate(prompt=prompt, response_schema=CURRENT_CONDITIONS_SCHEMA)
        except (httpx.HTTPError, httpx.InvalidURL, GenAIError) as exc:
            logger.warning("Current conditions request failed for %.4f,%.4f: %s", latitude, longitude, exc)
            return UNAVAILABLE

        payload = parse_payload(text)
        if not isinstance(payload, dict):
            logger.warning("Current conditions response was not a JSON object")
            return UNAVAILABLE
        return payload

    async def fetch_hourly(self, location: str, language: str) -> list:
        prompt = HOURLY_PROMPT.format(count=HOURLY_POINTS, location=location, language=language_name(language))
        return await self._fetch_array(prompt=prompt, response_schema=HOURLY_SCHEMA, label="Hourly forecast")

    async def fetch_daily(self, location: str, language: str) -> list:
        prompt = DAILY_PROMPT.format(count=FORECAST_DAYS, location=location, language=language_name(language))
        return await self._fetch_array(prompt=prompt, response_schema=DAILY_SCHEMA, label="Daily forecast")

    async def _fetch_array(self, *, prompt: str, response_schema: dict[str, Any], label: str) -> list:
        try:
            text = await self._generate(prompt=prompt, response_schema=response_schema)
        except (httpx.HTTPError, httpx.InvalidURL, GenAIError) as exc:
            logger.warning("%s request failed: %s", label, exc)
            return []

        payload = parse_payload(text)
        if not isinstance(payload, list):
            logger.warning("%s response was not a JSON array", label)
            return []
        return payload

    async def _generate(
        self,
        *,
        prompt: str,
        system_instruction: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        if not self.settings.genai_api_key:
            raise GenAIError("GEMINI_API_KEY is not configured.")

        body: dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
            if self.settings.search_grounding:
                body["tools"] = [{"google_search": {}}]

        url = f"{self.settings.genai_base_url}/models/{self.settings.genai_model}:generateContent"
        logger.debug("Calling %s", url)
        response = await self._client.post(
            url,
            json=body,
            headers={"x-goog-api-key": self.settings.genai_api_key},
        )
        response.raise_for_status()

        try:
            envelope = response.json()
        except ValueError as exc:
            raise GenAIError("Response body is not JSON.") from exc

        return _extract_text(envelope)


def _extract_text(envelope: object) -> str:
    if not isinstance(envelope, dict):
        raise GenAIError("Response envelope is not an object.")

    candidates = envelope.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        feedback = envelope.get("promptFeedback")
        raise GenAIError(f"Response has no candidates (feedback: {feedback}).")

    first = candidates[0] if isinstance(candidates[0], dict) else {}
    content = first.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise GenAIError(f"Candidate has no content parts (finish reason: {first.get('finishReason')}).")

    return "".join(part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str))
