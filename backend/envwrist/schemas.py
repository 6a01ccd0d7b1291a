from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


MIN_TEMPERATURE_C = 28.0
MAX_TEMPERATURE_C = 32.0


class Condition(str, Enum):
    SUNNY = "Sunny"
    CLOUDY = "Cloudy"
    RAINY = "Rainy"
    THUNDER = "Thunder"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    NOON = "noon"
    AFTERNOON = "afternoon"
    NIGHT = "night"


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    temperature: float = Field(
        ge=MIN_TEMPERATURE_C,
        le=MAX_TEMPERATURE_C,
        validation_alias=AliasChoices("temperature", "temp"),
    )
    condition: Condition
    location: str
    pressure: float
    altitude: float
    humidity: float
    voc: float
    air_status: str = Field(validation_alias=AliasChoices("air_status", "airStatus"))
    description: str = ""


class HourlyPoint(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    time: str
    temperature: float = Field(
        ge=MIN_TEMPERATURE_C,
        le=MAX_TEMPERATURE_C,
        validation_alias=AliasChoices("temperature", "temp"),
    )
    condition: Condition


class ForecastDay(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    day_name: str = Field(validation_alias=AliasChoices("day_name", "dayName"))
    temperature: float = Field(
        ge=MIN_TEMPERATURE_C,
        le=MAX_TEMPERATURE_C,
        validation_alias=AliasChoices("temperature", "temp"),
    )
    condition: Condition


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: ChatRole
    text: str


class Unavailable:
    """Marks a snapshot that could not be produced, as opposed to an empty one."""

    _instance: Unavailable | None = None

    def __new__(cls) -> Unavailable:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable()

SnapshotResult = WeatherSnapshot | Unavailable


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = Field(max_length=2000)
    language: str = Field(default="en", max_length=10)
    snapshot: dict[str, Any] | None = Field(
        default=None,
        description="Snapshot currently shown to the user; normalized, then summarized as chat context.",
    )
    transcript: list[ChatTurn] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_message(self) -> "ChatRequest":
        if not self.message.strip():
            raise ValueError("Provide a non-empty message.")
        return self
