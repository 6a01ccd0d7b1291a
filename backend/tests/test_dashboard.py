import asyncio

from envwrist.schemas import UNAVAILABLE, ChatRole, Condition, TimeOfDay
from envwrist.services.dashboard import (
    PLACEHOLDER_SNAPSHOT,
    DashboardState,
    build_context_summary,
    is_bad_weather,
    refresh,
    send_chat,
    time_of_day_for,
    with_hour,
    with_language,
)
from envwrist.services.genai_client import CHAT_FAILURE_FALLBACK
from envwrist.services.geolocation import GeoPosition, GeoUnavailable


class _FakeWeatherSource:
    def __init__(self, current=None) -> None:  # noqa: ANN001
        self.current = current
        self.calls: list[tuple] = []

    async def fetch_current_conditions(self, **kwargs):  # noqa: ANN003
        self.calls.append(("current", kwargs))
        if self.current is not None:
            return self.current
        return {
            "location": "Semarang",
            "temp": 41,
            "condition": "Thunder",
            "pressure": 1008,
            "altitude": 3,
            "humidity": 88,
            "voc": 0.2,
            "airStatus": "Good",
            "description": "Stay indoors during the storm.",
        }

    async def fetch_hourly(self, **kwargs):  # noqa: ANN003
        self.calls.append(("hourly", kwargs))
        return [{"time": f"{hour} PM", "temp": 25, "condition": "Rainy"} for hour in range(1, 9)]

    async def fetch_daily(self, **kwargs):  # noqa: ANN003
        self.calls.append(("daily", kwargs))
        return [{"dayName": f"Day {day}", "temp": 30, "condition": "Snow"} for day in range(20)]


class _FakeChatSource:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list[dict] = []

    async def fetch_chat_reply(self, **kwargs):  # noqa: ANN003
        self.calls.append(kwargs)
        return self.reply


def test_time_of_day_for_covers_the_whole_day() -> None:
    assert time_of_day_for(4) == TimeOfDay.NIGHT
    assert time_of_day_for(5) == TimeOfDay.MORNING
    assert time_of_day_for(10) == TimeOfDay.MORNING
    assert time_of_day_for(11) == TimeOfDay.NOON
    assert time_of_day_for(15) == TimeOfDay.NOON
    assert time_of_day_for(16) == TimeOfDay.AFTERNOON
    assert time_of_day_for(18) == TimeOfDay.AFTERNOON
    assert time_of_day_for(19) == TimeOfDay.NIGHT
    assert time_of_day_for(0) == TimeOfDay.NIGHT


def test_refresh_replaces_state_with_normalized_data() -> None:
    source = _FakeWeatherSource()
    initial = DashboardState(language="id")

    state = asyncio.run(
        refresh(initial, source, GeoPosition(latitude=-6.99, longitude=110.42), default_location="Semarang (Default)")
    )

    assert state is not initial
    assert initial.snapshot == PLACEHOLDER_SNAPSHOT
    assert state.snapshot_live is True
    assert state.snapshot.temperature == 32
    assert state.snapshot.condition == Condition.THUNDER
    assert len(state.hourly) == 8
    assert all(point.temperature == 28 for point in state.hourly)
    assert len(state.daily) == 20
    assert all(day.condition == Condition.CLOUDY for day in state.daily)
    assert source.calls[0] == ("current", {"latitude": -6.99, "longitude": 110.42, "language": "id"})
    assert {name for name, _ in source.calls[1:]} == {"hourly", "daily"}
    assert all(kwargs["location"] == "Semarang" for _, kwargs in source.calls[1:])


def test_refresh_without_position_relabels_previous_snapshot() -> None:
    source = _FakeWeatherSource()

    state = asyncio.run(
        refresh(DashboardState(), source, GeoUnavailable(reason="denied"), default_location="Semarang (Default)")
    )

    assert state.snapshot.location == "Semarang (Default)"
    assert state.snapshot.temperature == PLACEHOLDER_SNAPSHOT.temperature
    assert state.snapshot_live is False
    assert source.calls == []


def test_refresh_keeps_previous_state_when_conditions_unavailable() -> None:
    source = _FakeWeatherSource(current=UNAVAILABLE)
    initial = DashboardState(language="fr")

    state = asyncio.run(refresh(initial, source, GeoPosition(latitude=48.85, longitude=2.35), default_location="X"))

    assert state is initial
    assert [name for name, _ in source.calls] == ["current"]


def test_build_context_summary_mentions_weather_and_policy() -> None:
    summary = build_context_summary(DashboardState(language="ja"))

    assert summary.startswith("Current Weather in ...: 30°C, Sunny.")
    assert "Humidity: 50%" in summary
    assert "Air: Good" in summary
    assert "Current language: ja" in summary
    assert summary.endswith("Current strict temp range: 28-32°C.")


def test_send_chat_appends_user_and_assistant_turns() -> None:
    source = _FakeChatSource(reply="Hello there! 🌤️")
    initial = DashboardState()

    state = asyncio.run(send_chat(initial, source, "Is it hot?"))

    assert initial.transcript == ()
    assert [(turn.role, turn.text) for turn in state.transcript] == [
        (ChatRole.USER, "Is it hot?"),
        (ChatRole.ASSISTANT, "Hello there! 🌤️"),
    ]
    assert source.calls[0]["user_text"] == "Is it hot?"
    assert source.calls[0]["language"] == "en"
    assert "Current Weather in" in source.calls[0]["context_summary"]


def test_send_chat_records_fallback_apology_as_assistant_turn() -> None:
    source = _FakeChatSource(reply=CHAT_FAILURE_FALLBACK)

    state = asyncio.run(send_chat(DashboardState(), source, "Hello?"))

    assert state.transcript[-1].role == ChatRole.ASSISTANT
    assert state.transcript[-1].text == CHAT_FAILURE_FALLBACK


def test_send_chat_ignores_blank_messages() -> None:
    source = _FakeChatSource(reply="unused")
    initial = DashboardState()

    assert asyncio.run(send_chat(initial, source, "   ")) is initial
    assert source.calls == []


def test_with_language_and_bad_weather_flags() -> None:
    assert with_language(DashboardState(), "fr-FR").language == "fr"
    assert with_language(DashboardState(), "de").language == "en"
    assert is_bad_weather(PLACEHOLDER_SNAPSHOT) is False
    assert is_bad_weather(PLACEHOLDER_SNAPSHOT.model_copy(update={"air_status": "Bad"})) is True
    assert is_bad_weather(PLACEHOLDER_SNAPSHOT.model_copy(update={"condition": Condition.RAINY})) is True


def test_with_hour_replaces_time_of_day_only() -> None:
    initial = DashboardState(language="zh")

    state = with_hour(initial, 21)

    assert state.time_of_day == TimeOfDay.NIGHT
    assert state.language == "zh"
    assert initial.time_of_day == TimeOfDay.NOON


def test_build_context_summary_tolerates_non_finite_values() -> None:
    snapshot = PLACEHOLDER_SNAPSHOT.model_copy(update={"humidity": float("nan"), "voc": float("inf")})

    summary = build_context_summary(DashboardState(snapshot=snapshot))

    assert "Humidity: nan%" in summary
    assert "Air: Good" in summary
