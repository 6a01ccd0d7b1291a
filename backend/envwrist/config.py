from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    app_name: str = "EnvWrist API"
    app_version: str = "1.0.0"
    genai_api_key: str = ""
    genai_model: str = "gemini-2.0-flash"
    genai_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    search_grounding: bool = True
    request_timeout_seconds: float = 20.0
    default_location: str = "Semarang (Default)"
    log_level: str = "INFO"
    frontend_origins: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")


def get_settings() -> Settings:
    api_key_raw = os.getenv("GEMINI_API_KEY", "").strip() or os.getenv("API_KEY", "").strip()
    model_raw = os.getenv("GENAI_MODEL", "").strip()
    base_url_raw = os.getenv("GENAI_BASE_URL", "").strip()
    grounding_raw = os.getenv("GENAI_SEARCH_GROUNDING", "").strip().lower()
    timeout_raw = os.getenv("REQUEST_TIMEOUT_SECONDS", "").strip()
    default_location_raw = os.getenv("DEFAULT_LOCATION", "").strip()
    log_level_raw = os.getenv("LOG_LEVEL", "").strip().upper()
    origins_raw = os.getenv("FRONTEND_ORIGINS", "").strip()

    parsed_origins = tuple(item.strip() for item in origins_raw.split(",") if item.strip())

    try:
        request_timeout_seconds = float(timeout_raw) if timeout_raw else Settings.request_timeout_seconds
    except ValueError:
        request_timeout_seconds = Settings.request_timeout_seconds

    if grounding_raw:
        search_grounding = grounding_raw in {"1", "true", "yes", "on"}
    else:
        search_grounding = Settings.search_grounding

    return Settings(
        genai_api_key=api_key_raw,
        genai_model=model_raw or Settings.genai_model,
        genai_base_url=(base_url_raw or Settings.genai_base_url).rstrip("/"),
        search_grounding=search_grounding,
        request_timeout_seconds=max(1.0, request_timeout_seconds),
        default_location=default_location_raw or Settings.default_location,
        log_level=log_level_raw or Settings.log_level,
        frontend_origins=parsed_origins or Settings.frontend_origins,
    )
