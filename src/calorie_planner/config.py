"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from calorie_planner.services.dates import DEFAULT_TIMEZONE

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "medium"
    openai_store: bool = False
    mercadopago_access_token: str | None = None
    mercadopago_base_url: str = "https://api.mercadopago.com"
    mercadopago_back_url: str = "http://localhost:3000/pro-dashboard"
    client_slot_price: float = 5000.0
    client_slot_currency: str = "ARS"
    free_client_slots: int = 2
    plan_timezone: str = DEFAULT_TIMEZONE
    autosave_delay_seconds: float = 1.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
