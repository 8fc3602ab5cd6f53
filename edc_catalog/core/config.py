"""
Application configuration.

Settings are read from environment variables, optionally loaded from a
`.env` file with python-dotenv.

Environment variables:
    - EDC_API_TITLE: Title shown in the OpenAPI docs (default: EDC Catalog)
    - EDC_PARTICIPANT_ID: Participant id used as the catalog id (default: provider)
    - EDC_MANAGEMENT_PATH: Base path of the management API (default: /api/management)
    - EDC_HOST: Interface to bind (default: 0.0.0.0)
    - EDC_MANAGEMENT_PORT: Port of the management API (default: 8181)
    - EDC_SEED_SAMPLE_DATA: Register the sample data on startup (default: true)
    - EDC_LOG_LEVEL: Root log level (default: INFO)
    - EDC_CORS_ORIGINS: Comma-separated allowed origins (default: *)
"""

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field


_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime settings of the catalog backend."""

    api_title: str = "EDC Catalog"
    participant_id: str = "provider"
    management_path: str = "/api/management"
    host: str = "0.0.0.0"
    management_port: int = 8181
    seed_sample_data: bool = True
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


def get_settings() -> Settings:
    """
    Builds the settings from the environment.

    The `.env` file, when present, is loaded first; variables already set in
    the process environment take precedence.

    Returns:
        Settings: The resolved settings.
    """

    load_dotenv()

    origins = os.getenv("EDC_CORS_ORIGINS", "*")

    return Settings(
        api_title=os.getenv("EDC_API_TITLE", "EDC Catalog"),
        participant_id=os.getenv("EDC_PARTICIPANT_ID", "provider"),
        management_path="/" + os.getenv("EDC_MANAGEMENT_PATH", "/api/management").strip("/"),
        host=os.getenv("EDC_HOST", "0.0.0.0"),
        management_port=int(os.getenv("EDC_MANAGEMENT_PORT", "8181")),
        seed_sample_data=os.getenv("EDC_SEED_SAMPLE_DATA", "true").strip().lower() in _TRUE_VALUES,
        log_level=os.getenv("EDC_LOG_LEVEL", "INFO").upper(),
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
    )
