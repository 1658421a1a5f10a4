"""Configuration settings for the application.

This module defines the configuration settings using Pydantic's
SettingsConfigDict to load environment variables from a .env file.
"""

import logging
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("uvicorn")


class Settings(BaseSettings):
    """Settings class for the application."""

    # ENVIRONMENT CONFIG
    environment: str = "dev"
    testing: bool = bool(0)

    # API CONFIG
    project_name: str = "Floorplan API"
    api_v1_str: str = "/api/v1"
    backend_cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # DATABASE CONFIG
    rooms_db_uri: str = "/data/rooms.db"

    # AUTHENTICATION CONFIG
    auth_password: Optional[str] = None
    staff_password: Optional[str] = None
    jwt_secret: Optional[str] = None
    jwt_expiration_days: int = 30

    # GRID CONFIG
    cell_pixel_size: int = 60
    cell_inset_px: int = 4
    grid_min_size: int = 5
    grid_max_size: int = 20
    default_grid_width: int = 10
    default_grid_height: int = 8
    collision_policy: Literal["anchor", "footprint"] = "anchor"

    model_config = SettingsConfigDict(
        env_prefix="FLOORPLAN_",
        env_file=["../.env", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get the settings for the application."""
    logger.info("Loading config settings from the environment...")

    settings = Settings()

    if settings.auth_password:
        logger.info("Manager password is set")
    else:
        logger.warning("Manager password is not set, logins will be refused")

    if settings.collision_policy == "footprint":
        logger.info("Table collisions are checked against full footprints")

    return settings
