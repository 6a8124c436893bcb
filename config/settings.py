"""
Configuration settings for the admin backend
"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trial / alumni lifecycle constants (days)
TRIAL_EXTENSION_DAYS = 30
ALUMNI_EXTENSION_DAYS = 90
MIN_TRIAL_DAYS = 1
MAX_TRIAL_DAYS = 120

# Activity windows used by the engagement score and the detail view
ACTIVITY_WINDOW_DAYS = 7
EXTENDED_WINDOW_DAYS = 30

# Plan / subscription values stored on profiles
PLAN_TRIAL = "trial"
PLAN_PAID = "paid"
SUBSCRIPTION_MONTHLY = "monthly"
SUBSCRIPTION_YEARLY = "yearly"

# Alumni application states
ALUMNI_PENDING = "pending"
ALUMNI_APPROVED = "approved"
ALUMNI_REJECTED = "rejected"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,  # Allow both field name and alias
        extra="ignore",
    )

    # Infrastructure configuration
    database_url: Optional[str] = Field(default="sqlite+aiosqlite:///./sql_app.db", alias="DATABASE_URL")

    # Frontend configuration (CORS origin of the admin UI)
    frontend_url: Optional[str] = Field(default="http://localhost:3000", alias="FRONTEND_URL")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Render.com deployment configuration
    render: Optional[str] = Field(default=None, alias="RENDER")

    # Environment configuration
    env: Optional[str] = Field(default=None, alias="ENV")


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = bool(settings.render) or bool(settings.env and settings.env.lower() == "production")
