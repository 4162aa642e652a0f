"""
PDF Capture Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
Settings are frozen once loaded; the rendering constants below are treated as
read-only process configuration.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class CaptureSettings(BaseSettings):
    """
    PDF capture service configuration with validation.

    All settings can be overridden via environment variables (or a .env file).
    """

    # === Deployment ===
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    # === Browser provisioning ===
    browser_provider: str = Field(
        default="local",
        description="Browser provisioning strategy: 'local' or 'managed'"
    )
    serverless_env: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("serverless_env", "VERCEL_ENV", "AWS_LAMBDA_FUNCTION_NAME"),
        description="Deployment marker set by the serverless host (managed provider only)"
    )
    chrome_executable_path: Optional[str] = Field(
        default=None,
        description="Explicit browser binary used when no deployment marker is present"
    )
    managed_chromium_dir: str = Field(
        default="/tmp/chromium",
        description="Directory holding the packaged minimal Chromium builds"
    )
    headless: bool = Field(default=True, description="Launch Chromium headless")
    validate_browser_on_startup: bool = Field(
        default=True,
        description="Render a probe PDF at startup so /health reflects browser readiness"
    )

    # === Page geometry ===
    px_per_inch: int = Field(default=96, ge=1)
    max_page_inches: int = Field(default=199, ge=1)
    mobile_scale_divisor: float = Field(default=1.05, gt=0)
    desktop_width: int = Field(default=640, ge=1)
    desktop_height: int = Field(default=800, ge=1)

    # === Timing (milliseconds) ===
    navigation_timeout_ms: int = Field(default=60000, ge=1000)
    ready_state_timeout_ms: int = Field(default=3000, ge=0)
    settle_delay_ms: int = Field(default=500, ge=0)

    # === Observability ===
    usage_log_enabled: bool = Field(default=True)

    # === CORS ===
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v_upper = v.upper()
        if not isinstance(logging.getLevelName(v_upper), int):
            raise ValueError(f"Unknown log level: {v}")
        return v_upper

    @field_validator("browser_provider")
    @classmethod
    def validate_browser_provider(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in {"local", "managed"}:
            raise ValueError("browser_provider must be 'local' or 'managed'")
        return v_lower

    @property
    def max_page_px(self) -> int:
        """Tallest mobile page Chromium is asked to produce."""
        return self.max_page_inches * self.px_per_inch

    @property
    def is_managed_deployment(self) -> bool:
        """True when a serverless host marker is present."""
        return bool(self.serverless_env)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False
        env_file = ".env"
        extra = "ignore"
        frozen = True
        populate_by_name = True


@lru_cache()
def get_settings() -> CaptureSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. Use this function (or the FastAPI
    dependency of the same name) to access configuration throughout the app.
    """
    return CaptureSettings()
