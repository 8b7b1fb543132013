"""
Configuration Management for MilkyWay Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger itself has no external dependencies; the only remote
collaborator is Gemini, and it is optional. A missing API key is a
valid configuration, not a startup failure.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for ledger insights."""
    
    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (insights are disabled without it)"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for one insight request, retries included"
    )
    retry_attempts: int = Field(
        default=2,
        ge=1,
        le=5,
        description="How many times to try the model before giving up"
    )
    insight_record_limit: int = Field(
        default=90,
        ge=1,
        description="Most recent records sent to the model"
    )
    
    @field_validator('api_key')
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty GEMINI_API_KEY= line as no key at all."""
        if v is not None and not v.strip():
            return None
        return v
    
    @property
    def is_configured(self) -> bool:
        return self.api_key is not None


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="MILKYWAY_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    data_dir: Path = Field(
        default=Path(".milkyway"),
        description="Directory holding one file per stored key"
    )
    records_key: str = Field(
        default="milkyway_data_v1",
        pattern=r"^[A-Za-z0-9_.-]+$",
        description="Key of the records blob"
    )
    settings_key: str = Field(
        default="milkyway_settings_v1",
        pattern=r"^[A-Za-z0-9_.-]+$",
        description="Key of the ledger settings blob"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )
    
    # Export
    export_app_name: str = Field(
        default="milkyway",
        min_length=1,
        description="Prefix of exported CSV file names"
    )
    
    # Ledger settings used until the user saves their own
    default_price: float = Field(
        default=60.0,
        ge=0.0,
        description="Price per unit prefilled for new entries"
    )
    currency_symbol: str = Field(
        default="₹",
        min_length=1,
        description="Currency symbol used for display"
    )
    unit_label: str = Field(
        default="L",
        min_length=1,
        description="Unit label (L, gal, pkt...)"
    )
    
    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Sub-settings are loaded lazily so a broken group does not
    # prevent the others from loading
    
    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        results["gemini"] = settings.gemini.is_configured
        if not results["gemini"]:
            results["gemini_error"] = "GEMINI_API_KEY is not set"
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)
    
    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)
    
    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
    
    return results
