"""
Configuration Management Module

Defines the immutable header configuration consumed by the middleware and the
application settings loaded from environment variables or a .env file.
"""

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HeadersConfig(BaseModel):
    """
    Header Injection Configuration

    Built once per middleware instance and shared read-only by every request
    it serves. Accepts both the camelCase keys of dynamic configuration files
    and the Python field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    # Headers injected into requests when missing
    request_headers: dict[str, str] = Field(default_factory=dict, alias="requestHeaders")
    # Headers injected into responses when missing
    response_headers: dict[str, str] = Field(default_factory=dict, alias="responseHeaders")
    # Bypass rules: header name -> expected value ("" matches on presence only)
    bypass_headers: dict[str, str] = Field(default_factory=dict, alias="bypassHeaders")
    # True: add only if the header is absent; False: also add if it is empty
    strict_header_check: bool = Field(True, alias="strictHeaderCheck")
    # Suppress the automatic flush after every response body write
    disable_explicit_flush: bool = Field(False, alias="disableExplicitFlush")

    @field_validator("request_headers", "response_headers", "bypass_headers")
    @classmethod
    def validate_latin1(cls, headers: dict[str, str]) -> dict[str, str]:
        """Header names and values must be encodable as latin-1 to go on the wire"""
        for name, value in headers.items():
            for text in (name, value):
                try:
                    text.encode("latin-1")
                except UnicodeEncodeError as exc:
                    raise ValueError(
                        f"Header {name!r} contains characters not encodable as latin-1: {text!r}"
                    ) from exc
        return headers


def create_config() -> HeadersConfig:
    """
    Create the default header configuration

    Returns a fresh instance on every call so that middleware instances never
    share mutable defaults.

    Returns:
        HeadersConfig: Empty header maps, strict check, automatic flush enabled
    """
    return HeadersConfig()


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    Mapping values are given as JSON objects, e.g. RESPONSE_HEADERS='{"X-Frame-Options": "DENY"}'.
    """

    # Application Config
    APP_NAME: str = "Add Missing Headers"
    DEBUG: bool = False

    # Server Config
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Header Injection Config
    REQUEST_HEADERS: dict[str, str] = {}
    RESPONSE_HEADERS: dict[str, str] = {}
    BYPASS_HEADERS: dict[str, str] = {}
    STRICT_HEADER_CHECK: bool = True
    DISABLE_EXPLICIT_FLUSH: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def to_headers_config(self) -> HeadersConfig:
        """Build the middleware configuration from these settings."""
        return HeadersConfig(
            request_headers=self.REQUEST_HEADERS,
            response_headers=self.RESPONSE_HEADERS,
            bypass_headers=self.BYPASS_HEADERS,
            strict_header_check=self.STRICT_HEADER_CHECK,
            disable_explicit_flush=self.DISABLE_EXPLICIT_FLUSH,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
