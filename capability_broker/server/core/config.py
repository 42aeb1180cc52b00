"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.

The auto-approval switches are deliberately not part of ``Settings``: they are
read per decision by ``capability_broker.broker.policy.ApprovalSwitches``.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class DiscoveryConfig(BaseModel):
    """Where and how the host application's routes are discovered."""

    project_root: Path = Field(default=Path("."), alias="BROKER_PROJECT_ROOT", description="Host application root")
    api_dir: str = Field(
        default="app/api", alias="BROKER_API_DIR", description="Route tree, relative to the project root"
    )
    capabilities_path: str = Field(
        default=".generated/capabilities.json",
        alias="BROKER_CAPABILITIES_PATH",
        description="Optional capabilities description, relative to the project root",
    )
    route_manifest_path: Optional[str] = Field(
        default=None,
        alias="BROKER_ROUTE_MANIFEST_PATH",
        description="Build-time route manifest; when set it replaces the file-system scan",
    )
    ttl_seconds: float = Field(
        default=30.0, alias="BROKER_DISCOVERY_TTL_SECONDS", ge=0.0, description="Discovery cache freshness window"
    )

    model_config = {"populate_by_name": True}

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        return path if path.is_absolute() else self.project_root / path

    @property
    def api_root(self) -> Path:
        return self._resolve(self.api_dir)

    @property
    def capabilities_file(self) -> Path:
        return self._resolve(self.capabilities_path)

    @property
    def route_manifest_file(self) -> Optional[Path]:
        return self._resolve(self.route_manifest_path) if self.route_manifest_path else None


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(default="0.0.0.0", alias="BROKER_SERVER_HOST", description="Host address to bind to")
    server_port: int = Field(default=8000, alias="BROKER_SERVER_PORT", description="Port number")
    log_level: str = Field(
        default="INFO", alias="BROKER_LOG_LEVEL", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(default="detailed", alias="BROKER_LOG_FORMAT", description="simple, detailed or json")
    log_file_dir: str = Field(default="logs", alias="BROKER_LOG_FILE_DIR", description="Directory for the log file")
    enable_file_logging: bool = Field(default=False, alias="BROKER_ENABLE_FILE_LOGGING")

    # =====================================================================
    # Discovery Configuration
    # =====================================================================
    project_root: Path = Field(default=Path("."), alias="BROKER_PROJECT_ROOT")
    api_dir: str = Field(default="app/api", alias="BROKER_API_DIR")
    capabilities_path: str = Field(default=".generated/capabilities.json", alias="BROKER_CAPABILITIES_PATH")
    route_manifest_path: Optional[str] = Field(default=None, alias="BROKER_ROUTE_MANIFEST_PATH")
    discovery_ttl_seconds: float = Field(default=30.0, alias="BROKER_DISCOVERY_TTL_SECONDS", ge=0.0)

    # =====================================================================
    # Broker Configuration
    # =====================================================================
    public_api_prefix: str = Field(
        default="/api/", alias="BROKER_PUBLIC_API_PREFIX", description="Executable paths must start with this"
    )
    control_plane_prefix: str = Field(
        default="/api/ai/", alias="BROKER_CONTROL_PLANE_PREFIX", description="The broker's own namespace"
    )
    host_base_url: Optional[str] = Field(
        default=None,
        alias="BROKER_HOST_BASE_URL",
        description="Host application base URL; defaults to the origin of the inbound request",
    )
    upstream_timeout_seconds: float = Field(default=30.0, alias="BROKER_UPSTREAM_TIMEOUT_SECONDS", gt=0.0)
    max_batch_size: int = Field(default=50, alias="BROKER_MAX_BATCH_SIZE", ge=1)
    scoring_profile_path: Optional[str] = Field(default=None, alias="BROKER_SCORING_PROFILE_PATH")

    # =====================================================================
    # Identity Configuration
    # =====================================================================
    auth_cookie_name: str = Field(
        default="session_token", alias="BROKER_AUTH_COOKIE_NAME", description="Cookie carrying the session token"
    )

    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="JSON list of allowed origins")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def discovery(self) -> DiscoveryConfig:
        """Get discovery configuration from environment variables."""
        return DiscoveryConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def control_plane_mount(self) -> str:
        """The control-plane prefix as a router mount point (no trailing slash)."""
        return "/" + self.control_plane_prefix.strip("/")


settings = Settings()
