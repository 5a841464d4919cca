"""
Configuration Settings.

This module defines the capability hub configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class StorageConfig(BaseModel):
    """Local capability store configuration."""

    home_dir: Path = Field(
        default=Path("~/.capability-hub"),
        alias="CAPABILITY_HUB_HOME",
        description="Root directory holding center caches, installed capabilities and applications",
    )
    database_url: Optional[str] = Field(
        default=None,
        alias="CAPABILITY_HUB_DATABASE_URL",
        description="SQLAlchemy URL; when set the SQL-backed store is used instead of files",
    )
    template_ext: str = Field(
        default="cue", alias="CAPABILITY_HUB_TEMPLATE_EXT", description="File extension of cached template bodies"
    )

    model_config = {"populate_by_name": True}

    @property
    def root(self) -> Path:
        return self.home_dir.expanduser()

    @property
    def centers_dir(self) -> Path:
        return self.root / "centers"

    @property
    def capabilities_dir(self) -> Path:
        return self.root / "capabilities"

    @property
    def envs_dir(self) -> Path:
        return self.root / "envs"


class ClusterConfig(BaseModel):
    """Target cluster configuration."""

    system_namespace: str = Field(
        default="vela-system",
        alias="CAPABILITY_HUB_SYSTEM_NAMESPACE",
        description="Namespace definitions and capability charts are installed into",
    )
    helm_binary: str = Field(
        default="helm", alias="CAPABILITY_HUB_HELM_BINARY", description="Helm executable used for chart provisioning"
    )
    helm_timeout: float = Field(
        default=300.0, alias="CAPABILITY_HUB_HELM_TIMEOUT", description="Helm subprocess timeout in seconds"
    )

    model_config = {"populate_by_name": True}


class RegistryConfig(BaseModel):
    """Remote capability center transport configuration."""

    http_timeout: float = Field(
        default=10.0, alias="CAPABILITY_HUB_HTTP_TIMEOUT", description="HTTP timeout for manifest and template fetches"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Capability hub settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    home_dir: Path = Field(
        default=Path("~/.capability-hub"),
        description="Root directory for all locally persisted state",
        alias="CAPABILITY_HUB_HOME",
    )
    database_url: Optional[str] = Field(
        default=None,
        description="Optional SQLAlchemy URL for the SQL-backed capability store",
        alias="CAPABILITY_HUB_DATABASE_URL",
    )
    template_ext: str = Field(
        default="cue",
        description="File extension used for cached template bodies",
        alias="CAPABILITY_HUB_TEMPLATE_EXT",
    )
    system_namespace: str = Field(
        default="vela-system",
        description="Namespace for definitions and capability charts",
        alias="CAPABILITY_HUB_SYSTEM_NAMESPACE",
    )
    helm_binary: str = Field(
        default="helm",
        description="Helm executable used by the chart provisioner",
        alias="CAPABILITY_HUB_HELM_BINARY",
    )
    helm_timeout: float = Field(
        default=300.0,
        description="Helm subprocess timeout in seconds",
        alias="CAPABILITY_HUB_HELM_TIMEOUT",
    )
    http_timeout: float = Field(
        default=10.0,
        description="HTTP timeout for registry requests",
        alias="CAPABILITY_HUB_HTTP_TIMEOUT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="CAPABILITY_HUB_LOG_LEVEL",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def storage(self) -> StorageConfig:
        """Get local storage configuration from environment variables."""
        return StorageConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cluster(self) -> ClusterConfig:
        """Get cluster configuration from environment variables."""
        return ClusterConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def registry(self) -> RegistryConfig:
        """Get registry transport configuration from environment variables."""
        return RegistryConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
