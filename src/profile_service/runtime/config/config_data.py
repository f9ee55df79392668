"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.engine import URL, make_url


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str = Field(default="", description="Log file path (empty disables the file sink)")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    sql_level: str = Field(
        default="WARNING",
        description="Level of the sqlalchemy.engine logger (INFO logs every statement)",
    )


class DatabaseConfig(BaseModel):
    """Database configuration model.

    Either a complete ``url`` is given, or the connection string is assembled
    from ``host``/``port``/``user``/``password``/``name``.
    """

    url: str | None = Field(
        default=None,
        description="Full database URL; overrides the individual connection fields",
    )
    driver: str = Field(default="postgresql+psycopg2", description="SQLAlchemy driver")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    user: str = Field(default="postgres", description="Database username")
    password: str | None = Field(default="password", description="Database password")
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )
    name: str = Field(default="userservice", description="Database name")

    max_open_connections: int = Field(
        default=10, description="Upper bound on simultaneously open connections"
    )
    max_idle_connections: int = Field(
        default=5, description="Connections kept open while idle"
    )
    conn_max_lifetime_seconds: int = Field(
        default=3600, description="Connections older than this are recycled"
    )
    pool_timeout_seconds: int = Field(
        default=30, description="Seconds a caller waits for a free connection"
    )

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> DatabaseConfig:
        if self.max_open_connections < 1:
            raise ValueError("max_open_connections must be at least 1")
        # pool_size=0 means "no limit" to SQLAlchemy, not "keep nothing idle"
        if self.max_idle_connections < 1:
            raise ValueError("max_idle_connections must be at least 1")
        if self.max_idle_connections > self.max_open_connections:
            raise ValueError(
                "max_idle_connections cannot exceed max_open_connections"
            )
        return self

    @property
    def resolved_password(self) -> str | None:
        """Resolve the password, preferring a mounted secrets file."""
        if self.password_file:
            try:
                with open(self.password_file) as f:
                    return f.read().strip()
            except OSError as e:
                raise ValueError("Failed to read database password from file.") from e
        return self.password

    @property
    def pool_size(self) -> int:
        return self.max_idle_connections

    @property
    def max_overflow(self) -> int:
        return self.max_open_connections - self.max_idle_connections

    @property
    def connection_string(self) -> str:
        """Construct the SQLAlchemy connection string."""
        if self.url:
            base_url = make_url(self.url)
            if base_url.password is None and self.password_file:
                base_url = base_url.set(password=self.resolved_password)
            return base_url.render_as_string(hide_password=False)

        return URL.create(
            drivername=self.driver,
            username=self.user,
            password=self.resolved_password,
            host=self.host,
            port=self.port,
            database=self.name,
        ).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")


class MetricsConfig(BaseModel):
    """Prometheus exposition configuration."""

    enabled: bool = Field(default=True, description="Record and expose metrics")
    path: str = Field(default="/metrics", description="Exposition endpoint path")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    name: str = Field(default="profile-service", description="Service name")
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, description="Bind port")

    @property
    def base_url(self) -> str:
        host = "localhost" if self.host == "0.0.0.0" else self.host
        return f"http://{host}:{self.port}"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig, description="Metrics configuration"
    )

    @model_validator(mode="after")
    def _warn_on_production_defaults(self) -> ConfigData:
        if (
            self.app.environment == "production"
            and not self.database.url
            and not self.database.password_file
            and self.database.password == "password"
            and not os.getenv("DB_PASSWORD")
        ):
            logger.warning(
                "Database password is the built-in default in production; "
                "set DB_PASSWORD or database.password_file."
            )
        return self
