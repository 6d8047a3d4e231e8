# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

DEFAULT_PORT = 5439
DEFAULT_SCHEMA = "public"
DEFAULT_CONNECTION_TIMEOUT_MS = 30000
TEST_CONNECTION_TIMEOUT_MS = 5000


class _HostModel(BaseModel):
    """Base for payloads sent by the host; accepts camelCase or snake_case keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ConfigValue(_HostModel):
    """A single templated value, sent by the host as ``{"value": ...}``."""

    value: Optional[str] = Field(default=None, description="Configured value")


class Endpoint(_HostModel):
    host: Optional[str] = Field(default=None, description="Redshift cluster endpoint")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Redshift server port")


class CustomAuthentication(_HostModel):
    database_name: Optional[ConfigValue] = Field(default=None, alias="databaseName", description="Database name")
    database_schema: Optional[ConfigValue] = Field(
        default=None, alias="databaseSchema", description="Schema used for metadata"
    )


class Authentication(_HostModel):
    username: Optional[str] = Field(default=None, description="Redshift username")
    password: Optional[str] = Field(default=None, description="Redshift password")
    custom: Optional[CustomAuthentication] = Field(default=None, description="Database and schema selection")


class ConnectionOptions(_HostModel):
    use_ssl: bool = Field(default=False, alias="useSsl", description="Enable SSL connection")
    # verify-ca skips the hostname check; verify-full must be requested explicitly
    ssl_mode: Literal["verify-ca", "verify-full"] = Field(
        default="verify-ca", alias="sslMode", description="Driver sslmode when SSL is enabled"
    )


class RedshiftDatasourceConfiguration(_HostModel):
    """
    Connection parameters for one Redshift target.

    Every block is optional at parse time so that a partially filled form from
    the host can still be loaded; ``validate_datasource_configuration`` decides
    whether it is complete enough to connect.
    """

    endpoint: Optional[Endpoint] = None
    authentication: Optional[Authentication] = None
    connection: Optional[ConnectionOptions] = None

    @property
    def database_name(self) -> Optional[str]:
        custom = self.authentication.custom if self.authentication else None
        if custom and custom.database_name:
            return custom.database_name.value
        return None

    @property
    def schema_name(self) -> Optional[str]:
        custom = self.authentication.custom if self.authentication else None
        if custom and custom.database_schema:
            return custom.database_schema.value
        return None

    @property
    def use_ssl(self) -> bool:
        return bool(self.connection and self.connection.use_ssl)

    @property
    def display_endpoint(self) -> str:
        """``host:port`` for log lines."""
        if not self.endpoint:
            return "None:None"
        return f"{self.endpoint.host}:{self.endpoint.port}"


class RedshiftActionConfiguration(_HostModel):
    body: Optional[str] = Field(default=None, description="SQL statement to execute")


def load_datasource_configuration(
    config: Union[RedshiftDatasourceConfiguration, Dict[str, Any], None],
) -> Optional[RedshiftDatasourceConfiguration]:
    """Accept a model or the host's dict payload. ``None`` is passed through for the validator."""
    if config is None or isinstance(config, RedshiftDatasourceConfiguration):
        return config
    if isinstance(config, dict):
        try:
            return RedshiftDatasourceConfiguration.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid datasource configuration for Redshift step, {e}") from e
    raise ConfigurationError(
        f"datasource configuration must be RedshiftDatasourceConfiguration or dict, got {type(config)}"
    )


def load_action_configuration(
    config: Union[RedshiftActionConfiguration, Dict[str, Any], None],
) -> RedshiftActionConfiguration:
    if config is None:
        return RedshiftActionConfiguration()
    if isinstance(config, RedshiftActionConfiguration):
        return config
    if isinstance(config, dict):
        try:
            return RedshiftActionConfiguration.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid action configuration for Redshift step, {e}") from e
    raise ConfigurationError(f"action configuration must be RedshiftActionConfiguration or dict, got {type(config)}")


def validate_datasource_configuration(
    config: Union[RedshiftDatasourceConfiguration, Dict[str, Any], None],
) -> RedshiftDatasourceConfiguration:
    """
    Check that a datasource configuration can be used to open a connection.

    Runs before any network I/O. The first missing field wins.

    Args:
        config: Configuration model or host dict

    Returns:
        The parsed configuration

    Raises:
        ConfigurationError: If the configuration, its endpoint or host, its
            authentication block or the database name is missing
    """
    config = load_datasource_configuration(config)
    if config is None:
        raise ConfigurationError(
            "Datasource configuration not specified for Redshift step", field="datasourceConfiguration"
        )
    if not config.endpoint:
        raise ConfigurationError("Endpoint not specified for Redshift step", field="endpoint")
    if not config.endpoint.host:
        raise ConfigurationError("Host not specified for Redshift step", field="endpoint.host")
    if not config.authentication:
        raise ConfigurationError("Auth not specified for Redshift step", field="authentication")
    if not config.database_name:
        raise ConfigurationError(
            "Database name not specified for Redshift step", field="authentication.custom.databaseName.value"
        )
    return config


def resolve_schema_name(config: RedshiftDatasourceConfiguration) -> str:
    """Schema used for metadata; falls back to ``public``."""
    return config.schema_name or DEFAULT_SCHEMA
