# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

from typing import Any, Dict, List, Optional, Union

from datus.utils.loggings import get_logger
from pydantic import ValidationError

from .config import (
    TEST_CONNECTION_TIMEOUT_MS,
    RedshiftActionConfiguration,
    RedshiftDatasourceConfiguration,
    load_action_configuration,
    resolve_schema_name,
    validate_datasource_configuration,
)
from .connection import open_connection, release_connection
from .errors import (
    ConfigurationError,
    ConnectivityError,
    QueryExecutionError,
    RedshiftPluginError,
    driver_error_message,
)
from .lifecycle import execute_query
from .mapping import build_schema, normalize_output
from .models import DatabaseSchemaMetadata, DatasourceMetadata, ExecutionOutput, PluginExecutionProps

logger = get_logger(__name__)

TEST_QUERY = "SELECT NOW()"
SCHEMA_QUERY = "SELECT * FROM pg_table_def WHERE schemaname = %s"

DatasourceConfigurationInput = Union[RedshiftDatasourceConfiguration, Dict[str, Any], None]


class RedshiftPlugin:
    """
    Redshift datasource plugin.

    Each public operation validates its configuration, opens its own
    connection, runs a single statement and closes the connection on every
    exit path. The plugin keeps no per-call state, so one instance can serve
    concurrent calls.
    """

    # Prepared-statement values arrive as an ordered list
    use_ordered_parameters = True

    def execute(self, props: Union[PluginExecutionProps, Dict[str, Any]]) -> ExecutionOutput:
        """
        Run the action's statement and return its rows.

        An empty statement returns an empty output without connecting.

        Args:
            props: Execution context, datasource configuration and action configuration

        Returns:
            ExecutionOutput with normalized rows

        Raises:
            ConfigurationError: If the datasource configuration is incomplete
            ConnectivityError: If the connection cannot be opened
            QueryExecutionError: If the statement fails
        """
        props = self._load_props(props)
        config = validate_datasource_configuration(props.datasource_configuration)
        ret = ExecutionOutput()
        query = props.action_configuration.body
        if not query or not query.strip():
            return ret

        params = props.context.prepared_statement_context
        client = open_connection(config)
        try:
            rows = execute_query(lambda: client.query(query, params))
            ret.output = normalize_output(rows)
            return ret
        except RedshiftPluginError:
            raise
        except Exception as e:
            raise QueryExecutionError(f"Redshift query failed, {driver_error_message(e)}") from e
        finally:
            release_connection(client)

    def get_request(
        self, action_configuration: Union[RedshiftActionConfiguration, Dict[str, Any], None]
    ) -> Optional[str]:
        return load_action_configuration(action_configuration).body

    def dynamic_properties(self) -> List[str]:
        return ["body"]

    def metadata(self, datasource_configuration: DatasourceConfigurationInput) -> DatasourceMetadata:
        """
        List the tables and columns of the configured schema (``public`` by default).

        Raises:
            ConfigurationError: If the datasource configuration is incomplete
            ConnectivityError: If connecting or reading the catalog fails
        """
        config = validate_datasource_configuration(datasource_configuration)
        schema_name = resolve_schema_name(config)
        client = open_connection(config)
        try:
            rows = execute_query(lambda: client.query(SCHEMA_QUERY, [schema_name]))
            tables = build_schema(rows)
            logger.debug(f"Loaded {len(tables)} Redshift tables from schema {schema_name}. {config.display_endpoint}")
            return DatasourceMetadata(db_schema=DatabaseSchemaMetadata(tables=tables))
        except RedshiftPluginError:
            raise
        except Exception as e:
            raise ConnectivityError(f"Failed to connect to Redshift, {driver_error_message(e)}") from e
        finally:
            release_connection(client)

    def test(self, datasource_configuration: DatasourceConfigurationInput) -> None:
        """Open a connection with the short timeout and run a liveness query. Returns nothing on success."""
        config = validate_datasource_configuration(datasource_configuration)
        client = open_connection(config, TEST_CONNECTION_TIMEOUT_MS)
        try:
            execute_query(lambda: client.query(TEST_QUERY))
        except RedshiftPluginError:
            raise
        except Exception as e:
            raise ConnectivityError(f"Test Redshift connection failed, {driver_error_message(e)}") from e
        finally:
            release_connection(client)

    @staticmethod
    def _load_props(props: Union[PluginExecutionProps, Dict[str, Any]]) -> PluginExecutionProps:
        if isinstance(props, PluginExecutionProps):
            return props
        if isinstance(props, dict):
            try:
                return PluginExecutionProps.model_validate(props)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid execution props for Redshift step, {e}") from e
        raise ConfigurationError(f"props must be PluginExecutionProps or dict, got {type(props)}")

