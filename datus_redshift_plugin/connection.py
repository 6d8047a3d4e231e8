# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

import math
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import redshift_connector
from datus.utils.loggings import get_logger

from .config import DEFAULT_CONNECTION_TIMEOUT_MS, RedshiftDatasourceConfiguration, validate_datasource_configuration
from .errors import ConnectivityError, driver_error_message
from .lifecycle import create_connection, destroy_connection
from .mapping import unique_column_names

logger = get_logger(__name__)

CLIENT_EVENTS = ("error", "end", "notification", "notice")


class ClientState(str, Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


def _timeout_seconds(timeout_ms: int) -> int:
    # the driver takes whole seconds
    return max(1, math.ceil(timeout_ms / 1000))


class RedshiftClient:
    """
    One connection to a Redshift cluster, used by exactly one plugin operation.

    The client moves UNOPENED -> OPEN -> CLOSED and never back. Observers
    registered with ``on`` are notified of driver errors, disconnects, and the
    NOTICE and NOTIFY messages the server sent while a statement ran. Observers
    only observe: an exception raised by one is logged and dropped.
    """

    def __init__(self, connection_params: Dict[str, Any]):
        self.connection_params = connection_params
        self.state = ClientState.UNOPENED
        self._connection = None
        self._observers: Dict[str, List[Callable[[Any], None]]] = {event: [] for event in CLIENT_EVENTS}

    @classmethod
    def from_config(
        cls, config: RedshiftDatasourceConfiguration, timeout_ms: int = DEFAULT_CONNECTION_TIMEOUT_MS
    ) -> "RedshiftClient":
        connection_params = {
            "host": config.endpoint.host,
            "port": config.endpoint.port,
            "user": config.authentication.username,
            "password": config.authentication.password,
            "database": config.database_name,
            "timeout": _timeout_seconds(timeout_ms),
            "ssl": config.use_ssl,
        }
        if config.use_ssl:
            connection_params["sslmode"] = config.connection.ssl_mode
        return cls(connection_params)

    def on(self, event: str, callback: Callable[[Any], None]) -> None:
        if event not in self._observers:
            raise ValueError(f"Unknown client event '{event}', expected one of {CLIENT_EVENTS}")
        self._observers[event].append(callback)

    def _emit(self, event: str, payload: Any = None) -> None:
        for callback in self._observers[event]:
            try:
                callback(payload)
            except Exception as e:
                logger.debug(f"Ignoring failure in Redshift '{event}' observer: {e}")

    def connect(self) -> None:
        if self.state is not ClientState.UNOPENED:
            raise RuntimeError(f"Cannot connect a Redshift client in state {self.state.value}")
        try:
            self._connection = redshift_connector.connect(**self.connection_params)
        except Exception as e:
            self._emit("error", e)
            raise
        self.state = ClientState.OPEN

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute one statement and return its rows as dicts keyed by column name.

        Statements without a result set return an empty list.
        """
        if self.state is not ClientState.OPEN:
            raise RuntimeError(f"Cannot query a Redshift client in state {self.state.value}")
        try:
            with self._connection.cursor() as cursor:
                if params:
                    cursor.execute(sql, params)
                else:
                    cursor.execute(sql)

                if not cursor.description:
                    return []
                column_names = unique_column_names(desc[0] for desc in cursor.description)
                return [dict(zip(column_names, row)) for row in cursor.fetchall()]
        except Exception as e:
            self._emit("error", e)
            raise
        finally:
            self._drain_server_messages()

    def _drain_server_messages(self) -> None:
        for notice in self._pop_all("notices"):
            self._emit("notice", notice)
        for notification in self._pop_all("notifications"):
            self._emit("notification", notification)

    def _pop_all(self, attribute: str) -> List[Any]:
        pending = getattr(self._connection, attribute, None)
        if not pending:
            return []
        messages = list(pending)
        pending.clear()
        return messages

    def end(self) -> None:
        """Close the connection. Safe to call more than once and before ``connect``."""
        if self.state is not ClientState.OPEN:
            self.state = ClientState.CLOSED
            return
        connection, self._connection = self._connection, None
        self.state = ClientState.CLOSED
        connection.close()
        self._emit("end")


def _notice_text(notice: Any) -> Any:
    if isinstance(notice, dict):
        return notice.get("M", notice)
    return notice


def attach_logger(client: RedshiftClient, config: Optional[RedshiftDatasourceConfiguration]) -> None:
    """Log client events. These callbacks never affect the operation's result."""
    if not config:
        return
    endpoint = config.display_endpoint

    client.on("error", lambda err: logger.error(f"Redshift client error. {endpoint} {err}"))
    client.on("end", lambda _: logger.debug(f"Redshift client disconnected from server. {endpoint}"))
    client.on("notification", lambda message: logger.debug(f"Redshift notification {message}. {endpoint}"))
    client.on("notice", lambda notice: logger.debug(f"Redshift notice: {_notice_text(notice)}. {endpoint}"))


@create_connection
def open_connection(
    config: RedshiftDatasourceConfiguration, timeout_ms: int = DEFAULT_CONNECTION_TIMEOUT_MS
) -> RedshiftClient:
    """
    Validate the configuration and open a connected client.

    Args:
        config: Datasource configuration
        timeout_ms: Connection timeout in milliseconds

    Returns:
        A client in the OPEN state; the caller must pass it to ``close_connection``

    Raises:
        ConfigurationError: Before any network I/O, if the configuration is incomplete
        ConnectivityError: If the driver cannot connect
    """
    config = validate_datasource_configuration(config)
    client = RedshiftClient.from_config(config, timeout_ms)
    attach_logger(client, config)
    try:
        client.connect()
    except Exception as e:
        release_connection(client)
        raise ConnectivityError(f"Failed to connect to Redshift, {driver_error_message(e)}") from e

    logger.debug(f"Redshift client connected. {config.display_endpoint}")
    return client


@destroy_connection
def close_connection(client: RedshiftClient) -> None:
    client.end()


def release_connection(client: Optional[RedshiftClient]) -> None:
    """
    Close a client without letting a close failure escape.

    The operation that used the client already has its result or its error;
    ``destroy_connection`` has reported the close failure.
    """
    if client is None:
        return
    try:
        close_connection(client)
    except Exception as e:
        logger.debug(f"Ignoring Redshift close failure: {e}")
