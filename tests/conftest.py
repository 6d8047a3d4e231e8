# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

from collections import deque
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
import redshift_connector


class FakeCursor:
    def __init__(self, connection: "FakeConnection"):
        self.connection = connection
        self.description = None
        self._rows: List[Tuple[Any, ...]] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None):
        driver = self.connection.driver
        self.connection.executed.append((sql, params))
        self.connection.notices.extend(driver.server_notices)
        self.connection.notifications.extend(driver.server_notifications)
        if driver.query_error is not None:
            raise driver.query_error

        columns, rows = driver.results.get(sql, (None, []))
        self.description = [(name, 25, None, None, None, None, None) for name in columns] if columns else None
        self._rows = list(rows)

    def fetchall(self):
        return list(self._rows)


class FakeConnection:
    def __init__(self, driver: "FakeDriver", params: Dict[str, Any]):
        self.driver = driver
        self.params = params
        self.executed: List[Tuple[str, Any]] = []
        self.notices: deque = deque(maxlen=100)
        self.notifications: deque = deque(maxlen=100)
        self.close_count = 0

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.close_count += 1
        if self.driver.close_error is not None:
            raise self.driver.close_error


class FakeDriver:
    """Stands in for ``redshift_connector.connect`` and records what the plugin did."""

    def __init__(self):
        self.connect_calls: List[Dict[str, Any]] = []
        self.connections: List[FakeConnection] = []
        self.results: Dict[str, Tuple[Optional[List[str]], List[Tuple[Any, ...]]]] = {}
        self.connect_error: Optional[Exception] = None
        self.query_error: Optional[Exception] = None
        self.close_error: Optional[Exception] = None
        self.server_notices: List[Any] = []
        self.server_notifications: List[Any] = []

    def connect(self, **params):
        self.connect_calls.append(params)
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(self, params)
        self.connections.append(connection)
        return connection

    def set_result(self, sql: str, columns: List[str], rows: List[Tuple[Any, ...]]):
        self.results[sql] = (columns, rows)

    @property
    def executed(self) -> List[Tuple[str, Any]]:
        return [statement for connection in self.connections for statement in connection.executed]


@pytest.fixture
def fake_driver(monkeypatch) -> FakeDriver:
    driver = FakeDriver()
    monkeypatch.setattr(redshift_connector, "connect", driver.connect)
    return driver


@pytest.fixture
def datasource_config() -> Dict[str, Any]:
    """Datasource configuration shaped the way the host sends it."""
    return {
        "endpoint": {"host": "my-cluster.us-west-2.redshift.amazonaws.com", "port": 5439},
        "authentication": {
            "username": "testuser",
            "password": "testpass",
            "custom": {"databaseName": {"value": "dev"}},
        },
        "connection": {"useSsl": True},
    }
