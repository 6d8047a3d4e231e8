# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

"""
Redshift datasource plugin.

Runs SQL statements and reads table/column metadata against Amazon Redshift
on behalf of a host plugin runtime. Each call opens one connection, runs one
statement and closes the connection again.
"""

from .config import RedshiftActionConfiguration, RedshiftDatasourceConfiguration
from .errors import ConfigurationError, ConnectivityError, QueryExecutionError, RedshiftPluginError
from .models import Column, DatasourceMetadata, ExecutionOutput, PluginExecutionProps, Table, TableType
from .plugin import RedshiftPlugin

__version__ = "0.1.0"

__all__ = [
    "RedshiftPlugin",
    "RedshiftDatasourceConfiguration",
    "RedshiftActionConfiguration",
    "PluginExecutionProps",
    "ExecutionOutput",
    "DatasourceMetadata",
    "Table",
    "Column",
    "TableType",
    "RedshiftPluginError",
    "ConfigurationError",
    "ConnectivityError",
    "QueryExecutionError",
]
