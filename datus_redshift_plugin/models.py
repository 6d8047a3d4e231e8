# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

import pyarrow as pa
from pandas import DataFrame
from pydantic import BaseModel, ConfigDict, Field

from .config import RedshiftActionConfiguration, RedshiftDatasourceConfiguration

ResultFormat = Literal["list", "arrow", "pandas", "csv"]


class TableType(str, Enum):
    TABLE = "TABLE"


class Column(BaseModel):
    name: str
    type: str


class Table(BaseModel):
    name: str
    type: TableType = TableType.TABLE
    columns: List[Column] = Field(default_factory=list)


class DatabaseSchemaMetadata(BaseModel):
    tables: List[Table] = Field(default_factory=list)


class DatasourceMetadata(BaseModel):
    """Result of ``metadata``; dumps as ``{"dbSchema": {"tables": [...]}}`` with ``by_alias=True``."""

    model_config = ConfigDict(populate_by_name=True)

    db_schema: DatabaseSchemaMetadata = Field(default_factory=DatabaseSchemaMetadata, alias="dbSchema")


class ExecutionContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    prepared_statement_context: List[Any] = Field(
        default_factory=list,
        alias="preparedStatementContext",
        description="Ordered values bound to the statement's parameters",
    )


class PluginExecutionProps(BaseModel):
    """Everything the host passes to ``execute`` for one action run."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    context: ExecutionContext = Field(default_factory=ExecutionContext)
    datasource_configuration: Optional[RedshiftDatasourceConfiguration] = Field(
        default=None, alias="datasourceConfiguration"
    )
    action_configuration: RedshiftActionConfiguration = Field(
        default_factory=RedshiftActionConfiguration, alias="actionConfiguration"
    )


class ExecutionOutput(BaseModel):
    """
    Rows produced by one ``execute`` call.

    ``output`` is the list of row dicts handed back to the host. The ``to_*``
    helpers convert it to the other result formats Datus tools consume.
    """

    output: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.output)

    def to_arrow(self) -> pa.Table:
        return pa.Table.from_pylist(self.output)

    def to_pandas(self) -> DataFrame:
        return self.to_arrow().to_pandas()

    def to_csv(self) -> str:
        if not self.output:
            return ""
        return self.to_pandas().to_csv(index=False)

    def render(self, result_format: ResultFormat = "list") -> Union[List[Dict[str, Any]], pa.Table, DataFrame, str]:
        """Return the rows in the requested format."""
        if result_format == "list":
            return self.output
        elif result_format == "arrow":
            return self.to_arrow()
        elif result_format == "pandas":
            return self.to_pandas()
        elif result_format == "csv":
            return self.to_csv()
        raise ValueError(f"Unsupported result format '{result_format}'")
