# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

from typing import Any, Dict, Iterable, List, Set

from .models import Column, Table, TableType


def normalize_column_name(name: Any) -> str:
    return str(name).strip().lower()


def unique_column_names(names: Iterable[str]) -> List[str]:
    """
    Make column names unique, keeping their order.

    A repeated name gets the first free ``_1``, ``_2``... suffix, so
    ``["a", "a"]`` becomes ``["a", "a_1"]``.
    """
    seen: Set[str] = set()
    result = []
    for name in names:
        candidate = name
        suffix = 1
        while candidate in seen:
            candidate = f"{name}_{suffix}"
            suffix += 1
        seen.add(candidate)
        result.append(candidate)
    return result


def normalize_output(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Normalize column names across result rows.

    Row count, row order, column order and values are kept as returned by the
    driver; only the keys change. Names that only differ by case or padding
    would collide after normalizing; later ones get a numeric suffix.
    """
    output = []
    for row in rows:
        names = unique_column_names(normalize_column_name(key) for key in row.keys())
        output.append(dict(zip(names, row.values())))
    return output


def build_schema(rows: Iterable[Dict[str, Any]]) -> List[Table]:
    """
    Group ``pg_table_def`` rows into tables.

    Tables appear in the order their first row is seen; columns keep row order,
    and rows for a table seen earlier are appended to that table.

    Args:
        rows: Catalog rows with ``tablename``, ``column`` and ``type`` fields

    Returns:
        One Table per distinct ``tablename``
    """
    tables: Dict[str, Table] = {}
    for row in rows:
        table_name = row["tablename"]
        table = tables.get(table_name)
        if table is None:
            table = Table(name=table_name, type=TableType.TABLE, columns=[])
            tables[table_name] = table
        table.columns.append(Column(name=row["column"], type=row["type"]))
    return list(tables.values())
