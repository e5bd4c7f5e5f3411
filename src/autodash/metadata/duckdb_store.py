"""Metadata store built by introspecting a DuckDB database file.

Tables and columns come from ``information_schema``; primary and foreign
keys from ``duckdb_constraints()``. Ids are assigned in table-name and
column-ordinal order, so they are stable for an unchanged schema.
"""

from __future__ import annotations

import logging
from pathlib import Path

import duckdb

from autodash.errors import MetadataUnavailable
from autodash.metadata.classify import (
    base_type_for,
    display_name_for,
    entity_type_for,
    special_type_for,
)
from autodash.metadata.models import FieldMetadata, TableMetadata
from autodash.metadata.store import InMemoryMetadataStore

logger = logging.getLogger(__name__)

_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = ? AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

_COLUMNS_SQL = """
    SELECT table_name, column_name, data_type
    FROM information_schema.columns
    WHERE table_schema = ?
    ORDER BY table_name, ordinal_position
"""

_CONSTRAINTS_SQL = """
    SELECT table_name, constraint_type, constraint_column_names,
           referenced_table, referenced_column_names
    FROM duckdb_constraints()
    WHERE schema_name = ? AND constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY')
"""


class DuckDBMetadataStore(InMemoryMetadataStore):
    """Snapshot of a DuckDB schema as table and field metadata."""

    def __init__(self, db_path: Path | str, *, database_id: int = 1, schema: str = "main"):
        self.db_path = Path(db_path).expanduser()
        self.database_id = database_id
        self.schema = schema
        tables, fields = self._introspect()
        super().__init__(tables, fields)

    def _introspect(self) -> tuple[list[TableMetadata], list[FieldMetadata]]:
        if not self.db_path.exists():
            raise MetadataUnavailable(f"Database not found: {self.db_path}", {"path": str(self.db_path)})

        try:
            conn = duckdb.connect(str(self.db_path), read_only=True)
        except duckdb.Error as e:
            raise MetadataUnavailable(f"Cannot open {self.db_path}: {e}", {"path": str(self.db_path)}) from e

        try:
            table_names = [row[0] for row in conn.execute(_TABLES_SQL, [self.schema]).fetchall()]
            columns = conn.execute(_COLUMNS_SQL, [self.schema]).fetchall()
            constraints = conn.execute(_CONSTRAINTS_SQL, [self.schema]).fetchall()
        except duckdb.Error as e:
            raise MetadataUnavailable(f"Cannot read schema of {self.db_path}: {e}", {"path": str(self.db_path)}) from e
        finally:
            conn.close()

        primary_keys: set[tuple[str, str]] = set()
        foreign_keys: dict[tuple[str, str], tuple[str, str]] = {}
        for table_name, ctype, cols, ref_table, ref_cols in constraints:
            if ctype == "PRIMARY KEY":
                primary_keys.update((table_name, c) for c in cols)
            elif ref_table and ref_cols:
                for col, ref_col in zip(cols, ref_cols):
                    foreign_keys[(table_name, col)] = (ref_table, ref_col)

        columns_by_table: dict[str, list[tuple[str, str]]] = {name: [] for name in table_names}
        for table_name, column_name, data_type in columns:
            if table_name in columns_by_table:
                columns_by_table[table_name].append((column_name, data_type))

        tables: list[TableMetadata] = []
        field_ids: dict[tuple[str, str], int] = {}
        next_field_id = 1
        for table_id, table_name in enumerate(table_names, start=1):
            cols = columns_by_table[table_name]
            tables.append(
                TableMetadata(
                    id=table_id,
                    name=table_name,
                    db_id=self.database_id,
                    entity_type=entity_type_for(table_name, [c for c, _ in cols]),
                    display_name=display_name_for(table_name),
                )
            )
            for column_name, _ in cols:
                field_ids[(table_name, column_name)] = next_field_id
                next_field_id += 1

        table_ids = {t.name: t.id for t in tables}
        fields: list[FieldMetadata] = []
        for table_name in table_names:
            for column_name, data_type in columns_by_table[table_name]:
                key = (table_name, column_name)
                target = foreign_keys.get(key)
                base_type = base_type_for(data_type)
                fields.append(
                    FieldMetadata(
                        id=field_ids[key],
                        table_id=table_ids[table_name],
                        name=column_name,
                        base_type=base_type,
                        special_type=special_type_for(
                            column_name,
                            base_type,
                            is_primary_key=key in primary_keys,
                            is_foreign_key=target is not None,
                        ),
                        fk_target_field_id=field_ids.get(target) if target else None,
                        display_name=display_name_for(column_name),
                    )
                )

        logger.debug(
            "Introspected %d tables and %d fields from %s", len(tables), len(fields), self.db_path
        )
        return tables, fields
