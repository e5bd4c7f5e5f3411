"""Access-control gate for generated queries.

Permissions are object paths. A granted path covers every path it is a
prefix of:

- ``/``                      everything
- ``/db/1/``                 every table in database 1
- ``/db/1/table/5/``         full access to table 5
- ``/db/1/table/5/query/``   read-only (ad-hoc query) access to table 5

Writing a card needs full access to every table the query touches: its
source table and every table reached through an ``fk->`` reference. Read
mode only needs the ``query/`` sub-path of each of them.

The principal's permission set is always passed in explicitly.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from autodash.heuristics.query import QuerySpec

MODES = ("read", "write")


def _normalize_path(path: str) -> str:
    clean = "/" + path.strip().strip("/")
    return clean if clean == "/" else clean + "/"


def database_path(database_id: int) -> str:
    return f"/db/{database_id}/"


def table_path(database_id: int, table_id: int) -> str:
    return f"/db/{database_id}/table/{table_id}/"


def table_query_path(database_id: int, table_id: int) -> str:
    return f"/db/{database_id}/table/{table_id}/query/"


@dataclass(frozen=True)
class PermissionSet:
    """Immutable set of object paths granted to a principal."""

    paths: frozenset[str] = frozenset()

    @classmethod
    def of(cls, paths: Iterable[str]) -> "PermissionSet":
        return cls(frozenset(_normalize_path(p) for p in paths if p and p.strip()))

    @classmethod
    def full(cls) -> "PermissionSet":
        return cls.of(["/"])

    def covers(self, path: str) -> bool:
        return any(path.startswith(granted) for granted in self.paths)

    def covers_all(self, paths: Iterable[str]) -> bool:
        return all(self.covers(p) for p in paths)


@dataclass
class PermissionVerdict:
    """Outcome of checking one query against a permission set."""

    action: str  # "allow" or "refuse"
    mode: str
    required: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.action == "allow"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _joined_field_ids(form: Any) -> list[int]:
    """Target field ids of every ``["fk->", source, target]`` reference in ``form``."""
    found: list[int] = []

    def visit(node: Any) -> None:
        if isinstance(node, (list, tuple)):
            if len(node) == 3 and node[0] == "fk->":
                found.append(node[2])
                return
            for child in node:
                visit(child)
        elif isinstance(node, dict):
            for child in node.values():
                visit(child)

    visit(form)
    return found


def query_permissions(
    query: "QuerySpec",
    mode: str = "write",
    field_tables: Mapping[int, int] | None = None,
) -> set[str]:
    """Object paths a principal needs to run (``read``) or save (``write``) ``query``.

    ``field_tables`` maps field ids to their table ids. A joined field whose
    table is unknown requires access to the whole database.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown permission mode '{mode}'. Expected one of: {', '.join(MODES)}")

    field_tables = field_tables or {}
    tables = {query.source_table}
    for clause in (query.filter, query.breakout, query.aggregation, query.order_by):
        for field_id in _joined_field_ids(clause):
            table_id = field_tables.get(field_id)
            if table_id is None:
                return {database_path(query.database)}
            tables.add(table_id)

    to_path = table_path if mode == "write" else table_query_path
    return {to_path(query.database, t) for t in sorted(tables)}


def check_query_permissions(
    permission_set: PermissionSet,
    query: "QuerySpec",
    mode: str = "write",
    field_tables: Mapping[int, int] | None = None,
) -> PermissionVerdict:
    required = sorted(query_permissions(query, mode, field_tables))
    missing = [p for p in required if not permission_set.covers(p)]
    return PermissionVerdict(
        action="refuse" if missing else "allow",
        mode=mode,
        required=required,
        missing=missing,
    )


def has_full_permission(
    permission_set: PermissionSet,
    query: "QuerySpec",
    mode: str = "write",
    field_tables: Mapping[int, int] | None = None,
) -> bool:
    """Whether ``permission_set`` covers everything ``query`` needs in ``mode``."""
    return check_query_permissions(permission_set, query, mode, field_tables).allowed
