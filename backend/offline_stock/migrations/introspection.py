# Overview: Live-schema introspection used to keep every migration step idempotent.

import re

import sqlalchemy as sa


def has_table(conn, table_name: str) -> bool:
    return sa.inspect(conn).has_table(table_name)


def column_names(conn, table_name: str) -> set[str]:
    if not has_table(conn, table_name):
        return set()
    return {col["name"] for col in sa.inspect(conn).get_columns(table_name)}


def index_names(conn, table_name: str) -> set[str]:
    if not has_table(conn, table_name):
        return set()
    return {ix["name"] for ix in sa.inspect(conn).get_indexes(table_name) if ix.get("name")}


def add_missing_columns(op, conn, table_name: str, columns: list[sa.Column]) -> list[str]:
    """
    ALTER TABLE ADD COLUMN for every column not present yet.

    SQLite cannot add foreign key constraints through ALTER, so columns given
    here must be plain (no ForeignKey).
    """
    existing = column_names(conn, table_name)
    added = []
    for column in columns:
        if column.name in existing:
            continue
        op.add_column(table_name, column)
        added.append(column.name)
    return added


_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_leading_number(raw) -> float | None:
    """
    Numeric prefix of a free-text quantity ("2 kg" -> 2.0, "1.5" -> 1.5).

    Returns None when the text does not start with a number.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    match = _LEADING_NUMBER.match(str(raw))
    if not match:
        return None
    return float(match.group(1))
