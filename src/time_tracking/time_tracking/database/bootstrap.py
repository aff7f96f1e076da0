from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")
_LINE_COMMENT_RE = re.compile(r"(?m)^\s*--.*$")


def _strip_database_statements(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    sql = _CREATE_DB_RE.sub("", sql)
    sql = _USE_DB_RE.sub("", sql)
    return _LINE_COMMENT_RE.sub("", sql)


def split_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ``;`` outside of quoted strings."""
    current: list[str] = []
    quote: str | None = None
    escaped = False

    for ch in sql:
        current.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(current[:-1]).strip()
            current.clear()
            if stmt:
                yield stmt

    tail = "".join(current).strip()
    if tail:
        yield tail


def _run_script(conn_factory: DatabaseConnection, script_path: str | Path) -> int:
    sql = _strip_database_statements(Path(script_path).read_text(encoding="utf-8"))
    conn = conn_factory.connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in split_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    factory = DatabaseConnection(DBConfig.from_dict(db_config))
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(DatabaseConnection(DBConfig.from_dict(db_config)), schema_path)
    logger.info("Applied %s (%d statements)", Path(schema_path).name, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(DatabaseConnection(DBConfig.from_dict(db_config)), seed_path)
    logger.info("Applied %s (%d statements)", Path(seed_path).name, count)


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
