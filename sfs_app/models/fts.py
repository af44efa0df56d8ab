"""Full-text indexes over the provision tables and schema initialisation.

The FTS5 tables are external-content indexes keyed to the row id of the
provision tables. Triggers keep them in sync on insert, update and delete,
so writers never touch the indexes directly.
"""

import logging
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine

from sfs_app.models.base import Base

logger = logging.getLogger(__name__)


def _fts_ddl(fts_table: str, source_table: str, prefix: str) -> list[str]:
    """DDL for one external-content FTS5 index and its sync triggers."""
    return [
        f"""
        CREATE VIRTUAL TABLE IF NOT EXISTS {fts_table} USING fts5(
            content, title,
            content='{source_table}',
            content_rowid='id',
            tokenize='unicode61'
        )
        """,
        f"""
        CREATE TRIGGER IF NOT EXISTS {prefix}_ai AFTER INSERT ON {source_table} BEGIN
            INSERT INTO {fts_table}(rowid, content, title)
            VALUES (new.id, new.content, new.title);
        END
        """,
        f"""
        CREATE TRIGGER IF NOT EXISTS {prefix}_ad AFTER DELETE ON {source_table} BEGIN
            INSERT INTO {fts_table}({fts_table}, rowid, content, title)
            VALUES ('delete', old.id, old.content, old.title);
        END
        """,
        f"""
        CREATE TRIGGER IF NOT EXISTS {prefix}_au AFTER UPDATE ON {source_table} BEGIN
            INSERT INTO {fts_table}({fts_table}, rowid, content, title)
            VALUES ('delete', old.id, old.content, old.title);
            INSERT INTO {fts_table}(rowid, content, title)
            VALUES (new.id, new.content, new.title);
        END
        """,
    ]


FTS_DDL: list[str] = [
    *_fts_ddl("provisions_fts", "legal_provisions", "provisions"),
    *_fts_ddl("provision_versions_fts", "legal_provision_versions", "provision_versions"),
]


def _ensure_sqlite_directory(engine: AsyncEngine) -> None:
    url = engine.url
    database = url.database
    if url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables and the FTS5 indexes if they do not exist yet."""
    # Importing the models registers them on Base.metadata
    import sfs_app.models  # noqa: F401

    _ensure_sqlite_directory(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        for statement in FTS_DDL:
            await conn.exec_driver_sql(statement)
    logger.info(f"Initialised schema at {engine.url}")
