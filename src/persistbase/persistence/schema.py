"""
persistbase Persistence Layer - Store Schema

Table naming, EAV table definitions and the schema version marker.

Every persistent class gets a table pair:

- ``<name>_recs``: one row per record, ``id`` only
- ``<name>_props``: one ``(id, key, value)`` row per record parameter

The store as a whole carries one ``persistbase_version`` row that must match
``SCHEMA_VERSION`` before anything else is read or written.
"""

import hashlib
import logging
import re
from typing import Optional, Sequence

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, Text, inspect
from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_eav_metadata = MetaData()


class SchemaVersion(SQLModel, table=True):
    """Single-row marker recording the layout version of the store."""
    __tablename__ = "persistbase_version"

    id: int = Field(default=1, primary_key=True)
    version: int


def _slug(part: str) -> str:
    return re.sub(r"[^0-9a-z]+", "_", part.lower()).strip("_")


def table_name(base: Sequence[str], type_tag: str) -> str:
    """
    Get the name of a table from a table base and a type tag.

    The readable part is lower-cased because SQLite compares table names
    case-insensitively; the digest keeps distinct bases apart even when
    their slugs coincide.

    Args:
        base: Table base parts, e.g. ``("persistbase", "myapp.models.Package")``
        type_tag: Table type, e.g. ``"recs"`` or ``"props"``

    Returns:
        Table name such as ``persistbase_myapp_models_package_3f9a0c1d2e4b_recs``
    """
    parts = [str(part) for part in base]
    digest = hashlib.sha1("\0".join(parts).encode("utf-8")).hexdigest()[:12]
    slug = "_".join(filter(None, (_slug(part) for part in parts)))
    return f"{slug}_{digest}_{_slug(type_tag)}"


def records_table(name: str) -> Table:
    """Table object for a records table."""
    table = _eav_metadata.tables.get(name)
    if table is None:
        table = Table(
            name, _eav_metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            sqlite_autoincrement=True,
        )
    return table


def properties_table(name: str) -> Table:
    """Table object for a properties table."""
    table = _eav_metadata.tables.get(name)
    if table is None:
        table = Table(
            name, _eav_metadata,
            Column("id", Integer, nullable=False, index=True),
            Column("key", String, nullable=False),
            Column("value", Text),
            Index(f"ix_{name}_key_value", "key", "value"),
        )
    return table


def create_tables(handle, *tables: Table) -> None:
    """Create the given EAV tables if they are not there yet."""
    _eav_metadata.create_all(handle, tables=list(tables), checkfirst=True)


def read_version(handle: Engine) -> Optional[int]:
    """
    Read the schema version marker.

    Returns:
        The stored version, or None if the store carries no marker
    """
    if not inspect(handle).has_table(SchemaVersion.__tablename__):
        return None

    with Session(handle) as session:
        marker = session.get(SchemaVersion, 1)

    return marker.version if marker is not None else None


def check_version(handle: Engine) -> bool:
    """Check that the store was written with this schema version."""
    version = read_version(handle)
    if version is None:
        logger.debug("Store %s has no schema version marker", handle.url)
        return False
    if version != SCHEMA_VERSION:
        logger.debug("Store %s has schema version %s, expected %s",
                     handle.url, version, SCHEMA_VERSION)
        return False
    return True


def stamp_version(handle: Engine) -> None:
    """Write the current schema version marker into a store."""
    SQLModel.metadata.create_all(handle, tables=[SchemaVersion.__table__])

    with Session(handle) as session:
        session.merge(SchemaVersion(id=1, version=SCHEMA_VERSION))
        session.commit()

    logger.info("Stamped store %s with schema version %s", handle.url, SCHEMA_VERSION)
