"""
Schema migration guard

Keeps the relational schema at the version the running code expects.

The version marker lives in the key-value store rather than in the database,
so the guard can tell whether the database was ever touched before any table
is known to exist, and so the per-request check costs a single key lookup.

Version walk:
- 0 (marker missing or unparseable): create the base schema, marker -> 1
- each registered step above the stored version runs in ascending order,
  marker advanced after every step
- marker never decreases

Every structural change is safe to re-run: base creation uses checkfirst,
and each step inspects the live schema before changing it.
"""

from typing import Any, Callable, Dict, Optional, Protocol

import sqlalchemy as sa
import structlog
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from greenlight.core.config import settings
from greenlight.database.base import Base
from greenlight.database.models.release import ReleaseType, release_type_type

logger = structlog.get_logger(__name__)

CURRENT_SCHEMA_VERSION = 2


class KeyValueStore(Protocol):
    """The subset of the redis.asyncio client the guard relies on"""

    async def get(self, name: str) -> Optional[Any]: ...

    async def set(self, name: str, value: Any) -> Any: ...


def _column_names(connection: Connection, table_name: str) -> set:
    return {column["name"] for column in sa.inspect(connection).get_columns(table_name)}


def _add_release_type(op: Operations, connection: Connection) -> None:
    """v2: releases.release_type, FULL unless stated otherwise"""
    if "release_type" in _column_names(connection, "releases"):
        return

    # Inline CHECK: SQLite cannot ALTER in the implicit enum constraint
    allowed = ", ".join(f"'{member.value}'" for member in ReleaseType)
    op.add_column(
        "releases",
        sa.Column(
            "release_type",
            release_type_type(create_constraint=False),
            sa.CheckConstraint(f"release_type IN ({allowed})", name="ck_releases_release_type"),
            nullable=False,
            server_default=ReleaseType.FULL.value,
        ),
    )


# target version -> structural step
MIGRATIONS: Dict[int, Callable[[Operations, Connection], None]] = {
    2: _add_release_type,
}


def _create_base_schema(connection: Connection) -> None:
    Base.metadata.create_all(connection, checkfirst=True)


def _run_step(connection: Connection, step: Callable[[Operations, Connection], None]) -> None:
    context = MigrationContext.configure(connection)
    step(Operations(context), connection)


def parse_version(raw: Optional[Any]) -> int:
    """Marker value -> version; missing or garbage counts as 0"""
    if raw is None:
        return 0
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        version = int(str(raw).strip())
    except ValueError:
        return 0
    return max(version, 0)


class SchemaMigrationGuard:
    """Brings the database up to CURRENT_SCHEMA_VERSION"""

    def __init__(
        self,
        engine: AsyncEngine,
        state: KeyValueStore,
        version_key: Optional[str] = None,
        target_version: int = CURRENT_SCHEMA_VERSION,
        migrations: Optional[Dict[int, Callable[[Operations, Connection], None]]] = None,
    ):
        self.engine = engine
        self.state = state
        self.version_key = version_key or settings.SCHEMA_VERSION_KEY
        self.target_version = target_version
        self.migrations = MIGRATIONS if migrations is None else migrations

    async def current_version(self) -> int:
        return parse_version(await self.state.get(self.version_key))

    async def _write_version(self, version: int) -> None:
        await self.state.set(self.version_key, str(version))

    async def ensure_schema(self) -> bool:
        """
        Apply whatever is pending

        Returns:
            True when the schema is current, False when initialization failed.
            Never raises; the marker is left at the last version reached.
        """
        log = logger.bind(version_key=self.version_key, target_version=self.target_version)

        try:
            version = await self.current_version()

            if version > self.target_version:
                log.warning("schema_version_ahead_of_code", current_version=version)
                return True

            if version == 0:
                log.info("schema_initializing")
                async with self.engine.begin() as conn:
                    await conn.run_sync(_create_base_schema)
                version = 1
                await self._write_version(version)
                log.info("schema_initialized", current_version=version)

            if version < self.target_version:
                log.info("schema_upgrading", current_version=version)
                for step_version in sorted(self.migrations):
                    if not version < step_version <= self.target_version:
                        continue
                    async with self.engine.begin() as conn:
                        await conn.run_sync(_run_step, self.migrations[step_version])
                    version = step_version
                    await self._write_version(version)
                    log.info("schema_step_applied", current_version=version)

                if version < self.target_version:
                    version = self.target_version
                    await self._write_version(version)

                log.info("schema_upgraded", current_version=version)

            return True
        except Exception:
            log.exception("schema_initialization_failed")
            return False
