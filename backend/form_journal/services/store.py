"""Durable append-only store for completed form analyses.

Records are written once and never updated or deleted. Each insert and each
scan runs in its own session transaction; SQLite serializes concurrent writers
and hands out ids atomically, so no additional locking happens here.

Only ``StorageUnavailable`` escapes the public list/insert operations. Faults
during a single read or write are logged and turned into empty results or a
placeholder id. The raising primitives (``write``, ``scan``, ``scan_category``)
are public for callers that need to tell the two apart.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from form_journal.database import build_engine, build_session_factory, create_tables, ensure_data_dir
from form_journal.exceptions import StorageUnavailable, InsertFailed, ReadFailed
from form_journal.models import AnalysisHistory
from form_journal.schemas import AnalysisCreate, AnalysisRecord, InsertResult

logger = logging.getLogger(__name__)

# Sort key for timestamps that cannot be parsed
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time in the stored format, e.g. ``2024-05-01T09:30:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_created_at(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ``created_at`` value.

    Returns None when the value is empty or not ISO-8601. Values without an
    offset are read as UTC.
    Fractional seconds of any length (``.12Z``) need Python 3.11+.
    """
    if not value:
        return None
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AnalysisStore:
    """Analysis history table plus its exercise/time indexes."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._ready: Optional[asyncio.Future] = None

    async def open(self) -> None:
        """Create the schema on first use, reuse it otherwise.

        Safe to call repeatedly; initialization only runs once. Raises
        ``StorageUnavailable`` when no database can be opened.
        """
        if self._ready is None:
            self._ready = asyncio.ensure_future(self._initialize())
        await self._ready

    async def _initialize(self) -> async_sessionmaker:
        try:
            ensure_data_dir(self.database_url)
            engine = build_engine(self.database_url, echo=self.echo)
        except (SQLAlchemyError, OSError, ImportError) as e:
            logger.error(f"Storage unavailable for {self.database_url}: {e}")
            raise StorageUnavailable(f"Failed to open database: {e}") from e

        try:
            await create_tables(engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Storage unavailable for {self.database_url}: {e}")
            await engine.dispose()
            raise StorageUnavailable(f"Failed to open database: {e}") from e

        self._engine = engine
        logger.info(f"Analysis store ready at {self.database_url}")
        return build_session_factory(engine)

    async def close(self) -> None:
        """Release the engine. The store must be opened again before further use."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._ready = None
            logger.info("Analysis store closed")

    async def _sessions(self) -> async_sessionmaker:
        if self._ready is None:
            raise StorageUnavailable("Analysis store has not been opened")
        return await self._ready

    # Raising primitives

    async def write(self, record: AnalysisCreate) -> int:
        """Persist one record and return its new id. Raises ``InsertFailed``."""
        session_factory = await self._sessions()

        values = record.model_dump()
        if not values.get("created_at"):
            values["created_at"] = utc_now_iso()

        try:
            async with session_factory() as session:
                row = AnalysisHistory(**values)
                session.add(row)
                await session.commit()
                return row.id
        except SQLAlchemyError as e:
            raise InsertFailed(f"Failed to add entry: {e}") from e

    async def scan(self) -> List[AnalysisRecord]:
        """All records, newest ``created_at`` first. Raises ``ReadFailed``."""
        session_factory = await self._sessions()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(AnalysisHistory)
                    # Textual order of the created_at index, not parsed time
                    .order_by(AnalysisHistory.created_at.desc(), AnalysisHistory.id.desc())
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise ReadFailed(f"Failed to get entries: {e}") from e

        return [AnalysisRecord.model_validate(row) for row in rows]

    async def scan_category(self, exercise_type: str) -> List[AnalysisRecord]:
        """Records of one exercise type, newest first. Raises ``ReadFailed``."""
        session_factory = await self._sessions()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(AnalysisHistory).where(AnalysisHistory.exercise_type == exercise_type)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise ReadFailed(f"Failed to get entries by exercise: {e}") from e

        records = [AnalysisRecord.model_validate(row) for row in rows]
        # The exercise index is not time ordered
        records.sort(key=lambda r: parse_created_at(r.created_at) or _OLDEST, reverse=True)
        return records

    # Public contract

    async def insert(self, record: AnalysisCreate) -> InsertResult:
        """Store a record.

        On a write fault the record is not saved and a placeholder id (current
        time in milliseconds) comes back with ``saved=False``.
        """
        try:
            new_id = await self.write(record)
        except InsertFailed as e:
            logger.error(f"Failed to insert analysis: {e}")
            return InsertResult(id=int(time.time() * 1000), saved=False)
        return InsertResult(id=new_id, saved=True)

    async def get_all(self) -> List[AnalysisRecord]:
        try:
            return await self.scan()
        except ReadFailed as e:
            logger.error(f"Failed to get analyses: {e}")
            return []

    async def get_by_category(self, exercise_type: str) -> List[AnalysisRecord]:
        try:
            return await self.scan_category(exercise_type)
        except ReadFailed as e:
            logger.error(f"Failed to get analyses by exercise: {e}")
            return []

    async def get_page(self, limit: int = 10, offset: int = 0) -> List[AnalysisRecord]:
        """Slice of ``get_all()``. Pagination happens in memory."""
        records = await self.get_all()
        return records[offset:offset + limit]


def get_store(request: Request) -> AnalysisStore:
    """Dependency to get the application's store."""
    return request.app.state.store
