# symptra/db.py
from datetime import datetime, timezone
from typing import List, Optional

import sqlalchemy as sa
import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from . import config
from .errors import NotFound
from .models import Base, ChatMessageRow, ChatSessionRow
from .schemas import ChatMessage, ChatSession, Role
from .store import utcnow

logger = structlog.get_logger(__name__)

engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[async_sessionmaker] = None


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _session_out(row: ChatSessionRow) -> ChatSession:
    return ChatSession(
        id=row.id,
        title=row.title,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        title_derived=bool(row.title_derived),
    )


def _message_out(row: ChatMessageRow) -> ChatMessage:
    return ChatMessage(
        id=row.id,
        session_id=row.session_id,
        role=row.role,
        content=row.content,
        created_at=_aware(row.created_at),
        position=row.position,
    )


class SqlStore:
    """SessionStore backed by SQLAlchemy's asyncio extension."""

    def __init__(self, sessionmaker: async_sessionmaker) -> None:
        self._sessionmaker = sessionmaker

    @staticmethod
    async def _require(db: AsyncSession, session_id: str, for_update: bool = False) -> ChatSessionRow:
        stmt = sa.select(ChatSessionRow).where(ChatSessionRow.id == session_id)
        if for_update:
            stmt = stmt.with_for_update()
        row = (await db.execute(stmt)).scalar_one_or_none()
        if row is None:
            raise NotFound(f"session {session_id} not found")
        return row

    async def create_session(self, title: str) -> ChatSession:
        now = utcnow()
        async with self._sessionmaker() as db, db.begin():
            row = ChatSessionRow(title=title, title_derived=False, created_at=now, updated_at=now)
            db.add(row)
            await db.flush()
            return _session_out(row)

    async def get_session(self, session_id: str) -> Optional[ChatSession]:
        async with self._sessionmaker() as db:
            row = await db.get(ChatSessionRow, session_id)
            return _session_out(row) if row else None

    async def update_session(
        self, session_id: str, *, title: Optional[str] = None, title_derived: Optional[bool] = None
    ) -> ChatSession:
        async with self._sessionmaker() as db, db.begin():
            row = await self._require(db, session_id, for_update=True)
            if title is not None:
                row.title = title
            if title_derived is not None:
                row.title_derived = title_derived
            row.updated_at = max(utcnow(), _aware(row.updated_at))
            await db.flush()
            return _session_out(row)

    async def delete_session(self, session_id: str) -> None:
        async with self._sessionmaker() as db, db.begin():
            await self._require(db, session_id)
            await db.execute(sa.delete(ChatMessageRow).where(ChatMessageRow.session_id == session_id))
            await db.execute(sa.delete(ChatSessionRow).where(ChatSessionRow.id == session_id))

    async def list_sessions(self) -> List[ChatSession]:
        async with self._sessionmaker() as db:
            stmt = sa.select(ChatSessionRow).order_by(ChatSessionRow.updated_at.desc())
            rows = (await db.execute(stmt)).scalars().all()
            return [_session_out(r) for r in rows]

    async def delete_all(self) -> int:
        async with self._sessionmaker() as db, db.begin():
            count = (await db.execute(sa.select(sa.func.count()).select_from(ChatSessionRow))).scalar_one()
            await db.execute(sa.delete(ChatMessageRow))
            await db.execute(sa.delete(ChatSessionRow))
            return count

    async def add_message(self, session_id: str, role: Role, content: str) -> ChatMessage:
        async with self._sessionmaker() as db, db.begin():
            session_row = await self._require(db, session_id, for_update=True)
            last_stmt = (
                sa.select(ChatMessageRow)
                .where(ChatMessageRow.session_id == session_id)
                .order_by(ChatMessageRow.position.desc())
                .limit(1)
            )
            last = (await db.execute(last_stmt)).scalar_one_or_none()
            created_at = utcnow()
            position = 0
            if last is not None:
                created_at = max(created_at, _aware(last.created_at))
                position = last.position + 1
            row = ChatMessageRow(
                session_id=session_id,
                role=role,
                content=content,
                created_at=created_at,
                position=position,
            )
            db.add(row)
            session_row.updated_at = max(created_at, _aware(session_row.updated_at))
            await db.flush()
            return _message_out(row)

    async def list_messages(self, session_id: str) -> List[ChatMessage]:
        async with self._sessionmaker() as db:
            await self._require(db, session_id)
            stmt = (
                sa.select(ChatMessageRow)
                .where(ChatMessageRow.session_id == session_id)
                .order_by(ChatMessageRow.created_at, ChatMessageRow.position)
            )
            rows = (await db.execute(stmt)).scalars().all()
            return [_message_out(r) for r in rows]

    async def count_messages(self, session_id: str) -> int:
        async with self._sessionmaker() as db:
            await self._require(db, session_id)
            stmt = sa.select(sa.func.count()).where(ChatMessageRow.session_id == session_id)
            return (await db.execute(stmt)).scalar_one()


async def init_postgres(database_url: Optional[str] = None, **engine_kwargs) -> Optional[SqlStore]:
    """Create the engine and tables; returns None when no database is configured."""
    global engine, AsyncSessionLocal
    url = database_url or config.DATABASE_URL
    if not url:
        logger.info("database_url_not_set", store="memory")
        return None
    engine = create_async_engine(url, echo=False, **engine_kwargs)
    AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_ready", dialect=engine.dialect.name)
    return SqlStore(AsyncSessionLocal)


async def close_postgres():
    global engine
    if engine:
        await engine.dispose()
        engine = None
