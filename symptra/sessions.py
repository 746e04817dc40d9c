# symptra/sessions.py
"""
Session state manager.

Owns the ordered message log and the title of every conversation. Writes to
one session are serialized through a per-session asyncio.Lock; different
sessions never wait on each other.
"""
import asyncio
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Tuple

import structlog

from .errors import InvalidArgument, NotFound
from .schemas import ChatMessage, ChatSession, Role
from .store import SessionStore

logger = structlog.get_logger(__name__)

SEED_TITLE_LENGTH = 50
FALLBACK_TITLE_LENGTH = 60
MAX_TITLE_TERMS = 4

# anchored and colon-required: "My symptoms: x" or "symptoms x" take the plain
# 60-char fallback rather than a term list
_SYMPTOM_PREFIX_RE = re.compile(r"^\s*symptoms?\s*:\s*(.*)$", re.IGNORECASE | re.DOTALL)
_TERM_SPLIT_RE = re.compile(r"[,;]+")


def seed_title(text: str) -> str:
    text = text or ""
    if len(text) > SEED_TITLE_LENGTH:
        return text[:SEED_TITLE_LENGTH] + "..."
    return text


def derive_title(message: str) -> str:
    """Title for a session from its first user message."""
    m = _SYMPTOM_PREFIX_RE.match(message)
    if not m:
        return message[:FALLBACK_TITLE_LENGTH]
    terms = [t.strip().lower() for t in _TERM_SPLIT_RE.split(m.group(1))]
    terms = [t for t in terms if t][:MAX_TITLE_TERMS]
    if not terms:
        return message[:SEED_TITLE_LENGTH]
    return ", ".join(t[0].upper() + t[1:] for t in terms)


class KeyedLock:
    """Table of asyncio locks, one per key."""

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def discard(self, key: str) -> None:
        self._locks.pop(key, None)

    def clear(self) -> None:
        self._locks.clear()

    def __len__(self) -> int:
        return len(self._locks)


class SessionManager:
    def __init__(self, store: SessionStore) -> None:
        self.store = store
        self._locks = KeyedLock()

    @asynccontextmanager
    async def locked(self, session_id: str) -> AsyncIterator[None]:
        async with self._locks.get(session_id):
            yield

    async def _require(self, session_id: str) -> ChatSession:
        session = await self.store.get_session(session_id)
        if session is None:
            raise NotFound(f"session {session_id} not found")
        return session

    async def resolve_or_create(self, session_id: Optional[str] = None, seed_text: str = "") -> ChatSession:
        if session_id:
            session = await self.store.get_session(session_id)
            if session is not None:
                return session
            logger.info("session_unknown_creating_new", requested_id=session_id)
        session = await self.store.create_session(seed_title(seed_text))
        logger.info("session_created", session_id=session.id)
        return session

    async def append_message(self, session_id: str, role: Role, content: str) -> ChatMessage:
        async with self.locked(session_id):
            message = await self.store.add_message(session_id, role, content)
        logger.debug("message_appended", session_id=session_id, role=role, position=message.position)
        return message

    async def list_messages(self, session_id: str) -> List[ChatMessage]:
        return await self.store.list_messages(session_id)

    async def get(self, session_id: str) -> Tuple[ChatSession, List[ChatMessage]]:
        session = await self._require(session_id)
        return session, await self.store.list_messages(session_id)

    async def maybe_retitle(self, session_id: str) -> Optional[str]:
        """
        Derive the title once, after the first completed turn.

        Returns the new title, or None when the session keeps its title.
        """
        async with self.locked(session_id):
            session = await self._require(session_id)
            if session.title_derived:
                return None
            messages = await self.store.list_messages(session_id)
            # title_derived is the only once-guard; a concurrent turn may already
            # have added a second reply before this check runs
            if not any(m.role == "assistant" for m in messages):
                return None
            first_user = next((m for m in messages if m.role == "user"), None)
            if first_user is None:
                return None
            title = derive_title(first_user.content).strip()
            if not title or title == session.title:
                await self.store.update_session(session_id, title_derived=True)
                return None
            await self.store.update_session(session_id, title=title, title_derived=True)
        logger.info("session_retitled", session_id=session_id)
        return title

    async def rename(self, session_id: str, new_title: str) -> ChatSession:
        title = (new_title or "").strip()
        if not title:
            raise InvalidArgument("title is required")
        async with self.locked(session_id):
            return await self.store.update_session(session_id, title=title, title_derived=True)

    async def delete(self, session_id: str) -> None:
        try:
            async with self.locked(session_id):
                await self.store.delete_session(session_id)
        finally:
            self._locks.discard(session_id)
        logger.info("session_deleted", session_id=session_id)

    async def list_all(self) -> List[ChatSession]:
        return await self.store.list_sessions()

    async def list_summaries(self) -> List[Tuple[ChatSession, int, Optional[ChatMessage]]]:
        """Each session with its message count and latest user message."""
        summaries = []
        for session in await self.store.list_sessions():
            try:
                messages = await self.store.list_messages(session.id)
            except NotFound:
                # deleted between the two reads
                continue
            last_user = next((m for m in reversed(messages) if m.role == "user"), None)
            summaries.append((session, len(messages), last_user))
        return summaries

    async def delete_all(self) -> int:
        count = await self.store.delete_all()
        self._locks.clear()
        logger.info("sessions_deleted", count=count)
        return count
