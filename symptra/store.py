# symptra/store.py
"""
Persistence collaborator interface and the in-process implementation.

Stores never lock; SessionManager serializes writers per session.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol
from uuid import uuid4

from .errors import NotFound
from .schemas import ChatMessage, ChatSession, Role


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore(Protocol):
    async def create_session(self, title: str) -> ChatSession: ...

    async def get_session(self, session_id: str) -> Optional[ChatSession]: ...

    async def update_session(
        self, session_id: str, *, title: Optional[str] = None, title_derived: Optional[bool] = None
    ) -> ChatSession: ...

    async def delete_session(self, session_id: str) -> None: ...

    async def list_sessions(self) -> List[ChatSession]: ...

    async def delete_all(self) -> int: ...

    async def add_message(self, session_id: str, role: Role, content: str) -> ChatMessage: ...

    async def list_messages(self, session_id: str) -> List[ChatMessage]: ...

    async def count_messages(self, session_id: str) -> int: ...


class MemoryStore:
    """Dict-backed store; the default when DATABASE_URL is not set."""

    def __init__(self) -> None:
        self._sessions: Dict[str, ChatSession] = {}
        self._messages: Dict[str, List[ChatMessage]] = {}

    def _require(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFound(f"session {session_id} not found")
        return session

    async def create_session(self, title: str) -> ChatSession:
        now = utcnow()
        session = ChatSession(id=str(uuid4()), title=title, created_at=now, updated_at=now)
        self._sessions[session.id] = session
        self._messages[session.id] = []
        return session.model_copy()

    async def get_session(self, session_id: str) -> Optional[ChatSession]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    async def update_session(
        self, session_id: str, *, title: Optional[str] = None, title_derived: Optional[bool] = None
    ) -> ChatSession:
        session = self._require(session_id)
        changes = {"updated_at": max(utcnow(), session.updated_at)}
        if title is not None:
            changes["title"] = title
        if title_derived is not None:
            changes["title_derived"] = title_derived
        session = session.model_copy(update=changes)
        self._sessions[session_id] = session
        return session.model_copy()

    async def delete_session(self, session_id: str) -> None:
        self._require(session_id)
        del self._sessions[session_id]
        del self._messages[session_id]

    async def list_sessions(self) -> List[ChatSession]:
        sessions = sorted(self._sessions.values(), key=lambda s: s.updated_at, reverse=True)
        return [s.model_copy() for s in sessions]

    async def delete_all(self) -> int:
        count = len(self._sessions)
        self._sessions.clear()
        self._messages.clear()
        return count

    async def add_message(self, session_id: str, role: Role, content: str) -> ChatMessage:
        session = self._require(session_id)
        log = self._messages[session_id]
        created_at = utcnow()
        if log and log[-1].created_at > created_at:
            created_at = log[-1].created_at
        message = ChatMessage(
            id=str(uuid4()),
            session_id=session_id,
            role=role,
            content=content,
            created_at=created_at,
            position=len(log),
        )
        log.append(message)
        self._sessions[session_id] = session.model_copy(
            update={"updated_at": max(created_at, session.updated_at)}
        )
        return message.model_copy()

    async def list_messages(self, session_id: str) -> List[ChatMessage]:
        self._require(session_id)
        return [m.model_copy() for m in self._messages[session_id]]

    async def count_messages(self, session_id: str) -> int:
        self._require(session_id)
        return len(self._messages[session_id])
