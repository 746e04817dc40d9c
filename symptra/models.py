# symptra/models.py
import uuid

import sqlalchemy as sa
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class ChatSessionRow(Base):
    __tablename__ = "chat_sessions"
    id = sa.Column(sa.String(36), primary_key=True, default=_new_id)
    title = sa.Column(sa.Text, nullable=False)
    title_derived = sa.Column(sa.Boolean, nullable=False, default=False)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False)
    updated_at = sa.Column(sa.DateTime(timezone=True), nullable=False, index=True)


class ChatMessageRow(Base):
    __tablename__ = "chat_messages"
    __table_args__ = (
        sa.UniqueConstraint("session_id", "position", name="uq_chat_messages_session_position"),
    )
    id = sa.Column(sa.String(36), primary_key=True, default=_new_id)
    session_id = sa.Column(
        sa.String(36),
        sa.ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = sa.Column(sa.String(16), nullable=False)
    content = sa.Column(sa.Text, nullable=False)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False)
    position = sa.Column(sa.Integer, nullable=False)
