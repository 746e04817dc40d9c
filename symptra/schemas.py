# symptra/schemas.py
from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["mild", "moderate", "severe"]
Role = Literal["user", "assistant"]


class Condition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    symptoms: Tuple[str, ...]
    description: str
    severity: Severity
    recommendations: Tuple[str, ...] = ()


class MatchResult(BaseModel):
    condition: Condition
    score: float


class ChatSession(BaseModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    # set once the first-turn title has been derived or the user renamed it
    title_derived: bool = False


class ChatMessage(BaseModel):
    id: str
    session_id: str
    role: Role
    content: str
    created_at: datetime
    position: int = 0


# --- analysis block ---


class AnalysisCondition(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    name: str
    score: float = Field(gt=0, lt=1)
    severity: Severity
    reason: str


class StructuredAnalysis(BaseModel):
    """Machine data block appended to every assistant reply."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, strict=True)

    urgency: int = Field(ge=1, le=5)
    summary: str
    seek_care: bool = Field(alias="seekCare")
    red_flags: List[str] = Field(alias="redFlags")
    conditions: List[AnalysisCondition] = Field(min_length=3, max_length=5)


class TurnResult(BaseModel):
    session_id: str
    clean_assistant_text: str
    local_matches: List[MatchResult] = []
    analysis: Optional[StructuredAnalysis] = None
    red_flags: List[str] = []


# --- HTTP bodies ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(_CamelModel):
    message: str
    session_id: Optional[str] = None


class RenameRequest(_CamelModel):
    title: str


class LocalMatchOut(_CamelModel):
    name: str
    score: float
    severity: Severity


class ChatResponse(_CamelModel):
    session_id: str
    response: str
    analysis: Optional[StructuredAnalysis] = None
    local_matches: List[LocalMatchOut] = []
    red_flags: List[str] = []


class MessageOut(_CamelModel):
    id: str
    role: Role
    content: str
    created_at: datetime
    analysis: Optional[StructuredAnalysis] = None


class SessionSummary(_CamelModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    message_count: int = 0
    last_user_message: Optional[str] = None


class SessionDetail(_CamelModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    messages: List[MessageOut] = []
    symptoms: List[str] = []
