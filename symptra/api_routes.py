# symptra/api_routes.py
from typing import List

import structlog
from fastapi import APIRouter, HTTPException, Request

from .analysis import parse_analysis
from .errors import InvalidArgument, NotFound, UpstreamUnavailable
from .orchestrator import TurnOrchestrator
from .schemas import (
    ChatRequest,
    ChatResponse,
    LocalMatchOut,
    MessageOut,
    RenameRequest,
    SessionDetail,
    SessionSummary,
)
from .sessions import SessionManager
from .utils import extract_symptoms

logger = structlog.get_logger(__name__)

router = APIRouter()


def _sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def _orchestrator(request: Request) -> TurnOrchestrator:
    return request.app.state.orchestrator


# --- Chat ---


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, request: Request):
    try:
        result = await _orchestrator(request).handle_turn(body.session_id, body.message)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound:
        # session deleted while the turn was in flight
        raise HTTPException(status_code=404, detail="Session not found")
    except UpstreamUnavailable:
        raise HTTPException(status_code=502, detail="completion service unavailable")

    return ChatResponse(
        session_id=result.session_id,
        response=result.clean_assistant_text,
        analysis=result.analysis,
        local_matches=[
            LocalMatchOut(name=m.condition.name, score=m.score, severity=m.condition.severity)
            for m in result.local_matches
        ],
        red_flags=result.red_flags,
    )


# --- Session endpoints ---


@router.get("/sessions", response_model=List[SessionSummary])
async def list_sessions(request: Request):
    summaries = await _sessions(request).list_summaries()
    return [
        SessionSummary(
            id=session.id,
            title=session.title,
            created_at=session.created_at,
            updated_at=session.updated_at,
            message_count=count,
            last_user_message=last_user.content if last_user else None,
        )
        for session, count, last_user in summaries
    ]


@router.delete("/sessions")
async def delete_all_sessions(request: Request):
    count = await _sessions(request).delete_all()
    return {"success": True, "deleted": count}


@router.get("/sessions/{session_id}", response_model=SessionDetail)
async def get_session(session_id: str, request: Request):
    try:
        session, messages = await _sessions(request).get(session_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Session not found")

    out = []
    for m in messages:
        if m.role == "assistant":
            # stored raw; the analysis block is re-derived on every read
            content, analysis = parse_analysis(m.content)
        else:
            content, analysis = m.content, None
        out.append(
            MessageOut(id=m.id, role=m.role, content=content, created_at=m.created_at, analysis=analysis)
        )
    first_user = next((m for m in messages if m.role == "user"), None)
    return SessionDetail(
        id=session.id,
        title=session.title,
        created_at=session.created_at,
        updated_at=session.updated_at,
        messages=out,
        symptoms=extract_symptoms(first_user.content) if first_user else [],
    )


@router.patch("/sessions/{session_id}", response_model=SessionSummary)
async def rename_session(session_id: str, body: RenameRequest, request: Request):
    try:
        session = await _sessions(request).rename(session_id, body.title)
    except InvalidArgument:
        raise HTTPException(status_code=400, detail="Title is required")
    except NotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionSummary(
        id=session.id,
        title=session.title,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, request: Request):
    try:
        await _sessions(request).delete(session_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}
