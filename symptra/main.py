# symptra/main.py
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI

from . import config
from .api_routes import router as api_router
from .completion import CompletionFn, get_completion
from .db import close_postgres, init_postgres
from .log_config import configure_logging
from .orchestrator import TurnOrchestrator
from .sessions import SessionManager
from .store import MemoryStore, SessionStore


def create_app(
    store: Optional[SessionStore] = None,
    completion: Optional[CompletionFn] = None,
    timeout: Optional[float] = config.COMPLETION_TIMEOUT,
) -> FastAPI:
    app = FastAPI(title="Symptra Symptom Analysis Service")
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def startup():
        configure_logging()
        session_store = store
        if session_store is None:
            session_store = await init_postgres() or MemoryStore()
        sessions = SessionManager(session_store)
        app.state.sessions = sessions
        app.state.orchestrator = TurnOrchestrator(
            sessions, completion or get_completion(), timeout=timeout
        )

    @app.on_event("shutdown")
    async def shutdown():
        await close_postgres()

    @app.get("/")
    async def root():
        return {"service": "symptra", "status": "ok"}

    return app


app = create_app()
