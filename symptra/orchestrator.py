# symptra/orchestrator.py
import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

import structlog

from . import config
from .analysis import parse_analysis
from .completion import CompletionFn, History
from .diseases import DISEASES
from .errors import InvalidArgument, UpstreamUnavailable
from .matcher import match_conditions
from .prompts import build_instructions
from .schemas import Condition, TurnResult
from .sessions import SessionManager
from .utils import detect_red_flags, normalize_symptoms

logger = structlog.get_logger(__name__)

EMPTY_REPLY = "I couldn't generate a response. Please try again."

# ThreadPoolExecutor to run the blocking completion call without blocking the event loop
executor = ThreadPoolExecutor(max_workers=config.EXECUTOR_WORKERS)


class TurnOrchestrator:
    """
    Runs one chat turn: record the user message, match locally, ask the
    completion service, record its raw reply and hand back the cleaned text.

    The per-session lock is held only while appending; the completion call
    runs unlocked, so a concurrent turn on the same session may read history
    without the pending reply.
    """

    def __init__(
        self,
        sessions: SessionManager,
        completion: CompletionFn,
        corpus: Sequence[Condition] = DISEASES,
        timeout: Optional[float] = config.COMPLETION_TIMEOUT,
    ) -> None:
        self.sessions = sessions
        self.completion = completion
        self.corpus = corpus
        self.timeout = timeout

    async def _complete(self, instructions: str, history: History, user_text: str) -> str:
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(executor, self.completion, instructions, history, user_text)
        try:
            if self.timeout is None:
                return await call
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailable(f"completion timed out after {self.timeout}s") from e
        except Exception as e:
            raise UpstreamUnavailable(f"completion failed: {e}") from e

    async def handle_turn(self, session_id: Optional[str], user_text: str) -> TurnResult:
        if not user_text or not user_text.strip():
            raise InvalidArgument("message is required")

        session = await self.sessions.resolve_or_create(session_id, seed_text=user_text)
        user_message = await self.sessions.append_message(session.id, "user", user_text)

        local_matches = match_conditions(normalize_symptoms(user_text), self.corpus)
        red_flags = detect_red_flags(user_text)

        messages = await self.sessions.list_messages(session.id)
        # earlier turns only; concurrent turns may have appended after ours
        history: History = [
            {"role": m.role, "text": m.content}
            for m in messages
            if m.position < user_message.position
        ]
        instructions = build_instructions(local_matches, red_flags)

        started = time.perf_counter()
        try:
            raw = await self._complete(instructions, history, user_text)
        except UpstreamUnavailable:
            logger.exception("completion_failed", session_id=session.id)
            raise
        logger.info(
            "completion_done",
            session_id=session.id,
            history_len=len(history),
            local_matches=len(local_matches),
            elapsed_ms=round((time.perf_counter() - started) * 1000),
        )
        raw = raw or EMPTY_REPLY

        await self.sessions.append_message(session.id, "assistant", raw)
        await self.sessions.maybe_retitle(session.id)

        clean, analysis = parse_analysis(raw)
        return TurnResult(
            session_id=session.id,
            clean_assistant_text=clean,
            local_matches=local_matches,
            analysis=analysis,
            red_flags=red_flags,
        )
