# symptra/completion.py
"""
Completion collaborators.

A completion is any callable ``(instructions, history, latest_user_text) -> str``
where history is the ordered list of earlier turns as ``{"role", "text"}``
dicts. OllamaCompletion talks to an Ollama server over HTTP; MockCompletion
returns a canned reply with a valid analysis block so the service can run
without a model.
"""
from typing import Callable, Dict, List, Optional

import requests
import structlog

from . import config
from .analysis import encode_analysis
from .matcher import match_conditions
from .schemas import AnalysisCondition, StructuredAnalysis
from .utils import detect_red_flags, normalize_symptoms

logger = structlog.get_logger(__name__)

History = List[Dict[str, str]]
CompletionFn = Callable[[str, History, str], str]


class OllamaCompletion:
    def __init__(
        self,
        model: str = config.MODEL_NAME,
        base_url: str = config.OLLAMA_URL,
        temperature: float = 0.2,
        request_timeout: float = 120.0,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.request_timeout = request_timeout

    def _messages(self, instructions: str, history: History, latest_user_text: str) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": instructions}]
        for turn in history:
            messages.append({"role": turn["role"], "content": turn["text"]})
        messages.append({"role": "user", "content": latest_user_text})
        return messages

    def __call__(self, instructions: str, history: History, latest_user_text: str) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": self.model,
            "messages": self._messages(instructions, history, latest_user_text),
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        headers = {"Content-Type": "application/json"}
        resp = requests.post(url, json=payload, headers=headers, timeout=self.request_timeout)
        resp.raise_for_status()
        data = resp.json()
        if "message" in data:
            return str(data["message"].get("content", ""))
        if "response" in data:
            return str(data["response"])
        if "choices" in data and len(data["choices"]) > 0:
            return data["choices"][0].get("message", {}).get("content", "")
        logger.warning("ollama_unexpected_payload", keys=sorted(data.keys()))
        raise ValueError("unexpected Ollama response payload")


_FALLBACK_CONDITIONS = [
    AnalysisCondition(name="Viral infection", score=0.3, severity="mild", reason="Common, self-limited cause of general symptoms"),
    AnalysisCondition(name="Stress or fatigue", score=0.2, severity="mild", reason="Often produces non-specific complaints"),
    AnalysisCondition(name="Dehydration", score=0.1, severity="mild", reason="Can cause headache, weakness and dizziness"),
]


class MockCompletion:
    """Deterministic offline reply derived from the local matcher."""

    def __call__(self, instructions: str, history: History, latest_user_text: str) -> str:
        matches = match_conditions(normalize_symptoms(latest_user_text))
        red_flags = detect_red_flags(latest_user_text)
        conditions = [
            AnalysisCondition(
                name=m.condition.name,
                score=min(max(round(m.score, 2), 0.05), 0.95),
                severity=m.condition.severity,
                reason="Overlaps with the reported symptoms",
            )
            for m in matches
        ]
        for fallback in _FALLBACK_CONDITIONS:
            if len(conditions) >= 3:
                break
            conditions.append(fallback)

        urgency = 4 if red_flags else (3 if any(c.severity == "severe" for c in conditions) else 2)
        analysis = StructuredAnalysis(
            urgency=urgency,
            summary="Offline preliminary assessment",
            seek_care=urgency >= 3,
            red_flags=red_flags,
            conditions=conditions[:5],
        )
        prose = (
            "## Clinical Assessment\n"
            "This is an offline mock response built from the local symptom database.\n\n"
            "## Disclaimer\n"
            "> Always consult a licensed healthcare professional for diagnosis and treatment."
        )
        return encode_analysis(analysis, prose)


def get_completion(provider: Optional[str] = None) -> CompletionFn:
    provider = (provider or config.LLM_PROVIDER).lower()
    if provider == "mock":
        return MockCompletion()
    if provider == "ollama":
        return OllamaCompletion()
    raise ValueError(f"unknown LLM_PROVIDER: {provider}")
