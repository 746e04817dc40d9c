# symptra/analysis.py
"""
Machine data block embedded at the end of assistant replies.

The completion service is asked to append a single JSON object between
START_MARKER and END_MARKER. Parsing is two-phase: locate the first marker
pair, then decode and validate the payload. Anything doubtful yields "no
analysis" and the reply text untouched.
"""
import re
from typing import Optional, Tuple

import structlog
from pydantic import ValidationError

from .errors import MalformedAnalysis
from .schemas import StructuredAnalysis

logger = structlog.get_logger(__name__)

# bump together with any change to the markers or the block's fields
PARSER_VERSION = 1

START_MARKER = "---ANALYSIS_DATA---"
END_MARKER = "---END_DATA---"

_BLOCK_RE = re.compile(
    re.escape(START_MARKER) + r"(?P<payload>.*?)" + re.escape(END_MARKER),
    re.DOTALL,
)


def locate_block(text: str) -> Optional[re.Match]:
    return _BLOCK_RE.search(text or "")


def decode_payload(payload: str) -> StructuredAnalysis:
    try:
        return StructuredAnalysis.model_validate_json(payload.strip())
    except (ValidationError, ValueError) as e:
        raise MalformedAnalysis(str(e)) from e


def parse_analysis(text: str) -> Tuple[str, Optional[StructuredAnalysis]]:
    """Split a reply into (clean_text, analysis); analysis is None when absent or invalid."""
    block = locate_block(text)
    if block is None:
        return text, None
    try:
        analysis = decode_payload(block.group("payload"))
    except MalformedAnalysis as e:
        logger.debug("analysis_block_rejected", reason=str(e)[:200])
        return text, None
    clean = (text[: block.start()] + text[block.end():]).strip()
    return clean, analysis


def encode_analysis(analysis: StructuredAnalysis, prose: str = "") -> str:
    payload = analysis.model_dump_json(by_alias=True)
    block = f"{START_MARKER}\n{payload}\n{END_MARKER}"
    if not prose:
        return block
    return f"{prose.rstrip()}\n\n{block}"
