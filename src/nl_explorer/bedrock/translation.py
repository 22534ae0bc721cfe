from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Protocol

from nl_explorer.exceptions.errors import ParseError
from nl_explorer.logging.logger import get_logger

log = get_logger("bedrock.translation")

QUERY_OPEN, QUERY_CLOSE = "<query>", "</query>"
EXPLANATION_OPEN, EXPLANATION_CLOSE = "<explanation>", "</explanation>"

# Escaped newline (backslash + n) or a real line break.
_LINE_BREAK_RE = re.compile(r"\\n|\r\n|\r|\n")


@dataclass(frozen=True)
class TranslationResult:
    explanation: str
    query: str

    def to_dict(self) -> Dict[str, str]:
        return {"explanation": self.explanation, "query": self.query}


class ModelInvoker(Protocol):
    def invoke(self, prompt: str) -> str: ...


def _normalize(value: str) -> str:
    return _LINE_BREAK_RE.sub(" ", value).replace('\\"', '"')


def _between(text: str, positions: Dict[str, int], open_tag: str, close_tag: str) -> str:
    start = positions[open_tag] + len(open_tag)
    end = positions[close_tag]
    if end < start:
        raise ParseError(f"{close_tag} appears before {open_tag} in model response")
    return text[start:end]


def parse_tagged_response(text: str) -> TranslationResult:
    """Extract the query and explanation from the model's tagged answer.

    Uses the first occurrence of each marker. A missing marker, or a closing
    marker that precedes its opening one, is a ``ParseError``.
    """
    text = text or ""
    markers = (QUERY_OPEN, QUERY_CLOSE, EXPLANATION_OPEN, EXPLANATION_CLOSE)
    positions = {m: text.find(m) for m in markers}
    missing = [m for m in markers if positions[m] < 0]
    if missing:
        raise ParseError(f"Model response is missing {', '.join(missing)}; head: {text[:200]!r}")

    query = _between(text, positions, QUERY_OPEN, QUERY_CLOSE)
    explanation = _between(text, positions, EXPLANATION_OPEN, EXPLANATION_CLOSE)
    return TranslationResult(explanation=_normalize(explanation), query=_normalize(query))


class TranslationClient:
    def __init__(self, model: ModelInvoker):
        self.model = model

    def translate(self, prompt: str) -> TranslationResult:
        raw = self.model.invoke(prompt)
        try:
            result = parse_tagged_response(raw)
        except ParseError:
            log.warning("Could not parse model response", extra={"response_head": (raw or "")[:300]})
            raise
        log.info("Translated question", extra={"query_head": result.query[:300]})
        return result
