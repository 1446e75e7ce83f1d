"""Best-effort caller name extraction from call transcripts.

Phone callers never fill in a form, so their name is guessed from what they
said. Each strategy returns a name or None; `extract_caller_name` tries them
in order and falls back to a fixed placeholder.
"""

import re
from typing import Callable, Iterable, Optional

from vocalhire.schemas.calls import ProviderCall

DEFAULT_CALLER_NAME = "Phone Caller"

NameStrategy = Callable[[ProviderCall], Optional[str]]

_NAME_QUESTION = re.compile(r"what('s| is) your name", re.IGNORECASE)
_INTRO_PREFIX = re.compile(r"^(my name is|i('m| am)|this is)\s*", re.IGNORECASE)
_INTRO_PHRASES = [
    re.compile(r"my name is ([^.\n,]+)", re.IGNORECASE),
    re.compile(r"this is ([^.\n,]+)", re.IGNORECASE),
    re.compile(r"I'm ([^.\n,]+)", re.IGNORECASE),
]


def _clean(name: str, max_words: Optional[int] = None) -> Optional[str]:
    words = name.strip().strip(".,!?").split()
    if max_words:
        words = words[:max_words]
    return " ".join(words) or None


def name_from_answer(call: ProviderCall) -> Optional[str]:
    """Answer to the agent's "what's your name" question, first two words."""
    turns = call.turns()
    for turn, reply in zip(turns, turns[1:]):
        if turn.role == "agent" and _NAME_QUESTION.search(turn.content) and reply.role == "user":
            return _clean(_INTRO_PREFIX.sub("", reply.content.strip()), max_words=2)
    return None


def name_from_introduction(call: ProviderCall) -> Optional[str]:
    """Self-introduction anywhere in what the caller said."""
    turns = call.turns()
    if turns:
        text = "\n".join(turn.content for turn in turns if turn.role == "user")
    else:
        text = call.transcript_text()

    for pattern in _INTRO_PHRASES:
        match = pattern.search(text)
        if match:
            name = _clean(match.group(1))
            if name:
                return name
    return None


def extract_caller_name(
    call: ProviderCall,
    strategies: Iterable[NameStrategy] = (name_from_answer,),
    default: str = DEFAULT_CALLER_NAME,
) -> str:
    for strategy in strategies:
        name = strategy(call)
        if name:
            return name
    return default
