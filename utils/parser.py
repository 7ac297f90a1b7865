"""
Parsing of AI quiz output.

The gateway returns free text that is supposed to be JSON but often is not:
it may be wrapped in Markdown fences, surrounded by chatter, or use a
different field layout per question. Everything here runs once at the AI
boundary so the quiz workflow only ever sees ``GeneratedQuestion``.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from core.logger import logger

OPTION_LETTERS = ("A", "B", "C", "D")

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_LETTER_RE = re.compile(r"^(?:OPTION\s*)?\(?([A-D])\)?(?:[).:\s]|$)")


@dataclass(frozen=True)
class GeneratedQuestion:
    question: str
    options: Dict[str, str]
    correct: str
    explanation: str = ""


@dataclass(frozen=True)
class Parsed:
    questions: List[GeneratedQuestion]
    dropped: int = 0


@dataclass(frozen=True)
class Malformed:
    reason: str
    raw: str = field(default="", repr=False)


ParseOutcome = Union[Parsed, Malformed]


def strip_code_fences(content: str) -> str:
    return _FENCE_RE.sub("", content or "").strip()


def _load_json(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def parse_quiz_payload(content: str, limit: Optional[int] = None) -> ParseOutcome:
    """
    Two-stage parse: the whole (fence-stripped) text first, then the
    outermost {...} span found in it. Returns Malformed when neither stage
    yields JSON or when no question survives normalization.
    """
    cleaned = strip_code_fences(content)

    payload = _load_json(cleaned)
    if payload is None:
        match = _OBJECT_RE.search(cleaned)
        if match:
            payload = _load_json(match.group(0))
    if payload is None:
        logger.error("Failed to parse AI response", content=cleaned[:500])
        return Malformed("response is not valid JSON", raw=cleaned)

    if isinstance(payload, dict):
        items = payload.get("questions")
    else:
        items = payload
    if not isinstance(items, list):
        return Malformed("response has no question list", raw=cleaned)

    questions = [q for q in (normalize_question(item) for item in items) if q is not None]
    dropped = len(items) - len(questions)
    if dropped:
        logger.warning("Dropped malformed AI questions", dropped=dropped, kept=len(questions))
    if not questions:
        return Malformed("response contains no usable questions", raw=cleaned)

    if limit is not None:
        questions = questions[:limit]
    return Parsed(questions=questions, dropped=dropped)


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def _first_text(raw: Dict, *keys: str) -> str:
    for key in keys:
        value = _text(raw.get(key))
        if value:
            return value
    return ""


def _extract_options(raw: Dict) -> Optional[Dict[str, str]]:
    options = {letter: "" for letter in OPTION_LETTERS}

    nested = raw.get("options", raw.get("choices"))
    if isinstance(nested, dict):
        for key, value in nested.items():
            letter = str(key).strip().upper()
            if letter in options:
                options[letter] = _text(value)
    elif isinstance(nested, list) and len(nested) >= len(OPTION_LETTERS):
        for letter, value in zip(OPTION_LETTERS, nested):
            options[letter] = _text(value)

    # Flat layout: option_a .. option_d
    for letter in OPTION_LETTERS:
        if not options[letter]:
            options[letter] = _first_text(raw, f"option_{letter.lower()}", f"option_{letter}")

    if not all(options.values()):
        return None
    return options


def _resolve_correct(raw: Dict, options: Dict[str, str]) -> Optional[str]:
    value = None
    for key in ("correct", "correct_answer", "answer", "correct_option_id"):
        if raw.get(key) is not None:
            value = raw[key]
            break

    # Zero-based index into the option list
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < len(OPTION_LETTERS):
            return OPTION_LETTERS[value]
        return None

    text = _text(value)
    if not text:
        return None

    upper = text.upper()
    if upper in OPTION_LETTERS:
        return upper

    # Some models answer with the option text itself
    for letter, option in options.items():
        if option.lower() == text.lower():
            return letter

    match = _LETTER_RE.match(upper)
    if match:
        return match.group(1)
    return None


def normalize_question(raw: Any) -> Optional[GeneratedQuestion]:
    """Map any accepted AI question layout onto GeneratedQuestion, or None."""
    if not isinstance(raw, dict):
        return None

    question = _first_text(raw, "question", "question_text")
    if not question:
        return None

    options = _extract_options(raw)
    if options is None:
        return None

    correct = _resolve_correct(raw, options)
    if correct is None:
        return None

    return GeneratedQuestion(
        question=question,
        options=options,
        correct=correct,
        explanation=_first_text(raw, "explanation", "rationale"),
    )
