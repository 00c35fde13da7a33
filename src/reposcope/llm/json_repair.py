"""JSON extraction and truncation repair for raw LLM text.

LLMs wrap JSON in markdown fences, add prose around it, or stop mid-object
when they hit their token limit. This module recovers a JSON value from such
text. It is deliberately narrow: it knows about fences, braces, brackets and
string literals, and nothing else of the JSON grammar.

Every function here is a pure function of its input text.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_ANY_FENCE = re.compile(r"```[\w-]*\s*([\s\S]*?)\s*```")
_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")

# Bounded walk-back through structural boundaries
MAX_BOUNDARY_ATTEMPTS = 50

_CLOSERS = {"{": "}", "[": "]"}


def _try_parse(text: str) -> tuple[bool, Any]:
    """Parse text as JSON, reporting success instead of raising."""
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return False, None


def extract_json(response: str) -> tuple[bool, Any]:
    """Run the ordered extraction strategies over a raw response.

    Strategies, first success wins:
    1. Content of a ```json fenced block
    2. Content of any fenced block (language tag ignored)
    3. Greedy match from the first "{" to the last "}"
    4. The whole trimmed response

    A strategy whose pattern matches but whose content does not parse falls
    through to the next strategy.

    Args:
        response: Raw LLM text

    Returns:
        Tuple of (found, value). ``value`` is only meaningful when ``found``.
    """
    for name, pattern in (
        ("json_fence", _JSON_FENCE),
        ("any_fence", _ANY_FENCE),
    ):
        match = pattern.search(response)
        if match:
            ok, value = _try_parse(match.group(1))
            if ok:
                logger.debug("Extracted JSON via %s", name)
                return True, value

    match = _GREEDY_OBJECT.search(response)
    if match:
        ok, value = _try_parse(match.group(0))
        if ok:
            logger.debug("Extracted JSON via greedy_object")
            return True, value

    ok, value = _try_parse(response.strip())
    if ok:
        logger.debug("Extracted JSON via whole_response")
    return ok, value


def _close(text: str, stack: list[str]) -> str:
    """Append closers for every open container on the stack."""
    return text + "".join(_CLOSERS[opener] for opener in reversed(stack))


def repair_truncated_json(response: str) -> Any | None:
    """Recover a JSON object from text that may be cut off mid-object.

    Scans forward from the first "{" tracking container depth while skipping
    over string literals. A balanced close means the object is complete and
    that substring is parsed. Otherwise the tail is treated as truncated and
    these repairs are tried in order:

    1. Close a dangling string, then append the missing closers
    2. Strip a trailing comma, then append the missing closers
    3. Cut back to the last structural boundary ("," "{" "[" outside
       strings) and close, walking back up to MAX_BOUNDARY_ATTEMPTS
       boundaries

    Args:
        response: Raw LLM text

    Returns:
        The recovered value, or None when no repair parses
    """
    text = response.strip()
    start = text.find("{")
    if start == -1:
        return None
    text = text[start:]

    stack: list[str] = []
    # (cut index, open containers at that cut)
    boundaries: list[tuple[int, list[str]]] = []
    in_string = False
    escaped = False

    for i, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "{[":
            stack.append(char)
            boundaries.append((i + 1, list(stack)))
        elif char in "}]":
            if stack:
                stack.pop()
            if not stack:
                ok, value = _try_parse(text[: i + 1])
                return value if ok else None
        elif char == ",":
            boundaries.append((i, list(stack)))

    candidates: list[str] = []

    if in_string:
        body = text[:-1] if escaped else text
        candidates.append(_close(body + '"', stack))
    else:
        body = text.rstrip()
        if body.endswith(","):
            body = body[:-1]
        candidates.append(_close(body, stack))

    for cut, open_stack in reversed(boundaries[-MAX_BOUNDARY_ATTEMPTS:]):
        body = text[:cut].rstrip()
        if body.endswith(","):
            body = body[:-1]
        candidates.append(_close(body, open_stack))

    for attempt, candidate in enumerate(candidates):
        ok, value = _try_parse(candidate)
        if ok:
            logger.debug("Repaired truncated JSON on attempt %d", attempt + 1)
            return value

    return None


def parse_llm_json(response: str) -> tuple[bool, Any]:
    """Extract JSON from a response, falling back to truncation repair.

    Args:
        response: Raw LLM text

    Returns:
        Tuple of (found, value)
    """
    found, value = extract_json(response)
    if found:
        return True, value

    repaired = repair_truncated_json(response)
    if repaired is not None:
        logger.info("Successfully repaired truncated JSON")
        return True, repaired
    return False, None
