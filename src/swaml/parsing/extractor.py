"""Recover a syntactically valid JSON document from free-form model output.

Extraction tries, in order, and returns the first success:

1. the whole trimmed text as strict JSON
2. the body of a fenced code block (```json first, then any fence)
3. the first balanced ``{...}`` or ``[...]`` span that parses strictly
4. repair of the trimmed text, each fenced body, then each balanced span
5. completion of a truncated document, only when ``is_done`` is False

Every textual transformation is string-aware: brackets, commas, comment markers
and quotes inside string literals are left alone.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from ..exceptions import ExtractionError
from ..values import is_strict_json

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json[ \t]*\r?\n?(.*?)```", re.IGNORECASE | re.DOTALL)
_ANY_FENCE = re.compile(r"```(?:[A-Za-z0-9_+-]*[ \t]*\r?\n)?(.*?)```", re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")

_CLOSERS = {"{": "}", "[": "]"}
_QUOTES = "\"'"


# ----------------------------------------------------------------------
# String-aware scanning
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class _Chunk:
    """A run of text that is either entirely inside or outside a string literal."""

    text: str
    is_string: bool = False
    closed: bool = True


def _split_strings(text: str, quotes: str = _QUOTES) -> list[_Chunk]:
    chunks: list[_Chunk] = []
    start = i = 0
    n = len(text)
    while i < n:
        quote = text[i]
        if quote not in quotes:
            i += 1
            continue
        if i > start:
            chunks.append(_Chunk(text[start:i]))
        j = i + 1
        closed = False
        while j < n:
            if text[j] == "\\":
                j += 2
                continue
            if text[j] == quote:
                closed = True
                break
            j += 1
        end = j + 1 if closed else n
        chunks.append(_Chunk(text[i:end], is_string=True, closed=closed))
        start = i = end
    if start < n:
        chunks.append(_Chunk(text[start:]))
    return chunks


def _map_code(text: str, transform: Callable[[str], str]) -> str:
    """Apply ``transform`` to every chunk outside string literals."""
    return "".join(
        chunk.text if chunk.is_string else transform(chunk.text)
        for chunk in _split_strings(text)
    )


def _match_span(text: str, start: int, quotes: str) -> int | None:
    """Return the index closing the bracket opened at ``start``, or None."""
    stack: list[str] = []
    quote: str | None = None
    escaped = False
    for i in range(start, len(text)):
        c = text[i]
        if quote is not None:
            if escaped:
                escaped = False
            elif c == "\\":
                escaped = True
            elif c == quote:
                quote = None
            continue
        if c in quotes:
            quote = c
        elif c in _CLOSERS:
            stack.append(_CLOSERS[c])
        elif c in "}]":
            if not stack or stack.pop() != c:
                return None
            if not stack:
                return i
    return None


@dataclass
class _ScanState:
    """Structural state at the end of a possibly truncated document."""

    stack: list[str]
    quote: str | None
    escaped: bool
    cut_points: list[int]


def _scan_partial(text: str) -> _ScanState:
    stack: list[str] = []
    quote: str | None = None
    escaped = False
    cut_points: list[int] = []
    for i, c in enumerate(text):
        if quote is not None:
            if escaped:
                escaped = False
            elif c == "\\":
                escaped = True
            elif c == quote:
                quote = None
            continue
        if c == '"':
            quote = c
        elif c in _CLOSERS:
            stack.append(_CLOSERS[c])
            cut_points.append(i + 1)
        elif c in "}]":
            if stack and stack[-1] == c:
                stack.pop()
        elif c == ",":
            cut_points.append(i)
    return _ScanState(stack, quote, escaped, cut_points)


# ----------------------------------------------------------------------
# Repair stages
# ----------------------------------------------------------------------


def strip_comments(text: str) -> str:
    """Remove ``//`` line comments and ``/* */`` block comments outside strings."""
    out: list[str] = []
    quote: str | None = None
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if quote is not None:
            out.append(c)
            if c == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if c == quote:
                quote = None
            i += 1
            continue
        if c in _QUOTES:
            quote = c
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline == -1 else newline
            continue
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        out.append(c)
        i += 1
    return "".join(out)


def remove_trailing_commas(text: str) -> str:
    """Drop commas followed only by whitespace and a closing bracket."""
    return _map_code(text, lambda code: _TRAILING_COMMA.sub(r"\1", code))


def quote_unquoted_keys(text: str) -> str:
    """Double-quote identifier keys that follow ``{`` or ``,``."""
    return _map_code(text, lambda code: _UNQUOTED_KEY.sub(r'\1"\2"\3', code))


def _requote(literal: str, closed: bool) -> str:
    body = literal[1:-1] if closed else literal[1:]
    out = ['"']
    i = 0
    while i < len(body):
        c = body[i]
        if c == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append("'" if nxt == "'" else c + nxt)
            i += 2
            continue
        out.append('\\"' if c == '"' else c)
        i += 1
    if closed:
        out.append('"')
    return "".join(out)


def single_to_double_quotes(text: str) -> str:
    """Rewrite single-quoted string literals as double-quoted ones."""
    return "".join(
        _requote(chunk.text, chunk.closed)
        if chunk.is_string and chunk.text.startswith("'")
        else chunk.text
        for chunk in _split_strings(text)
    )


def _escape_controls(literal: str) -> str:
    out = []
    for c in literal:
        if c == "\n":
            out.append("\\n")
        elif c == "\t":
            out.append("\\t")
        elif c == "\r":
            continue
        elif ord(c) < 0x20:
            out.append(f"\\u{ord(c):04x}")
        else:
            out.append(c)
    return "".join(out)


def escape_control_characters(text: str) -> str:
    """Escape raw newlines and tabs inside strings and drop raw carriage returns."""
    return "".join(
        _escape_controls(chunk.text) if chunk.is_string else chunk.text
        for chunk in _split_strings(text)
    )


REPAIR_STAGES: tuple[Callable[[str], str], ...] = (
    strip_comments,
    remove_trailing_commas,
    quote_unquoted_keys,
    single_to_double_quotes,
    escape_control_characters,
)


# ----------------------------------------------------------------------
# Extractor
# ----------------------------------------------------------------------


class LenientExtractor:
    """Turns free-form model output into canonical JSON text.

    Args:
        preview_chars: How much of the input an ``ExtractionError`` carries.

    Example::

        extractor = LenientExtractor()
        extractor.extract("Sure! ```json\\n{name: 'Alice',}\\n```")
        # '{"name": "Alice"}'
    """

    def __init__(self, preview_chars: int = 200) -> None:
        self.preview_chars = preview_chars

    def extract(self, raw_text: str, is_done: bool = True) -> str:
        """Extract a JSON document from ``raw_text``.

        Args:
            raw_text: Model output, possibly wrapped in prose or fences
            is_done: False when the text may be a truncated stream

        Returns:
            Text that parses as strict JSON

        Raises:
            ExtractionError: If no document can be recovered
        """
        trimmed = raw_text.strip()
        if is_strict_json(trimmed):
            logger.debug("Extracted JSON as-is")
            return trimmed

        fenced = self.fenced_blocks(raw_text)
        for body in fenced:
            if is_strict_json(body):
                logger.debug("Extracted JSON from fenced block")
                return body

        # inner spans of a truncated stream are fragments, not the answer
        if not is_done and self.is_truncated(raw_text):
            logger.debug("Completing truncated JSON from stream")
            return self.complete_partial(raw_text)

        for span in self.balanced_spans(raw_text):
            if is_strict_json(span):
                logger.debug("Extracted JSON from balanced span")
                return span

        for candidate in self._repair_candidates(trimmed, fenced):
            repaired = self.repair(candidate)
            if repaired is not None:
                logger.debug("Extracted JSON after repair")
                return repaired

        if not is_done:
            logger.debug("Completing partial JSON from stream")
            return self.complete_partial(raw_text)

        raise ExtractionError(
            "no JSON found", response_text=raw_text[: self.preview_chars]
        )

    def fenced_blocks(self, text: str) -> list[str]:
        """Return trimmed fenced block bodies, ``json``-tagged fences first."""
        bodies = [m.group(1).strip() for m in _JSON_FENCE.finditer(text)]
        for match in _ANY_FENCE.finditer(text):
            body = match.group(1).strip()
            if body not in bodies:
                bodies.append(body)
        return bodies

    def balanced_spans(self, text: str, quotes: str = '"') -> Iterator[str]:
        """Yield top-level balanced bracket spans, ordered by start position.

        Scanning resumes after the end of each span, so brackets nested inside
        a balanced span are never yielded on their own.

        Args:
            text: Text to scan
            quotes: Characters that open string literals during the scan
        """
        start = 0
        while start < len(text):
            if text[start] in _CLOSERS:
                end = _match_span(text, start, quotes)
                if end is not None:
                    yield text[start : end + 1]
                    start = end + 1
                    continue
            start += 1

    def repair(self, text: str) -> str | None:
        """Apply every repair stage, then re-validate.

        Stages: strip comments, remove trailing commas, quote bare keys,
        convert single quotes, escape raw control characters in strings.

        Returns:
            The repaired text if it parses as strict JSON, otherwise None
        """
        candidate = text.strip()
        for stage in REPAIR_STAGES:
            candidate = stage(candidate)
        candidate = candidate.strip()
        return candidate if is_strict_json(candidate) else None

    def is_truncated(self, text: str) -> bool:
        """Return True when the document opened by the first bracket never closes."""
        openers = [i for i in (text.find("{"), text.find("[")) if i != -1]
        if not openers:
            return False
        start = min(openers)
        if _match_span(text, start, '"') is not None:
            return False
        state = _scan_partial(text[start:])
        return bool(state.stack) or state.quote is not None

    def complete_partial(self, text: str) -> str:
        """Close a truncated document so it parses.

        Starts at the first opening bracket, closes an unterminated string,
        drops a dangling comma, gives a dangling colon a ``null`` value and
        closes open brackets innermost first. When that is not enough, the
        text is cut back to earlier commas or openers until it completes. The
        fallback is the empty container of the outermost bracket, or ``{}``.
        """
        openers = [i for i in (text.find("{"), text.find("[")) if i != -1]
        if not openers:
            return "{}"
        body = text[min(openers) :]
        for stage in (
            strip_comments,
            quote_unquoted_keys,
            single_to_double_quotes,
            escape_control_characters,
        ):
            body = stage(body)

        completed = self._close(body)
        if completed is not None:
            return completed
        for cut in sorted(set(_scan_partial(body).cut_points), reverse=True):
            completed = self._close(body[:cut])
            if completed is not None:
                return completed
        return "[]" if body.startswith("[") else "{}"

    def _close(self, body: str) -> str | None:
        state = _scan_partial(body)
        closed = body
        if state.quote is not None:
            if state.escaped:
                closed = closed[:-1]
            closed += state.quote
        closed = closed.rstrip()
        if closed.endswith(","):
            closed = closed[:-1]
        elif closed.endswith(":"):
            closed += " null"
        closed += "".join(reversed(state.stack))
        closed = remove_trailing_commas(closed)
        return closed if is_strict_json(closed) else None

    def _repair_candidates(self, trimmed: str, fenced: list[str]) -> Iterator[str]:
        seen: set[str] = set()
        for candidate in (
            trimmed,
            *fenced,
            *self.balanced_spans(trimmed, quotes=_QUOTES),
        ):
            if candidate not in seen:
                seen.add(candidate)
                yield candidate
