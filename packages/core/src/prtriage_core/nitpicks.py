"""Recover nitpick comments embedded in AI reviewer review bodies.

The reviewer bot folds low-severity suggestions into its top-level review
body instead of posting them as inline threads. The body is prose mixed with
nested collapsible HTML, roughly:

    <details>
    <summary>🧹 Nitpick comments (3)</summary><blockquote>

    <details>
    <summary>src/app.py (2)</summary><blockquote>

    `12-15`: **Title of the first nitpick.**

    Free-form detail, possibly with its own nested <details> callouts.

    ---

    `40`: **Title of the second nitpick.**
    ...
    </blockquote></details>
    ...
    </blockquote></details>

    <details>
    <summary>📜 Review details</summary>
    ...

Nothing guarantees this is well formed, so extraction is a chain of small
functions (marker check, section isolation, per-file grouping, record
splitting, markup cleanup), each of which degrades by returning less, never
by raising.

Block nesting is resolved by counting <details> tags found with flat regex
scans rather than by one large backtracking pattern.
"""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass
from typing import Iterable

from prtriage_core.models import NitpickComment, Review

logger = logging.getLogger(__name__)

NITPICK_MARKER = "Nitpick comments"

_SECTION_HEADER_RE = re.compile(
    r"<summary>\s*🧹\s*Nitpick comments\s*\((\d+)\)\s*</summary>\s*(?:<blockquote>)?",
    re.IGNORECASE,
)
_SECTION_END_RE = re.compile(r"<summary>\s*📜\s*Review details\s*</summary>", re.IGNORECASE)

_DETAILS_TAG_RE = re.compile(r"<(/?)details\b[^>]*>", re.IGNORECASE)
_SUMMARY_OPEN_RE = re.compile(r"\s*<summary\b[^>]*>", re.IGNORECASE)
_SUMMARY_CLOSE = "</summary>"
_BLOCKQUOTE_OPEN_RE = re.compile(r"^\s*<blockquote\b[^>]*>", re.IGNORECASE)
_BLOCKQUOTE_CLOSE_RE = re.compile(r"</blockquote\s*>\s*$", re.IGNORECASE)

_FILE_GROUP_SUMMARY_RE = re.compile(r"^(\S.*?)\s*\((\d+)\)$")

_RECORD_START_RE = re.compile(r"^[ \t]*`(\d+(?:-\d+)?)`[ \t]*:?[ \t]*\*\*(.+?)\*\*", re.MULTILINE)
_RULE_RE = re.compile(r"^[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*$", re.MULTILINE)
_STRAY_CLOSE_RE = re.compile(r"</(?:blockquote|details)\s*>", re.IGNORECASE)
_FENCE_RE = re.compile(r"^[ \t]*```[^\n]*\n.*?^[ \t]*```[ \t]*$", re.MULTILINE | re.DOTALL)

_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_HTML_TAG_RE = re.compile(r"</?[A-Za-z][^<>]*>")
_BLANK_LINES_RE = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")


@dataclass(frozen=True)
class FileGroup:
    filename: str
    text: str
    announced: int = 0


@dataclass(frozen=True)
class NitpickRecord:
    line_range: str
    title: str
    detail: str


@dataclass(frozen=True)
class _Block:
    """A balanced <details> block: [start, end) covers both tags."""

    start: int
    end: int
    summary: str | None
    content: str


# --------------------------------------------------------------------------- #
# Lexing helpers                                                               #
# --------------------------------------------------------------------------- #


def _make_block(text: str, start: int, inner_start: int, inner_end: int, end: int) -> _Block:
    inner = text[inner_start:inner_end]
    summary = None
    match = _SUMMARY_OPEN_RE.match(inner)
    if match:
        close = inner.find(_SUMMARY_CLOSE, match.end())
        if close != -1:
            summary = inner[match.end() : close].strip()
            inner = inner[close + len(_SUMMARY_CLOSE) :]
    return _Block(start=start, end=end, summary=summary, content=inner)


def top_level_blocks(text: str) -> list[_Block]:
    """Return the balanced <details> blocks at nesting depth 0, in order.

    Closing tags with no open block are ignored (they belong to a block that
    encloses ``text``). A block left open at the end of ``text`` is dropped.
    """
    blocks: list[_Block] = []
    depth = 0
    open_start = open_end = 0
    for match in _DETAILS_TAG_RE.finditer(text):
        if match.group(1):
            if depth == 0:
                continue
            depth -= 1
            if depth == 0:
                blocks.append(_make_block(text, open_start, open_end, match.start(), match.end()))
        else:
            if depth == 0:
                open_start, open_end = match.start(), match.end()
            depth += 1
    return blocks


def _first_unbalanced_close(text: str) -> int:
    """Index of the first </details> that closes a block opened before ``text``."""
    depth = 0
    for match in _DETAILS_TAG_RE.finditer(text):
        if match.group(1):
            if depth == 0:
                return match.start()
            depth -= 1
        else:
            depth += 1
    return len(text)


def _unwrap_blockquote(content: str) -> str:
    opening = _BLOCKQUOTE_OPEN_RE.match(content)
    if not opening:
        return content
    inner = content[opening.end() :]
    closing = _BLOCKQUOTE_CLOSE_RE.search(inner)
    if closing:
        inner = inner[: closing.start()]
    return inner


def _nested_spans(text: str) -> list[tuple[int, int]]:
    """Spans of nested blocks and code fences; record markers inside them don't count."""
    spans = [(b.start, b.end) for b in top_level_blocks(text)]
    spans.extend((m.start(), m.end()) for m in _FENCE_RE.finditer(text))
    return spans


def _at_top_level(pos: int, spans: list[tuple[int, int]]) -> bool:
    return not any(start <= pos < end for start, end in spans)


# --------------------------------------------------------------------------- #
# Parsing steps                                                                #
# --------------------------------------------------------------------------- #


def has_nitpick_marker(body: str) -> bool:
    """Cheap substring check before any regex work."""
    return NITPICK_MARKER in body


def isolate_nitpick_section(body: str) -> str | None:
    """Return the text between the nitpick header and the "Review details" block.

    Returns None when either end is missing. A missing trailing marker yields
    no nitpicks rather than matching to the end of the body.
    """
    header = _SECTION_HEADER_RE.search(body)
    if not header:
        return None
    trailer = _SECTION_END_RE.search(body, header.end())
    if not trailer:
        logger.debug("Nitpick section has no trailing 'Review details' marker; skipping.")
        return None
    return body[header.end() : trailer.start()]


def split_file_groups(section: str) -> list[FileGroup]:
    """Return one FileGroup per ``<filename> (<count>)`` block in the section.

    Only blocks before the nitpick block's own closing tag are considered, so
    sibling sections between it and "Review details" are never read as files.
    """
    section = section[: _first_unbalanced_close(section)]
    groups: list[FileGroup] = []
    for block in top_level_blocks(section):
        if block.summary is None:
            continue
        match = _FILE_GROUP_SUMMARY_RE.match(block.summary)
        if not match:
            logger.debug("Skipping block with unrecognised summary: %r", block.summary[:80])
            continue
        groups.append(
            FileGroup(
                filename=match.group(1),
                text=_unwrap_blockquote(block.content),
                announced=int(match.group(2)),
            )
        )
    return groups


def split_comment_records(text: str) -> list[NitpickRecord]:
    """Split a file group into its line-range / title / detail records.

    A detail runs until whichever comes first: the next record, a horizontal
    rule, a stray closing tag, or the end of the text. Markers inside nested
    blocks or code fences are not boundaries.
    """
    spans = _nested_spans(text)
    starts = [m for m in _RECORD_START_RE.finditer(text) if _at_top_level(m.start(), spans)]
    if not starts:
        return []

    boundaries = sorted(
        m.start()
        for pattern in (_RULE_RE, _STRAY_CLOSE_RE)
        for m in pattern.finditer(text)
        if _at_top_level(m.start(), spans)
    )

    records: list[NitpickRecord] = []
    for i, start in enumerate(starts):
        limit = starts[i + 1].start() if i + 1 < len(starts) else len(text)
        j = bisect.bisect_left(boundaries, start.end())
        stop = boundaries[j] if j < len(boundaries) and boundaries[j] < limit else limit
        records.append(
            NitpickRecord(
                line_range=start.group(1),
                title=start.group(2).strip(),
                detail=text[start.end() : stop],
            )
        )
    return records


def clean_detail(detail: str) -> str:
    """Drop nested <details> callouts entirely, then strip remaining markup."""
    pieces: list[str] = []
    pos = 0
    for block in top_level_blocks(detail):
        pieces.append(detail[pos : block.start])
        pos = block.end
    pieces.append(detail[pos:])

    text = _HTML_COMMENT_RE.sub("", "".join(pieces))
    text = _HTML_TAG_RE.sub("", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def compose_body(record: NitpickRecord) -> str:
    return f"{record.title}\n\n{clean_detail(record.detail)}".strip()


# --------------------------------------------------------------------------- #
# Public API                                                                   #
# --------------------------------------------------------------------------- #


def extract_nitpick_comments(review: Review) -> list[NitpickComment]:
    """Return the nitpicks embedded in one review body, in document order.

    Author and timestamp come from the review; the format does not attribute
    individual nitpicks.
    """
    if not has_nitpick_marker(review.body):
        return []

    section = isolate_nitpick_section(review.body)
    if section is None:
        return []

    comments: list[NitpickComment] = []
    for group in split_file_groups(section):
        records = split_comment_records(group.text)
        if group.announced and len(records) != group.announced:
            logger.debug(
                "%s announces %d nitpick(s) but %d were recovered",
                group.filename,
                group.announced,
                len(records),
            )
        comments.extend(
            NitpickComment(
                author=review.author,
                body=compose_body(record),
                created_at=review.created_at,
                file=group.filename,
                line=record.line_range,
            )
            for record in records
        )
    return comments


def extract_all_nitpick_comments(reviews: Iterable[Review]) -> list[NitpickComment]:
    """Flat-map extract_nitpick_comments over reviews. No cross-review deduplication."""
    return [comment for review in reviews for comment in extract_nitpick_comments(review)]
