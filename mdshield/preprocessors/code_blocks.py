# mdshield/preprocessors/code_blocks.py
"""
Preprocessor that hides code blocks from later preprocessors and the renderer.

Code has to be out of the way before raw HTML is extracted, otherwise markup
inside code samples would be shielded as HTML.

Two passes:
- Fenced blocks (``` or ~~~) are replaced inline with ==CODEFENCE_ID_<n>==
- Indented blocks (4+ columns) are found by a line scanner and replaced with
  ==CODEBLOCK_ID_<n>== followed by an empty line

Indentation alone is ambiguous, because nested list items are indented too:

    1.  Foo
        1. Bar

A line whose indentation is followed by a bullet or ordinal marker never
starts a block. Blank lines are the other ambiguity: a single blank line is
held until the next line decides whether the block continues across it.

Transition table (state, line kind → next state, action):

    OUTSIDE        BLANK      → OUTSIDE        EMIT
    OUTSIDE        INDENTED   → IN_BLOCK       START
    OUTSIDE        LIST_ITEM  → OUTSIDE        EMIT
    OUTSIDE        OTHER      → OUTSIDE        EMIT
    IN_BLOCK       BLANK      → PENDING_BLANK  HOLD
    IN_BLOCK       INDENTED   → IN_BLOCK       EXTEND
    IN_BLOCK       LIST_ITEM  → IN_BLOCK       EXTEND
    IN_BLOCK       OTHER      → OUTSIDE        CLOSE
    PENDING_BLANK  BLANK      → OUTSIDE        CLOSE
    PENDING_BLANK  INDENTED   → IN_BLOCK       EXTEND
    PENDING_BLANK  LIST_ITEM  → IN_BLOCK       EXTEND
    PENDING_BLANK  OTHER      → OUTSIDE        CLOSE

CLOSE turns the run (plus a held blank line) into one token and then emits the
current line. End of text closes any open run.
"""

import logging
import re
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

from mdshield.placeholders import (
    PlaceholderRegistry,
    list_lookup,
    positional_registry,
    substitute_placeholders,
    token_pattern,
)

logger = logging.getLogger(__name__)

FENCE_CATEGORY = "CODEFENCE_ID"
BLOCK_CATEGORY = "CODEBLOCK_ID"

# Every indented block is followed by one empty line in the shielded text
BLOCK_SEPARATOR = "\n\n"

FENCED_BLOCK_RE = re.compile(r"(`{3,}|~{3,})[\s\S]*?\1")
# Lines end at "\n" only; form feeds and Unicode separators are line content
LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")
LIST_ITEM_RE = re.compile(r"^[ \t]+(?:[-*+]|\d+[.)])")
FENCE_TOKEN_RE = token_pattern(FENCE_CATEGORY)
BLOCK_TOKEN_RE = token_pattern(BLOCK_CATEGORY, suffix=f"(?:{BLOCK_SEPARATOR})?")

INDENT_WIDTH = 4
TAB_SIZE = 4

_CONTEXT_KEY = "__code_blocks"


class LineKind(Enum):
    BLANK = "blank"
    INDENTED = "indented"
    LIST_ITEM = "list_item"
    OTHER = "other"


class ScanState(Enum):
    OUTSIDE = "outside"
    IN_BLOCK = "in_block"
    PENDING_BLANK = "pending_blank"


class Action(Enum):
    EMIT = "emit"
    START = "start"
    EXTEND = "extend"
    HOLD = "hold"
    CLOSE = "close"


TRANSITIONS: Dict[Tuple[ScanState, LineKind], Tuple[ScanState, Action]] = {
    (ScanState.OUTSIDE, LineKind.BLANK): (ScanState.OUTSIDE, Action.EMIT),
    (ScanState.OUTSIDE, LineKind.INDENTED): (ScanState.IN_BLOCK, Action.START),
    (ScanState.OUTSIDE, LineKind.LIST_ITEM): (ScanState.OUTSIDE, Action.EMIT),
    (ScanState.OUTSIDE, LineKind.OTHER): (ScanState.OUTSIDE, Action.EMIT),
    (ScanState.IN_BLOCK, LineKind.BLANK): (ScanState.PENDING_BLANK, Action.HOLD),
    (ScanState.IN_BLOCK, LineKind.INDENTED): (ScanState.IN_BLOCK, Action.EXTEND),
    (ScanState.IN_BLOCK, LineKind.LIST_ITEM): (ScanState.IN_BLOCK, Action.EXTEND),
    (ScanState.IN_BLOCK, LineKind.OTHER): (ScanState.OUTSIDE, Action.CLOSE),
    (ScanState.PENDING_BLANK, LineKind.BLANK): (ScanState.OUTSIDE, Action.CLOSE),
    (ScanState.PENDING_BLANK, LineKind.INDENTED): (ScanState.IN_BLOCK, Action.EXTEND),
    (ScanState.PENDING_BLANK, LineKind.LIST_ITEM): (ScanState.IN_BLOCK, Action.EXTEND),
    (ScanState.PENDING_BLANK, LineKind.OTHER): (ScanState.OUTSIDE, Action.CLOSE),
}


class CodeBlockExtraction(NamedTuple):
    content: str
    code_blocks: List[str]


def indent_width(line: str) -> int:
    """Width of the leading whitespace in columns, tabs expanded."""
    stripped = line.lstrip(" \t")
    return len(line[: len(line) - len(stripped)].expandtabs(TAB_SIZE))


def classify_line(line: str) -> LineKind:
    if not line.strip():
        return LineKind.BLANK
    if indent_width(line) >= INDENT_WIDTH:
        if LIST_ITEM_RE.match(line):
            return LineKind.LIST_ITEM
        return LineKind.INDENTED
    return LineKind.OTHER


class _IndentedBlockScanner:
    """Runs the transition table over the lines of one document."""

    def __init__(self, registry: PlaceholderRegistry):
        self.registry = registry
        self.state = ScanState.OUTSIDE
        self.output: List[str] = []
        self.run: List[str] = []
        self.held: Optional[str] = None

    def feed(self, line: str) -> None:
        self.state, action = TRANSITIONS[(self.state, classify_line(line))]

        if action is Action.EMIT:
            self.output.append(line)
        elif action is Action.START:
            self.run = [line]
        elif action is Action.EXTEND:
            if self.held is not None:
                self.run.append(self.held)
                self.held = None
            self.run.append(line)
        elif action is Action.HOLD:
            self.held = line
        elif action is Action.CLOSE:
            self._close_run()
            self.output.append(line)

    def finish(self) -> str:
        if self.state is not ScanState.OUTSIDE:
            self._close_run()
            self.state = ScanState.OUTSIDE
        return "".join(self.output)

    def _close_run(self) -> None:
        if self.held is not None:
            self.run.append(self.held)
            self.held = None
        token = self.registry.allocate(BLOCK_CATEGORY, "".join(self.run))
        self.output.append(token + BLOCK_SEPARATOR)
        self.run = []


def extract_code_blocks(
    text: str, registry: Optional[PlaceholderRegistry] = None
) -> CodeBlockExtraction:
    """
    Replace fenced and indented code blocks with placeholders.

    Args:
        text: Markdown text (directives may already be shielded)
        registry: Registry to allocate tokens from (default: a fresh one).
            It must number from 0, so token number == list index

    Returns:
        The shielded text and the list of extracted blocks

    Raises:
        ValueError: ``registry`` does not number from 0
    """
    registry = positional_registry(registry)

    def save_fence(match):
        return registry.allocate(FENCE_CATEGORY, match.group(0))

    content = FENCED_BLOCK_RE.sub(save_fence, text)
    fences = len(registry)

    scanner = _IndentedBlockScanner(registry)
    for line in LINE_RE.findall(content):
        scanner.feed(line)
    content = scanner.finish()

    logger.debug(
        "Shielded %d fenced and %d indented code block(s)",
        fences,
        len(registry) - fences,
    )
    return CodeBlockExtraction(content, registry.as_list())


def insert_code_blocks(code_blocks: List[str], content: str) -> str:
    """
    Put the blocks captured by ``extract_code_blocks`` back.

    Indented blocks go first since they may contain fence placeholders.

    Raises:
        UnresolvedToken: a token refers past the end of ``code_blocks``
    """
    lookup = list_lookup(code_blocks)
    content = substitute_placeholders(BLOCK_TOKEN_RE, content, lookup)
    return substitute_placeholders(FENCE_TOKEN_RE, content, lookup)


def shield_code_blocks(text: str, context: dict) -> str:
    """Pipeline entry point; keeps the extracted blocks in ``context``."""
    result = extract_code_blocks(text)
    context[_CONTEXT_KEY] = result.code_blocks
    return result.content


def unshield_code_blocks(html: str, context: dict) -> str:
    """Pipeline entry point; consumes the blocks stored by ``shield_code_blocks``."""
    code_blocks = context.pop(_CONTEXT_KEY, None)
    if code_blocks is None:
        return html
    return insert_code_blocks(code_blocks, html)
