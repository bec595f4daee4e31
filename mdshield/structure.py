# mdshield/structure.py
"""
Structural parse of a markdown document's raw markup.

The HTML shielder only needs the top-level siblings of the document, their
kind and where they sit in the source. This module answers that question with
BeautifulSoup's ``html.parser`` tree builder, which records the line and column
where every tag starts. End positions are recovered from the source: the end
of an element is the end of its own closing tag, found by counting start and
end tags of the same name, and never past the start of the next top-level
element. An element the parser had to close implicitly is reported as its
start tag alone.

Any callable with the signature of ``parse_structure`` can be used instead,
which keeps the shielding logic testable against hand-written spans.
"""

import bisect
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

ELEMENT = "element"
TEXT = "text"

# A start tag, allowing ">" inside quoted attribute values
START_TAG_RE = re.compile(r"""<[^\s/>]+(?:"[^"]*"|'[^']*'|[^'">])*>""")

# Bodies that may hold tag-like text without being markup
RAW_TEXT_ELEMENTS = {"script", "style", "textarea", "title"}
_SKIPPED_MARKUP = r"<!--[\s\S]*?-->|<(?P<raw>script|style)\b[^>]*>[\s\S]*?</(?P=raw)\s*>"


@dataclass(frozen=True)
class StructuralNode:
    """A top-level node; offsets index the source text, lines/columns are 1-based."""

    kind: str
    start: int
    end: int
    start_line: int
    end_line: int
    start_col: int

    @property
    def is_element(self) -> bool:
        return self.kind == ELEMENT


StructureParser = Callable[[str], Sequence[StructuralNode]]


class _SourceIndex:
    """Converts between (line, column) positions and offsets."""

    def __init__(self, text: str):
        self.text = text
        self.line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def offset(self, line: int, col: int) -> int:
        return self.line_starts[line - 1] + col

    def position(self, offset: int):
        line = bisect.bisect_right(self.line_starts, offset)
        return line, offset - self.line_starts[line - 1] + 1

    def node(self, kind: str, start: int, end: int) -> StructuralNode:
        start_line, start_col = self.position(start)
        end_line = start_line + self.text.count("\n", start, end)
        return StructuralNode(kind, start, end, start_line, end_line, start_col)


def _start_tag_end(text: str, start: int, limit: int) -> int:
    match = START_TAG_RE.match(text, start, limit)
    return match.end() if match else start + 1


def _closing_tag_end(text: str, name: str, pos: int, limit: int) -> Optional[int]:
    """
    End of the tag closing an element whose start tag ends at ``pos``.

    Start and end tags of the same name are counted so nested elements of that
    name are skipped; comments and script/style bodies are not counted. Only
    ``text[pos:limit]`` is searched. Returns None when the element is not
    closed before ``limit``.
    """
    escaped = re.escape(name)
    if name in RAW_TEXT_ELEMENTS:
        match = re.compile(rf"</{escaped}\s*>", re.IGNORECASE).search(text, pos, limit)
        return match.end() if match else None

    tags = re.compile(
        rf"{_SKIPPED_MARKUP}"
        rf"|<(?P<open>{escaped})(?=[\s/>])(?:\"[^\"]*\"|'[^']*'|[^'\">])*>"
        rf"|</(?P<close>{escaped})\s*>",
        re.IGNORECASE,
    )
    depth = 1
    for match in tags.finditer(text, pos, limit):
        if match.group("open"):
            if not match.group(0).endswith("/>"):
                depth += 1
        elif match.group("close"):
            depth -= 1
            if depth == 0:
                return match.end()
    return None


def _element_end(tag: Tag, start: int, text: str, limit: int) -> int:
    end = _start_tag_end(text, start, limit)

    if tag.can_be_empty_element or text[start:end].endswith("/>"):
        return end

    closing = _closing_tag_end(text, tag.name, end, limit)
    # Unclosed: only the start tag is reported
    return end if closing is None else closing


def parse_structure(text: str) -> List[StructuralNode]:
    """
    Parse ``text`` and return its top-level siblings in source order.

    Elements come with their full source span. The text between elements
    (prose, comments, entities) is reported as ``text`` nodes, so the returned
    nodes tile the whole document.
    """
    soup = BeautifulSoup(text, "html.parser")
    index = _SourceIndex(text)

    tags = [
        child
        for child in soup.contents
        if isinstance(child, Tag) and child.sourceline is not None
    ]
    starts = [index.offset(tag.sourceline, tag.sourcepos) for tag in tags]

    nodes: List[StructuralNode] = []
    last_end = 0
    for position, (tag, start) in enumerate(zip(tags, starts)):
        if start < last_end:
            # Already covered by the previous element's span
            continue
        # An element cannot run into the next top-level element
        limit = starts[position + 1] if position + 1 < len(starts) else len(text)
        end = _element_end(tag, start, text, limit)
        if start > last_end:
            nodes.append(index.node(TEXT, last_end, start))
        nodes.append(index.node(ELEMENT, start, end))
        last_end = end

    if last_end < len(text):
        nodes.append(index.node(TEXT, last_end, len(text)))
    return nodes
