# mdshield/preprocessors/html_snippets.py
"""
Preprocessor that hides block-level raw HTML from the markdown renderer.

Only standalone elements are shielded. An element is standalone when its
source spans several lines, or when it starts at column 1 and the line ends
right after it:

    <div class="note">        → ==HTML_SNIPPET_0==
      Some <b>text</b>
    </div>

    This is <b>bold</b> text. → unchanged (inline)

Standalone elements that follow each other directly, or with at most one blank
line between them, are merged into one snippet so the renderer never puts a
paragraph between them:

    <div>A</div>
                              → ==HTML_SNIPPET_0==
    <div>B</div>

On the way back the renderer will have wrapped a lone token in <p>...</p>;
that wrapper is removed together with the token.
"""

import logging
import re
from typing import List, NamedTuple, Optional

from mdshield.placeholders import (
    PlaceholderRegistry,
    list_lookup,
    positional_registry,
    substitute_placeholders,
    token_pattern,
)
from mdshield.structure import StructuralNode, StructureParser, parse_structure

logger = logging.getLogger(__name__)

SNIPPET_CATEGORY = "HTML_SNIPPET"

PARAGRAPH_SNIPPET_RE = token_pattern(SNIPPET_CATEGORY, prefix="<p>", suffix="</p>")
SNIPPET_TOKEN_RE = token_pattern(SNIPPET_CATEGORY)

# What may separate two standalone elements that get merged: nothing, a line
# break, or exactly one blank line
MERGEABLE_GAP_RE = re.compile(r"(?:\r?\n(?:[ \t]*\r?\n)?)?")

_CONTEXT_KEY = "__html_snippets"
_PARSER_KEY = "structure_parser"


class HTMLExtraction(NamedTuple):
    content: str
    snippets: List[str]


def is_standalone(node: StructuralNode, text: str) -> bool:
    if node.start_line != node.end_line:
        return True
    # End of text counts as end of line
    return node.start_col == 1 and text[node.end : node.end + 1] in ("", "\n", "\r")


def extract_html_snippets(
    text: str,
    parse: Optional[StructureParser] = None,
    registry: Optional[PlaceholderRegistry] = None,
) -> HTMLExtraction:
    """
    Replace standalone HTML elements with placeholders.

    Args:
        text: Markdown text with code blocks already shielded
        parse: Structural parser returning top-level nodes with source spans
            (default: ``parse_structure``)
        registry: Registry to allocate tokens from (default: a fresh one).
            It must number from 0, so token number == list index

    Returns:
        The shielded text and the list of snippets

    Raises:
        ValueError: ``registry`` does not number from 0
    """
    parse = parse or parse_structure
    registry = positional_registry(registry)

    # gaps[i] is the text written before snippets[i]
    gaps: List[str] = []
    snippets: List[str] = []
    last_end = 0

    for node in parse(text):
        if not node.is_element or node.start < last_end:
            continue
        if not is_standalone(node, text):
            continue

        gap = text[last_end : node.start]
        snippet = text[node.start : node.end]

        # The gap runs from the end of the previous snippet, so inline
        # content in between rules out a merge
        if snippets and MERGEABLE_GAP_RE.fullmatch(gap):
            snippets[-1] += gap + snippet
        else:
            gaps.append(gap)
            snippets.append(snippet)

        last_end = node.end

    # Tokens are minted once snippets are final
    content: List[str] = []
    for gap, snippet in zip(gaps, snippets):
        content.append(gap)
        content.append(registry.allocate(SNIPPET_CATEGORY, snippet))
    content.append(text[last_end:])

    logger.debug("Shielded %d HTML snippet(s)", len(snippets))
    return HTMLExtraction("".join(content), registry.as_list())


def insert_html_snippets(snippets: List[str], content: str) -> str:
    """
    Put the snippets captured by ``extract_html_snippets`` back.

    Raises:
        UnresolvedToken: a token refers past the end of ``snippets``
    """
    lookup = list_lookup(snippets)
    content = substitute_placeholders(PARAGRAPH_SNIPPET_RE, content, lookup)
    return substitute_placeholders(SNIPPET_TOKEN_RE, content, lookup)


def shield_html_snippets(text: str, context: dict) -> str:
    """
    Pipeline entry point; keeps the snippets in ``context``.

    ``context["structure_parser"]`` replaces the default structural parser.
    """
    result = extract_html_snippets(text, parse=context.get(_PARSER_KEY))
    context[_CONTEXT_KEY] = result.snippets
    return result.content


def unshield_html_snippets(html: str, context: dict) -> str:
    """Pipeline entry point; consumes the snippets stored by ``shield_html_snippets``."""
    snippets = context.pop(_CONTEXT_KEY, None)
    if snippets is None:
        return html
    return insert_html_snippets(snippets, html)
