# mdshield/preprocessors/directives.py
"""
Preprocessor that hides template directives from the markdown renderer.

Converts:
    Hello {{name}}!          → Hello ==HANDLEBARS_ID_1==!
    {{{raw_html}}}           → ==HANDLEBARS_ID_1==

Triple-brace directives are taken first; otherwise their outer braces would be
matched as a double-brace directive and leave a stray brace pair behind.
Unterminated directives are left as they are.
"""

import logging
import re
from typing import Dict, NamedTuple, Optional

from mdshield.placeholders import (
    PlaceholderRegistry,
    UnresolvedToken,
    substitute_placeholders,
    token_pattern,
)

logger = logging.getLogger(__name__)

HANDLEBARS_CATEGORY = "HANDLEBARS_ID"

TRIPLE_DIRECTIVE_RE = re.compile(r"\{\{\{[\s\S]*?\}\}\}")
DOUBLE_DIRECTIVE_RE = re.compile(r"\{\{[\s\S]*?\}\}")
HANDLEBARS_TOKEN_RE = token_pattern(HANDLEBARS_CATEGORY)

_CONTEXT_KEY = "__handlebars"


class DirectiveExtraction(NamedTuple):
    content: str
    handlebars: Dict[str, str]


def extract_directives(
    text: str, registry: Optional[PlaceholderRegistry] = None
) -> DirectiveExtraction:
    """
    Replace every ``{{...}}`` and ``{{{...}}}`` with a placeholder.

    Args:
        text: Raw markdown text
        registry: Registry to allocate tokens from (default: a fresh one
            numbering from 1)

    Returns:
        The shielded text and a token → directive map
    """
    if registry is None:
        registry = PlaceholderRegistry(first_index=1)

    def save_directive(match):
        return registry.allocate(HANDLEBARS_CATEGORY, match.group(0))

    content = TRIPLE_DIRECTIVE_RE.sub(save_directive, text)
    content = DOUBLE_DIRECTIVE_RE.sub(save_directive, content)

    logger.debug("Shielded %d template directive(s)", len(registry))
    return DirectiveExtraction(content, registry.as_dict())


def insert_directives(handlebars: Dict[str, str], content: str) -> str:
    """
    Put the directives captured by ``extract_directives`` back.

    Raises:
        UnresolvedToken: a token in ``content`` is missing from ``handlebars``
    """

    def restore_directive(match):
        value = handlebars.get(match.group("token"))
        if value is None:
            raise UnresolvedToken(match.group("token"))
        return value

    return substitute_placeholders(HANDLEBARS_TOKEN_RE, content, restore_directive)


restore_directives = insert_directives


def shield_directives(text: str, context: dict) -> str:
    """Pipeline entry point; keeps the directive map in ``context``."""
    result = extract_directives(text)
    context[_CONTEXT_KEY] = result.handlebars
    return result.content


def unshield_directives(html: str, context: dict) -> str:
    """Pipeline entry point; consumes the map stored by ``shield_directives``."""
    handlebars = context.pop(_CONTEXT_KEY, None)
    if handlebars is None:
        return html
    return insert_directives(handlebars, html)
