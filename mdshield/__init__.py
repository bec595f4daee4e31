"""Shield template directives, code and raw HTML from a markdown renderer."""

from .placeholders import PlaceholderRegistry, UnknownToken, UnresolvedToken
from .preprocessors.code_blocks import extract_code_blocks, insert_code_blocks
from .preprocessors.directives import (
    extract_directives,
    insert_directives,
    restore_directives,
)
from .preprocessors.html_snippets import extract_html_snippets, insert_html_snippets
from .renderer import render_markdown, shield_markdown, unshield_markdown
from .structure import StructuralNode, parse_structure

__all__ = [
    "PlaceholderRegistry",
    "StructuralNode",
    "UnknownToken",
    "UnresolvedToken",
    "extract_code_blocks",
    "extract_directives",
    "extract_html_snippets",
    "insert_code_blocks",
    "insert_directives",
    "insert_html_snippets",
    "parse_structure",
    "render_markdown",
    "restore_directives",
    "shield_markdown",
    "unshield_markdown",
]
