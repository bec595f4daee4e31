# mdshield/preprocessors/__init__.py

from .code_blocks import shield_code_blocks
from .directives import shield_directives
from .html_snippets import shield_html_snippets

PREPROCESSORS = [
    shield_directives,  # Must run first: directives may sit inside code or HTML
    shield_code_blocks,  # Before HTML, so markup in code samples stays code
    shield_html_snippets,
    # Order matters - they run sequentially
]


def apply_preprocessors(text, context):
    """Apply all preprocessors in order"""
    for processor in PREPROCESSORS:
        text = processor(text, context)
    return text
