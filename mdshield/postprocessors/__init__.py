# mdshield/postprocessors/__init__.py

from mdshield.preprocessors.code_blocks import unshield_code_blocks
from mdshield.preprocessors.directives import unshield_directives
from mdshield.preprocessors.html_snippets import unshield_html_snippets

POSTPROCESSORS = [
    unshield_html_snippets,  # Strips the <p> the renderer put around snippet tokens
    unshield_code_blocks,  # Snippets may contain code placeholders
    unshield_directives,  # Last: directives may sit inside code or HTML
    # Order matters - reverse of PREPROCESSORS
]


def apply_postprocessors(html, context):
    """Apply all postprocessors in order"""
    for processor in POSTPROCESSORS:
        html = processor(html, context)
    return html
