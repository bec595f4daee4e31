# mdshield/renderer.py

import markdown

from .config import get_markdown_config
from .postprocessors import apply_postprocessors
from .preprocessors import apply_preprocessors


def convert_markdown(text):
    """Render markdown to HTML with Python-Markdown."""
    config = get_markdown_config()

    return markdown.markdown(
        text,
        extensions=config["extensions"],
        extension_configs=config["extension_configs"],
        output_format=config["output_format"],
    )


def shield_markdown(text, context):
    """Hide directives, code and block HTML; side data is kept in ``context``."""
    return apply_preprocessors(text, context)


def unshield_markdown(html, context):
    """Undo ``shield_markdown`` on rendered output, consuming ``context``."""
    return apply_postprocessors(html, context)


def render_markdown(text, context=None, convert=None):
    """
    Main rendering function with shield/restore pipeline around the renderer

    Args:
        text: Raw markdown text
        context: Optional dict shared by the processors of this one document
        convert: Markdown renderer, text in and text out (default: Python-Markdown)
    """
    context = {} if context is None else context
    convert = convert or convert_markdown

    # Pre-processing: hide everything the renderer must not touch
    text = shield_markdown(text, context)

    html = convert(text)

    # Post-processing: put it back, snippets first
    return unshield_markdown(html, context)
