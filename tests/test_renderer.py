"""Integration tests for the full shield → render → restore pipeline."""

import pytest

from mdshield.placeholders import UnresolvedToken
from mdshield.renderer import render_markdown, shield_markdown, unshield_markdown

DOCUMENT = (
    "# Title {{title}}\n"
    "\n"
    "Intro with <b>inline</b> markup and {{{raw}}}.\n"
    "\n"
    "```html\n"
    "<div>{{not_a_snippet}}</div>\n"
    "```\n"
    "\n"
    "    indented <span>code</span>\n"
    "    more code\n"
    "\n"
    '<div class="card">\n'
    "  {{body}}\n"
    "</div>\n"
    "\n"
    "<aside>note</aside>\n"
    "\n"
    "1.  Foo\n"
    "    1. Bar\n"
)


@pytest.mark.integration
class TestPipelineRoundTrip:
    def test_identity_renderer_reproduces_the_document(self, identity_renderer) -> None:
        assert render_markdown(DOCUMENT, convert=identity_renderer) == DOCUMENT

    def test_renderer_only_sees_safe_text(self) -> None:
        seen = []

        def spy(text):
            seen.append(text)
            return text

        render_markdown(DOCUMENT, convert=spy)

        (shielded,) = seen
        assert "{{" not in shielded
        assert "```" not in shielded
        assert '<div class="card">' not in shielded
        assert "<aside>" not in shielded
        # inline markup and list continuations are left for the renderer
        assert "<b>inline</b>" in shielded
        assert "    1. Bar\n" in shielded

    def test_shield_and_unshield_halves(self) -> None:
        context: dict = {}

        shielded = shield_markdown(DOCUMENT, context)

        assert "==HANDLEBARS_ID_1==" in shielded
        assert "==CODEFENCE_ID_0==" in shielded
        assert "==CODEBLOCK_ID_1==\n\n" in shielded
        assert "==HTML_SNIPPET_0==" in shielded
        assert unshield_markdown(shielded, context) == DOCUMENT

    def test_context_is_consumed(self, identity_renderer) -> None:
        context: dict = {}

        render_markdown(DOCUMENT, context=context, convert=identity_renderer)

        assert not [key for key in context if key.startswith("__")]


@pytest.mark.integration
class TestPythonMarkdownRenderer:
    def test_raw_html_is_not_wrapped_in_a_paragraph(self) -> None:
        html = render_markdown('Hello {{name}}!\n\n<div class="x">\n*raw*\n</div>\n')

        assert "<p>Hello {{name}}!</p>" in html
        assert '<div class="x">\n*raw*\n</div>' in html
        assert "<em>" not in html
        assert "<p><div" not in html

    def test_prose_is_rendered(self) -> None:
        html = render_markdown("Some *emphasis* and {{value}}.\n")

        assert html == "<p>Some <em>emphasis</em> and {{value}}.</p>"


@pytest.mark.integration
class TestPipelineErrors:
    def test_renderer_inventing_a_token_fails_loudly(self) -> None:
        with pytest.raises(UnresolvedToken):
            render_markdown("plain text\n", convert=lambda text: text + "==HTML_SNIPPET_7==")

    def test_custom_structure_parser_from_context(self) -> None:
        seen = []

        def spy(text):
            seen.append(text)
            return text

        context = {"structure_parser": lambda text: []}
        render_markdown("<div>\nA\n</div>\n", context=context, convert=spy)

        assert seen == ["<div>\nA\n</div>\n"]
