"""Unit tests for template directive shielding."""

import pytest

from mdshield.placeholders import UnresolvedToken
from mdshield.preprocessors.directives import (
    extract_directives,
    insert_directives,
    shield_directives,
    unshield_directives,
)


@pytest.mark.unit
class TestExtractDirectives:
    def test_double_brace_directive(self) -> None:
        result = extract_directives("Hello {{name}}!")

        assert result.content == "Hello ==HANDLEBARS_ID_1==!"
        assert result.handlebars == {"==HANDLEBARS_ID_1==": "{{name}}"}

    def test_triple_brace_directive_is_one_token(self) -> None:
        result = extract_directives("{{{raw}}}")

        assert result.content == "==HANDLEBARS_ID_1=="
        assert result.handlebars == {"==HANDLEBARS_ID_1==": "{{{raw}}}"}

    def test_triple_braces_are_taken_before_double(self) -> None:
        result = extract_directives("{{a}} and {{{b}}}")

        assert result.content == "==HANDLEBARS_ID_2== and ==HANDLEBARS_ID_1=="
        assert result.handlebars["==HANDLEBARS_ID_1=="] == "{{{b}}}"
        assert result.handlebars["==HANDLEBARS_ID_2=="] == "{{a}}"

    def test_directive_spanning_lines(self) -> None:
        result = extract_directives("{{#each items\n  as |item|}}")

        assert result.content == "==HANDLEBARS_ID_1=="
        assert result.handlebars["==HANDLEBARS_ID_1=="] == "{{#each items\n  as |item|}}"

    def test_shortest_match_wins(self) -> None:
        result = extract_directives("{{#if a}}yes{{/if}}")

        assert result.content == "==HANDLEBARS_ID_1==yes==HANDLEBARS_ID_2=="

    def test_unterminated_directive_is_left_alone(self) -> None:
        result = extract_directives("Hello {{name")

        assert result.content == "Hello {{name"
        assert result.handlebars == {}


@pytest.mark.unit
class TestInsertDirectives:
    @pytest.mark.parametrize(
        "text",
        [
            "Hello {{name}}!",
            "{{{raw}}}",
            "{{#each items}}\n- {{this}}\n{{/each}}\n",
            "{{a {{{b}}} }}",
            "no directives at all",
            "",
        ],
    )
    def test_round_trip(self, text: str) -> None:
        result = extract_directives(text)

        assert insert_directives(result.handlebars, result.content) == text

    def test_restoring_plain_text_is_a_no_op(self) -> None:
        assert insert_directives({}, "Hello there") == "Hello there"

    def test_unknown_token_raises(self) -> None:
        content = extract_directives("Hello {{name}}!").content

        with pytest.raises(UnresolvedToken) as excinfo:
            insert_directives({}, content)

        assert excinfo.value.token == "==HANDLEBARS_ID_1=="

    def test_maps_from_different_documents_do_not_mix(self) -> None:
        first = extract_directives("{{a}} {{b}}")
        second = extract_directives("{{c}}")

        with pytest.raises(UnresolvedToken):
            insert_directives(second.handlebars, first.content)


@pytest.mark.unit
class TestDirectivePipelineHooks:
    def test_context_is_consumed(self) -> None:
        context: dict = {}

        shielded = shield_directives("Hi {{user}}", context)
        restored = unshield_directives(f"<p>{shielded}</p>", context)

        assert restored == "<p>Hi {{user}}</p>"
        assert context == {}

    def test_missing_context_entry_leaves_text_alone(self) -> None:
        assert unshield_directives("<p>text</p>", {}) == "<p>text</p>"
