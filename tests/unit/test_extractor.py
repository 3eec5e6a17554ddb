"""Unit tests for the Handlebars placeholder extractor."""

import pytest

from simple_te.interfaces.extractor import ExtractionResult, TemplateParseError
from simple_te.strategies.extractors.handlebars import (
    Escape,
    ExtractionRule,
    HandlebarsExtractor,
    HandlebarsParser,
    MustacheStatement,
    PathExpression,
    find_escapes,
    identifier_for,
    identifier_parts,
)


# =============================================================================
# Extraction Tests
# =============================================================================


class TestHandlebarsExtractor:
    """Test suite for HandlebarsExtractor with the default rule."""

    @pytest.fixture
    def extractor(self):
        """Create an extractor with the default naming rule."""
        return HandlebarsExtractor()

    def test_single_variable(self, extractor):
        """Test that a bare placeholder yields its name."""
        assert extractor.extract_variables("{{hello}}") == ("hello",)

    def test_duplicates_collapse_in_first_occurrence_order(self, extractor):
        """Test de-duplication keeps the first occurrence position."""
        assert extractor.extract_variables("{{b}} {{a}} {{b}} {{c}} {{a}}") == ("b", "a", "c")

    def test_empty_and_plain_text(self, extractor):
        """Test that templates without placeholders yield nothing."""
        assert extractor.extract_variables("") == ()
        assert extractor.extract_variables("just some text { } }}") == ()

    def test_whitespace_and_strip_markers(self, extractor):
        """Test that inner whitespace and ~ markers are ignored."""
        assert extractor.extract_variables("{{ spaced }} {{~trim~}}") == ("spaced", "trim")

    def test_unescaped_placeholders(self, extractor):
        """Test triple-stash and ampersand placeholders are substitutions too."""
        assert extractor.extract_variables("{{{raw}}} {{&amp}}") == ("raw", "amp")

    def test_block_is_not_a_variable(self, extractor):
        """Test that a block construct is excluded."""
        assert extractor.extract_variables("{{#if x}}yes{{/if}}") == ()

    def test_placeholders_inside_blocks_are_excluded(self, extractor):
        """Test only top-level placeholders are reported."""
        template = "{{#if x}}{{inner}}{{/if}} {{outer}}"
        assert extractor.extract_variables(template) == ("outer",)

    def test_else_chains(self, extractor):
        """Test else and else-if inside blocks parse cleanly."""
        template = "{{#if a}}x{{else if b}}y{{else}}z{{/if}}{{c}}"
        assert extractor.extract_variables(template) == ("c",)

    def test_each_with_else_and_block_params(self, extractor):
        """Test each blocks with block params and inverse sections."""
        template = "{{#each items as |item|}}{{item}}{{^}}none{{/each}}{{after}}"
        assert extractor.extract_variables(template) == ("after",)

    def test_comments_are_excluded(self, extractor):
        """Test that short and long comments are skipped, including their content."""
        template = "{{! note }}{{!-- {{hidden}} --}}{{shown}}"
        assert extractor.extract_variables(template) == ("shown",)

    def test_partials_and_decorators_are_excluded(self, extractor):
        """Test partials and decorators are structural."""
        template = "{{> header}}{{* deco}}{{#> layout}}{{x}}{{/layout}}{{name}}"
        assert extractor.extract_variables(template) == ("name",)

    def test_raw_block_is_excluded(self, extractor):
        """Test raw blocks are skipped without parsing their content."""
        template = "{{{{raw}}}} {{not a var! }} {{{{/raw}}}}{{y}}"
        assert extractor.extract_variables(template) == ("y",)

    def test_escaped_placeholder_is_text(self, extractor):
        """Test that a backslash-escaped placeholder is literal text."""
        assert extractor.extract_variables("\\{{escaped}} {{real}}") == ("real",)

    def test_helper_call_uses_first_param(self, extractor):
        """Test that a helper call names its first argument."""
        assert extractor.extract_variables("{{upper name}}") == ("name",)

    def test_helper_with_literal_argument_uses_path(self, extractor):
        """Test a literal first argument falls back to the helper path."""
        assert extractor.extract_variables('{{t "greeting"}}') == ("t",)

    def test_helper_with_subexpression_argument_uses_path(self, extractor):
        """Test a sub-expression first argument falls back to the helper path."""
        assert extractor.extract_variables("{{format (lookup a b)}}") == ("format",)

    def test_hash_arguments_do_not_name_the_variable(self, extractor):
        """Test hash-only placeholders use the path."""
        assert extractor.extract_variables("{{foo bar=baz}}") == ("foo",)

    def test_dotted_paths(self, extractor):
        """Test dot and slash separators yield the same identifier."""
        assert extractor.extract_variables("{{person.name}} {{person/name}}") == ("person.name",)

    def test_this_prefixed_path(self, extractor):
        """Test that this.name resolves to name."""
        assert extractor.extract_variables("{{this.name}}") == ("name",)

    def test_literal_segment(self, extractor):
        """Test bracketed segments allow otherwise invalid names."""
        assert extractor.extract_variables("{{[first name]}}") == ("first name",)

    def test_unresolvable_references_are_skipped(self, extractor):
        """Test dynamic references are skipped rather than failing."""
        template = '{{this}} {{.}} {{@index}} {{../x}} {{"lit"}} {{1}} {{true}} {{kept}}'
        assert extractor.extract_variables(template) == ("kept",)

    def test_deterministic(self, extractor):
        """Test that repeated extraction yields identical results."""
        template = "{{b}} {{#if x}}{{y}}{{/if}} {{a}} {{upper c}}"
        assert extractor.extract_variables(template) == extractor.extract_variables(template)

    def test_placeholder_for(self, extractor):
        """Test placeholder markup for plain, dotted and bracketed names."""
        assert extractor.placeholder_for("hello") == "{{hello}}"
        assert extractor.placeholder_for("person.name") == "{{person.name}}"
        assert extractor.placeholder_for("first name") == "{{[first name]}}"
        assert extractor.placeholder_for("true") == "{{[true]}}"

    def test_bracketed_dotted_segment_is_distinct(self, extractor):
        """Test that [a.b] is one segment and not the path a.b."""
        assert extractor.extract_variables("{{[a.b]}} {{a.b}}") == ("[a.b]", "a.b")
        assert extractor.path_for("[a.b]") == ("a.b",)
        assert extractor.path_for("a.b") == ("a", "b")

    def test_placeholder_for_bracketed_dotted_segment(self, extractor):
        """Test that a literal dot survives the placeholder round trip."""
        assert extractor.placeholder_for("[a.b]") == "{{[a.b]}}"
        assert extractor.placeholder_for("x.[a.b]") == "{{x.[a.b]}}"


class TestPathOnlyRule:
    """Test suite for the path-only naming rule."""

    def test_helper_call_uses_path(self):
        """Test that the helper name is reported under path_only."""
        extractor = HandlebarsExtractor(rule=ExtractionRule.PATH_ONLY)
        assert extractor.extract_variables("{{upper name}} {{plain}}") == ("upper", "plain")

    def test_rule_accepts_string(self):
        """Test the rule can be given by value."""
        extractor = HandlebarsExtractor(rule="path_only")
        assert extractor.rule is ExtractionRule.PATH_ONLY

    def test_unknown_rule_rejected(self):
        """Test that an unknown rule name raises ValueError."""
        with pytest.raises(ValueError):
            HandlebarsExtractor(rule="nope")


# =============================================================================
# Parse Error Tests
# =============================================================================


class TestParseErrors:
    """Test suite for malformed templates."""

    @pytest.fixture
    def extractor(self):
        """Create an extractor with the default naming rule."""
        return HandlebarsExtractor()

    @pytest.mark.parametrize(
        "template",
        [
            "{{unterminated",
            "{{}}",
            "{{foo!}}",
            "{{a b c",
            "{{#if x}}never closed",
            "{{/if}}",
            "{{#if x}}{{/each}}",
            "{{else}}",
            "{{!-- unterminated comment",
            "{{foo bar=baz qux}}",
            "{{(foo}}",
            "{{{{raw}}}} no close",
        ],
    )
    def test_malformed_templates_raise(self, extractor, template):
        """Test that malformed syntax raises TemplateParseError."""
        with pytest.raises(TemplateParseError):
            extractor.extract_variables(template)

    def test_error_position(self, extractor):
        """Test that the error points at the unclosed block."""
        with pytest.raises(TemplateParseError) as exc_info:
            extractor.extract_variables("text {{#if x}}")

        assert exc_info.value.position == 5
        assert exc_info.value.to_dict() == {
            "message": "Unclosed block 'if'",
            "position": 5,
        }

    def test_invalid_character_position(self, extractor):
        """Test that the offending character is located."""
        with pytest.raises(TemplateParseError) as exc_info:
            extractor.extract_variables("{{foo!}}")

        assert exc_info.value.position == 5

    def test_extract_returns_result_instead_of_raising(self, extractor):
        """Test the Result-style API reports the failure."""
        result = extractor.extract("{{unterminated")

        assert isinstance(result, ExtractionResult)
        assert result.ok is False
        assert result.variables == ()
        assert "Unterminated" in result.error

    def test_extract_success(self, extractor):
        """Test the Result-style API on a valid template."""
        result = extractor.extract("{{a}}{{b}}")

        assert result.ok is True
        assert result.variables == ("a", "b")
        assert result.error is None


# =============================================================================
# Parser Tests
# =============================================================================


class TestHandlebarsParser:
    """Test suite for the statement-level parser."""

    def test_top_level_statements(self):
        """Test that nested tags are not returned."""
        statements = HandlebarsParser("{{a}}{{#if b}}{{c}}{{/if}}{{! d }}").parse()

        assert [s.kind for s in statements] == ["mustache", "block_open", "comment"]

    def test_mustache_statement_shape(self):
        """Test path, params and hash of a helper call."""
        (statement,) = HandlebarsParser("{{link url text=title}}").parse()

        assert isinstance(statement, MustacheStatement)
        assert statement.path == PathExpression("link", ("link",))
        assert statement.params == (PathExpression("url", ("url",)),)
        assert statement.hash[0][0] == "text"
        assert statement.start == 0
        assert statement.end == len("{{link url text=title}}")

    def test_parent_and_data_paths(self):
        """Test depth and data flags on special paths."""
        parent, data = HandlebarsParser("{{../up}}{{@root.x}}").parse()

        assert parent.path.depth == 1
        assert parent.path.resolvable is False
        assert data.path.data is True
        assert data.path.original == "@root.x"

    def test_backslash_escapes_are_recorded(self):
        """Test escape spans for literal and double-backslash forms."""
        parser = HandlebarsParser("\\{{a}} \\\\{{b}}")
        statements = parser.parse()

        assert [s.path.name for s in statements] == ["b"]
        assert parser.escapes == [
            Escape(0, 3, literal=True),
            Escape(7, 9, literal=False),
        ]

    def test_find_escapes(self):
        """Test the module-level escape scan."""
        assert find_escapes("{{a}}") == ()
        assert find_escapes("x\\{{a}}") == (Escape(1, 4, literal=True),)


# =============================================================================
# Identifier Tests
# =============================================================================


class TestIdentifiers:
    """Test suite for identifier_for and identifier_parts."""

    @pytest.mark.parametrize(
        "parts,identifier",
        [
            (("name",), "name"),
            (("person", "name"), "person.name"),
            (("first name",), "first name"),
            (("a.b",), "[a.b]"),
            (("x", "a.b", "y"), "x.[a.b].y"),
            (("odd]",), "[odd\\]]"),
        ],
    )
    def test_identifier_round_trip(self, parts, identifier):
        """Test that parts and identifiers convert both ways."""
        assert identifier_for(parts) == identifier
        assert identifier_parts(identifier) == parts
