"""Handlebars placeholder extractor.

Parses Handlebars template text far enough to tell simple substitution
placeholders (``{{name}}``) apart from structural constructs (blocks,
partials, comments, decorators) and reports the variables the top-level
placeholders reference.

The tokenizer follows the Handlebars lexer rules for identifiers, literals,
paths and sub-expressions, so the same templates that Handlebars rejects are
rejected here with a TemplateParseError.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from simple_te.interfaces.extractor import BaseExtractor, TemplateParseError

logger = logging.getLogger(__name__)


class ExtractionRule(str, Enum):
    """Which part of a placeholder names the variable."""

    # {{helper name}} -> "name", {{name}} -> "name"
    FIRST_PARAM_OR_PATH = "first_param_or_path"
    # {{helper name}} -> "helper"
    PATH_ONLY = "path_only"


# =============================================================================
# Syntax Tree
# =============================================================================


@dataclass(frozen=True)
class PathExpression:
    """A variable reference such as ``name``, ``a.b``, ``../x`` or ``@index``."""

    original: str
    parts: tuple[str, ...]
    depth: int = 0
    data: bool = False
    this: bool = False

    @property
    def resolvable(self) -> bool:
        """Whether the path names a top-level variable of the render context."""
        return bool(self.parts) and self.depth == 0 and not self.data

    @property
    def name(self) -> str:
        return identifier_for(self.parts)


@dataclass(frozen=True)
class Literal:
    """A string, number, boolean, null or undefined literal."""

    kind: str
    original: str


@dataclass(frozen=True)
class SubExpression:
    """A parenthesized helper call, e.g. ``(lookup items 1)``."""

    path: "Expression"
    params: tuple["Expression", ...] = ()
    hash: tuple[tuple[str, "Expression"], ...] = ()

    @property
    def original(self) -> str:
        return ""


Expression = Union[PathExpression, Literal, SubExpression]


@dataclass(frozen=True)
class MustacheStatement:
    """A substitution placeholder: ``{{x}}``, ``{{{x}}}`` or ``{{&x}}``."""

    path: Expression
    params: tuple[Expression, ...] = ()
    hash: tuple[tuple[str, Expression], ...] = ()
    escaped: bool = True
    start: int = 0
    end: int = 0
    kind: str = field(default="mustache", init=False)


@dataclass(frozen=True)
class StructuralStatement:
    """Any tag that is not a substitution placeholder."""

    kind: str
    name: str = ""
    start: int = 0
    end: int = 0


Statement = Union[MustacheStatement, StructuralStatement]


@dataclass(frozen=True)
class Escape:
    """Backslashes in front of ``{{`` in template text.

    ``\\{{`` makes the following text literal up to the next ``{{``;
    ``\\\\{{`` emits a single backslash before a real tag.

    Attributes:
        start: Offset of the first backslash.
        end: Offset just past the replaced span.
        literal: True for ``\\{{`` (span covers the braces), False for
            ``\\\\{{`` (span covers the two backslashes only).
    """

    start: int
    end: int
    literal: bool


# =============================================================================
# Identifiers
# =============================================================================

_BRACKETED_PART_RE = re.compile(r"\[((?:\\\]|[^\]])*)\](?=\.|\Z)")


def _quote_part(part: str) -> str:
    if any(char in part for char in ".[]"):
        return "[" + part.replace("]", "\\]") + "]"
    return part


def identifier_for(parts: tuple[str, ...]) -> str:
    """Join path segments into a variable identifier.

    Segments are joined with ``.``; a segment that itself contains ``.``,
    ``[`` or ``]`` is bracketed so ``{{[a.b]}}`` and ``{{a.b}}`` stay distinct.
    """
    return ".".join(_quote_part(part) for part in parts)


def identifier_parts(identifier: str) -> tuple[str, ...]:
    """Split an identifier built by identifier_for back into its segments."""
    parts: list[str] = []
    pos = 0
    while True:
        match = _BRACKETED_PART_RE.match(identifier, pos)
        if match is not None:
            parts.append(match.group(1).replace("\\]", "]"))
            pos = match.end()
        else:
            end = identifier.find(".", pos)
            if end == -1:
                end = len(identifier)
            parts.append(identifier[pos:end])
            pos = end
        if pos >= len(identifier):
            return tuple(parts)
        # skip the separator
        pos += 1


# =============================================================================
# Tokenizer
# =============================================================================

OPEN = "{{"

# Characters Handlebars accepts in an identifier.
_ID_CHARS = r'[^\s!"#%-,./;->@\[-^`{-~]'
_LOOKAHEAD = r"(?=[=~}\s/.)|])"

_TOKEN_RE = re.compile(
    r"(?P<open_sexpr>\()"
    r"|(?P<close_sexpr>\))"
    r"|(?P<block_params>as\s+\|[^|]*\|)"
    r"|(?P<string>\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*')"
    r"|(?P<number>-?[0-9]+(?:\.[0-9]+)?" + _LOOKAHEAD + ")"
    r"|(?P<boolean>(?:true|false)" + _LOOKAHEAD + ")"
    r"|(?P<undefined>undefined" + _LOOKAHEAD + ")"
    r"|(?P<null>null" + _LOOKAHEAD + ")"
    r"|(?P<parent>\.\.)"
    r"|(?P<this>\." + _LOOKAHEAD + ")"
    r"|(?P<sep>[./])"
    r"|(?P<data>@)"
    r"|(?P<segment>\[(?:\\\]|[^\]])*\])"
    r"|(?P<id>" + _ID_CHARS + "+" + _LOOKAHEAD + ")"
    r"|(?P<equals>=)"
)
_WS_RE = re.compile(r"\s+")
_PLAIN_ID_RE = re.compile(_ID_CHARS + "+")
_NUMBER_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")
_CLOSE_RE = re.compile(r"~?\}\}")
_TRIPLE_CLOSE_RE = re.compile(r"\}~?\}\}")
_LONG_COMMENT_END_RE = re.compile(r"--~?\}\}")
_STANDALONE_INVERSE_RE = re.compile(r"\s*~?\}\}")
_ELSE_RE = re.compile(r"else(?=[\s~}])")
_RAW_OPEN_RE = re.compile(r"\{\{\{\{\s*([^\s{}~]+)[^}]*\}\}\}\}")

_KEYWORDS = frozenset({"true", "false", "null", "undefined", "this", "else"})


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    pos: int
    spaced: bool


class _TokenStream:
    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._index = 0

    def peek(self, offset: int = 0) -> _Token | None:
        index = self._index + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def next(self) -> _Token | None:
        token = self.peek()
        if token is not None:
            self._index += 1
        return token

    def at_end(self) -> bool:
        return self._index >= len(self._tokens)


# =============================================================================
# Parser
# =============================================================================


class HandlebarsParser:
    """Parses a template into its top-level statements.

    Tags nested inside blocks are still validated but are not returned;
    only statements at block depth zero reach the caller.
    """

    def __init__(self, template: str) -> None:
        self._src = template
        self._len = len(template)
        self.escapes: list[Escape] = []

    def parse(self) -> list[Statement]:
        """Parse the template.

        Returns:
            Top-level statements in source order. Plain text is omitted.

        Raises:
            TemplateParseError: If the template is malformed.
        """
        statements: list[Statement] = []
        blocks: list[tuple[str, int]] = []
        pos = 0

        while True:
            start = self._src.find(OPEN, pos)
            if start == -1:
                break

            if self._is_escaped(start):
                self.escapes.append(Escape(start - 1, start + len(OPEN), literal=True))
                pos = start + len(OPEN)
                continue
            if start >= 2 and self._src[start - 2 : start] == "\\\\":
                self.escapes.append(Escape(start - 2, start, literal=False))

            if self._src.startswith("{{{{", start):
                pos = self._skip_raw_block(start)
                if not blocks:
                    statements.append(StructuralStatement("raw_block", start=start, end=pos))
                continue

            statement = self._parse_tag(start)
            pos = statement.end

            match statement.kind:
                case "block_open":
                    if not blocks:
                        statements.append(statement)
                    blocks.append((statement.name, start))
                case "block_close":
                    if not blocks:
                        raise TemplateParseError(
                            f"Unexpected closing block '{statement.name}'", start
                        )
                    open_name, _ = blocks.pop()
                    if open_name != statement.name:
                        raise TemplateParseError(
                            f"'{open_name}' doesn't match '{statement.name}'", start
                        )
                case "inverse":
                    if not blocks:
                        raise TemplateParseError("Unexpected 'else' outside of a block", start)
                case _:
                    if not blocks:
                        statements.append(statement)

        if blocks:
            name, open_pos = blocks[-1]
            raise TemplateParseError(f"Unclosed block '{name}'", open_pos)

        return statements

    def _is_escaped(self, index: int) -> bool:
        # \{{ is a literal, \\{{ is a backslash followed by a real tag
        if index == 0 or self._src[index - 1] != "\\":
            return False
        return not (index > 1 and self._src[index - 2] == "\\")

    def _skip_raw_block(self, start: int) -> int:
        match = _RAW_OPEN_RE.match(self._src, start)
        if match is None:
            raise TemplateParseError("Invalid raw block", start)
        closing = "{{{{/" + match.group(1) + "}}}}"
        end = self._src.find(closing, match.end())
        if end == -1:
            raise TemplateParseError(f"Unclosed raw block '{match.group(1)}'", start)
        return end + len(closing)

    def _parse_tag(self, start: int) -> Statement:
        src = self._src
        p = start + len(OPEN)
        if src.startswith("~", p):
            p += 1

        if src.startswith("!--", p):
            match = _LONG_COMMENT_END_RE.search(src, p + 3)
            if match is None:
                raise TemplateParseError("Unterminated comment", start)
            return StructuralStatement("comment", start=start, end=match.end())

        if src.startswith("!", p):
            end = src.find("}}", p + 1)
            if end == -1:
                raise TemplateParseError("Unterminated comment", start)
            return StructuralStatement("comment", start=start, end=end + 2)

        if src.startswith("{", p):
            head, params, hash_pairs, end = self._parse_call_tag(start, p + 1, triple=True)
            return MustacheStatement(head, params, hash_pairs, escaped=False, start=start, end=end)

        if src.startswith("&", p):
            head, params, hash_pairs, end = self._parse_call_tag(start, p + 1)
            return MustacheStatement(head, params, hash_pairs, escaped=False, start=start, end=end)

        for prefix, kind in (("#>", "block_open"), ("#*", "block_open"), ("#", "block_open")):
            if src.startswith(prefix, p):
                head, _, _, end = self._parse_call_tag(start, p + len(prefix))
                return StructuralStatement(kind, name=head.original, start=start, end=end)

        if src.startswith("^", p):
            match = _STANDALONE_INVERSE_RE.match(src, p + 1)
            if match is not None:
                return StructuralStatement("inverse", start=start, end=match.end())
            head, _, _, end = self._parse_call_tag(start, p + 1)
            return StructuralStatement("block_open", name=head.original, start=start, end=end)

        if src.startswith("/", p):
            head, _, _, end = self._parse_call_tag(start, p + 1)
            return StructuralStatement("block_close", name=head.original, start=start, end=end)

        if src.startswith(">", p):
            head, _, _, end = self._parse_call_tag(start, p + 1)
            return StructuralStatement("partial", name=head.original, start=start, end=end)

        if src.startswith("*", p):
            head, _, _, end = self._parse_call_tag(start, p + 1)
            return StructuralStatement("decorator", name=head.original, start=start, end=end)

        if _ELSE_RE.match(src, p):
            tokens, end = self._lex(start, p + len("else"))
            if tokens:
                # {{else if cond}} chains onto the enclosing block
                self._parse_call(_TokenStream(tokens), start)
            return StructuralStatement("inverse", start=start, end=end)

        head, params, hash_pairs, end = self._parse_call_tag(start, p)
        return MustacheStatement(head, params, hash_pairs, start=start, end=end)

    def _parse_call_tag(
        self, start: int, p: int, triple: bool = False
    ) -> tuple[Expression, tuple[Expression, ...], tuple[tuple[str, Expression], ...], int]:
        tokens, end = self._lex(start, p, triple)
        stream = _TokenStream(tokens)
        head, params, hash_pairs = self._parse_call(stream, start)
        if not stream.at_end():
            token = stream.next()
            raise TemplateParseError(f"Unexpected {token.text!r}", token.pos)
        return head, params, hash_pairs, end

    def _lex(self, start: int, p: int, triple: bool = False) -> tuple[list[_Token], int]:
        """Tokenize a tag body up to and including its closing delimiter."""
        close_re = _TRIPLE_CLOSE_RE if triple else _CLOSE_RE
        if self._src.find("}}", p) == -1:
            raise TemplateParseError("Unterminated placeholder", start)

        tokens: list[_Token] = []
        spaced = False
        while True:
            if p >= self._len:
                raise TemplateParseError("Unterminated placeholder", start)

            ws = _WS_RE.match(self._src, p)
            if ws is not None:
                spaced = True
                p = ws.end()
                continue

            close = close_re.match(self._src, p)
            if close is not None:
                return tokens, close.end()

            match = _TOKEN_RE.match(self._src, p)
            if match is None:
                bad = _PLAIN_ID_RE.match(self._src, p)
                bad_pos = bad.end() if bad is not None else p
                if bad_pos >= self._len:
                    raise TemplateParseError("Unterminated placeholder", start)
                raise TemplateParseError(
                    f"Invalid character {self._src[bad_pos]!r} in placeholder", bad_pos
                )

            tokens.append(_Token(match.lastgroup or "", match.group(), p, spaced))
            spaced = False
            p = match.end()

    def _parse_call(
        self, stream: _TokenStream, start: int
    ) -> tuple[Expression, tuple[Expression, ...], tuple[tuple[str, Expression], ...]]:
        if stream.at_end():
            raise TemplateParseError("Empty placeholder", start)

        head = self._parse_operand(stream, start)
        params: list[Expression] = []
        hash_pairs: list[tuple[str, Expression]] = []

        while not stream.at_end() and stream.peek().kind != "close_sexpr":
            token = stream.peek()
            if not token.spaced:
                raise TemplateParseError(f"Unexpected {token.text!r}", token.pos)

            if token.kind == "block_params":
                stream.next()
                continue

            following = stream.peek(1)
            if token.kind == "id" and following is not None and following.kind == "equals":
                stream.next()
                stream.next()
                hash_pairs.append((token.text, self._parse_operand(stream, start)))
                continue

            if hash_pairs:
                raise TemplateParseError(
                    "Positional argument after hash argument", token.pos
                )
            params.append(self._parse_operand(stream, start))

        return head, tuple(params), tuple(hash_pairs)

    def _parse_operand(self, stream: _TokenStream, start: int) -> Expression:
        token = stream.next()
        if token is None:
            raise TemplateParseError("Missing argument", start)

        match token.kind:
            case "open_sexpr":
                head, params, hash_pairs = self._parse_call(stream, token.pos)
                closing = stream.next()
                if closing is None or closing.kind != "close_sexpr":
                    raise TemplateParseError("Unclosed sub-expression", token.pos)
                return SubExpression(head, params, hash_pairs)
            case "string":
                return Literal("string", _unquote(token.text))
            case "number" | "boolean" | "null" | "undefined":
                return Literal(token.kind, token.text)
            case "data" | "id" | "segment" | "parent" | "this":
                return self._parse_path(token, stream)
            case _:
                raise TemplateParseError(f"Unexpected {token.text!r}", token.pos)

    def _parse_path(self, first: _Token, stream: _TokenStream) -> PathExpression:
        data = first.kind == "data"
        text = [first.text]
        head = first
        if data:
            head = stream.next()
            if head is None or head.spaced or head.kind not in ("id", "segment"):
                raise TemplateParseError("Invalid data reference", first.pos)
            text.append(head.text)

        segments = [head]
        while True:
            sep = stream.peek()
            if sep is None or sep.kind != "sep" or sep.spaced:
                break
            stream.next()
            segment = stream.next()
            if segment is None or segment.spaced or segment.kind not in (
                "id",
                "segment",
                "parent",
                "this",
            ):
                raise TemplateParseError("Invalid path", sep.pos)
            text.extend((sep.text, segment.text))
            segments.append(segment)

        original = "".join(text)
        parts: list[str] = []
        depth = 0
        this = False
        for segment in segments:
            if segment.kind == "segment":
                parts.append(segment.text[1:-1].replace("\\]", "]"))
            elif segment.text == "..":
                if parts or this:
                    raise TemplateParseError(f"Invalid path: {original}", segment.pos)
                depth += 1
            elif segment.text in (".", "this"):
                if parts or this:
                    raise TemplateParseError(f"Invalid path: {original}", segment.pos)
                this = True
            else:
                parts.append(segment.text)

        return PathExpression(original, tuple(parts), depth=depth, data=data, this=this)


def _unquote(text: str) -> str:
    quote = text[0]
    return text[1:-1].replace("\\" + quote, quote)


# =============================================================================
# Extractor
# =============================================================================


def resolve_identifier(
    statement: MustacheStatement,
    rule: ExtractionRule = ExtractionRule.FIRST_PARAM_OR_PATH,
) -> str | None:
    """Pick the variable a placeholder refers to.

    Args:
        statement: A top-level substitution placeholder.
        rule: Which part of the placeholder names the variable.

    Returns:
        The identifier, or None when the reference is not a literal
        top-level name (literals, sub-expressions, ``this``, ``../x``,
        ``@data`` variables).
    """
    candidate = statement.path
    if rule is ExtractionRule.FIRST_PARAM_OR_PATH and statement.params:
        first = statement.params[0]
        if isinstance(first, PathExpression):
            candidate = first

    if isinstance(candidate, PathExpression) and candidate.resolvable:
        return candidate.name
    return None


class HandlebarsExtractor(BaseExtractor):
    """Extracts variables from top-level Handlebars substitution placeholders.

    Placeholders nested inside blocks and all structural tags are ignored.
    """

    def __init__(
        self,
        rule: ExtractionRule | str = ExtractionRule.FIRST_PARAM_OR_PATH,
    ) -> None:
        """Initialize the extractor.

        Args:
            rule: Which part of a placeholder names the variable.
        """
        self._rule = ExtractionRule(rule)

    @property
    def rule(self) -> ExtractionRule:
        return self._rule

    def extract_variables(self, template: str) -> tuple[str, ...]:
        """Extract identifiers in first-occurrence order without duplicates.

        Raises:
            TemplateParseError: If the template is malformed.
        """
        seen: dict[str, None] = {}
        for statement in HandlebarsParser(template).parse():
            if not isinstance(statement, MustacheStatement):
                continue
            name = resolve_identifier(statement, self._rule)
            if name is None:
                logger.debug(f"Skipping unresolvable placeholder at offset {statement.start}")
                continue
            seen.setdefault(name, None)
        return tuple(seen)

    def path_for(self, name: str) -> tuple[str, ...]:
        return identifier_parts(name)

    def placeholder_for(self, name: str) -> str:
        """Return ``{{name}}``, bracketing segments Handlebars cannot read bare."""
        segments = [
            "[" + part.replace("]", "\\]") + "]" if _needs_brackets(part) else part
            for part in identifier_parts(name)
        ]
        return "{{" + ".".join(segments) + "}}"


def find_escapes(template: str) -> tuple[Escape, ...]:
    """Locate backslash escapes in front of tags, in source order.

    Raises:
        TemplateParseError: If the template is malformed.
    """
    parser = HandlebarsParser(template)
    parser.parse()
    return tuple(parser.escapes)


def _needs_brackets(part: str) -> bool:
    return (
        part in _KEYWORDS
        or _PLAIN_ID_RE.fullmatch(part) is None
        or _NUMBER_RE.fullmatch(part) is not None
    )
