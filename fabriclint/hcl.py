"""A small parser for the HCL native syntax used by Terraform configuration files."""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, NamedTuple


class HCLSyntaxError(Exception):
    """Raised when configuration text is not valid HCL."""

    def __init__(self, message: str, filename: str = "", line: int = 0, column: int = 0):
        super().__init__(f"{filename}:{line},{column}: {message}")
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column


@dataclass(frozen=True)
class Range:
    """A span of source text; lines and columns start at 1, the end is exclusive."""

    filename: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def __str__(self) -> str:
        return (
            f"{self.filename}:{self.start_line},{self.start_column}"
            f"-{self.end_line},{self.end_column}"
        )


@dataclass(frozen=True)
class Traversal:
    """A reference such as ``fabric_workspace.example.id``.

    Each step is a pair ``("attr", name)`` or ``("index", key)``.
    """

    root: str
    steps: tuple[tuple[str, Any], ...]
    range: Range

    def __str__(self) -> str:
        text = self.root
        for kind, value in self.steps:
            text += f".{value}" if kind == "attr" else f"[{value!r}]"
        return text


@dataclass(frozen=True)
class _Opaque:
    """An expression that cannot be evaluated without a full interpreter."""

    text: str


@dataclass
class Attribute:
    name: str
    expr: Any
    range: Range


@dataclass
class Block:
    type: str
    labels: tuple[str, ...]
    body: "Body"
    def_range: Range
    range: Range


@dataclass
class Body:
    attributes: dict[str, Attribute] = field(default_factory=dict)
    blocks: list[Block] = field(default_factory=list)

    def blocks_of_type(self, type_name: str) -> list[Block]:
        """Return the nested blocks of the given type, in source order."""
        return [block for block in self.blocks if block.type == type_name]


class _Token(NamedTuple):
    kind: str
    value: Any
    start: int
    end: int


_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_HEREDOC_RE = re.compile(r"<<(-?)([A-Za-z_][A-Za-z0-9_-]*)\r?\n")
_TEMPLATE_RE = re.compile(r"(?<![$%])[$%]\{")
_PUNCT_MULTI = ("...", "==", "!=", "<=", ">=", "&&", "||", "=>")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
_CLOSERS = {",", ")", "]", "}"}


class _Locator:
    def __init__(self, text: str, filename: str):
        self.filename = filename
        self.line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def position(self, offset: int) -> tuple[int, int]:
        line = bisect_right(self.line_starts, offset)
        return line, offset - self.line_starts[line - 1] + 1

    def range(self, start: int, end: int) -> Range:
        return Range(self.filename, *self.position(start), *self.position(end))

    def error(self, message: str, offset: int) -> HCLSyntaxError:
        return HCLSyntaxError(message, self.filename, *self.position(offset))


def _skip_template(text: str, i: int, err: Callable[[str, int], HCLSyntaxError]) -> int:
    depth = 1
    start = i
    while i < len(text):
        ch = text[i]
        if ch == '"':
            _, i = _lex_string(text, i, err)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    raise err("unterminated template sequence", start)


def _lex_string(text: str, i: int, err: Callable[[str, int], HCLSyntaxError]) -> tuple[Any, int]:
    start = i
    j = i + 1
    out: list[str] = []
    templated = False
    while True:
        if j >= len(text) or text[j] == "\n":
            raise err("unterminated string literal", start)
        ch = text[j]
        if ch == '"':
            j += 1
            break
        if ch == "\\":
            code = text[j + 1 : j + 2]
            if code in _ESCAPES:
                out.append(_ESCAPES[code])
                j += 2
            elif code in ("u", "U"):
                width = 4 if code == "u" else 8
                digits = text[j + 2 : j + 2 + width]
                if len(digits) != width or not all(d in "0123456789abcdefABCDEF" for d in digits):
                    raise err("invalid unicode escape", j)
                out.append(chr(int(digits, 16)))
                j += 2 + width
            else:
                raise err(f"invalid escape sequence \\{code}", j)
            continue
        if ch in "$%" and text.startswith(ch + ch + "{", j):
            out.append(ch + "{")
            j += 3
            continue
        if ch in "$%" and text.startswith(ch + "{", j):
            templated = True
            j = _skip_template(text, j + 2, err)
            continue
        out.append(ch)
        j += 1
    if templated:
        return _Opaque(text[start:j]), j
    return "".join(out), j


def _lex_heredoc(text: str, i: int, match: re.Match, err) -> tuple[Any, int]:
    strip_indent, marker = match.group(1) == "-", match.group(2)
    pos = match.end()
    lines: list[str] = []
    while True:
        if pos >= len(text):
            raise err(f"unterminated heredoc {marker}", i)
        newline = text.find("\n", pos)
        line_end = len(text) if newline < 0 else newline
        line = text[pos:line_end]
        if line.strip() == marker:
            end = line_end
            break
        lines.append(line.rstrip("\r"))
        pos = line_end + 1
    if strip_indent:
        widths = [len(line) - len(line.lstrip(" \t")) for line in lines if line.strip()]
        cut = min(widths, default=0)
        lines = [line[cut:] for line in lines]
    content = "".join(line + "\n" for line in lines)
    if _TEMPLATE_RE.search(content):
        return _Opaque(text[i:end]), end
    return content.replace("$${", "${").replace("%%{", "%{"), end


def _tokenize(text: str, locator: _Locator) -> list[_Token]:
    err = locator.error
    tokens: list[_Token] = []
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if c in " \t\r":
            i += 1
            continue
        if c == "\n":
            tokens.append(_Token("NEWLINE", "\n", i, i + 1))
            i += 1
            continue
        if c == "#" or text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline < 0 else newline
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close < 0:
                raise err("unterminated comment", i)
            i = close + 2
            continue
        if m := _IDENT_RE.match(text, i):
            tokens.append(_Token("IDENT", m.group(), i, m.end()))
            i = m.end()
            continue
        if m := _NUMBER_RE.match(text, i):
            raw = m.group()
            number = float(raw) if any(ch in raw for ch in ".eE") else int(raw)
            tokens.append(_Token("NUMBER", number, i, m.end()))
            i = m.end()
            continue
        if c == '"':
            value, end = _lex_string(text, i, err)
            tokens.append(_Token("STRING", value, i, end))
            i = end
            continue
        if m := _HEREDOC_RE.match(text, i):
            value, end = _lex_heredoc(text, i, m, err)
            tokens.append(_Token("STRING", value, i, end))
            i = end
            continue
        punct = next((p for p in _PUNCT_MULTI if text.startswith(p, i)), c)
        tokens.append(_Token("PUNCT", punct, i, i + len(punct)))
        i += len(punct)
    tokens.append(_Token("EOF", None, n, n))
    return tokens


_NO_VALUE = object()


class _Parser:
    def __init__(self, text: str, filename: str):
        self.text = text
        self.locator = _Locator(text, filename)
        self.tokens = _tokenize(text, self.locator)
        self.pos = 0
        self.last_end = 0

    def peek(self, ahead: int = 0) -> _Token:
        return self.tokens[min(self.pos + ahead, len(self.tokens) - 1)]

    def advance(self) -> _Token:
        token = self.peek()
        self.pos += 1
        self.last_end = token.end
        return token

    def is_punct(self, value: str, ahead: int = 0) -> bool:
        token = self.peek(ahead)
        return token.kind == "PUNCT" and token.value == value

    def expect_punct(self, value: str) -> _Token:
        if not self.is_punct(value):
            raise self.locator.error(f"expected '{value}'", self.peek().start)
        return self.advance()

    def skip_newlines(self) -> None:
        while self.peek().kind == "NEWLINE":
            self.advance()

    def at_terminator(self) -> bool:
        token = self.peek()
        return token.kind in ("NEWLINE", "EOF") or (token.kind == "PUNCT" and token.value in _CLOSERS)

    def parse_body(self, nested: bool) -> Body:
        body = Body()
        while True:
            self.skip_newlines()
            token = self.peek()
            if token.kind == "EOF":
                if nested:
                    raise self.locator.error("expected '}' to close block", token.start)
                return body
            if nested and self.is_punct("}"):
                return body
            if token.kind != "IDENT":
                raise self.locator.error("expected attribute or block", token.start)
            name = self.advance()
            if self.is_punct("="):
                self.advance()
                expr, _, end = self.parse_expression()
                if name.value in body.attributes:
                    raise self.locator.error(f"duplicate attribute {name.value!r}", name.start)
                body.attributes[name.value] = Attribute(
                    name.value, expr, self.locator.range(name.start, end)
                )
            else:
                body.blocks.append(self.parse_block(name))
            if not (self.peek().kind in ("NEWLINE", "EOF") or (nested and self.is_punct("}"))):
                raise self.locator.error("expected newline", self.peek().start)

    def parse_block(self, name: _Token) -> Block:
        labels: list[str] = []
        header_end = name.end
        while self.peek().kind in ("STRING", "IDENT"):
            label = self.advance()
            if not isinstance(label.value, str):
                raise self.locator.error("block labels must be plain strings", label.start)
            labels.append(label.value)
            header_end = label.end
        self.expect_punct("{")
        body = self.parse_body(nested=True)
        close = self.expect_punct("}")
        return Block(
            type=name.value,
            labels=tuple(labels),
            body=body,
            def_range=self.locator.range(name.start, header_end),
            range=self.locator.range(name.start, close.end),
        )

    def parse_expression(self) -> tuple[Any, int, int]:
        first = self.peek()
        value = self.parse_primary()
        if value is not _NO_VALUE and self.at_terminator():
            return value, first.start, self.last_end
        if value is _NO_VALUE and self.at_terminator():
            raise self.locator.error("expected expression", first.start)
        depth = 0
        while True:
            token = self.peek()
            if token.kind == "EOF":
                if depth:
                    raise self.locator.error("unbalanced brackets in expression", first.start)
                break
            if depth == 0 and self.at_terminator():
                break
            if token.kind == "PUNCT" and token.value in "([{":
                depth += 1
            elif token.kind == "PUNCT" and token.value in ")]}":
                depth -= 1
            self.advance()
        return _Opaque(self.text[first.start : self.last_end]), first.start, self.last_end

    def parse_primary(self) -> Any:
        token = self.peek()
        if token.kind in ("STRING", "NUMBER"):
            return self.advance().value
        if token.kind == "PUNCT" and token.value == "-" and self.peek(1).kind == "NUMBER":
            self.advance()
            return -self.advance().value
        if token.kind == "IDENT":
            literals = {"true": True, "false": False, "null": None}
            if token.value in literals:
                self.advance()
                return literals[token.value]
            return self.parse_traversal()
        if self.is_punct("["):
            return self.parse_list()
        if self.is_punct("{"):
            return self.parse_object()
        return _NO_VALUE

    def parse_traversal(self) -> Any:
        root = self.advance()
        steps: list[tuple[str, Any]] = []
        dynamic = False
        while True:
            if self.is_punct(".") and self.peek(1).kind == "IDENT":
                self.advance()
                steps.append(("attr", self.advance().value))
            elif self.is_punct(".") and self.peek(1).kind == "NUMBER" and isinstance(self.peek(1).value, int):
                self.advance()
                steps.append(("index", self.advance().value))
            elif self.is_punct("["):
                self.advance()
                self.skip_newlines()
                key, _, _ = self.parse_expression()
                self.skip_newlines()
                self.expect_punct("]")
                if isinstance(key, (str, int)) and not isinstance(key, bool):
                    steps.append(("index", key))
                else:
                    dynamic = True
            else:
                break
        if dynamic:
            return _Opaque(self.text[root.start : self.last_end])
        return Traversal(root.value, tuple(steps), self.locator.range(root.start, self.last_end))

    def parse_list(self) -> list:
        self.advance()
        items = []
        while True:
            self.skip_newlines()
            if self.is_punct("]"):
                break
            value, _, _ = self.parse_expression()
            items.append(value)
            self.skip_newlines()
            if self.is_punct(","):
                self.advance()
            elif not self.is_punct("]"):
                raise self.locator.error("expected ',' or ']'", self.peek().start)
        self.advance()
        return items

    def parse_object(self) -> dict:
        self.advance()
        result: dict[str, Any] = {}
        while True:
            self.skip_newlines()
            if self.is_punct("}"):
                break
            key = self.peek()
            if key.kind not in ("IDENT", "STRING", "NUMBER") or isinstance(key.value, _Opaque):
                raise self.locator.error("expected object key", key.start)
            self.advance()
            if not (self.is_punct("=") or self.is_punct(":")):
                raise self.locator.error("expected '=' or ':'", self.peek().start)
            self.advance()
            value, _, _ = self.parse_expression()
            result[str(key.value)] = value
            if self.is_punct(","):
                self.advance()
        self.advance()
        return result


def parse(text: str, filename: str = "") -> Body:
    """Parse HCL source text into a Body."""
    return _Parser(text, filename).parse_body(nested=False)


def parse_file(path: str | Path) -> Body:
    """Read and parse an HCL file."""
    path = Path(path)
    return parse(path.read_text(encoding="utf-8"), str(path))