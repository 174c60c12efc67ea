"""
Handlebars template parser.

Turns template source text into a syntax tree shaped like the Handlebars
AST: every node exposes a ``type`` discriminant (``MustacheStatement``,
``SubExpression``, ``BlockStatement``, ``StringLiteral`` ...) and a ``loc``
with one-based start/end lines.

Usage:
    tree = parse('{{#if user}}{{gettext "Hello"}}{{/if}}')
    tree.body[0].program.body[0].path.original  # 'gettext'

The parser only builds the tree. It does not compile or evaluate templates.
"""

import bisect
import re
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Union

from hbs_xgettext.errors import TemplateSyntaxError


@dataclass
class Position:
    line: int
    column: int


@dataclass
class SourceLocation:
    start: Position
    end: Position


@dataclass
class Program:
    type: ClassVar[str] = 'Program'

    body: list
    loc: Optional[SourceLocation] = None
    block_params: List[str] = field(default_factory=list)


@dataclass
class ContentStatement:
    type: ClassVar[str] = 'ContentStatement'

    value: str
    original: str
    loc: SourceLocation


@dataclass
class CommentStatement:
    type: ClassVar[str] = 'CommentStatement'

    value: str
    loc: SourceLocation


@dataclass
class PathExpression:
    type: ClassVar[str] = 'PathExpression'

    original: str
    data: bool
    parts: List[str]
    depth: int
    loc: SourceLocation


@dataclass
class StringLiteral:
    type: ClassVar[str] = 'StringLiteral'

    value: str
    original: str
    loc: SourceLocation


@dataclass
class NumberLiteral:
    type: ClassVar[str] = 'NumberLiteral'

    value: Union[int, float]
    original: str
    loc: SourceLocation


@dataclass
class BooleanLiteral:
    type: ClassVar[str] = 'BooleanLiteral'

    value: bool
    original: str
    loc: SourceLocation


@dataclass
class UndefinedLiteral:
    type: ClassVar[str] = 'UndefinedLiteral'

    original: str
    loc: SourceLocation


@dataclass
class NullLiteral:
    type: ClassVar[str] = 'NullLiteral'

    original: str
    loc: SourceLocation


@dataclass
class HashPair:
    type: ClassVar[str] = 'HashPair'

    key: str
    value: object
    loc: SourceLocation


@dataclass
class Hash:
    type: ClassVar[str] = 'Hash'

    pairs: List[HashPair]
    loc: SourceLocation


@dataclass
class SubExpression:
    type: ClassVar[str] = 'SubExpression'

    path: object
    params: list
    hash: Optional[Hash]
    loc: SourceLocation


@dataclass
class MustacheStatement:
    type: ClassVar[str] = 'MustacheStatement'

    path: object
    params: list
    hash: Optional[Hash]
    escaped: bool
    loc: SourceLocation


@dataclass
class BlockStatement:
    type: ClassVar[str] = 'BlockStatement'

    path: object
    params: list
    hash: Optional[Hash]
    program: Program
    inverse: Optional[Program]
    loc: SourceLocation


@dataclass
class PartialStatement:
    type: ClassVar[str] = 'PartialStatement'

    name: object
    params: list
    hash: Optional[Hash]
    loc: SourceLocation


@dataclass
class PartialBlockStatement:
    type: ClassVar[str] = 'PartialBlockStatement'

    name: object
    params: list
    hash: Optional[Hash]
    program: Program
    loc: SourceLocation


@dataclass
class Decorator:
    type: ClassVar[str] = 'Decorator'

    path: object
    params: list
    hash: Optional[Hash]
    loc: SourceLocation


@dataclass
class DecoratorBlock:
    type: ClassVar[str] = 'DecoratorBlock'

    path: object
    params: list
    hash: Optional[Hash]
    program: Program
    loc: SourceLocation


# Characters that may follow a literal or identifier inside a mustache
_LOOKAHEAD = r'(?=[=~}\s/.)|]|$)'
_ID_CHARS = r'[^\s!"#%-,\./;->@\[-\^`\{-~]'

_TOKEN_SPECS = [
    ('CLOSE', r'~?\}\}'),
    ('OPEN_SEXPR', r'\('),
    ('CLOSE_SEXPR', r'\)'),
    ('STRING', r'"(?:\\"|[^"])*"|\'(?:\\\'|[^\'])*\''),
    ('NUMBER', r'-?[0-9]+(?:\.[0-9]+)?' + _LOOKAHEAD),
    ('BOOLEAN', r'(?:true|false)' + _LOOKAHEAD),
    ('UNDEFINED', r'undefined' + _LOOKAHEAD),
    ('NULL', r'null' + _LOOKAHEAD),
    ('OPEN_BLOCK_PARAMS', r'as\s+\|'),
    ('CLOSE_BLOCK_PARAMS', r'\|'),
    ('EQUALS', r'='),
    ('DATA', r'@'),
    ('ID', r'\.\.|\.(?=[=~}\s/)|])|\[(?:\\\]|[^\]])*\]|' + _ID_CHARS + r'+' + _LOOKAHEAD),
    ('SEP', r'[./]'),
]


def _compile_tokens(close_pattern):
    specs = [('CLOSE', close_pattern)] + _TOKEN_SPECS[1:]
    return re.compile('|'.join(f'(?P<{kind}>{pattern})' for kind, pattern in specs))


_TOKEN_RE = _compile_tokens(r'~?\}\}')
_TOKEN_UNESCAPED_RE = _compile_tokens(r'~?\}\}\}')
_TOKEN_RAW_RE = _compile_tokens(r'\}\}\}\}')
_WHITESPACE_RE = re.compile(r'\s+')
_COMMENT_END_RE = re.compile(r'(~?)\}\}')
_LONG_COMMENT_END_RE = re.compile(r'--(~?)\}\}')
# Raw block tags nest; only a closing tag carries a name
_RAW_TAG_RE = re.compile(r'\{\{\{\{(?:/\s*(?P<close>[^\s}]+)\s*\}\}\}\}|(?!/))')

_TERMINATORS = ('CLOSE', 'CLOSE_SEXPR', 'OPEN_BLOCK_PARAMS')


@dataclass
class _Token:
    kind: str
    text: str
    start: int
    end: int


@dataclass
class _Frame:
    """An open block waiting for its closing tag."""

    node: object
    name: str
    body: list
    inverted: bool = False
    switched: bool = False
    chained: bool = False


class _TemplateParser:

    def __init__(self, text: str):
        self.text = text
        self.line_starts = [0] + [m.end() for m in re.finditer(r'\n', text)]
        self.root: list = []
        self.stack: List[_Frame] = []
        self.tokens: List[_Token] = []
        self.index = 0
        self.strip_next = False

    # -- locations -----------------------------------------------------------

    def _position(self, offset: int) -> Position:
        line = bisect.bisect_right(self.line_starts, offset)
        return Position(line=line, column=offset - self.line_starts[line - 1])

    def _loc(self, start: int, end: int) -> SourceLocation:
        return SourceLocation(start=self._position(start), end=self._position(end))

    def _error(self, message: str, offset: int) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, line=self._position(offset).line)

    # -- statements ------------------------------------------------------------

    @property
    def _body(self) -> list:
        return self.stack[-1].body if self.stack else self.root

    def _add_content(self, start: int, end: int, value: str) -> None:
        if self.strip_next:
            value = value.lstrip()
            self.strip_next = False
        if value or end > start:
            self._body.append(ContentStatement(
                value=value, original=self.text[start:end], loc=self._loc(start, end)))

    def _strip_previous(self) -> None:
        body = self._body
        if body and isinstance(body[-1], ContentStatement):
            body[-1].value = body[-1].value.rstrip()

    def parse(self) -> Program:
        text = self.text
        pos = 0
        content_start = 0
        pending = ''
        while True:
            idx = text.find('{{', pos)
            if idx < 0:
                self._add_content(content_start, len(text), pending + text[pos:])
                break

            backslashes = 0
            while idx - backslashes > pos and text[idx - backslashes - 1] == '\\':
                backslashes += 1
            if backslashes % 2 == 1:
                # escaped mustache, kept as content up to the next opening
                pending += text[pos:idx - 1] + '{{'
                pos = idx + 2
                continue

            value = pending + text[pos:idx - 1 if backslashes else idx]
            pending = ''
            self._add_content(content_start, idx, value)
            pos = self._parse_mustache(idx)
            content_start = pos

        if self.stack:
            frame = self.stack[-1]
            raise self._error(f"{frame.name} doesn't have a closing tag",
                              self._offset_of(frame.node))

        end = len(text)
        return Program(body=self.root, loc=self._loc(0, end))

    def _offset_of(self, node) -> int:
        start = node.loc.start
        return self.line_starts[start.line - 1] + start.column

    def _parse_comment(self, start: int, pos: int) -> int:
        text = self.text
        if text.startswith('!--', pos):
            match = _LONG_COMMENT_END_RE.search(text, pos + 3)
            value_start = pos + 3
        else:
            match = _COMMENT_END_RE.search(text, pos + 1)
            value_start = pos + 1
        if match is None:
            raise self._error('Unterminated comment', start)
        self._body.append(CommentStatement(
            value=text[value_start:match.start()], loc=self._loc(start, match.end())))
        self.strip_next = bool(match.group(1))
        return match.end()

    def _parse_raw_block(self, start: int) -> int:
        end = self._tokenize(start + 4, _TOKEN_RAW_RE)
        self.index = 0
        if self._peek().kind == 'CLOSE':
            raise self._error('Empty raw block', start)
        head, params, hash_ = self._call()
        self._expect_close()
        name = self._block_name(head, start)

        # contents stay unparsed up to the matching closing tag
        depth = 1
        for match in _RAW_TAG_RE.finditer(self.text, end):
            if match.group('close') is None:
                depth += 1
                continue
            depth -= 1
            if depth == 0:
                break
        else:
            raise self._error(f"{name} doesn't have a closing tag", start)

        if match.group('close') != name:
            raise self._error(f"{name} doesn't match {match.group('close')}", match.start())

        body = []
        if match.start() > end:
            value = self.text[end:match.start()]
            body.append(ContentStatement(value=value, original=value,
                                         loc=self._loc(end, match.start())))
        self._body.append(BlockStatement(path=head, params=params, hash=hash_,
                                         program=Program(body=body), inverse=None,
                                         loc=self._loc(start, match.end())))
        self.strip_next = False
        return match.end()

    def _parse_mustache(self, start: int) -> int:
        text = self.text
        pos = start + 2
        if text.startswith('{{', pos):
            return self._parse_raw_block(start)
        triple = text.startswith('{', pos)
        if triple:
            pos += 1
        if text.startswith('~', pos):
            self._strip_previous()
            pos += 1
        if not triple and text.startswith('!', pos):
            return self._parse_comment(start, pos)

        sigil = ''
        if not triple:
            for candidate in ('#>', '#*', '#', '/', '^', '>', '&', '*'):
                if text.startswith(candidate, pos):
                    sigil = candidate
                    pos += len(candidate)
                    break

        end = self._tokenize(pos, _TOKEN_UNESCAPED_RE if triple else _TOKEN_RE)
        close = self.tokens[-1]
        self.strip_next = close.text.startswith('~')
        self.index = 0
        loc = self._loc(start, end)

        if sigil == '/':
            self._close_block(start, loc)
        elif sigil == '^' and self._peek().kind == 'CLOSE':
            self._else(start)
        elif sigil == '' and self._peek().kind == 'ID' and self._peek().text == 'else':
            self._advance()
            if self._peek().kind == 'CLOSE':
                self._else(start)
            else:
                self._else_chain(start, loc)
        elif sigil in ('#', '^', '#>', '#*'):
            self._open_block(sigil, start, loc)
        else:
            self._statement(sigil, triple, start, loc)
        return end

    def _tokenize(self, pos: int, token_re) -> int:
        text = self.text
        self.tokens = []
        while True:
            ws = _WHITESPACE_RE.match(text, pos)
            if ws:
                pos = ws.end()
            if pos >= len(text):
                raise self._error('Unclosed mustache', pos)
            match = token_re.match(text, pos)
            if match is None:
                raise self._error(f"Unexpected character {text[pos]!r}", pos)
            token = _Token(match.lastgroup, match.group(), match.start(), match.end())
            self.tokens.append(token)
            pos = match.end()
            if token.kind == 'CLOSE':
                return pos

    # -- blocks ------------------------------------------------------------------

    def _open_block(self, sigil: str, start: int, loc: SourceLocation) -> None:
        head, params, hash_ = self._call()
        block_params = self._block_params()
        self._expect_close()

        program = Program(body=[], block_params=block_params)
        if sigil == '#>':
            node = PartialBlockStatement(name=head, params=params, hash=hash_,
                                         program=program, loc=loc)
        elif sigil == '#*':
            node = DecoratorBlock(path=head, params=params, hash=hash_,
                                  program=program, loc=loc)
        else:
            inverse = Program(body=[]) if sigil == '^' else None
            node = BlockStatement(path=head, params=params, hash=hash_,
                                  program=program, inverse=inverse, loc=loc)

        self._body.append(node)
        inverted = sigil == '^'
        body = node.inverse.body if inverted else program.body
        self.stack.append(_Frame(node=node, name=self._block_name(head, start),
                                 body=body, inverted=inverted))

    def _block_name(self, head, start: int) -> str:
        name = getattr(head, 'original', None)
        if name is None:
            # a subexpression has no name a closing tag could match
            raise self._error(f"Block name must be a path or literal, got {head.type}", start)
        return name

    def _else(self, start: int) -> None:
        self._expect_close()
        frame = self._else_frame(start)
        node = frame.node
        if frame.inverted:
            frame.body = node.program.body
        else:
            node.inverse = Program(body=[])
            frame.body = node.inverse.body
        frame.switched = True

    def _else_chain(self, start: int, loc: SourceLocation) -> None:
        head, params, hash_ = self._call()
        block_params = self._block_params()
        self._expect_close()

        frame = self._else_frame(start)
        chained = BlockStatement(path=head, params=params, hash=hash_,
                                 program=Program(body=[], block_params=block_params),
                                 inverse=None, loc=loc)
        frame.node.inverse = Program(body=[chained])
        frame.switched = True
        self.stack.append(_Frame(node=chained, name=frame.name,
                                 body=chained.program.body, chained=True))

    def _else_frame(self, start: int) -> _Frame:
        if not self.stack or not isinstance(self.stack[-1].node, BlockStatement):
            raise self._error('{{else}} outside of a block', start)
        frame = self.stack[-1]
        if frame.switched:
            raise self._error(f"Duplicate {{{{else}}}} in block {frame.name}", start)
        return frame

    def _close_block(self, start: int, loc: SourceLocation) -> None:
        path = self._path()
        self._expect_close()
        if not self.stack:
            raise self._error(f"Unexpected closing tag {path.original}", start)

        frame = self.stack.pop()
        while frame.chained:
            frame.node.loc.end = loc.end
            frame = self.stack.pop()
        if frame.name != path.original:
            raise self._error(f"{frame.name} doesn't match {path.original}", start)
        frame.node.loc.end = loc.end

    def _statement(self, sigil: str, triple: bool, start: int, loc: SourceLocation) -> None:
        if self._peek().kind == 'CLOSE':
            raise self._error('Empty mustache', start)
        head, params, hash_ = self._call()
        self._expect_close()

        if sigil == '>':
            node = PartialStatement(name=head, params=params, hash=hash_, loc=loc)
        elif sigil == '*':
            node = Decorator(path=head, params=params, hash=hash_, loc=loc)
        else:
            escaped = not (triple or sigil == '&')
            node = MustacheStatement(path=head, params=params, hash=hash_,
                                     escaped=escaped, loc=loc)
        self._body.append(node)

    # -- expressions ---------------------------------------------------------------

    def _peek(self, ahead: int = 0) -> _Token:
        index = min(self.index + ahead, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> _Token:
        token = self.tokens[self.index]
        if token.kind != 'CLOSE':
            self.index += 1
        return token

    def _expect(self, kind: str) -> _Token:
        token = self._peek()
        if token.kind != kind:
            raise self._error(f"Expecting {kind}, got {token.kind} {token.text!r}", token.start)
        return self._advance()

    def _expect_close(self) -> None:
        self._expect('CLOSE')

    def _call(self):
        head = self._expression()
        params = []
        hash_ = None
        while self._peek().kind not in _TERMINATORS:
            if self._peek().kind == 'ID' and self._peek(1).kind == 'EQUALS':
                hash_ = self._hash()
                break
            params.append(self._expression())
        return head, params, hash_

    def _hash(self) -> Hash:
        pairs = []
        first = self._peek()
        while self._peek().kind == 'ID' and self._peek(1).kind == 'EQUALS':
            key = self._advance()
            self._advance()
            value = self._expression()
            pairs.append(HashPair(key=key.text, value=value,
                                  loc=self._loc(key.start, self.tokens[self.index - 1].end)))
        return Hash(pairs=pairs, loc=self._loc(first.start, self.tokens[self.index - 1].end))

    def _block_params(self) -> List[str]:
        if self._peek().kind != 'OPEN_BLOCK_PARAMS':
            return []
        self._advance()
        names = []
        while self._peek().kind == 'ID':
            names.append(self._advance().text)
        self._expect('CLOSE_BLOCK_PARAMS')
        return names

    def _expression(self):
        token = self._peek()
        kind = token.kind
        if kind == 'OPEN_SEXPR':
            return self._sub_expression()
        if kind in ('ID', 'DATA'):
            return self._path()

        self._advance()
        loc = self._loc(token.start, token.end)
        if kind == 'STRING':
            quote = token.text[0]
            value = token.text[1:-1].replace('\\' + quote, quote)
            return StringLiteral(value=value, original=value, loc=loc)
        if kind == 'NUMBER':
            number = float(token.text) if '.' in token.text else int(token.text)
            return NumberLiteral(value=number, original=token.text, loc=loc)
        if kind == 'BOOLEAN':
            return BooleanLiteral(value=token.text == 'true', original=token.text, loc=loc)
        if kind == 'UNDEFINED':
            return UndefinedLiteral(original=token.text, loc=loc)
        if kind == 'NULL':
            return NullLiteral(original=token.text, loc=loc)
        raise self._error(f"Unexpected {kind} {token.text!r}", token.start)

    def _sub_expression(self) -> SubExpression:
        opening = self._expect('OPEN_SEXPR')
        if self._peek().kind == 'CLOSE_SEXPR':
            raise self._error('Empty subexpression', opening.start)
        head, params, hash_ = self._call()
        closing = self._expect('CLOSE_SEXPR')
        return SubExpression(path=head, params=params, hash=hash_,
                             loc=self._loc(opening.start, closing.end))

    def _path(self) -> PathExpression:
        first = self._peek()
        data = first.kind == 'DATA'
        if data:
            self._advance()
        token = self._expect('ID')

        segments = [('', token.text)]
        while self._peek().kind == 'SEP' and self._peek(1).kind == 'ID':
            separator = self._advance().text
            segments.append((separator, self._advance().text))

        original = '@' if data else ''
        parts = []
        depth = 0
        for separator, segment in segments:
            if segment.startswith('[') and segment.endswith(']'):
                segment = segment[1:-1].replace('\\]', ']')
                parts.append(segment)
            elif segment == '..':
                depth += 1
            elif segment not in ('.', 'this'):
                parts.append(segment)
            original += separator + segment

        end = self.tokens[self.index - 1].end
        return PathExpression(original=original, data=data, parts=parts, depth=depth,
                              loc=self._loc(first.start, end))


def parse(text: str) -> Program:
    """
    Parse Handlebars template source into a Program node.

    Args:
        text: Template source

    Returns:
        Root Program whose ``body`` holds the top-level statements

    Raises:
        TemplateSyntaxError: if the template is malformed
    """
    return _TemplateParser(text).parse()
