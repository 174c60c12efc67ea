"""
Translation call matcher.

Walks a Handlebars syntax tree and collects one MessageRecord per distinct
(msgid, msgctxt) pair found in helper invocations named by a KeywordSpec.

Usage:
    records = extract_messages(parse(template), KeywordSpec())
    records['Hello'].line  # [3, 7]
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from hbs_xgettext.errors import MarkupError
from hbs_xgettext.services.keyword_spec import MSGCTXT, MSGID, MSGID_PLURAL, KeywordSpec

# Same as what Jed.js uses
CONTEXT_DELIMITER = chr(4)

_CALL_TYPES = ('MustacheStatement', 'SubExpression')
_BLOCK_TYPES = ('BlockStatement', 'PartialBlockStatement', 'DecoratorBlock')


def message_to_key(msgid: str, msgctxt: Optional[str] = None) -> str:
    """Build the catalog key of a message; a None context is not an empty one."""
    if msgctxt is None:
        return msgid
    return f"{msgctxt}{CONTEXT_DELIMITER}{msgid}"


@dataclass
class MessageRecord:
    """Occurrences of one message within a single template."""

    msgid: str
    msgctxt: Optional[str] = None
    line: List[int] = field(default_factory=list)
    msgid_plural: Optional[str] = None
    extras: Dict[str, str] = field(default_factory=dict)

    @property
    def plural(self) -> Optional[str]:
        return self.msgid_plural


def _is_string_literal(param) -> bool:
    return param is not None and param.type == 'StringLiteral'


def _param_at(params: list, position: int):
    return params[position] if position < len(params) else None


def _match_call(records: Dict[str, MessageRecord], statement, role_map) -> None:
    params = statement.params
    msgid_param = _param_at(params, role_map[MSGID])
    msgid = getattr(msgid_param, 'original', None)
    if msgid is None:
        # {{gettext}} without arguments is not extracted, nor is a subexpression msgid
        return

    context = None

    if MSGCTXT in role_map:
        context_param = _param_at(params, role_map[MSGCTXT])
        if context_param is None:
            raise MarkupError(f'No context specified for msgid "{msgid}"', msgid=msgid)
        if not _is_string_literal(context_param):
            raise MarkupError(f'Context must be a string literal for msgid "{msgid}"', msgid=msgid)
        context = context_param.original

    key = message_to_key(msgid, context)
    record = records.get(key)
    if record is None:
        record = MessageRecord(msgid=msgid, msgctxt=context)

    if MSGID_PLURAL in role_map:
        plural_param = _param_at(params, role_map[MSGID_PLURAL])
        if plural_param is None:
            raise MarkupError(f'No plural specified for msgid "{msgid}"', msgid=msgid)
        if not _is_string_literal(plural_param):
            raise MarkupError(f'Plural must be a string literal for msgid "{msgid}"', msgid=msgid)

        plural = plural_param.original
        existing = record.msgid_plural
        if plural and existing and existing != plural:
            raise MarkupError(
                f'Incompatible plural definitions for msgid "{msgid}" '
                f'("{existing}" and "{plural}")',
                msgid=msgid,
                values=(existing, plural),
            )

    records[key] = record
    record.line.append(statement.loc.start.line)

    for role, position in role_map.items():
        param = _param_at(params, position)
        if not _is_string_literal(param):
            continue
        if role == MSGID_PLURAL:
            if param.original or record.msgid_plural is None:
                record.msgid_plural = param.original
        elif role not in (MSGID, MSGCTXT):
            record.extras[role] = param.original


def _walk(statement):
    """Yield ``statement`` and every node below it, depth first, in source order."""
    yield statement

    if statement.type in _BLOCK_TYPES:
        for branch in (getattr(statement, 'program', None), getattr(statement, 'inverse', None)):
            if branch is not None:
                for child in branch.body:
                    yield from _walk(child)

    # subexpressions as params
    for param in getattr(statement, 'params', None) or ():
        yield from _walk(param)

    # subexpressions as hash values
    hash_ = getattr(statement, 'hash', None)
    if hash_ is not None:
        for pair in hash_.pairs:
            yield from _walk(pair.value)


def iter_calls(tree, names: Iterable[str]) -> Iterator:
    """Yield the helper invocations of ``tree`` whose name is in ``names``."""
    names = set(names)
    for statement in tree.body:
        for node in _walk(statement):
            if node.type in _CALL_TYPES and getattr(node.path, 'original', None) in names:
                yield node


def extract_messages(tree, keyword_spec: KeywordSpec) -> Dict[str, MessageRecord]:
    """
    Collect translatable messages from a parsed template.

    Args:
        tree: Program node returned by the template parser
        keyword_spec: Normalized keyword specification

    Returns:
        Dict of message key to MessageRecord, in order of first appearance

    Raises:
        MarkupError: on the first malformed translation call
    """
    records: Dict[str, MessageRecord] = {}
    for call in iter_calls(tree, keyword_spec):
        _match_call(records, call, keyword_spec[call.path.original])
    return records
