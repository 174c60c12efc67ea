import io

import pytest
from babel.messages.extract import extract as babel_extract

from hbs_xgettext.errors import TemplateSyntaxError
from hbs_xgettext.utils.babel_extract import extract

TEMPLATE = (
    '{{gettext "Hello"}}\n'
    '{{ngettext "One item" "Many items" count}}\n'
    '{{pgettext "menu" "Open"}}\n'
    '{{dgettext "admin" "Users"}}\n'
    '{{gettext "Hello"}}\n'
)


def _babel_messages(template, keywords=None, options=None, encoding='utf-8'):
    fileobj = io.BytesIO(template.encode(encoding))
    kwargs = {'options': options}
    if keywords is not None:
        kwargs['keywords'] = keywords
    return [(lineno, message, context)
            for lineno, message, _comments, context in babel_extract(extract, fileobj, **kwargs)]


def test_default_keywords():
    assert _babel_messages(TEMPLATE) == [
        (1, 'Hello', None),
        (2, ('One item', 'Many items'), None),
        (3, 'Open', 'menu'),
        (4, 'Users', None),
        (5, 'Hello', None),
    ]


def test_receives_keyword_names_only():
    """Babel passes the keyword names; argument tuples are matched by Babel."""
    fileobj = io.BytesIO(b'{{pgettext "menu" "Open"}}\n{{ngettext "One" count}}\n')
    results = list(extract(fileobj, {'pgettext': None, 'ngettext': None}.keys(), [], {}))

    assert results == [
        (1, 'pgettext', ('menu', 'Open'), []),
        (2, 'ngettext', ('One', None), []),
    ]


def test_custom_keywords():
    messages = _babel_messages('{{t "Save"}}{{gettext "Ignored"}}', keywords={'t': None})
    assert messages == [(1, 'Save', None)]


def test_nested_calls():
    messages = _babel_messages('{{input placeholder=(gettext "Search")}}\n{{#if a}}{{_ "In block"}}{{/if}}')
    assert messages == [(1, 'Search', None), (2, 'In block', None)]


def test_non_literal_arguments_are_left_to_babel():
    # a path msgid or context is not a literal, Babel skips or drops it
    messages = _babel_messages('{{gettext title}}\n{{pgettext ctx "Open"}}\n')
    assert messages == [(2, 'Open', None)]


def test_raw_block_contents_are_not_extracted():
    messages = _babel_messages('{{{{raw}}}}{{gettext "x"}}{{{{/raw}}}}{{gettext "After raw"}}')
    assert messages == [(1, 'After raw', None)]


def test_encoding_option():
    messages = _babel_messages('{{_ "caf\xe9"}}', options={'encoding': 'latin-1'}, encoding='latin-1')
    assert messages == [(1, 'caf\xe9', None)]


def test_syntax_errors_propagate():
    with pytest.raises(TemplateSyntaxError):
        _babel_messages('{{#if a}}never closed')
