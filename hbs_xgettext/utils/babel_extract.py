"""Babel extraction method for Handlebars templates.

Registered under the ``babel.extractors`` entry point group, so a Babel
mapping file can select it::

    [handlebars: **/templates/**.hbs]
    encoding = utf-8

Babel hands the extractor the keyword names only and applies its own keyword
specs to the yielded argument tuples, as it does for Python and JavaScript
sources. Arguments that are not string literals are yielded as ``None``.
"""

from typing import Iterable, Iterator, List, Tuple

from hbs_xgettext.services.extractor import iter_calls
from hbs_xgettext.services.template_parser import parse


def _messages_tuple(call) -> Tuple:
    return tuple(param.original if param.type == 'StringLiteral' else None
                 for param in call.params)


def extract(fileobj, keywords: Iterable[str], comment_tags, options) -> Iterator[Tuple[int, str, Tuple, List[str]]]:
    """Extract messages from a Handlebars template.

    :param fileobj: binary file-like object of the template
    :param keywords: names of the translation helpers
    :param comment_tags: translator comment tags (unused, templates carry none)
    :param options: mapping options, ``encoding`` defaults to utf-8
    :return: iterator of ``(lineno, funcname, messages, comments)`` tuples
    """
    encoding = options.get('encoding', 'utf-8')
    tree = parse(fileobj.read().decode(encoding))

    results = []
    for call in iter_calls(tree, keywords):
        messages = _messages_tuple(call)
        if messages:
            results.append((call.loc.start.line, call.path.original, messages, []))

    results.sort(key=lambda result: result[0])
    return iter(results)
