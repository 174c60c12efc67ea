"""
Keyword specification handling.

A keyword specification maps template helper names to the zero-based
positions of the arguments carrying the message id, the plural form and the
context. Specifications are normalized and validated once, when a
KeywordSpec is built, and are read-only afterwards.

Accepted shapes for a single helper entry::

    {'msgid': 0, 'msgid_plural': 1}     # canonical role map
    ['msgctxt', 'msgid']                 # role names listed by position
    [0, 1]                               # positions of msgid, msgid_plural
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional, Tuple

from hbs_xgettext.errors import ConfigurationError

logger = logging.getLogger(__name__)

MSGID = 'msgid'
MSGID_PLURAL = 'msgid_plural'
MSGCTXT = 'msgctxt'

ROLES = (MSGID, MSGID_PLURAL, MSGCTXT)

# Implicit role order of the legacy positional shape
LEGACY_POSITION_ORDER = (MSGID, MSGID_PLURAL)

# Default keywords, copied from GNU xgettext's JavaScript keywords
DEFAULT_KEYWORD_SPEC: Dict[str, Dict[str, int]] = {
    '_': {MSGID: 0},
    'gettext': {MSGID: 0},
    'dgettext': {MSGID: 1},
    'dcgettext': {MSGID: 1},
    'ngettext': {MSGID: 0, MSGID_PLURAL: 1},
    'dngettext': {MSGID: 1, MSGID_PLURAL: 2},
    'pgettext': {MSGCTXT: 0, MSGID: 1},
    'dpgettext': {MSGCTXT: 1, MSGID: 2},
}


def normalize_role_map(keyword: str, positions: Any) -> Mapping:
    """
    Canonicalize and validate the role map of a single helper.

    Args:
        keyword: Helper name, used in error messages
        positions: Role map, list of role names or list of positions

    Returns:
        Read-only mapping of role name to argument position

    Raises:
        ConfigurationError: if the result has no msgid or a position is invalid
    """
    if isinstance(positions, Mapping):
        role_map = dict(positions)
    elif isinstance(positions, (list, tuple)) and MSGID in positions:
        # maintain backwards compatibility with `_: ['msgid']` format
        role_map = {role: idx for idx, role in enumerate(positions) if role is not None}
    elif isinstance(positions, (list, tuple)) and positions:
        # maintain backwards compatibility with `_: [0]` format
        if len(positions) > len(LEGACY_POSITION_ORDER):
            logger.warning(
                f"KeywordSpec: Ignoring extra positions {list(positions[2:])} for keyword '{keyword}'")
        role_map = dict(zip(LEGACY_POSITION_ORDER, positions))
    else:
        role_map = {}

    if MSGID not in role_map:
        raise ConfigurationError(
            f'Every keyword must have a msgid key, but "{keyword}" doesn\'t have one',
            keyword=keyword,
        )

    for role, position in role_map.items():
        if isinstance(position, bool) or not isinstance(position, int) or position < 0:
            raise ConfigurationError(
                f'Position of "{role}" for keyword "{keyword}" must be a non-negative integer, '
                f'got {position!r}',
                keyword=keyword,
            )

    return MappingProxyType(role_map)


class KeywordSpec(Mapping):
    """Read-only mapping of helper name to its role map."""

    def __init__(self, raw: Optional[Mapping] = None):
        if raw is None:
            raw = DEFAULT_KEYWORD_SPEC
        if not isinstance(raw, Mapping):
            raise ConfigurationError(
                f"Keyword specification must be a mapping, got {type(raw).__name__}")

        self._specs = MappingProxyType({
            str(keyword): normalize_role_map(str(keyword), positions)
            for keyword, positions in raw.items()
        })

    def __getitem__(self, keyword: str) -> Mapping:
        return self._specs[keyword]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        specs = {keyword: dict(role_map) for keyword, role_map in self._specs.items()}
        return f"KeywordSpec({specs!r})"

    def extend(self, extra: Mapping) -> 'KeywordSpec':
        """Return a new specification with ``extra`` entries added or replaced."""
        merged = {keyword: dict(role_map) for keyword, role_map in self._specs.items()}
        merged.update(extra)
        return KeywordSpec(merged)


def parse_keyword_option(option: str) -> Tuple[str, Mapping]:
    """
    Parse an xgettext style keyword option such as ``pgettext:1c,2``.

    Positions in the option are one-based; a ``c`` suffix marks the context
    argument. A bare name means the msgid is the first argument.

    Args:
        option: Keyword option string

    Returns:
        Tuple of (helper name, role map)
    """
    name, _, arguments = option.partition(':')
    name = name.strip()
    if not name:
        raise ConfigurationError(f'Invalid keyword option "{option}"', keyword=option)

    if not arguments.strip():
        return name, normalize_role_map(name, {MSGID: 0})

    role_map: Dict[str, int] = {}
    positional = []
    for token in arguments.split(','):
        token = token.strip()
        if token.endswith('c') and token[:-1].isdigit():
            role_map[MSGCTXT] = int(token[:-1]) - 1
        elif token.isdigit():
            positional.append(int(token) - 1)
        else:
            raise ConfigurationError(
                f'Invalid argument "{token}" in keyword option "{option}"', keyword=name)

    if len(positional) > len(LEGACY_POSITION_ORDER):
        raise ConfigurationError(
            f'Too many positions in keyword option "{option}"', keyword=name)

    role_map.update(zip(LEGACY_POSITION_ORDER, positional))
    return name, normalize_role_map(name, role_map)
