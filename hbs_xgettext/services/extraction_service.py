"""
Message extraction service.

Ties the keyword specification, template parser, matcher, aggregator and
catalog writer together:

1. parse()                 - records of a single template
2. parse_to_po_messages()  - catalog entries of a single template
3. parse_files_glob()      - merged entries of all files matching a pattern
4. messages_to_pot()       - POT file contents

Usage:
    extractor = MessageExtractor()
    entries = extractor.extract_files('templates/**/*.hbs')
    pot = extractor.messages_to_pot(entries)
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from hbs_xgettext.errors import ResolutionError
from hbs_xgettext.services import aggregator
from hbs_xgettext.services.catalog import CatalogEntry, messages_to_pot
from hbs_xgettext.services.extractor import MessageRecord, extract_messages
from hbs_xgettext.services.keyword_spec import KeywordSpec
from hbs_xgettext.services.template_parser import parse

logger = logging.getLogger(__name__)


class MessageExtractor:
    """Extracts translatable strings from Handlebars templates."""

    def __init__(self, keyword_spec: Optional[Mapping] = None, encoding: str = 'utf-8',
                 read_workers: int = 1, line_width: int = 76,
                 header: Optional[Dict[str, Any]] = None):
        if isinstance(keyword_spec, KeywordSpec):
            self.keyword_spec = keyword_spec
        else:
            self.keyword_spec = KeywordSpec(keyword_spec)
        self.encoding = encoding
        self.read_workers = read_workers
        self.line_width = line_width
        self.header = header or {}

    def parse(self, template: str) -> Dict[str, MessageRecord]:
        """
        Given a Handlebars template string returns its translatable strings.

        Args:
            template: Contents of a template

        Returns:
            Dict of message key to MessageRecord with the line(s) on which
            each message appears and its optional plural form
        """
        return extract_messages(parse(template), self.keyword_spec)

    def parse_to_po_messages(self, template: str,
                             source_path: Optional[str] = None) -> List[CatalogEntry]:
        """
        Convert the messages of one template into catalog entries.

        References are attached only when ``source_path`` is given.
        """
        messages = []
        for record in self.parse(template).values():
            references = None
            if source_path is not None:
                references = [f"{source_path}:{line}" for line in record.line]
            messages.append(CatalogEntry(
                msgid=record.msgid,
                msgid_plural=record.plural,
                msgctxt=record.msgctxt,
                references=references,
            ))
        return messages

    def messages_to_pot(self, messages: List[CatalogEntry]) -> str:
        """Return the POT file contents for a list of catalog entries."""
        return messages_to_pot(messages, width=self.line_width, **self.header)

    def extract_files(self, pattern: str, **options) -> List[CatalogEntry]:
        """
        Extract and merge the messages of every file matching ``pattern``.

        Keyword options are passed on to ``glob.glob``.

        Raises:
            ResolutionError: if the pattern cannot be resolved
        """
        return self.extract_patterns([pattern], **options)

    def extract_patterns(self, patterns: List[str], **options) -> List[CatalogEntry]:
        """Extract several patterns into one merged list of entries."""
        merged: Dict[str, CatalogEntry] = {}
        for pattern in patterns:
            aggregator.extract_files(
                self, pattern, options,
                encoding=self.encoding,
                workers=self.read_workers,
                merged=merged,
            )
        return list(merged.values())

    def parse_files_glob(self, pattern: str, options: Optional[Dict[str, Any]],
                         callback: Callable[[Optional[Exception], Optional[List[CatalogEntry]]], Any]):
        """
        Callback flavour of extract_files.

        ``callback(error, entries)`` receives the ResolutionError and no
        entries when the pattern cannot be resolved, otherwise ``None`` and
        the merged entries. Read and markup errors are raised to the caller.
        """
        try:
            entries = self.extract_files(pattern, **(options or {}))
        except ResolutionError as e:
            logger.error(f"MessageExtractor: {e}")
            return callback(e, None)

        return callback(None, entries)
