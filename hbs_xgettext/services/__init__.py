"""
Template message extraction services.

Keyword specification handling, the Handlebars parser, the translation call
matcher, multi-file aggregation and POT serialization.
"""

from hbs_xgettext.services.catalog import CatalogEntry, messages_to_pot
from hbs_xgettext.services.extraction_service import MessageExtractor
from hbs_xgettext.services.extractor import MessageRecord, extract_messages, message_to_key
from hbs_xgettext.services.keyword_spec import DEFAULT_KEYWORD_SPEC, KeywordSpec

__all__ = [
    'CatalogEntry',
    'messages_to_pot',
    'MessageExtractor',
    'MessageRecord',
    'extract_messages',
    'message_to_key',
    'DEFAULT_KEYWORD_SPEC',
    'KeywordSpec',
]
