from hbs_xgettext.config import Config
from hbs_xgettext.errors import (
    ConfigurationError,
    ExtractionError,
    MarkupError,
    ResolutionError,
    TemplateSyntaxError,
)
from hbs_xgettext.services import CatalogEntry, KeywordSpec, MessageExtractor
from hbs_xgettext.utils.logging_config import setup_logging

__version__ = '0.4.0'


def create_extractor(config_class=Config, **overrides):
    """Build a MessageExtractor from configuration.

    Keyword overrides replace config values, e.g. ``KEYWORDS={...}``.
    """
    config = config_class(**overrides)
    setup_logging(config.LOG_LEVEL)

    return MessageExtractor(
        keyword_spec=config.KEYWORDS,
        encoding=config.INPUT_ENCODING,
        read_workers=config.READ_WORKERS,
        line_width=config.LINE_WIDTH,
        header={
            'project': config.PROJECT,
            'version': config.VERSION,
            'copyright_holder': config.COPYRIGHT_HOLDER,
            'msgid_bugs_address': config.MSGID_BUGS_ADDRESS,
        },
    )


__all__ = [
    'Config',
    'ConfigurationError',
    'ExtractionError',
    'MarkupError',
    'ResolutionError',
    'TemplateSyntaxError',
    'CatalogEntry',
    'KeywordSpec',
    'MessageExtractor',
    'create_extractor',
    'setup_logging',
]
