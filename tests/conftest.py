import logging

import pytest

from hbs_xgettext.services import MessageExtractor


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by create_extractor() after each test."""
    yield
    package_logger = logging.getLogger('hbs_xgettext')
    package_logger.handlers = []
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def extractor():
    """An extractor using the default keyword specification."""
    return MessageExtractor()


@pytest.fixture
def template_dir(tmp_path):
    """A directory with a few templates sharing some messages.

    Layout:
        a.hbs            "X" on line 1, "Hello" on line 2
        b.hbs            "X" on line 5
        partials/c.hbs   plural "One item" / "Many items" on line 1
    """
    (tmp_path / 'a.hbs').write_text(
        '{{gettext "X"}}\n<p>{{_ "Hello"}}</p>\n', encoding='utf-8')
    (tmp_path / 'b.hbs').write_text(
        '\n\n\n\n{{gettext "X"}}\n', encoding='utf-8')
    (tmp_path / 'partials').mkdir()
    (tmp_path / 'partials' / 'c.hbs').write_text(
        '{{ngettext "One item" "Many items" count}}\n', encoding='utf-8')
    return tmp_path
