import logging

import pytest
from pydantic import ValidationError

from hbs_xgettext import Config, ConfigurationError, create_extractor
from hbs_xgettext.services.keyword_spec import DEFAULT_KEYWORD_SPEC


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep a stray .env or environment variable from leaking into Config."""
    monkeypatch.chdir(tmp_path)
    for name in ('KEYWORDS', 'INPUT_ENCODING', 'LOG_LEVEL', 'READ_WORKERS', 'PROJECT'):
        monkeypatch.delenv(f'HBS_XGETTEXT_{name}', raising=False)


def test_defaults():
    config = Config()
    assert config.KEYWORDS is None
    assert config.INPUT_ENCODING == 'utf-8'
    assert config.READ_WORKERS == 1
    assert config.LINE_WIDTH == 76
    assert config.LOG_LEVEL == 'WARNING'


def test_environment_prefix(monkeypatch):
    monkeypatch.setenv('HBS_XGETTEXT_PROJECT', 'demo')
    monkeypatch.setenv('HBS_XGETTEXT_READ_WORKERS', '4')
    monkeypatch.setenv('HBS_XGETTEXT_KEYWORDS', '{"t": ["msgid"]}')

    config = Config()
    assert config.PROJECT == 'demo'
    assert config.READ_WORKERS == 4
    assert config.KEYWORDS == {'t': ['msgid']}


def test_env_file(tmp_path):
    (tmp_path / '.env').write_text('HBS_XGETTEXT_INPUT_ENCODING=latin-1\nUNRELATED=1\n', encoding='utf-8')
    assert Config().INPUT_ENCODING == 'latin-1'


def test_log_level_is_normalized():
    assert Config(LOG_LEVEL='debug').LOG_LEVEL == 'DEBUG'


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Config(LOG_LEVEL='chatty')


def test_read_workers_must_be_positive():
    with pytest.raises(ValidationError):
        Config(READ_WORKERS=0)


def test_create_extractor_uses_config():
    extractor = create_extractor(READ_WORKERS=3, INPUT_ENCODING='latin-1', PROJECT='demo', VERSION='2.0')

    assert extractor.read_workers == 3
    assert extractor.encoding == 'latin-1'
    assert extractor.header['project'] == 'demo'
    assert set(extractor.keyword_spec) == set(DEFAULT_KEYWORD_SPEC)
    assert 'Project-Id-Version: demo 2.0' in extractor.messages_to_pot([])


def test_create_extractor_with_keywords():
    extractor = create_extractor(KEYWORDS={'t': [0]})
    assert list(extractor.keyword_spec) == ['t']


def test_create_extractor_rejects_bad_keywords():
    with pytest.raises(ConfigurationError):
        create_extractor(KEYWORDS={'t': {'msgid_plural': 0}})


def test_create_extractor_sets_up_logging():
    create_extractor(LOG_LEVEL='DEBUG')
    assert logging.getLogger('hbs_xgettext').level == logging.DEBUG

    create_extractor()
    assert logging.getLogger('hbs_xgettext').level == logging.WARNING
