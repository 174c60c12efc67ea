import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    # Keyword specification (JSON in the environment); None uses the built-in one
    KEYWORDS: Optional[dict] = None

    # Template files
    INPUT_ENCODING: str = 'utf-8'
    READ_WORKERS: int = 1  # threads used to read template files

    # Catalog header
    PROJECT: str = 'PROJECT'
    VERSION: str = 'VERSION'
    COPYRIGHT_HOLDER: Optional[str] = None
    MSGID_BUGS_ADDRESS: Optional[str] = None
    LINE_WIDTH: int = 76

    # Logging
    LOG_LEVEL: str = 'WARNING'

    @field_validator('LOG_LEVEL', mode='before')
    def _parse_log_level(cls, v):
        """Accept any case, reject names the logging module doesn't know."""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('READ_WORKERS')
    def _check_read_workers(cls, v):
        if v < 1:
            raise ValueError('READ_WORKERS must be at least 1')
        return v

    class Config:
        env_prefix = 'HBS_XGETTEXT_'
        env_file = '.env'
        env_file_encoding = 'utf-8'
        case_sensitive = False
        extra = 'ignore'  # Ignore extra fields from .env
