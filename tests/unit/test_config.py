"""
Tests for settings, component configs built from settings, and logging setup.
"""

import logging

from config.constants import MAX_BLANK_LINES
from config.logging_config import get_logger
from config.settings import Settings, settings
from core.epub.xhtml_transpiler import TranspilerConfig
from core.latex.sanitizer import SanitizerConfig


class TestSettings:
    """pydantic-settings defaults and environment overrides"""

    def test_defaults(self, monkeypatch):
        for name in ('MAX_BLANK_LINES', 'REMOVE_AI_PHRASES', 'DEFAULT_LANGUAGE', 'CALLOUT_ICONS'):
            monkeypatch.delenv(f'BOOKFORGE_{name}', raising=False)
        fresh = Settings(_env_file=None)

        assert fresh.max_blank_lines == MAX_BLANK_LINES
        assert fresh.remove_ai_phrases is False
        assert fresh.default_language == 'en'
        assert fresh.callout_icons is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv('BOOKFORGE_MAX_BLANK_LINES', '1')
        monkeypatch.setenv('BOOKFORGE_REMOVE_AI_PHRASES', 'true')
        fresh = Settings(_env_file=None)

        assert fresh.max_blank_lines == 1
        assert fresh.remove_ai_phrases is True

    def test_describe(self):
        summary = settings.describe()
        assert 'max_blank_lines' in summary
        assert 'default_language' in summary


class TestConfigFromSettings:
    """Component configs follow the global settings"""

    def test_sanitizer_config(self, monkeypatch):
        monkeypatch.setattr(settings, 'remove_ai_phrases', True)
        monkeypatch.setattr(settings, 'max_blank_lines', 3)
        config = SanitizerConfig.from_settings(language='pl')

        assert config.remove_ai_phrases is True
        assert config.max_blank_lines == 3
        assert config.language == 'pl'

    def test_sanitizer_language_default(self, monkeypatch):
        monkeypatch.setattr(settings, 'default_language', 'de')
        assert SanitizerConfig.from_settings().language == 'de'

    def test_transpiler_config(self, monkeypatch):
        monkeypatch.setattr(settings, 'callout_icons', False)
        config = TranspilerConfig.from_settings()

        assert config.callout_icons is False
        assert config.footnote_backlink == settings.footnote_backlink


class TestLogging:
    """Logger setup"""

    def test_handlers_not_duplicated(self):
        first = get_logger('tests.config.logger')
        handler_count = len(first.handlers)
        second = get_logger('tests.config.logger')

        assert first is second
        assert handler_count >= 1
        assert len(second.handlers) == handler_count

    def test_default_name(self):
        assert get_logger().name == 'bookforge'

    def test_level_from_settings(self):
        logger = get_logger('tests.config.level')
        assert logger.level == getattr(logging, settings.log_level.upper(), logging.INFO)
