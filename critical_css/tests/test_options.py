"""Tests for options, logging and helpers."""

import logging
import re

import pytest

from ..core.options import Options
from ..utils.common import is_subpath, pretty_bytes
from ..utils.error import ConfigurationError
from ..utils.logging import LeveledLogger, create_logger

class TestOptions:
    """Tests for Options."""

    def test_defaults(self):
        """Test default values."""
        options = Options()
        assert options.external
        assert options.compress
        assert options.merge_stylesheets
        assert options.keyframes_mode == 'critical'
        assert not options.should_inline_fonts
        assert not options.should_preload_fonts
        assert options.additional_stylesheets == []

    @pytest.mark.parametrize('kwargs', [
        {'keyframes': 'some'},
        {'preload': 'eager'},
        {'log_level': 'loud'},
        {'inline_threshold': -1},
        {'minimum_external_size': 1.5},
        {'filter': 'not-a-regex'},
    ])
    def test_invalid(self, kwargs):
        """Test invalid values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            Options(**kwargs)

    def test_fonts_shorthand(self):
        """Test fonts overrides the individual font options."""
        assert Options(fonts=True).should_inline_fonts
        assert Options(fonts=True).should_preload_fonts
        options = Options(fonts=False, inline_fonts=True, preload_fonts=True)
        assert not options.should_inline_fonts
        assert not options.should_preload_fonts

    def test_single_additional_stylesheet(self):
        """Test a string is accepted for additional_stylesheets."""
        assert Options(additional_stylesheets='/a.css').additional_stylesheets == ['/a.css']

    def test_is_filtered(self):
        """Test the default and custom link filters."""
        assert not Options().is_filtered('/style.css')
        assert not Options().is_filtered('/style.css?v=1')
        assert Options().is_filtered('/fonts?family=x')
        assert Options().is_filtered(None)
        options = Options(filter=re.compile(r'^/vendor/'))
        assert options.is_filtered('/vendor/a.css')
        assert not options.is_filtered('/app.css')

    def test_from_dict(self):
        """Test camelCase keys and aliases."""
        options = Options.from_dict({
            'pruneSource': True,
            'minimumNonCriticalSize': 100,
            'inlineFonts': True,
            'keyframes': 'all',
        })
        assert options.prune_source
        assert options.minimum_external_size == 100
        assert options.inline_fonts
        assert options.keyframes_mode == 'all'

    def test_from_dict_unknown(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ConfigurationError):
            Options.from_dict({'noSuchOption': 1})

class TestLeveledLogger:
    """Tests for LeveledLogger."""

    def test_levels(self, caplog):
        """Test methods below the threshold are silent."""
        logger = LeveledLogger('warn', color=False)
        with caplog.at_level(logging.DEBUG, logger='critical_css'):
            logger.info('hidden')
            logger.warn('shown')
            logger.error('also shown')
        assert 'hidden' not in caplog.text
        assert 'shown' in caplog.text
        assert 'also shown' in caplog.text

    def test_silent(self, caplog):
        """Test the silent level."""
        logger = create_logger('silent')
        with caplog.at_level(logging.DEBUG, logger='critical_css'):
            logger.error('nothing')
        assert caplog.text == ''

    def test_invalid_level(self):
        """Test unknown levels are rejected."""
        with pytest.raises(ConfigurationError):
            LeveledLogger('loud')

class TestHelpers:
    """Tests for small utility functions."""

    @pytest.mark.parametrize('size, expected', [
        (0, '0 B'),
        (999, '999 B'),
        (1000, '1 kB'),
        (1337, '1.34 kB'),
        (1500000, '1.5 MB'),
    ])
    def test_pretty_bytes(self, size, expected):
        """Test byte formatting."""
        assert pretty_bytes(size) == expected

    def test_is_subpath(self, tmp_path):
        """Test path containment checks."""
        assert is_subpath(str(tmp_path), str(tmp_path / 'a' / 'b.css'))
        assert not is_subpath(str(tmp_path / 'a'), str(tmp_path / 'b.css'))
