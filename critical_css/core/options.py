"""Options for critical CSS processing."""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Pattern, Union
from urllib.parse import urlsplit

from ..utils.config import (
    DEFAULT_KEYFRAMES, KEYFRAMES_ALL, KEYFRAMES_MODES, KEYFRAMES_NONE,
    LOG_LEVEL, LOG_LEVELS, PRELOAD_MODES,
)
from ..utils.error import ConfigurationError

# Alternative spellings accepted by Options.from_dict
KEY_ALIASES = {
    'minimum_non_critical_size': 'minimum_external_size',
}

CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


@dataclass
class Options:
    """Processing options.

    Attributes:
        path: Base directory that stylesheet hrefs are resolved against
        public_path: URL prefix stripped from hrefs before resolving
        external: Embed and reduce ``<link rel="stylesheet">`` sheets
        inline_threshold: Inline a whole sheet when it is smaller than this
        minimum_external_size: Inline everything when the non-critical part is
            smaller than this (requires ``prune_source``)
        prune_source: Compute the non-critical remainder of each sheet
        merge_stylesheets: Merge all reduced ``<style>`` elements into one
        additional_stylesheets: Extra sheets embedded into every document
        preload: Strategy for loading the full external sheet
        noscript_fallback: Add ``<noscript>`` links for script based strategies
        inline_fonts: Keep ``@font-face`` rules whose family is used
        preload_fonts: Add preload links for fonts of ``@font-face`` rules
        fonts: Shorthand turning both font options on or off
        keyframes: ``critical``, ``all`` or ``none`` (``True``/``False`` mean
            ``all``/``none``)
        compress: Emit compact CSS
        minify: Run the merged sheet through csscompressor
        log_level: Threshold of the default logger
        reduce_inline_styles: Also reduce ``<style>`` elements already in the page
        filter: Regex or callable; matching hrefs are not embedded
        logger: Object with trace/debug/info/warn/error methods
    """

    path: str = ''
    public_path: str = ''
    external: bool = True
    inline_threshold: int = 0
    minimum_external_size: int = 0
    prune_source: bool = False
    merge_stylesheets: bool = True
    additional_stylesheets: List[str] = field(default_factory=list)
    preload: Union[str, bool, None] = None
    noscript_fallback: bool = True
    inline_fonts: bool = False
    preload_fonts: bool = False
    fonts: Optional[bool] = None
    keyframes: Union[str, bool] = DEFAULT_KEYFRAMES
    compress: bool = True
    minify: bool = False
    log_level: str = LOG_LEVEL
    reduce_inline_styles: bool = True
    filter: Union[Pattern, Callable[[str], bool], None] = None
    logger: Optional[Any] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check option values.

        Raises:
            ConfigurationError: If a value is out of range or of the wrong kind
        """
        if not isinstance(self.keyframes, bool) and self.keyframes not in KEYFRAMES_MODES:
            raise ConfigurationError(
                f"Invalid keyframes option: {self.keyframes!r} "
                f"(expected one of {', '.join(KEYFRAMES_MODES)})"
            )
        if self.preload not in (None, False) and self.preload not in PRELOAD_MODES:
            raise ConfigurationError(
                f"Invalid preload option: {self.preload!r} "
                f"(expected one of {', '.join(PRELOAD_MODES)})"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.log_level!r}")
        for name in ('inline_threshold', 'minimum_external_size'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")
        if isinstance(self.additional_stylesheets, str):
            self.additional_stylesheets = [self.additional_stylesheets]
        if self.filter is not None and not (callable(self.filter) or hasattr(self.filter, 'search')):
            raise ConfigurationError("filter must be a compiled regex or a callable")

    @property
    def keyframes_mode(self) -> str:
        if self.keyframes is True:
            return KEYFRAMES_ALL
        if self.keyframes is False:
            return KEYFRAMES_NONE
        return self.keyframes

    @property
    def should_preload_fonts(self) -> bool:
        if self.fonts is not None:
            return self.fonts
        return self.preload_fonts

    @property
    def should_inline_fonts(self) -> bool:
        if self.fonts is not None:
            return self.fonts
        return self.inline_fonts

    def is_filtered(self, href: Optional[str]) -> bool:
        """True when a linked stylesheet should be left alone."""
        if self.filter is not None:
            if hasattr(self.filter, 'search'):
                return bool(self.filter.search(href or ''))
            return bool(self.filter(href or ''))
        return not urlsplit(href or '').path.endswith('.css')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Options':
        """Build options from a mapping with snake_case or camelCase keys.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = CAMEL_BOUNDARY.sub('_', key).lower()
            name = KEY_ALIASES.get(name, name)
            if name not in known:
                raise ConfigurationError(f"Unknown option: {key}")
            kwargs[name] = value
        return cls(**kwargs)


__all__ = ['Options']
