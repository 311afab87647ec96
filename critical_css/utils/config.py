"""Configuration utility for Critical CSS."""

# Project version
VERSION = "1.0.0"

# Element attribute marking the part of the page evaluated for critical CSS
CONTAINER_ATTRIBUTE = 'data-critical-container'

# Keyframes strategies
KEYFRAMES_CRITICAL = 'critical'
KEYFRAMES_ALL = 'all'
KEYFRAMES_NONE = 'none'
KEYFRAMES_MODES = (KEYFRAMES_CRITICAL, KEYFRAMES_ALL, KEYFRAMES_NONE)
DEFAULT_KEYFRAMES = KEYFRAMES_CRITICAL

# Preload strategies for external stylesheets (None selects the default)
PRELOAD_MODES = ('body', 'media', 'swap', 'swap-high', 'js', 'js-lazy')
JS_PRELOAD_MODES = ('js', 'js-lazy')

# Stylesheet loader injected by the js/js-lazy preload strategies
CSS_LOADER_PREAMBLE = (
    "function $loadcss(u,m,l){(l=document.createElement('link')).rel='stylesheet';"
    "l.href=u;document.head.appendChild(l)}"
)
CSS_LOADER_LAZY = "l.media='print';l.onload=function(){l.media=m};l.href"

# Logging
LOG_LEVELS = ('trace', 'debug', 'info', 'warn', 'error', 'silent')
LOG_LEVEL = 'info'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Supported file extensions
HTML_EXTENSIONS = ['.html', '.htm', '.xhtml']

# Other settings
ENABLE_COLOR = True
ENABLE_PROGRESS = True

# Exported config
__all__ = [
    'VERSION', 'CONTAINER_ATTRIBUTE',
    'KEYFRAMES_CRITICAL', 'KEYFRAMES_ALL', 'KEYFRAMES_NONE', 'KEYFRAMES_MODES',
    'DEFAULT_KEYFRAMES',
    'PRELOAD_MODES', 'JS_PRELOAD_MODES', 'CSS_LOADER_PREAMBLE', 'CSS_LOADER_LAZY',
    'LOG_LEVELS', 'LOG_LEVEL', 'LOG_FORMAT', 'LOG_DATE_FORMAT',
    'HTML_EXTENSIONS',
    'ENABLE_COLOR', 'ENABLE_PROGRESS',
]
