"""Pytest configuration for Critical CSS tests."""

import logging

import pytest

from ..managers.loader import StylesheetLoader
from ..utils.error import FileOperationError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

class RecordingLogger:
    """Leveled logger collecting messages instead of printing them."""

    def __init__(self):
        self.messages = {level: [] for level in ('trace', 'debug', 'info', 'warn', 'error')}

    def trace(self, message):
        self.messages['trace'].append(message)

    def debug(self, message):
        self.messages['debug'].append(message)

    def info(self, message):
        self.messages['info'].append(message)

    def warn(self, message):
        self.messages['warn'].append(message)

    def error(self, message):
        self.messages['error'].append(message)

class MemoryLoader(StylesheetLoader):
    """Loader serving stylesheets from a dict keyed by absolute path."""

    def __init__(self, assets, base_path='/', public_path=''):
        super().__init__(base_path, public_path)
        self.assets = dict(assets)
        self.requested = []

    async def read_file(self, filename):
        self.requested.append(filename)
        if filename not in self.assets:
            raise FileOperationError(f"Failed to read file {filename}: not found")
        return self.assets[filename]

@pytest.fixture
def recording_logger():
    """Return a logger that records messages per level."""
    return RecordingLogger()

@pytest.fixture
def memory_loader():
    """Return a factory for in-memory stylesheet loaders."""
    def factory(assets, **kwargs):
        return MemoryLoader(assets, **kwargs)
    return factory

@pytest.fixture(scope='session')
def basic_css():
    """Return the stylesheet of the basic reduction example."""
    return (
        "h1 { color: blue; }\n"
        "h2.unused { color: red; }\n"
        "p { color: purple; }\n"
        "p.unused { color: orange; }\n"
    )

@pytest.fixture(scope='session')
def basic_html():
    """Return a page using only h1 and p."""
    return "<html><head></head><body><h1>Hello</h1><p>World</p></body></html>"

@pytest.fixture(scope='session')
def sample_css():
    """Return sample CSS content for testing."""
    return """
    body {
        color: #333;
        font-family: Arial, sans-serif;
        margin: 0;
    }

    .container {
        max-width: 1200px;
        margin: 0 auto;
    }

    .header, .footer {
        background-color: #f5f5f5;
        padding: 10px;
    }

    .sidebar {
        flex: 0 0 300px;
    }

    @media (max-width: 768px) {
        .content {
            flex-direction: column;
        }

        .sidebar {
            flex: none;
            width: 100%;
        }
    }
    """

@pytest.fixture(scope='session')
def sample_html():
    """Return sample HTML content for testing."""
    return """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Test Page</title>
</head>
<body>
    <div class="container">
        <header class="header">
            <h1>Test Page</h1>
        </header>
        <main class="content">
            <p>This is a regular paragraph.</p>
        </main>
    </div>
</body>
</html>
"""
