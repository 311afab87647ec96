"""HTML file handling functionality."""

import os
import logging

import chardet

from .common import ensure_directory
from .error import FileOperationError

def detect_encoding(file_path: str) -> str:
    """Detect file encoding.

    Args:
        file_path: Path to file

    Returns:
        Detected encoding
    """
    try:
        # Read file in binary mode
        with open(file_path, 'rb') as f:
            raw_data = f.read()

        # Detect encoding
        result = chardet.detect(raw_data)
        encoding = result['encoding']

        # Fallback to utf-8 if detection fails
        if not encoding:
            encoding = 'utf-8'

        return encoding

    except OSError as e:
        logging.error(f"Error detecting encoding: {e}")
        return 'utf-8'

def read_html_file(file_path: str) -> str:
    """Get HTML content from a file.

    Args:
        file_path: Path to HTML file

    Returns:
        HTML content as string

    Raises:
        FileOperationError: If the file is missing or cannot be decoded
    """
    if not os.path.exists(file_path):
        raise FileOperationError(f"File not found: {file_path}")

    encoding = detect_encoding(file_path)
    try:
        with open(file_path, 'r', encoding=encoding) as f:
            return f.read()
    except (OSError, UnicodeDecodeError, LookupError) as e:
        raise FileOperationError(f"Failed to read file {file_path}: {e}")

def write_text_file(file_path: str, content: str, encoding: str = 'utf-8') -> None:
    """Write text to a file, creating parent directories.

    Raises:
        FileOperationError: If the write fails
    """
    ensure_directory(os.path.dirname(file_path))
    try:
        with open(file_path, 'w', encoding=encoding) as f:
            f.write(content)
    except OSError as e:
        raise FileOperationError(f"Failed to write file {file_path}: {e}")

def write_html_file(file_path: str, content: str, encoding: str = 'utf-8') -> None:
    """Write processed HTML to a file."""
    write_text_file(file_path, content, encoding)

# Exported functions
__all__ = ['detect_encoding', 'read_html_file', 'write_text_file', 'write_html_file']
